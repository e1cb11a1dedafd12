"""Configuration, logging, errors, security and the store client."""
