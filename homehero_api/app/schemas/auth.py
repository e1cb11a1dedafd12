"""Pydantic models for token issuance."""

from pydantic import BaseModel


class TokenResponse(BaseModel):
    token: str
