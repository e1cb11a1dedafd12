"""
Configuration management.

The ``Settings`` dataclass reads configuration from environment
variables.  A ``.env`` file in the project root is loaded first so that
local development does not require exporting variables by hand.
Defaults are provided for every field; in production the signing
secret must be overridden.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent.parent.parent / ".env"
load_dotenv(dotenv_path=env_path)


def _split_origins(raw: str) -> List[str]:
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "HomeHero API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")

    # Secret used to sign bearer tokens.  ``ACCESS_TOKEN_SECRET`` is the
    # name the web client deployment uses; ``SECRET_KEY`` is accepted too.
    secret_key: str = os.getenv("ACCESS_TOKEN_SECRET", os.getenv("SECRET_KEY", "change_me"))
    algorithm: str = os.getenv("ALGORITHM", "HS256")
    access_token_expire_days: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_DAYS", "7"))

    # Path to the SQLite database file.  Relative paths are resolved
    # against the project root by the ``db`` module.
    database_url: str = os.getenv("DATABASE_URL", "homehero.db")

    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "5000"))

    cors_origins: List[str] = field(
        default_factory=lambda: _split_origins(
            os.getenv(
                "CORS_ORIGINS",
                "http://localhost:5173,http://localhost:5174,"
                "https://homehero-bd.web.app,https://homehero-bd.firebaseapp.com",
            )
        )
    )


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables
# should be set before importing this module.
settings = Settings()
