from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - PERSISTENCE_BACKEND: 'memory' (default) or 'mongo'
    - MONGODB_URI: MongoDB connection string. Default 'mongodb://localhost:27017'
    - MONGODB_DATABASE: database holding the todos collection. Default 'todos'
    - MONGODB_COLLECTION: collection name. Default 'todos'
    - MONGODB_TIMEOUT_MS: server selection timeout in milliseconds. Default 5000
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - LOG_LEVEL: logging level name. Default 'INFO'
    """

    persistence_backend: str = "memory"
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_database: str = "todos"
    mongodb_collection: str = "todos"
    mongodb_timeout_ms: int = 5000
    cors_allow_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_int(value: str, default: int) -> int:
    try:
        parsed = int(value.strip())
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


def _parse_log_level(value: str) -> str:
    level = value.strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        return "INFO"
    return level


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    backend = _get_env("PERSISTENCE_BACKEND", "memory").strip().lower()
    if backend not in {"memory", "mongo"}:
        # Fallback to memory if unsupported
        backend = "memory"

    return Settings(
        persistence_backend=backend,
        mongodb_uri=_get_env("MONGODB_URI", "mongodb://localhost:27017").strip(),
        mongodb_database=_get_env("MONGODB_DATABASE", "todos").strip(),
        mongodb_collection=_get_env("MONGODB_COLLECTION", "todos").strip(),
        mongodb_timeout_ms=_parse_int(_get_env("MONGODB_TIMEOUT_MS", "5000"), 5000),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        log_level=_parse_log_level(_get_env("LOG_LEVEL", "INFO")),
    )
