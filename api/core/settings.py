"""
Environment-driven settings.

- DATABASE_DSN (or DATABASE_URL): PostgreSQL connection string, required
- PORT: listen port (default: 8080)
- HOST: listen address (default: 0.0.0.0)
- LOG_LEVEL: root log level (default: INFO)

A `.env` file in the working directory is loaded first when present.
"""

from __future__ import annotations

import logging
import os
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from dotenv import find_dotenv, load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_PORT = 8080
DEFAULT_HOST = "0.0.0.0"
DEFAULT_LOG_LEVEL = "INFO"


class SettingsError(RuntimeError):
    pass


def load_env() -> None:
    path = find_dotenv(usecwd=True)
    if not path:
        logger.info("No .env file found or error loading .env file")
        return
    # Existing environment variables win over the file.
    load_dotenv(path)


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def database_url() -> str:
    url = os.environ.get("DATABASE_DSN", "").strip() or os.environ.get("DATABASE_URL", "").strip()
    if not url:
        raise SettingsError("DATABASE_DSN environment variable not set")
    return _sanitize_database_url(url)


def port() -> int:
    raw = os.environ.get("PORT", "").strip()
    if not raw:
        logger.info("PORT not set, using default :%s", DEFAULT_PORT)
        return DEFAULT_PORT
    try:
        value = int(raw)
    except ValueError as exc:
        raise SettingsError(f"PORT must be an integer, got {raw!r}") from exc
    if not 1 <= value <= 65535:
        raise SettingsError(f"PORT must be between 1 and 65535, got {value}")
    return value


def host() -> str:
    return os.environ.get("HOST", DEFAULT_HOST).strip() or DEFAULT_HOST


def log_level() -> str:
    return os.environ.get("LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper() or DEFAULT_LOG_LEVEL
