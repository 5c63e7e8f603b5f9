"""
Runtime configuration read from the environment.

A `.env` file next to the working directory is loaded once on import
(python-dotenv); real environment variables win over the file.
"""

from __future__ import annotations

import os
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from dotenv import load_dotenv

load_dotenv()

DEFAULT_PORT = 8000
DEFAULT_DB_PORT = 5432
DEFAULT_CORS_ORIGIN = "http://localhost:8080"


def _env_str(name: str, default: str = "") -> str:
    return os.environ.get(name, default).strip() or default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _sanitize_database_url(url: str) -> str:
    # asyncpg rejects some libpq-only options such as sslmode=disable.
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def database_url() -> str:
    return _sanitize_database_url(_env_str("DATABASE_URL"))


def connect_kwargs() -> dict[str, Any]:
    """
    Connection arguments for `asyncpg.create_pool`.

    DATABASE_URL takes precedence. Otherwise the discrete DB_HOST, DB_PORT,
    DB_USER, DB_PASSWORD and DB_NAME variables are used.
    """
    url = database_url()
    if url:
        return {"dsn": url}

    kwargs: dict[str, Any] = {
        "host": _env_str("DB_HOST", "localhost"),
        "port": _env_int("DB_PORT", DEFAULT_DB_PORT),
    }
    user = _env_str("DB_USER")
    password = os.environ.get("DB_PASSWORD", "")
    database = _env_str("DB_NAME")
    if user:
        kwargs["user"] = user
    if password:
        kwargs["password"] = password
    if database:
        kwargs["database"] = database
    return kwargs


def pool_min_size() -> int:
    return max(_env_int("DB_POOL_MIN_SIZE", 1), 0)


def pool_max_size() -> int:
    return max(_env_int("DB_POOL_MAX_SIZE", 10), 1)


def command_timeout_s() -> float:
    return _env_float("DB_COMMAND_TIMEOUT_S", 30.0)


def host() -> str:
    return _env_str("HOST", "0.0.0.0")


def port() -> int:
    return _env_int("PORT", DEFAULT_PORT)


def cors_origins() -> list[str]:
    return [_env_str("CORS_ORIGIN", DEFAULT_CORS_ORIGIN)]


def log_level() -> str:
    return _env_str("LOG_LEVEL", "INFO").upper()
