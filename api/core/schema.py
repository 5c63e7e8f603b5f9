"""
Table bootstrap.

The four tables are created on startup if they do not exist yet. There is
no migration tool; changing a table means changing it by hand.
"""

from __future__ import annotations

import logging

from . import db

logger = logging.getLogger(__name__)

SCHEMA_STATEMENTS: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS directors (
        id SERIAL PRIMARY KEY,
        firstname TEXT,
        lastname TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS movies (
        id SERIAL PRIMARY KEY,
        mid TEXT,
        title TEXT,
        director_id INTEGER REFERENCES directors(id),
        cover TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS categories (
        id SERIAL PRIMARY KEY,
        name TEXT UNIQUE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS movie_categories (
        movie_id INTEGER REFERENCES movies(id),
        category_id INTEGER REFERENCES categories(id),
        PRIMARY KEY (movie_id, category_id)
    )
    """,
)


async def ensure_schema(executor: db.Executor) -> None:
    logger.info("schema_init tables=%s", len(SCHEMA_STATEMENTS))
    for statement in SCHEMA_STATEMENTS:
        await db.execute(executor, statement)
    logger.info("schema_ready")
