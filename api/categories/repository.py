"""
Category persistence (raw SQL).

Covers the `categories` table and the `movie_categories` join table.
Every function takes the executor explicitly: a pool for standalone
statements, a connection when running inside a movie write transaction.
"""

from __future__ import annotations

from core import db


async def get_category_id_by_name(executor: db.Executor, name: str) -> int | None:
    row = await db.fetch_one(
        executor,
        """
        SELECT id
        FROM categories
        WHERE name = $1
        """,
        name,
    )
    return int(row["id"]) if row is not None else None


async def insert_category(executor: db.Executor, name: str) -> dict:
    row = await db.fetch_one(
        executor,
        """
        INSERT INTO categories (name)
        VALUES ($1)
        RETURNING id, name
        """,
        name,
    )
    if row is None:
        raise RuntimeError("Failed to insert category.")
    return row


async def update_category(executor: db.Executor, category_id: int, *, name: str) -> dict | None:
    return await db.fetch_one(
        executor,
        """
        UPDATE categories
        SET name = $2
        WHERE id = $1
        RETURNING id, name
        """,
        category_id,
        name,
    )


async def delete_category(executor: db.Executor, category_id: int) -> None:
    # No cascade: a category still linked to a movie is refused by the FK.
    await db.execute(
        executor,
        """
        DELETE FROM categories
        WHERE id = $1
        """,
        category_id,
    )


async def list_categories_in_use(executor: db.Executor) -> list[dict]:
    return await db.fetch_all(
        executor,
        """
        SELECT DISTINCT c.id, c.name
        FROM categories c
        JOIN movie_categories mc ON mc.category_id = c.id
        ORDER BY c.name, c.id
        """,
    )


async def list_movie_categories(executor: db.Executor, movie_id: int) -> list[dict]:
    return await db.fetch_all(
        executor,
        """
        SELECT c.id, c.name
        FROM categories c
        JOIN movie_categories mc ON mc.category_id = c.id
        WHERE mc.movie_id = $1
        ORDER BY c.name, c.id
        """,
        movie_id,
    )


async def link_movie_category(executor: db.Executor, *, movie_id: int, category_id: int) -> None:
    await db.execute(
        executor,
        """
        INSERT INTO movie_categories (movie_id, category_id)
        VALUES ($1, $2)
        ON CONFLICT (movie_id, category_id) DO NOTHING
        """,
        movie_id,
        category_id,
    )


async def unlink_movie(executor: db.Executor, movie_id: int) -> None:
    await db.execute(
        executor,
        """
        DELETE FROM movie_categories
        WHERE movie_id = $1
        """,
        movie_id,
    )


async def delete_orphaned_categories(executor: db.Executor) -> int:
    """
    Delete categories that no movie references. Returns the number removed.
    """
    rows = await db.fetch_all(
        executor,
        """
        DELETE FROM categories c
        WHERE NOT EXISTS (
            SELECT 1
            FROM movie_categories mc
            WHERE mc.category_id = c.id
        )
        RETURNING c.id
        """,
    )
    return len(rows)
