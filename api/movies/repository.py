"""
Movie persistence (raw SQL).

Covers the `movies` and `directors` tables. Movie reads join the director
and return flat rows:

    id, mid, title, cover, director_id, director_firstname, director_lastname
"""

from __future__ import annotations

from core import db

_MOVIE_COLUMNS = """
    m.id,
    m.mid,
    m.title,
    m.cover,
    d.id AS director_id,
    d.firstname AS director_firstname,
    d.lastname AS director_lastname
"""


def like_pattern(query: str) -> str:
    """
    Turn free text into an ILIKE substring pattern matching it literally.
    """
    escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


async def get_director_id(executor: db.Executor, *, firstname: str, lastname: str) -> int | None:
    row = await db.fetch_one(
        executor,
        """
        SELECT id
        FROM directors
        WHERE firstname = $1
          AND lastname = $2
        ORDER BY id
        LIMIT 1
        """,
        firstname,
        lastname,
    )
    return int(row["id"]) if row is not None else None


async def insert_director(executor: db.Executor, *, firstname: str, lastname: str) -> int:
    row = await db.fetch_one(
        executor,
        """
        INSERT INTO directors (firstname, lastname)
        VALUES ($1, $2)
        RETURNING id
        """,
        firstname,
        lastname,
    )
    if row is None:
        raise RuntimeError("Failed to insert director.")
    return int(row["id"])


async def delete_orphaned_directors(executor: db.Executor) -> int:
    """
    Delete directors no movie references. Returns the number removed.
    """
    rows = await db.fetch_all(
        executor,
        """
        DELETE FROM directors d
        WHERE NOT EXISTS (
            SELECT 1
            FROM movies m
            WHERE m.director_id = d.id
        )
        RETURNING d.id
        """,
    )
    return len(rows)


async def insert_movie(
    executor: db.Executor,
    *,
    mid: str,
    title: str,
    director_id: int,
    cover: str,
) -> int:
    row = await db.fetch_one(
        executor,
        """
        INSERT INTO movies (mid, title, director_id, cover)
        VALUES ($1, $2, $3, $4)
        RETURNING id
        """,
        mid,
        title,
        director_id,
        cover,
    )
    if row is None:
        raise RuntimeError("Failed to insert movie.")
    return int(row["id"])


async def update_movie(
    executor: db.Executor,
    movie_id: int,
    *,
    mid: str,
    title: str,
    director_id: int,
    cover: str,
) -> bool:
    row = await db.fetch_one(
        executor,
        """
        UPDATE movies
        SET mid = $2,
            title = $3,
            director_id = $4,
            cover = $5
        WHERE id = $1
        RETURNING id
        """,
        movie_id,
        mid,
        title,
        director_id,
        cover,
    )
    return row is not None


async def delete_movie(executor: db.Executor, movie_id: int) -> bool:
    row = await db.fetch_one(
        executor,
        """
        DELETE FROM movies
        WHERE id = $1
        RETURNING id
        """,
        movie_id,
    )
    return row is not None


async def get_movie(executor: db.Executor, movie_id: int) -> dict | None:
    return await db.fetch_one(
        executor,
        f"""
        SELECT {_MOVIE_COLUMNS}
        FROM movies m
        JOIN directors d ON d.id = m.director_id
        WHERE m.id = $1
        """,
        movie_id,
    )


async def list_movies(executor: db.Executor) -> list[dict]:
    return await db.fetch_all(
        executor,
        f"""
        SELECT {_MOVIE_COLUMNS}
        FROM movies m
        JOIN directors d ON d.id = m.director_id
        ORDER BY m.title ASC, m.id ASC
        """,
    )


async def search_movies(executor: db.Executor, query: str) -> list[dict]:
    """
    Case-insensitive substring search over title, director names and
    category names. A movie matching through several categories is
    returned once.
    """
    return await db.fetch_all(
        executor,
        f"""
        SELECT {_MOVIE_COLUMNS}
        FROM movies m
        JOIN directors d ON d.id = m.director_id
        WHERE m.title ILIKE $1
           OR d.firstname ILIKE $1
           OR d.lastname ILIKE $1
           OR EXISTS (
             SELECT 1
             FROM movie_categories mc
             JOIN categories c ON c.id = mc.category_id
             WHERE mc.movie_id = m.id
               AND c.name ILIKE $1
           )
        ORDER BY m.title ASC, m.id ASC
        """,
        like_pattern(query),
    )


async def list_movies_by_category(executor: db.Executor, category_id: int) -> list[dict]:
    return await db.fetch_all(
        executor,
        f"""
        SELECT {_MOVIE_COLUMNS}
        FROM movies m
        JOIN directors d ON d.id = m.director_id
        WHERE EXISTS (
          SELECT 1
          FROM movie_categories mc
          WHERE mc.movie_id = m.id
            AND mc.category_id = $1
        )
        ORDER BY m.title ASC, m.id ASC
        """,
        category_id,
    )
