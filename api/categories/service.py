"""
Category business logic.

Scope:
- reconciling a movie's category names onto existing-or-new rows
- purging categories that no movie references any more
- thin CRUD on the categories table
"""

from __future__ import annotations

import logging

import asyncpg
from fastapi import HTTPException, status

from core import db

from . import repository, schemas

logger = logging.getLogger(__name__)


def to_category(row: dict) -> schemas.Category:
    return schemas.Category(id=int(row["id"]), name=str(row["name"] or ""))


async def resolve_category_id(conn: db.Executor, name: str) -> int:
    """
    Look a category up by exact name, creating it when absent.
    """
    category_id = await repository.get_category_id_by_name(conn, name)
    if category_id is not None:
        return category_id
    row = await repository.insert_category(conn, name)
    logger.info("category_created category_id=%s", row["id"])
    return int(row["id"])


async def link_categories(conn: db.Executor, movie_id: int, names: list[str]) -> list[schemas.Category]:
    """
    Map `names` onto category rows and link each one to the movie.

    Meant to run on the connection of the caller's transaction. Stale links
    are not removed here; the update flow clears them first. Repeated names
    link once.
    """
    linked: list[schemas.Category] = []
    seen: set[int] = set()
    for name in names:
        category_id = await resolve_category_id(conn, name)
        await repository.link_movie_category(conn, movie_id=movie_id, category_id=category_id)
        if category_id in seen:
            continue
        seen.add(category_id)
        linked.append(schemas.Category(id=category_id, name=name))
    return linked


async def categories_for_movie(executor: db.Executor, movie_id: int) -> list[schemas.Category]:
    rows = await repository.list_movie_categories(executor, movie_id)
    return [to_category(row) for row in rows]


async def purge_orphaned_categories(pool: asyncpg.Pool) -> int:
    removed = await repository.delete_orphaned_categories(pool)
    if removed:
        logger.info("orphaned_categories_purged removed=%s", removed)
    return removed


async def purge_orphaned_categories_background(pool: asyncpg.Pool) -> None:
    """
    BackgroundTasks entrypoint, scheduled after a movie write commits.

    This should never raise to the request path; failures are only logged.
    Running it twice (or concurrently) is harmless.
    """
    try:
        await purge_orphaned_categories(pool)
    except Exception:
        logger.exception("orphaned_categories_purge_failed")


async def list_categories(pool: asyncpg.Pool) -> list[schemas.Category]:
    rows = await repository.list_categories_in_use(pool)
    return [to_category(row) for row in rows]


async def create_category(pool: asyncpg.Pool, payload: schemas.CategoryWriteRequest) -> schemas.Category:
    row = await repository.insert_category(pool, payload.name)
    logger.info("category_created category_id=%s", row["id"])
    return to_category(row)


async def rename_category(
    pool: asyncpg.Pool,
    category_id: int,
    payload: schemas.CategoryWriteRequest,
) -> schemas.Category:
    row = await repository.update_category(pool, category_id, name=payload.name)
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found.")
    return to_category(row)


async def delete_category(pool: asyncpg.Pool, category_id: int) -> schemas.MessageResponse:
    await repository.delete_category(pool, category_id)
    logger.info("category_deleted category_id=%s", category_id)
    return schemas.MessageResponse(message="Category deleted successfully")
