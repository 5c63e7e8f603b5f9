"""
Movie business logic.

Writes (create, update, delete) each run in one transaction spanning
movies, directors, categories and movie_categories; any failure rolls the
whole write back. Reads are plain independent queries and may observe a
concurrent write half-way (e.g. a movie row whose categories were just
replaced).

Orphaned categories are not purged here. Routers schedule
`categories.service.purge_orphaned_categories_background` after an update
or delete has committed.
"""

from __future__ import annotations

import logging

import asyncpg
from fastapi import HTTPException, status

from categories import repository as categories_repository
from categories import service as categories_service
from core import db

from . import identifiers, repository, schemas, validation

logger = logging.getLogger(__name__)


def _to_movie(row: dict, categories: list[schemas.Category] | None) -> schemas.Movie:
    return schemas.Movie(
        id=int(row["id"]),
        mid=str(row["mid"] or ""),
        title=str(row["title"] or ""),
        director=schemas.Director(
            id=int(row["director_id"]),
            firstname=str(row["director_firstname"] or ""),
            lastname=str(row["director_lastname"] or ""),
        ),
        cover=str(row["cover"] or ""),
        categories=categories,
    )


def _checked(payload: schemas.MovieIn) -> schemas.MovieIn:
    try:
        return validation.checked_movie(payload)
    except validation.MovieValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


def _mid_for(movie: schemas.MovieIn) -> str:
    return identifiers.generate_mid(
        movie.title,
        movie.director.firstname,
        movie.director.lastname,
        movie.category_names(),
    )


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Movie not found")


async def resolve_director_id(conn: db.Executor, director: schemas.DirectorIn) -> int:
    """
    Look a director up by (firstname, lastname), creating it when absent.
    """
    director_id = await repository.get_director_id(
        conn,
        firstname=director.firstname,
        lastname=director.lastname,
    )
    if director_id is not None:
        return director_id
    director_id = await repository.insert_director(
        conn,
        firstname=director.firstname,
        lastname=director.lastname,
    )
    logger.info("director_created director_id=%s", director_id)
    return director_id


async def _with_categories(executor: db.Executor, rows: list[dict]) -> list[schemas.Movie]:
    # One category query per movie; fine at the sizes this API serves.
    movies: list[schemas.Movie] = []
    for row in rows:
        categories = await categories_service.categories_for_movie(executor, int(row["id"]))
        movies.append(_to_movie(row, categories))
    return movies


async def create_movie(pool: asyncpg.Pool, payload: schemas.MovieIn) -> schemas.Movie:
    movie = _checked(payload)
    mid = _mid_for(movie)

    async with db.transaction(pool) as conn:
        director_id = await resolve_director_id(conn, movie.director)
        movie_id = await repository.insert_movie(
            conn,
            mid=mid,
            title=movie.title,
            director_id=director_id,
            cover=movie.cover or "",
        )
        categories = await categories_service.link_categories(conn, movie_id, movie.category_names())

    logger.info("movie_created movie_id=%s mid=%s director_id=%s", movie_id, mid, director_id)
    return schemas.Movie(
        id=movie_id,
        mid=mid,
        title=movie.title,
        director=schemas.Director(
            id=director_id,
            firstname=movie.director.firstname,
            lastname=movie.director.lastname,
        ),
        cover=movie.cover or "",
        categories=categories,
    )


async def get_movie(pool: asyncpg.Pool, movie_id: int) -> schemas.Movie:
    row = await repository.get_movie(pool, movie_id)
    if row is None:
        raise _not_found()
    categories = await categories_service.categories_for_movie(pool, movie_id)
    return _to_movie(row, categories)


async def list_movies(pool: asyncpg.Pool) -> list[schemas.Movie]:
    rows = await repository.list_movies(pool)
    return await _with_categories(pool, rows)


async def search_movies(pool: asyncpg.Pool, query: str) -> list[schemas.Movie]:
    query = (query or "").strip()
    if not query:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Search query is required")

    rows = await repository.search_movies(pool, query)
    logger.info("movie_search query=%r results=%s", query, len(rows))
    return await _with_categories(pool, rows)


async def update_movie(pool: asyncpg.Pool, movie_id: int, payload: schemas.MovieIn) -> schemas.Movie:
    """
    Replace a movie's fields, director and category set.

    The director is re-resolved by name rather than trusting `director.id`
    from the body, so a rename never rewrites a director row shared with
    other movies. A director left without movies is removed.
    """
    movie = _checked(payload)
    mid = _mid_for(movie)

    async with db.transaction(pool) as conn:
        director_id = await resolve_director_id(conn, movie.director)
        updated = await repository.update_movie(
            conn,
            movie_id,
            mid=mid,
            title=movie.title,
            director_id=director_id,
            cover=movie.cover or "",
        )
        if not updated:
            raise _not_found()

        await categories_repository.unlink_movie(conn, movie_id)
        await categories_service.link_categories(conn, movie_id, movie.category_names())
        await repository.delete_orphaned_directors(conn)

        row = await repository.get_movie(conn, movie_id)
        if row is None:
            raise _not_found()
        categories = await categories_service.categories_for_movie(conn, movie_id)

    logger.info("movie_updated movie_id=%s mid=%s director_id=%s", movie_id, mid, director_id)
    return _to_movie(row, categories)


async def delete_movie(pool: asyncpg.Pool, movie_id: int) -> schemas.MessageResponse:
    async with db.transaction(pool) as conn:
        await categories_repository.unlink_movie(conn, movie_id)
        deleted = await repository.delete_movie(conn, movie_id)
        if not deleted:
            raise _not_found()
        removed_directors = await repository.delete_orphaned_directors(conn)

    logger.info("movie_deleted movie_id=%s removed_directors=%s", movie_id, removed_directors)
    return schemas.MessageResponse(message="Movie deleted successfully")


async def list_movies_by_category(pool: asyncpg.Pool, category_id: int) -> list[schemas.Movie]:
    rows = await repository.list_movies_by_category(pool, category_id)
    return [_to_movie(row, None) for row in rows]
