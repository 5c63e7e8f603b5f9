"""
Movie API endpoints.
"""

from __future__ import annotations

import asyncpg
from fastapi import APIRouter, BackgroundTasks, Depends, Query, status

from categories import service as categories_service
from core import db

from . import schemas, service

router = APIRouter()


@router.get("/movies")
async def list_movies(pool: asyncpg.Pool = Depends(db.get_pool)) -> list[schemas.Movie]:
    return await service.list_movies(pool)


# Registered before /movies/{movie_id} so "search" is not read as an id.
@router.get("/movies/search")
async def search_movies(
    q: str = Query(default="", max_length=500),
    pool: asyncpg.Pool = Depends(db.get_pool),
) -> list[schemas.Movie]:
    return await service.search_movies(pool, q)


@router.get("/movies/{movie_id}")
async def get_movie(movie_id: int, pool: asyncpg.Pool = Depends(db.get_pool)) -> schemas.Movie:
    return await service.get_movie(pool, movie_id)


@router.post("/movies", status_code=status.HTTP_201_CREATED)
async def create_movie(
    payload: schemas.MovieIn,
    pool: asyncpg.Pool = Depends(db.get_pool),
) -> schemas.Movie:
    return await service.create_movie(pool, payload)


@router.put("/movies/{movie_id}")
async def update_movie(
    movie_id: int,
    payload: schemas.MovieIn,
    background_tasks: BackgroundTasks,
    pool: asyncpg.Pool = Depends(db.get_pool),
) -> schemas.Movie:
    movie = await service.update_movie(pool, movie_id, payload)
    # Runs after the response; a failure here is logged, never returned.
    background_tasks.add_task(categories_service.purge_orphaned_categories_background, pool)
    return movie


@router.delete("/movies/{movie_id}")
async def delete_movie(
    movie_id: int,
    background_tasks: BackgroundTasks,
    pool: asyncpg.Pool = Depends(db.get_pool),
) -> schemas.MessageResponse:
    result = await service.delete_movie(pool, movie_id)
    background_tasks.add_task(categories_service.purge_orphaned_categories_background, pool)
    return result
