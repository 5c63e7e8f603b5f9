"""
Category API endpoints.
"""

from __future__ import annotations

import asyncpg
from fastapi import APIRouter, Depends, status

from core import db
from movies import schemas as movie_schemas
from movies import service as movies_service

from . import schemas, service

router = APIRouter()


@router.get("/categories")
async def list_categories(pool: asyncpg.Pool = Depends(db.get_pool)) -> list[schemas.Category]:
    """
    Categories linked to at least one movie.
    """
    return await service.list_categories(pool)


@router.post("/categories", status_code=status.HTTP_201_CREATED)
async def create_category(
    payload: schemas.CategoryWriteRequest,
    pool: asyncpg.Pool = Depends(db.get_pool),
) -> schemas.Category:
    return await service.create_category(pool, payload)


@router.put("/categories/{category_id}")
async def rename_category(
    category_id: int,
    payload: schemas.CategoryWriteRequest,
    pool: asyncpg.Pool = Depends(db.get_pool),
) -> schemas.Category:
    return await service.rename_category(pool, category_id, payload)


@router.delete("/categories/{category_id}")
async def delete_category(
    category_id: int,
    pool: asyncpg.Pool = Depends(db.get_pool),
) -> schemas.MessageResponse:
    return await service.delete_category(pool, category_id)


@router.get("/categories/{category_id}/movies")
async def list_category_movies(
    category_id: int,
    pool: asyncpg.Pool = Depends(db.get_pool),
) -> list[movie_schemas.Movie]:
    """
    Movies linked to the category, without their own category lists.
    """
    return await movies_service.list_movies_by_category(pool, category_id)
