"""
Pydantic schemas for movie endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from categories.schemas import Category, CategoryIn, MessageResponse  # noqa: F401


class DirectorIn(BaseModel):
    # Ignored on write: directors are resolved by name.
    id: int | None = None
    firstname: str = ""
    lastname: str = ""


class MovieIn(BaseModel):
    """
    Movie create/update body.

    `id` and `mid` are accepted so a client can send back what it received,
    but both are ignored: the id comes from the path or the store, and the
    MID is always recomputed.
    """

    id: int | str | None = None
    mid: str | None = None
    title: str = ""
    director: DirectorIn = Field(default_factory=DirectorIn)
    cover: str | None = ""
    categories: list[CategoryIn] | None = None

    def category_names(self) -> list[str]:
        return [category.name for category in (self.categories or [])]


class Director(BaseModel):
    id: int
    firstname: str
    lastname: str


class Movie(BaseModel):
    id: int
    mid: str
    title: str
    director: Director
    cover: str
    # None when categories were not loaded (movies-by-category listing).
    categories: list[Category] | None = None
