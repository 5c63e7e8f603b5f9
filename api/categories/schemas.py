"""
Pydantic schemas for category endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel


class CategoryIn(BaseModel):
    # `id` is accepted so clients can echo a category they received back.
    id: int | None = None
    name: str = ""


class CategoryWriteRequest(BaseModel):
    name: str


class Category(BaseModel):
    id: int
    name: str


class MessageResponse(BaseModel):
    message: str
