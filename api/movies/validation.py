"""
Movie payload checks run before any write.
"""

from __future__ import annotations

from . import schemas

DEFAULT_COVER_URL = "https://www.reelviews.net/resources/img/default_poster.jpg"


class MovieValidationError(ValueError):
    pass


def _is_blank(value: str | None) -> bool:
    return not (value or "").strip()


def validate_movie(movie: schemas.MovieIn) -> None:
    if _is_blank(movie.title):
        raise MovieValidationError("title is required")
    if _is_blank(movie.director.firstname) or _is_blank(movie.director.lastname):
        raise MovieValidationError("director's first name and last name are required")


def with_default_cover(movie: schemas.MovieIn) -> schemas.MovieIn:
    """
    Return a copy carrying the default cover when none was given.
    The input is left untouched.
    """
    if not _is_blank(movie.cover):
        return movie
    return movie.model_copy(update={"cover": DEFAULT_COVER_URL})


def checked_movie(movie: schemas.MovieIn) -> schemas.MovieIn:
    validate_movie(movie)
    return with_default_cover(movie)
