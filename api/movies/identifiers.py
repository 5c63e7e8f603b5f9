"""
MID (movie display identifier) generation.

A MID looks like `f641-8f7c-51`: the first 10 hex characters of a SHA-256
digest over the movie's descriptive fields. It is a display convenience,
not a key, and no collision check is made.
"""

from __future__ import annotations

import hashlib
from typing import Iterable

DIGEST_BYTES = 10


def format_mid(hex_digest: str) -> str:
    return f"{hex_digest[:4]}-{hex_digest[4:8]}-{hex_digest[8:10]}"


def generate_mid(
    title: str,
    director_firstname: str,
    director_lastname: str,
    category_names: Iterable[str] = (),
) -> str:
    """
    Same inputs in the same order always give the same MID.
    Category order matters.
    """
    info = title + director_firstname + director_lastname + "".join(category_names)
    digest = hashlib.sha256(info.encode("utf-8")).digest()
    return format_mid(digest[:DIGEST_BYTES].hex())
