from __future__ import annotations

import posixpath
import secrets

BRANCH_PREFIX = "metarepo"
BUILD_ID_LENGTH = 8


def random_token(length: int = BUILD_ID_LENGTH) -> str:
    return secrets.token_hex((length + 1) // 2)[:length]


def new_build_id() -> str:
    return random_token(BUILD_ID_LENGTH)


def base_branch(build_id: str, name: str) -> str:
    return _branch(build_id, "base", name)


def map_branch(build_id: str, name: str, index: int) -> str:
    return _branch(build_id, "map", name, str(index))


def dst_branch(build_id: str) -> str:
    return _branch(build_id, "dst")


def _branch(build_id: str, *parts: str) -> str:
    # ".." inside a part never climbs out of the build namespace.
    segments = [_segment(part) for part in (build_id, *parts)]
    return "/".join([BRANCH_PREFIX, *(segment for segment in segments if segment)])


def _segment(value: str) -> str:
    return clean_path("/" + value).lstrip("/")


def clean_path(value: str) -> str:
    """Lexically normalize a slash-separated path.

    Collapses repeated separators, ``.`` and ``..`` elements and drops any
    trailing slash. An empty path cleans to ``"."`` and a rooted path never
    climbs above ``"/"``.
    """
    cleaned = posixpath.normpath(value) if value else "."
    if cleaned.startswith("//"):
        cleaned = "/" + cleaned.lstrip("/")
    return cleaned


def is_root(path: str) -> bool:
    return path in {"/", "."}


def relative_dir(path: str) -> str:
    """Return a cleaned path relative to the repository top level."""
    return clean_path(path).lstrip("/") or "."
