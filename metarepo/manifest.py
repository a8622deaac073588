from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Mapping, Sequence, Tuple

MANIFEST_FILENAME = "UPSTREAM"
DEFAULT_BRANCH = "master"
IDENTITY_MAPPING: Tuple[Tuple[str, str], ...] = (("/", "/"),)


class MetaRepoError(Exception):
    """Base exception for manifest loading errors."""


@dataclass(frozen=True)
class Source:
    name: str
    owner: str = ""
    url: str = ""
    branch: str = DEFAULT_BRANCH
    mapping: Tuple[Tuple[str, str], ...] = IDENTITY_MAPPING


@dataclass(frozen=True)
class Manifest:
    path: str
    sources: Tuple[Source, ...]


def load_manifest(path: Path | None = None) -> Manifest:
    path = path if path is not None else Path.cwd() / MANIFEST_FILENAME
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise MetaRepoError(f"Cannot read manifest {path}: {exc}") from exc
    sources = parse_manifest(text, origin=str(path))
    logging.info("Loaded %d source(s) from %s", len(sources), path)
    return Manifest(path=str(path), sources=tuple(sources))


def parse_manifest(text: str, *, origin: str = MANIFEST_FILENAME) -> List[Source]:
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise MetaRepoError(f"Cannot parse manifest {origin}: {exc}") from exc

    entries = data.get("source", [])
    if not isinstance(entries, list):
        raise MetaRepoError(f"{origin}: 'source' must be an array of tables")
    sources: List[Source] = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise MetaRepoError(f"{origin}: source #{index} is not a table")
        sources.append(_decode_source(entry, origin=f"{origin}: source #{index}"))
    return sources


def _decode_source(entry: Mapping[str, Any], *, origin: str) -> Source:
    name = _string_field(entry, "name", origin)
    owner = _string_field(entry, "owner", origin)
    url = _string_field(entry, "url", origin)
    branch = _string_field(entry, "branch", origin) or DEFAULT_BRANCH
    mapping = _decode_mapping(entry.get("mapping", []), origin)
    return Source(
        name=name,
        owner=owner,
        url=url,
        branch=branch,
        mapping=mapping or IDENTITY_MAPPING,
    )


def _string_field(entry: Mapping[str, Any], key: str, origin: str) -> str:
    value = entry.get(key, "")
    if not isinstance(value, str):
        raise MetaRepoError(f"{origin}: '{key}' must be a string, got {type(value).__name__}")
    return value


def _decode_mapping(raw: Any, origin: str) -> Tuple[Tuple[str, str], ...]:
    if not isinstance(raw, list):
        raise MetaRepoError(f"{origin}: 'mapping' must be an array of [from, to] pairs")
    pairs = []
    for pair in raw:
        if not _is_path_pair(pair):
            raise MetaRepoError(f"{origin}: invalid mapping entry {pair!r}")
        pairs.append((pair[0], pair[1]))
    return tuple(pairs)


def _is_path_pair(pair: Sequence[Any]) -> bool:
    return (
        isinstance(pair, list)
        and len(pair) == 2
        and all(isinstance(item, str) for item in pair)
    )
