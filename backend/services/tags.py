"""Tag normalisation and relatedness helpers shared by the scorers."""

import re
from collections.abc import Iterable, Mapping


def normalize_tag(tag: object) -> str:
    """Normalize a tag for comparison. Non-strings normalize to ""."""
    if not isinstance(tag, str):
        return ""
    return re.sub(r"\s+", " ", tag.strip().lower())


def normalize_tags(tags: Iterable[object] | None) -> set[str]:
    """Normalize an iterable of tags, dropping blanks. None is an empty set."""
    if not tags:
        return set()
    return {t for t in (normalize_tag(tag) for tag in tags) if t}


def build_adjacency(related_tags: Mapping[str, Iterable[str]]) -> dict[str, set[str]]:
    """Build a symmetric, normalized adjacency map from a related-tags config."""
    adjacency: dict[str, set[str]] = {}
    for tag, neighbours in related_tags.items():
        key = normalize_tag(tag)
        if not key:
            continue
        for neighbour in normalize_tags(neighbours):
            if neighbour == key:
                continue
            adjacency.setdefault(key, set()).add(neighbour)
            adjacency.setdefault(neighbour, set()).add(key)
    return adjacency


def is_related(a: str, b: str, adjacency: Mapping[str, set[str]] | None = None) -> bool:
    """True if two normalized tags are adjacent but not identical.

    Related means one contains the other (e.g. "ecm" / "ecm origination")
    or the pair is listed in the adjacency map.
    """
    if not a or not b or a == b:
        return False
    if a in b or b in a:
        return True
    if adjacency and b in adjacency.get(a, ()):
        return True
    return False
