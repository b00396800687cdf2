from __future__ import annotations

import re
from typing import Optional

from httpx_resources.domain.models import PathSegment

_PLACEHOLDER = re.compile(r"^\{([A-Za-z_][A-Za-z0-9_]*)(\?|\.\.\.)?\}$")
_MULTI_SLASH = re.compile(r"/{2,}")


def normalize_path(path: str) -> str:
    p = (path or "").strip()
    if not p.startswith("/"):
        p = "/" + p

    # collapse accidental double slashes
    p = _MULTI_SLASH.sub("/", p)

    # keep "/" as-is, otherwise strip trailing slash for stability
    if p != "/" and p.endswith("/"):
        p = p[:-1]
    return p


def join_paths(parent: str, child: str) -> str:
    # /users + /{id} -> /users/{id}; either side may be "/" or ""
    return normalize_path(f"{parent.rstrip('/')}/{child.lstrip('/')}")


def parse_segment(segment: str) -> Optional[PathSegment]:
    """
    Classify one path segment.

    Returns None when the segment mixes placeholder syntax with literal
    text (e.g. "v{version}"), which cannot be resolved segment-wise.
    """
    m = _PLACEHOLDER.match(segment)
    if m is None:
        if "{" in segment or "}" in segment:
            return None
        return PathSegment(kind="literal", value=segment)

    name, marker = m.group(1), m.group(2)
    if marker == "?":
        return PathSegment(kind="optional", value=name)
    if marker == "...":
        return PathSegment(kind="tailcard", value=name)
    return PathSegment(kind="param", value=name)


def split_segments(path_pattern: str) -> list[str]:
    # "/" -> [], "/a/{b}" -> ["a", "{b}"]
    return [s for s in path_pattern.strip("/").split("/") if s]
