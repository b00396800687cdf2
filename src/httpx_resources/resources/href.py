from __future__ import annotations

from typing import Optional
from urllib.parse import quote

import httpx
from pydantic import BaseModel

from httpx_resources.errors import ResourceEncodingError
from httpx_resources.resources.format import ResourcesFormat


def href(resource: BaseModel, resources_format: Optional[ResourcesFormat] = None) -> str:
    """
    Resolve a resource instance into a relative URL ("/path?query").

    {name} needs exactly one value, {name?} at most one (segment dropped when
    absent) and {name...} expands to one segment per value. Query values of
    None are left out; sequences repeat the parameter.
    """
    path, query = resolve(resource, resources_format)
    if not query:
        return path
    return f"{path}?{httpx.QueryParams(query)}"


def resolve(
    resource: BaseModel, resources_format: Optional[ResourcesFormat] = None
) -> tuple[str, list[tuple[str, str]]]:
    """Encoded path and query items of `resource`, before they are joined."""
    fmt = resources_format or ResourcesFormat()
    descriptor = fmt.descriptor_for(type(resource))

    segments: list[str] = []
    for seg in descriptor.segments:
        if seg.kind == "literal":
            segments.append(seg.value)
            continue

        param = descriptor.param(seg.value)
        values = fmt.values_of(resource, param)

        if seg.kind == "param" and len(values) != 1:
            raise ResourceEncodingError(
                descriptor.name, seg.value, f"expected exactly one value, found {len(values)}"
            )
        if seg.kind == "optional" and len(values) > 1:
            raise ResourceEncodingError(
                descriptor.name, seg.value, f"expected at most one value, found {len(values)}"
            )
        segments.extend(quote(v, safe="") for v in values)

    query: list[tuple[str, str]] = []
    for param in descriptor.query_params:
        query.extend((param.name, v) for v in fmt.values_of(resource, param))

    return "/" + "/".join(segments), query
