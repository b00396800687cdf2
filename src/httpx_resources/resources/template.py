from __future__ import annotations

from typing import Optional

from httpx_resources.domain.models import ResourceDescriptor
from httpx_resources.resources.format import ResourcesFormat


def build_url_template(descriptor: ResourceDescriptor) -> str:
    """
    Render the un-expanded URL of a resource:

      /items + [a, b (optional)] -> /items?a={a}&b={b?}

    The path pattern is used as-is and parameter names verbatim.
    """
    parts = [descriptor.path_pattern]
    for i, param in enumerate(descriptor.query_params):
        parts.append("?" if i == 0 else "&")
        parts.append(param.name)
        parts.append("={")
        parts.append(param.name)
        if param.optional:
            parts.append("?")
        parts.append("}")
    return "".join(parts)


def url_template_for(cls: type, resources_format: Optional[ResourcesFormat] = None) -> str:
    fmt = resources_format or ResourcesFormat()
    return build_url_template(fmt.descriptor_for(cls))
