"""
Resources plugin for httpx clients.

A client must have the plugin installed before resource requests can be
built from it; the lookup happens once, when a ResourcesClient wraps the
client, so a missing plugin fails at wiring time rather than per request.
"""

from __future__ import annotations

import logging
import weakref
from dataclasses import dataclass, field
from typing import Optional, Union

import httpx

from httpx_resources.errors import PluginNotInstalledError
from httpx_resources.resources.format import ResourcesFormat

logger = logging.getLogger(__name__)

# Key under which the URL template is stored in httpx.Request.extensions.
URL_TEMPLATE = "url_template"

AnyClient = Union[httpx.Client, httpx.AsyncClient]


@dataclass(frozen=True)
class Resources:
    format: ResourcesFormat = field(default_factory=ResourcesFormat)


_installed: "weakref.WeakKeyDictionary[AnyClient, Resources]" = weakref.WeakKeyDictionary()


def install(client: AnyClient, resources: Optional[Resources] = None) -> Resources:
    plugin = resources or Resources()
    _installed[client] = plugin
    logger.debug("installed resources plugin on %s", type(client).__name__)
    return plugin


def resources_or_none(client: AnyClient) -> Optional[Resources]:
    return _installed.get(client)


def resources_of(client: AnyClient) -> Resources:
    plugin = resources_or_none(client)
    if plugin is None:
        raise PluginNotInstalledError(client)
    return plugin
