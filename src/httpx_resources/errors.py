"""
Exceptions raised by httpx-resources.

Declaration problems surface when a class is decorated, encoding problems
when a concrete resource is turned into a URL, and plugin problems when a
client is wrapped. Model validation stays with pydantic and transport
failures stay with httpx.
"""

from __future__ import annotations


class ResourcesError(Exception):
    """Base exception for httpx-resources."""
    pass


class ResourceDefinitionError(ResourcesError):
    """Raised when a @resource declaration is inconsistent."""

    def __init__(self, resource: str, reason: str):
        self.resource = resource
        self.reason = reason
        super().__init__(f"Invalid resource '{resource}': {reason}")


class UnregisteredResourceError(ResourcesError):
    """Raised when a type is used as a resource without being registered."""

    def __init__(self, resource: str):
        self.resource = resource
        super().__init__(f"'{resource}' is not a resource; decorate it with @resource(path)")


class ResourceEncodingError(ResourcesError):
    """Raised when a resource instance cannot be turned into a URL."""

    def __init__(self, resource: str, parameter: str, reason: str):
        self.resource = resource
        self.parameter = parameter
        self.reason = reason
        super().__init__(f"Cannot encode '{resource}' parameter '{parameter}': {reason}")


class PluginNotInstalledError(ResourcesError):
    """Raised when a client is used for resources without the plugin."""

    def __init__(self, client: object):
        self.client = client
        super().__init__(
            f"Resources plugin is not installed on {type(client).__name__}; "
            "call httpx_resources.client.plugin.install(client) first"
        )
