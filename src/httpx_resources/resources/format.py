from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel

from httpx_resources.domain.models import ParamSpec, ResourceDescriptor
from httpx_resources.errors import UnregisteredResourceError
from httpx_resources.resources.declare import descriptor_of


class ResourcesFormat:
    """
    Maps resource classes to their descriptors and field values to URL text.

    Subclass and override `encode_value` to change how values are rendered.
    """

    def descriptor_for(self, cls: type) -> ResourceDescriptor:
        descriptor = descriptor_of(cls)
        if descriptor is None:
            raise UnregisteredResourceError(getattr(cls, "__qualname__", repr(cls)))
        return descriptor

    def encode_to_path_pattern(self, cls: type) -> str:
        return self.descriptor_for(cls).path_pattern

    def encode_to_query_parameters(self, cls: type) -> tuple[ParamSpec, ...]:
        return self.descriptor_for(cls).query_params

    def values_of(self, resource: BaseModel, param: ParamSpec) -> list[str]:
        value: Any = resource
        for attr in param.accessor:
            if value is None:
                break
            value = getattr(value, attr)
        return self.encode_value(value)

    def encode_value(self, value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, (list, tuple)):
            return [v for item in value for v in self.encode_value(item)]
        if isinstance(value, (set, frozenset)):
            return sorted(v for item in value for v in self.encode_value(item))
        if isinstance(value, bool):
            return ["true" if value else "false"]
        if isinstance(value, Enum):
            return self.encode_value(value.value)
        return [str(value)]
