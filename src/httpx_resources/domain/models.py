from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict

SegmentKind = Literal["literal", "param", "optional", "tailcard"]


class ParamSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    type: str = "unknown"
    optional: bool = False
    # attribute chain from the resource instance, e.g. ("parent", "user_id")
    accessor: tuple[str, ...] = ()


class PathSegment(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: SegmentKind
    value: str  # literal text, or the parameter name for placeholders


class ResourceDescriptor(BaseModel):
    """
    Structural description of a resource class.

    Built once when the class is registered; immutable afterwards.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    path_pattern: str                       # /users/{user_id}/posts
    segments: tuple[PathSegment, ...] = ()
    path_params: tuple[ParamSpec, ...] = ()
    query_params: tuple[ParamSpec, ...] = ()

    def param(self, name: str) -> ParamSpec | None:
        for p in (*self.path_params, *self.query_params):
            if p.name == name:
                return p
        return None
