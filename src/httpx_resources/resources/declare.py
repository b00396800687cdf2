from __future__ import annotations

import logging
import types
from typing import Any, Callable, Optional, TypeVar, Union, get_args, get_origin

from pydantic import BaseModel

from httpx_resources.domain.models import ParamSpec, PathSegment, ResourceDescriptor
from httpx_resources.errors import ResourceDefinitionError
from httpx_resources.resources.paths import join_paths, normalize_path, parse_segment, split_segments

logger = logging.getLogger(__name__)

_DESCRIPTOR_ATTR = "__resource_descriptor__"

M = TypeVar("M", bound=type)


def resource(path: str) -> Callable[[M], M]:
    """
    Register a pydantic model as a resource served at `path`.

        @resource("/users/{user_id}")
        class User(BaseModel):
            user_id: int
            expand: bool = False      # -> ?expand={expand?}

    The field-to-URL mapping is computed here, once, and stored on the class.
    """

    def decorate(cls: M) -> M:
        descriptor = describe(cls, path)
        setattr(cls, _DESCRIPTOR_ATTR, descriptor)
        logger.debug(
            "registered resource %s path=%s query=%s",
            descriptor.name,
            descriptor.path_pattern,
            [p.name for p in descriptor.query_params],
        )
        return cls

    return decorate


def descriptor_of(cls: Any) -> Optional[ResourceDescriptor]:
    # not inherited: a subclass of a resource is not itself a resource
    if not isinstance(cls, type):
        return None
    return cls.__dict__.get(_DESCRIPTOR_ATTR)


def is_resource(cls: Any) -> bool:
    return descriptor_of(cls) is not None


def describe(cls: Any, path: str) -> ResourceDescriptor:
    """
    Build the descriptor for `cls` declared at `path`.

    Nested model fields are flattened into parameters at the position of the
    field. A nested field whose type is itself a registered resource is the
    parent: its path pattern prefixes ours. Optional nested fields
    (`Optional[User] = None`) are unwrapped and their parameters are optional.
    """
    name = getattr(cls, "__qualname__", repr(cls))
    if not _is_model(cls):
        raise ResourceDefinitionError(name, "resources must be pydantic BaseModel subclasses")

    parent_path = ""
    parent_field: Optional[str] = None
    for field_name, info in cls.model_fields.items():
        parent = descriptor_of(unwrap_optional(info.annotation)[0])
        if parent is None:
            continue
        if parent_field is not None:
            raise ResourceDefinitionError(
                name, f"multiple parent resources: '{parent_field}' and '{field_name}'"
            )
        parent_field = field_name
        parent_path = parent.path_pattern

    path_pattern = join_paths(parent_path, path) if parent_field else normalize_path(path)

    params: list[ParamSpec] = []
    _collect_params(cls, (), False, params)

    by_name: dict[str, ParamSpec] = {}
    for p in params:
        if p.name in by_name:
            raise ResourceDefinitionError(
                name,
                f"parameter '{p.name}' is declared by both "
                f"'{'.'.join(by_name[p.name].accessor)}' and '{'.'.join(p.accessor)}'",
            )
        by_name[p.name] = p

    segments: list[PathSegment] = []
    used: list[str] = []
    for raw in split_segments(path_pattern):
        seg = parse_segment(raw)
        if seg is None:
            raise ResourceDefinitionError(
                name, f"placeholder must span a whole path segment, got '{raw}'"
            )
        if seg.kind != "literal":
            if seg.value not in by_name:
                raise ResourceDefinitionError(name, f"placeholder '{raw}' names no field")
            if seg.value in used:
                raise ResourceDefinitionError(name, f"placeholder '{seg.value}' used twice")
            used.append(seg.value)
        segments.append(seg)

    return ResourceDescriptor(
        name=name,
        path_pattern=path_pattern,
        segments=tuple(segments),
        path_params=tuple(by_name[n] for n in used),
        query_params=tuple(p for p in params if p.name not in used),
    )


def unwrap_optional(annotation: Any) -> tuple[Any, bool]:
    """`Optional[X]` and `X | None` -> (X, True); anything else -> (annotation, False)."""
    if get_origin(annotation) in (Union, types.UnionType):
        args = [a for a in get_args(annotation) if a is not type(None)]
        if len(args) == 1 and len(args) < len(get_args(annotation)):
            return args[0], True
    return annotation, False


def _is_model(annotation: Any) -> bool:
    # list[str] and friends pass isinstance(type) on some interpreters
    if get_origin(annotation) is not None:
        return False
    return isinstance(annotation, type) and issubclass(annotation, BaseModel)


def _collect_params(
    model: type[BaseModel], accessor: tuple[str, ...], optional: bool, out: list[ParamSpec]
) -> None:
    for field_name, info in model.model_fields.items():
        inner, nullable = unwrap_optional(info.annotation)
        if _is_model(inner):
            # a missing (None) nested model leaves all of its parameters without value
            _collect_params(
                inner, accessor + (field_name,), optional or nullable or not info.is_required(), out
            )
            continue
        out.append(
            ParamSpec(
                name=field_name,
                type=_type_name(info.annotation),
                optional=optional or not info.is_required(),
                accessor=accessor + (field_name,),
            )
        )


def _type_name(annotation: Any) -> str:
    if annotation is None:
        return "None"
    if isinstance(annotation, type):
        return annotation.__name__
    return str(annotation).replace("typing.", "")
