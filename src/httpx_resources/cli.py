from __future__ import annotations

import importlib
import json
import logging
from typing import Any, List, Optional, get_origin

import httpx
import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from httpx_resources.errors import ResourceEncodingError
from httpx_resources.resources.declare import descriptor_of, unwrap_optional
from httpx_resources.resources.href import href
from httpx_resources.resources.template import build_url_template
from httpx_resources.settings import get_settings


app = typer.Typer(no_args_is_help=True, add_completion=False)

console = Console()


def _emit(text: str) -> None:
    # raw output: no markup, highlighting or folding of long URLs
    console.print(text, markup=False, highlight=False, soft_wrap=True)


@app.callback()
def configure(
    log_level: Optional[str] = typer.Option(None, help="Logging level (default: from settings)"),
) -> None:
    level = (log_level or get_settings().log_level).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _import_module(name: str):
    try:
        return importlib.import_module(name)
    except ImportError as e:
        raise typer.BadParameter(f"Cannot import module '{name}': {e}")


def _load_resource(target: str) -> type:
    module_name, sep, attr = target.partition(":")
    if not sep or not module_name or not attr:
        raise typer.BadParameter(f"Target must look like 'package.module:Class', got '{target}'")

    obj: Any = _import_module(module_name)
    for part in attr.split("."):
        obj = getattr(obj, part, None)
        if obj is None:
            raise typer.BadParameter(f"'{attr}' not found in module '{module_name}'")

    if descriptor_of(obj) is None:
        raise typer.BadParameter(f"'{target}' is not a registered resource")
    return obj


_SEQUENCES = (list, tuple, set, frozenset)


def _field_annotation(model: Any, name: str) -> Any:
    fields = getattr(model, "model_fields", None) or {}
    info = fields.get(name)
    return unwrap_optional(info.annotation)[0] if info is not None else None


def _is_sequence(annotation: Any) -> bool:
    return get_origin(annotation) in _SEQUENCES or annotation in _SEQUENCES


def _parse_params(cls: type, pairs: List[str]) -> dict[str, Any]:
    # ["user.user_id=3", "tags=a"] -> {"user": {"user_id": "3"}, "tags": ["a"]}
    data: dict[str, Any] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"Parameters must look like key=value, got '{pair}'")

        *parents, leaf = key.split(".")
        node = data
        model: Any = cls
        for i, p in enumerate(parents):
            child = node.setdefault(p, {})
            if not isinstance(child, dict):
                raise typer.BadParameter(
                    f"'{'.'.join(parents[: i + 1])}' is given both a value and nested fields"
                )
            node = child
            model = _field_annotation(model, p)

        prev = node.get(leaf)
        if isinstance(prev, dict):
            raise typer.BadParameter(f"'{key}' is given both a value and nested fields")
        if prev is None:
            node[leaf] = [value] if _is_sequence(_field_annotation(model, leaf)) else value
        elif isinstance(prev, list):
            prev.append(value)
        else:
            node[leaf] = [prev, value]
    return data


@app.command()
def template(
    target: str = typer.Argument(..., help="Resource as 'package.module:Class'"),
) -> None:
    cls = _load_resource(target)
    _emit(build_url_template(descriptor_of(cls)))


@app.command("list")
def list_resources(
    module: str = typer.Argument(..., help="Module to inspect, e.g. myapi.resources"),
    format: str = typer.Option("table", help="Output format: table|json"),
) -> None:
    mod = _import_module(module)

    fmt = format.lower().strip()
    if fmt not in ("table", "json"):
        raise typer.BadParameter("format must be one of: table, json")

    descriptors = []
    seen = set()
    for value in vars(mod).values():
        d = descriptor_of(value)
        if d is None or id(value) in seen:
            continue
        seen.add(id(value))
        descriptors.append(d)
    descriptors.sort(key=lambda d: (d.path_pattern, d.name))

    if fmt == "json":
        payload = [
            {**d.model_dump(mode="json", exclude={"segments"}), "url_template": build_url_template(d)}
            for d in descriptors
        ]
        _emit(json.dumps(payload, indent=2))
        return

    console.print(f"[bold]Resources:[/bold] {len(descriptors)} in {module}")

    table = Table(show_header=True, header_style="bold")
    table.add_column("NAME", no_wrap=True)
    table.add_column("PATH")
    table.add_column("QUERY")
    table.add_column("TEMPLATE")

    for d in descriptors:
        query = ", ".join(f"{p.name}?" if p.optional else p.name for p in d.query_params)
        table.add_row(d.name, d.path_pattern, query or "-", build_url_template(d))

    console.print(table)


@app.command("href")
def href_command(
    target: str = typer.Argument(..., help="Resource as 'package.module:Class'"),
    param: Optional[List[str]] = typer.Option(None, "--param", "-p", help="Field value as key=value (repeatable)"),
    base_url: Optional[str] = typer.Option(None, help="Base URL (default: from settings)"),
) -> None:
    cls = _load_resource(target)
    try:
        url = href(cls.model_validate(_parse_params(cls, param or [])))
    except (ValidationError, ResourceEncodingError) as e:
        raise typer.BadParameter(str(e))

    base = base_url if base_url is not None else get_settings().base_url
    if base:
        # same merge rule httpx.Client applies to relative URLs
        with httpx.Client(base_url=base) as client:
            url = str(client.build_request("GET", url).url)

    _emit(url)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
