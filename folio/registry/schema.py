"""JSON Schema generation for registry messages and projections."""

from __future__ import annotations

import json
import typing as typ
from pathlib import Path  # noqa: TC003

import msgspec

from folio.registry.codec import EXECUTE_VARIANTS, QUERY_VARIANTS
from folio.registry.models import (
    ContentListResponse,
    ContentResponse,
    InstantiateMsg,
    Response,
)

SCHEMA_ID_BASE = "https://folio.example/schemas"


def _tagged_union_schema(
    variants: dict[str, type[msgspec.Struct]],
) -> dict[str, typ.Any]:
    """Build a ``oneOf`` schema for externally tagged variants."""
    schemas, components = msgspec.json.schema_components(variants.values())
    one_of = [
        {
            "type": "object",
            "properties": {tag: schema},
            "required": [tag],
            "additionalProperties": False,
        }
        for tag, schema in zip(variants, schemas, strict=True)
    ]
    return {"oneOf": one_of, "$defs": components}


def build_schemas() -> dict[str, dict[str, typ.Any]]:
    """Build JSON Schemas for every message and projection.

    Returns
    -------
    dict[str, dict[str, Any]]
        Schemas keyed by file stem (``execute_msg``, ``query_msg``, ...),
        each with ``$id`` set beneath ``SCHEMA_ID_BASE``.

    """
    schemas: dict[str, dict[str, typ.Any]] = {
        "instantiate_msg": msgspec.json.schema(InstantiateMsg),
        "execute_msg": _tagged_union_schema(EXECUTE_VARIANTS),
        "query_msg": _tagged_union_schema(QUERY_VARIANTS),
        "content_response": msgspec.json.schema(ContentResponse),
        "content_list_response": msgspec.json.schema(ContentListResponse),
        "response": msgspec.json.schema(Response),
    }
    for name, schema in schemas.items():
        schema["$id"] = f"{SCHEMA_ID_BASE}/{name}.json"
    return schemas


def write_schemas(directory: Path) -> list[Path]:
    """Write each schema to ``directory/<name>.json``.

    Parameters
    ----------
    directory : Path
        Output directory, created if missing.

    Returns
    -------
    list[Path]
        Paths written, in generation order.

    """
    directory.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    for name, schema in build_schemas().items():
        path = directory / f"{name}.json"
        path.write_text(json.dumps(schema, indent=2), encoding="utf-8")
        written.append(path)
    return written
