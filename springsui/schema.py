from __future__ import annotations

import json
from importlib import resources
from typing import Any, Dict, cast

import jsonschema  # type: ignore[import-untyped]

UNIT_SCHEMA_RESOURCE = "schemas/transaction-unit.v1.json"

_UNIT_SCHEMA: Dict[str, Any] | None = None


def load_unit_schema() -> Dict[str, Any]:
    global _UNIT_SCHEMA
    if _UNIT_SCHEMA is None:
        with resources.files("springsui").joinpath(UNIT_SCHEMA_RESOURCE).open(
            "r", encoding="utf-8"
        ) as f:
            _UNIT_SCHEMA = cast(Dict[str, Any], json.load(f))
    return _UNIT_SCHEMA


def validate_unit_document(document: Dict[str, Any]) -> None:
    """
    Check a unit document against the packaged schema.

    Raises:
        jsonschema.ValidationError: If the document doesn't match.
    """
    jsonschema.validate(instance=document, schema=load_unit_schema())
