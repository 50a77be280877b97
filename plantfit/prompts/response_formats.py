"""
Strict JSON-schema response formats attached to every completion request.

The provider is asked to constrain output to these shapes; the validators in
plantfit.validation stay authoritative because compliance is not guaranteed.
"""

from __future__ import annotations

from typing import Any, Literal

from plantfit.models import MAX_SCORE, MIN_EXPLANATION_LENGTH, MIN_SCORE, SCORE_FIELDS

Task = Literal["search", "fit"]

MIN_CANDIDATES = 1
MAX_CANDIDATES = 5


def _search_schema() -> dict[str, Any]:
    candidate = {
        "type": "object",
        "properties": {
            "name": {"type": "string"},
            "latin_name": {"type": "string"},
            "source": {"type": "string", "enum": ["ai"]},
        },
        "required": ["name", "latin_name", "source"],
        "additionalProperties": False,
    }
    return {
        "type": "object",
        "properties": {
            "candidates": {
                "type": "array",
                "items": candidate,
                "minItems": MIN_CANDIDATES,
                "maxItems": MAX_CANDIDATES,
            },
        },
        "required": ["candidates"],
        "additionalProperties": False,
    }


def _fit_schema() -> dict[str, Any]:
    properties: dict[str, Any] = {
        name: {"type": "integer", "minimum": MIN_SCORE, "maximum": MAX_SCORE} for name in SCORE_FIELDS
    }
    properties["explanation"] = {"type": "string", "minLength": MIN_EXPLANATION_LENGTH}
    return {
        "type": "object",
        "properties": properties,
        "required": [*SCORE_FIELDS, "explanation"],
        "additionalProperties": False,
    }


def build_response_format(task: Task) -> dict[str, Any]:
    """The ``response_format`` body field for a task."""
    if task == "search":
        name, schema = "plant_search_response", _search_schema()
    elif task == "fit":
        name, schema = "plant_fit_response", _fit_schema()
    else:
        raise ValueError(f"Unknown task: {task!r}")
    return {
        "type": "json_schema",
        "json_schema": {"name": name, "strict": True, "schema": schema},
    }
