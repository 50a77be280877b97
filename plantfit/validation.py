"""
Validation and sanitization of model output.

The model is an untrusted producer: every payload is checked against strict
Pydantic shapes, all violations are reported together in one VALIDATION
error, and free-text fields of search candidates are cleaned before they
leave this module.
"""

from __future__ import annotations

import re
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError

from plantfit.errors import OpenRouterError
from plantfit.models import FitResult, PlantCandidate
from plantfit.prompts.response_formats import MAX_CANDIDATES, MIN_CANDIDATES, Task

MAX_INPUT_LENGTH = 200

_ANGLE_BRACKETS = re.compile(r"[<>]")
_NEWLINES = re.compile(r"[\r\n]+")


def sanitize_text(value: str) -> str:
    """Trim, cap at MAX_INPUT_LENGTH, drop angle brackets, fold newlines into spaces."""
    cleaned = value.strip()[:MAX_INPUT_LENGTH]
    cleaned = _ANGLE_BRACKETS.sub("", cleaned)
    return _NEWLINES.sub(" ", cleaned).strip()


class _CandidatePayload(BaseModel):
    name: str = Field(min_length=1)
    latin_name: str
    source: Literal["ai"]


class _SearchPayload(BaseModel):
    candidates: list[_CandidatePayload] = Field(min_length=MIN_CANDIDATES, max_length=MAX_CANDIDATES)


def _describe(exc: ValidationError) -> str:
    """One "path: message" entry per violation, joined."""
    issues = []
    for err in exc.errors():
        path = ".".join(str(p) for p in err["loc"]) or "(root)"
        issues.append(f"{path}: {err['msg']}")
    return "; ".join(issues)


def validate_search_response(data: Any) -> list[PlantCandidate]:
    """Validate a search payload and return sanitized candidates, best match first."""
    try:
        payload = _SearchPayload.model_validate(data)
    except ValidationError as e:
        raise OpenRouterError.validation(_describe(e)) from e

    candidates: list[PlantCandidate] = []
    empty: list[str] = []
    for i, raw in enumerate(payload.candidates):
        name = sanitize_text(raw.name)
        if not name:
            empty.append(f"candidates.{i}.name: empty after sanitization")
            continue
        latin_name = sanitize_text(raw.latin_name) or None
        candidates.append(PlantCandidate(name=name, latin_name=latin_name))
    if empty:
        raise OpenRouterError.validation("; ".join(empty))
    return candidates


def validate_fit_response(data: Any) -> FitResult:
    """Validate a fit-scoring payload."""
    try:
        return FitResult.model_validate(data)
    except ValidationError as e:
        raise OpenRouterError.validation(_describe(e)) from e


def validate_response(data: Any, task: Task) -> list[PlantCandidate] | FitResult:
    if task == "search":
        return validate_search_response(data)
    if task == "fit":
        return validate_fit_response(data)
    raise ValueError(f"Unknown task: {task!r}")
