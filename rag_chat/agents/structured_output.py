"""
Parse-then-validate pipeline for structured answers.

raw completion text -> JSON candidate -> parsed object -> StructuredAnswer

Only envelope problems are repaired (markdown fences, prose around the
object, trailing commas, a bare block list). Block content is never
rewritten: a payload that passes validation is returned exactly as the
model produced it, anything else raises StructuredOutputError.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import ValidationError

from rag_chat.schema.blocks import StructuredAnswer
from rag_chat.utils.exceptions import StructuredOutputError
from rag_chat.utils.helpers import extract_json_object, remove_trailing_commas, strip_code_fences


def extract_candidate(raw: str) -> str:
    """Strip fences and surrounding prose, returning the JSON text to parse."""
    text = strip_code_fences(raw or "")
    if text.startswith("[") and text.endswith("]"):
        return text
    obj = extract_json_object(text)
    if obj is None:
        raise StructuredOutputError("No JSON object found in completion", stage="parse", raw=raw)
    return obj


def parse_candidate(candidate: str, raw: str = "") -> Any:
    try:
        return json.loads(candidate)
    except json.JSONDecodeError:
        pass
    try:
        return json.loads(remove_trailing_commas(candidate))
    except json.JSONDecodeError as e:
        raise StructuredOutputError(f"Completion is not valid JSON: {e}", stage="parse", raw=raw) from e


def validate_payload(payload: Any, raw: str = "") -> StructuredAnswer:
    if isinstance(payload, list):
        payload = {"blocks": payload}
    if not isinstance(payload, dict):
        raise StructuredOutputError(
            f"Expected a JSON object, got {type(payload).__name__}", stage="validate", raw=raw
        )
    try:
        return StructuredAnswer.model_validate(payload)
    except ValidationError as e:
        errors = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise StructuredOutputError(f"Invalid structured answer: {errors}", stage="validate", raw=raw) from e


def parse_structured_answer(raw: str) -> StructuredAnswer:
    """
    Turn a raw structured completion into a validated StructuredAnswer.

    Raises:
        StructuredOutputError: stage="parse" if no JSON could be read,
                               stage="validate" if the schema is violated
    """
    candidate = extract_candidate(raw)
    payload = parse_candidate(candidate, raw=raw)
    return validate_payload(payload, raw=raw)
