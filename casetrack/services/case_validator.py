"""Validation of inbound admin case documents"""
from typing import Any, Iterable, List, Union

from pydantic import ValidationError

from casetrack.api.v1.schemas.cases import CaseDocument
from casetrack.core.exceptions import CaseValidationError, FieldViolation

ROOT_FIELD = "case"


def blank_to_none(value: Any) -> Any:
    """
    Replace every empty string with None, at any nesting level.

    The admin form submits "" for untouched inputs; an empty string is never a
    meaningful enum, date or text value for a case.
    """
    if isinstance(value, str):
        return None if value == "" else value
    if isinstance(value, dict):
        return {key: blank_to_none(item) for key, item in value.items()}
    if isinstance(value, list):
        return [blank_to_none(item) for item in value]
    return value


def _field_path(loc: Iterable[Union[str, int]]) -> str:
    path = ".".join(str(part) for part in loc)
    return path or ROOT_FIELD


def validate_case_document(raw: Any) -> CaseDocument:
    """
    Validate a raw case document and return its normalized form.

    Unknown keys are dropped. Every violation is collected, not just the
    first, and reported as a dotted field path plus message.

    Raises:
        CaseValidationError: if the document does not match the case shape
    """
    if not isinstance(raw, dict):
        raise CaseValidationError([
            FieldViolation(ROOT_FIELD, "Case data must be a JSON object")
        ])

    try:
        return CaseDocument.model_validate(blank_to_none(raw))
    except ValidationError as e:
        violations: List[FieldViolation] = [
            FieldViolation(_field_path(error["loc"]), error["msg"])
            for error in e.errors()
        ]
        raise CaseValidationError(violations) from e
