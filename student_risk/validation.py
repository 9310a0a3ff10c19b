"""
student_risk/validation.py

Field constraints checked on a normalized record before it is accepted.

Violations are reported under the intake field names (`gpa`, `math_score`,
...) because those are what the caller submitted and has to correct.
"""

from __future__ import annotations

import math
from typing import Any, Dict, Mapping, Optional, Sequence

from .exceptions import ValidationError
from .normalize import GPA_SCALE_FACTOR, INTAKE_FIELDS, RENAMED_FIELDS, SCALED_FIELDS
from .schema import is_number

# Intake field -> where its value lives on the normalized record.
_SOURCE = {name: name for name in INTAKE_FIELDS}
_SOURCE.update(RENAMED_FIELDS)
_SOURCE["previous_year_gpa"] = SCALED_FIELDS["previous_year_gpa"]

# field -> (low, high), inclusive.
RANGES = {
    "grade": (1, 12),
    "gpa": (0, 10),
    "previous_year_gpa": (0, 10),
    "attendance": (0, 100),
}


def _intake_value(record: Mapping[str, Any], field: str) -> Any:
    value = record.get(_SOURCE[field])
    if field == "previous_year_gpa" and is_number(value):
        return value / GPA_SCALE_FACTOR
    return value


def validate_record(record: Mapping[str, Any]) -> Dict[str, str]:
    """
    Check one normalized record.

    Returns
    -------
    Dict[str, str]
        Field -> message for every violation; empty when the record is valid.
    """
    errors: Dict[str, str] = {}

    name = record.get("name")
    if not isinstance(name, str) or not name.strip():
        errors["name"] = "Name is required."

    for field in INTAKE_FIELDS:
        if field == "name":
            continue
        value = _intake_value(record, field)
        if not is_number(value) or not math.isfinite(value):
            errors[field] = "Must be a number."
            continue
        if field in RANGES:
            low, high = RANGES[field]
            if not low <= value <= high:
                errors[field] = f"Must be between {low} and {high}."
            elif field == "grade" and value != int(value):
                errors[field] = "Must be a whole number."

    return errors


def ensure_valid(record: Mapping[str, Any], index: Optional[int] = None) -> None:
    """Raise `ValidationError` if `record` violates any constraint."""
    errors = validate_record(record)
    if errors:
        raise ValidationError(errors, index=index, record=record)


def validate_batch(records: Sequence[Mapping[str, Any]]) -> None:
    """
    Every record must pass; the first failing one is raised with its index.
    """
    for index, record in enumerate(records):
        ensure_valid(record, index=index)
