"""
student_risk/normalize.py

Purpose
-------
Turns intake records into canonical (unscored, possibly id-less) records.

Three intake shapes are accepted:
  - CSV text: header line of field names, one comma-delimited line per student
  - a single structured record (mapping, or JSON object text)
  - a batch of structured records (list of mappings, JSON array text, or a
    pandas DataFrame holding one spreadsheet row per student)

Every intake record must carry the full `INTAKE_FIELDS` set. Nothing is
defaulted: a missing field rejects the record, and in a batch it rejects the
whole batch.
"""

from __future__ import annotations

import io
import json
import logging
import math
import warnings
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

import numpy as np
import pandas as pd

from .exceptions import MalformedInputError
from .schema import seed_quarters

logger = logging.getLogger(__name__)

INTAKE_FIELDS: List[str] = [
    "name",
    "grade",
    "attendance",
    "gpa",
    "missed_assignments",
    "behavior_incidents",
    "counselor_visits",
    "extracurricular_activities",
    "parent_involvement",
    "previous_year_gpa",
    "reading_score",
    "math_score",
    "science_score",
    "absences_last_year",
    "late_assignments",
    "study_group_participation",
    "tutoring_sessions",
    "mental_health_score",
    "peer_relationships_score",
]

# Intake fields that stay text in CSV payloads.
TEXT_INTAKE_FIELDS = ("student_id", "name")

# Intake fields that reach the canonical record under a new name.
RENAMED_FIELDS = {
    "math_score": "math_percentage",
    "reading_score": "english_percentage",
    "science_score": "science_percentage",
}

# 0-10 scale intake fields and the 0-100 canonical field derived from each.
SCALED_FIELDS = {
    "gpa": "percentage",
    "previous_year_gpa": "previous_year_percentage",
}
GPA_SCALE_FACTOR = 10

# Consumed by a derivation and not carried into the canonical record as-is.
_CONSUMED = set(RENAMED_FIELDS) | {"previous_year_gpa"}

IntakeBatch = Union[pd.DataFrame, Sequence[Mapping[str, Any]]]


# ---------------------------------------------------------------------
# Parsing textual payloads
# ---------------------------------------------------------------------
def coerce_cell(value: Any) -> Any:
    """
    Return `value` as an int or float when it reads as a finite decimal
    number, otherwise unchanged.
    """
    if not isinstance(value, str):
        return value
    text = value.strip()
    if not text or "_" in text:
        return value
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return value
    return number if math.isfinite(number) else value


def parse_csv(text: str, text_columns: Iterable[str] = ()) -> List[Dict[str, Any]]:
    """
    Parse CSV text into one dict per data line.

    Parameters
    ----------
    text : str
        First line holds the field names; each following line holds values.
    text_columns : Iterable[str]
        Columns kept as text, never coerced to numbers (ids, names).

    Returns
    -------
    List[Dict[str, Any]]
        Rows keyed by (whitespace-trimmed) header, numbers coerced per cell.

    Raises
    ------
    MalformedInputError
        If the payload is empty, cannot be tokenized as CSV, or a line has
        more cells than the header.
    """
    if not text or not text.strip():
        raise MalformedInputError("CSV payload is empty.")

    try:
        # Over-long lines only warn with index_col=False; treat them as corrupt.
        with warnings.catch_warnings():
            warnings.simplefilter("error", pd.errors.ParserWarning)
            frame = pd.read_csv(
                io.StringIO(text.strip()),
                dtype=str,
                keep_default_na=False,
                index_col=False,
                skip_blank_lines=True,
            )
    except (pd.errors.ParserError, pd.errors.ParserWarning, pd.errors.EmptyDataError) as exc:
        raise MalformedInputError(f"Could not parse CSV payload: {exc}") from exc

    frame.columns = [str(c).strip() for c in frame.columns]
    # Short lines leave NaN behind even with keep_default_na=False.
    frame = frame.fillna("")

    keep_text = set(text_columns)
    return [
        {col: value if col in keep_text else coerce_cell(value) for col, value in row.items()}
        for row in frame.to_dict("records")
    ]


def decode_payload(data: bytes, encoding: str = "utf-8") -> str:
    """Decode an uploaded or on-disk intake file."""
    try:
        return data.decode(encoding)
    except UnicodeDecodeError as exc:
        raise MalformedInputError(f"Intake file is not valid {encoding} text: {exc}") from exc


def parse_json(text: str) -> Union[Dict[str, Any], List[Dict[str, Any]]]:
    """Parse a JSON object (one record) or JSON array of objects (a batch)."""
    try:
        payload = json.loads(text)
    except (TypeError, json.JSONDecodeError) as exc:
        raise MalformedInputError(f"Could not parse JSON payload: {exc}") from exc

    if isinstance(payload, dict):
        return payload
    if isinstance(payload, list) and all(isinstance(item, dict) for item in payload):
        return payload
    raise MalformedInputError("JSON payload must be an object or an array of objects.")


# ---------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------
def _plain(value: Any) -> Any:
    # DataFrame rows hand back numpy scalars; the canonical record holds
    # plain Python values so it serializes cleanly.
    if isinstance(value, np.generic):
        return value.item()
    return value


def _scaled(value: Any) -> Any:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value * GPA_SCALE_FACTOR
    # Left as-is for the validator to report.
    return value


def missing_intake_fields(record: Mapping[str, Any]) -> List[str]:
    return [f for f in INTAKE_FIELDS if f not in record]


def _normalize_checked(intake: Mapping[str, Any]) -> Dict[str, Any]:
    values = {key: _plain(value) for key, value in intake.items()}

    extra = sorted(k for k in values if k not in INTAKE_FIELDS and k != "student_id")
    if extra:
        logger.debug("Dropping non-intake keys: %s", extra)

    record: Dict[str, Any] = {}

    student_id = values.get("student_id")
    if isinstance(student_id, str) and student_id.strip():
        record["student_id"] = student_id.strip()

    for name in INTAKE_FIELDS:
        if name not in _CONSUMED:
            record[name] = values[name]

    for source, target in SCALED_FIELDS.items():
        record[target] = _scaled(values[source])
    for source, target in RENAMED_FIELDS.items():
        record[target] = values[source]

    record.update(
        seed_quarters(record["percentage"], record["attendance"], record["behavior_incidents"])
    )
    return record


def normalize_record(intake: Mapping[str, Any], index: Optional[int] = None) -> Dict[str, Any]:
    """
    Normalize one intake record into canonical field names.

    Derivations: `percentage = gpa * 10`,
    `previous_year_percentage = previous_year_gpa * 10`, the three subject
    scores are renamed to `*_percentage`, and all four quarters are seeded with
    the current `percentage`, `attendance` and `behavior_incidents`. Other
    intake fields pass through by name; `gpa` is kept on the record.

    Raises
    ------
    MalformedInputError
        If `intake` is not a mapping or lacks any intake field.
    """
    where = "" if index is None else f" at position {index}"
    if not isinstance(intake, Mapping):
        raise MalformedInputError(f"Intake record{where} is not a key/value record.")

    missing = missing_intake_fields(intake)
    if missing:
        raise MalformedInputError(f"Intake record{where} is missing required fields: {missing}")

    return _normalize_checked(intake)


def normalize_batch(records: IntakeBatch) -> List[Dict[str, Any]]:
    """
    Normalize a batch; the whole batch is rejected if any row is incomplete.

    `records` may be a DataFrame (one row per student) or a sequence of
    mappings.
    """
    if isinstance(records, pd.DataFrame):
        rows: Iterable[Any] = records.to_dict("records")
    else:
        rows = records
    rows = list(rows)

    for index, row in enumerate(rows):
        if not isinstance(row, Mapping):
            raise MalformedInputError(f"Intake record at position {index} is not a key/value record.")
        missing = missing_intake_fields(row)
        if missing:
            logger.warning("Rejecting batch of %d: row %d is incomplete", len(rows), index)
            raise MalformedInputError(
                f"Intake record at position {index} is missing required fields: {missing}"
            )

    return [_normalize_checked(row) for row in rows]


def normalize_csv(text: str) -> List[Dict[str, Any]]:
    """Parse an intake CSV and normalize every row as one batch."""
    return normalize_batch(parse_csv(text, text_columns=TEXT_INTAKE_FIELDS))
