"""
student_risk/schema.py

The canonical student record and its quarterly snapshots.

A `Student` is frozen, and its `risk_score` / `risk_level` are not
constructor arguments: `__post_init__` always computes them through
`scoring.assess`. `dataclasses.replace(student, attendance=80)` therefore
yields a record whose score matches its new inputs.
"""

from __future__ import annotations

import logging
import math
import numbers
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .exceptions import MalformedInputError
from .scoring import RiskLevel, assess

logger = logging.getLogger(__name__)

QUARTERS = (1, 2, 3, 4)
QUARTER_METRICS = ("percentage", "attendance", "behavior_incidents")

# Non-derived scalar fields, in line-store column order (quarters follow).
BASE_COLUMNS: List[str] = [
    "student_id",
    "name",
    "grade",
    "attendance",
    "percentage",
    "gpa",
    "missed_assignments",
    "behavior_incidents",
    "counselor_visits",
    "extracurricular_activities",
    "parent_involvement",
    "previous_year_percentage",
    "english_percentage",
    "math_percentage",
    "science_percentage",
    "absences_last_year",
    "late_assignments",
    "study_group_participation",
    "tutoring_sessions",
    "mental_health_score",
    "peer_relationships_score",
]

QUARTER_COLUMNS: List[str] = [
    f"q{q}_{metric}" for metric in QUARTER_METRICS for q in QUARTERS
]

DERIVED_COLUMNS: List[str] = ["riskScore", "riskLevel"]

CANONICAL_COLUMNS: List[str] = BASE_COLUMNS + QUARTER_COLUMNS + DERIVED_COLUMNS

TEXT_FIELDS = ("student_id", "name")
OPTIONAL_FIELDS = ("gpa",)
NUMERIC_FIELDS = tuple(
    c for c in BASE_COLUMNS + QUARTER_COLUMNS if c not in TEXT_FIELDS + OPTIONAL_FIELDS
)


@dataclass(frozen=True)
class Quarter:
    """One academic quarter's snapshot, used for trend display only."""

    percentage: float
    attendance: float
    behavior_incidents: float


@dataclass(frozen=True)
class Student:
    student_id: str
    name: str
    grade: int
    attendance: float
    percentage: float
    missed_assignments: int
    behavior_incidents: int
    counselor_visits: int
    extracurricular_activities: int
    parent_involvement: float
    previous_year_percentage: float
    english_percentage: float
    math_percentage: float
    science_percentage: float
    absences_last_year: int
    late_assignments: int
    study_group_participation: int
    tutoring_sessions: int
    mental_health_score: float
    peer_relationships_score: float
    quarters: Tuple[Quarter, Quarter, Quarter, Quarter]
    gpa: Optional[float] = None
    risk_score: int = field(init=False)
    risk_level: RiskLevel = field(init=False)

    def __post_init__(self) -> None:
        quarters = tuple(self.quarters)
        if len(quarters) != len(QUARTERS):
            raise ValueError(f"Expected {len(QUARTERS)} quarters, got {len(quarters)}")
        object.__setattr__(self, "quarters", quarters)

        score, level = assess(self)
        object.__setattr__(self, "risk_score", score)
        object.__setattr__(self, "risk_level", level)

    def to_dict(self) -> Dict[str, Any]:
        """Flat, JSON-ready form with `riskScore` / `riskLevel` keys."""
        row: Dict[str, Any] = {c: getattr(self, c) for c in BASE_COLUMNS}
        for q, quarter in zip(QUARTERS, self.quarters):
            for metric in QUARTER_METRICS:
                row[f"q{q}_{metric}"] = getattr(quarter, metric)
        row["riskScore"] = self.risk_score
        row["riskLevel"] = self.risk_level.value
        return row

    @classmethod
    def from_dict(cls, row: Mapping[str, Any]) -> "Student":
        """
        Build a record from its flat form (JSON object or line-store row).

        Serialized `riskScore` / `riskLevel` are never trusted: the score is
        recomputed, and a disagreement with the stored value is logged.

        Raises
        ------
        MalformedInputError
            If a canonical field is missing or a numeric field is not a number.
        """
        missing = [c for c in BASE_COLUMNS + QUARTER_COLUMNS if c not in row and c not in OPTIONAL_FIELDS]
        if missing:
            raise MalformedInputError(f"Student record missing fields: {missing}")

        not_numeric = [c for c in NUMERIC_FIELDS if not is_number(row[c])]
        if not_numeric:
            raise MalformedInputError(
                f"Student record {row.get('student_id')!r} has non-numeric fields: {not_numeric}"
            )

        gpa = row.get("gpa")
        if gpa == "" or (isinstance(gpa, float) and math.isnan(gpa)):
            gpa = None

        quarters = tuple(
            Quarter(**{m: row[f"q{q}_{m}"] for m in QUARTER_METRICS}) for q in QUARTERS
        )
        kwargs = {c: row[c] for c in BASE_COLUMNS if c != "gpa"}
        kwargs["student_id"] = str(kwargs["student_id"])
        kwargs["name"] = str(kwargs["name"])

        student = cls(quarters=quarters, gpa=gpa, **kwargs)

        stored = row.get("riskScore")
        if stored not in (None, "") and stored != student.risk_score:
            logger.warning(
                "Stored riskScore %s for %s is stale; recomputed as %s",
                stored, student.student_id, student.risk_score,
            )
        return student


def is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def seed_quarters(percentage: float, attendance: float, behavior_incidents: float) -> Dict[str, Any]:
    """Flat quarter columns, all four set to the current-period values."""
    current = {
        "percentage": percentage,
        "attendance": attendance,
        "behavior_incidents": behavior_incidents,
    }
    return {f"q{q}_{metric}": current[metric] for metric in QUARTER_METRICS for q in QUARTERS}
