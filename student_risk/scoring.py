"""
student_risk/scoring.py

Purpose
-------
The single entry point for risk scoring. Every code path that creates or
changes a student record gets its `riskScore` / `riskLevel` from here.

The score is a fixed weighted formula over four components:

    academic               weight 40
    attendance_engagement  weight 30
    social_behavioral      weight 20
    support                weight 10

Each component is a weighted mix of "distance from ideal" terms. Nothing is
clamped: inputs outside their documented ranges (e.g. 20 absences, or 5
extracurricular activities) push a component outside 0..weight, and the total
outside 0..100. That is current behavior and is kept as-is.
"""

from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Any, Mapping, NamedTuple, Tuple

logger = logging.getLogger(__name__)

ACADEMIC_WEIGHT = 40
ATTENDANCE_WEIGHT = 30
SOCIAL_WEIGHT = 20
SUPPORT_WEIGHT = 10

# Lower bound of the Medium and High bands (inclusive).
MEDIUM_RISK_THRESHOLD = 30
HIGH_RISK_THRESHOLD = 60

# Fields the formula reads.
SCORING_FIELDS = (
    "percentage",
    "math_percentage",
    "science_percentage",
    "attendance",
    "absences_last_year",
    "missed_assignments",
    "behavior_incidents",
    "mental_health_score",
    "peer_relationships_score",
    "parent_involvement",
    "extracurricular_activities",
    "study_group_participation",
    "tutoring_sessions",
)


class RiskLevel(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"

    def __str__(self) -> str:
        return self.value


class RiskBreakdown(NamedTuple):
    """Unrounded component scores; `total` is what gets rounded."""

    academic: float
    attendance_engagement: float
    social_behavioral: float
    support: float

    @property
    def total(self) -> float:
        return self.academic + self.attendance_engagement + self.social_behavioral + self.support


def _field(record: Any, name: str) -> float:
    if isinstance(record, Mapping):
        return record[name]
    return getattr(record, name)


def component_scores(record: Any) -> RiskBreakdown:
    """
    Compute the four weighted components for one record.

    Parameters
    ----------
    record : Mapping or object
        Anything exposing the canonical field names, either as keys or as
        attributes (a `Student`, a normalized dict, a DataFrame row).

    Returns
    -------
    RiskBreakdown
        Component scores, each nominally within 0..weight.
    """
    f = {name: _field(record, name) for name in SCORING_FIELDS}

    academic = (
        ((100 - f["percentage"]) / 100) * 0.4
        + ((100 - f["math_percentage"]) / 100) * 0.3
        + ((100 - f["science_percentage"]) / 100) * 0.3
    ) * ACADEMIC_WEIGHT

    attendance_engagement = (
        ((100 - f["attendance"]) / 100) * 0.4
        + (f["absences_last_year"] / 15) * 0.3
        + (f["missed_assignments"] / 10) * 0.3
    ) * ATTENDANCE_WEIGHT

    social_behavioral = (
        (f["behavior_incidents"] / 5) * 0.3
        + ((5 - f["mental_health_score"]) / 5) * 0.4
        + ((5 - f["peer_relationships_score"]) / 5) * 0.3
    ) * SOCIAL_WEIGHT

    support = (
        ((5 - f["parent_involvement"]) / 5) * 0.4
        + ((3 - f["extracurricular_activities"]) / 3) * 0.3
        + ((3 - (f["study_group_participation"] + f["tutoring_sessions"])) / 3) * 0.3
    ) * SUPPORT_WEIGHT

    breakdown = RiskBreakdown(academic, attendance_engagement, social_behavioral, support)

    weights = (ACADEMIC_WEIGHT, ATTENDANCE_WEIGHT, SOCIAL_WEIGHT, SUPPORT_WEIGHT)
    for name, value, weight in zip(breakdown._fields, breakdown, weights):
        if not 0 <= value <= weight:
            logger.debug("Component %s=%.2f outside nominal range 0..%d", name, value, weight)

    return breakdown


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def calculate_risk_score(record: Any) -> int:
    """Weighted risk score for one record, rounded half-up to an integer."""
    return round_half_up(component_scores(record).total)


def get_risk_level(score: float) -> RiskLevel:
    if score < MEDIUM_RISK_THRESHOLD:
        return RiskLevel.LOW
    if score < HIGH_RISK_THRESHOLD:
        return RiskLevel.MEDIUM
    return RiskLevel.HIGH


def assess(record: Any) -> Tuple[int, RiskLevel]:
    """Return `(riskScore, riskLevel)` for one record."""
    score = calculate_risk_score(record)
    return score, get_risk_level(score)
