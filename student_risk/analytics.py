"""
student_risk/analytics.py

Cohort-level figures for the dashboard cards and the `summary` command.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional, Union

import pandas as pd

from .schema import CANONICAL_COLUMNS, QUARTERS, Student
from .scoring import RiskLevel

LOW_PERCENTAGE_CUTOFF = 60


def _frame(students: Union[pd.DataFrame, Iterable[Student]]) -> pd.DataFrame:
    if isinstance(students, pd.DataFrame):
        return students
    return pd.DataFrame([s.to_dict() for s in students], columns=CANONICAL_COLUMNS)


def _mean(series: pd.Series) -> Optional[float]:
    if series.empty:
        return None
    return round(float(series.mean()), 2)


def risk_level_counts(students: Union[pd.DataFrame, Iterable[Student]]) -> Dict[str, int]:
    """Count per risk level; every level is present, even at zero."""
    df = _frame(students)
    counts = df["riskLevel"].astype(str).value_counts()
    return {level.value: int(counts.get(level.value, 0)) for level in RiskLevel}


def summarize(students: Union[pd.DataFrame, Iterable[Student]]) -> Dict[str, Any]:
    """
    Headline metrics for a cohort.

    Averages are None for an empty cohort; counts and totals are 0.
    """
    df = _frame(students)

    return {
        "n_students": int(len(df)),
        "risk_levels": risk_level_counts(df),
        "avg_percentage": _mean(df["percentage"]),
        "below_60_percent": int((df["percentage"] < LOW_PERCENTAGE_CUTOFF).sum()),
        "missed_assignments": int(df["missed_assignments"].sum()),
        "avg_attendance": _mean(df["attendance"]),
        "behavior_incidents": int(df["behavior_incidents"].sum()),
        "avg_mental_health": _mean(df["mental_health_score"]),
        "avg_parent_involvement": _mean(df["parent_involvement"]),
        "extracurricular_activities": int(df["extracurricular_activities"].sum()),
    }


def quarterly_trend(student: Student) -> pd.DataFrame:
    """One row per quarter (Q1..Q4) for trend charts."""
    return pd.DataFrame(
        [
            {
                "quarter": f"Q{q}",
                "percentage": quarter.percentage,
                "attendance": quarter.attendance,
                "behavior_incidents": quarter.behavior_incidents,
            }
            for q, quarter in zip(QUARTERS, student.quarters)
        ]
    )
