"""
student_risk/make_synthetic_data.py

Creates a realistic-looking synthetic intake file for demos and manual testing.
Rows carry exactly the intake fields, so the file can be fed straight to
`python -m student_risk.cli import`.

Outputs:
  data/intake_synthetic.csv
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd

from .normalize import INTAKE_FIELDS

FIRST_NAMES = [
    "Aarav", "Maya", "Liam", "Sofia", "Noah", "Zara", "Ethan", "Priya",
    "Lucas", "Amara", "Mateo", "Chloe", "Ravi", "Emma", "Omar", "Hana",
]
LAST_NAMES = [
    "Patel", "Garcia", "Nguyen", "Smith", "Okafor", "Kim", "Rossi", "Silva",
    "Khan", "Müller", "Johnson", "Tanaka",
]


def generate_intake_records(
    n_students: int = 200,
    random_state: int = 42,
) -> pd.DataFrame:
    rng = np.random.default_rng(random_state)

    # --- A latent "struggling" factor ties the columns together so the risk
    # levels come out mixed instead of uniformly Medium.
    struggle = np.clip(rng.normal(0.3, 0.2, size=n_students), 0, 1)

    names = [
        f"{rng.choice(FIRST_NAMES)} {rng.choice(LAST_NAMES)}" for _ in range(n_students)
    ]
    grade = rng.integers(5, 11, size=n_students)

    # --- Academic (GPA on 0-10, subject scores on 0-100)
    gpa = np.clip(rng.normal(8.5 - 4 * struggle, 0.8), 0, 10)
    previous_year_gpa = np.clip(gpa + rng.normal(0.2, 0.6, size=n_students), 0, 10)
    math_score = np.clip(rng.normal(88 - 40 * struggle, 8), 0, 100)
    reading_score = np.clip(rng.normal(86 - 35 * struggle, 8), 0, 100)
    science_score = np.clip(rng.normal(87 - 38 * struggle, 8), 0, 100)
    missed_assignments = np.clip(rng.poisson(1 + 8 * struggle), 0, 20)
    late_assignments = np.clip(rng.poisson(1 + 5 * struggle), 0, 20)

    # --- Attendance / engagement
    attendance = np.clip(rng.normal(96 - 30 * struggle, 4), 40, 100)
    absences_last_year = np.clip(rng.poisson(2 + 12 * struggle), 0, 40)

    # --- Behavioral / social (ratings are 1-5)
    behavior_incidents = np.clip(rng.poisson(4 * struggle), 0, 10)
    counselor_visits = np.clip(rng.poisson(3 * struggle), 0, 10)
    mental_health_score = np.clip(np.round(rng.normal(4.5 - 3 * struggle, 0.6)), 1, 5)
    peer_relationships_score = np.clip(np.round(rng.normal(4.4 - 2.5 * struggle, 0.7)), 1, 5)

    # --- Support network
    parent_involvement = np.clip(np.round(rng.normal(4.3 - 2.5 * struggle, 0.8)), 1, 5)
    extracurricular_activities = np.clip(rng.poisson(2.5 - 2 * struggle), 0, 6)
    study_group_participation = np.clip(rng.poisson(1.2, size=n_students), 0, 5)
    tutoring_sessions = np.clip(rng.poisson(0.5 + 2 * struggle), 0, 10)

    df = pd.DataFrame(
        {
            "name": names,
            "grade": grade,
            "attendance": np.round(attendance, 1),
            "gpa": np.round(gpa, 1),
            "missed_assignments": missed_assignments,
            "behavior_incidents": behavior_incidents,
            "counselor_visits": counselor_visits,
            "extracurricular_activities": extracurricular_activities,
            "parent_involvement": parent_involvement.astype(int),
            "previous_year_gpa": np.round(previous_year_gpa, 1),
            "reading_score": np.round(reading_score).astype(int),
            "math_score": np.round(math_score).astype(int),
            "science_score": np.round(science_score).astype(int),
            "absences_last_year": absences_last_year,
            "late_assignments": late_assignments,
            "study_group_participation": study_group_participation,
            "tutoring_sessions": tutoring_sessions,
            "mental_health_score": mental_health_score.astype(int),
            "peer_relationships_score": peer_relationships_score.astype(int),
        }
    )

    return df[INTAKE_FIELDS]


def main() -> None:
    out_dir = Path("data")
    out_dir.mkdir(parents=True, exist_ok=True)

    df = generate_intake_records(n_students=200, random_state=42)
    out_path = out_dir / "intake_synthetic.csv"
    df.to_csv(out_path, index=False)

    print(f"Wrote {len(df)} rows to {out_path}")
    print("Columns:", list(df.columns))


if __name__ == "__main__":
    main()
