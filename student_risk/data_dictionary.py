"""
student_risk/data_dictionary.py

Column -> description, shown under the student table in the dashboard.
"""

from .schema import QUARTER_COLUMNS

DATA_DICTIONARY = {
    "student_id": "Unique identifier, S followed by a zero-padded counter (e.g. S001). Assigned once.",
    "name": "Student name.",
    "grade": "Grade level (1–12; the intake form offers 5–10).",
    "attendance": "Attendance rate this year (0–100).",
    "percentage": "Overall percentage (0–100), derived from GPA × 10.",
    "gpa": "Current GPA on a 0–10 scale, when the record came from GPA intake.",
    "missed_assignments": "Count of missed assignments.",
    "behavior_incidents": "Count of behavior incidents this year.",
    "counselor_visits": "Count of counselor visits.",
    "extracurricular_activities": "Number of extracurricular activities.",
    "parent_involvement": "Parent involvement rating (1–5).",
    "previous_year_percentage": "Last year's overall percentage (0–100), derived from previous-year GPA × 10.",
    "english_percentage": "English / reading score (0–100).",
    "math_percentage": "Math score (0–100).",
    "science_percentage": "Science score (0–100).",
    "absences_last_year": "Count of absences last year.",
    "late_assignments": "Count of late assignments.",
    "study_group_participation": "Number of study groups attended.",
    "tutoring_sessions": "Number of tutoring sessions attended.",
    "mental_health_score": "Mental health rating (1–5, higher is better).",
    "peer_relationships_score": "Peer relationships rating (1–5, higher is better).",
    "riskScore": "Weighted risk score (nominally 0–100, higher means more at risk).",
    "riskLevel": "Low (< 30), Medium (30–59) or High (>= 60), derived from riskScore.",
}

for _column in QUARTER_COLUMNS:
    _quarter, _metric = _column.split("_", 1)
    DATA_DICTIONARY[_column] = f"{_quarter.upper()} snapshot of {_metric.replace('_', ' ')}."
