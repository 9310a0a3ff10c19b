import pytest

from student_risk.store import StudentStore


@pytest.fixture
def intake():
    """Intake record with the add-student form's default values."""
    return {
        "name": "Ana Costa",
        "grade": 7,
        "attendance": 100,
        "gpa": 10.0,
        "missed_assignments": 0,
        "behavior_incidents": 0,
        "counselor_visits": 0,
        "extracurricular_activities": 0,
        "parent_involvement": 5,
        "previous_year_gpa": 10.0,
        "reading_score": 100,
        "math_score": 100,
        "science_score": 100,
        "absences_last_year": 0,
        "late_assignments": 0,
        "study_group_participation": 0,
        "tutoring_sessions": 0,
        "mental_health_score": 5,
        "peer_relationships_score": 5,
    }


@pytest.fixture
def canonical():
    """Flat canonical record (no id, no score) as the scoring engine sees it."""
    return {
        "percentage": 100,
        "math_percentage": 100,
        "science_percentage": 100,
        "attendance": 100,
        "absences_last_year": 0,
        "missed_assignments": 0,
        "behavior_incidents": 0,
        "mental_health_score": 5,
        "peer_relationships_score": 5,
        "parent_involvement": 5,
        "extracurricular_activities": 3,
        "study_group_participation": 0,
        "tutoring_sessions": 3,
    }


@pytest.fixture
def store(tmp_path):
    s = StudentStore(tmp_path / "students.json", tmp_path / "data.csv")
    yield s
    s.close()


@pytest.fixture
def make_student(intake):
    """Build a scored Student from intake overrides."""
    from student_risk.normalize import normalize_record
    from student_risk.schema import Student

    def _make(student_id="S001", **overrides):
        record = normalize_record({**intake, **overrides})
        record["student_id"] = student_id
        return Student.from_dict(record)

    return _make
