import pytest

from student_risk.analytics import quarterly_trend, risk_level_counts, summarize


def test_summarize_empty_cohort():
    metrics = summarize([])
    assert metrics["n_students"] == 0
    assert metrics["risk_levels"] == {"Low": 0, "Medium": 0, "High": 0}
    assert metrics["avg_percentage"] is None
    assert metrics["behavior_incidents"] == 0


def test_summarize(make_student):
    students = [
        make_student("S001"),
        make_student("S002", gpa=5, math_score=50, science_score=50, attendance=50, missed_assignments=2),
        make_student("S003", gpa=4, attendance=80, behavior_incidents=3, extracurricular_activities=2),
    ]
    metrics = summarize(students)

    assert metrics["n_students"] == 3
    assert metrics["risk_levels"]["Low"] + metrics["risk_levels"]["Medium"] + metrics["risk_levels"]["High"] == 3
    assert metrics["avg_percentage"] == pytest.approx(63.33, abs=0.01)
    assert metrics["below_60_percent"] == 2
    assert metrics["missed_assignments"] == 2
    assert metrics["avg_attendance"] == pytest.approx(76.67, abs=0.01)
    assert metrics["behavior_incidents"] == 3
    assert metrics["extracurricular_activities"] == 2


def test_risk_level_counts_from_frame(store, make_student):
    store.add(make_student("S001"))
    store.add(make_student("S002", gpa=5, math_score=50, science_score=50, attendance=50))
    assert risk_level_counts(store.to_frame()) == {"Low": 1, "Medium": 1, "High": 0}


def test_quarterly_trend(make_student):
    trend = quarterly_trend(make_student(gpa=7, attendance=90, behavior_incidents=1))
    assert list(trend["quarter"]) == ["Q1", "Q2", "Q3", "Q4"]
    assert list(trend["attendance"]) == [90, 90, 90, 90]
    assert list(trend["behavior_incidents"]) == [1, 1, 1, 1]
