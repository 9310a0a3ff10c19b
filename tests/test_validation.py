import pytest

from student_risk.exceptions import ValidationError
from student_risk.normalize import normalize_record
from student_risk.validation import ensure_valid, validate_batch, validate_record


def _normalized(intake, **overrides):
    return normalize_record({**intake, **overrides})


def test_valid_record_has_no_errors(intake):
    assert validate_record(_normalized(intake)) == {}


@pytest.mark.parametrize("name", ["", "   ", None])
def test_name_required(intake, name):
    assert "name" in validate_record(_normalized(intake, name=name))


@pytest.mark.parametrize(
    "field, value",
    [
        ("grade", 0),
        ("grade", 13),
        ("gpa", -0.1),
        ("gpa", 10.5),
        ("previous_year_gpa", 11),
        ("previous_year_gpa", -1),
        ("attendance", 100.5),
        ("attendance", -1),
    ],
)
def test_range_violations(intake, field, value):
    errors = validate_record(_normalized(intake, **{field: value}))
    assert list(errors) == [field]


@pytest.mark.parametrize(
    "field, value",
    [("grade", 1), ("grade", 12), ("gpa", 0), ("gpa", 10), ("attendance", 0), ("attendance", 100)],
)
def test_range_bounds_are_inclusive(intake, field, value):
    assert validate_record(_normalized(intake, **{field: value})) == {}


def test_grade_must_be_whole(intake):
    assert validate_record(_normalized(intake, grade=7.5)) == {"grade": "Must be a whole number."}
    assert validate_record(_normalized(intake, grade=7.0)) == {}


def test_all_violations_collected(intake):
    errors = validate_record(_normalized(intake, name=" ", grade=20, gpa=12, attendance=150))
    assert set(errors) == {"name", "grade", "gpa", "attendance"}
    assert errors["attendance"] == "Must be between 0 and 100."


def test_text_in_numeric_field_reported_under_intake_name(intake):
    errors = validate_record(_normalized(intake, math_score="n/a", tutoring_sessions="many"))
    assert errors == {"math_score": "Must be a number.", "tutoring_sessions": "Must be a number."}


def test_nan_is_not_a_number(intake):
    errors = validate_record(_normalized(intake, late_assignments=float("nan")))
    assert errors == {"late_assignments": "Must be a number."}


def test_ensure_valid_raises_with_mapping(intake):
    with pytest.raises(ValidationError) as excinfo:
        ensure_valid(_normalized(intake, gpa=11))
    assert excinfo.value.errors == {"gpa": "Must be between 0 and 10."}
    assert excinfo.value.index is None


def test_validate_batch_surfaces_first_failure(intake):
    records = [
        _normalized(intake),
        _normalized(intake, grade=0),
        _normalized(intake, attendance=-5),
    ]
    with pytest.raises(ValidationError) as excinfo:
        validate_batch(records)
    assert excinfo.value.index == 1
    assert excinfo.value.record is records[1]
    assert "position 1" in str(excinfo.value)
