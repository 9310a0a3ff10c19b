import json

import pytest

from student_risk.exceptions import PersistenceError, ValidationError
from student_risk.schema import CANONICAL_COLUMNS
from student_risk.scoring import RiskLevel
from student_risk.store import StudentStore, format_row


def test_add_preserves_insertion_order(store, make_student):
    store.add(make_student("S002"))
    store.add(make_student("S001"))
    assert store.student_ids() == ["S002", "S001"]
    assert len(store) == 2


def test_add_accepts_flat_mapping_and_rescores(store, make_student):
    row = make_student().to_dict()
    row["riskScore"] = 77
    added = store.add(row)
    assert added.risk_score == 6
    assert store.get("S001") == added


def test_duplicate_id_rejected(store, make_student):
    store.add(make_student("S001"))
    with pytest.raises(ValidationError) as excinfo:
        store.add(make_student("S001", name="Someone Else"))
    assert "student_id" in excinfo.value.errors
    assert len(store) == 1


def test_add_many_is_atomic(store, make_student):
    store.add(make_student("S001"))
    with pytest.raises(ValidationError) as excinfo:
        store.add_many([make_student("S002"), make_student("S001"), make_student("S003")])
    assert excinfo.value.index == 1
    assert store.student_ids() == ["S001"]


def test_add_many_rejects_duplicates_within_batch(store, make_student):
    with pytest.raises(ValidationError):
        store.add_many([make_student("S001"), make_student("S001")])
    assert len(store) == 0


def test_replace_all_and_reset(store, make_student):
    store.add(make_student("S001"))
    store.replace_all([make_student("S010"), make_student("S011")])
    assert store.student_ids() == ["S010", "S011"]
    store.reset()
    assert len(store) == 0


def test_filter_by_level(store, make_student):
    store.add(make_student("S001"))
    store.add(make_student("S002", gpa=3, math_score=30, science_score=30, attendance=40,
                           absences_last_year=15, missed_assignments=10, behavior_incidents=5,
                           mental_health_score=1, peer_relationships_score=1, parent_involvement=1))
    assert [s.student_id for s in store.filter_by_level("High")] == ["S002"]
    assert [s.student_id for s in store.filter_by_level(RiskLevel.LOW)] == ["S001"]
    assert len(store.filter_by_level("All")) == 2


def test_students_is_a_snapshot(store, make_student):
    snapshot = store.students
    store.add(make_student())
    assert snapshot == []


def test_to_frame(store, make_student):
    store.add(make_student("S001"))
    frame = store.to_frame()
    assert list(frame.columns) == CANONICAL_COLUMNS
    assert frame.loc[0, "riskScore"] == 6


def test_json_round_trip(tmp_path, store, make_student):
    store.add(make_student("S001", name="Ana Costa"))
    store.add(make_student("S002", name="Liam Kim", gpa=6.5, attendance=88.5))
    store.add(make_student("S003", name="Maya Patel", behavior_incidents=2))
    store.save()

    reloaded = StudentStore(tmp_path / "students.json")
    reloaded.load()
    assert reloaded.students == store.students


def test_save_writes_list_of_objects(tmp_path, store, make_student):
    store.add(make_student("S001"))
    store.save()
    payload = json.loads((tmp_path / "students.json").read_text())
    assert isinstance(payload, list)
    assert payload[0]["student_id"] == "S001"
    assert payload[0]["riskLevel"] == "Low"


def test_load_missing_file_is_empty(store):
    assert store.load() == []
    assert len(store) == 0


def test_load_corrupt_file_raises_and_keeps_memory(tmp_path, store, make_student):
    store.add(make_student("S001"))
    (tmp_path / "students.json").write_text("{ not json")
    with pytest.raises(PersistenceError):
        store.load()
    assert store.student_ids() == ["S001"]


def test_load_invalid_record_raises(tmp_path, store):
    (tmp_path / "students.json").write_text(json.dumps([{"student_id": "S001"}]))
    with pytest.raises(PersistenceError):
        store.load()


def test_save_failure_keeps_memory(tmp_path, make_student):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("")
    store = StudentStore(blocker / "students.json")
    store.add(make_student("S001"))

    with pytest.raises(PersistenceError):
        store.save()
    assert store.student_ids() == ["S001"]


def test_append_writes_header_then_rows(tmp_path, store, make_student):
    store.append_row(make_student("S001"))
    store.append_row(make_student("S002"))

    lines = (tmp_path / "data.csv").read_text().split("\n")
    assert lines[0] == ",".join(CANONICAL_COLUMNS)
    assert lines[1].startswith("S001,Ana Costa,7,")
    assert lines[2].startswith("S002,")
    assert len(lines) == 3


def test_append_does_not_rewrite_existing_lines(tmp_path, store, make_student):
    path = tmp_path / "data.csv"
    store.append_row(make_student("S001"))
    before = path.read_text()
    store.append_row(make_student("S002"))
    assert path.read_text().startswith(before + "\n")


def test_append_then_reload(tmp_path, store, make_student):
    first = make_student("S001")
    second = make_student("S002", name="Costa, Ana \"Jr\"", gpa=7.3, attendance=91.5)
    store.append_row(first)
    store.append_line(format_row(second))

    reloaded = StudentStore(tmp_path / "students.json", tmp_path / "data.csv")
    reloaded.load_rows()
    assert reloaded.students == [first, second]
    assert reloaded.get("S002").name == 'Costa, Ana "Jr"'


def test_append_then_reload_keeps_text_fields_verbatim(tmp_path, store, make_student):
    student = make_student("007", name="1e3")
    store.append_row(student)

    reloaded = StudentStore(tmp_path / "students.json", tmp_path / "data.csv")
    reloaded.load_rows()
    assert (reloaded.students[0].student_id, reloaded.students[0].name) == ("007", "1e3")
    assert reloaded.students == [student]


def test_load_rows_missing_file_is_empty(store):
    assert store.load_rows() == []


def test_load_rows_rejects_corrupt_rows(tmp_path, store):
    (tmp_path / "data.csv").write_text(",".join(CANONICAL_COLUMNS) + "\nS001,oops")
    with pytest.raises(PersistenceError):
        store.load_rows()


def test_append_without_line_store(tmp_path, make_student):
    store = StudentStore(tmp_path / "students.json")
    with pytest.raises(PersistenceError):
        store.append_row(make_student())


def test_append_failure_raises_persistence_error(tmp_path, make_student):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("")
    store = StudentStore(tmp_path / "students.json", blocker / "data.csv")
    with pytest.raises(PersistenceError):
        store.append_row(make_student())


def test_closed_store_rejects_mutation(tmp_path, make_student):
    with StudentStore(tmp_path / "students.json") as store:
        store.add(make_student())
    assert len(store) == 0
    with pytest.raises(RuntimeError):
        store.add(make_student("S002"))
