"""
student_risk/store.py

Purpose
-------
In-memory collection of canonical student records, plus its two durable forms:

  - whole-dataset JSON (list of flat objects), loaded in full and rewritten
    in full on save
  - a line-oriented CSV store: a header line, then one line per student;
    new students are appended as "\\n" + comma-joined values, existing lines
    are never rewritten

A store is an ordinary object with a lifecycle (construct -> load -> mutate ->
save -> close). Nothing is module-global, so tests use isolated instances.

Insertion order is preserved; it is the default display order.
"""

from __future__ import annotations

import csv
import io
import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Union

import pandas as pd

from .exceptions import MalformedInputError, PersistenceError, ValidationError
from .normalize import parse_csv
from .schema import CANONICAL_COLUMNS, TEXT_FIELDS, Student
from .scoring import RiskLevel

logger = logging.getLogger(__name__)

RecordLike = Union[Student, Mapping[str, Any]]


def _as_student(record: RecordLike) -> Student:
    # Student.from_dict recomputes the score, so nothing enters the store with
    # a score that disagrees with its inputs.
    if isinstance(record, Student):
        return record
    return Student.from_dict(record)


def format_row(student: Student) -> str:
    """Serialize one record as a line-store line (no line terminator)."""
    row = student.to_dict()
    cells = ["" if row[c] is None else row[c] for c in CANONICAL_COLUMNS]
    buf = io.StringIO()
    csv.writer(buf, lineterminator="").writerow(cells)
    return buf.getvalue()


class StudentStore:
    """
    Ordered, id-unique collection of `Student` records.

    Parameters
    ----------
    dataset_path : Path
        Whole-dataset JSON file.
    append_path : Path, optional
        Line-oriented CSV store used by `append_line` / `append_row` /
        `load_rows`.
    """

    def __init__(self, dataset_path: Union[str, Path], append_path: Optional[Union[str, Path]] = None) -> None:
        self.dataset_path = Path(dataset_path)
        self.append_path = Path(append_path) if append_path is not None else None
        self._students: List[Student] = []
        self._lock = threading.Lock()
        self._closed = False

    # --- lifecycle
    def __enter__(self) -> "StudentStore":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        """Drop in-memory records. Unsaved changes are discarded."""
        with self._lock:
            self._students = []
            self._closed = True

    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError("StudentStore is closed.")

    # --- reads
    @property
    def students(self) -> List[Student]:
        """Snapshot of the records in insertion order."""
        with self._lock:
            return list(self._students)

    def __len__(self) -> int:
        return len(self._students)

    def __iter__(self) -> Iterator[Student]:
        return iter(self.students)

    def student_ids(self) -> List[str]:
        return [s.student_id for s in self.students]

    def get(self, student_id: str) -> Optional[Student]:
        for student in self.students:
            if student.student_id == student_id:
                return student
        return None

    def filter_by_level(self, level: Union[RiskLevel, str, None]) -> List[Student]:
        """Records at `level`; `None` or "All" returns everything."""
        if level is None or level == "All":
            return self.students
        wanted = RiskLevel(level)
        return [s for s in self.students if s.risk_level is wanted]

    def to_frame(self) -> pd.DataFrame:
        """Flat DataFrame of the current records, columns in line-store order."""
        rows = [s.to_dict() for s in self.students]
        return pd.DataFrame(rows, columns=CANONICAL_COLUMNS)

    # --- mutations
    @staticmethod
    def _check_unique(new: List[Student], existing: Iterable[str]) -> None:
        seen = set(existing)
        for index, student in enumerate(new):
            if student.student_id in seen:
                raise ValidationError(
                    {"student_id": f"Student id {student.student_id} is already in use."},
                    index=index if len(new) > 1 else None,
                    record=student.to_dict(),
                )
            seen.add(student.student_id)

    def add(self, record: RecordLike) -> Student:
        """Insert one record; raises `ValidationError` on a duplicate id."""
        student = _as_student(record)
        with self._lock:
            self._check_open()
            self._check_unique([student], (s.student_id for s in self._students))
            self._students.append(student)
        return student

    def add_many(self, records: Iterable[RecordLike]) -> List[Student]:
        """Insert all records or none of them."""
        new = [_as_student(r) for r in records]
        with self._lock:
            self._check_open()
            self._check_unique(new, (s.student_id for s in self._students))
            self._students.extend(new)
        return new

    def replace_all(self, records: Iterable[RecordLike]) -> None:
        new = [_as_student(r) for r in records]
        self._check_unique(new, ())
        with self._lock:
            self._check_open()
            self._students = new

    def reset(self) -> None:
        with self._lock:
            self._check_open()
            self._students = []

    # --- whole-dataset JSON
    def load(self) -> List[Student]:
        """
        Replace the in-memory records with the JSON dataset on disk.

        A missing file is an empty dataset. An unreadable or corrupt file
        raises `PersistenceError` and leaves the in-memory records untouched.
        """
        path = self.dataset_path
        if not path.exists():
            logger.info("No dataset at %s; starting empty.", path)
            self.replace_all([])
            return []

        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise PersistenceError(f"Could not read dataset {path}: {exc}", path) from exc

        if not isinstance(payload, list):
            raise PersistenceError(f"Dataset {path} is not a list of records.", path)

        try:
            students = [Student.from_dict(item) for item in payload]
            self.replace_all(students)
        except (MalformedInputError, ValidationError, TypeError) as exc:
            raise PersistenceError(f"Dataset {path} holds an invalid record: {exc}", path) from exc

        logger.info("Loaded %d students from %s", len(students), path)
        return students

    def save(self) -> None:
        """Rewrite the whole JSON dataset (temp file + rename)."""
        path = self.dataset_path
        payload = [s.to_dict() for s in self.students]
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=path.name, suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(payload, fh, indent=2)
                os.replace(tmp_name, path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as exc:
            raise PersistenceError(f"Could not save dataset to {path}: {exc}", path) from exc

        logger.info("Saved %d students to %s", len(payload), path)

    # --- line-oriented CSV store
    def _require_append_path(self) -> Path:
        if self.append_path is None:
            raise PersistenceError("No line-oriented store configured.")
        return self.append_path

    def append_line(self, line: str) -> None:
        """
        Append one pre-serialized line. No validation happens here.

        The header line is written first if the file does not exist yet.
        """
        path = self._require_append_path()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            if not path.exists() or path.stat().st_size == 0:
                with path.open("w", encoding="utf-8", newline="") as fh:
                    fh.write(",".join(CANONICAL_COLUMNS))
            with path.open("a", encoding="utf-8", newline="") as fh:
                fh.write("\n" + line)
        except OSError as exc:
            raise PersistenceError(f"Could not append to {path}: {exc}", path) from exc

        logger.info("Appended 1 row to %s", path)

    def append_row(self, student: Student) -> None:
        self.append_line(format_row(student))

    def load_rows(self) -> List[Student]:
        """Replace the in-memory records with the contents of the line store."""
        path = self._require_append_path()
        if not path.exists():
            logger.info("No line store at %s; starting empty.", path)
            self.replace_all([])
            return []

        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise PersistenceError(f"Could not read {path}: {exc}", path) from exc

        if not text.strip():
            self.replace_all([])
            return []

        try:
            students = [Student.from_dict(row) for row in parse_csv(text, text_columns=TEXT_FIELDS)]
            self.replace_all(students)
        except (MalformedInputError, ValidationError, TypeError) as exc:
            raise PersistenceError(f"Line store {path} holds an invalid row: {exc}", path) from exc

        logger.info("Loaded %d students from %s", len(students), path)
        return students

