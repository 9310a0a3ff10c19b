"""
student_risk/pipeline.py

Purpose
-------
The intake boundary: raw input in, enriched canonical records out.

    raw input -> normalize -> validate -> allocate id -> score -> store

Batches are all-or-nothing. A malformed or invalid row rejects the whole batch
before anything reaches the store, and the surfaced error names the first
failing row.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Union

from .exceptions import MalformedInputError, ValidationError
from .identifiers import next_student_id
from .normalize import IntakeBatch, normalize_batch, normalize_csv, normalize_record, parse_json
from .schema import Student
from .store import StudentStore
from .validation import ensure_valid, validate_batch

logger = logging.getLogger(__name__)


class IntakePipeline:
    """
    Runs intake records through normalization, validation, id allocation and
    scoring, then commits them to `store`.

    Parameters
    ----------
    store : StudentStore
        Target collection.
    persist : bool
        When True, each successful submission saves the JSON dataset and
        appends the new rows to the line store (if one is configured). A
        `PersistenceError` from that step propagates; the in-memory add stands.
    """

    def __init__(self, store: StudentStore, persist: bool = False) -> None:
        self.store = store
        self.persist = persist

    # --- public API
    def submit(self, intake: Union[Mapping[str, Any], str]) -> Student:
        """Add a single intake record (a mapping or a JSON object string)."""
        if isinstance(intake, str):
            payload = parse_json(intake)
            if isinstance(payload, list):
                if len(payload) != 1:
                    raise MalformedInputError("Expected a single record, got a batch.")
                payload = payload[0]
            intake = payload

        record = normalize_record(intake)
        ensure_valid(record)
        student = self._build([record])[0]
        self.store.add(student)
        self._persist([student])
        return student

    def submit_batch(self, records: Union[IntakeBatch, str]) -> List[Student]:
        """Add a batch (list of mappings, DataFrame or JSON array string)."""
        if isinstance(records, str):
            payload = parse_json(records)
            records = payload if isinstance(payload, list) else [payload]
        return self._commit(normalize_batch(records))

    def submit_csv(self, text: str) -> List[Student]:
        """Add every row of an intake CSV as one batch."""
        return self._commit(normalize_csv(text))

    # --- internals
    def _commit(self, normalized: List[Dict[str, Any]]) -> List[Student]:
        try:
            validate_batch(normalized)
        except ValidationError as exc:
            logger.warning("Rejecting batch of %d: record %d failed validation", len(normalized), exc.index)
            raise

        students = self._build(normalized)
        self.store.add_many(students)
        logger.info("Added %d students", len(students))
        self._persist(students)
        return students

    def _build(self, normalized: List[Dict[str, Any]]) -> List[Student]:
        used = set(self.store.student_ids())
        used.update(r["student_id"] for r in normalized if "student_id" in r)

        students = []
        for record in normalized:
            record = dict(record)
            if "student_id" not in record:
                record["student_id"] = next_student_id(used)
                used.add(record["student_id"])
            record["grade"] = int(record["grade"])
            students.append(Student.from_dict(record))
        return students

    def _persist(self, students: List[Student]) -> None:
        if not self.persist:
            return
        self.store.save()
        if self.store.append_path is not None:
            for student in students:
                self.store.append_row(student)
