"""
student_risk/identifiers.py

Student id allocation: `S` followed by a zero-padded counter (`S001`).
"""

from __future__ import annotations

from typing import Iterable

ID_PREFIX = "S"
ID_WIDTH = 3


def format_student_id(counter: int) -> str:
    # Width is a minimum: S999 is followed by S1000.
    return f"{ID_PREFIX}{counter:0{ID_WIDTH}d}"


def next_student_id(existing_ids: Iterable[str]) -> str:
    """
    Return an id not present in `existing_ids`.

    The counter starts at `len(existing_ids) + 1` and walks upward one step at
    a time until it hits a free id, so ids outside the convention (or gaps
    left by a reset) never cause a collision.
    """
    used = set(existing_ids)
    counter = len(used) + 1
    candidate = format_student_id(counter)
    while candidate in used:
        counter += 1
        candidate = format_student_id(counter)
    return candidate
