"""
student_risk/exceptions.py

Error taxonomy for the intake, scoring and storage layers.

None of these are fatal: each one is the discrete outcome of the operation
that raised it, and the caller decides whether to surface it or retry.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional


class StudentRiskError(Exception):
    """Base class for every error raised by this package."""


class MalformedInputError(StudentRiskError, ValueError):
    """Input could not be parsed, or a record is missing required fields."""


class ValidationError(StudentRiskError, ValueError):
    """
    A parsed record violates one or more field constraints.

    Attributes
    ----------
    errors : Dict[str, str]
        Field name -> human-readable violation message (all violations).
    index : Optional[int]
        Position of the offending record inside a batch, or None.
    record : Optional[Mapping[str, Any]]
        The offending record, so a UI can pre-fill a correction form.
    """

    def __init__(
        self,
        errors: Mapping[str, str],
        index: Optional[int] = None,
        record: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.errors: Dict[str, str] = dict(errors)
        self.index = index
        self.record = record
        super().__init__(self._describe())

    def _describe(self) -> str:
        details = "; ".join(f"{field}: {msg}" for field, msg in self.errors.items())
        if self.index is None:
            return f"Invalid student record ({details})"
        return f"Invalid student record at position {self.index} ({details})"


class PersistenceError(StudentRiskError, OSError):
    """Durable storage could not be read or written."""

    def __init__(self, message: str, path: Optional[object] = None) -> None:
        super().__init__(message)
        self.path = path
