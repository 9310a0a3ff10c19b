"""Student risk scoring: intake, validation, scoring and storage."""

from .exceptions import MalformedInputError, PersistenceError, StudentRiskError, ValidationError
from .identifiers import next_student_id
from .pipeline import IntakePipeline
from .schema import Quarter, Student
from .scoring import RiskLevel, calculate_risk_score, get_risk_level
from .store import StudentStore

__all__ = [
    "IntakePipeline",
    "MalformedInputError",
    "PersistenceError",
    "Quarter",
    "RiskLevel",
    "Student",
    "StudentRiskError",
    "StudentStore",
    "ValidationError",
    "calculate_risk_score",
    "get_risk_level",
    "next_student_id",
]
