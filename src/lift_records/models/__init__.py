"""Data models for lift-records."""

from .display import DisplayRow, RowKind
from .exercises import ChartType, Exercise, ExerciseType
from .lift_log import LiftLog, LiftSet
from .records import DetectionResult, PersonalRecord, PRCandidate, PRType, RecordKey
from .user import User, UserPreferences

__all__ = [
    "ChartType",
    "DetectionResult",
    "DisplayRow",
    "Exercise",
    "ExerciseType",
    "LiftLog",
    "LiftSet",
    "PersonalRecord",
    "PRCandidate",
    "PRType",
    "RecordKey",
    "RowKind",
    "User",
    "UserPreferences",
]
