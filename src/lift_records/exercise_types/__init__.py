"""Per-type behavior for logged exercises."""

from .banded import BandedAssistanceExerciseType, BandedExerciseType, BandedResistanceExerciseType
from .base import ExerciseTypeStrategy, format_duration, format_number
from .bodyweight import BodyweightExerciseType
from .cardio import CardioExerciseType
from .regular import RegularExerciseType
from .resolver import STRATEGY_CLASSES, ExerciseTypeRegistry, Resolution
from .static_hold import StaticHoldExerciseType

__all__ = [
    "BandedAssistanceExerciseType",
    "BandedExerciseType",
    "BandedResistanceExerciseType",
    "BodyweightExerciseType",
    "CardioExerciseType",
    "ExerciseTypeRegistry",
    "ExerciseTypeStrategy",
    "RegularExerciseType",
    "Resolution",
    "STRATEGY_CLASSES",
    "StaticHoldExerciseType",
    "format_duration",
    "format_number",
]
