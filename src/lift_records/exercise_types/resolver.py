"""Exercise type registry: maps a stored type key to its strategy.

The registry is built once (usually by the CLI's app context) and passed to
whatever needs it. Strategies are created up front, one per type, so two
exercises of the same type share a strategy instance.
"""

import logging
from dataclasses import dataclass

from ..config import Settings
from ..errors import UnknownExerciseType
from ..models.exercises import Exercise, ExerciseType
from .banded import BandedAssistanceExerciseType, BandedResistanceExerciseType
from .base import ExerciseTypeStrategy
from .bodyweight import BodyweightExerciseType
from .cardio import CardioExerciseType
from .regular import RegularExerciseType
from .static_hold import StaticHoldExerciseType

logger = logging.getLogger(__name__)

STRATEGY_CLASSES: dict[ExerciseType, type[ExerciseTypeStrategy]] = {
    ExerciseType.REGULAR: RegularExerciseType,
    ExerciseType.BANDED_RESISTANCE: BandedResistanceExerciseType,
    ExerciseType.BANDED_ASSISTANCE: BandedAssistanceExerciseType,
    ExerciseType.BODYWEIGHT: BodyweightExerciseType,
    ExerciseType.CARDIO: CardioExerciseType,
    ExerciseType.STATIC_HOLD: StaticHoldExerciseType,
}

# Older rows stored a bare "banded" type and kept the subtype in band_type
LEGACY_BAND_TYPES = {
    "resistance": ExerciseType.BANDED_RESISTANCE,
    "assistance": ExerciseType.BANDED_ASSISTANCE,
}


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving an exercise: a strategy or the reason there is none."""

    strategy: ExerciseTypeStrategy | None = None
    error: UnknownExerciseType | None = None

    @property
    def ok(self) -> bool:
        return self.strategy is not None


class ExerciseTypeRegistry:
    """Fixed dispatch table from ExerciseType to strategy instance."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self._strategies: dict[ExerciseType, ExerciseTypeStrategy] = {
            exercise_type: cls(settings) for exercise_type, cls in STRATEGY_CLASSES.items()
        }

    @property
    def default(self) -> ExerciseTypeStrategy:
        return self._strategies[ExerciseType.REGULAR]

    def available_types(self) -> list[ExerciseType]:
        return list(self._strategies)

    def for_type(self, exercise_type: ExerciseType) -> ExerciseTypeStrategy:
        return self._strategies[exercise_type]

    @staticmethod
    def type_key(exercise: Exercise) -> ExerciseType:
        """Parse the stored type, inferring it for legacy rows.

        Raises UnknownExerciseType for anything that cannot be mapped.
        """
        raw = exercise.exercise_type
        if isinstance(raw, ExerciseType):
            return raw
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            if exercise.band_type in LEGACY_BAND_TYPES:
                return LEGACY_BAND_TYPES[exercise.band_type]
            if exercise.is_bodyweight:
                return ExerciseType.BODYWEIGHT
            return ExerciseType.REGULAR
        if not isinstance(raw, str):
            raise UnknownExerciseType(raw, exercise.id)

        key = raw.strip().lower()
        if key == "banded" and exercise.band_type in LEGACY_BAND_TYPES:
            return LEGACY_BAND_TYPES[exercise.band_type]
        try:
            return ExerciseType(key)
        except ValueError:
            raise UnknownExerciseType(raw, exercise.id) from None

    def resolve(self, exercise: Exercise) -> Resolution:
        """Resolve without raising; the error is carried in the result."""
        try:
            exercise_type = self.type_key(exercise)
        except UnknownExerciseType as exc:
            return Resolution(error=exc)
        return Resolution(strategy=self._strategies[exercise_type])

    def resolve_strict(self, exercise: Exercise) -> ExerciseTypeStrategy:
        """Resolve for authoring paths, raising UnknownExerciseType."""
        resolution = self.resolve(exercise)
        if resolution.error is not None:
            raise resolution.error
        return resolution.strategy

    def resolve_for_write(self, exercise: Exercise) -> ExerciseTypeStrategy:
        """Resolve for logging and detection.

        Strict when ``strict_exercise_types`` is set, lenient otherwise.
        """
        if self.settings.strict_exercise_types:
            return self.resolve_strict(exercise)
        return self.resolve_safe(exercise)

    def resolve_safe(self, exercise: Exercise) -> ExerciseTypeStrategy:
        """Resolve for calculation and display, falling back to regular.

        Never raises. Every fallback is logged so misconfigured exercises
        stay visible.
        """
        resolution = self.resolve(exercise)
        if resolution.ok:
            return resolution.strategy
        logger.warning(
            "Falling back to regular exercise type for exercise %s: %s",
            exercise.id,
            resolution.error,
            extra={
                "lift_exercise_id": exercise.id,
                "lift_exercise_type": exercise.exercise_type,
            },
        )
        return self.default
