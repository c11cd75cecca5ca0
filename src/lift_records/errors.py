"""Exceptions raised by lift-records."""

from typing import Any


class LiftRecordsError(Exception):
    """Base class for all lift-records errors."""


class InvalidPerformanceData(LiftRecordsError, ValueError):
    """A logged performance is missing a field or carries an unusable value."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
        exercise_type: str | None = None,
    ):
        super().__init__(message)
        self.field = field
        self.value = value
        self.exercise_type = exercise_type

    @classmethod
    def missing_field(cls, field: str, exercise_type: str | None) -> "InvalidPerformanceData":
        type_text = exercise_type or "unknown"
        return cls(
            f"Field '{field}' is required for {type_text} exercises",
            field=field,
            exercise_type=exercise_type,
        )

    @classmethod
    def invalid_value(
        cls, field: str, value: Any, reason: str, exercise_type: str | None = None
    ) -> "InvalidPerformanceData":
        return cls(
            f"Invalid value {value!r} for '{field}': {reason}",
            field=field,
            value=value,
            exercise_type=exercise_type,
        )

    @classmethod
    def invalid_band_color(cls, color: Any, available: list[str]) -> "InvalidPerformanceData":
        return cls(
            f"Unknown band color {color!r} (expected one of: {', '.join(available)})",
            field="band_color",
            value=color,
        )


class UnknownExerciseType(LiftRecordsError, LookupError):
    """An exercise carries a type discriminator with no registered strategy."""

    def __init__(self, type_key: Any, exercise_id: int | None = None):
        super().__init__(f"Unknown exercise type: {type_key!r}")
        self.type_key = type_key
        self.exercise_id = exercise_id


class UnsupportedOperation(LiftRecordsError):
    """The exercise type does not support the requested calculation."""

    @classmethod
    def for_1rm(cls, type_name: str) -> "UnsupportedOperation":
        return cls(f"1RM calculation is not supported for {type_name} exercises")


class PRStoreConflict(LiftRecordsError):
    """The current-record slot changed while a detection run was writing."""

    def __init__(self, message: str, key: tuple | None = None):
        super().__init__(message)
        self.key = key
