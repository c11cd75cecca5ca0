"""Tests for the exercise type registry."""

import logging

import pytest

from lift_records.errors import UnknownExerciseType
from lift_records.exercise_types import (
    STRATEGY_CLASSES,
    BandedAssistanceExerciseType,
    BandedResistanceExerciseType,
    BodyweightExerciseType,
    ExerciseTypeRegistry,
    RegularExerciseType,
)
from lift_records.models.exercises import Exercise, ExerciseType


class TestExerciseTypeRegistry:
    """Tests for ExerciseTypeRegistry."""

    def test_every_type_has_a_strategy(self, registry):
        """The dispatch table covers the whole enum."""
        assert set(STRATEGY_CLASSES) == set(ExerciseType)
        for exercise_type in ExerciseType:
            assert registry.for_type(exercise_type).type_name == exercise_type

    @pytest.mark.parametrize("exercise_type", list(ExerciseType))
    def test_resolve_known_types(self, registry, exercise_type):
        """Stored keys resolve to their strategy class."""
        exercise = Exercise(title="x", exercise_type=exercise_type.value, id=1)
        strategy = registry.resolve_strict(exercise)
        assert isinstance(strategy, STRATEGY_CLASSES[exercise_type])

    def test_strategies_shared_per_type(self, registry):
        """Two exercises of one type share a strategy instance."""
        first = registry.resolve_safe(Exercise(title="Bench Press", id=1))
        second = registry.resolve_safe(Exercise(title="Squat", id=2))
        assert first is second

    def test_registries_are_independent(self, settings):
        """Each registry builds its own strategies."""
        assert ExerciseTypeRegistry(settings).default is not ExerciseTypeRegistry(settings).default

    def test_case_and_whitespace_tolerated(self, registry):
        """Keys are normalized before lookup."""
        exercise = Exercise(title="x", exercise_type=" Bodyweight ")
        assert isinstance(registry.resolve_strict(exercise), BodyweightExerciseType)

    def test_legacy_inference(self, registry):
        """Rows without a type fall back to the band and bodyweight flags."""
        assert isinstance(
            registry.resolve_strict(Exercise(title="x", exercise_type="", band_type="assistance")),
            BandedAssistanceExerciseType,
        )
        assert isinstance(
            registry.resolve_strict(Exercise(title="x", exercise_type="banded", band_type="resistance")),
            BandedResistanceExerciseType,
        )
        assert isinstance(
            registry.resolve_strict(Exercise(title="x", exercise_type=None, is_bodyweight=True)),
            BodyweightExerciseType,
        )
        assert isinstance(
            registry.resolve_strict(Exercise(title="x", exercise_type="")),
            RegularExerciseType,
        )

    def test_resolve_returns_error_result(self, registry):
        """The non-raising resolve carries the error."""
        resolution = registry.resolve(Exercise(title="x", exercise_type="kettlebell_flow", id=7))
        assert not resolution.ok
        assert resolution.strategy is None
        assert resolution.error.type_key == "kettlebell_flow"
        assert resolution.error.exercise_id == 7

    def test_strict_raises(self, registry):
        """Strict resolution surfaces misconfiguration."""
        with pytest.raises(UnknownExerciseType):
            registry.resolve_strict(Exercise(title="x", exercise_type="banded"))
        with pytest.raises(UnknownExerciseType):
            registry.resolve_strict(Exercise(title="x", exercise_type=42))

    def test_safe_falls_back_and_logs(self, registry, caplog):
        """Lenient resolution falls back to regular and logs a warning."""
        exercise = Exercise(title="x", exercise_type="mystery", id=3)
        with caplog.at_level(logging.WARNING, logger="lift_records.exercise_types.resolver"):
            strategy = registry.resolve_safe(exercise)

        assert isinstance(strategy, RegularExerciseType)
        assert "mystery" in caplog.text
        assert caplog.records[0].lift_exercise_id == 3

    def test_strict_mode_applies_to_writes_only(self, settings):
        """Strict mode rejects unknown types on writes; display stays lenient."""
        registry = ExerciseTypeRegistry(settings.model_copy(update={"strict_exercise_types": True}))
        exercise = Exercise(title="x", exercise_type="mystery")

        with pytest.raises(UnknownExerciseType):
            registry.resolve_for_write(exercise)
        assert isinstance(registry.resolve_safe(exercise), RegularExerciseType)

    def test_lenient_writes_fall_back(self, registry):
        """Without strict mode, writes fall back like display does."""
        exercise = Exercise(title="x", exercise_type="mystery")
        assert isinstance(registry.resolve_for_write(exercise), RegularExerciseType)

    def test_available_types(self, registry):
        """All types are listed."""
        assert registry.available_types() == list(ExerciseType)
