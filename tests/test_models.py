"""Tests for data models."""

from datetime import datetime

import pytest

from lift_records.errors import InvalidPerformanceData
from lift_records.models.display import DisplayRow, RowKind
from lift_records.models.exercises import COMMON_EXERCISES, Exercise, ExerciseType
from lift_records.models.lift_log import LiftLog, LiftSet
from lift_records.models.records import (
    DetectionResult,
    PersonalRecord,
    PRCandidate,
    PRType,
    RecordKey,
    discriminator_key,
)
from lift_records.models.user import User, UserPreferences


class TestExercise:
    """Tests for Exercise model."""

    def test_exercise_round_trip(self):
        """Exercise serialization keeps every field."""
        exercise = Exercise(
            title="Band Pull-Apart",
            exercise_type=ExerciseType.BANDED_RESISTANCE.value,
            band_type="resistance",
            aliases=["Pull Apart"],
        )
        restored = Exercise.from_dict(exercise.to_dict(), id=4)

        assert restored.id == 4
        assert restored.title == "Band Pull-Apart"
        assert restored.exercise_type == "banded_resistance"
        assert restored.band_type == "resistance"
        assert restored.aliases == ["Pull Apart"]

    def test_missing_type_defaults_to_regular(self):
        """Rows without a type read as regular."""
        assert Exercise.from_dict({"title": "Squat"}).exercise_type == "regular"

    def test_visibility(self):
        """Global exercises honor the show-global preference."""
        shared = Exercise(title="Squat")
        own = Exercise(title="Zercher Squat", user_id=1)

        assert shared.is_global
        assert shared.is_visible_to(1)
        assert not shared.is_visible_to(1, show_global=False)
        assert own.is_visible_to(1, show_global=False)
        assert not own.is_visible_to(2)

    def test_common_exercises_cover_every_type(self):
        """The seed library has at least one exercise of each type."""
        types = {e.exercise_type for e in COMMON_EXERCISES}
        assert types == {t.value for t in ExerciseType}
        titles = [e.title for e in COMMON_EXERCISES]
        assert "Bench Press" in titles
        assert len(titles) == len(set(titles))


class TestUser:
    """Tests for User and UserPreferences."""

    def test_default_preferences(self):
        """Defaults show globals and extra weight, no prefill."""
        prefs = UserPreferences()
        assert prefs.show_global_exercises
        assert prefs.show_extra_weight
        assert not prefs.prefill_suggested_values

    def test_partial_preferences_fill_defaults(self):
        """Missing preference keys fall back to defaults."""
        prefs = UserPreferences.from_dict({"show_extra_weight": False})
        assert not prefs.show_extra_weight
        assert prefs.show_global_exercises

    def test_user_round_trip(self):
        """User serialization keeps preferences."""
        user = User(name="Sam", preferences=UserPreferences(show_global_exercises=False))
        restored = User.from_dict(user.to_dict(), id=2)
        assert restored.id == 2
        assert restored.name == "Sam"
        assert not restored.preferences.show_global_exercises


class TestLiftLog:
    """Tests for LiftLog and LiftSet."""

    def test_requires_a_set(self):
        """A performance always owns at least one set."""
        with pytest.raises(InvalidPerformanceData):
            LiftLog(user_id=1, exercise_id=1, logged_at=datetime(2024, 1, 1))

    def test_derived_values(self):
        """Totals and flags derive from the sets."""
        lift_log = LiftLog(
            user_id=1,
            exercise_id=1,
            logged_at=datetime(2024, 1, 1),
            sets=[LiftSet(weight=135, reps=5), LiftSet(weight=155, reps=1)],
        )
        assert lift_log.total_reps == 6
        assert lift_log.max_weight == 155
        assert lift_log.has_extra_weight
        assert lift_log.has_single_rep_set

    def test_bodyweight_single_is_not_a_real_single(self):
        """A one-rep set without weight is not a tested max."""
        lift_log = LiftLog(
            user_id=1, exercise_id=1, logged_at=datetime(2024, 1, 1), sets=[LiftSet(reps=1)]
        )
        assert not lift_log.has_single_rep_set
        assert not lift_log.has_extra_weight

    def test_fingerprint_tracks_set_data(self):
        """Editing a set changes the fingerprint; comments do not."""
        base = dict(user_id=1, exercise_id=1, logged_at=datetime(2024, 1, 1))
        first = LiftLog(**base, sets=[LiftSet(weight=135, reps=5)])
        same = LiftLog(**base, sets=[LiftSet(weight=135, reps=5)], comments="felt good")
        edited = LiftLog(**base, sets=[LiftSet(weight=135, reps=6)])

        assert first.fingerprint() == same.fingerprint()
        assert first.fingerprint() != edited.fingerprint()

    def test_round_trip(self):
        """Lift logs serialize with their sets."""
        lift_log = LiftLog(
            user_id=1,
            exercise_id=2,
            logged_at=datetime(2024, 1, 1, 18, 30),
            sets=[LiftSet(band_color="red", reps=12, notes="slow")],
        )
        restored = LiftLog.from_dict(lift_log.to_dict(), id=9)
        assert restored.id == 9
        assert restored.logged_at == datetime(2024, 1, 1, 18, 30)
        assert restored.sets[0].band_color == "red"
        assert restored.sets[0].notes == "slow"


class TestRecords:
    """Tests for personal record models."""

    def test_discriminator_key(self):
        """Whole numbers drop the decimal; None is empty."""
        assert discriminator_key(None) == ""
        assert discriminator_key(5) == "5"
        assert discriminator_key(5.0) == "5"
        assert discriminator_key(132.5) == "132.5"

    def test_record_key(self):
        """Keys for the same category compare equal."""
        assert RecordKey(1, 2, PRType.REP_SPECIFIC, 5) == RecordKey(1, 2, PRType.REP_SPECIFIC, 5.0)
        assert RecordKey(1, 2, PRType.VOLUME).as_tuple() == (1, 2, "volume", "")

    def test_record_accessors(self):
        """rep_count and weight read the discriminator per type."""
        common = dict(user_id=1, exercise_id=1, lift_log_id=1, achieved_at=datetime(2024, 1, 1))
        rep = PersonalRecord(pr_type=PRType.REP_SPECIFIC, value=135, discriminator=5.0, **common)
        hyp = PersonalRecord(pr_type=PRType.HYPERTROPHY, value=8, discriminator=135.0, **common)

        assert rep.rep_count == 5
        assert rep.weight is None
        assert hyp.weight == 135
        assert hyp.rep_count is None
        assert rep.is_first_achievement
        assert rep.category == ("rep_specific", "5")

    def test_candidate_category(self):
        """Candidates and records share category tuples."""
        assert PRCandidate(PRType.HYPERTROPHY, 8, 132.5).category == ("hypertrophy", "132.5")

    def test_detection_result_types(self):
        """pr_types lists each new category type once, in order."""
        common = dict(user_id=1, exercise_id=1, lift_log_id=1, achieved_at=datetime(2024, 1, 1))
        result = DetectionResult(
            lift_log_id=1,
            created=[
                PersonalRecord(pr_type=PRType.REP_SPECIFIC, value=135, discriminator=5, **common),
                PersonalRecord(pr_type=PRType.REP_SPECIFIC, value=155, discriminator=3, **common),
                PersonalRecord(pr_type=PRType.VOLUME, value=900, **common),
            ],
        )
        assert result.is_pr
        assert result.pr_types == ["rep_specific", "volume"]
        assert not DetectionResult(lift_log_id=1).is_pr


class TestDisplayRow:
    """Tests for DisplayRow."""

    def test_to_dict(self):
        """Rows serialize their kind as a string."""
        row = DisplayRow(label="Volume", value="675 lbs", kind=RowKind.BEATEN)
        data = row.to_dict()
        assert data["kind"] == "beaten"
        assert data["comparison"] is None
