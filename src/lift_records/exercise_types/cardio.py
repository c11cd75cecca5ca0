"""Cardio exercise type. The reps field carries distance in meters."""

from ..models.exercises import ExerciseType
from ..models.lift_log import LiftLog
from ..models.records import PRType, PersonalRecord
from ..models.user import User
from .base import ExerciseTypeStrategy
from .validation import FieldRule


class CardioExerciseType(ExerciseTypeStrategy):
    """Distance-based work, tracked as total distance per session."""

    type_name = ExerciseType.CARDIO
    display_name = "Cardio"
    form_fields = ("reps",)
    pr_types = (PRType.VOLUME,)

    def validation_rules(self, user: User | None = None) -> dict[str, FieldRule]:
        return {
            "reps": FieldRule("integer", min_value=1, max_value=100_000),
        }

    def normalize_log_input(self, raw: dict) -> dict:
        data = dict(raw)
        data["weight"] = None
        data["band_color"] = None
        return data

    def current_metrics(self, lift_log: LiftLog) -> dict:
        distances = [s.reps_or_zero for s in lift_log.sets]
        return {
            "total_volume": sum(distances),
            "best_distance": max(distances, default=0),
            "rounds": sum(1 for d in distances if d > 0),
        }

    def unit_for(self, pr_type: PRType, lift_log: LiftLog | None = None) -> str:
        if pr_type == PRType.VOLUME:
            return "m"
        return super().unit_for(pr_type, lift_log)

    def record_label(self, record: PersonalRecord) -> str:
        if record.pr_type == PRType.VOLUME:
            return "Distance"
        return super().record_label(record)

    def format_weight_display(self, lift_log: LiftLog) -> str:
        return f"{lift_log.sets[0].reps_or_zero:,}m"

    def format_logged_item(self, lift_log: LiftLog) -> str:
        rounds = len(lift_log.sets)
        return f"{self.format_weight_display(lift_log)} × {rounds} round" + ("s" if rounds > 1 else "")
