"""Static hold exercise type (planks, hangs, wall sits)."""

from ..models.exercises import ExerciseType
from ..models.lift_log import LiftLog
from ..models.records import PRType
from ..models.user import User
from .base import ExerciseTypeStrategy, format_duration, format_number
from .validation import FieldRule


class StaticHoldExerciseType(ExerciseTypeStrategy):
    """Hold duration in seconds, with optional added weight."""

    type_name = ExerciseType.STATIC_HOLD
    display_name = "Static Hold"
    form_fields = ("hold_seconds", "weight")
    pr_types = (PRType.TIME,)

    def required_form_fields(self) -> frozenset[str]:
        return frozenset({"hold_seconds"})

    def validation_rules(self, user: User | None = None) -> dict[str, FieldRule]:
        return {
            "hold_seconds": FieldRule("integer", min_value=1, max_value=3600),
            "weight": FieldRule("numeric", required=False, min_value=0, max_value=1000, default=0.0),
        }

    def normalize_log_input(self, raw: dict) -> dict:
        data = dict(raw)
        data["band_color"] = None
        data["reps"] = None
        return data

    def current_metrics(self, lift_log: LiftLog) -> dict:
        holds = [s.hold_seconds or 0 for s in lift_log.sets]
        return {
            "best_hold": max(holds, default=0),
            "total_hold": sum(holds),
        }

    def format_weight_display(self, lift_log: LiftLog) -> str:
        best = self.current_metrics(lift_log)["best_hold"]
        text = f"{format_duration(best)} hold"
        if lift_log.has_extra_weight:
            text += f" +{format_number(lift_log.max_weight)} {self.unit}"
        return text

    def format_logged_item(self, lift_log: LiftLog) -> str:
        count = len(lift_log.sets)
        return f"{self.format_weight_display(lift_log)} × {count} set" + ("s" if count > 1 else "")
