"""Regular (free weight / machine) exercise type."""

from ..models.exercises import ChartType, ExerciseType
from ..models.lift_log import LiftLog
from ..models.records import PRType
from ..models.user import User
from ..services.one_rep_max import best_estimate_for_sets
from .base import ExerciseTypeStrategy, format_number
from .validation import FieldRule


class RegularExerciseType(ExerciseTypeStrategy):
    """Weight and reps. Also the fallback for unresolvable types."""

    type_name = ExerciseType.REGULAR
    display_name = "Weighted"
    chart_type = ChartType.ONE_REP_MAX
    supports_1rm = True
    form_fields = ("weight", "reps")
    pr_types = (
        PRType.ONE_RM,
        PRType.VOLUME,
        PRType.REP_SPECIFIC,
        PRType.HYPERTROPHY,
    )

    def validation_rules(self, user: User | None = None) -> dict[str, FieldRule]:
        return {
            "weight": FieldRule("numeric", min_value=0, max_value=2000),
            "reps": FieldRule("integer", min_value=1, max_value=100),
        }

    def normalize_log_input(self, raw: dict) -> dict:
        data = dict(raw)
        data["band_color"] = None
        return data

    def current_metrics(self, lift_log: LiftLog) -> dict:
        weight_reps: dict[float, int] = {}
        for lift_set in lift_log.sets:
            weight = lift_set.weight_or_zero
            if weight > 0 and lift_set.reps_or_zero > 0:
                weight_reps[weight] = max(weight_reps.get(weight, 0), lift_set.reps_or_zero)

        return {
            "best_1rm": best_estimate_for_sets(lift_log.sets),
            "total_volume": sum(s.weight_or_zero * s.reps_or_zero for s in lift_log.sets),
            "total_reps": lift_log.total_reps,
            "rep_weights": self._rep_weights(lift_log),
            "weight_reps": weight_reps,
        }

    def format_weight_display(self, lift_log: LiftLog) -> str:
        return f"{format_number(lift_log.max_weight)} {self.unit}"
