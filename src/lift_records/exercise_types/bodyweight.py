"""Bodyweight exercise type (optional extra weight)."""

from dataclasses import replace

from ..models.exercises import ChartType, ExerciseType
from ..models.lift_log import LiftLog
from ..models.records import PersonalRecord, PRCandidate, PRType
from ..models.user import User
from .base import ExerciseTypeStrategy, format_number
from .validation import FieldRule

# Volume discriminators: rep counts and weight × reps are separate chains
REPS_VOLUME = 0.0
WEIGHTED_VOLUME = 1.0


class BodyweightExerciseType(ExerciseTypeStrategy):
    """Reps against body weight; ``weight`` is added load (vest, dip belt).

    One-rep max and rep-specific records only apply to performances that
    carry extra weight. Without it, volume is the plain rep count, tracked
    apart from weighted volume so reps are never compared with pounds.
    """

    type_name = ExerciseType.BODYWEIGHT
    display_name = "Bodyweight"
    chart_type = ChartType.BODYWEIGHT_PROGRESSION
    supports_1rm = True
    form_fields = ("weight", "reps")
    pr_types = (PRType.ONE_RM, PRType.VOLUME, PRType.REP_SPECIFIC)

    def required_form_fields(self) -> frozenset[str]:
        return frozenset({"reps"})

    def form_fields_for(self, user: User | None = None) -> tuple[str, ...]:
        if user is not None and not user.preferences.show_extra_weight:
            return ("reps",)
        return self.form_fields

    def validation_rules(self, user: User | None = None) -> dict[str, FieldRule]:
        # Extra weight is asked for (and so required) only when the user shows it
        show_extra = user is None or user.preferences.show_extra_weight
        return {
            "weight": FieldRule(
                "numeric", required=show_extra, min_value=0, max_value=1000, default=0.0
            ),
            "reps": FieldRule("integer", min_value=1, max_value=100),
        }

    def normalize_log_input(self, raw: dict) -> dict:
        data = dict(raw)
        data["band_color"] = None
        return data

    def normalize_exercise_input(self, raw: dict) -> dict:
        data = super().normalize_exercise_input(raw)
        data["is_bodyweight"] = True
        return data

    def applicable_pr_types(self, lift_log: LiftLog | None = None) -> tuple[PRType, ...]:
        if lift_log is not None and lift_log.has_extra_weight:
            return self.pr_types
        return (PRType.VOLUME,)

    @staticmethod
    def volume_kind(lift_log: LiftLog) -> float:
        return WEIGHTED_VOLUME if lift_log.has_extra_weight else REPS_VOLUME

    def current_metrics(self, lift_log: LiftLog) -> dict:
        metrics: dict = {
            "total_reps": lift_log.total_reps,
            "volume_kind": self.volume_kind(lift_log),
        }
        if lift_log.has_extra_weight:
            metrics["total_volume"] = sum(
                s.weight_or_zero * s.reps_or_zero for s in lift_log.sets
            )
            metrics["best_1rm"] = max(
                self.calculate_1rm(s.weight_or_zero, s.reps_or_zero) for s in lift_log.sets
            )
            metrics["rep_weights"] = self._rep_weights(lift_log)
        else:
            metrics["total_volume"] = lift_log.total_reps
        return metrics

    def candidates(self, lift_log: LiftLog) -> list[PRCandidate]:
        kind = self.volume_kind(lift_log)
        return [
            replace(candidate, discriminator=kind)
            if candidate.pr_type == PRType.VOLUME
            else candidate
            for candidate in super().candidates(lift_log)
        ]

    def comparison_value(self, record: PersonalRecord, metrics: dict) -> float | None:
        if record.pr_type == PRType.VOLUME and record.discriminator != metrics.get("volume_kind"):
            return None
        return super().comparison_value(record, metrics)

    def unit_for(self, pr_type: PRType, lift_log: LiftLog | None = None) -> str:
        if pr_type == PRType.VOLUME and (lift_log is None or not lift_log.has_extra_weight):
            return "reps"
        return super().unit_for(pr_type, lift_log)

    def record_unit(self, record: PersonalRecord, lift_log: LiftLog | None = None) -> str:
        if record.pr_type == PRType.VOLUME and record.discriminator is not None:
            return self.unit if record.discriminator == WEIGHTED_VOLUME else "reps"
        return super().record_unit(record, lift_log)

    def record_label(self, record: PersonalRecord) -> str:
        if record.pr_type == PRType.VOLUME and record.discriminator == WEIGHTED_VOLUME:
            return "Weighted Volume"
        return super().record_label(record)

    def format_weight_display(self, lift_log: LiftLog) -> str:
        if lift_log.has_extra_weight:
            return f"Bodyweight +{format_number(lift_log.max_weight)} {self.unit}"
        return "Bodyweight"

    def format_logged_item(self, lift_log: LiftLog) -> str:
        first = lift_log.sets[0]
        reps_sets = f"{len(lift_log.sets)} x {first.reps_or_zero}"
        if not lift_log.has_extra_weight:
            return reps_sets
        return f"{self.format_weight_display(lift_log)} × {reps_sets}"
