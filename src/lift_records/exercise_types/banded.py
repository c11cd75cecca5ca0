"""Banded exercise types (resistance and assistance bands).

Bands are logged by color. The color maps to a configured resistance value
that is used for volume and rep-specific comparisons; the UI shows the color.
For assistance bands a lower value means less help, so a rep-specific
record improves when the configured value goes down.
"""

from abc import abstractmethod
from typing import ClassVar

from ..models.exercises import ExerciseType
from ..models.lift_log import LiftLog, LiftSet
from ..models.records import PRType
from ..models.user import User
from .base import ExerciseTypeStrategy
from .validation import FieldRule


class BandedExerciseType(ExerciseTypeStrategy):
    """Shared behavior of both band subtypes."""

    band_type: ClassVar[str]
    form_fields = ("band_color", "reps")
    pr_types = (PRType.VOLUME, PRType.REP_SPECIFIC)

    def validation_rules(self, user: User | None = None) -> dict[str, FieldRule]:
        return {
            "band_color": FieldRule("choice", choices=tuple(self.settings.band_colors)),
            "reps": FieldRule("integer", min_value=1, max_value=100),
        }

    def normalize_log_input(self, raw: dict) -> dict:
        data = dict(raw)
        data["weight"] = None
        if isinstance(data.get("band_color"), str):
            data["band_color"] = data["band_color"].strip().lower() or None
        return data

    def normalize_exercise_input(self, raw: dict) -> dict:
        data = super().normalize_exercise_input(raw)
        data["band_type"] = self.band_type
        return data

    def raw_display_weight(self, lift_set: LiftSet) -> float:
        return self.settings.band_resistance(lift_set.band_color)

    def current_metrics(self, lift_log: LiftLog) -> dict:
        return {
            "total_volume": sum(
                self.raw_display_weight(s) * s.reps_or_zero for s in lift_log.sets
            ),
            "total_reps": lift_log.total_reps,
            "rep_weights": self._rep_weights(lift_log, best=self._best_band),
        }

    def _best_band(self, a: float, b: float) -> float:
        return max(a, b)

    def number_text(self, pr_type: PRType, value: float, lift_log: LiftLog | None = None) -> str:
        if pr_type == PRType.REP_SPECIFIC:
            color = self.settings.band_for_resistance(value)
            if color:
                return color.capitalize()
        return super().number_text(pr_type, value, lift_log)

    def unit_for(self, pr_type: PRType, lift_log: LiftLog | None = None) -> str:
        if pr_type == PRType.REP_SPECIFIC:
            return "band"
        if pr_type == PRType.VOLUME:
            return ""
        return super().unit_for(pr_type, lift_log)

    def _band_color(self, lift_log: LiftLog) -> str | None:
        return lift_log.sets[0].band_color

    def format_weight_display(self, lift_log: LiftLog) -> str:
        color = self._band_color(lift_log)
        if not color:
            return "Band: N/A"
        return f"Band: {color.capitalize()}"

    @abstractmethod
    def _next_band(self, color: str) -> str | None:
        """Band to move to once the rep cap is reached."""

    def progression_hint(self, lift_log: LiftLog) -> str | None:
        color = self._band_color(lift_log)
        if not color or color not in self.settings.band_colors:
            return None
        if lift_log.sets[0].reps_or_zero < self.settings.max_reps_before_band_change:
            return None
        next_band = self._next_band(color)
        if next_band:
            return f"Try {next_band} band with {self.settings.default_reps_on_band_change} reps"
        return None


class BandedResistanceExerciseType(BandedExerciseType):
    """Band adds resistance: heavier band is harder."""

    type_name = ExerciseType.BANDED_RESISTANCE
    display_name = "Resistance Band"
    band_type = "resistance"

    def _next_band(self, color: str) -> str | None:
        order = self.settings.bands_by_order()
        index = order.index(color)
        return order[index + 1] if index + 1 < len(order) else None


class BandedAssistanceExerciseType(BandedExerciseType):
    """Band assists the lift: lighter band is harder."""

    type_name = ExerciseType.BANDED_ASSISTANCE
    display_name = "Assistance Band"
    band_type = "assistance"

    def _best_band(self, a: float, b: float) -> float:
        return min(a, b)

    def improves(self, pr_type: PRType, candidate: float, existing: float) -> bool:
        if pr_type == PRType.REP_SPECIFIC:
            return candidate < existing
        return super().improves(pr_type, candidate, existing)

    def format_weight_display(self, lift_log: LiftLog) -> str:
        display = super().format_weight_display(lift_log)
        if display == "Band: N/A":
            return display
        return f"{display} assistance"

    def _next_band(self, color: str) -> str | None:
        order = self.settings.bands_by_order()
        index = order.index(color)
        return order[index - 1] if index > 0 else None

    def progression_hint(self, lift_log: LiftLog) -> str | None:
        hint = super().progression_hint(lift_log)
        if hint is None and self._is_lightest_at_rep_cap(lift_log):
            return "Try without assistance band"
        return hint

    def _is_lightest_at_rep_cap(self, lift_log: LiftLog) -> bool:
        color = self._band_color(lift_log)
        order = self.settings.bands_by_order()
        return (
            bool(order)
            and color == order[0]
            and lift_log.sets[0].reps_or_zero >= self.settings.max_reps_before_band_change
        )
