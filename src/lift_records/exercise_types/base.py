"""Exercise type strategy base class.

Each exercise type (regular, banded, bodyweight, ...) decides how its input
is validated and normalized, which personal record categories apply, how
metrics are computed from a logged performance, and how records render.
"""

from abc import ABC, abstractmethod
from typing import ClassVar

from ..config import Settings
from ..errors import UnsupportedOperation
from ..models.display import DisplayRow, RowKind
from ..models.exercises import ChartType, ExerciseType
from ..models.lift_log import LiftLog, LiftSet
from ..models.records import PersonalRecord, PRCandidate, PRType
from ..models.user import User
from ..services.one_rep_max import estimate_one_rep_max
from .validation import COMMON_RULES, ESSENTIAL_FIELDS, FieldRule, apply_rules

# Metric names holding a single candidate value per PR type
SCALAR_METRICS = {
    PRType.ONE_RM: "best_1rm",
    PRType.VOLUME: "total_volume",
    PRType.TIME: "best_hold",
}

# Metric names holding {discriminator: value} per PR type
KEYED_METRICS = {
    PRType.REP_SPECIFIC: "rep_weights",
    PRType.HYPERTROPHY: "weight_reps",
}


def format_number(value: float) -> str:
    """Format a weight: one decimal place, dropped when whole."""
    rounded = round(float(value), 1)
    if rounded == int(rounded):
        return f"{int(rounded):,}"
    return f"{rounded:,.1f}"


def format_duration(seconds: float) -> str:
    """Format a hold duration, e.g. 45s, 1m, 1m 30s."""
    seconds = int(seconds)
    if seconds < 60:
        return f"{seconds}s"
    minutes, remainder = divmod(seconds, 60)
    if remainder == 0:
        return f"{minutes}m"
    return f"{minutes}m {remainder}s"


class ExerciseTypeStrategy(ABC):
    """Type-specific behavior for one exercise type."""

    type_name: ClassVar[ExerciseType]
    display_name: ClassVar[str] = ""
    chart_type: ClassVar[ChartType] = ChartType.VOLUME_PROGRESSION
    supports_1rm: ClassVar[bool] = False
    form_fields: ClassVar[tuple[str, ...]] = ()
    pr_types: ClassVar[tuple[PRType, ...]] = ()

    def __init__(self, settings: Settings):
        self.settings = settings

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.type_name.value}>"

    @property
    def unit(self) -> str:
        return self.settings.weight_unit

    # -- capabilities ---------------------------------------------------

    def can_calculate_1rm(self) -> bool:
        return self.supports_1rm

    def get_chart_type(self) -> ChartType:
        return self.chart_type

    def required_form_fields(self) -> frozenset[str]:
        return frozenset(self.form_fields)

    def form_fields_for(self, user: User | None = None) -> tuple[str, ...]:
        """Form fields to show for a user, in display order."""
        return self.form_fields

    def presentation_fields(self, user: User | None = None) -> list[str]:
        """Form fields plus the essential fields every exercise shows."""
        fields = list(self.form_fields_for(user))
        fields.extend(f for f in ESSENTIAL_FIELDS if f not in fields)
        return fields

    def applicable_pr_types(self, lift_log: LiftLog | None = None) -> tuple[PRType, ...]:
        return self.pr_types

    # -- input ------------------------------------------------------------

    @abstractmethod
    def validation_rules(self, user: User | None = None) -> dict[str, FieldRule]:
        """Per-field constraints for one set of this exercise type."""

    @abstractmethod
    def normalize_log_input(self, raw: dict) -> dict:
        """Enforce field exclusivity (weight vs band color) on raw set input."""

    def normalize_exercise_input(self, raw: dict) -> dict:
        data = dict(raw)
        data["exercise_type"] = self.type_name.value
        data["is_bodyweight"] = False
        data["band_type"] = None
        return data

    def validate_log_input(self, raw: dict, user: User | None = None) -> dict:
        """Normalize then validate one set's input, returning coerced values."""
        normalized = self.normalize_log_input(raw)
        rules = {**COMMON_RULES, **self.validation_rules(user)}
        return apply_rules(rules, normalized, self.type_name.value)

    def build_set(self, raw: dict, user: User | None = None) -> LiftSet:
        data = self.validate_log_input(raw, user)
        return LiftSet(
            weight=data.get("weight"),
            reps=data.get("reps"),
            hold_seconds=data.get("hold_seconds"),
            band_color=data.get("band_color"),
            notes=data.get("notes") or "",
        )

    # -- metrics ----------------------------------------------------------

    def raw_display_weight(self, lift_set: LiftSet) -> float:
        """Numeric weight used for comparisons of a single set."""
        return lift_set.weight_or_zero

    def calculate_1rm(self, weight: float, reps: int) -> float:
        if not self.can_calculate_1rm():
            raise UnsupportedOperation.for_1rm(self.type_name.value)
        return estimate_one_rep_max(weight, reps)

    @abstractmethod
    def current_metrics(self, lift_log: LiftLog) -> dict:
        """Metric values for one performance (best_1rm, total_volume, ...)."""

    def _rep_weights(self, lift_log: LiftLog, best=max) -> dict[int, float]:
        """Best display weight at each rep count up to the tracked maximum."""
        rep_weights: dict[int, float] = {}
        for lift_set in lift_log.sets:
            reps = lift_set.reps_or_zero
            weight = self.raw_display_weight(lift_set)
            if reps < 1 or reps > self.settings.max_rep_specific_reps or weight <= 0:
                continue
            if reps in rep_weights:
                rep_weights[reps] = best(rep_weights[reps], weight)
            else:
                rep_weights[reps] = weight
        return rep_weights

    def candidates(self, lift_log: LiftLog) -> list[PRCandidate]:
        """Candidate values for every applicable PR category.

        Zero-valued metrics never become records.
        """
        metrics = self.current_metrics(lift_log)
        found: list[PRCandidate] = []
        for pr_type in self.applicable_pr_types(lift_log):
            if pr_type in KEYED_METRICS:
                values = sorted(metrics.get(KEYED_METRICS[pr_type], {}).items())
            else:
                values = [(None, metrics.get(SCALAR_METRICS[pr_type], 0))]
            for discriminator, value in values:
                if value and value > 0:
                    found.append(
                        PRCandidate(
                            pr_type=pr_type,
                            value=float(value),
                            discriminator=None if discriminator is None else float(discriminator),
                        )
                    )
        return found

    def improves(self, pr_type: PRType, candidate: float, existing: float) -> bool:
        """Whether ``candidate`` beats ``existing``. Ties never count."""
        return candidate > existing

    # -- display ----------------------------------------------------------

    def number_text(self, pr_type: PRType, value: float, lift_log: LiftLog | None = None) -> str:
        if pr_type == PRType.HYPERTROPHY:
            return str(int(value))
        if pr_type == PRType.VOLUME:
            return f"{value:,.0f}"
        if pr_type == PRType.TIME:
            return format_duration(value)
        return format_number(value)

    def unit_for(self, pr_type: PRType, lift_log: LiftLog | None = None) -> str:
        if pr_type == PRType.HYPERTROPHY:
            return "reps"
        if pr_type == PRType.TIME:
            return "hold"
        return self.unit

    def format_value(self, pr_type: PRType, value: float, lift_log: LiftLog | None = None) -> str:
        unit = self.unit_for(pr_type, lift_log)
        text = self.number_text(pr_type, value, lift_log)
        return f"{text} {unit}" if unit else text

    def record_unit(self, record: PersonalRecord, lift_log: LiftLog | None = None) -> str:
        """Unit of a stored record's values."""
        return self.unit_for(record.pr_type, lift_log)

    def format_record_value(
        self, record: PersonalRecord, value: float, lift_log: LiftLog | None = None
    ) -> str:
        """A value in a record's category, e.g. its own or its previous value."""
        unit = self.record_unit(record, lift_log)
        text = self.number_text(record.pr_type, value, lift_log)
        return f"{text} {unit}" if unit else text

    def record_label(self, record: PersonalRecord) -> str:
        if record.pr_type == PRType.ONE_RM:
            return "Est 1RM"
        if record.pr_type == PRType.VOLUME:
            return "Volume"
        if record.pr_type == PRType.REP_SPECIFIC:
            count = record.rep_count or 0
            return f"{count} Rep" + ("s" if count > 1 else "")
        if record.pr_type == PRType.HYPERTROPHY:
            return f"Best @ {format_number(record.weight or 0)} {self.unit}"
        return "Hold"

    def format_record_for_display(
        self, record: PersonalRecord, lift_log: LiftLog
    ) -> DisplayRow | None:
        """Row for a record this performance just set.

        Returns None when the row would repeat another one (a real single
        makes the estimated 1RM row redundant next to the "1 Rep" row).
        """
        if record.pr_type == PRType.ONE_RM and lift_log.has_single_rep_set:
            return None

        if record.previous_value is not None:
            unit = self.record_unit(record, lift_log)
            value = (
                f"{self.number_text(record.pr_type, record.previous_value, lift_log)}"
                f" → {self.number_text(record.pr_type, record.value, lift_log)}"
            )
            if unit:
                value = f"{value} {unit}"
        else:
            value = self.format_record_value(record, record.value, lift_log)

        return DisplayRow(
            label=self.record_label(record),
            value=value,
            kind=RowKind.BEATEN,
        )

    def comparison_value(self, record: PersonalRecord, metrics: dict) -> float | None:
        """This performance's value in the record's category, if it has one."""
        if record.pr_type == PRType.HYPERTROPHY:
            # Hypertrophy records carry no live comparison
            return None
        if record.pr_type in KEYED_METRICS:
            keyed = metrics.get(KEYED_METRICS[record.pr_type], {})
            if record.pr_type == PRType.REP_SPECIFIC:
                return keyed.get(record.rep_count)
            return keyed.get(record.discriminator)
        return metrics.get(SCALAR_METRICS[record.pr_type])

    def format_standing_record(
        self, record: PersonalRecord, lift_log: LiftLog, metrics: dict | None = None
    ) -> DisplayRow:
        """Row for a record this performance did not beat, with a live comparison."""
        if metrics is None:
            metrics = self.current_metrics(lift_log)
        current = self.comparison_value(record, metrics)
        return DisplayRow(
            label=self.record_label(record),
            value=self.format_record_value(record, record.value, lift_log),
            comparison=(
                self.format_record_value(record, current, lift_log)
                if current is not None
                else None
            ),
            kind=RowKind.CURRENT,
        )

    @abstractmethod
    def format_weight_display(self, lift_log: LiftLog) -> str:
        """Resistance part of a logged performance summary."""

    def format_logged_item(self, lift_log: LiftLog) -> str:
        """One-line summary such as "135 lbs × 3 x 5"."""
        first = lift_log.sets[0]
        return f"{self.format_weight_display(lift_log)} × {len(lift_log.sets)} x {first.reps_or_zero}"

    def progression_hint(self, lift_log: LiftLog) -> str | None:
        return None
