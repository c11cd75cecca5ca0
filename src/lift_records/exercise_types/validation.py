"""Field rules for validating logged performance input."""

import math
from dataclasses import dataclass
from typing import Any

from ..errors import InvalidPerformanceData

# Fields shown for every exercise type regardless of the strategy's form fields
ESSENTIAL_FIELDS = ("date", "time", "notes")


@dataclass(frozen=True)
class FieldRule:
    """Constraint for a single input field.

    ``kind`` is one of numeric, integer, choice or text.
    """

    kind: str
    required: bool = True
    min_value: float | None = None
    max_value: float | None = None
    choices: tuple[str, ...] = ()
    max_length: int | None = None
    default: Any = None

    def check(self, field: str, value: Any, exercise_type: str | None = None) -> Any:
        """Validate and coerce one value, raising InvalidPerformanceData."""
        if value is None or (isinstance(value, str) and not value.strip()):
            if self.required:
                raise InvalidPerformanceData.missing_field(field, exercise_type)
            return self.default

        if self.kind == "numeric":
            number = self._to_number(field, value, exercise_type)
            self._check_range(field, number, exercise_type)
            return number

        if self.kind == "integer":
            number = self._to_number(field, value, exercise_type)
            if not number.is_integer():
                raise InvalidPerformanceData.invalid_value(
                    field, value, "must be a whole number", exercise_type
                )
            self._check_range(field, number, exercise_type)
            return int(number)

        if self.kind == "choice":
            choice = str(value).strip().lower()
            if choice not in self.choices:
                if field == "band_color":
                    raise InvalidPerformanceData.invalid_band_color(value, list(self.choices))
                raise InvalidPerformanceData.invalid_value(
                    field, value, f"expected one of {', '.join(self.choices)}", exercise_type
                )
            return choice

        text = str(value)
        if self.max_length is not None and len(text) > self.max_length:
            raise InvalidPerformanceData.invalid_value(
                field, value, f"longer than {self.max_length} characters", exercise_type
            )
        return text

    def _to_number(self, field: str, value: Any, exercise_type: str | None) -> float:
        if isinstance(value, bool):
            raise InvalidPerformanceData.invalid_value(
                field, value, "must be a number", exercise_type
            )
        try:
            number = float(value)
        except (TypeError, ValueError):
            raise InvalidPerformanceData.invalid_value(
                field, value, "must be a number", exercise_type
            ) from None
        if math.isnan(number) or math.isinf(number):
            raise InvalidPerformanceData.invalid_value(
                field, value, "must be a finite number", exercise_type
            )
        return number

    def _check_range(self, field: str, number: float, exercise_type: str | None) -> None:
        if self.min_value is not None and number < self.min_value:
            raise InvalidPerformanceData.invalid_value(
                field, number, f"must be at least {self.min_value:g}", exercise_type
            )
        if self.max_value is not None and number > self.max_value:
            raise InvalidPerformanceData.invalid_value(
                field, number, f"must be at most {self.max_value:g}", exercise_type
            )


# Merged into every type's rules
COMMON_RULES: dict[str, FieldRule] = {
    "notes": FieldRule("text", required=False, max_length=1000, default=""),
}


def apply_rules(
    rules: dict[str, FieldRule], data: dict, exercise_type: str | None = None
) -> dict:
    """Apply every rule to ``data`` and return a coerced copy.

    Fields without a rule are passed through unchanged.
    """
    cleaned = dict(data)
    for field, rule in rules.items():
        cleaned[field] = rule.check(field, data.get(field), exercise_type)
    return cleaned
