"""Personal record models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class PRType(str, Enum):
    """Personal record categories."""

    ONE_RM = "one_rm"  # Best estimated one-rep max
    VOLUME = "volume"  # Best total volume in one session
    REP_SPECIFIC = "rep_specific"  # Best weight for N reps (discriminator: rep count)
    HYPERTROPHY = "hypertrophy"  # Most reps at a weight (discriminator: weight)
    TIME = "time"  # Longest hold


# Display order for record tables
PR_TYPE_ORDER = [
    PRType.ONE_RM,
    PRType.REP_SPECIFIC,
    PRType.VOLUME,
    PRType.HYPERTROPHY,
    PRType.TIME,
]


def discriminator_key(discriminator: float | None) -> str:
    """Canonical text form of a discriminator for the current-record slot."""
    if discriminator is None:
        return ""
    value = float(discriminator)
    if value.is_integer():
        return str(int(value))
    return repr(value)


@dataclass(frozen=True)
class RecordKey:
    """Identity of one supersession chain."""

    user_id: int
    exercise_id: int
    pr_type: PRType
    discriminator: float | None = None

    @property
    def discriminator_key(self) -> str:
        return discriminator_key(self.discriminator)

    def as_tuple(self) -> tuple:
        return (self.user_id, self.exercise_id, self.pr_type.value, self.discriminator_key)


@dataclass(frozen=True)
class PRCandidate:
    """A metric value computed from one performance, not yet compared."""

    pr_type: PRType
    value: float
    discriminator: float | None = None

    @property
    def category(self) -> tuple[str, str]:
        return (self.pr_type.value, discriminator_key(self.discriminator))


@dataclass
class PersonalRecord:
    """An achieved record. Rows are append-only; a newer row supersedes at most one older row."""

    user_id: int
    exercise_id: int
    lift_log_id: int
    pr_type: PRType
    value: float
    achieved_at: datetime
    discriminator: float | None = None
    previous_pr_id: int | None = None
    previous_value: float | None = None
    id: int | None = None

    @property
    def key(self) -> RecordKey:
        return RecordKey(self.user_id, self.exercise_id, self.pr_type, self.discriminator)

    @property
    def category(self) -> tuple[str, str]:
        return (self.pr_type.value, discriminator_key(self.discriminator))

    @property
    def is_first_achievement(self) -> bool:
        return self.previous_pr_id is None

    @property
    def rep_count(self) -> int | None:
        if self.pr_type == PRType.REP_SPECIFIC and self.discriminator is not None:
            return int(self.discriminator)
        return None

    @property
    def weight(self) -> float | None:
        if self.pr_type == PRType.HYPERTROPHY:
            return self.discriminator
        return None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "exercise_id": self.exercise_id,
            "lift_log_id": self.lift_log_id,
            "pr_type": self.pr_type.value,
            "discriminator": self.discriminator,
            "value": self.value,
            "achieved_at": self.achieved_at.isoformat(),
            "previous_pr_id": self.previous_pr_id,
            "previous_value": self.previous_value,
        }


@dataclass
class DetectionResult:
    """Outcome of one PR detection run over a lift log."""

    lift_log_id: int
    created: list[PersonalRecord] = field(default_factory=list)
    skipped: bool = False  # Already processed with identical data
    snapshot: dict = field(default_factory=dict)

    @property
    def is_pr(self) -> bool:
        return bool(self.created)

    @property
    def pr_types(self) -> list[str]:
        seen: list[str] = []
        for record in self.created:
            if record.pr_type.value not in seen:
                seen.append(record.pr_type.value)
        return seen
