"""Logged performance models: a lift log and its sets."""

import hashlib
import json
from dataclasses import dataclass, field
from datetime import datetime

from ..errors import InvalidPerformanceData


@dataclass
class LiftSet:
    """One set within a logged performance.

    ``weight`` is None for banded work, ``reps`` is None for holds. For
    cardio exercises ``reps`` carries the distance in meters.
    """

    weight: float | None = None
    reps: int | None = None
    hold_seconds: int | None = None
    band_color: str | None = None
    notes: str = ""
    id: int | None = None

    @property
    def weight_or_zero(self) -> float:
        return float(self.weight) if self.weight else 0.0

    @property
    def reps_or_zero(self) -> int:
        return int(self.reps) if self.reps else 0

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "weight": self.weight,
            "reps": self.reps,
            "hold_seconds": self.hold_seconds,
            "band_color": self.band_color,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: dict, id: int | None = None) -> "LiftSet":
        """Create from dictionary."""
        return cls(
            id=id,
            weight=data.get("weight"),
            reps=data.get("reps"),
            hold_seconds=data.get("hold_seconds"),
            band_color=data.get("band_color"),
            notes=data.get("notes") or "",
        )


@dataclass
class LiftLog:
    """One user's session on one exercise. Always owns at least one set."""

    user_id: int
    exercise_id: int
    logged_at: datetime
    sets: list[LiftSet] = field(default_factory=list)
    comments: str = ""
    id: int | None = None
    deleted_at: datetime | None = None

    def __post_init__(self):
        if not self.sets:
            raise InvalidPerformanceData(
                "A logged performance needs at least one set", field="sets"
            )

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def total_reps(self) -> int:
        return sum(s.reps_or_zero for s in self.sets)

    @property
    def max_weight(self) -> float:
        return max(s.weight_or_zero for s in self.sets)

    @property
    def has_extra_weight(self) -> bool:
        """True when any set carries weight above zero."""
        return self.max_weight > 0

    @property
    def has_single_rep_set(self) -> bool:
        """True for a real (not estimated) one-rep attempt with weight."""
        return any(s.reps == 1 and s.weight_or_zero > 0 for s in self.sets)

    def fingerprint(self) -> str:
        """Stable hash of the data PR detection depends on.

        Two detection runs over the same fingerprint must produce the
        same result, so the run ledger keys on it.
        """
        payload = {
            "logged_at": self.logged_at.isoformat(),
            "sets": [
                [
                    None if s.weight is None else float(s.weight),
                    None if s.reps is None else int(s.reps),
                    None if s.hold_seconds is None else int(s.hold_seconds),
                    s.band_color,
                ]
                for s in self.sets
            ],
        }
        encoded = json.dumps(payload, sort_keys=True, default=str).encode()
        return hashlib.sha256(encoded).hexdigest()[:32]

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "user_id": self.user_id,
            "exercise_id": self.exercise_id,
            "logged_at": self.logged_at.isoformat(),
            "comments": self.comments,
            "sets": [s.to_dict() for s in self.sets],
        }

    @classmethod
    def from_dict(cls, data: dict, id: int | None = None) -> "LiftLog":
        """Create from dictionary."""
        logged_at = data["logged_at"]
        if isinstance(logged_at, str):
            logged_at = datetime.fromisoformat(logged_at)
        return cls(
            id=id,
            user_id=data["user_id"],
            exercise_id=data["exercise_id"],
            logged_at=logged_at,
            comments=data.get("comments") or "",
            sets=[LiftSet.from_dict(s) for s in data.get("sets", [])],
        )
