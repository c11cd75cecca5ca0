"""Exercise definitions and metadata."""

from dataclasses import dataclass, field
from enum import Enum


class ExerciseType(str, Enum):
    """Stored exercise type discriminator."""

    REGULAR = "regular"  # Barbell, dumbbell, machine
    BANDED_RESISTANCE = "banded_resistance"  # Band adds difficulty
    BANDED_ASSISTANCE = "banded_assistance"  # Band removes difficulty
    BODYWEIGHT = "bodyweight"  # Optional extra weight (vest, belt)
    CARDIO = "cardio"  # Reps field holds distance in meters
    STATIC_HOLD = "static_hold"  # Hold duration in seconds


class ChartType(str, Enum):
    """Progress chart classification for an exercise type."""

    ONE_REP_MAX = "one_rep_max"
    VOLUME_PROGRESSION = "volume_progression"
    BODYWEIGHT_PROGRESSION = "bodyweight_progression"


@dataclass
class Exercise:
    """An exercise that can be logged.

    ``exercise_type`` is kept as the raw stored string so that a malformed
    value survives the round trip and can be reported by the resolver.
    A ``user_id`` of None marks a global exercise shared by all users.
    """

    title: str
    exercise_type: str = ExerciseType.REGULAR.value
    user_id: int | None = None
    is_bodyweight: bool = False
    band_type: str | None = None  # resistance or assistance
    aliases: list[str] = field(default_factory=list)
    id: int | None = None

    @property
    def is_global(self) -> bool:
        return self.user_id is None

    def is_visible_to(self, user_id: int, show_global: bool = True) -> bool:
        """Whether a user may log against this exercise."""
        if self.user_id == user_id:
            return True
        return self.is_global and show_global

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "title": self.title,
            "exercise_type": self.exercise_type,
            "user_id": self.user_id,
            "is_bodyweight": self.is_bodyweight,
            "band_type": self.band_type,
            "aliases": self.aliases,
        }

    @classmethod
    def from_dict(cls, data: dict, id: int | None = None) -> "Exercise":
        """Create from dictionary."""
        return cls(
            id=id,
            title=data["title"],
            exercise_type=data.get("exercise_type") or ExerciseType.REGULAR.value,
            user_id=data.get("user_id"),
            is_bodyweight=bool(data.get("is_bodyweight", False)),
            band_type=data.get("band_type"),
            aliases=data.get("aliases", []),
        )


# Global exercise library seeded on init
COMMON_EXERCISES: list[Exercise] = [
    # Free weights
    Exercise(
        title="Bench Press",
        aliases=["Flat Bench Press", "Barbell Bench Press", "BB Bench"],
    ),
    Exercise(
        title="Squat",
        aliases=["Back Squat", "Barbell Squat", "BB Squat"],
    ),
    Exercise(
        title="Deadlift",
        aliases=["Conventional Deadlift", "BB Deadlift"],
    ),
    Exercise(
        title="Overhead Press",
        aliases=["OHP", "Military Press", "Standing Press"],
    ),
    Exercise(
        title="Barbell Row",
        aliases=["Bent Over Row", "BB Row"],
    ),
    Exercise(
        title="Romanian Deadlift",
        aliases=["RDL", "Stiff Leg Deadlift"],
    ),
    Exercise(
        title="Dumbbell Curl",
        aliases=["DB Curl", "Bicep Curl"],
    ),
    # Bodyweight
    Exercise(
        title="Pull-Up",
        exercise_type=ExerciseType.BODYWEIGHT.value,
        is_bodyweight=True,
        aliases=["Pullup", "Pull Up"],
    ),
    Exercise(
        title="Chin-Up",
        exercise_type=ExerciseType.BODYWEIGHT.value,
        is_bodyweight=True,
        aliases=["Chinup", "Chin Up"],
    ),
    Exercise(
        title="Push-Up",
        exercise_type=ExerciseType.BODYWEIGHT.value,
        is_bodyweight=True,
        aliases=["Pushup", "Press-up"],
    ),
    Exercise(
        title="Dip",
        exercise_type=ExerciseType.BODYWEIGHT.value,
        is_bodyweight=True,
        aliases=["Chest Dip", "Parallel Bar Dip"],
    ),
    # Bands
    Exercise(
        title="Band Pull-Apart",
        exercise_type=ExerciseType.BANDED_RESISTANCE.value,
        band_type="resistance",
        aliases=["Pull Apart"],
    ),
    Exercise(
        title="Banded Face Pull",
        exercise_type=ExerciseType.BANDED_RESISTANCE.value,
        band_type="resistance",
        aliases=["Band Face Pull"],
    ),
    Exercise(
        title="Band-Assisted Pull-Up",
        exercise_type=ExerciseType.BANDED_ASSISTANCE.value,
        band_type="assistance",
        aliases=["Assisted Pull-Up", "Banded Pull-Up"],
    ),
    # Holds
    Exercise(
        title="Plank",
        exercise_type=ExerciseType.STATIC_HOLD.value,
        aliases=["Front Plank"],
    ),
    Exercise(
        title="Dead Hang",
        exercise_type=ExerciseType.STATIC_HOLD.value,
        aliases=["Bar Hang"],
    ),
    # Cardio
    Exercise(
        title="Rowing",
        exercise_type=ExerciseType.CARDIO.value,
        aliases=["Row Erg", "Rower"],
    ),
    Exercise(
        title="Run",
        exercise_type=ExerciseType.CARDIO.value,
        aliases=["Running", "Jog"],
    ),
]
