"""User and preference models."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class UserPreferences:
    """Per-user exercise preferences (defaults applied to new users)."""

    show_global_exercises: bool = True
    show_extra_weight: bool = True  # Bodyweight exercises ask for added weight
    prefill_suggested_values: bool = False

    def to_dict(self) -> dict:
        return {
            "show_global_exercises": self.show_global_exercises,
            "show_extra_weight": self.show_extra_weight,
            "prefill_suggested_values": self.prefill_suggested_values,
        }

    @classmethod
    def from_dict(cls, data: dict | None) -> "UserPreferences":
        data = data or {}
        defaults = cls()
        return cls(
            show_global_exercises=data.get("show_global_exercises", defaults.show_global_exercises),
            show_extra_weight=data.get("show_extra_weight", defaults.show_extra_weight),
            prefill_suggested_values=data.get(
                "prefill_suggested_values", defaults.prefill_suggested_values
            ),
        )


@dataclass
class User:
    """A person logging lifts."""

    name: str
    preferences: UserPreferences = field(default_factory=UserPreferences)
    id: int | None = None
    created_at: datetime | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "name": self.name,
            "preferences": self.preferences.to_dict(),
        }

    @classmethod
    def from_dict(
        cls, data: dict, id: int | None = None, created_at: datetime | None = None
    ) -> "User":
        """Create from dictionary."""
        return cls(
            id=id,
            name=data["name"],
            preferences=UserPreferences.from_dict(data.get("preferences")),
            created_at=created_at,
        )
