"""Display row structures handed to presentation code."""

from dataclasses import dataclass
from enum import Enum


class RowKind(str, Enum):
    """What a display row represents."""

    ACHIEVEMENT = "achievement"  # First time logging the exercise
    BEATEN = "beaten"  # Record set by this performance
    CURRENT = "current"  # Standing record with a live comparison
    FOOTER = "footer"  # Link to the history view


@dataclass
class DisplayRow:
    """One line in a record comparison table."""

    label: str
    value: str
    comparison: str | None = None
    kind: RowKind = RowKind.CURRENT
    section: str = ""
    link: str | None = None

    def to_dict(self) -> dict:
        return {
            "label": self.label,
            "value": self.value,
            "comparison": self.comparison,
            "kind": self.kind.value,
            "section": self.section,
            "link": self.link,
        }
