"""Application configuration from environment variables."""

from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Default data directory (next to the source checkout)
DATA_DIR = Path(__file__).parent.parent.parent / "data"


class BandColor(BaseModel):
    """Resistance value and progression order for one band color."""

    resistance: float
    order: int


def _default_band_colors() -> dict[str, BandColor]:
    return {
        "red": BandColor(resistance=10, order=1),
        "blue": BandColor(resistance=20, order=2),
        "green": BandColor(resistance=30, order=3),
    }


class Settings(BaseSettings):
    """Settings loaded from environment (and .env file)."""

    model_config = SettingsConfigDict(
        env_prefix="LIFT_RECORDS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Storage
    data_dir: Path = DATA_DIR
    db_filename: str = "lift_records.db"

    # Logging
    log_level: str = "WARNING"
    log_format: str = "text"  # text or json

    # Display
    weight_unit: str = "lbs"

    # Bands: color -> resistance used for volume/comparison math
    band_colors: dict[str, BandColor] = Field(default_factory=_default_band_colors)
    max_reps_before_band_change: int = 15
    default_reps_on_band_change: int = 8

    # PR detection
    max_rep_specific_reps: int = 10
    detection_max_retries: int = 3
    strict_exercise_types: bool = False

    @property
    def db_path(self) -> Path:
        """Location of the SQLite database file."""
        return self.data_dir / self.db_filename

    def band_resistance(self, color: str | None) -> float:
        """Configured resistance for a band color (0 when unknown)."""
        if not color:
            return 0.0
        band = self.band_colors.get(color.lower())
        return band.resistance if band else 0.0

    def band_for_resistance(self, resistance: float) -> str | None:
        """Reverse lookup: which band color carries this resistance value."""
        for color, band in self.band_colors.items():
            if band.resistance == resistance:
                return color
        return None

    def bands_by_order(self) -> list[str]:
        """Band colors sorted from lightest to heaviest."""
        return sorted(self.band_colors, key=lambda color: self.band_colors[color].order)


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()
