"""Write path for logged performances: validate, store, detect, compare."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from ..db.repositories import LiftLogRepository, PersonalRecordRepository
from ..errors import InvalidPerformanceData
from ..exercise_types.resolver import ExerciseTypeRegistry
from ..models.display import DisplayRow
from ..models.exercises import Exercise
from ..models.lift_log import LiftLog
from ..models.records import DetectionResult
from ..models.user import User
from .pr_comparison import PRComparisonAssembler
from .pr_detection import PRDetectionEngine

logger = logging.getLogger(__name__)


@dataclass
class LoggedPerformance:
    """A stored lift log plus what logging it produced."""

    lift_log: LiftLog
    detection: DetectionResult
    rows: list[DisplayRow] = field(default_factory=list)
    hint: str | None = None


class LiftLogService:
    """Records, edits and deletes performances for a user."""

    def __init__(
        self,
        registry: ExerciseTypeRegistry,
        db_path: Path | None = None,
        engine: PRDetectionEngine | None = None,
    ):
        self.registry = registry
        records = PersonalRecordRepository(db_path)
        self.logs = LiftLogRepository(db_path)
        self.engine = engine or PRDetectionEngine(registry, records=records)
        self.assembler = PRComparisonAssembler(registry, records=records, logs=self.logs)

    def build_log(
        self,
        user: User,
        exercise: Exercise,
        raw_sets: list[dict],
        logged_at: datetime | None = None,
        comments: str = "",
    ) -> LiftLog:
        """Validate raw set input for the exercise's type and build a LiftLog.

        Raises InvalidPerformanceData for bad input or an exercise the user
        cannot see.
        """
        if not exercise.is_visible_to(user.id, user.preferences.show_global_exercises):
            raise InvalidPerformanceData.invalid_value(
                "exercise", exercise.title, "not available to this user"
            )
        strategy = self.registry.resolve_for_write(exercise)
        sets = [strategy.build_set(raw, user) for raw in raw_sets]
        return LiftLog(
            user_id=user.id,
            exercise_id=exercise.id,
            logged_at=logged_at or datetime.now(),
            sets=sets,
            comments=comments,
        )

    async def record(
        self,
        user: User,
        exercise: Exercise,
        raw_sets: list[dict],
        logged_at: datetime | None = None,
        comments: str = "",
    ) -> LoggedPerformance:
        """Store a new performance and detect records for it."""
        lift_log = self.build_log(user, exercise, raw_sets, logged_at, comments)
        lift_log.id = await self.logs.create(lift_log)
        logger.debug(
            "Stored lift log",
            extra={"lift_log_id": lift_log.id, "lift_exercise_id": exercise.id},
        )
        return await self._detect(lift_log, exercise, "created")

    async def update(
        self,
        user: User,
        exercise: Exercise,
        lift_log_id: int,
        raw_sets: list[dict],
        logged_at: datetime | None = None,
        comments: str | None = None,
    ) -> LoggedPerformance:
        """Replace a stored performance's sets and re-run detection."""
        existing = await self.logs.get(lift_log_id)
        if existing is None or existing.user_id != user.id:
            raise ValueError(f"Lift log {lift_log_id} not found")

        lift_log = self.build_log(
            user,
            exercise,
            raw_sets,
            logged_at or existing.logged_at,
            existing.comments if comments is None else comments,
        )
        lift_log.id = lift_log_id
        await self.logs.update(lift_log)
        return await self._detect(lift_log, exercise, "updated")

    async def delete(self, user: User, lift_log_id: int) -> bool:
        """Soft-delete a performance. Records it set are kept."""
        existing = await self.logs.get(lift_log_id)
        if existing is None or existing.user_id != user.id:
            return False
        return await self.logs.soft_delete(lift_log_id)

    async def _detect(
        self, lift_log: LiftLog, exercise: Exercise, trigger: str
    ) -> LoggedPerformance:
        detection = await self.engine.process(lift_log, exercise, trigger=trigger)
        rows = await self.assembler.assemble(lift_log, exercise)
        strategy = self.registry.resolve_safe(exercise)
        return LoggedPerformance(
            lift_log=lift_log,
            detection=detection,
            rows=rows,
            hint=strategy.progression_hint(lift_log),
        )
