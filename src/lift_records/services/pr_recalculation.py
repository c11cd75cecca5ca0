"""Historical recalculation of personal records.

Rebuilds the record history for a user and exercise by wiping it and
replaying every live lift log in chronological order through the detection
engine. Used after changing band resistances, after bulk edits, or to
backfill records for logs written before detection existed.
"""

import logging
from dataclasses import dataclass, field

from ..db.repositories import ExerciseRepository, LiftLogRepository, PersonalRecordRepository
from .pr_detection import PRDetectionEngine

logger = logging.getLogger(__name__)


@dataclass
class RecalculationSummary:
    """What a recalculation did (or would do, for a dry run) to one pair."""

    user_id: int
    exercise_id: int
    logs_processed: int = 0
    records_removed: int = 0
    records_created: int = 0
    dry_run: bool = False
    pr_logs: list[int] = field(default_factory=list)


class PRRecalculationService:
    """Wipe-and-replay of record history."""

    def __init__(
        self,
        engine: PRDetectionEngine,
        logs: LiftLogRepository | None = None,
        exercises: ExerciseRepository | None = None,
        records: PersonalRecordRepository | None = None,
    ):
        self.engine = engine
        self.records = records or engine.records
        self.logs = logs or LiftLogRepository(self.records.db_path)
        self.exercises = exercises or ExerciseRepository(self.records.db_path)

    async def recalculate(
        self, user_id: int, exercise_id: int, dry_run: bool = False
    ) -> RecalculationSummary:
        """Rebuild records for one user and exercise.

        Detection runs for the pair wait until the rebuild has committed.
        """
        summary = RecalculationSummary(user_id=user_id, exercise_id=exercise_id, dry_run=dry_run)
        exercise = await self.exercises.get(exercise_id)
        if exercise is None:
            raise ValueError(f"Exercise {exercise_id} not found")

        async with self.engine.locks.hold((user_id, exercise_id)):
            lift_logs = await self.logs.list_for(user_id, exercise_id, oldest_first=True)
            summary.logs_processed = len(lift_logs)

            if dry_run:
                summary.records_removed = await self.records.count_for(user_id, exercise_id)
                return summary

            summary.records_removed, results = await self.engine.rebuild(
                user_id, exercise, lift_logs
            )

        for result in results:
            summary.records_created += len(result.created)
            if result.is_pr:
                summary.pr_logs.append(result.lift_log_id)

        logger.info(
            "Recalculated records: %d logs, %d removed, %d created",
            summary.logs_processed,
            summary.records_removed,
            summary.records_created,
            extra={"lift_user_id": user_id, "lift_exercise_id": exercise_id},
        )
        return summary

    async def recalculate_all(
        self,
        user_id: int | None = None,
        exercise_id: int | None = None,
        dry_run: bool = False,
    ) -> list[RecalculationSummary]:
        """Rebuild every (user, exercise) pair with live logs, optionally filtered."""
        summaries = []
        for pair_user_id, pair_exercise_id in await self.logs.combinations(user_id, exercise_id):
            summaries.append(
                await self.recalculate(pair_user_id, pair_exercise_id, dry_run=dry_run)
            )
        return summaries
