"""Personal record detection.

Each logged performance is turned into candidate values per record
category by its exercise type strategy. A candidate that strictly improves
on the category's current record (or fills an empty category) becomes a new
record linked to the one it beat, and the category's current pointer moves
to it. All of that happens in a single write transaction, together with an
audit row keyed by the log's fingerprint, so replaying the same log is a
no-op.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from ..config import Settings
from ..db.repositories import PersonalRecordRepository, PRStoreSession
from ..errors import PRStoreConflict
from ..exercise_types.base import ExerciseTypeStrategy
from ..exercise_types.resolver import ExerciseTypeRegistry
from ..models.exercises import Exercise
from ..models.lift_log import LiftLog
from ..models.records import (
    DetectionResult,
    PersonalRecord,
    PRCandidate,
    PRType,
    RecordKey,
    discriminator_key,
)

logger = logging.getLogger(__name__)

TRIGGERS = ("created", "updated", "recalculated")


class KeyedLocks:
    """One asyncio.Lock per key, dropped once nobody holds or waits on it."""

    def __init__(self):
        self._locks: dict[tuple, asyncio.Lock] = {}
        self._users: dict[tuple, int] = {}

    @asynccontextmanager
    async def hold(self, key: tuple) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)


def category_label(pr_type: PRType, discriminator: float | None) -> str:
    """Snapshot key for a category, e.g. ``volume`` or ``rep_specific:5``."""
    key = discriminator_key(discriminator)
    return f"{pr_type.value}:{key}" if key else pr_type.value


class PRDetectionEngine:
    """Detects and stores personal records for logged performances."""

    def __init__(
        self,
        registry: ExerciseTypeRegistry,
        records: PersonalRecordRepository | None = None,
        settings: Settings | None = None,
        db_path: Path | None = None,
    ):
        self.registry = registry
        self.records = records or PersonalRecordRepository(db_path)
        self.settings = settings or registry.settings
        self.locks = KeyedLocks()

    async def process(
        self, lift_log: LiftLog, exercise: Exercise, trigger: str = "created"
    ) -> DetectionResult:
        """Run detection for one stored lift log.

        Runs for the same user and exercise are serialized. A store conflict
        is retried up to ``detection_max_retries`` times and then re-raised.
        """
        if lift_log.id is None:
            raise ValueError("Lift log must be stored before detecting records")
        if trigger not in TRIGGERS:
            raise ValueError(f"Unknown detection trigger: {trigger}")

        strategy = self.registry.resolve_for_write(exercise)
        extra = {
            "lift_user_id": lift_log.user_id,
            "lift_exercise_id": lift_log.exercise_id,
            "lift_log_id": lift_log.id,
        }
        logger.debug("Detecting records (trigger: %s)", trigger, extra=extra)

        async with self.locks.hold((lift_log.user_id, lift_log.exercise_id)):
            result = await self._with_retries(
                lambda: self._run(lift_log, strategy, trigger), extra
            )

        if result.skipped:
            logger.debug("Lift log already processed", extra=extra)
        elif result.is_pr:
            logger.info(
                "New personal records: %s",
                ", ".join(result.pr_types),
                extra={**extra, "lift_pr_types": result.pr_types},
            )
        return result

    async def rebuild(
        self, user_id: int, exercise: Exercise, lift_logs: list[LiftLog]
    ) -> tuple[int, list[DetectionResult]]:
        """Wipe a user's records for an exercise and replay ``lift_logs`` in order.

        The wipe and every replayed run commit together, so a failure leaves
        the old history in place. The caller must already hold
        ``locks.hold((user_id, exercise.id))``; this does not take it.
        Returns the number of records removed and one result per log.
        """
        strategy = self.registry.resolve_for_write(exercise)
        extra = {"lift_user_id": user_id, "lift_exercise_id": exercise.id}

        async def replay() -> tuple[int, list[DetectionResult]]:
            async with self.records.transaction() as session:
                removed = await session.wipe(user_id, exercise.id)
                results = [
                    await self._detect(session, lift_log, strategy, "recalculated")
                    for lift_log in lift_logs
                ]
            return removed, results

        return await self._with_retries(replay, extra)

    async def _with_retries(self, operation, extra: dict):
        max_attempts = max(1, self.settings.detection_max_retries)
        for attempt in range(1, max_attempts + 1):
            try:
                return await operation()
            except PRStoreConflict as exc:
                if attempt >= max_attempts:
                    logger.error(
                        "PR detection failed after %d attempts: %s",
                        attempt,
                        exc,
                        extra=extra,
                    )
                    raise
                logger.warning(
                    "PR store conflict on attempt %d, retrying: %s",
                    attempt,
                    exc,
                    extra=extra,
                )

        # Unreachable: the loop either returns or raises
        raise RuntimeError("PR detection loop exited without a result")

    async def _run(
        self, lift_log: LiftLog, strategy: ExerciseTypeStrategy, trigger: str
    ) -> DetectionResult:
        async with self.records.transaction() as session:
            return await self._detect(session, lift_log, strategy, trigger)

    async def _detect(
        self,
        session: PRStoreSession,
        lift_log: LiftLog,
        strategy: ExerciseTypeStrategy,
        trigger: str,
    ) -> DetectionResult:
        fingerprint = lift_log.fingerprint()
        if await session.run_exists(lift_log.id, fingerprint):
            return DetectionResult(lift_log_id=lift_log.id, skipped=True)

        result = DetectionResult(lift_log_id=lift_log.id)
        snapshot = {
            "exercise_type": strategy.type_name.value,
            "trigger": trigger,
            "metrics": strategy.current_metrics(lift_log),
            "previous_bests": {},
            "pr_reasons": {},
            "why_not_pr": {},
        }

        candidates = strategy.candidates(lift_log)
        for candidate in candidates:
            record = await self._evaluate(session, strategy, lift_log, candidate, snapshot)
            if record is not None:
                result.created.append(record)

        # Applicable categories without a usable value
        covered = {candidate.pr_type for candidate in candidates}
        for pr_type in strategy.applicable_pr_types(lift_log):
            if pr_type not in covered:
                snapshot["why_not_pr"][pr_type.value] = "no value in this performance"

        result.snapshot = snapshot
        await session.record_run(lift_log.id, fingerprint, trigger, snapshot, result.pr_types)
        return result

    async def _evaluate(
        self,
        session: PRStoreSession,
        strategy: ExerciseTypeStrategy,
        lift_log: LiftLog,
        candidate: PRCandidate,
        snapshot: dict,
    ) -> PersonalRecord | None:
        """Compare one candidate against its category and write if it wins."""
        key = RecordKey(
            user_id=lift_log.user_id,
            exercise_id=lift_log.exercise_id,
            pr_type=candidate.pr_type,
            discriminator=candidate.discriminator,
        )
        label = category_label(candidate.pr_type, candidate.discriminator)
        existing = await session.current(key)
        snapshot["previous_bests"][label] = existing.value if existing else None

        if existing is not None and not strategy.improves(
            candidate.pr_type, candidate.value, existing.value
        ):
            if candidate.value == existing.value:
                reason = f"tied current record {existing.value:g}"
            else:
                reason = f"{candidate.value:g} does not beat {existing.value:g}"
            snapshot["why_not_pr"][label] = reason
            return None

        record = PersonalRecord(
            user_id=lift_log.user_id,
            exercise_id=lift_log.exercise_id,
            lift_log_id=lift_log.id,
            pr_type=candidate.pr_type,
            value=candidate.value,
            achieved_at=lift_log.logged_at,
            discriminator=candidate.discriminator,
            previous_pr_id=existing.id if existing else None,
            previous_value=existing.value if existing else None,
        )
        record.id = await session.insert_record(record)

        if existing is None:
            await session.insert_pointer(key, record.id)
            snapshot["pr_reasons"][label] = f"first achievement: {candidate.value:g}"
        else:
            await session.advance_pointer(key, existing.id, record.id)
            snapshot["pr_reasons"][label] = (
                f"{candidate.value:g} beats {existing.value:g}"
            )
        return record
