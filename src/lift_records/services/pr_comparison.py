"""Record comparison rows for a logged performance."""

from pathlib import Path

from ..db.repositories import LiftLogRepository, PersonalRecordRepository
from ..exercise_types.resolver import ExerciseTypeRegistry
from ..models.display import DisplayRow, RowKind
from ..models.exercises import Exercise
from ..models.lift_log import LiftLog
from ..models.records import PR_TYPE_ORDER, PersonalRecord

BEATEN_SECTION = "Records beaten:"
STANDING_SECTION = "Not beaten:"
HISTORY_SECTION = "History:"


def _record_sort_key(record: PersonalRecord) -> tuple:
    return (PR_TYPE_ORDER.index(record.pr_type), record.discriminator or 0)


class PRComparisonAssembler:
    """Builds the "beaten" / "not beaten" rows shown after logging."""

    def __init__(
        self,
        registry: ExerciseTypeRegistry,
        records: PersonalRecordRepository | None = None,
        logs: LiftLogRepository | None = None,
        db_path: Path | None = None,
    ):
        self.registry = registry
        self.records = records or PersonalRecordRepository(db_path)
        self.logs = logs or LiftLogRepository(db_path)

    async def assemble(self, lift_log: LiftLog, exercise: Exercise) -> list[DisplayRow]:
        """Ordered display rows for one performance, ending in a history link."""
        footer = self.history_row(exercise)
        if await self.logs.is_first_for(lift_log):
            return [
                DisplayRow(
                    label="Achievement",
                    value="First time!",
                    kind=RowKind.ACHIEVEMENT,
                ),
                footer,
            ]

        strategy = self.registry.resolve_safe(exercise)
        rows: list[DisplayRow] = []

        for record in self._latest_per_category(await self.records.for_lift_log(lift_log.id)):
            row = strategy.format_record_for_display(record, lift_log)
            if row is not None:
                row.section = BEATEN_SECTION
                rows.append(row)

        # Standing records are "not beaten" only next to records that were
        standing_section = STANDING_SECTION if rows else HISTORY_SECTION
        metrics = strategy.current_metrics(lift_log)
        standing = [
            record
            for record in await self.records.current_for(lift_log.user_id, lift_log.exercise_id)
            if record.lift_log_id != lift_log.id
        ]
        for record in sorted(standing, key=_record_sort_key):
            row = strategy.format_standing_record(record, lift_log, metrics)
            # Categories this performance has no value for (and hypertrophy) are left out
            if row.comparison is None:
                continue
            row.section = standing_section
            rows.append(row)

        rows.append(footer)
        return rows

    def history_row(self, exercise: Exercise) -> DisplayRow:
        return DisplayRow(
            label="View history",
            value="",
            kind=RowKind.FOOTER,
            section=HISTORY_SECTION,
            link=f"records history --exercise {exercise.id}",
        )

    @staticmethod
    def _latest_per_category(records: list[PersonalRecord]) -> list[PersonalRecord]:
        """Drop records that an edit of the same log later superseded."""
        superseded = {r.previous_pr_id for r in records if r.previous_pr_id is not None}
        latest = [r for r in records if r.id not in superseded]
        return sorted(latest, key=_record_sort_key)
