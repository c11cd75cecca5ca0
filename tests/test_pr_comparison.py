"""Tests for the record comparison rows shown after logging."""

import pytest

from conftest import make_log, weighted
from lift_records.db import LiftLogRepository
from lift_records.models.display import RowKind
from lift_records.models.exercises import Exercise
from lift_records.models.lift_log import LiftSet
from lift_records.services.pr_comparison import (
    BEATEN_SECTION,
    HISTORY_SECTION,
    STANDING_SECTION,
    PRComparisonAssembler,
)


@pytest.fixture
def assembler(registry, db_path):
    return PRComparisonAssembler(registry, db_path=db_path)


@pytest.fixture
def log_and_assemble(engine, store_log, assembler):
    """Store a log, detect records, and return its display rows."""

    async def _run(lift_log, exercise):
        await store_log(lift_log)
        await engine.process(lift_log, exercise)
        return await assembler.assemble(lift_log, exercise)

    return _run


def summary(rows):
    return [(row.section, row.label, row.value, row.comparison) for row in rows]


class TestAssemble:
    """Tests for PRComparisonAssembler.assemble."""

    @pytest.mark.asyncio
    async def test_first_time(self, log_and_assemble, user, library):
        """The first log shows only the achievement and the history link."""
        bench = library["Bench Press"]
        rows = await log_and_assemble(make_log(user.id, bench.id, weighted((135, 5))), bench)

        assert [row.kind for row in rows] == [RowKind.ACHIEVEMENT, RowKind.FOOTER]
        assert rows[0].value == "First time!"
        assert rows[1].link == f"records history --exercise {bench.id}"

    @pytest.mark.asyncio
    async def test_records_beaten(self, log_and_assemble, user, library):
        """Beaten rows show old → new values in display order."""
        bench = library["Bench Press"]
        await log_and_assemble(make_log(user.id, bench.id, weighted((135, 5)), day=1), bench)
        rows = await log_and_assemble(
            make_log(user.id, bench.id, weighted((145, 5)), day=2), bench
        )

        assert summary(rows[:-1]) == [
            (BEATEN_SECTION, "Est 1RM", "157.5 → 169.2 lbs", None),
            (BEATEN_SECTION, "5 Reps", "135 → 145 lbs", None),
            (BEATEN_SECTION, "Volume", "675 → 725 lbs", None),
            (BEATEN_SECTION, "Best @ 145 lbs", "5 reps", None),
        ]
        assert rows[-1].kind == RowKind.FOOTER

    @pytest.mark.asyncio
    async def test_records_standing(self, log_and_assemble, user, library):
        """Unbeaten records are compared with today's values."""
        bench = library["Bench Press"]
        await log_and_assemble(make_log(user.id, bench.id, weighted((145, 5)), day=1), bench)
        rows = await log_and_assemble(
            make_log(user.id, bench.id, weighted((135, 5)), day=2), bench
        )

        assert summary(rows[:-1]) == [
            (BEATEN_SECTION, "Best @ 135 lbs", "5 reps", None),
            (STANDING_SECTION, "Est 1RM", "169.2 lbs", "157.5 lbs"),
            (STANDING_SECTION, "5 Reps", "145 lbs", "135 lbs"),
            (STANDING_SECTION, "Volume", "725 lbs", "675 lbs"),
        ]

    @pytest.mark.asyncio
    async def test_no_records_titles_history(self, log_and_assemble, user, library):
        """Without any new record, standing rows sit under "History:"."""
        bench = library["Bench Press"]
        await log_and_assemble(make_log(user.id, bench.id, weighted((135, 5)), day=1), bench)
        rows = await log_and_assemble(
            make_log(user.id, bench.id, weighted((135, 5)), day=2), bench
        )

        assert {row.section for row in rows} == {HISTORY_SECTION}
        assert (HISTORY_SECTION, "Volume", "675 lbs", "675 lbs") in summary(rows)
        assert rows[-1].kind == RowKind.FOOTER

    @pytest.mark.asyncio
    async def test_bodyweight_volume_units(self, log_and_assemble, user, library):
        """Rep volume and weighted volume rows keep their own units."""
        push_up = library["Push-Up"]
        await log_and_assemble(make_log(user.id, push_up.id, weighted((0, 20)), day=1), push_up)
        weighted_rows = await log_and_assemble(
            make_log(user.id, push_up.id, weighted((10, 3)), day=2), push_up
        )
        assert (BEATEN_SECTION, "Weighted Volume", "30 lbs", None) in summary(weighted_rows)
        assert "Volume" not in [row.label for row in weighted_rows]

        rows = await log_and_assemble(
            make_log(user.id, push_up.id, weighted((0, 25)), day=3), push_up
        )
        assert summary(rows[:-1]) == [(BEATEN_SECTION, "Volume", "20 → 25 reps", None)]

    @pytest.mark.asyncio
    async def test_single_rep_hides_estimate(self, log_and_assemble, user, library):
        """A real single replaces the estimated 1RM row."""
        bench = library["Bench Press"]
        await log_and_assemble(make_log(user.id, bench.id, weighted((135, 5)), day=1), bench)
        rows = await log_and_assemble(
            make_log(user.id, bench.id, weighted((200, 1)), day=2), bench
        )

        labels = [row.label for row in rows]
        assert "Est 1RM" not in labels
        assert ("1 Rep", "200 lbs") in [(row.label, row.value) for row in rows]
        # The 5 rep record has nothing to compare against today
        assert "5 Reps" not in labels
        assert (STANDING_SECTION, "Volume", "675 lbs", "200 lbs") in summary(rows)

    @pytest.mark.asyncio
    async def test_assistance_band_rows(self, log_and_assemble, user, library):
        """Band records render as colors."""
        assisted = library["Band-Assisted Pull-Up"]
        await log_and_assemble(
            make_log(user.id, assisted.id, [LiftSet(band_color="green", reps=8)], day=1),
            assisted,
        )
        rows = await log_and_assemble(
            make_log(user.id, assisted.id, [LiftSet(band_color="red", reps=8)], day=2),
            assisted,
        )

        assert (BEATEN_SECTION, "8 Reps", "Green → Red band", None) in summary(rows)
        assert (STANDING_SECTION, "Volume", "240", "80") in summary(rows)

    @pytest.mark.asyncio
    async def test_edit_shows_latest(self, log_and_assemble, engine, assembler, user, library, db_path):
        """After an edit, only the log's newest record per category shows."""
        bench = library["Bench Press"]
        await log_and_assemble(make_log(user.id, bench.id, weighted((135, 5)), day=1), bench)
        second = make_log(user.id, bench.id, weighted((145, 5)), day=2)
        await log_and_assemble(second, bench)

        second.sets = weighted((155, 5))
        await LiftLogRepository(db_path).update(second)
        await engine.process(second, bench, trigger="updated")
        rows = await assembler.assemble(second, bench)

        beaten = [row for row in rows if row.section == BEATEN_SECTION]
        assert [row.label for row in beaten].count("Est 1RM") == 1
        assert ("5 Reps", "145 → 155 lbs") in [(row.label, row.value) for row in beaten]


class TestHistoryRow:
    """Tests for the footer row."""

    def test_links_to_exercise_history(self, registry, temp_db_path, library_stub):
        """The link names the exercise ID."""
        row = PRComparisonAssembler(registry, db_path=temp_db_path).history_row(library_stub)
        assert row.kind == RowKind.FOOTER
        assert row.link == "records history --exercise 7"
        assert row.to_dict()["kind"] == "footer"


@pytest.fixture
def library_stub():
    return Exercise(title="Bench Press", id=7)
