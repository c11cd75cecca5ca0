"""Tests for the aiosqlite repositories."""

from datetime import datetime

import pytest

from conftest import make_log, weighted
from lift_records.db import (
    ExerciseRepository,
    LiftLogRepository,
    PersonalRecordRepository,
    UserRepository,
    seed_exercises,
)
from lift_records.errors import PRStoreConflict
from lift_records.models.exercises import COMMON_EXERCISES, Exercise
from lift_records.models.lift_log import LiftSet
from lift_records.models.records import PersonalRecord, PRType, RecordKey
from lift_records.models.user import User, UserPreferences


def new_record(user_id, exercise_id, lift_log_id, value, previous=None):
    return PersonalRecord(
        user_id=user_id,
        exercise_id=exercise_id,
        lift_log_id=lift_log_id,
        pr_type=PRType.VOLUME,
        value=value,
        achieved_at=datetime(2024, 1, 1),
        previous_pr_id=previous.id if previous else None,
        previous_value=previous.value if previous else None,
    )


class TestUserRepository:
    """Tests for UserRepository."""

    @pytest.mark.asyncio
    async def test_create_and_get(self, db_path):
        """Users round-trip with preferences."""
        repo = UserRepository(db_path)
        user_id = await repo.create(
            User(name="Sam", preferences=UserPreferences(show_extra_weight=False))
        )

        user = await repo.get(user_id)
        assert user.name == "Sam"
        assert not user.preferences.show_extra_weight
        assert user.created_at is not None
        assert (await repo.get_by_name("sam")).id == user_id
        assert (await repo.get_first()).id == user_id

    @pytest.mark.asyncio
    async def test_update(self, db_path):
        """Preferences can be changed."""
        repo = UserRepository(db_path)
        user = User(name="Sam")
        user.id = await repo.create(user)
        user.preferences.show_global_exercises = False
        await repo.update(user)

        assert not (await repo.get(user.id)).preferences.show_global_exercises

    @pytest.mark.asyncio
    async def test_update_without_id(self, db_path):
        """Updating an unsaved user is an error."""
        with pytest.raises(ValueError):
            await UserRepository(db_path).update(User(name="Nobody"))


class TestExerciseRepository:
    """Tests for ExerciseRepository."""

    @pytest.mark.asyncio
    async def test_seed_is_idempotent(self, db_path):
        """Seeding twice adds nothing the second time."""
        assert await seed_exercises(db_path) == 0
        assert len(await ExerciseRepository(db_path).list_all()) == len(COMMON_EXERCISES)

    @pytest.mark.asyncio
    async def test_visibility(self, db_path, user):
        """Hiding globals leaves only the user's own exercises."""
        repo = ExerciseRepository(db_path)
        await repo.create(Exercise(title="Zercher Squat", user_id=user.id))

        visible = await repo.list_visible(user)
        assert len(visible) == len(COMMON_EXERCISES) + 1

        user.preferences.show_global_exercises = False
        visible = await repo.list_visible(user)
        assert [e.title for e in visible] == ["Zercher Squat"]

    @pytest.mark.asyncio
    async def test_malformed_type_survives(self, db_path):
        """An unknown stored type is read back unchanged."""
        repo = ExerciseRepository(db_path)
        exercise_id = await repo.create(Exercise(title="Odd", exercise_type="mystery"))
        assert (await repo.get(exercise_id)).exercise_type == "mystery"


class TestLiftLogRepository:
    """Tests for LiftLogRepository."""

    @pytest.mark.asyncio
    async def test_create_and_get(self, db_path, user, library):
        """Sets come back in order."""
        repo = LiftLogRepository(db_path)
        bench = library["Bench Press"]
        lift_log = make_log(user.id, bench.id, weighted((135, 5), (145, 3)))
        lift_log_id = await repo.create(lift_log)

        stored = await repo.get(lift_log_id)
        assert [(s.weight, s.reps) for s in stored.sets] == [(135, 5), (145, 3)]
        assert stored.logged_at == lift_log.logged_at
        assert stored.fingerprint() == lift_log.fingerprint()

    @pytest.mark.asyncio
    async def test_update_replaces_sets(self, db_path, user, library):
        """Updating swaps in the new sets."""
        repo = LiftLogRepository(db_path)
        lift_log = make_log(user.id, library["Bench Press"].id, weighted((135, 5)))
        lift_log.id = await repo.create(lift_log)

        lift_log.sets = [LiftSet(weight=155, reps=3)]
        await repo.update(lift_log)

        stored = await repo.get(lift_log.id)
        assert [(s.weight, s.reps) for s in stored.sets] == [(155, 3)]

    @pytest.mark.asyncio
    async def test_soft_delete(self, db_path, user, library):
        """Deleted logs are hidden but kept."""
        repo = LiftLogRepository(db_path)
        lift_log = make_log(user.id, library["Bench Press"].id, weighted((135, 5)))
        lift_log.id = await repo.create(lift_log)

        assert await repo.soft_delete(lift_log.id)
        assert not await repo.soft_delete(lift_log.id)
        assert await repo.get(lift_log.id) is None
        assert (await repo.get(lift_log.id, include_deleted=True)).is_deleted
        assert await repo.list_for(user.id) == []

    @pytest.mark.asyncio
    async def test_list_order_and_first(self, db_path, user, library):
        """Listing is newest first; is_first_for ignores deleted logs."""
        repo = LiftLogRepository(db_path)
        bench = library["Bench Press"]
        first = make_log(user.id, bench.id, weighted((135, 5)), day=1)
        second = make_log(user.id, bench.id, weighted((145, 5)), day=2)
        first.id = await repo.create(first)
        assert await repo.is_first_for(first)
        second.id = await repo.create(second)

        assert [log.id for log in await repo.list_for(user.id, bench.id)] == [second.id, first.id]
        assert [log.id for log in await repo.list_for(user.id, oldest_first=True)] == [
            first.id,
            second.id,
        ]
        assert not await repo.is_first_for(second)

        await repo.soft_delete(first.id)
        assert await repo.is_first_for(second)

    @pytest.mark.asyncio
    async def test_combinations(self, db_path, user, library):
        """Distinct user/exercise pairs with live logs."""
        repo = LiftLogRepository(db_path)
        bench, squat = library["Bench Press"], library["Squat"]
        for exercise in (bench, bench, squat):
            await repo.create(make_log(user.id, exercise.id, weighted((135, 5))))

        pairs = await repo.combinations()
        assert sorted(pairs) == sorted([(user.id, bench.id), (user.id, squat.id)])
        assert await repo.combinations(exercise_id=squat.id) == [(user.id, squat.id)]


class TestPersonalRecordRepository:
    """Tests for PersonalRecordRepository and its transaction session."""

    @pytest.fixture
    def key(self, user, library):
        return RecordKey(user.id, library["Bench Press"].id, PRType.VOLUME)

    @pytest.mark.asyncio
    async def test_pointer_lifecycle(self, db_path, key):
        """Insert, then advance the current pointer."""
        repo = PersonalRecordRepository(db_path)

        async with repo.transaction() as session:
            first = new_record(key.user_id, key.exercise_id, 1, 500)
            first.id = await session.insert_record(first)
            await session.insert_pointer(key, first.id)

        async with repo.transaction() as session:
            assert (await session.current(key)).id == first.id
            second = new_record(key.user_id, key.exercise_id, 2, 600, previous=first)
            second.id = await session.insert_record(second)
            await session.advance_pointer(key, first.id, second.id)

        current = await repo.current_record(key)
        assert current.id == second.id
        assert current.previous_value == 500
        assert (await repo.get(first.id)).value == 500
        assert await repo.get(first.id + 100) is None
        assert [r.id for r in await repo.chain(second.id)] == [first.id, second.id]

    @pytest.mark.asyncio
    async def test_stale_pointer_conflicts(self, db_path, key):
        """Advancing from a record that is no longer current fails."""
        repo = PersonalRecordRepository(db_path)
        async with repo.transaction() as session:
            first = new_record(key.user_id, key.exercise_id, 1, 500)
            first.id = await session.insert_record(first)
            await session.insert_pointer(key, first.id)

        with pytest.raises(PRStoreConflict):
            async with repo.transaction() as session:
                other = new_record(key.user_id, key.exercise_id, 2, 600, previous=first)
                other.id = await session.insert_record(other)
                await session.advance_pointer(key, first.id + 100, other.id)

        # Rolled back: no stray record
        assert await repo.count_for(key.user_id, key.exercise_id) == 1
        assert (await repo.current_record(key)).id == first.id

    @pytest.mark.asyncio
    async def test_second_pointer_conflicts(self, db_path, key):
        """A category cannot get two current pointers."""
        repo = PersonalRecordRepository(db_path)
        async with repo.transaction() as session:
            first = new_record(key.user_id, key.exercise_id, 1, 500)
            first.id = await session.insert_record(first)
            await session.insert_pointer(key, first.id)

        with pytest.raises(PRStoreConflict):
            async with repo.transaction() as session:
                rival = new_record(key.user_id, key.exercise_id, 2, 600)
                rival.id = await session.insert_record(rival)
                await session.insert_pointer(key, rival.id)

    @pytest.mark.asyncio
    async def test_no_forks(self, db_path, key):
        """A record can be superseded only once."""
        repo = PersonalRecordRepository(db_path)
        async with repo.transaction() as session:
            first = new_record(key.user_id, key.exercise_id, 1, 500)
            first.id = await session.insert_record(first)
            await session.insert_record(new_record(key.user_id, key.exercise_id, 2, 600, previous=first))

        with pytest.raises(PRStoreConflict):
            async with repo.transaction() as session:
                await session.insert_record(
                    new_record(key.user_id, key.exercise_id, 3, 700, previous=first)
                )

    @pytest.mark.asyncio
    async def test_run_ledger(self, db_path):
        """Runs are keyed by log and fingerprint."""
        repo = PersonalRecordRepository(db_path)
        async with repo.transaction() as session:
            assert not await session.run_exists(1, "abc")
            await session.record_run(1, "abc", "created", {"metrics": {}}, ["volume"])
            assert await session.run_exists(1, "abc")

        runs = await repo.runs_for(1)
        assert runs[0]["trigger"] == "created"
        assert runs[0]["new_pr_types"] == ["volume"]

        with pytest.raises(PRStoreConflict):
            async with repo.transaction() as session:
                await session.record_run(1, "abc", "created", {}, [])
