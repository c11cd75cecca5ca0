"""Data access layer for lift-records."""

import json
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path

import aiosqlite

from ..errors import PRStoreConflict
from ..models.exercises import Exercise
from ..models.lift_log import LiftLog, LiftSet
from ..models.records import PersonalRecord, PRType, RecordKey
from ..models.user import User
from .engine import get_db_path


def _parse_timestamp(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


class UserRepository:
    """Repository for users."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def create(self, user: User) -> int:
        """Create a new user."""
        data = user.to_dict()
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                "INSERT INTO users (name, preferences) VALUES (?, ?)",
                (data["name"], json.dumps(data["preferences"])),
            )
            await db.commit()
            return cursor.lastrowid

    async def get(self, user_id: int) -> User | None:
        """Get a user by ID."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute("SELECT * FROM users WHERE id = ?", (user_id,))
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_user(row)

    async def get_by_name(self, name: str) -> User | None:
        """Get a user by name (case-insensitive)."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM users WHERE lower(name) = lower(?)", (name,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_user(row)

    async def get_first(self) -> User | None:
        """Get the earliest created user."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute("SELECT * FROM users ORDER BY id LIMIT 1")
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_user(row)

    async def list_all(self) -> list[User]:
        """List all users."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute("SELECT * FROM users ORDER BY id")
            rows = await cursor.fetchall()
            return [self._row_to_user(row) for row in rows]

    async def update(self, user: User) -> None:
        """Update an existing user's name and preferences."""
        if user.id is None:
            raise ValueError("User must have an ID to update")

        data = user.to_dict()
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                "UPDATE users SET name = ?, preferences = ? WHERE id = ?",
                (data["name"], json.dumps(data["preferences"]), user.id),
            )
            await db.commit()

    def _row_to_user(self, row: aiosqlite.Row) -> User:
        """Convert a database row to a User."""
        data = {
            "name": row["name"],
            "preferences": json.loads(row["preferences"] or "{}"),
        }
        return User.from_dict(
            data, id=row["id"], created_at=_parse_timestamp(row["created_at"])
        )


class ExerciseRepository:
    """Repository for the exercise library (global and user-owned)."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def create(self, exercise: Exercise) -> int:
        """Add an exercise."""
        data = exercise.to_dict()
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                """
                INSERT INTO exercises
                (title, exercise_type, user_id, is_bodyweight, band_type, aliases)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    data["title"],
                    data["exercise_type"],
                    data["user_id"],
                    int(data["is_bodyweight"]),
                    data["band_type"],
                    json.dumps(data["aliases"]),
                ),
            )
            await db.commit()
            return cursor.lastrowid

    async def get(self, exercise_id: int) -> Exercise | None:
        """Get an exercise by ID."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM exercises WHERE id = ?", (exercise_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_exercise(row)

    async def list_all(self) -> list[Exercise]:
        """List every exercise."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute("SELECT * FROM exercises ORDER BY title")
            rows = await cursor.fetchall()
            return [self._row_to_exercise(row) for row in rows]

    async def list_visible(self, user: User) -> list[Exercise]:
        """Exercises a user may log: their own, plus globals unless hidden."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            if user.preferences.show_global_exercises:
                cursor = await db.execute(
                    """
                    SELECT * FROM exercises
                    WHERE user_id = ? OR user_id IS NULL
                    ORDER BY title
                    """,
                    (user.id,),
                )
            else:
                cursor = await db.execute(
                    "SELECT * FROM exercises WHERE user_id = ? ORDER BY title",
                    (user.id,),
                )
            rows = await cursor.fetchall()
            return [self._row_to_exercise(row) for row in rows]

    def _row_to_exercise(self, row: aiosqlite.Row) -> Exercise:
        """Convert a database row to an Exercise.

        The raw exercise_type text is kept as stored, even when malformed.
        """
        return Exercise(
            id=row["id"],
            title=row["title"],
            exercise_type=row["exercise_type"],
            user_id=row["user_id"],
            is_bodyweight=bool(row["is_bodyweight"]),
            band_type=row["band_type"],
            aliases=json.loads(row["aliases"] or "[]"),
        )


class LiftLogRepository:
    """Repository for logged performances and their sets."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def create(self, lift_log: LiftLog) -> int:
        """Store a lift log with its sets."""
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                """
                INSERT INTO lift_logs (user_id, exercise_id, logged_at, comments)
                VALUES (?, ?, ?, ?)
                """,
                (
                    lift_log.user_id,
                    lift_log.exercise_id,
                    lift_log.logged_at.isoformat(),
                    lift_log.comments,
                ),
            )
            lift_log_id = cursor.lastrowid
            await self._insert_sets(db, lift_log_id, lift_log.sets)
            await db.commit()
            return lift_log_id

    async def update(self, lift_log: LiftLog) -> None:
        """Replace a log's timestamp, comments and sets."""
        if lift_log.id is None:
            raise ValueError("Lift log must have an ID to update")

        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                "UPDATE lift_logs SET logged_at = ?, comments = ? WHERE id = ?",
                (lift_log.logged_at.isoformat(), lift_log.comments, lift_log.id),
            )
            await db.execute("DELETE FROM lift_sets WHERE lift_log_id = ?", (lift_log.id,))
            await self._insert_sets(db, lift_log.id, lift_log.sets)
            await db.commit()

    async def soft_delete(self, lift_log_id: int) -> bool:
        """Mark a log deleted. Personal records are left untouched."""
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                """
                UPDATE lift_logs SET deleted_at = ?
                WHERE id = ? AND deleted_at IS NULL
                """,
                (datetime.now().isoformat(), lift_log_id),
            )
            await db.commit()
            return cursor.rowcount > 0

    async def get(self, lift_log_id: int, include_deleted: bool = False) -> LiftLog | None:
        """Get a lift log with its sets."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM lift_logs WHERE id = ?", (lift_log_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            if row["deleted_at"] and not include_deleted:
                return None
            sets = await self._fetch_sets(db, [row["id"]])
            return self._row_to_log(row, sets.get(row["id"], []))

    async def list_for(
        self,
        user_id: int,
        exercise_id: int | None = None,
        limit: int | None = None,
        oldest_first: bool = False,
    ) -> list[LiftLog]:
        """List a user's non-deleted logs, newest first unless asked otherwise."""
        query = "SELECT * FROM lift_logs WHERE user_id = ? AND deleted_at IS NULL"
        params: list = [user_id]
        if exercise_id is not None:
            query += " AND exercise_id = ?"
            params.append(exercise_id)
        order = "ASC" if oldest_first else "DESC"
        query += f" ORDER BY logged_at {order}, id {order}"
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)

        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(query, params)
            rows = await cursor.fetchall()
            sets = await self._fetch_sets(db, [row["id"] for row in rows])
            return [self._row_to_log(row, sets.get(row["id"], [])) for row in rows]

    async def is_first_for(self, lift_log: LiftLog) -> bool:
        """True when no other live log exists for this user and exercise."""
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                """
                SELECT COUNT(*) FROM lift_logs
                WHERE user_id = ? AND exercise_id = ? AND id != ?
                AND deleted_at IS NULL
                """,
                (lift_log.user_id, lift_log.exercise_id, lift_log.id or -1),
            )
            (count,) = await cursor.fetchone()
            return count == 0

    async def combinations(
        self, user_id: int | None = None, exercise_id: int | None = None
    ) -> list[tuple[int, int]]:
        """Distinct (user_id, exercise_id) pairs that have live logs."""
        query = "SELECT DISTINCT user_id, exercise_id FROM lift_logs WHERE deleted_at IS NULL"
        params: list = []
        if user_id is not None:
            query += " AND user_id = ?"
            params.append(user_id)
        if exercise_id is not None:
            query += " AND exercise_id = ?"
            params.append(exercise_id)
        query += " ORDER BY user_id, exercise_id"

        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(query, params)
            rows = await cursor.fetchall()
            return [(row[0], row[1]) for row in rows]

    async def _insert_sets(
        self, db: aiosqlite.Connection, lift_log_id: int, sets: list[LiftSet]
    ) -> None:
        for position, lift_set in enumerate(sets):
            data = lift_set.to_dict()
            cursor = await db.execute(
                """
                INSERT INTO lift_sets
                (lift_log_id, position, weight, reps, hold_seconds, band_color, notes)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    lift_log_id,
                    position,
                    data["weight"],
                    data["reps"],
                    data["hold_seconds"],
                    data["band_color"],
                    data["notes"],
                ),
            )
            lift_set.id = cursor.lastrowid

    async def _fetch_sets(
        self, db: aiosqlite.Connection, lift_log_ids: list[int]
    ) -> dict[int, list[LiftSet]]:
        if not lift_log_ids:
            return {}
        placeholders = ", ".join("?" for _ in lift_log_ids)
        cursor = await db.execute(
            f"""
            SELECT * FROM lift_sets WHERE lift_log_id IN ({placeholders})
            ORDER BY lift_log_id, position
            """,
            lift_log_ids,
        )
        grouped: dict[int, list[LiftSet]] = {}
        for row in await cursor.fetchall():
            grouped.setdefault(row["lift_log_id"], []).append(
                LiftSet.from_dict(dict(row), id=row["id"])
            )
        return grouped

    def _row_to_log(self, row: aiosqlite.Row, sets: list[LiftSet]) -> LiftLog:
        """Convert a database row and its sets to a LiftLog."""
        return LiftLog(
            id=row["id"],
            user_id=row["user_id"],
            exercise_id=row["exercise_id"],
            logged_at=datetime.fromisoformat(row["logged_at"]),
            comments=row["comments"] or "",
            sets=sets,
            deleted_at=_parse_timestamp(row["deleted_at"]),
        )


def _row_to_record(row: aiosqlite.Row) -> PersonalRecord:
    return PersonalRecord(
        id=row["id"],
        user_id=row["user_id"],
        exercise_id=row["exercise_id"],
        lift_log_id=row["lift_log_id"],
        pr_type=PRType(row["pr_type"]),
        discriminator=row["discriminator"],
        value=row["value"],
        achieved_at=datetime.fromisoformat(row["achieved_at"]),
        previous_pr_id=row["previous_pr_id"],
        previous_value=row["previous_value"],
    )


class PRStoreSession:
    """Record-store operations inside one open write transaction."""

    def __init__(self, db: aiosqlite.Connection):
        self.db = db

    async def run_exists(self, lift_log_id: int, fingerprint: str) -> bool:
        cursor = await self.db.execute(
            "SELECT 1 FROM pr_detection_runs WHERE lift_log_id = ? AND fingerprint = ?",
            (lift_log_id, fingerprint),
        )
        return await cursor.fetchone() is not None

    async def current(self, key: RecordKey) -> PersonalRecord | None:
        """The record the current pointer for ``key`` refers to."""
        cursor = await self.db.execute(
            """
            SELECT pr.* FROM current_records cr
            JOIN personal_records pr ON pr.id = cr.record_id
            WHERE cr.user_id = ? AND cr.exercise_id = ?
            AND cr.pr_type = ? AND cr.discriminator_key = ?
            """,
            key.as_tuple(),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return _row_to_record(row)

    async def insert_record(self, record: PersonalRecord) -> int:
        """Append a record row. A second successor to the same record conflicts."""
        try:
            cursor = await self.db.execute(
                """
                INSERT INTO personal_records
                (user_id, exercise_id, lift_log_id, pr_type, discriminator,
                 discriminator_key, value, achieved_at, previous_pr_id, previous_value)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    record.user_id,
                    record.exercise_id,
                    record.lift_log_id,
                    record.pr_type.value,
                    record.discriminator,
                    record.key.discriminator_key,
                    record.value,
                    record.achieved_at.isoformat(),
                    record.previous_pr_id,
                    record.previous_value,
                ),
            )
        except aiosqlite.IntegrityError as exc:
            raise PRStoreConflict(
                f"Record {record.previous_pr_id} was already superseded",
                key=record.key.as_tuple(),
            ) from exc
        return cursor.lastrowid

    async def insert_pointer(self, key: RecordKey, record_id: int) -> None:
        """Create the current pointer for a category that had no record."""
        try:
            await self.db.execute(
                """
                INSERT INTO current_records
                (user_id, exercise_id, pr_type, discriminator_key, record_id)
                VALUES (?, ?, ?, ?, ?)
                """,
                (*key.as_tuple(), record_id),
            )
        except aiosqlite.IntegrityError as exc:
            raise PRStoreConflict(
                "A current record appeared for this category", key=key.as_tuple()
            ) from exc

    async def advance_pointer(self, key: RecordKey, expected_id: int, record_id: int) -> None:
        """Move the current pointer from ``expected_id`` to ``record_id``.

        Compare-and-swap: if the pointer no longer refers to ``expected_id``
        nothing is written and PRStoreConflict is raised.
        """
        cursor = await self.db.execute(
            """
            UPDATE current_records SET record_id = ?
            WHERE user_id = ? AND exercise_id = ? AND pr_type = ?
            AND discriminator_key = ? AND record_id = ?
            """,
            (record_id, *key.as_tuple(), expected_id),
        )
        if cursor.rowcount != 1:
            raise PRStoreConflict(
                f"Current record moved away from {expected_id}", key=key.as_tuple()
            )

    async def record_run(
        self,
        lift_log_id: int,
        fingerprint: str,
        trigger: str,
        snapshot: dict,
        new_pr_types: list[str],
    ) -> None:
        """Write the audit row for a finished detection run."""
        try:
            await self.db.execute(
                """
                INSERT INTO pr_detection_runs
                (lift_log_id, fingerprint, trigger, snapshot, new_pr_types)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    lift_log_id,
                    fingerprint,
                    trigger,
                    json.dumps(snapshot, default=str),
                    json.dumps(new_pr_types),
                ),
            )
        except aiosqlite.IntegrityError as exc:
            raise PRStoreConflict(
                f"Lift log {lift_log_id} was processed concurrently"
            ) from exc

    async def wipe(self, user_id: int, exercise_id: int) -> int:
        """Delete every record, pointer and run for a user and exercise.

        Only historical recalculation uses this. Returns the number of
        record rows removed.
        """
        await self.db.execute(
            "DELETE FROM current_records WHERE user_id = ? AND exercise_id = ?",
            (user_id, exercise_id),
        )
        await self.db.execute(
            """
            DELETE FROM pr_detection_runs WHERE lift_log_id IN (
                SELECT id FROM lift_logs WHERE user_id = ? AND exercise_id = ?
            )
            """,
            (user_id, exercise_id),
        )
        cursor = await self.db.execute(
            "DELETE FROM personal_records WHERE user_id = ? AND exercise_id = ?",
            (user_id, exercise_id),
        )
        return cursor.rowcount


class PersonalRecordRepository:
    """Repository for personal records, their current pointers and the run log."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[PRStoreSession]:
        """Open a write transaction (BEGIN IMMEDIATE) and yield a session.

        Commits on success, rolls back on any exception.
        """
        async with aiosqlite.connect(self.db_path, isolation_level=None) as db:
            db.row_factory = aiosqlite.Row
            await db.execute("BEGIN IMMEDIATE")
            try:
                yield PRStoreSession(db)
            except BaseException:
                await db.execute("ROLLBACK")
                raise
            await db.execute("COMMIT")

    async def get(self, record_id: int) -> PersonalRecord | None:
        """Get a record by ID."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM personal_records WHERE id = ?", (record_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return _row_to_record(row)

    async def current_for(self, user_id: int, exercise_id: int) -> list[PersonalRecord]:
        """All current records for a user and exercise."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                """
                SELECT pr.* FROM current_records cr
                JOIN personal_records pr ON pr.id = cr.record_id
                WHERE cr.user_id = ? AND cr.exercise_id = ?
                ORDER BY pr.pr_type, pr.discriminator
                """,
                (user_id, exercise_id),
            )
            rows = await cursor.fetchall()
            return [_row_to_record(row) for row in rows]

    async def current_record(self, key: RecordKey) -> PersonalRecord | None:
        """The current record for one category, if any."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            return await PRStoreSession(db).current(key)

    async def for_lift_log(self, lift_log_id: int) -> list[PersonalRecord]:
        """Records created by one lift log, oldest first."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM personal_records WHERE lift_log_id = ? ORDER BY id",
                (lift_log_id,),
            )
            rows = await cursor.fetchall()
            return [_row_to_record(row) for row in rows]

    async def history(
        self, user_id: int, exercise_id: int, pr_type: PRType | None = None
    ) -> list[PersonalRecord]:
        """Every record for a user and exercise, in achievement order."""
        query = "SELECT * FROM personal_records WHERE user_id = ? AND exercise_id = ?"
        params: list = [user_id, exercise_id]
        if pr_type is not None:
            query += " AND pr_type = ?"
            params.append(pr_type.value)
        query += " ORDER BY achieved_at, id"

        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(query, params)
            rows = await cursor.fetchall()
            return [_row_to_record(row) for row in rows]

    async def chain(self, record_id: int) -> list[PersonalRecord]:
        """Follow previous links from a record back to the first achievement.

        Returned oldest first.
        """
        chain: list[PersonalRecord] = []
        next_id: int | None = record_id
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            while next_id is not None:
                cursor = await db.execute(
                    "SELECT * FROM personal_records WHERE id = ?", (next_id,)
                )
                row = await cursor.fetchone()
                if row is None:
                    break
                record = _row_to_record(row)
                chain.append(record)
                next_id = record.previous_pr_id
        chain.reverse()
        return chain

    async def runs_for(self, lift_log_id: int) -> list[dict]:
        """Audit rows for a lift log, oldest first."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM pr_detection_runs WHERE lift_log_id = ? ORDER BY id",
                (lift_log_id,),
            )
            rows = await cursor.fetchall()
            return [
                {
                    "id": row["id"],
                    "lift_log_id": row["lift_log_id"],
                    "fingerprint": row["fingerprint"],
                    "trigger": row["trigger"],
                    "snapshot": json.loads(row["snapshot"]),
                    "new_pr_types": json.loads(row["new_pr_types"]),
                    "created_at": row["created_at"],
                }
                for row in rows
            ]

    async def count_for(self, user_id: int, exercise_id: int) -> int:
        """Number of record rows for a user and exercise."""
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT COUNT(*) FROM personal_records WHERE user_id = ? AND exercise_id = ?",
                (user_id, exercise_id),
            )
            (count,) = await cursor.fetchone()
            return count
