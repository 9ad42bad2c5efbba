import sqlite3
import aiosqlite
import datetime
from contextlib import contextmanager, asynccontextmanager
from typing import Iterable, List, Optional, Tuple

from models import SessionFilters, SessionRecord, SetFilters, SetRecord


def to_timestamp(value: datetime.date | datetime.datetime | str) -> str:
    """Normalise ``value`` to the naive ISO timestamp stored in the database."""
    if isinstance(value, str):
        value = datetime.datetime.fromisoformat(value)
    if not isinstance(value, datetime.datetime):
        value = datetime.datetime.combine(value, datetime.time())
    if value.tzinfo is not None:
        value = value.astimezone(datetime.timezone.utc).replace(tzinfo=None)
    return value.isoformat(timespec="seconds")


def parse_timestamp(value: str) -> datetime.datetime:
    dt = datetime.datetime.fromisoformat(value)
    if dt.tzinfo is not None:
        dt = dt.astimezone(datetime.timezone.utc).replace(tzinfo=None)
    return dt


class Database:
    """Provides SQLite connection management and schema initialization."""

    _TABLE_DEFINITIONS = {
        "sessions": (
            """CREATE TABLE sessions (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id INTEGER,
                    date TEXT NOT NULL,
                    name TEXT,
                    duration INTEGER NOT NULL DEFAULT 0,
                    is_completed INTEGER NOT NULL DEFAULT 0
                );""",
            ["id", "user_id", "date", "name", "duration", "is_completed"],
        ),
        "exercises": (
            """CREATE TABLE exercises (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL UNIQUE,
                    muscle_group TEXT NOT NULL DEFAULT 'Uncategorized'
                );""",
            ["id", "name", "muscle_group"],
        ),
        "sets": (
            """CREATE TABLE sets (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    session_id INTEGER NOT NULL,
                    exercise_id INTEGER NOT NULL,
                    set_number INTEGER NOT NULL DEFAULT 0,
                    weight REAL NOT NULL DEFAULT 0,
                    reps INTEGER NOT NULL DEFAULT 0,
                    is_warmup INTEGER NOT NULL DEFAULT 0,
                    is_completed INTEGER NOT NULL DEFAULT 0,
                    FOREIGN KEY(session_id) REFERENCES sessions(id) ON DELETE CASCADE,
                    FOREIGN KEY(exercise_id) REFERENCES exercises(id) ON DELETE CASCADE
                );""",
            [
                "id",
                "session_id",
                "exercise_id",
                "set_number",
                "weight",
                "reps",
                "is_warmup",
                "is_completed",
            ],
        ),
    }

    def __init__(self, db_path: str = "workout.db") -> None:
        self._db_path = db_path
        self._ensure_schema()

    @contextmanager
    def _connection(self):
        connection = sqlite3.connect(self._db_path)
        try:
            yield connection
            connection.commit()
        finally:
            connection.close()

    def _ensure_schema(self) -> None:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute("PRAGMA foreign_keys=off;")
            for table, (sql, columns) in self._TABLE_DEFINITIONS.items():
                self._ensure_table(conn, table, sql, columns)
            cursor.execute("PRAGMA foreign_keys=on;")
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_sessions_date ON sessions(date);"
            )
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_sets_session ON sets(session_id);"
            )

    def _ensure_table(
        self, conn: sqlite3.Connection, table: str, sql: str, columns: List[str]
    ) -> None:
        cur = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?;", (table,)
        )
        if cur.fetchone() is None:
            conn.execute(sql)
            return

        cur = conn.execute(f"PRAGMA table_info({table});")
        existing_cols = [row[1] for row in cur.fetchall()]
        if existing_cols == columns:
            return

        conn.execute(f"ALTER TABLE {table} RENAME TO {table}_old;")
        conn.execute(sql)
        common = [c for c in existing_cols if c in columns]
        if common:
            cols = ", ".join(common)
            conn.execute(f"INSERT INTO {table} ({cols}) SELECT {cols} FROM {table}_old;")
        conn.execute(f"DROP TABLE {table}_old;")


class BaseRepository(Database):
    """Base repository providing helper methods."""

    def execute(self, query: str, params: Tuple = ()) -> int:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.lastrowid

    def fetch_all(self, query: str, params: Tuple = ()) -> List[Tuple]:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.fetchall()


class AsyncDatabase(Database):
    """Provides asynchronous connection management."""

    @asynccontextmanager
    async def _async_connection(self):
        conn = await aiosqlite.connect(self._db_path)
        try:
            yield conn
            await conn.commit()
        finally:
            await conn.close()


class AsyncBaseRepository(AsyncDatabase):
    """Asynchronous variant of BaseRepository using aiosqlite."""

    async def execute(self, query: str, params: Tuple = ()) -> int:
        async with self._async_connection() as conn:
            cursor = await conn.execute(query, params)
            await conn.commit()
            return cursor.lastrowid

    async def fetch_all(self, query: str, params: Tuple = ()) -> List[Tuple]:
        async with self._async_connection() as conn:
            cursor = await conn.execute(query, params)
            rows = await cursor.fetchall()
            return list(rows)


class SessionRepository(BaseRepository):
    """Repository for sessions table operations."""

    def create(
        self,
        date: datetime.date | datetime.datetime | str,
        user_id: Optional[int] = None,
        duration_seconds: int = 0,
        is_completed: bool = False,
        name: Optional[str] = None,
    ) -> int:
        if duration_seconds < 0:
            raise ValueError("duration must be non-negative")
        return self.execute(
            "INSERT INTO sessions (user_id, date, name, duration, is_completed) "
            "VALUES (?, ?, ?, ?, ?);",
            (user_id, to_timestamp(date), name, int(duration_seconds), int(is_completed)),
        )

    def complete(self, session_id: int, duration_seconds: int) -> None:
        if duration_seconds < 0:
            raise ValueError("duration must be non-negative")
        self.execute(
            "UPDATE sessions SET is_completed = 1, duration = ? WHERE id = ?;",
            (int(duration_seconds), session_id),
        )

    def fetch_all_sessions(self) -> List[Tuple[int, str, int, int]]:
        return self.fetch_all(
            "SELECT id, date, duration, is_completed FROM sessions ORDER BY date, id;"
        )

    def delete(self, session_id: int) -> None:
        self.execute("DELETE FROM sets WHERE session_id = ?;", (session_id,))
        self.execute("DELETE FROM sessions WHERE id = ?;", (session_id,))


class ExerciseRepository(BaseRepository):
    """Repository for the exercise catalogue."""

    def ensure(self, name: str, muscle_group: str = "Uncategorized") -> int:
        """Return the id for ``name``, creating the exercise if needed."""
        name = name.strip()
        if not name:
            raise ValueError("exercise name must not be empty")
        self.execute(
            "INSERT OR IGNORE INTO exercises (name, muscle_group) VALUES (?, ?);",
            (name, muscle_group),
        )
        rows = self.fetch_all("SELECT id FROM exercises WHERE name = ?;", (name,))
        return int(rows[0][0])

    def fetch_detail(self, exercise_id: int) -> Optional[Tuple[int, str, str]]:
        rows = self.fetch_all(
            "SELECT id, name, muscle_group FROM exercises WHERE id = ?;",
            (exercise_id,),
        )
        return rows[0] if rows else None

    def fetch_all_exercises(self) -> List[Tuple[int, str, str]]:
        return self.fetch_all(
            "SELECT id, name, muscle_group FROM exercises ORDER BY name;"
        )


class SetRepository(BaseRepository):
    """Repository for sets table operations."""

    def add(
        self,
        session_id: int,
        exercise_id: int,
        weight: float,
        reps: int,
        is_warmup: bool = False,
        is_completed: bool = True,
        set_number: Optional[int] = None,
    ) -> int:
        if reps < 0:
            raise ValueError("reps must be non-negative")
        if weight < 0:
            raise ValueError("weight must be non-negative")
        if set_number is None:
            rows = self.fetch_all(
                "SELECT COALESCE(MAX(set_number), 0) + 1 FROM sets "
                "WHERE session_id = ? AND exercise_id = ?;",
                (session_id, exercise_id),
            )
            set_number = int(rows[0][0]) if rows else 1
        return self.execute(
            "INSERT INTO sets (session_id, exercise_id, set_number, weight, reps, is_warmup, is_completed) "
            "VALUES (?, ?, ?, ?, ?, ?, ?);",
            (
                session_id,
                exercise_id,
                set_number,
                float(weight),
                int(reps),
                int(is_warmup),
                int(is_completed),
            ),
        )

    def bulk_add(
        self,
        session_id: int,
        exercise_id: int,
        entries: Iterable[tuple[float, int]],
    ) -> list[int]:
        ids: list[int] = []
        for weight, reps in entries:
            ids.append(self.add(session_id, exercise_id, weight, reps))
        return ids


class AsyncRecordStore(AsyncBaseRepository):
    """Read-only queries over the workout log used by the analyzers."""

    async def list_sets(self, filters: SetFilters = SetFilters()) -> List[SetRecord]:
        query = (
            "SELECT s.id, s.session_id, e.id, e.name, e.muscle_group, s.weight, s.reps, "
            "s.is_warmup, s.is_completed, w.date, s.set_number "
            "FROM sets s "
            "JOIN exercises e ON s.exercise_id = e.id "
            "JOIN sessions w ON s.session_id = w.id "
            "WHERE 1 = 1"
        )
        params: list = []
        if filters.only_completed:
            query += " AND s.is_completed = 1 AND w.is_completed = 1"
        if filters.exclude_warmup:
            query += " AND s.is_warmup = 0"
        if filters.since is not None:
            query += " AND w.date >= ?"
            params.append(to_timestamp(filters.since))
        if filters.exercise_id is not None:
            query += " AND e.id = ?"
            params.append(filters.exercise_id)
        if filters.exercise_names:
            placeholders = ", ".join(["?" for _ in filters.exercise_names])
            query += f" AND lower(trim(e.name)) IN ({placeholders})"
            params.extend(n.strip().lower() for n in filters.exercise_names)
        if filters.muscle_group is not None:
            query += " AND e.muscle_group = ?"
            params.append(filters.muscle_group)
        query += " ORDER BY w.date, w.id, s.set_number, s.id;"
        rows = await self.fetch_all(query, tuple(params))
        return [
            SetRecord(
                set_id=int(sid),
                session_id=int(wid),
                exercise_id=int(eid),
                exercise_name=name,
                muscle_group=group,
                weight=float(weight),
                reps=int(reps),
                is_warmup=bool(warmup),
                is_completed=bool(done),
                session_date=parse_timestamp(date),
                set_number=int(number),
            )
            for sid, wid, eid, name, group, weight, reps, warmup, done, date, number in rows
        ]

    async def list_sessions(
        self, filters: SessionFilters = SessionFilters()
    ) -> List[SessionRecord]:
        query = (
            "SELECT w.id, w.user_id, w.date, w.duration, w.is_completed, "
            "COUNT(s.id), COUNT(DISTINCT s.exercise_id) "
            "FROM sessions w LEFT JOIN sets s ON s.session_id = w.id "
            "WHERE 1 = 1"
        )
        params: list = []
        if filters.only_completed:
            query += " AND w.is_completed = 1"
        if filters.since is not None:
            query += " AND w.date >= ?"
            params.append(to_timestamp(filters.since))
        query += " GROUP BY w.id ORDER BY w.date, w.id;"
        rows = await self.fetch_all(query, tuple(params))
        return [
            SessionRecord(
                session_id=int(wid),
                user_id=user_id,
                date=parse_timestamp(date),
                duration_seconds=int(duration or 0),
                is_completed=bool(done),
                set_count=int(set_count),
                exercise_count=int(exercise_count),
            )
            for wid, user_id, date, duration, done, set_count, exercise_count in rows
        ]
