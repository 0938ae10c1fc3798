import sqlite3
import json
import uuid
from contextlib import contextmanager
from typing import List, Optional, Tuple

from models import POSITIONS, Player, WorkoutLog


class Database:
    """Provides SQLite connection management and schema initialization."""

    _TABLE_DEFINITIONS = {
        "players": (
            """CREATE TABLE players (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    role TEXT NOT NULL DEFAULT 'Player',
                    position TEXT
                );""",
            ["id", "name", "role", "position"],
        ),
        "workout_logs": (
            """CREATE TABLE workout_logs (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    doc_key TEXT NOT NULL UNIQUE,
                    player_id TEXT NOT NULL,
                    day_id TEXT NOT NULL,
                    timestamp REAL,
                    week_number INTEGER,
                    week_year INTEGER,
                    week INTEGER,
                    data TEXT NOT NULL DEFAULT '{}',
                    completed INTEGER NOT NULL DEFAULT 0,
                    custom_workout TEXT
                );""",
            [
                "id",
                "doc_key",
                "player_id",
                "day_id",
                "timestamp",
                "week_number",
                "week_year",
                "week",
                "data",
                "completed",
                "custom_workout",
            ],
        ),
    }

    def __init__(self, db_path: str = "squad.db") -> None:
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
            for table, (sql, columns) in self._TABLE_DEFINITIONS.items():
                self._ensure_table(conn, table, sql, columns)

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
            return cursor.rowcount

    def fetch_all(self, query: str, params: Tuple = ()) -> List[Tuple]:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.fetchall()

    def _delete_all(self, table: str) -> None:
        self.execute(f"DELETE FROM {table};")


class PlayerRepository(BaseRepository):
    """Repository for the squad roster."""

    def add(
        self, name: str, role: str = "Player", position: Optional[str] = None
    ) -> Player:
        if not name.strip():
            raise ValueError("name must not be empty")
        player = Player(
            id=uuid.uuid4().hex,
            name=name.strip(),
            role=role,
            position=position if role == "Player" else None,
        )
        self.execute(
            "INSERT INTO players (id, name, role, position) VALUES (?, ?, ?, ?);",
            (player.id, player.name, player.role, player.position),
        )
        return player

    def fetch(self, player_id: str) -> Player:
        rows = self.fetch_all(
            "SELECT id, name, role, position FROM players WHERE id = ?;", (player_id,)
        )
        if not rows:
            raise ValueError("player not found")
        pid, name, role, position = rows[0]
        return Player(id=pid, name=name, role=role, position=position)

    def list_players(self) -> List[Player]:
        rows = self.fetch_all("SELECT id, name, role, position FROM players ORDER BY rowid;")
        return [
            Player(id=pid, name=name, role=role, position=position)
            for pid, name, role, position in rows
        ]

    def update_position(self, player_id: str, position: str) -> Player:
        if position not in POSITIONS:
            raise ValueError(f"unknown position: {position}")
        player = self.fetch(player_id)
        if not player.is_player:
            raise ValueError("only players have a position")
        updated = player.model_copy(update={"position": position})
        self.execute(
            "UPDATE players SET position = ? WHERE id = ?;", (position, player_id)
        )
        return updated

    def remove(self, player_id: str) -> None:
        """Delete a roster entry; the player's logs are kept."""
        if self.execute("DELETE FROM players WHERE id = ?;", (player_id,)) == 0:
            raise ValueError("player not found")

    def delete_all(self) -> None:
        self._delete_all("players")


class WorkoutLogRepository(BaseRepository):
    """Repository for workout logs keyed by player, day and week."""

    _COLUMNS = (
        "player_id, day_id, timestamp, week_number, week_year, week, "
        "data, completed, custom_workout"
    )

    def save(self, log: WorkoutLog) -> str:
        """Insert or replace the log stored under ``log.document_key``."""
        key = log.document_key
        with self._connection() as conn:
            conn.execute("DELETE FROM workout_logs WHERE doc_key = ?;", (key,))
            conn.execute(
                f"INSERT INTO workout_logs (doc_key, {self._COLUMNS}) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?);",
                (
                    key,
                    log.player_id,
                    log.day_id,
                    log.timestamp,
                    log.week_number,
                    log.week_year,
                    log.week,
                    json.dumps(log.data),
                    int(log.completed),
                    log.custom_workout,
                ),
            )
        return key

    @staticmethod
    def _row_to_log(row: Tuple) -> WorkoutLog:
        (
            player_id,
            day_id,
            timestamp,
            week_number,
            week_year,
            week,
            data,
            completed,
            custom_workout,
        ) = row
        return WorkoutLog(
            player_id=player_id,
            day_id=day_id,
            timestamp=timestamp,
            week_number=week_number,
            week_year=week_year,
            week=week,
            data=json.loads(data or "{}"),
            completed=bool(completed),
            custom_workout=custom_workout,
        )

    def list_logs(self) -> List[WorkoutLog]:
        rows = self.fetch_all(f"SELECT {self._COLUMNS} FROM workout_logs ORDER BY id;")
        return [self._row_to_log(r) for r in rows]

    def list_logs_for_player(self, player_id: str) -> List[WorkoutLog]:
        rows = self.fetch_all(
            f"SELECT {self._COLUMNS} FROM workout_logs WHERE player_id = ? ORDER BY id;",
            (player_id,),
        )
        return [self._row_to_log(r) for r in rows]

    def delete_all(self) -> None:
        self._delete_all("workout_logs")
