import datetime
import uuid
from typing import Optional

import numpy as np

from db import PlayerRepository, WorkoutLogRepository
from models import Player, WorkoutLog
from program_data import PROGRAM, field_key
from week_utils import trailing_weeks, week_start

BASE_WEIGHTS = {
    "d1_1": 225,
    "d1_3": 120,
    "d2_3": 135,
    "d2_4": 100,
    "d3_1": 185,
    "d3_2": 95,
}
SPRINT_BASE_TIME = 4.8
FIRST_NAMES = ["Adam", "Ben", "Cole", "Dylan", "Ethan", "Jack", "Luke", "Noah", "Owen", "Ryan"]
LAST_NAMES = ["Baker", "Clark", "Evans", "Hall", "King", "Lee", "Moore", "Reed", "Scott", "Young"]


def _log_data(day, week_index: int, progress_rate: float, rng) -> dict[str, str]:
    data: dict[str, str] = {}
    for ex in day.exercises:
        if ex.is_sprint:
            seconds = SPRINT_BASE_TIME - week_index * 0.05 + rng.uniform(-0.15, 0.15)
            data[field_key(ex.id, "sets")] = "8"
            data[field_key(ex.id, "time")] = f"{seconds:.2f}"
        elif ex.id in BASE_WEIGHTS:
            heavy = ex.id in ("d1_1", "d3_1")
            raw = BASE_WEIGHTS[ex.id] * (1 + week_index * progress_rate) + rng.uniform(-5, 5)
            data[field_key(ex.id, "weight")] = str(int(round(raw / 5.0) * 5))
            data[field_key(ex.id, "sets")] = "4" if heavy else "3"
            data[field_key(ex.id, "reps")] = "5" if heavy else "8"
        else:
            data[field_key(ex.id, "sets")] = "4" if ex.id == "d1_4" else "3"
            data[field_key(ex.id, "reps")] = "8"
    return data


def generate_sample_data(
    player_count: int = 20,
    weeks: int = 8,
    seed: Optional[int] = None,
    now: Optional[datetime.datetime] = None,
) -> tuple[list[Player], list[WorkoutLog]]:
    """Return synthetic players and logs spread over the trailing weeks."""
    rng = np.random.default_rng(seed)
    players = []
    for i in range(player_count):
        name = f"{FIRST_NAMES[i % len(FIRST_NAMES)]} {LAST_NAMES[(i // len(FIRST_NAMES)) % len(LAST_NAMES)]}"
        players.append(
            Player(
                id=uuid.UUID(bytes=rng.bytes(16)).hex,
                name=name,
                role="Player",
                position="Forward" if rng.random() > 0.5 else "Back",
            )
        )

    logs = []
    for player in players:
        consistency = float(rng.uniform(0.6, 1.0))
        progress_rate = float(rng.uniform(0.01, 0.04))
        for week_index, week in enumerate(trailing_weeks(weeks, now)):
            if rng.random() >= consistency:
                continue
            monday = week_start(week.year, week.week)
            for offset, day in enumerate(PROGRAM.days):
                if rng.random() >= consistency + 0.1:
                    continue
                logged_at = monday + datetime.timedelta(
                    days=offset, hours=int(rng.integers(6, 18)), minutes=int(rng.integers(0, 60))
                )
                logs.append(
                    WorkoutLog(
                        player_id=player.id,
                        day_id=day.id,
                        timestamp=logged_at.timestamp() * 1000.0,
                        week_year=week.year,
                        week=week.week,
                        data=_log_data(day, week_index, progress_rate, rng),
                        completed=True,
                    )
                )
    return players, logs


def seed(db_path: str = "squad.db", player_count: int = 20, weeks: int = 8) -> None:
    players_repo = PlayerRepository(db_path)
    logs_repo = WorkoutLogRepository(db_path)
    if players_repo.list_players():
        print("Database already contains players")
        return

    players, logs = generate_sample_data(player_count, weeks)
    for player in players:
        stored = players_repo.add(player.name, player.role, player.position)
        for log in logs:
            if log.player_id == player.id:
                logs_repo.save(log.model_copy(update={"player_id": stored.id}))
    print(f"Seeded {len(players)} players and {len(logs)} logs")


if __name__ == "__main__":
    seed()
