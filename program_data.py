from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from models import WorkoutLog

FIELD_KINDS = ("weight", "sets", "reps", "time")


@dataclass(frozen=True)
class ExerciseDef:
    """A single prescribed movement within a program day."""

    id: str
    name: str
    reps: str
    is_metric: bool
    is_sprint: bool = False
    video_url: Optional[str] = None


@dataclass(frozen=True)
class WorkoutDay:
    id: str
    title: str
    focus: str
    exercises: tuple[ExerciseDef, ...]


@dataclass(frozen=True)
class Program:
    """Ordered training days plus an unlogged warm-up block."""

    days: tuple[WorkoutDay, ...]
    warmup: tuple[ExerciseDef, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for ex in self.warmup + tuple(e for d in self.days for e in d.exercises):
            if ex.id in seen:
                raise ValueError(f"duplicate exercise id: {ex.id}")
            seen.add(ex.id)

    @property
    def day_count(self) -> int:
        return len(self.days)

    @property
    def day_ids(self) -> list[str]:
        return [d.id for d in self.days]

    def day(self, day_id: str) -> Optional[WorkoutDay]:
        for d in self.days:
            if d.id == day_id:
                return d
        return None

    def exercise(self, exercise_id: str) -> Optional[ExerciseDef]:
        for d in self.days:
            for ex in d.exercises:
                if ex.id == exercise_id:
                    return ex
        return None

    def metric_exercises(self, day_id: str) -> list[ExerciseDef]:
        d = self.day(day_id)
        if d is None:
            return []
        return [ex for ex in d.exercises if ex.is_metric]

    def lift_exercises(self) -> list[ExerciseDef]:
        """Metric exercises recorded as weight, sets and reps."""
        return [
            ex for d in self.days for ex in d.exercises if ex.is_metric and not ex.is_sprint
        ]

    def sprint_exercises(self) -> list[ExerciseDef]:
        return [ex for d in self.days for ex in d.exercises if ex.is_metric and ex.is_sprint]

    @property
    def tracked_exercise_id(self) -> Optional[str]:
        """Primary lift of the first day, used for improvement charts."""
        if not self.days:
            return None
        for ex in self.days[0].exercises:
            if ex.is_metric and not ex.is_sprint:
                return ex.id
        return None


def field_key(exercise_id: str, kind: str) -> str:
    """Return the stored data key for ``kind`` of ``exercise_id``."""
    if kind not in FIELD_KINDS:
        raise ValueError(f"unknown field kind: {kind}")
    return f"{exercise_id}_{kind}"


def _field(log: "WorkoutLog", exercise_id: str, kind: str) -> Optional[str]:
    return (log.data or {}).get(field_key(exercise_id, kind))


def weight_of(log: "WorkoutLog", exercise_id: str) -> Optional[str]:
    return _field(log, exercise_id, "weight")


def sets_of(log: "WorkoutLog", exercise_id: str) -> Optional[str]:
    return _field(log, exercise_id, "sets")


def reps_of(log: "WorkoutLog", exercise_id: str) -> Optional[str]:
    return _field(log, exercise_id, "reps")


def time_of(log: "WorkoutLog", exercise_id: str) -> Optional[str]:
    return _field(log, exercise_id, "time")


WARMUP = (
    ExerciseDef("wu1", "Skaters", "2x20", False, video_url="https://youtu.be/9_jLW6VkU8A"),
    ExerciseDef("wu2", "Single Leg Pogos", "2x20", False, video_url="https://youtube.com/shorts/8BRYmMpgxHA"),
    ExerciseDef("wu3", "Two Leg Pogos", "2x20", False, video_url="https://youtube.com/shorts/mOlZ8IIaAVo"),
    ExerciseDef("wu4", "Vertical Bounds", "2x10", False, video_url="https://youtube.com/shorts/OAhgPwTLJoo"),
    ExerciseDef("wu5", "Horizontal Bounds", "2x10", False, video_url="https://youtu.be/xAk2tKNPsUw"),
    ExerciseDef("wu6", "A-Skip", "2x20", False),
    ExerciseDef("wu7", "B-Skip", "2x20", False, video_url="https://youtu.be/A7r6yCpmSrA"),
)

DAY1 = WorkoutDay(
    "day1",
    "Day 1",
    "Force Production",
    (
        ExerciseDef("d1_1", "Hex Bar Deadlift", "4x5", True),
        ExerciseDef("d1_2", "Dips", "3x8", True),
        ExerciseDef("d1_3", "Lat Pull Down", "3x8", True),
        ExerciseDef("d1_4", "Barbell Ab Roll Out", "4x8", True),
        ExerciseDef("d1_5", "Back Extension", "3x8", True),
    ),
)

DAY2 = WorkoutDay(
    "day2",
    "Day 2",
    "Power & Stability",
    (
        ExerciseDef("d2_1", "Split Squat Jump", "3x8 (Alt)", True),
        ExerciseDef("d2_2", "Split Squat Hold", "2x60s (Toes)", True),
        ExerciseDef("d2_3", "Incline Bench Press", "3x8", True),
        ExerciseDef("d2_4", "Seated Row", "3x8", True),
    ),
)

DAY3 = WorkoutDay(
    "day3",
    "Day 3",
    "Work Capacity (Grit)",
    (
        ExerciseDef("d3_1", "Squat", "5x5", True),
        ExerciseDef("d3_2", "Hang Cleans & Press", "5x5", True),
        ExerciseDef("d3_3", "Bear Crawls", "4x30m", True),
        ExerciseDef("d3_4", "Wall Sits", "2x2min (Toes)", True),
    ),
)

DAY4 = WorkoutDay(
    "day4",
    "Day 4",
    "Speed",
    (ExerciseDef("d4_1", "Sprints (30m)", "8x30m (100%)", True, is_sprint=True),),
)

PROGRAM = Program(days=(DAY1, DAY2, DAY3, DAY4), warmup=WARMUP)

# Headline lifts shown on the coach leaderboard.
BIG_LIFTS = (
    ("d1_1", "Hex DL (D1)"),
    ("d2_3", "Inc Bench (D2)"),
    ("d3_1", "Squat (D3)"),
    ("d3_2", "H. Clean (D3)"),
)
