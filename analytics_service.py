from __future__ import annotations
import datetime
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from algorithms import MathTools
from models import Player, WorkoutLog
from program_data import PROGRAM, Program, reps_of, sets_of, time_of, weight_of
from week_utils import (
    WeekIdentifier,
    format_week,
    iso_week_from_timestamp,
    trailing_weeks,
)

logger = logging.getLogger(__name__)

DAY_STATUSES = ("empty", "partial", "complete")


@dataclass(frozen=True)
class CompletionPoint:
    week: WeekIdentifier
    label: str
    completed_days: int
    possible_days: int
    rate: int


@dataclass(frozen=True)
class ImprovementPoint:
    week: WeekIdentifier
    label: str
    best_weight: Optional[float]
    completed_workouts: int


class AnalyticsService:
    """Week resolution, completion and scoring over in-memory logs.

    Every method is a pure function of its arguments; nothing is cached
    between calls.
    """

    def __init__(self, program: Program = PROGRAM) -> None:
        self.program = program

    @staticmethod
    def resolve_log_week(log: WorkoutLog) -> Optional[WeekIdentifier]:
        """Return the ISO week a log belongs to.

        Explicit ``week_year``/``week`` fields win. Otherwise the week is
        derived from the timestamp; a legacy ``week_number`` only marks the
        log as old and is never read as a week index. Logs with neither
        return ``None``, as do logs whose timestamp falls outside the calendar.
        """
        if log.week_year is not None and log.week is not None:
            return WeekIdentifier(log.week_year, log.week)
        if log.timestamp is None:
            return None
        try:
            return iso_week_from_timestamp(log.timestamp)
        except (OverflowError, OSError, ValueError):
            return None

    def logs_in_week(
        self, logs: Iterable[WorkoutLog], week: WeekIdentifier
    ) -> List[WorkoutLog]:
        result: list[WorkoutLog] = []
        unresolved = 0
        for log in logs:
            resolved = self.resolve_log_week(log)
            if resolved is None:
                unresolved += 1
                continue
            if resolved == week:
                result.append(log)
        if unresolved:
            logger.warning(
                "Skipped %d log(s) without a resolvable week", unresolved
            )
        return result

    def available_weeks(self, logs: Iterable[WorkoutLog]) -> List[WeekIdentifier]:
        """Return every distinct resolved week, oldest first."""
        weeks = {self.resolve_log_week(log) for log in logs}
        weeks.discard(None)
        return sorted(weeks)

    def group_by_week(
        self, logs: Iterable[WorkoutLog]
    ) -> Dict[WeekIdentifier, List[WorkoutLog]]:
        grouped: dict[WeekIdentifier, list[WorkoutLog]] = {}
        unresolved = 0
        for log in logs:
            week = self.resolve_log_week(log)
            if week is None:
                unresolved += 1
                continue
            grouped.setdefault(week, []).append(log)
        if unresolved:
            logger.warning(
                "Skipped %d log(s) without a resolvable week", unresolved
            )
        return dict(sorted(grouped.items()))

    @staticmethod
    def find_log(
        logs: Iterable[WorkoutLog], player_id: str, day_id: str
    ) -> Optional[WorkoutLog]:
        """Return the log for ``player_id`` and ``day_id``; the last one wins."""
        found = None
        for log in logs:
            if log.player_id == player_id and log.day_id == day_id:
                found = log
        return found

    def _exercise_has_data(self, log: WorkoutLog, exercise) -> bool:
        if exercise.is_sprint:
            return not MathTools.is_blank(sets_of(log, exercise.id)) and not MathTools.is_blank(
                time_of(log, exercise.id)
            )
        return not MathTools.is_blank(weight_of(log, exercise.id))

    def day_status(
        self, logs_for_week: Iterable[WorkoutLog], player_id: str, day_id: str
    ) -> str:
        """Return ``empty``, ``partial`` or ``complete`` from recorded fields.

        The log's ``completed`` flag is not consulted here.
        """
        log = self.find_log(logs_for_week, player_id, day_id)
        empty, partial, complete = DAY_STATUSES
        if log is None:
            return empty
        metric = self.program.metric_exercises(day_id)
        if not metric:
            if self.program.day(day_id) is None:
                logger.warning("Log for unknown day %s", day_id)
            return empty
        filled = sum(1 for ex in metric if self._exercise_has_data(log, ex))
        if filled == 0:
            return empty
        if filled == len(metric):
            return complete
        return partial

    def week_status(
        self, players: Iterable[Player], logs: Iterable[WorkoutLog], week: WeekIdentifier
    ) -> Dict[str, Dict[str, str]]:
        """Return ``{player_id: {day_id: status}}`` for one week."""
        week_logs = self.logs_in_week(logs, week)
        return {
            p.id: {
                day_id: self.day_status(week_logs, p.id, day_id)
                for day_id in self.program.day_ids
            }
            for p in players
        }

    def _completed_days(
        self, week_logs: List[WorkoutLog], player_id: str
    ) -> int:
        count = 0
        for day_id in self.program.day_ids:
            log = self.find_log(week_logs, player_id, day_id)
            if log is not None and log.completed:
                count += 1
        return count

    def completion_rate(
        self,
        player_id: str,
        logs: Iterable[WorkoutLog],
        window_weeks: int = 8,
        now: Optional[datetime.datetime] = None,
    ) -> int:
        """Percentage of program days completed over the trailing window."""
        if window_weeks < 0:
            raise ValueError("window_weeks must be non-negative")
        by_week = self.group_by_week(log for log in logs if log.player_id == player_id)
        completed = 0
        for week in trailing_weeks(window_weeks, now):
            completed += self._completed_days(by_week.get(week, []), player_id)
        return MathTools.percent(completed, window_weeks * self.program.day_count)

    def _score_logs(self, logs: Iterable[WorkoutLog]) -> float:
        lifts = self.program.lift_exercises()
        sprints = self.program.sprint_exercises()
        total_volume = 0.0
        sprint_sum = 0.0
        sprint_count = 0
        for log in logs:
            if not log.has_data:
                continue
            for ex in lifts:
                weight = MathTools.parse_positive(weight_of(log, ex.id))
                sets = MathTools.parse_positive(sets_of(log, ex.id))
                reps = MathTools.parse_positive(reps_of(log, ex.id))
                if weight is None or sets is None or reps is None:
                    continue
                total_volume += weight * sets * reps
            for ex in sprints:
                seconds = MathTools.parse_positive(time_of(log, ex.id))
                if seconds is None:
                    continue
                sprint_sum += MathTools.sprint_score(seconds)
                sprint_count += 1
        return MathTools.composite_score(total_volume, sprint_sum, sprint_count)

    def performance_score(
        self,
        player_id: str,
        logs: Iterable[WorkoutLog],
        week: Optional[WeekIdentifier] = None,
    ) -> float:
        """Composite volume and sprint score, optionally for a single week."""
        player_logs = [log for log in logs if log.player_id == player_id]
        if week is not None:
            player_logs = self.logs_in_week(player_logs, week)
        return self._score_logs(player_logs)

    def team_completion_series(
        self,
        players: Iterable[Player],
        logs: Iterable[WorkoutLog],
        window_weeks: int = 8,
        now: Optional[datetime.datetime] = None,
    ) -> List[CompletionPoint]:
        squad = [p for p in players if p.is_player]
        by_week = self.group_by_week(logs)
        possible = len(squad) * self.program.day_count
        series = []
        for week in trailing_weeks(window_weeks, now):
            week_logs = by_week.get(week, [])
            done = sum(self._completed_days(week_logs, p.id) for p in squad)
            series.append(
                CompletionPoint(week, format_week(week), done, possible, MathTools.percent(done, possible))
            )
        return series

    def player_improvement_series(
        self,
        player_id: str,
        logs: Iterable[WorkoutLog],
        exercise_id: Optional[str] = None,
        window_weeks: int = 8,
        now: Optional[datetime.datetime] = None,
    ) -> List[ImprovementPoint]:
        """Best weekly weight for one lift plus completed workouts per week."""
        exercise_id = exercise_id or self.program.tracked_exercise_id
        by_week = self.group_by_week(log for log in logs if log.player_id == player_id)
        series = []
        for week in trailing_weeks(window_weeks, now):
            week_logs = by_week.get(week, [])
            weights = [
                MathTools.parse_number(weight_of(log, exercise_id))
                for log in week_logs
                if log.has_data and exercise_id
            ]
            weights = [w for w in weights if w is not None]
            series.append(
                ImprovementPoint(
                    week,
                    format_week(week),
                    max(weights) if weights else None,
                    sum(1 for log in week_logs if log.completed),
                )
            )
        return series
