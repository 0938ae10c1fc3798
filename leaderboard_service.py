from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from algorithms import MathTools, WeightConverter
from analytics_service import AnalyticsService
from models import ROLES, Player, WorkoutLog
from program_data import BIG_LIFTS, time_of, weight_of

logger = logging.getLogger(__name__)

TOP_LIST_SIZE = 10
NO_VALUE = "-"


@dataclass(frozen=True)
class RankedEntry:
    rank: int
    player_id: str
    player_name: str
    value: float
    display_value: str


@dataclass(frozen=True)
class RankBucket:
    label: str
    start_rank: int
    end_rank: int
    entries: tuple[RankedEntry, ...]


@dataclass(frozen=True)
class HeadlineRow:
    player_id: str
    player_name: str
    lifts: Dict[str, str]


@dataclass(frozen=True)
class ConsistentPerformer:
    player_id: str
    player_name: str
    total_weeks: int
    ranks: tuple[int, ...]
    top10_count: int
    bottom10_count: int
    average_rank: float
    top_consistency: float
    bottom_consistency: float


@dataclass(frozen=True)
class ConsistencyReport:
    top: tuple[ConsistentPerformer, ...]
    bottom: tuple[ConsistentPerformer, ...]


def _format_number(value: float) -> str:
    text = f"{round(value, 2):f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


class LeaderboardService:
    """Exercise leaderboards and week-over-week consistency rankings."""

    def __init__(
        self,
        analytics: AnalyticsService | None = None,
        weight_unit: str = "kg",
        display_unit: str | None = None,
    ) -> None:
        self.analytics = analytics or AnalyticsService()
        self.weight_unit = weight_unit
        self.display_unit = display_unit or weight_unit
        for unit in (self.weight_unit, self.display_unit):
            if unit not in WeightConverter.UNITS:
                raise ValueError(f"unknown weight unit: {unit}")

    def format_value(self, value: float, is_sprint: bool) -> str:
        if is_sprint:
            return f"{_format_number(value)}s"
        shown = WeightConverter.convert(value, self.weight_unit, self.display_unit)
        return f"{_format_number(shown)}{self.display_unit}"

    @staticmethod
    def best_value(
        player_id: str, exercise_id: str, is_sprint: bool, logs: Iterable[WorkoutLog]
    ) -> Optional[float]:
        """Lowest sprint time or heaviest weight the player ever recorded."""
        accessor = time_of if is_sprint else weight_of
        best: Optional[float] = None
        for log in logs:
            if log.player_id != player_id or not log.has_data:
                continue
            value = MathTools.parse_number(accessor(log, exercise_id))
            if value is None:
                continue
            if best is None or (value < best if is_sprint else value > best):
                best = value
        return best

    def rank_exercise(
        self,
        exercise_id: str,
        is_sprint: bool,
        players: Iterable[Player],
        logs: Iterable[WorkoutLog],
        viewer_role: str,
    ) -> List[RankedEntry]:
        """Rank players by their best value for one exercise.

        Players only see other players; coaches see everyone. Players without
        a recorded value are left out.
        """
        if viewer_role not in ROLES:
            raise ValueError(f"unknown role: {viewer_role}")
        logs = list(logs)
        visible = [p for p in players if viewer_role == "Coach" or p.is_player]
        scored = []
        for p in visible:
            value = self.best_value(p.id, exercise_id, is_sprint, logs)
            if value is not None:
                scored.append((p, value))
        scored.sort(key=lambda item: item[1], reverse=not is_sprint)
        return [
            RankedEntry(rank, p.id, p.name, value, self.format_value(value, is_sprint))
            for rank, (p, value) in enumerate(scored, start=1)
        ]

    @staticmethod
    def percentile_buckets(ranked: List[RankedEntry]) -> List[RankBucket]:
        """Group ranks past the top ten into quarter buckets.

        Empty buckets are omitted, so ten or fewer players yield no buckets.
        """
        total = len(ranked)
        b25, b50, b75, last = MathTools.percentile_boundaries(total)
        bounds = (
            ("Top 25%", TOP_LIST_SIZE + 1, b25),
            ("Top 50%", b25 + 1, b50),
            ("Top 75%", b50 + 1, b75),
            ("Bottom 25%", b75 + 1, last),
        )
        buckets = []
        for label, start, end in bounds:
            start = max(start, TOP_LIST_SIZE + 1)
            if start > end:
                continue
            entries = tuple(e for e in ranked if start <= e.rank <= end)
            if entries:
                buckets.append(RankBucket(label, start, end, entries))
        return buckets

    def headline_lifts(
        self, players: Iterable[Player], logs: Iterable[WorkoutLog]
    ) -> List[HeadlineRow]:
        """Best recorded weight per headline lift for every roster entry."""
        logs = list(logs)
        rows = []
        for p in players:
            lifts = {}
            for exercise_id, _ in BIG_LIFTS:
                value = self.best_value(p.id, exercise_id, False, logs)
                lifts[exercise_id] = (
                    NO_VALUE if value is None else self.format_value(value, False)
                )
            rows.append(HeadlineRow(p.id, p.name, lifts))
        return rows

    def classify_consistent_performers(
        self, players: Iterable[Player], logs: Iterable[WorkoutLog]
    ) -> ConsistencyReport:
        """Find players who keep landing in the weekly top or bottom ten."""
        squad = [p for p in players if p.is_player]
        tallies: Dict[str, dict] = {}
        for week, week_logs in self.analytics.group_by_week(logs).items():
            scored = []
            for p in squad:
                score = self.analytics.performance_score(p.id, week_logs)
                # a zero score means nothing was logged, not a poor week
                if score == 0:
                    continue
                scored.append((p.id, score))
            scored.sort(key=lambda item: item[1], reverse=True)
            field_size = len(scored)
            logger.debug("Week %s ranked %d player(s)", week, field_size)
            for rank, (pid, _score) in enumerate(scored, start=1):
                tally = tallies.setdefault(pid, {"ranks": [], "top": 0, "bottom": 0})
                tally["ranks"].append(rank)
                if rank <= TOP_LIST_SIZE:
                    tally["top"] += 1
                if rank > field_size - TOP_LIST_SIZE:
                    tally["bottom"] += 1

        performers = []
        for p in squad:
            tally = tallies.get(p.id)
            if not tally or not tally["ranks"]:
                continue
            total = len(tally["ranks"])
            performers.append(
                ConsistentPerformer(
                    player_id=p.id,
                    player_name=p.name,
                    total_weeks=total,
                    ranks=tuple(tally["ranks"]),
                    top10_count=tally["top"],
                    bottom10_count=tally["bottom"],
                    average_rank=MathTools.mean(tally["ranks"]),
                    top_consistency=tally["top"] / total,
                    bottom_consistency=tally["bottom"] / total,
                )
            )
        top = sorted(performers, key=lambda c: (-c.top_consistency, c.average_rank))
        bottom = sorted(performers, key=lambda c: (-c.bottom_consistency, -c.average_rank))
        return ConsistencyReport(tuple(top[:TOP_LIST_SIZE]), tuple(bottom[:TOP_LIST_SIZE]))
