from __future__ import annotations
import csv
import io
from typing import Iterable, List, Optional

import pandas as pd

from analytics_service import AnalyticsService
from models import Player, WorkoutLog
from program_data import time_of, weight_of
from week_utils import WeekIdentifier, format_week

CHECK_MARK = "✓"


class TrackerService:
    """Week-by-day completion grid for the whole squad."""

    def __init__(
        self, analytics: AnalyticsService | None = None, weight_unit: str = "kg"
    ) -> None:
        self.analytics = analytics or AnalyticsService()
        self.program = self.analytics.program
        self.weight_unit = weight_unit

    def cell_value(self, log: Optional[WorkoutLog]) -> str:
        """Summarise one log as shown in the tracker grid."""
        if log is None:
            return ""
        if not log.completed:
            return "Partial"
        day = self.program.day(log.day_id)
        if day is None or not day.exercises:
            return CHECK_MARK
        first = day.exercises[0]
        if first.is_sprint:
            seconds = time_of(log, first.id)
            return f"{seconds}s" if seconds else CHECK_MARK
        weight = weight_of(log, first.id)
        return f"{weight}{self.weight_unit}" if weight else CHECK_MARK

    def columns(self, weeks: List[WeekIdentifier]) -> List[str]:
        return [f"{format_week(w)} {d.title}" for w in weeks for d in self.program.days]

    def tracker_frame(
        self, players: Iterable[Player], logs: Iterable[WorkoutLog]
    ) -> pd.DataFrame:
        """Return one row per squad player and one column per week and day."""
        by_week = self.analytics.group_by_week(logs)
        weeks = list(by_week)
        rows = []
        for player in players:
            if not player.is_player:
                continue
            row = [player.name, player.position or ""]
            for week in weeks:
                for day in self.program.days:
                    log = self.analytics.find_log(by_week[week], player.id, day.id)
                    row.append(self.cell_value(log))
            rows.append(row)
        return pd.DataFrame(rows, columns=["Player", "Position"] + self.columns(weeks))

    def export_csv(self, players: Iterable[Player], logs: Iterable[WorkoutLog]) -> str:
        frame = self.tracker_frame(players, logs)
        buffer = io.StringIO()
        frame.to_csv(buffer, index=False, quoting=csv.QUOTE_ALL, lineterminator="\n")
        return buffer.getvalue()
