import dataclasses
import logging
from typing import Optional
from fastapi import FastAPI, HTTPException, Response

from analytics_service import AnalyticsService
from config import APP_VERSION, YamlConfig
from db import PlayerRepository, WorkoutLogRepository
from leaderboard_service import LeaderboardService
from models import WorkoutLog
from program_data import BIG_LIFTS, PROGRAM
from tracker_service import TrackerService
from week_utils import WeekIdentifier, format_week, parse_week

logger = logging.getLogger(__name__)


def _week_or_400(text: Optional[str]) -> Optional[WeekIdentifier]:
    if text is None:
        return None
    week = parse_week(text)
    if week is None:
        raise HTTPException(status_code=400, detail="week must look like YYYY-Www")
    return week


class SquadAPI:
    """Provides REST endpoints for squad logging and coach analytics."""

    def __init__(
        self,
        db_path: str | None = None,
        yaml_path: str = "settings.yaml",
    ) -> None:
        self.config = YamlConfig(yaml_path)
        self.settings = self.config.settings()
        self.db_path = db_path or self.settings.db_path
        self.players = PlayerRepository(self.db_path)
        self.logs = WorkoutLogRepository(self.db_path)
        self.analytics = AnalyticsService(PROGRAM)
        self.leaderboard = LeaderboardService(
            self.analytics,
            weight_unit=self.settings.weight_unit,
            display_unit=self.settings.display_weight_unit,
        )
        self.tracker = TrackerService(self.analytics, weight_unit=self.settings.weight_unit)
        self.app = FastAPI(
            title="Squad API",
            description="REST API for squad workout logging and leaderboards",
            version=APP_VERSION,
        )
        self._setup_routes()

    def _player_or_404(self, player_id: str):
        try:
            return self.players.fetch(player_id)
        except ValueError as e:
            raise HTTPException(status_code=404, detail=str(e))

    def _setup_routes(self) -> None:
        @self.app.get("/health")
        def health():
            return {"status": "ok", "version": APP_VERSION}

        @self.app.get("/program")
        def program():
            return [dataclasses.asdict(day) for day in PROGRAM.days]

        @self.app.get("/players")
        def list_players():
            return [p.model_dump() for p in self.players.list_players()]

        @self.app.post("/players")
        def add_player(name: str, role: str = "Player", position: str = None):
            try:
                player = self.players.add(name, role, position)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return player.model_dump()

        @self.app.put("/players/{player_id}/position")
        def update_position(player_id: str, position: str):
            self._player_or_404(player_id)
            try:
                return self.players.update_position(player_id, position).model_dump()
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))

        @self.app.delete("/players/{player_id}")
        def remove_player(player_id: str):
            try:
                self.players.remove(player_id)
            except ValueError as e:
                raise HTTPException(status_code=404, detail=str(e))
            return {"status": "deleted"}

        @self.app.post("/logs")
        def save_log(log: WorkoutLog):
            if PROGRAM.day(log.day_id) is None:
                raise HTTPException(status_code=400, detail="unknown day")
            key = self.logs.save(log)
            logger.info("Saved workout log %s", key)
            return {"key": key}

        @self.app.get("/logs")
        def list_logs(player_id: str = None):
            if player_id is None:
                logs = self.logs.list_logs()
            else:
                logs = self.logs.list_logs_for_player(player_id)
            return [log.to_document() for log in logs]

        @self.app.get("/analytics/weeks")
        def weeks():
            return [format_week(w) for w in self.analytics.available_weeks(self.logs.list_logs())]

        @self.app.get("/analytics/week_status")
        def week_status(week: str):
            target = _week_or_400(week)
            return self.analytics.week_status(
                self.players.list_players(), self.logs.list_logs(), target
            )

        @self.app.get("/analytics/completion/{player_id}")
        def completion(player_id: str, window_weeks: int = None):
            self._player_or_404(player_id)
            window = window_weeks if window_weeks is not None else self.settings.window_weeks
            try:
                rate = self.analytics.completion_rate(
                    player_id, self.logs.list_logs_for_player(player_id), window
                )
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return {"player_id": player_id, "window_weeks": window, "rate": rate}

        @self.app.get("/analytics/score/{player_id}")
        def score(player_id: str, week: str = None):
            self._player_or_404(player_id)
            target = _week_or_400(week)
            value = self.analytics.performance_score(
                player_id, self.logs.list_logs_for_player(player_id), target
            )
            return {"player_id": player_id, "week": week, "score": value}

        @self.app.get("/analytics/rankings/{exercise_id}")
        def rankings(exercise_id: str, viewer_role: str = "Coach", week: str = None):
            exercise = PROGRAM.exercise(exercise_id)
            if exercise is None or not exercise.is_metric:
                raise HTTPException(status_code=404, detail="exercise not found")
            target = _week_or_400(week)
            logs = self.logs.list_logs()
            if target is not None:
                logs = self.analytics.logs_in_week(logs, target)
            try:
                ranked = self.leaderboard.rank_exercise(
                    exercise_id,
                    exercise.is_sprint,
                    self.players.list_players(),
                    logs,
                    viewer_role,
                )
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return {
                "exercise": exercise.name,
                "ranked": [dataclasses.asdict(e) for e in ranked],
                "buckets": [
                    dataclasses.asdict(b) for b in self.leaderboard.percentile_buckets(ranked)
                ],
            }

        @self.app.get("/analytics/headline_lifts")
        def headline_lifts():
            rows = self.leaderboard.headline_lifts(
                self.players.list_players(), self.logs.list_logs()
            )
            return {
                "lifts": [{"id": ex_id, "label": label} for ex_id, label in BIG_LIFTS],
                "rows": [dataclasses.asdict(r) for r in rows],
            }

        @self.app.get("/analytics/consistency")
        def consistency():
            report = self.leaderboard.classify_consistent_performers(
                self.players.list_players(), self.logs.list_logs()
            )
            return dataclasses.asdict(report)

        @self.app.get("/analytics/team_completion")
        def team_completion():
            series = self.analytics.team_completion_series(
                self.players.list_players(),
                self.logs.list_logs(),
                self.settings.window_weeks,
            )
            return [dataclasses.asdict(p) for p in series]

        @self.app.get("/analytics/improvement/{player_id}")
        def improvement(player_id: str, exercise_id: str = None):
            self._player_or_404(player_id)
            exercise_id = exercise_id or self.settings.tracked_exercise
            if exercise_id is not None and PROGRAM.exercise(exercise_id) is None:
                raise HTTPException(status_code=404, detail="exercise not found")
            series = self.analytics.player_improvement_series(
                player_id,
                self.logs.list_logs_for_player(player_id),
                exercise_id,
                self.settings.window_weeks,
            )
            return [dataclasses.asdict(p) for p in series]

        @self.app.get("/tracker.csv")
        def tracker_csv():
            content = self.tracker.export_csv(
                self.players.list_players(), self.logs.list_logs()
            )
            return Response(content=content, media_type="text/csv")


api = SquadAPI()
app = api.app

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app)
