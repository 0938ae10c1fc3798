import os
import sys
import datetime
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from analytics_service import AnalyticsService
from models import Player, WorkoutLog
from program_data import PROGRAM
from week_utils import WeekIdentifier, week_start

UTC = datetime.timezone.utc
NOW = datetime.datetime(2024, 3, 13, 12, tzinfo=UTC)  # 2024-W11
DAY1_FULL = {
    "d1_1_weight": "200",
    "d1_2_weight": "20",
    "d1_3_weight": "80",
    "d1_4_weight": "10",
    "d1_5_weight": "15",
}


def ts(week: int, year: int = 2024, day_offset: int = 0) -> float:
    start = week_start(year, week) + datetime.timedelta(days=day_offset, hours=9)
    return start.timestamp() * 1000


def make_log(player_id, day_id, week, data=None, completed=True, year=2024) -> WorkoutLog:
    return WorkoutLog(
        player_id=player_id,
        day_id=day_id,
        timestamp=ts(week, year),
        week_year=year,
        week=week,
        data=data or {},
        completed=completed,
    )


class WeekResolutionTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.service = AnalyticsService(PROGRAM)

    def test_week_fields_take_priority(self) -> None:
        log = WorkoutLog(playerId="p1", dayId="day1", timestamp=ts(20), weekYear=2024, week=10)
        self.assertEqual(self.service.resolve_log_week(log), WeekIdentifier(2024, 10))

    def test_legacy_week_number_uses_timestamp(self) -> None:
        log = WorkoutLog(player_id="p1", day_id="day1", timestamp=ts(11), week_number=3)
        self.assertEqual(self.service.resolve_log_week(log), WeekIdentifier(2024, 11))

    def test_timestamp_only(self) -> None:
        log = WorkoutLog(player_id="p1", day_id="day1", timestamp=ts(52, 2020, 6))
        self.assertEqual(self.service.resolve_log_week(log), WeekIdentifier(2020, 52))

    def test_unresolvable_log(self) -> None:
        log = WorkoutLog(player_id="p1", day_id="day1")
        self.assertIsNone(self.service.resolve_log_week(log))
        with self.assertLogs("analytics_service", level="WARNING"):
            result = self.service.logs_in_week([log], WeekIdentifier(2024, 11))
        self.assertEqual(result, [])

    def test_timestamp_outside_calendar_is_unresolvable(self) -> None:
        good = make_log("p1", "day1", 11, DAY1_FULL)
        huge = WorkoutLog(player_id="p1", day_id="day1", timestamp=1e300)
        far = WorkoutLog(player_id="p1", day_id="day2", timestamp=1e15)
        self.assertIsNone(self.service.resolve_log_week(huge))
        self.assertIsNone(self.service.resolve_log_week(far))
        self.assertEqual(
            self.service.available_weeks([good, huge, far]), [WeekIdentifier(2024, 11)]
        )
        with self.assertLogs("analytics_service", level="WARNING"):
            grouped = self.service.group_by_week([good, huge, far])
        self.assertEqual(grouped, {WeekIdentifier(2024, 11): [good]})

    def test_non_finite_timestamp_is_rejected(self) -> None:
        for bad in (float("nan"), float("inf"), float("-inf")):
            with self.assertRaises(ValueError):
                WorkoutLog(player_id="p1", day_id="day1", timestamp=bad)

    def test_logs_in_week_and_available_weeks(self) -> None:
        logs = [
            make_log("p1", "day1", 10),
            make_log("p1", "day2", 11),
            WorkoutLog(player_id="p2", day_id="day1", timestamp=ts(11), week_number=7),
            make_log("p2", "day1", 2, year=2023),
        ]
        in_week = self.service.logs_in_week(logs, WeekIdentifier(2024, 11))
        self.assertEqual([log.day_id for log in in_week], ["day2", "day1"])
        self.assertEqual(
            self.service.available_weeks(logs),
            [WeekIdentifier(2023, 2), WeekIdentifier(2024, 10), WeekIdentifier(2024, 11)],
        )

    def test_find_log_last_wins(self) -> None:
        first = make_log("p1", "day1", 11, completed=True)
        second = make_log("p1", "day1", 11, completed=False)
        self.assertIs(self.service.find_log([first, second], "p1", "day1"), second)
        self.assertIsNone(self.service.find_log([first], "p1", "day2"))


class DayStatusTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.service = AnalyticsService(PROGRAM)

    def test_no_log_is_empty(self) -> None:
        self.assertEqual(self.service.day_status([], "p1", "day1"), "empty")

    def test_partial_and_complete(self) -> None:
        partial = make_log("p1", "day1", 11, {"d1_1_weight": "200", "d1_2_weight": " "})
        self.assertEqual(self.service.day_status([partial], "p1", "day1"), "partial")
        full = make_log("p1", "day1", 11, DAY1_FULL, completed=False)
        self.assertEqual(self.service.day_status([full], "p1", "day1"), "complete")

    def test_completed_flag_is_ignored(self) -> None:
        log = make_log("p1", "day1", 11, {"d1_1_sets": "4"}, completed=True)
        self.assertEqual(self.service.day_status([log], "p1", "day1"), "empty")

    def test_sprint_needs_sets_and_time(self) -> None:
        only_time = make_log("p1", "day4", 11, {"d4_1_time": "4.8"})
        self.assertEqual(self.service.day_status([only_time], "p1", "day4"), "empty")
        both = make_log("p1", "day4", 11, {"d4_1_time": "4.8", "d4_1_sets": "8"})
        self.assertEqual(self.service.day_status([both], "p1", "day4"), "complete")

    def test_unknown_day(self) -> None:
        log = make_log("p1", "day9", 11, {"x_weight": "1"})
        with self.assertLogs("analytics_service", level="WARNING"):
            self.assertEqual(self.service.day_status([log], "p1", "day9"), "empty")

    def test_week_status(self) -> None:
        players = [Player(id="p1", name="A"), Player(id="p2", name="B")]
        logs = [make_log("p1", "day1", 11, DAY1_FULL), make_log("p1", "day1", 10, {})]
        grid = self.service.week_status(players, logs, WeekIdentifier(2024, 11))
        self.assertEqual(grid["p1"]["day1"], "complete")
        self.assertEqual(grid["p1"]["day2"], "empty")
        self.assertEqual(set(grid["p2"].values()), {"empty"})


class CompletionRateTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.service = AnalyticsService(PROGRAM)

    def test_no_logs(self) -> None:
        self.assertEqual(self.service.completion_rate("p1", [], now=NOW), 0)

    def test_full_completion(self) -> None:
        logs = [
            make_log("p1", day_id, week)
            for week in range(4, 12)
            for day_id in PROGRAM.day_ids
        ]
        self.assertEqual(self.service.completion_rate("p1", logs, now=NOW), 100)

    def test_partial_completion_rounds_half_up(self) -> None:
        logs = [make_log("p1", day_id, 11) for day_id in PROGRAM.day_ids]
        logs.append(make_log("p1", "day1", 3))
        logs.append(make_log("p2", "day2", 10))
        self.assertEqual(self.service.completion_rate("p1", logs, now=NOW), 13)

    def test_uncompleted_and_duplicate_logs(self) -> None:
        logs = [
            make_log("p1", "day1", 11, DAY1_FULL, completed=False),
            make_log("p1", "day2", 11, completed=True),
            make_log("p1", "day2", 11, completed=False),
        ]
        self.assertEqual(self.service.completion_rate("p1", logs, 1, now=NOW), 0)

    def test_window_validation(self) -> None:
        self.assertEqual(self.service.completion_rate("p1", [], 0, now=NOW), 0)
        with self.assertRaises(ValueError):
            self.service.completion_rate("p1", [], -1, now=NOW)


class PerformanceScoreTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.service = AnalyticsService(PROGRAM)

    def test_volume_only(self) -> None:
        log = make_log("p1", "day1", 11, {"d1_1_weight": "200", "d1_1_sets": "4", "d1_1_reps": "5"})
        self.assertAlmostEqual(self.service.performance_score("p1", [log]), 4.0)

    def test_sprint_only(self) -> None:
        logs = [
            make_log("p1", "day4", 10, {"d4_1_time": "5", "d4_1_sets": "8"}),
            make_log("p1", "day4", 11, {"d4_1_time": "4", "d4_1_sets": "8"}),
        ]
        # (100/5 + 100/4) / 2 * 10
        self.assertAlmostEqual(self.service.performance_score("p1", logs), 225.0)

    def test_malformed_values_are_skipped(self) -> None:
        logs = [
            make_log("p1", "day1", 11, {"d1_1_weight": "abc", "d1_1_sets": "4", "d1_1_reps": "5"}),
            make_log("p1", "day3", 11, {"d3_1_weight": "100", "d3_1_sets": "0", "d3_1_reps": "5"}),
            make_log("p1", "day4", 11, {"d4_1_time": "-1"}),
        ]
        self.assertEqual(self.service.performance_score("p1", logs), 0.0)

    def test_week_scoped(self) -> None:
        logs = [
            make_log("p1", "day1", 10, {"d1_1_weight": "100", "d1_1_sets": "1", "d1_1_reps": "10"}),
            make_log("p1", "day3", 11, {"d3_1_weight": "200", "d3_1_sets": "5", "d3_1_reps": "5"}),
            make_log("p2", "day3", 11, {"d3_1_weight": "300", "d3_1_sets": "5", "d3_1_reps": "5"}),
        ]
        self.assertAlmostEqual(self.service.performance_score("p1", logs), 6.0)
        self.assertAlmostEqual(
            self.service.performance_score("p1", logs, WeekIdentifier(2024, 11)), 5.0
        )
        self.assertEqual(
            self.service.performance_score("p1", logs, WeekIdentifier(2024, 9)), 0.0
        )

    def test_idempotent(self) -> None:
        logs = [make_log("p1", "day1", 11, {"d1_1_weight": "200", "d1_1_sets": "4", "d1_1_reps": "5"})]
        snapshot = list(logs)
        first = self.service.performance_score("p1", logs)
        self.assertEqual(first, self.service.performance_score("p1", logs))
        self.assertEqual(logs, snapshot)


class SeriesTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.service = AnalyticsService(PROGRAM)
        self.players = [
            Player(id="p1", name="A"),
            Player(id="p2", name="B"),
            Player(id="c1", name="Coach", role="Coach"),
        ]

    def test_team_completion_series(self) -> None:
        logs = [make_log("p1", day_id, 11) for day_id in PROGRAM.day_ids]
        logs += [make_log("p2", "day1", 11), make_log("p2", "day2", 11)]
        logs += [make_log("c1", day_id, 11) for day_id in PROGRAM.day_ids]
        logs.append(make_log("p2", "day3", 11, completed=False))
        series = self.service.team_completion_series(self.players, logs, 2, now=NOW)
        self.assertEqual([p.label for p in series], ["2024-W10", "2024-W11"])
        self.assertEqual(series[0].rate, 0)
        self.assertEqual(series[1].completed_days, 6)
        self.assertEqual(series[1].possible_days, 8)
        self.assertEqual(series[1].rate, 75)

    def test_team_completion_without_players(self) -> None:
        series = self.service.team_completion_series([], [], 3, now=NOW)
        self.assertEqual([p.rate for p in series], [0, 0, 0])

    def test_player_improvement_series(self) -> None:
        logs = [
            make_log("p1", "day1", 10, {"d1_1_weight": "100"}),
            make_log("p1", "day1", 11, {"d1_1_weight": "110"}),
            make_log("p1", "day2", 11, {"d2_3_weight": "60"}, completed=False),
            make_log("p2", "day1", 11, {"d1_1_weight": "300"}),
        ]
        series = self.service.player_improvement_series("p1", logs, window_weeks=3, now=NOW)
        self.assertEqual([p.label for p in series], ["2024-W09", "2024-W10", "2024-W11"])
        self.assertEqual([p.best_weight for p in series], [None, 100.0, 110.0])
        self.assertEqual([p.completed_workouts for p in series], [0, 1, 1])

    def test_improvement_for_other_exercise(self) -> None:
        logs = [make_log("p1", "day2", 11, {"d2_3_weight": "60"})]
        series = self.service.player_improvement_series("p1", logs, "d2_3", 1, now=NOW)
        self.assertEqual(series[0].best_weight, 60.0)


if __name__ == "__main__":
    unittest.main()
