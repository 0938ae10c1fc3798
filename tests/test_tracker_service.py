import os
import sys
import datetime
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from models import Player, WorkoutLog
from tracker_service import CHECK_MARK, TrackerService
from week_utils import week_start


def make_log(player_id, day_id, week, data, completed=True) -> WorkoutLog:
    stamp = week_start(2024, week) + datetime.timedelta(hours=9)
    return WorkoutLog(
        player_id=player_id,
        day_id=day_id,
        timestamp=stamp.timestamp() * 1000,
        week_year=2024,
        week=week,
        data=data,
        completed=completed,
    )


class TrackerServiceTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.tracker = TrackerService(weight_unit="lbs")
        self.players = [
            Player(id="p1", name="Alex Hall", position="Back"),
            Player(id="p2", name="Ben King"),
            Player(id="c1", name="Coach", role="Coach"),
        ]

    def test_cell_values(self) -> None:
        self.assertEqual(self.tracker.cell_value(None), "")
        self.assertEqual(self.tracker.cell_value(make_log("p1", "day1", 10, {})), CHECK_MARK)
        started = make_log("p1", "day1", 10, {}, completed=False)
        self.assertEqual(self.tracker.cell_value(started), "Partial")
        partial = make_log("p1", "day1", 10, {"d1_1_weight": "200"}, completed=False)
        self.assertEqual(self.tracker.cell_value(partial), "Partial")
        done = make_log("p1", "day1", 10, {"d1_1_weight": "200"})
        self.assertEqual(self.tracker.cell_value(done), "200lbs")
        no_first = make_log("p1", "day1", 10, {"d1_2_weight": "20"})
        self.assertEqual(self.tracker.cell_value(no_first), CHECK_MARK)
        sprint = make_log("p1", "day4", 10, {"d4_1_time": "4.6", "d4_1_sets": "8"})
        self.assertEqual(self.tracker.cell_value(sprint), "4.6s")

    def test_frame_layout(self) -> None:
        logs = [
            make_log("p1", "day1", 10, {"d1_1_weight": "200"}),
            make_log("p2", "day4", 11, {"d4_1_time": "4.9"}),
            make_log("c1", "day1", 11, {"d1_1_weight": "90"}),
        ]
        frame = self.tracker.tracker_frame(self.players, logs)
        self.assertEqual(list(frame["Player"]), ["Alex Hall", "Ben King"])
        self.assertEqual(list(frame.columns[:3]), ["Player", "Position", "2024-W10 Day 1"])
        self.assertEqual(len(frame.columns), 2 + 2 * 4)
        self.assertEqual(frame.loc[0, "2024-W10 Day 1"], "200lbs")
        self.assertEqual(frame.loc[1, "2024-W11 Day 4"], "4.9s")
        self.assertEqual(frame.loc[1, "Position"], "")

    def test_export_csv_quotes_every_cell(self) -> None:
        logs = [make_log("p1", "day1", 10, {"d1_1_weight": "200"})]
        lines = self.tracker.export_csv(self.players, logs).splitlines()
        self.assertEqual(
            lines[0],
            '"Player","Position","2024-W10 Day 1","2024-W10 Day 2","2024-W10 Day 3","2024-W10 Day 4"',
        )
        self.assertEqual(lines[1], '"Alex Hall","Back","200lbs","","",""')
        self.assertEqual(len(lines), 3)

    def test_empty_tracker(self) -> None:
        frame = self.tracker.tracker_frame([], [])
        self.assertEqual(list(frame.columns), ["Player", "Position"])
        self.assertTrue(frame.empty)


if __name__ == "__main__":
    unittest.main()
