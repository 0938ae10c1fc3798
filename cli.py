import argparse
import logging
import shutil
from typing import Optional

from algorithms import WeightConverter
from analytics_service import AnalyticsService
from config import YamlConfig
from db import PlayerRepository, WorkoutLogRepository
from leaderboard_service import LeaderboardService
from models import ROLES
from program_data import BIG_LIFTS, PROGRAM
from seed_sample_data import seed
from tracker_service import TrackerService


def export_tracker(db_path: str, out_path: str, weight_unit: str = "kg") -> int:
    """Write the squad tracker grid to ``out_path`` and return its row count."""
    players = PlayerRepository(db_path).list_players()
    logs = WorkoutLogRepository(db_path).list_logs()
    tracker = TrackerService(weight_unit=weight_unit)
    with open(out_path, "w", encoding="utf-8", newline="") as f:
        f.write(tracker.export_csv(players, logs))
    return sum(1 for p in players if p.is_player)


def backup_db(db_path: str, backup_path: str) -> None:
    shutil.copy(db_path, backup_path)


def restore_db(backup_path: str, db_path: str) -> None:
    shutil.copy(backup_path, db_path)


def print_leaderboard(
    db_path: str, exercise_id: str, viewer_role: str, weight_unit: str = "kg"
) -> None:
    exercise = PROGRAM.exercise(exercise_id)
    if exercise is None or not exercise.is_metric:
        raise ValueError(f"unknown metric exercise: {exercise_id}")
    leaderboard = LeaderboardService(weight_unit=weight_unit)
    ranked = leaderboard.rank_exercise(
        exercise_id,
        exercise.is_sprint,
        PlayerRepository(db_path).list_players(),
        WorkoutLogRepository(db_path).list_logs(),
        viewer_role,
    )
    print(exercise.name)
    for entry in ranked[:10]:
        print(f"{entry.rank:>3}. {entry.player_name:<24} {entry.display_value}")
    for bucket in leaderboard.percentile_buckets(ranked):
        print(f"{bucket.label} (ranks {bucket.start_rank}-{bucket.end_rank}): {len(bucket.entries)} players")


def print_headline_lifts(db_path: str, weight_unit: str = "kg") -> None:
    rows = LeaderboardService(weight_unit=weight_unit).headline_lifts(
        PlayerRepository(db_path).list_players(),
        WorkoutLogRepository(db_path).list_logs(),
    )
    print(f"{'Player':<24}" + "".join(f"{label:>16}" for _, label in BIG_LIFTS))
    for row in rows:
        values = "".join(f"{row.lifts[ex_id]:>16}" for ex_id, _ in BIG_LIFTS)
        print(f"{row.player_name:<24}{values}")


def print_consistency(db_path: str) -> None:
    report = LeaderboardService(AnalyticsService()).classify_consistent_performers(
        PlayerRepository(db_path).list_players(),
        WorkoutLogRepository(db_path).list_logs(),
    )
    print("Consistent top performers")
    for p in report.top:
        print(f"  {p.player_name:<24} {p.top10_count}/{p.total_weeks} weeks  avg rank {p.average_rank:.1f}")
    print("Consistent bottom performers")
    for p in report.bottom:
        print(f"  {p.player_name:<24} {p.bottom10_count}/{p.total_weeks} weeks  avg rank {p.average_rank:.1f}")


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Squad tracker utilities")
    parser.add_argument("--yaml", default="settings.yaml")
    parser.add_argument("--db", default=None)
    sub = parser.add_subparsers(dest="cmd", required=True)

    exp = sub.add_parser("export-tracker")
    exp.add_argument("--out", default="workout-tracker.csv")

    bkp = sub.add_parser("backup")
    bkp.add_argument("--out", default="backup.db")

    rst = sub.add_parser("restore")
    rst.add_argument("--in", dest="src", default="backup.db")

    lead = sub.add_parser("leaderboard")
    lead.add_argument("--exercise", default=PROGRAM.tracked_exercise_id)
    lead.add_argument("--viewer-role", choices=list(ROLES), default="Coach")

    sub.add_parser("headline-lifts")
    sub.add_parser("consistency")

    demo = sub.add_parser("demo-data")
    demo.add_argument("--players", type=int, default=20)
    demo.add_argument("--weeks", type=int, default=8)

    conv = sub.add_parser("convert")
    conv.add_argument("--weight", type=float, required=True)
    conv.add_argument("--unit", choices=list(WeightConverter.UNITS), required=True)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    settings = YamlConfig(args.yaml).settings()
    db_path = args.db or settings.db_path

    if args.cmd == "export-tracker":
        rows = export_tracker(db_path, args.out, settings.weight_unit)
        print(f"Exported {rows} players to {args.out}")
    elif args.cmd == "backup":
        backup_db(db_path, args.out)
    elif args.cmd == "restore":
        restore_db(args.src, db_path)
    elif args.cmd == "leaderboard":
        print_leaderboard(db_path, args.exercise, args.viewer_role, settings.weight_unit)
    elif args.cmd == "headline-lifts":
        print_headline_lifts(db_path, settings.weight_unit)
    elif args.cmd == "consistency":
        print_consistency(db_path)
    elif args.cmd == "demo-data":
        seed(db_path, args.players, args.weeks)
    elif args.cmd == "convert":
        if args.unit == "kg":
            print(f"{args.weight} kg = {WeightConverter.kg_to_lb(args.weight)} lbs")
        else:
            print(f"{args.weight} lbs = {WeightConverter.lb_to_kg(args.weight)} kg")


if __name__ == "__main__":
    main()
