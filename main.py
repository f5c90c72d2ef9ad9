import sys
import asyncio
import argparse
from datetime import datetime
from pathlib import Path
from typing import List, Optional

# --- Settings/Logging ---
from studyjam.logging.setup import setup_logging
from studyjam.config.settings import settings

setup_logging()

from loguru import logger

from studyjam.calculation.ranking import SortConfig, rank_participants
from studyjam.calculation.stats import compute_stats
from studyjam.calculation.team_aggregator import aggregate_teams
from studyjam.export.csv_exporter import export_leaderboard_csv
from studyjam.models.enums import SortDirection, SortKey
from studyjam.models.participant import RankedParticipant
from studyjam.models.stats import LeaderboardStats
from studyjam.models.team import TeamSummary
from studyjam.pipeline.loader import (
    DataLoader,
    LoadError,
    LoadResult,
    build_source,
    build_store,
)

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

console = Console()


def format_timestamp(timestamp: Optional[datetime]) -> str:
    if not timestamp:
        return "N/A"
    return f"{timestamp:%b} {timestamp.day}, {timestamp:%I:%M %p}"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Study Jam leaderboard and team standings."
    )
    sub = parser.add_subparsers(dest="command", required=True)

    board = sub.add_parser("leaderboard", help="Show the ranked participant leaderboard.")
    board.add_argument("--search", default="", help="Match name, email or team.")
    board.add_argument(
        "--filter",
        default="all",
        help="all, beginner, advanced, complete, or an exact team name.",
    )
    board.add_argument(
        "--sort",
        default=SortKey.TOTAL.value,
        choices=[k.value for k in SortKey],
        help="Column to sort by (rank sorts by total completions).",
    )
    board.add_argument(
        "--direction",
        choices=["asc", "desc"],
        default=None,
        help="Sort direction. Defaults to desc for total/rank, asc otherwise.",
    )
    board.add_argument(
        "--export",
        nargs="?",
        const=settings.export_filename,
        default=None,
        metavar="PATH",
        help=f"Write the view as CSV (default {settings.export_filename}).",
    )
    board.add_argument("--limit", type=int, default=None, help="Show only the top N rows.")

    sub.add_parser("teams", help="Show team standings.")
    return parser


def sort_from_args(key: str, direction: Optional[str]) -> SortConfig:
    sort_key = SortKey(key)
    if direction is None:
        direction = "desc" if sort_key in (SortKey.RANK, SortKey.TOTAL) else "asc"
    return SortConfig(
        key=sort_key,
        direction=SortDirection.ASCENDING if direction == "asc" else SortDirection.DESCENDING,
    ).normalized()


def render_stats(stats: LeaderboardStats, result: LoadResult) -> None:
    console.print(
        Panel(
            f"Above 50% Progress: [bold]{stats.above_half}[/bold]   "
            f"Total Skill Badges: [bold]{stats.total_badges}[/bold]   "
            f"Completed (20/20): [bold]{stats.completed}[/bold]   "
            f"Average Progress: [bold]{stats.average_progress}%[/bold]",
            title=f"{stats.total_participants} participants",
            subtitle=f"Last Updated: {format_timestamp(result.fetched_at)}",
        )
    )


def render_leaderboard(rows: List[RankedParticipant]) -> None:
    table = Table(title="Leaderboard")
    table.add_column("Rank", justify="right")
    table.add_column("Name")
    table.add_column("Email")
    table.add_column("Team")
    table.add_column("Progress", justify="right")
    table.add_column("Badges", justify="right")
    table.add_column("Arcade", justify="right")
    table.add_column("Total", justify="right")
    for row in rows:
        p = row.participant
        table.add_row(
            str(row.rank),
            p.name,
            p.email,
            p.team_name,
            f"{p.progress_percent}%",
            str(p.skill_badge_count),
            str(p.arcade_game_count),
            str(p.total_completions),
        )
    console.print(table)


def render_teams(standings: List[TeamSummary]) -> None:
    table = Table(title=f"Team Standings ({len(standings)} teams ranked)")
    table.add_column("Rank", justify="right")
    table.add_column("Team")
    table.add_column("Avg Progress", justify="right")
    table.add_column("Members", justify="right")
    table.add_column("Badges", justify="right")
    table.add_column("Arcade", justify="right")
    table.add_column("Completed", justify="right")
    for team in standings:
        table.add_row(
            str(team.rank),
            team.team_name,
            f"{team.average_progress}%",
            str(team.member_count),
            str(team.total_badges),
            str(team.total_arcade),
            str(team.completed_count),
        )
    console.print(table)


async def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application."""
    args = build_parser().parse_args(argv)

    source = build_source(settings)
    loader = DataLoader(source, build_store(settings))
    try:
        result = await loader.load()
    except LoadError as e:
        console.print(Panel(str(e), title="Error Loading Data", style="red"))
        return 1
    finally:
        await source.close()

    if result is None:
        logger.warning("Load was superseded; nothing to show.")
        return 1

    if args.command == "teams":
        standings = aggregate_teams(result.participants)
        if not standings:
            console.print("No team data available.")
            return 0
        render_teams(standings)
        return 0

    rows = rank_participants(
        result.participants,
        search_term=args.search,
        selector=args.filter,
        sort=sort_from_args(args.sort, args.direction),
    )
    render_stats(compute_stats(result.participants), result)
    render_leaderboard(rows[: args.limit] if args.limit else rows)
    if args.export:
        export_leaderboard_csv(rows, Path(args.export))
    return 0


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        logger.info("Execution interrupted by user (KeyboardInterrupt).")
        sys.exit(0)
    except Exception as e:
        logger.exception(f"Unhandled exception in main execution: {e}")
        sys.exit(1)
