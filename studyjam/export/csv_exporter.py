import csv
import io
from pathlib import Path
from typing import Dict, Iterable, List, Union

from loguru import logger

from studyjam.models.participant import RankedParticipant
from studyjam.parsing.columns import (
    EXPORT_HEADERS,
    EXPORT_PROGRESS_HEADER,
    EXPORT_RANK_HEADER,
    EXPORT_TEAM_HEADER,
    EXPORT_TOTAL_HEADER,
    MAIN_ARCADE_HEADER,
    MAIN_BADGES_HEADER,
    MAIN_EMAIL_HEADER,
    MAIN_NAME_HEADER,
    MAIN_PROFILE_HEADER,
)


def export_row(ranked: RankedParticipant) -> Dict[str, Union[int, str]]:
    p = ranked.participant
    return {
        EXPORT_RANK_HEADER: ranked.rank,
        MAIN_NAME_HEADER: p.name,
        MAIN_EMAIL_HEADER: p.email,
        EXPORT_TEAM_HEADER: p.team_name,
        EXPORT_PROGRESS_HEADER: f"{p.progress_percent}%",
        MAIN_BADGES_HEADER: p.skill_badge_count,
        MAIN_ARCADE_HEADER: p.arcade_game_count,
        EXPORT_TOTAL_HEADER: p.total_completions,
        MAIN_PROFILE_HEADER: p.profile_url or "",
    }


def render_leaderboard_csv(rows: Iterable[RankedParticipant]) -> str:
    """Renders a ranked view as CSV text with the fixed export columns."""
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=EXPORT_HEADERS, lineterminator="\r\n")
    writer.writeheader()
    for ranked in rows:
        writer.writerow(export_row(ranked))
    return buffer.getvalue()


def export_leaderboard_csv(rows: List[RankedParticipant], path: Path) -> Path:
    """Writes a ranked view to path as UTF-8 CSV."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(render_leaderboard_csv(rows))
    logger.success(f"Exported {len(rows)} rows to {path}")
    return path
