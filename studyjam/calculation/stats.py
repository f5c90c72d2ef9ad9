from typing import Sequence

from studyjam.models.participant import ParticipantRecord
from studyjam.models.stats import LeaderboardStats
from studyjam.utils.misc_utils import round_half_up


def compute_stats(participants: Sequence[ParticipantRecord]) -> LeaderboardStats:
    """Headline numbers over the full participant set, ignoring any view filter."""
    total = len(participants)
    if total == 0:
        return LeaderboardStats()
    total_progress = sum(p.progress_percent for p in participants)
    return LeaderboardStats(
        total_participants=total,
        above_half=sum(1 for p in participants if p.progress_percent >= 50),
        total_badges=sum(p.skill_badge_count for p in participants),
        completed=sum(1 for p in participants if p.progress_percent == 100),
        average_progress=round_half_up(total_progress / total),
    )
