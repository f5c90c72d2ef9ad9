from typing import Any

from studyjam.utils.misc_utils import parse_count, round_half_up

# Completions needed for 100%
TARGET_COMPLETIONS = 20


def calculate_progress(skill_badges: Any, arcade_games: Any) -> int:
    """
    Converts the two completion counters into a 0-100 progress percentage.

    Args:
        skill_badges: Skill badge count, as an int or raw CSV text.
        arcade_games: Arcade game count, as an int or raw CSV text.

    Returns:
        The rounded percentage of TARGET_COMPLETIONS reached, capped at 100.
        Missing or non-numeric counters count as 0.
    """
    total_completed = parse_count(skill_badges) + parse_count(arcade_games)
    if total_completed >= TARGET_COMPLETIONS:
        return 100
    return round_half_up(total_completed / TARGET_COMPLETIONS * 100)
