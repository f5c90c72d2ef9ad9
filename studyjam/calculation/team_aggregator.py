from typing import Dict, Iterable, List

from loguru import logger

from studyjam.models.participant import NO_TEAM, ParticipantRecord
from studyjam.models.team import TeamSummary
from studyjam.utils.misc_utils import round_half_up


def aggregate_teams(participants: Iterable[ParticipantRecord]) -> List[TeamSummary]:
    """
    Computes team standings from the merged participants.

    Participants without a team are left out. Teams are ordered by average
    progress, then total skill badges (both descending), then name, and ranked
    1..N in that order.
    """
    teams: Dict[str, TeamSummary] = {}

    for participant in participants:
        if participant.team_name == NO_TEAM:
            continue
        team = teams.get(participant.team_name)
        if team is None:
            team = teams[participant.team_name] = TeamSummary(
                team_name=participant.team_name
            )
        team.member_count += 1
        team.total_progress += participant.progress_percent
        team.total_badges += participant.skill_badge_count
        team.total_arcade += participant.arcade_game_count
        if participant.progress_percent == 100:
            team.completed_count += 1

    for team in teams.values():
        team.average_progress = (
            round_half_up(team.total_progress / team.member_count)
            if team.member_count > 0
            else 0
        )

    standings = sorted(
        teams.values(),
        key=lambda t: (-t.average_progress, -t.total_badges, t.team_name.lower()),
    )
    for position, team in enumerate(standings, start=1):
        team.rank = position

    logger.info(f"Aggregated standings for {len(standings)} teams.")
    return standings
