from typing import Iterable, List

from loguru import logger

from studyjam.models.participant import NO_TEAM, ParticipantRecord
from studyjam.parsing.columns import (
    MAIN_ARCADE_HEADER,
    MAIN_BADGES_HEADER,
    MAIN_EMAIL_HEADER,
    MAIN_NAME_HEADER,
    MAIN_PROFILE_HEADER,
)
from studyjam.parsing.csv_parser import RawCsvRecord
from studyjam.storage.stable_rank import StableRankAssigner
from studyjam.utils.misc_utils import parse_count
from .identity import normalize_email
from .team_index import TeamMembershipIndex


class ParticipantMerger:
    """Joins main-data rows with team membership and stable ranks."""

    def __init__(self, team_index: TeamMembershipIndex, assigner: StableRankAssigner):
        self.team_index = team_index
        self.assigner = assigner

    def merge(self, records: Iterable[RawCsvRecord]) -> List[ParticipantRecord]:
        """
        Builds ParticipantRecords in source order.

        Rows with an empty name or email are dropped before a stable index is
        assigned, so they never consume one. An email that appears again keeps
        its first row; later rows are logged and dropped.
        """
        participants: List[ParticipantRecord] = []
        skipped = 0
        duplicates = 0
        seen = set()

        for record in records:
            email = normalize_email(record.get(MAIN_EMAIL_HEADER))
            name = (record.get(MAIN_NAME_HEADER) or "").strip()
            if not email or not name:
                skipped += 1
                continue

            if email in seen:
                duplicates += 1
                logger.warning(
                    f"Email {email} appears more than once in the main data; keeping the first row."
                )
                continue
            seen.add(email)

            profile_url = (record.get(MAIN_PROFILE_HEADER) or "").strip() or None
            participants.append(
                ParticipantRecord(
                    email=email,
                    name=name,
                    skill_badge_count=parse_count(record.get(MAIN_BADGES_HEADER)),
                    arcade_game_count=parse_count(record.get(MAIN_ARCADE_HEADER)),
                    team_name=self.team_index.team_for(email) or NO_TEAM,
                    profile_url=profile_url,
                    stable_index=self.assigner.assign(email),
                )
            )

        if skipped:
            logger.warning(f"Skipped {skipped} row(s) without a name or email.")
        if duplicates:
            logger.warning(f"Dropped {duplicates} duplicate row(s) from the main data.")
        unmatched = sum(1 for p in participants if p.team_name == NO_TEAM)
        logger.info(
            f"Merged {len(participants)} participants ({unmatched} without a team)."
        )
        return participants
