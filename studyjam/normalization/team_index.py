from typing import Dict, Iterable, List, Optional

from loguru import logger

from studyjam.models.team import TeamRosterEntry
from studyjam.parsing.columns import TEAM_EMAIL_HEADER
from studyjam.parsing.csv_parser import ParsedCsv, require_headers
from .identity import normalize_email


def roster_entries(team_name: str, parsed: ParsedCsv) -> List[TeamRosterEntry]:
    """Extracts the member emails of one roster file, skipping blank emails.

    Raises:
        ParseError: The roster has no TEAM_EMAIL_HEADER column.
    """
    require_headers(parsed, [TEAM_EMAIL_HEADER])
    entries = []
    for record in parsed.records:
        email = normalize_email(record.get(TEAM_EMAIL_HEADER))
        if email:
            entries.append(TeamRosterEntry(normalized_email=email, team_name=team_name))
    logger.debug(f"Roster {team_name}: {len(entries)} member emails.")
    return entries


class TeamMembershipIndex:
    """Maps normalized emails to team names across every roster.

    Rosters are merged in the order they are added; an email listed in more than
    one roster ends up on the team added last.
    """

    def __init__(self):
        self._teams_by_email: Dict[str, str] = {}
        self.duplicates: Dict[str, List[str]] = {}

    def add_roster(self, entries: Iterable[TeamRosterEntry]) -> None:
        for entry in entries:
            previous = self._teams_by_email.get(entry.normalized_email)
            if previous is not None and previous != entry.team_name:
                logger.warning(
                    f"Email {entry.normalized_email} found in multiple teams: "
                    f"{previous} replaced by {entry.team_name}"
                )
                seen = self.duplicates.setdefault(entry.normalized_email, [previous])
                seen.append(entry.team_name)
            self._teams_by_email[entry.normalized_email] = entry.team_name

    def team_for(self, email: str) -> Optional[str]:
        return self._teams_by_email.get(normalize_email(email))

    def __len__(self) -> int:
        return len(self._teams_by_email)

    def __contains__(self, email: object) -> bool:
        return isinstance(email, str) and normalize_email(email) in self._teams_by_email
