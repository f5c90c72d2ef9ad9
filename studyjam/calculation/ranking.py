from functools import cmp_to_key
from typing import Callable, Iterable, List, Union

from loguru import logger
from pydantic import BaseModel, ConfigDict

from studyjam.models.enums import ProgressBand, SortDirection, SortKey
from studyjam.models.participant import ParticipantRecord, RankedParticipant

NUMERIC_KEYS = {SortKey.PROGRESS, SortKey.BADGES, SortKey.ARCADE, SortKey.TOTAL}

_FIELD_GETTERS: dict[SortKey, Callable[[ParticipantRecord], Union[int, str]]] = {
    SortKey.NAME: lambda p: p.name,
    SortKey.EMAIL: lambda p: p.email,
    SortKey.TEAM: lambda p: p.team_name,
    SortKey.PROGRESS: lambda p: p.progress_percent,
    SortKey.BADGES: lambda p: p.skill_badge_count,
    SortKey.ARCADE: lambda p: p.arcade_game_count,
    SortKey.TOTAL: lambda p: p.total_completions,
}


class SortConfig(BaseModel):
    """The column a view is sorted on, and which way."""

    model_config = ConfigDict(frozen=True)

    key: SortKey = SortKey.TOTAL
    direction: SortDirection = SortDirection.DESCENDING

    def normalized(self) -> "SortConfig":
        # Rank is a display of the default order, not a sortable field
        if self.key == SortKey.RANK:
            return SortConfig()
        return self

    def toggled(self, key: SortKey) -> "SortConfig":
        """The sort a column-header click on key produces from this one."""
        if key == SortKey.RANK:
            return SortConfig()
        if key == self.key:
            direction = (
                SortDirection.DESCENDING
                if self.direction == SortDirection.ASCENDING
                else SortDirection.ASCENDING
            )
            return SortConfig(key=key, direction=direction)
        if key == SortKey.TOTAL:
            return SortConfig(key=key, direction=SortDirection.DESCENDING)
        return SortConfig(key=key, direction=SortDirection.ASCENDING)


def _sort_value(participant: ParticipantRecord, key: SortKey) -> Union[int, str]:
    value = _FIELD_GETTERS[key](participant)
    if key in NUMERIC_KEYS:
        return int(value or 0)
    return str(value or "").lower()


def _compare(a: Union[int, str], b: Union[int, str]) -> int:
    return (a > b) - (a < b)


def make_comparator(
    sort: SortConfig,
) -> Callable[[ParticipantRecord, ParticipantRecord], int]:
    """
    Builds the leaderboard comparator.

    Order: the selected field in the selected direction, then total completions
    descending (unless that is already the selected field), then stable index
    ascending. Stable indices are unique per participant, so two distinct
    participants never compare equal.
    """
    sort = sort.normalized()
    sign = 1 if sort.direction == SortDirection.ASCENDING else -1

    def comparator(a: ParticipantRecord, b: ParticipantRecord) -> int:
        primary = _compare(_sort_value(a, sort.key), _sort_value(b, sort.key))
        if primary:
            return primary * sign

        if sort.key != SortKey.TOTAL:
            secondary = _compare(b.total_completions, a.total_completions)
            if secondary:
                return secondary

        return _compare(a.stable_index, b.stable_index)

    return comparator


def matches_search(participant: ParticipantRecord, search_term: str) -> bool:
    """Case-insensitive substring match on name, email or team."""
    if not search_term:
        return True
    needle = search_term.lower()
    return any(
        needle in value.lower()
        for value in (participant.name, participant.email, participant.team_name)
    )


def matches_filter(participant: ParticipantRecord, selector: str) -> bool:
    """Progress band selectors match by percentage, anything else is a team name."""
    if not selector or selector == ProgressBand.ALL.value:
        return True
    progress = participant.progress_percent
    if selector == ProgressBand.BEGINNER.value:
        return progress < 50
    if selector == ProgressBand.ADVANCED.value:
        return 50 <= progress < 100
    if selector == ProgressBand.COMPLETE.value:
        return progress == 100
    return participant.team_name == selector


def rank_participants(
    participants: Iterable[ParticipantRecord],
    search_term: str = "",
    selector: str = ProgressBand.ALL.value,
    sort: SortConfig = SortConfig(),
) -> List[RankedParticipant]:
    """
    Filters, sorts and ranks participants for one view.

    Args:
        participants: The full merged participant set.
        search_term: Free text matched against name, email and team.
        selector: "all", a ProgressBand value, or an exact team name.
        sort: Column and direction to sort by.

    Returns:
        The matching participants in order, ranked 1..N within this view.
    """
    selected = [
        p
        for p in participants
        if matches_search(p, search_term) and matches_filter(p, selector)
    ]
    selected.sort(key=cmp_to_key(make_comparator(sort)))
    logger.debug(
        f"Ranked {len(selected)} participants (search={search_term!r}, "
        f"filter={selector!r}, sort={sort.key.value} {sort.direction.value})"
    )
    return [
        RankedParticipant(rank=position, participant=participant)
        for position, participant in enumerate(selected, start=1)
    ]
