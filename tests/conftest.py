import csv
import io
from typing import Any, Dict, List, Optional, Sequence

import pytest

from studyjam.config.settings import TeamFile
from studyjam.models.participant import NO_TEAM, ParticipantRecord
from studyjam.parsing.columns import MAIN_REQUIRED_HEADERS, TEAM_EMAIL_HEADER
from studyjam.sources.base_source import CsvSource, FetchError
from studyjam.storage.stable_index_store import (
    InMemoryStore,
    KeyValueStore,
    PersistenceError,
)

MAIN_FILE = "leaderboard-data.csv"
STORE_KEY = "studyjam_stable_rank_map"


def make_csv(headers: Sequence[str], rows: Sequence[Sequence[Any]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(headers)
    for row in rows:
        writer.writerow(row)
    return buffer.getvalue()


def make_roster(*emails: str) -> str:
    return make_csv(["Timestamp", TEAM_EMAIL_HEADER], [["2024-10-01", e] for e in emails])


def make_main(*rows: Sequence[Any]) -> str:
    """Rows are (email, name, badges, arcade[, profile])."""
    padded = [list(r) + [""] * (len(MAIN_REQUIRED_HEADERS) - len(r)) for r in rows]
    return make_csv(MAIN_REQUIRED_HEADERS, padded)


def make_participant(
    email: str,
    stable_index: int,
    badges: int = 0,
    arcade: int = 0,
    name: Optional[str] = None,
    team: str = NO_TEAM,
) -> ParticipantRecord:
    return ParticipantRecord(
        email=email,
        name=name or email.split("@")[0].title(),
        skill_badge_count=badges,
        arcade_game_count=arcade,
        team_name=team,
        stable_index=stable_index,
    )


class DictSource(CsvSource):
    """CSV source serving fixed texts; a gate holds back the first fetch of a resource."""

    name = "test"

    def __init__(self, files: Dict[str, Any], gates: Optional[Dict[str, Any]] = None):
        self.files = files
        self.gates = gates or {}
        self.requested: List[str] = []
        self.completed: List[str] = []

    async def fetch_text(self, resource: str) -> str:
        self.requested.append(resource)
        gate = self.gates.pop(resource, None)
        if gate is not None:
            await gate.wait()
        content = self.files.get(resource)
        if content is None:
            raise FetchError(resource, FileNotFoundError(resource))
        if isinstance(content, Exception):
            raise FetchError(resource, content)
        self.completed.append(resource)
        return content


class FailingStore(KeyValueStore):
    """Store whose reads and/or writes fail, like blocked browser storage."""

    def __init__(self, fail_get: bool = True, fail_put: bool = True, value: Any = None):
        self.fail_get = fail_get
        self.fail_put = fail_put
        self.value = value
        self.puts: List[Any] = []

    def get(self, key: str) -> Optional[Any]:
        if self.fail_get:
            raise PersistenceError("storage blocked")
        return self.value

    def put(self, key: str, value: Any) -> None:
        if self.fail_put:
            raise PersistenceError("quota exceeded")
        self.puts.append(value)
        self.value = value


@pytest.fixture
def memory_store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def team_files() -> List[TeamFile]:
    return [
        TeamFile(name="TeamX", file="TeamX.csv"),
        TeamFile(name="TeamY", file="TeamY.csv"),
    ]
