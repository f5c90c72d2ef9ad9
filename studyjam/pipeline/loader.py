import asyncio
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence

from loguru import logger
from pydantic import BaseModel

from studyjam.config.settings import AppSettings, TeamFile, settings
from studyjam.models.participant import ParticipantRecord
from studyjam.models.team import TeamRosterEntry
from studyjam.normalization.merger import ParticipantMerger
from studyjam.normalization.team_index import TeamMembershipIndex, roster_entries
from studyjam.parsing.columns import MAIN_REQUIRED_HEADERS
from studyjam.parsing.csv_parser import ParseError, parse_csv, require_headers
from studyjam.sources.base_source import CsvSource, FetchError
from studyjam.sources.file_source import FileCsvSource
from studyjam.sources.http_source import HttpCsvSource
from studyjam.storage.stable_index_store import (
    InMemoryStore,
    JsonFileStore,
    KeyValueStore,
    PersistenceError,
)
from studyjam.storage.stable_rank import StableRankAssigner


class LoadError(Exception):
    """A load cycle failed; the message is meant for the person running it."""

    def __init__(self, message: str, resource: Optional[str] = None):
        self.resource = resource
        super().__init__(message)


class LoadResult(BaseModel):
    """Everything one successful load cycle produced."""

    participants: List[ParticipantRecord]
    team_member_count: int
    fetched_at: datetime
    stable_ranks_persisted: bool
    epoch: int


def build_source(app_settings: AppSettings = settings) -> CsvSource:
    """HTTP source for http(s) URLs, local directory source otherwise."""
    source = app_settings.data_source
    if source.startswith(("http://", "https://")):
        return HttpCsvSource(source)
    return FileCsvSource(Path(source))


def build_store(app_settings: AppSettings = settings) -> KeyValueStore:
    """Store backend for the stable rank map, per the store_backend setting."""
    if app_settings.store_backend == "memory":
        return InMemoryStore()
    if app_settings.store_backend == "supabase":
        # Imported lazily so the file backend does not pay for the Supabase client
        from studyjam.storage.supabase_store import SupabaseStore, initialize_supabase

        try:
            return SupabaseStore(
                initialize_supabase(app_settings.supabase_url, app_settings.supabase_key),
                app_settings.supabase_table,
            )
        except PersistenceError as e:
            logger.warning(f"Supabase store unavailable, using in-memory ranks: {e}")
            return InMemoryStore()
    return JsonFileStore(app_settings.stable_index_store_path)


class DataLoader:
    """
    Runs load cycles: rosters, then main data, then the merge.

    Every call to load() takes a new epoch. A cycle that finishes after a newer
    one started is stale: its result is dropped and it does not write stable ranks.
    """

    def __init__(
        self,
        source: CsvSource,
        store: KeyValueStore,
        team_files: Optional[Sequence[TeamFile]] = None,
        main_data_file: Optional[str] = None,
        teams_dir: Optional[str] = None,
        store_key: Optional[str] = None,
    ):
        self.source = source
        self.store = store
        self.team_files = list(team_files if team_files is not None else settings.team_files)
        self.main_data_file = main_data_file or settings.main_data_file
        self.teams_dir = teams_dir if teams_dir is not None else settings.teams_dir
        self.store_key = store_key or settings.stable_index_store_key
        self._epoch = 0

    @property
    def epoch(self) -> int:
        return self._epoch

    def roster_resource(self, team_file: TeamFile) -> str:
        if not self.teams_dir:
            return team_file.file
        return f"{self.teams_dir.rstrip('/')}/{team_file.file}"

    async def _load_roster(self, team_file: TeamFile) -> List[TeamRosterEntry]:
        resource = self.roster_resource(team_file)
        text = await self.source.fetch_text(resource)
        logger.debug(f"Fetched {resource}")
        return roster_entries(team_file.name, parse_csv(text, resource))

    async def load_team_index(self) -> TeamMembershipIndex:
        """Fetches every roster concurrently; the first failure aborts the stage."""
        logger.info(f"Fetching {len(self.team_files)} team rosters...")
        tasks = [asyncio.ensure_future(self._load_roster(tf)) for tf in self.team_files]
        try:
            rosters = await asyncio.gather(*tasks)
        except BaseException:
            pending = [task for task in tasks if not task.done()]
            for task in pending:
                task.cancel()
            if pending:
                logger.debug(f"Cancelled {len(pending)} roster fetch(es) after a failure.")
                await asyncio.gather(*pending, return_exceptions=True)
            raise

        # gather keeps argument order, so merge order is the configured roster order
        index = TeamMembershipIndex()
        for entries in rosters:
            index.add_roster(entries)
        logger.info(f"Team map created with {len(index)} unique emails.")
        return index

    async def load(self) -> Optional[LoadResult]:
        """
        Runs one load cycle.

        Returns:
            The merged participants, or None when a newer cycle superseded this one.

        Raises:
            LoadError: A roster or the main data could not be fetched or parsed.
        """
        self._epoch += 1
        epoch = self._epoch
        logger.info(f"Starting load cycle {epoch} from {self.source.name} source.")

        try:
            team_index = await self.load_team_index()

            logger.info(f"Fetching main leaderboard data ({self.main_data_file})...")
            main_text = await self.source.fetch_text(self.main_data_file)
            fetched_at = datetime.now()
            parsed = parse_csv(main_text, self.main_data_file)
            require_headers(parsed, MAIN_REQUIRED_HEADERS)
        except FetchError as e:
            message = f"Failed to load data: could not fetch {e.resource}: {e.cause}"
            logger.error(message)
            raise LoadError(message, resource=e.resource) from e
        except ParseError as e:
            message = f"Failed to load data: {e}"
            logger.error(message)
            raise LoadError(message, resource=e.resource) from e

        assigner = StableRankAssigner(self.store, self.store_key)
        assigner.load()
        participants = ParticipantMerger(team_index, assigner).merge(parsed.records)

        if epoch != self._epoch:
            logger.warning(
                f"Load cycle {epoch} was superseded by cycle {self._epoch}; discarding its result."
            )
            return None

        persisted = assigner.save()
        logger.success(f"Load cycle {epoch} processed {len(participants)} participants.")
        return LoadResult(
            participants=participants,
            team_member_count=len(team_index),
            fetched_at=fetched_at,
            stable_ranks_persisted=persisted,
            epoch=epoch,
        )
