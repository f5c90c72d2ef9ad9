from typing import Dict, Optional

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .stable_index_store import KeyValueStore, PersistenceError


class StableRankState(BaseModel):
    """Persisted form: {"map": {email: index}, "nextStableIndex": int}."""

    model_config = ConfigDict(populate_by_name=True)

    map: Dict[str, int] = Field(default_factory=dict)
    next_stable_index: int = Field(0, ge=0, alias="nextStableIndex")


class StableRankAssigner:
    """
    Hands out a stable, append-only index per email.

    The index is only a tie-breaker: participants that sort equal on everything
    else keep the same relative order from one load to the next. State is read
    from the store once per load cycle and written back by save(). When the
    store fails, the assigner keeps working in memory for that cycle.
    """

    def __init__(self, store: KeyValueStore, key: str):
        self.store = store
        self.key = key
        self.persistent = True
        self._map: Dict[str, int] = {}
        self._next_index = 0
        self._dirty = False

    def load(self) -> None:
        """Reads the persisted map, falling back to an empty in-memory map."""
        self._map, self._next_index, self._dirty = {}, 0, False
        try:
            raw = self.store.get(self.key)
        except PersistenceError as e:
            logger.warning(
                f"Could not load stable rank map, ranking ties may reorder between runs: {e}"
            )
            self.persistent = False
            return

        self.persistent = True
        if raw is None:
            logger.debug(f"No stable rank map stored under {self.key}, starting fresh.")
            return

        try:
            state = StableRankState.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"Stored stable rank map is malformed, starting fresh: {e}")
            self.persistent = False
            return

        self._map = dict(state.map)
        self._next_index = state.next_stable_index
        if self._map:
            # Never hand out an index that is already taken
            highest = max(self._map.values())
            if self._next_index <= highest:
                logger.warning(
                    f"Stored nextStableIndex {self._next_index} is not above the highest "
                    f"assigned index {highest}; continuing from {highest + 1}."
                )
                self._next_index = highest + 1
        logger.debug(f"Loaded {len(self._map)} stable ranks (next index {self._next_index}).")

    def assign(self, email: str) -> int:
        """Returns the index for email, assigning the next free one on first sight."""
        index = self._map.get(email)
        if index is None:
            index = self._next_index
            self._map[email] = index
            self._next_index += 1
            self._dirty = True
        return index

    def lookup(self, email: str) -> Optional[int]:
        return self._map.get(email)

    def save(self) -> bool:
        """Writes the map back to the store. Returns False when nothing was persisted."""
        if not self.persistent:
            logger.debug("Stable rank map is in-memory only for this cycle; not saving.")
            return False
        state = StableRankState(map=self._map, next_stable_index=self._next_index)
        try:
            self.store.put(self.key, state.model_dump(by_alias=True))
        except PersistenceError as e:
            logger.warning(
                f"Could not save stable rank map, ranking stability will only last for this run: {e}"
            )
            self.persistent = False
            return False
        if self._dirty:
            logger.info(f"Saved stable rank map with {len(self._map)} emails.")
        self._dirty = False
        return True

    def __len__(self) -> int:
        return len(self._map)
