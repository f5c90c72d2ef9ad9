from enum import Enum


class SortKey(str, Enum):
    RANK = "rank"  # Synthetic, sorts as TOTAL descending
    NAME = "name"
    EMAIL = "email"
    TEAM = "team"
    PROGRESS = "progress"
    BADGES = "badges"
    ARCADE = "arcade"
    TOTAL = "total"


class SortDirection(str, Enum):
    ASCENDING = "ascending"
    DESCENDING = "descending"


class ProgressBand(str, Enum):
    ALL = "all"
    BEGINNER = "beginner"  # < 50%
    ADVANCED = "advanced"  # >= 50% and < 100%
    COMPLETE = "complete"  # == 100%
