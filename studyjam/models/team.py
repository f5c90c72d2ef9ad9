# studyjam/models/team.py
from pydantic import BaseModel, ConfigDict, Field


class TeamRosterEntry(BaseModel):
    """One member email read from a team roster file."""

    model_config = ConfigDict(frozen=True)

    normalized_email: str
    team_name: str


class TeamSummary(BaseModel):
    """Per-team standings, recomputed on every load."""

    team_name: str
    member_count: int = 0
    total_progress: int = 0
    total_badges: int = 0
    total_arcade: int = 0
    completed_count: int = 0
    average_progress: int = Field(0, ge=0, le=100)
    rank: int = 0
