from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

from studyjam.calculation.progress import calculate_progress

NO_TEAM = "N/A"


class ParticipantRecord(BaseModel):
    """A participant from the main CSV, joined with its team and stable index."""

    model_config = ConfigDict(frozen=True)

    email: str = Field(..., min_length=1, description="Normalized email, the identity.")
    name: str = Field(..., min_length=1)
    skill_badge_count: int = Field(0, ge=0)
    arcade_game_count: int = Field(0, ge=0)
    team_name: str = NO_TEAM
    profile_url: Optional[str] = None
    stable_index: int = Field(..., ge=0, description="Persisted tie-break index.")

    @computed_field  # type: ignore[misc]
    @property
    def total_completions(self) -> int:
        return self.skill_badge_count + self.arcade_game_count

    @computed_field  # type: ignore[misc]
    @property
    def progress_percent(self) -> int:
        return calculate_progress(self.skill_badge_count, self.arcade_game_count)


class RankedParticipant(BaseModel):
    """A participant annotated with its position in one filtered, sorted view."""

    model_config = ConfigDict(frozen=True)

    rank: int = Field(..., ge=1)
    participant: ParticipantRecord
