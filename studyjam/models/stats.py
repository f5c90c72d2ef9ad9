from pydantic import BaseModel


class LeaderboardStats(BaseModel):
    """Headline numbers shown above the leaderboard."""

    total_participants: int = 0
    above_half: int = 0  # progress >= 50
    total_badges: int = 0
    completed: int = 0  # progress == 100
    average_progress: int = 0
