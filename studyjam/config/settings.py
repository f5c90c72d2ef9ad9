import logging
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class TeamFile(BaseModel):
    """A team roster published as its own CSV file."""

    name: str
    file: str


DEFAULT_TEAM_FILES = [
    TeamFile(name="RIO (Cloud)", file="RIO (Cloud).csv"),
    TeamFile(name="Berlin (Creative)", file="Berlin (Creative).csv"),
    TeamFile(name="Tokyo (EM)", file="Tokyo (EM).csv"),
    TeamFile(name="Helsinki (AIML)", file="Helsinki (AIML).csv"),
    TeamFile(name="Denver (WEB)", file="Denver (WEB).csv"),
]


class AppSettings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    # Data Sources
    data_source: str = Field(
        "public",
        description="Base URL of the static hosting, or a local directory with the same layout.",
    )
    main_data_file: str = Field(
        "leaderboard-data.csv", description="Main participant CSV, relative to the source."
    )
    teams_dir: str = Field("teams", description="Roster directory, relative to the source.")
    team_files: List[TeamFile] = Field(
        default_factory=lambda: list(DEFAULT_TEAM_FILES),
        description="Rosters to merge, in merge order (later rosters win on duplicate emails).",
    )

    # HTTP Settings
    request_timeout: float = Field(30.0, gt=0, description="HTTP timeout in seconds.")
    fetch_max_attempts: int = Field(
        1, ge=1, le=10, description="Total attempts per HTTP fetch (1 disables retries)."
    )

    # Stable Rank Persistence
    store_backend: str = Field(
        "file", description="Stable rank store backend: file, supabase or memory."
    )
    stable_index_store_path: Path = Field(
        Path(".studyjam/stable_rank_map.json"),
        description="JSON file used by the file store backend.",
    )
    stable_index_store_key: str = Field(
        "studyjam_stable_rank_map", description="Key holding the stable rank map."
    )

    # Supabase Configuration (only used by the supabase store backend)
    supabase_url: Optional[str] = Field(None, description="URL for the Supabase project.")
    supabase_key: Optional[str] = Field(None, description="Anon key for the Supabase project.")
    supabase_table: str = Field("kv_store", description="Key/value table for the stable rank map.")

    # Export
    export_filename: str = Field(
        "leaderboard_export.csv", description="Default path for leaderboard CSV exports."
    )

    # Logging Configuration
    log_level: str = Field(
        "INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."
    )

    # Pydantic Settings Configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )


def load_settings() -> AppSettings:
    """Loads and validates application settings."""
    try:
        settings = AppSettings()
        log_level_upper = settings.log_level.upper()
        # Validate log_level even if loaded from .env
        if log_level_upper not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            logging.warning(
                f"Invalid LOG_LEVEL '{settings.log_level}' found in .env or default. Using INFO."
            )
            settings.log_level = "INFO"
        else:
            settings.log_level = log_level_upper
        store_backend = settings.store_backend.lower()
        if store_backend not in ["file", "supabase", "memory"]:
            logging.warning(
                f"Invalid STORE_BACKEND '{settings.store_backend}'. Using file."
            )
            store_backend = "file"
        settings.store_backend = store_backend
        return settings
    except Exception as e:
        logging.exception(f"Error loading application settings: {e}")
        raise SystemExit("Failed to load application settings. Exiting.")


settings: AppSettings = load_settings()
