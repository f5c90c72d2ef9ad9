from loguru import logger

from studyjam.config.settings import DEFAULT_TEAM_FILES, AppSettings, load_settings
from studyjam.logging.setup import sensitive_data_filter


def test_defaults():
    app_settings = AppSettings()
    assert app_settings.main_data_file == "leaderboard-data.csv"
    assert app_settings.fetch_max_attempts == 1
    assert [t.name for t in app_settings.team_files] == [t.name for t in DEFAULT_TEAM_FILES]


def test_invalid_values_fall_back(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "loud")
    monkeypatch.setenv("STORE_BACKEND", "Redis")
    app_settings = load_settings()
    assert app_settings.log_level == "INFO"
    assert app_settings.store_backend == "file"


def test_team_files_from_environment(monkeypatch):
    monkeypatch.setenv(
        "TEAM_FILES", '[{"name": "Oslo (Data)", "file": "Oslo (Data).csv"}]'
    )
    monkeypatch.setenv("STORE_BACKEND", "MEMORY")
    app_settings = load_settings()
    assert [t.file for t in app_settings.team_files] == ["Oslo (Data).csv"]
    assert app_settings.store_backend == "memory"


def test_sensitive_extra_values_are_masked():
    record = {
        "message": "connecting",
        "extra": {"supabase_key": "abcdefghijklmnop", "resource": "teams/TeamX.csv"},
    }
    assert sensitive_data_filter(record) is True
    assert record["extra"]["supabase_key"] == "abcd****mnop"
    assert record["extra"]["resource"] == "teams/TeamX.csv"


def test_filter_runs_inside_loguru():
    messages = []
    handler_id = logger.add(messages.append, filter=sensitive_data_filter, format="{extra}")
    try:
        logger.bind(api_token="short").info("hello")
    finally:
        logger.remove(handler_id)
    assert "********" in messages[0]
