"""Application configuration from environment."""
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Base path for bundled scenario content (parent of app/)
BASE_DIR = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    """App settings loaded from env / .env."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Scenario Debrief Trainer"
    debug: bool = False
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite+aiosqlite:///./scenario_debrief.db"

    # Canonical scenario JSON files: <scenarios_dir>/<scenario_id>.json
    scenarios_dir: Path = BASE_DIR / "data" / "scenarios"

    # Scenario rules
    reflection_min_words: int = 50

    # In-process run registry bounds
    max_runs: int = 10_000
    max_scored_runs: int = 100


def get_settings() -> Settings:
    return Settings()
