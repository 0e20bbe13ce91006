"""Configuration management for the Delegate campaign orchestrator."""

import os
from pathlib import Path

from dotenv import load_dotenv


# Load environment variables from .env file
def _find_env_file() -> Path | None:
    """Find the .env file, searching up the directory tree."""
    current = Path(__file__).parent
    for _ in range(5):  # Search up to 5 levels
        env_path = current / ".env"
        if env_path.exists():
            return env_path
        current = current.parent
    return None


_env_file = _find_env_file()
if _env_file:
    load_dotenv(_env_file)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "")
    try:
        return float(raw) if raw else default
    except ValueError:
        return default


class Config:
    """Application configuration from environment variables."""

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    # Remote collaborators (the Delegate backend)
    CAMPAIGN_API_URL: str = os.getenv("CAMPAIGN_API_URL", "")
    VOICE_API_URL: str = os.getenv("VOICE_API_URL", "")
    API_TOKEN: str = os.getenv("DELEGATE_API_TOKEN", "")

    # Persistence: "sql" (local database), "http" (Delegate backend) or "none"
    PERSISTENCE_BACKEND: str = os.getenv("PERSISTENCE_BACKEND", "sql")
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./delegate_campaigns.db")

    # Orchestration cadence (seconds)
    ORCHESTRATOR_TICK_SECONDS: float = _env_float("ORCHESTRATOR_TICK_SECONDS", 15.0)
    ACTION_COOLDOWN_SECONDS: float = _env_float("ACTION_COOLDOWN_SECONDS", 30.0)
    GENERATOR_TIMEOUT_SECONDS: float = _env_float("GENERATOR_TIMEOUT_SECONDS", 20.0)

    @classmethod
    def validate(cls) -> list[str]:
        """Validate configuration, return list of issues."""
        issues = []

        if cls.PERSISTENCE_BACKEND not in ("sql", "http", "none"):
            issues.append(
                f"Unknown PERSISTENCE_BACKEND '{cls.PERSISTENCE_BACKEND}'. Use 'sql', 'http' or 'none'."
            )
        if cls.PERSISTENCE_BACKEND == "http" and not cls.CAMPAIGN_API_URL:
            issues.append("PERSISTENCE_BACKEND=http requires CAMPAIGN_API_URL")
        if not cls.CAMPAIGN_API_URL:
            issues.append(
                "No CAMPAIGN_API_URL configured. "
                "Autonomous actions will always use the local fallback library."
            )
        if cls.ORCHESTRATOR_TICK_SECONDS <= 0:
            issues.append("ORCHESTRATOR_TICK_SECONDS must be positive")
        if cls.GENERATOR_TIMEOUT_SECONDS <= 0:
            issues.append("GENERATOR_TIMEOUT_SECONDS must be positive")

        return issues

    @classmethod
    def is_debug(cls) -> bool:
        """Check if debug mode is enabled."""
        return cls.DEBUG

    @classmethod
    def get_database_url(cls) -> str:
        """Get the database URL."""
        return cls.DATABASE_URL


# Singleton config instance
config = Config()
