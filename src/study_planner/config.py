"""Runtime settings read from the environment."""
import os
from dataclasses import dataclass
from pathlib import Path

from study_planner.errors import InvalidInput

DEFAULT_DB_PATH = str(Path.home() / ".study_planner" / "planner.db")
DEFAULT_USER_ID = "local"
DEFAULT_DAILY_HOURS = 4.0
DEFAULT_LOG_LEVEL = "WARNING"


@dataclass(frozen=True)
class Settings:
    db_path: str = DEFAULT_DB_PATH
    user_id: str = DEFAULT_USER_ID
    daily_hours: float = DEFAULT_DAILY_HOURS
    log_level: str = DEFAULT_LOG_LEVEL


def load_settings(environ=None) -> Settings:
    """Build Settings from STUDY_PLANNER_* environment variables."""
    env = os.environ if environ is None else environ
    raw_hours = env.get("STUDY_PLANNER_DAILY_HOURS", str(DEFAULT_DAILY_HOURS))
    try:
        daily_hours = float(raw_hours)
    except ValueError:
        raise InvalidInput(f"STUDY_PLANNER_DAILY_HOURS must be a number, got {raw_hours!r}")
    if daily_hours <= 0:
        raise InvalidInput("STUDY_PLANNER_DAILY_HOURS must be positive")
    return Settings(
        db_path=env.get("STUDY_PLANNER_DB", DEFAULT_DB_PATH),
        user_id=env.get("STUDY_PLANNER_USER", DEFAULT_USER_ID),
        daily_hours=daily_hours,
        log_level=env.get("STUDY_PLANNER_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
    )
