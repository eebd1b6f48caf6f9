"""Paths, defaults and logging setup."""
import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from loguru import logger

load_dotenv()

APP_NAME = "study_planner"
CONFIG_DIR = Path.home() / f".{APP_NAME}"

DEFAULT_DB_PATH = os.getenv("STUDY_PLANNER_DB", str(CONFIG_DIR / "planner.db"))
DEFAULT_USER_ID = os.getenv("STUDY_PLANNER_USER", "local")
LOG_LEVEL = os.getenv("STUDY_PLANNER_LOG_LEVEL", "WARNING")

# Profile defaults
DEFAULT_DAILY_HOURS = 2
DEFAULT_SUBJECT_COLOR = "#18206F"


def setup_logging(level: str = LOG_LEVEL) -> None:
    """Replace loguru's default sink with a stderr sink at the given level."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {name}:{function} - {message}",
    )
