"""Project environment loading"""

from pathlib import Path
from dotenv import load_dotenv
from racerating.utils.logger import get_logger

logger = get_logger(__name__)


def load_project_env() -> None:
    """Load the .env file at the project root"""
    project_root = Path(__file__).resolve().parent.parent.parent
    env_path = project_root / ".env"

    if env_path.exists():
        load_dotenv(env_path, override=True)
        logger.info(f"Loaded environment file: {env_path}")
    else:
        logger.debug(f"No environment file at {env_path}, using process environment")
