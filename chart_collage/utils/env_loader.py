"""Environment variable loading utilities."""

import os
from pathlib import Path
from typing import Optional

import dotenv


def find_env_file() -> Optional[Path]:
    """Find the .env file in the current directory or one of its parents."""
    current = Path.cwd()

    for path in [current, *current.parents]:
        env_file = path / ".env"
        if env_file.exists():
            return env_file

        # Also check for .env.local
        env_local = path / ".env.local"
        if env_local.exists():
            return env_local

    return None


def load_environment(env_file: Optional[str] = None) -> bool:
    """Load environment variables from .env file.

    Variables already present in the process environment win.

    Args:
        env_file: Optional path to specific .env file

    Returns:
        True if environment file was loaded successfully
    """
    env_path = Path(env_file) if env_file else find_env_file()
    if env_path and env_path.exists():
        return dotenv.load_dotenv(env_path, override=False)
    return False


def get_env_var(var_name: str, default: Optional[str] = None) -> Optional[str]:
    """Get environment variable value, treating empty strings as unset."""
    value = os.getenv(var_name)
    if value is None or value == "":
        return default
    return value
