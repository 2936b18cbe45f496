"""
Environment configuration - Load settings from .env files
"""

import os
from pathlib import Path
from typing import Optional, Dict, List
import json

from dotenv import load_dotenv


class EnvConfig:
    """
    Load and manage configuration from environment variables and .env files.

    Environment variables already set in the process take priority over the
    values found in the .env file.
    """

    _loaded_path: Optional[Path] = None

    @staticmethod
    def load_env_file(path: Optional[str] = None) -> bool:
        """
        Load environment variables from .env file.

        Args:
            path: Path to .env file (default: search current dir and parents)

        Returns:
            True if file was loaded, False otherwise
        """
        if path:
            env_path = Path(path)
        else:
            # Search in current dir and up to 3 levels up
            env_path = None
            current = Path.cwd()
            for _ in range(4):
                potential_path = current / ".env"
                if potential_path.exists():
                    env_path = potential_path
                    break
                if current.parent == current:
                    break
                current = current.parent

        if env_path and env_path.exists():
            if EnvConfig._loaded_path == env_path:
                return True
            load_dotenv(env_path, override=False)
            EnvConfig._loaded_path = env_path
            return True

        return False

    @staticmethod
    def get(key: str, default: Optional[str] = None) -> Optional[str]:
        """Get environment variable with optional default."""
        return os.getenv(key, default)

    @staticmethod
    def get_bool(key: str, default: bool = False) -> bool:
        """Get boolean environment variable."""
        value = os.getenv(key, str(default)).lower()
        return value in ('true', '1', 'yes', 'on')

    @staticmethod
    def get_int(key: str, default: int = 0) -> int:
        """Get integer environment variable."""
        try:
            return int(os.getenv(key, str(default)))
        except ValueError:
            return default

    @staticmethod
    def get_float(key: str, default: float = 0.0) -> float:
        """Get float environment variable."""
        try:
            return float(os.getenv(key, str(default)))
        except ValueError:
            return default

    @staticmethod
    def get_list(key: str, default: Optional[List[str]] = None, separator: str = ",") -> List[str]:
        """Get a comma separated environment variable as a list of stripped items."""
        value = os.getenv(key)
        if not value:
            return list(default or [])
        return [item.strip() for item in value.split(separator) if item.strip()]

    @staticmethod
    def get_json(key: str, default: Optional[Dict] = None) -> Optional[Dict]:
        """Get JSON environment variable."""
        value = os.getenv(key)
        if not value:
            return default
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return default

    @staticmethod
    def missing(*keys: str) -> List[str]:
        """Return the names of the given environment variables that are unset or empty."""
        return [key for key in keys if not os.getenv(key)]

    @staticmethod
    def check_required(*keys: str) -> bool:
        """
        Check if required environment variables are set.

        Args:
            *keys: Environment variable names to check

        Returns:
            True if all are set, False otherwise
        """
        return not EnvConfig.missing(*keys)
