"""
Configuration management for filemagic.
Loads settings from environment variables with sensible defaults.
"""
import os
from typing import List, Optional
from dotenv import load_dotenv


class Config:
    """Settings loaded from environment variables."""

    def __init__(self, env_file: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            env_file: Optional path to .env file
        """
        if env_file:
            load_dotenv(env_file)
        else:
            load_dotenv()

        # Native library: a name for find_library or a path to the .so/.dylib
        self.library_name = os.getenv('MAGIC_LIBRARY_NAME', '').strip() or 'magic'

        # Databases, colon separated like libmagic's own MAGIC variable
        self.database_paths: List[str] = [
            path for path in os.getenv('MAGIC_DATABASE_PATHS', '').split(':') if path.strip()
        ]

        # Concurrency
        self.pool_size = int(os.getenv('MAGIC_POOL_SIZE', '2'))

        # Logging
        self.log_level = os.getenv('LOG_LEVEL', 'INFO')

    def __repr__(self) -> str:
        """String representation of config."""
        return (
            f"Config(library_name={self.library_name!r}, "
            f"database_paths={self.database_paths}, "
            f"pool_size={self.pool_size}, "
            f"log_level={self.log_level!r})"
        )


# Global config instance
_config: Optional[Config] = None


def get_config(env_file: Optional[str] = None) -> Config:
    """
    Get or create global config instance (singleton).

    Args:
        env_file: Optional path to .env file

    Returns:
        Config instance
    """
    global _config
    if _config is None:
        _config = Config(env_file)
    return _config


def reset_config():
    """Reset global config instance (useful for testing)."""
    global _config
    _config = None
