"""Configuration loading.

Runtime settings come from environment variables (optionally loaded from a
``.env`` file). Filter rules can additionally be given in a YAML file. The
set of scraped sites is fixed in ``jobhunt.sites`` and cannot be configured.
"""
from pathlib import Path
from typing import Any, Callable, Dict, Optional
import logging
import os

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILES = ["jobhunt.yml", "jobhunt.yaml"]


def get_config(config_file: Optional[str] = None) -> Dict[str, Any]:
    """Load the YAML configuration.

    Args:
        config_file: Path to the file. Defaults to ``JOBHUNT_CONFIG`` or the
            first of DEFAULT_CONFIG_FILES found in the working directory.

    Returns:
        Configuration dictionary, empty when no file is configured or found

    Raises:
        FileNotFoundError: If an explicitly given file does not exist
        RuntimeError: If the file cannot be parsed
    """
    if config_file is None:
        config_file = os.getenv('JOBHUNT_CONFIG')
    if config_file is None:
        for fname in DEFAULT_CONFIG_FILES:
            if Path(fname).exists():
                config_file = fname
                break
        else:
            logger.debug("No config file found, using defaults")
            return {}

    path = Path(config_file)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    try:
        with open(path, 'r') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise RuntimeError(f"Failed to load config: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise RuntimeError(f"Failed to load config: {path} must contain a mapping")
    logger.info(f"Loaded configuration from {path}")
    return data


class Config:
    """Runtime settings read from ``JOBHUNT_*`` environment variables.

    A ``.env`` file (the given one, else one in the working directory) is
    loaded first; variables already set in the environment take precedence.
    """

    def __init__(self, env_file: Optional[str] = None):
        for candidate in (env_file, ".env"):
            if candidate and os.path.exists(candidate):
                load_dotenv(candidate)
                logger.info(f"Loaded environment from {candidate}")
                break

    def get(self, key: str, default: Any = None, required: bool = False) -> Any:
        """Return the raw value of ``key``.

        Raises:
            ValueError: If ``required`` and the variable is unset
        """
        value = os.environ.get(key, default)
        if value is None and required:
            raise ValueError(f"Required setting {key} is not set")
        return value

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self.get(key)
        if value is None or value == '':
            return default
        return value.strip().lower() in ('true', '1', 'yes', 'on')

    def get_int(self, key: str, default: int = 0) -> int:
        return self._get_number(key, default, int)

    def get_float(self, key: str, default: Optional[float] = None) -> Optional[float]:
        return self._get_number(key, default, float)

    def _get_number(self, key: str, default: Any, cast: Callable[[str], Any]) -> Any:
        value = self.get(key)
        if value is None or value == '':
            return default
        try:
            return cast(value)
        except ValueError:
            logger.warning(f"Invalid {cast.__name__} value for {key}: {value!r}, using {default}")
            return default

    def get_database_config(self) -> Dict[str, Any]:
        """Connection settings for ``jobhunt.database.Database``."""
        return {
            'url': self.get('JOBHUNT_DB', 'sqlite:///jobs.db'),
            'echo': self.get_bool('JOBHUNT_DB_ECHO'),
        }

    def get_scrape_config(self) -> Dict[str, Any]:
        """Arguments for ``scrape_all`` and the fetcher.

        ``workers`` is at least 1; ``timeout`` is None (no timeout) unless set.
        """
        return {
            'workers': max(1, self.get_int('JOBHUNT_WORKERS', 1)),
            'fail_fast': self.get_bool('JOBHUNT_FAIL_FAST', True),
            'timeout': self.get_float('JOBHUNT_TIMEOUT'),
        }

    def get_repl_config(self) -> Dict[str, Any]:
        return {
            'history_file': self.get('JOBHUNT_HISTORY', '.jobhunthistory'),
        }

    def get_log_level(self) -> str:
        return str(self.get('JOBHUNT_LOG_LEVEL', 'WARNING')).upper()
