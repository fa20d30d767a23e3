"""Configuration loader for the GitHub App login gateway

Loads configuration from multiple sources with the following priority:
1. Environment variables (highest priority)
2. .env file
3. Hardcoded defaults (lowest priority)
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, List, Optional
from dotenv import load_dotenv

# Set up logger for config loader
logger = logging.getLogger(__name__)


class ConfigLoader:
    """Handles loading configuration from various sources"""

    def __init__(self, env_path: Optional[str] = None):
        """Initialize the config loader

        Args:
            env_path: Optional path to .env file.
                     Defaults to '.env' in the current directory.
        """
        self.env_path = Path(env_path) if env_path else Path(".env")
        self._load_env_file()

    def _load_env_file(self):
        """Load environment variables from .env file if it exists"""
        if self.env_path.exists():
            load_dotenv(dotenv_path=self.env_path)
            logger.debug(f"Loaded environment variables from {self.env_path}")
        else:
            logger.debug(f".env file not found at {self.env_path}, using environment variables and defaults only")

    def get(self, env_var: str, default: Any) -> Any:
        """Get a configuration value with priority: env > default

        Args:
            env_var: Environment variable name to check
            default: Default value if not found in environment

        Returns:
            The configuration value from environment or default
        """
        env_value = os.getenv(env_var)
        if env_value is not None:
            # Try to parse as appropriate type
            if isinstance(default, bool):
                return env_value.lower() in ('true', '1', 'yes')
            elif isinstance(default, int):
                try:
                    return int(env_value)
                except ValueError:
                    logger.warning(f"Failed to parse {env_var} as int, using default: {default}")
                    return default
            elif isinstance(default, float):
                try:
                    return float(env_value)
                except ValueError:
                    logger.warning(f"Failed to parse {env_var} as float, using default: {default}")
                    return default
            return env_value

        # Expand home directory if it's a path
        if isinstance(default, str) and default.startswith("~/"):
            return str(Path(default).expanduser())
        return default

    def get_list(self, env_var: str, default: Optional[List[str]] = None) -> List[str]:
        """Get a comma separated configuration value as a list of stripped strings

        Empty items are dropped, so a trailing comma is harmless.
        """
        raw = os.getenv(env_var)
        if raw is None:
            return list(default or [])
        return [item.strip() for item in raw.split(",") if item.strip()]


# Create a global instance
_config_loader = None

def get_config_loader() -> ConfigLoader:
    """Get or create the global ConfigLoader instance"""
    global _config_loader
    if _config_loader is None:
        _config_loader = ConfigLoader()
    return _config_loader


def load_redirect_allowlist(allowlist_path: Optional[str] = None) -> List[str]:
    """Load redirect URL prefixes from allowlist.json

    Args:
        allowlist_path: Optional path to allowlist.json file.
                        Defaults to 'allowlist.json' in the project root directory.

    Returns:
        List of URL prefixes in file order. Returns an empty list if the file
        doesn't exist or if there's an error loading it.
    """
    if allowlist_path:
        path = Path(allowlist_path)
    else:
        # __file__ is config/loader.py, so parent.parent is the project root
        path = Path(__file__).parent.parent / "allowlist.json"

    path = path.resolve()

    if not path.exists():
        logger.debug(f"Redirect allowlist file not found: {path}")
        return []

    try:
        with open(path, 'r') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse {path}: {e}")
        return []
    except IOError as e:
        logger.error(f"Failed to read {path}: {e}")
        return []

    prefixes = data.get("redirect_allowlist", []) if isinstance(data, dict) else data
    if not isinstance(prefixes, list):
        logger.warning(f"Invalid redirect_allowlist format in {path}: expected list, got {type(prefixes)}")
        return []

    validated = []
    for idx, prefix in enumerate(prefixes):
        if not isinstance(prefix, str) or not prefix.strip():
            logger.warning(f"Skipping invalid allowlist entry at index {idx}: not a non-empty string")
            continue
        validated.append(prefix.strip())

    logger.info(f"Loaded {len(validated)} redirect allowlist prefix(es) from {path}")
    return validated
