"""Configuration for the git executable, feature toggles and clone directories"""

import configparser
import logging
import os
import platform
from typing import Optional, Any

from pathlib import Path

APP_NAME = "clonewatch"

logger = logging.getLogger(__name__)

_home = os.path.expanduser("~")

xdg_config_home = os.environ.get("XDG_CONFIG_HOME") or os.path.join(_home, ".config")

default_cfg = {
    "git": {"executable": ""},
    "features": {"recurse_submodules": "false"},
    "dirs": {"clones": "."},
}

if platform.system() == "Darwin":
    # macOS
    config_dir = Path("~/Library/Application Support/clonewatch").expanduser()
else:
    # Linux or others
    config_dir = Path(os.path.join(xdg_config_home, APP_NAME))

_TRUTHY = {"1", "true", "yes", "on"}


def get_config_file():
    return config_dir / f"{APP_NAME}.cfg"


class ConfigAccessor:
    """
    A dict-like accessor for configuration files.

    Missing files, sections and keys are not errors: lookups fall back to the
    given default.

    Usage:
        config = ConfigAccessor()
        value = config.get('git', 'executable', default='git')
    """

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize a ConfigAccessor with an optional config file path.

        Args:
            config_path: Path to the configuration file. If None, uses the default path.
        """
        if config_path is None:
            self.config_path = get_config_file()
        else:
            self.config_path = config_path

        self.config = configparser.ConfigParser()
        if self.config_path.exists():
            self.config.read(self.config_path)

    def get(self, section: str, key: str, default: Any = None) -> Any:
        """
        Get a configuration value from the specified section and key.

        Args:
            section: The configuration section
            key: The configuration key
            default: Value to return if the section or key doesn't exist

        Returns:
            The configuration value if it exists, otherwise the default value
        """
        try:
            return self.config[section][key]
        except (KeyError, configparser.NoSectionError, configparser.NoOptionError):
            return default

    def getboolean(self, section: str, key: str, default: bool = False) -> bool:
        """Get a boolean value, accepting 1/true/yes/on (case-insensitive)."""
        value = self.get(section, key)
        if value is None:
            return default
        return str(value).strip().lower() in _TRUTHY


# Create a global config accessor instance
config = ConfigAccessor()


def get_git_executable() -> str:
    """
    Get the git executable used to run network operations.

    Resolution order: the ``[git] executable`` config key, then the
    executable GitPython resolved at import time, then plain ``git`` on PATH.
    """
    configured = config.get("git", "executable", default_cfg["git"]["executable"])
    if configured:
        return str(Path(configured).expanduser())

    try:
        from git import Git

        resolved = Git.GIT_PYTHON_GIT_EXECUTABLE
    except ImportError as e:
        # GitPython raises ImportError when it cannot find a git binary
        logger.debug(f"GitPython could not resolve a git executable: {e}")
        resolved = None

    return resolved or "git"


def recurse_submodules_enabled() -> bool:
    """Whether fetches recurse into submodules (``[features] recurse_submodules``)."""
    env_value = os.environ.get("CLONEWATCH_RECURSE_SUBMODULES")
    if env_value is not None:
        return env_value.strip().lower() in _TRUTHY
    return config.getboolean("features", "recurse_submodules", False)


def get_clones_dir() -> Path:
    """
    Get the configured base directory for new clones.

    Returns:
        Path to the clones directory (defaults to the current directory)
    """
    clones_dir_str = config.get("dirs", "clones", default_cfg["dirs"]["clones"])
    return Path(clones_dir_str).expanduser()
