"""Configuration and session storage for the Pogoplug API.

Authenticated API calls carry a validation token (``valtoken``) obtained by
calling ``loginUser`` with the account email and password. The token is
long-lived but the server may invalidate it at any time; the client then
fetches a new one and stores it through a session store.

Config File:
    A YAML file holding the credentials and, once logged in, the token::

        email: user@example.com
        password: secret
        valtoken: 0123abcd
"""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path
from typing import Any, Protocol

import yaml

from .errors import PogoplugError
from .models import ClientConfig

# Default config locations
DEFAULT_CONFIG_NAME = ".pogoplug"
XDG_CONFIG_NAME = "pogoplug/pogoplug.conf"

# File permissions (owner read/write only)
CONFIG_FILE_MODE = stat.S_IRUSR | stat.S_IWUSR  # 0o600

TOKEN_KEY = "valtoken"

ENV_CONFIG = "POGOPLUG_CONFIG"
ENV_EMAIL = "POGOPLUG_EMAIL"
ENV_PASSWORD = "POGOPLUG_PASSWORD"
ENV_API_URL = "POGOPLUG_API_URL"


class AuthError(PogoplugError):
    """Base exception for authentication errors."""

    pass


class ConfigError(AuthError):
    """Raised when configuration loading/saving fails."""

    pass


def _get_default_config_path() -> Path:
    """Determine the default configuration file path.

    Checks in order:
    1. POGOPLUG_CONFIG environment variable
    2. ~/.pogoplug (home directory)
    3. ~/.config/pogoplug/pogoplug.conf (XDG config)

    Returns:
        Path to the configuration file.
    """
    env_config = os.environ.get(ENV_CONFIG)
    if env_config:
        return Path(env_config).expanduser()

    home_config = Path.home() / DEFAULT_CONFIG_NAME
    if home_config.exists():
        return home_config

    xdg_config_home = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config_home:
        xdg_config = Path(xdg_config_home) / XDG_CONFIG_NAME
    else:
        xdg_config = Path.home() / ".config" / XDG_CONFIG_NAME

    if xdg_config.exists():
        return xdg_config

    return home_config


def _read_config_file(path: Path) -> dict[str, Any]:
    """Read the raw YAML mapping from a config file.

    Raises:
        ConfigError: If the file exists but cannot be parsed.
    """
    if not path.exists():
        return {}

    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse config file: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config file: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def resolve_config_path(config_path: str | Path | None = None) -> Path:
    """Return the config file path to use.

    Args:
        config_path: Explicit path. If None, uses the default location.

    Returns:
        The expanded path (which may not exist yet).
    """
    if config_path is None:
        return _get_default_config_path()
    return Path(config_path).expanduser()


def load_config(config_path: str | Path | None = None) -> ClientConfig:
    """Load client configuration from the config file and environment.

    Environment variables ``POGOPLUG_EMAIL``, ``POGOPLUG_PASSWORD`` and
    ``POGOPLUG_API_URL`` take precedence over the file.

    Args:
        config_path: Path to config file. If None, uses default location.

    Returns:
        The validated configuration.

    Raises:
        ConfigError: If the file cannot be parsed or holds invalid values.
    """
    path = resolve_config_path(config_path)
    data = _read_config_file(path)
    data.pop(TOKEN_KEY, None)

    overrides = {
        "email": os.environ.get(ENV_EMAIL),
        "password": os.environ.get(ENV_PASSWORD),
        "apiurl": os.environ.get(ENV_API_URL),
    }
    data.update({key: value for key, value in overrides.items() if value})

    try:
        return ClientConfig.model_validate(data)
    except Exception as e:
        raise ConfigError(f"Invalid config in {path}: {e}") from e


class SessionStore(Protocol):
    """Holds the validation token between API calls."""

    def get_token(self) -> str | None: ...

    def set_token(self, token: str) -> None: ...


class MemorySessionStore:
    """Session store that keeps the token for the life of the process."""

    def __init__(self, token: str | None = None) -> None:
        self._token = token or None

    def get_token(self) -> str | None:
        return self._token

    def set_token(self, token: str) -> None:
        self._token = token


class FileSessionStore:
    """Session store persisting the token into the YAML config file.

    Other keys in the file (credentials, base URL) are preserved when the
    token is written back.

    Attributes:
        path: Path to the config file holding the token.
    """

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = resolve_config_path(path)
        self._token: str | None = None
        self._loaded = False

    def get_token(self) -> str | None:
        """Return the stored token, reading the file on first access.

        Raises:
            ConfigError: If the config file cannot be parsed.
        """
        if not self._loaded:
            token = _read_config_file(self.path).get(TOKEN_KEY)
            self._token = str(token) if token else None
            self._loaded = True
        return self._token

    def set_token(self, token: str) -> None:
        """Store a new token and write it to the config file.

        Raises:
            ConfigError: If the token cannot be saved.
        """
        data = _read_config_file(self.path)
        data[TOKEN_KEY] = token

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(yaml.safe_dump(data, default_flow_style=False))
            self.path.chmod(CONFIG_FILE_MODE)
        except OSError as e:
            raise ConfigError(f"Failed to save token: {e}") from e

        logging.debug(f"Saved valtoken to {self.path}")
        self._token = token
        self._loaded = True
