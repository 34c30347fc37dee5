# =============================================================================
# Configuration Management
# =============================================================================
# Handles loading, saving, and validating mailsubmit configuration.
#
# XDG Base Directory Compliance (https://specifications.freedesktop.org/basedir-spec/):
#   - Config:  $XDG_CONFIG_HOME/mailsubmit/  (default: ~/.config/mailsubmit/)
#
# Files:
#   - config.toml: SMTP server, login name, extra headers
#
# Passwords are never written here. Name a keyring service instead and store
# the password with: keyring set <service> <username>
# =============================================================================

import os
import tomllib  # Built into Python 3.11+
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tomli_w  # For writing TOML (tomllib is read-only)

from mailsubmit.core import Credential, SenderConfig
from mailsubmit.core.sender import DEFAULT_PORT, DEFAULT_TIMEOUT


# =============================================================================
# XDG Directory Management
# =============================================================================

# Application identifier used in all XDG paths
APP_NAME = "mailsubmit"


def get_xdg_config_home() -> Path:
    """
    Returns the XDG config directory for mailsubmit.

    Respects $XDG_CONFIG_HOME if set, otherwise uses ~/.config/mailsubmit/
    """
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        base = Path(xdg_config)
    else:
        base = Path.home() / ".config"
    return base / APP_NAME


# =============================================================================
# Configuration Data Structures
# =============================================================================

@dataclass
class Config:
    """
    Main configuration container for mailsubmit.

    Attributes:
        default_from: From address used when none is given on the command line.
        host: Hostname of the SMTP server.
        port: Port of the SMTP server.
        timeout: Per-command timeout in seconds.
        validate_certs: Verify the server certificate on STARTTLS.
        username: Login name. Empty for anonymous submission.
        keyring_service: Keyring service holding the password.
        headers: Extra headers added to every message.

    Usage:
        >>> config = Config.load()
        >>> client = SubmissionClient(config.sender_config())
    """
    default_from: str = ""

    # SMTP server
    host: str = "localhost"
    port: int = DEFAULT_PORT
    timeout: float = DEFAULT_TIMEOUT
    validate_certs: bool = True

    # Authentication (password comes from the keyring)
    username: str = ""
    keyring_service: str = APP_NAME

    # Extra headers (name -> value)
    headers: dict[str, str] = field(default_factory=dict)

    # -------------------------------------------------------------------------
    # File Paths
    # -------------------------------------------------------------------------

    @staticmethod
    def config_file_path() -> Path:
        """Returns the path to the main config file."""
        return get_xdg_config_home() / "config.toml"

    # -------------------------------------------------------------------------
    # Loading and Saving
    # -------------------------------------------------------------------------

    @classmethod
    def load(cls, path: Path | None = None) -> "Config":
        """
        Load configuration from a config file.

        If the file doesn't exist, returns default configuration.

        Args:
            path: Config file to read. Defaults to the XDG location.

        Raises:
            ConfigError: If the config file exists but is invalid.
        """
        config_path = path or cls.config_file_path()

        if not config_path.exists():
            # No config file yet - return defaults
            return cls()

        # Load and parse the TOML file
        try:
            with open(config_path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid config file: {e}") from e

        return cls._from_dict(data)

    def save(self, path: Path | None = None) -> None:
        """
        Save configuration to a config file.

        Creates the config directory if it doesn't exist.
        """
        config_path = path or self.config_file_path()
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "wb") as f:
            tomli_w.dump(self._to_dict(), f)

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> "Config":
        """
        Create a Config object from a dictionary (parsed TOML).

        Raises:
            ConfigError: If a section isn't a table or a value has the wrong type.
        """
        general = _table(data, "general")
        sender = _table(data, "sender")
        headers = _table(data, "headers")

        if not all(isinstance(v, str) for v in headers.values()):
            raise ConfigError("[headers] must map header names to strings")

        port = sender.get("port", DEFAULT_PORT)
        if isinstance(port, bool) or not isinstance(port, int) or not 0 < port < 65536:
            raise ConfigError(f"Invalid port: {port!r}")

        timeout = sender.get("timeout", DEFAULT_TIMEOUT)
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            raise ConfigError(f"Invalid timeout: {timeout!r}")

        validate_certs = sender.get("validate_certs", True)
        if not isinstance(validate_certs, bool):
            raise ConfigError(f"Invalid validate_certs (expected true/false): {validate_certs!r}")

        return cls(
            default_from=_string(general, "general", "default_from", ""),
            host=_string(sender, "sender", "host", "localhost"),
            port=port,
            timeout=float(timeout),
            validate_certs=validate_certs,
            username=_string(sender, "sender", "username", ""),
            keyring_service=_string(sender, "sender", "keyring_service", APP_NAME),
            headers=dict(headers),
        )

    def _to_dict(self) -> dict[str, Any]:
        """
        Convert Config to a dictionary for TOML serialization.
        """
        data: dict[str, Any] = {}

        data["general"] = {
            "default_from": self.default_from,
        }

        data["sender"] = {
            "host": self.host,
            "port": self.port,
            "timeout": self.timeout,
            "validate_certs": self.validate_certs,
            "username": self.username,
            "keyring_service": self.keyring_service,
        }

        data["headers"] = dict(self.headers)

        return data

    # -------------------------------------------------------------------------
    # Conversion
    # -------------------------------------------------------------------------

    def sender_config(self) -> SenderConfig:
        """Build the SenderConfig used by SubmissionClient."""
        credential = None
        if self.username:
            credential = Credential(
                username=self.username,
                keyring_service=self.keyring_service,
            )
        return SenderConfig(
            host=self.host,
            port=self.port,
            credential=credential,
            headers=self.headers,
            timeout=self.timeout,
            validate_certs=self.validate_certs,
        )


# =============================================================================
# Exceptions
# =============================================================================

class ConfigError(Exception):
    """Raised when there's an error loading or parsing configuration."""
    pass


# =============================================================================
# Utility Functions
# =============================================================================

def _table(data: dict[str, Any], name: str) -> dict[str, Any]:
    """Return the [name] table, or an empty one if it's missing."""
    table = data.get(name, {})
    if not isinstance(table, dict):
        raise ConfigError(f"[{name}] must be a table, got {type(table).__name__}")
    return table


def _string(table: dict[str, Any], section: str, key: str, default: str) -> str:
    value = table.get(key, default)
    if not isinstance(value, str):
        raise ConfigError(f"Invalid {section}.{key} (expected a string): {value!r}")
    return value


def print_paths() -> None:
    """
    Print the config paths for debugging.
    Useful for users wondering where their config is stored.
    """
    print(f"Config:       {get_xdg_config_home()}")
    print(f"Config file:  {Config.config_file_path()}")
