# =============================================================================
# Sender Model
# =============================================================================
# Describes where and how messages are submitted: the SMTP server address,
# an optional login credential, and extra headers stamped on every message.
#
# IMPORTANT: Passwords don't have to live here. A Credential can name a
# keyring service instead, and the password is then looked up from the
# system keyring at send time. This keeps secrets out of config files.
# =============================================================================

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

# Standard submission port (STARTTLS)
DEFAULT_PORT = 587

# Per-command timeout in seconds
DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class Credential:
    """
    Login credential for SMTP authentication.

    Attributes:
        username: Login name, usually the email address.
        password: Password. May be empty when keyring_service is set.
        keyring_service: Keyring service name to look the password up under.
                         Passwords can be stored with:
                             keyring set <service> <username>
    """
    username: str
    password: str = field(default="", repr=False)
    keyring_service: str = ""

    def __str__(self) -> str:
        return self.username


@dataclass(frozen=True)
class SenderConfig:
    """
    Configuration of one message sender.

    A SenderConfig is read-only after construction. The headers mapping is
    copied into a read-only snapshot, so changing the dict that was passed
    in has no effect on messages sent afterwards. One instance can be shared
    by any number of concurrent sends.

    Attributes:
        host: Hostname of the SMTP server. Also the identity checked during
              the STARTTLS handshake.
        port: Port of the SMTP server.
        credential: Login credential. None for anonymous submission.
        headers: Extra headers (name -> value) added to every message, in
                 insertion order. Written verbatim, without escaping.
        timeout: Timeout in seconds for each individual SMTP command.
        validate_certs: Verify the server certificate on STARTTLS.

    Example:
        >>> config = SenderConfig.from_address(
        ...     "smtp.example.com:587",
        ...     credential=Credential("me@example.com", keyring_service="mailsubmit"),
        ...     headers={"X-Mailer": "mailsubmit"},
        ... )
    """
    host: str
    port: int = DEFAULT_PORT
    credential: Credential | None = None
    headers: Mapping[str, str] = field(default_factory=dict)
    timeout: float = DEFAULT_TIMEOUT
    validate_certs: bool = True

    def __post_init__(self) -> None:
        # Frozen dataclass: bypass __setattr__ to store the snapshot
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    @classmethod
    def from_address(cls, address: str, **kwargs) -> "SenderConfig":
        """
        Create a config from a "host:port" string.

        IPv6 hosts must be bracketed, e.g. "[::1]:25".

        Raises:
            ValueError: If the address has no valid port.
        """
        host, port = split_host_port(address)
        return cls(host=host, port=port, **kwargs)

    @property
    def address(self) -> str:
        """The server address as "host:port"."""
        if ":" in self.host:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"

    def __str__(self) -> str:
        if self.credential:
            return f"{self.credential}@{self.address}"
        return self.address


def split_host_port(address: str) -> tuple[str, int]:
    """
    Split "host:port" into its parts.

    Raises:
        ValueError: If the address is malformed or the port is not a number
                    in the range 1-65535.
    """
    if address.startswith("["):
        host, sep, rest = address[1:].partition("]")
        if not sep or not rest.startswith(":"):
            raise ValueError(f"Invalid address: {address!r}")
        port_str = rest[1:]
    else:
        host, sep, port_str = address.rpartition(":")
        if not sep or ":" in host:
            raise ValueError(f"Invalid address (expected host:port): {address!r}")

    if not host:
        raise ValueError(f"Missing host in address: {address!r}")

    try:
        port = int(port_str)
    except ValueError:
        raise ValueError(f"Invalid port in address: {address!r}") from None
    if not 0 < port < 65536:
        raise ValueError(f"Port out of range in address: {address!r}")

    return host, port
