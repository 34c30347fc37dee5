# =============================================================================
# Address Parsing
# =============================================================================
# Extracts bare envelope addresses ("user@example.com") from header-style
# values ("Alice <user@example.com>, bob@example.com").
#
# Parsing is done by email.utils; on top of that every mailbox must have a
# local part and a domain separated by a single "@" and contain no spaces.
# =============================================================================

from email.utils import getaddresses

from mailsubmit.smtp.errors import AddressParseError


def parse_address(value: str) -> str:
    """
    Parse a single address.

    Args:
        value: e.g. "Alice <alice@example.com>" or "alice@example.com".

    Returns:
        The bare address, e.g. "alice@example.com".

    Raises:
        AddressParseError: If the value isn't exactly one valid address.
    """
    addresses = _parse(value)
    if len(addresses) != 1:
        raise AddressParseError(
            f"Expected a single address, got {len(addresses)}: {value!r}", value
        )
    return addresses[0]


def parse_address_list(value: str) -> list[str]:
    """
    Parse a comma-separated list of one or more addresses.

    Returns:
        The bare addresses, in the order given.

    Raises:
        AddressParseError: If the list is empty or any entry is invalid.
    """
    addresses = _parse(value)
    if not addresses:
        raise AddressParseError(f"No addresses in {value!r}", value)
    return addresses


def is_valid_mailbox(addr: str) -> bool:
    """Returns True if addr looks like "local@domain"."""
    if not addr or any(c.isspace() for c in addr):
        return False
    local, sep, domain = addr.rpartition("@")
    return bool(sep and local and domain) and "@" not in local


def _parse(value: str) -> list[str]:
    if not value or not value.strip():
        return []

    addresses = []
    for _name, addr in getaddresses([value]):
        if not is_valid_mailbox(addr):
            raise AddressParseError(f"Invalid address in {value!r}", value)
        addresses.append(addr)
    return addresses
