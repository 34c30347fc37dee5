# =============================================================================
# Boundary Tokens
# =============================================================================
# Random tokens used to delimit MIME parts. The only requirement is that a
# token can't plausibly appear inside part content, so a fixed-length run of
# letters and digits is enough. Base64 content never contains "--", which
# keeps boundary lines unambiguous for attachments.
# =============================================================================

import secrets
import string

BOUNDARY_LENGTH = 16

_ALPHABET = string.ascii_letters + string.digits


def generate_boundary(length: int = BOUNDARY_LENGTH) -> str:
    """Return a new random token of `length` letters and digits."""
    return "".join(secrets.choice(_ALPHABET) for _ in range(length))
