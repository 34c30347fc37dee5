# =============================================================================
# MIME Module
# =============================================================================
# Turns Message objects into the bytes sent as the SMTP DATA payload.
#
#   - MessageWriter: multipart/mixed serializer
#   - generate_boundary: random boundary tokens
# =============================================================================

from mailsubmit.mime.boundary import BOUNDARY_LENGTH, generate_boundary
from mailsubmit.mime.writer import MessageWriter, RenderedMessage

__all__ = [
    "MessageWriter",
    "RenderedMessage",
    "generate_boundary",
    "BOUNDARY_LENGTH",
]
