# =============================================================================
# Submission States
# =============================================================================
# A delivery attempt walks a fixed, linear sequence of states:
#
#   CONNECTED -> SECURITY_NEGOTIATED -> AUTHENTICATED
#             -> ENVELOPE_ACCEPTED -> DATA_SENT -> DELIVERED
#
# Any step may instead end the attempt in FAILED. There is no way back to an
# earlier state; a new attempt starts over with a new connection.
# =============================================================================

from enum import Enum


class SubmissionState(Enum):
    """
    States of a single delivery attempt.

    The five step states are listed in the order they're reached. DELIVERED
    and FAILED are terminal.
    """
    CONNECTED = "connected"
    SECURITY_NEGOTIATED = "security_negotiated"
    AUTHENTICATED = "authenticated"
    ENVELOPE_ACCEPTED = "envelope_accepted"
    DATA_SENT = "data_sent"

    # Terminal states
    DELIVERED = "delivered"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """Returns True for DELIVERED and FAILED."""
        return self in (SubmissionState.DELIVERED, SubmissionState.FAILED)

    @property
    def label(self) -> str:
        """Human-readable step name, used in log and error messages."""
        return self.value.replace("_", " ")


# The non-terminal states in the order a successful attempt reaches them
STEP_ORDER: tuple[SubmissionState, ...] = (
    SubmissionState.CONNECTED,
    SubmissionState.SECURITY_NEGOTIATED,
    SubmissionState.AUTHENTICATED,
    SubmissionState.ENVELOPE_ACCEPTED,
    SubmissionState.DATA_SENT,
)
