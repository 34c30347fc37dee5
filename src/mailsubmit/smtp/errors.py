# =============================================================================
# Submission Errors
# =============================================================================
# One exception class per step of a delivery attempt. Each error records the
# step it was raised in, so callers can tell exactly where an attempt failed
# and decide for themselves whether to retry, alert, or drop the message.
#
# Library errors (aiosmtplib, OSError, ssl) are always chained with
# `raise ... from e`, so the original cause stays available as __cause__.
# =============================================================================

from mailsubmit.smtp.states import SubmissionState


class SubmissionError(Exception):
    """
    Base exception for delivery attempts.

    Attributes:
        state: The step that failed.
    """

    #: Step this error class belongs to (overridden by subclasses)
    default_state: SubmissionState = SubmissionState.FAILED

    def __init__(self, message: str, *, state: SubmissionState | None = None) -> None:
        super().__init__(message)
        self.state = state or self.default_state


class SubmissionConnectionError(SubmissionError):
    """Raised when the SMTP server can't be reached."""
    default_state = SubmissionState.CONNECTED


class SecurityUpgradeError(SubmissionError):
    """Raised when the STARTTLS negotiation or TLS handshake fails."""
    default_state = SubmissionState.SECURITY_NEGOTIATED


class AuthenticationError(SubmissionError):
    """Raised when the server rejects the credential, or none is available."""
    default_state = SubmissionState.AUTHENTICATED


class AddressParseError(SubmissionError, ValueError):
    """
    Raised when a From or To value isn't a valid address (list).

    Attributes:
        value: The value that failed to parse.
    """
    default_state = SubmissionState.ENVELOPE_ACCEPTED

    def __init__(self, message: str, value: str = "") -> None:
        super().__init__(message)
        self.value = value


class EnvelopeRejectedError(SubmissionError):
    """
    Raised when the server refuses the envelope sender or a recipient.

    Attributes:
        address: The refused address.
        code: SMTP reply code, if the server sent one.
    """
    default_state = SubmissionState.ENVELOPE_ACCEPTED

    def __init__(self, message: str, address: str, code: int | None = None) -> None:
        super().__init__(message)
        self.address = address
        self.code = code


class TransferError(SubmissionError):
    """Raised when streaming the message in the DATA phase fails."""
    default_state = SubmissionState.DATA_SENT


class DeadlineExceededError(SubmissionError):
    """Raised when a whole attempt runs past its deadline."""
