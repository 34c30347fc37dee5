# =============================================================================
# SMTP Module
# =============================================================================
# Handles delivering messages via SMTP (Simple Mail Transfer Protocol).
#
# Features:
#   - Opportunistic STARTTLS
#   - Optional authentication (password or system keyring)
#   - Envelope address parsing and validation
#   - One error class per protocol step
# =============================================================================

from mailsubmit.smtp.addresses import parse_address, parse_address_list
from mailsubmit.smtp.client import SendResult, SubmissionClient
from mailsubmit.smtp.errors import (
    AddressParseError,
    AuthenticationError,
    DeadlineExceededError,
    EnvelopeRejectedError,
    SecurityUpgradeError,
    SubmissionConnectionError,
    SubmissionError,
    TransferError,
)
from mailsubmit.smtp.states import SubmissionState

__all__ = [
    "SubmissionClient",
    "SendResult",
    "SubmissionState",
    "parse_address",
    "parse_address_list",
    "SubmissionError",
    "SubmissionConnectionError",
    "SecurityUpgradeError",
    "AuthenticationError",
    "AddressParseError",
    "EnvelopeRejectedError",
    "TransferError",
    "DeadlineExceededError",
]
