# =============================================================================
# mailsubmit Core Module
# =============================================================================
# Core value types. These are plain dataclasses with no third-party
# dependencies, so they can be imported anywhere.
#
#   - Message: An outgoing email message
#   - File: A file carried inline or as an attachment
#   - Credential: SMTP login credential
#   - SenderConfig: Where and how messages are submitted
# =============================================================================

from mailsubmit.core.message import File, Message
from mailsubmit.core.sender import Credential, SenderConfig, split_host_port

__all__ = [
    "Message",
    "File",
    "Credential",
    "SenderConfig",
    "split_host_port",
]
