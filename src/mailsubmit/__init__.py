# =============================================================================
# mailsubmit: MIME composition and SMTP submission
# =============================================================================
#
# mailsubmit turns a simple Message value (addresses, subject, one body,
# inline files, attachments) into a multipart/mixed MIME stream and submits
# it to an SMTP server in a single, fully sequential attempt.
#
# Features:
#   - Deterministic multipart/mixed rendering with CRLF line endings
#   - Opportunistic STARTTLS
#   - Optional authentication, passwords kept in the system keyring
#   - Step-by-step error reporting (connect, TLS, auth, envelope, data)
#   - XDG Base Directory compliant configuration
#
# =============================================================================

__version__ = "0.1.0"
__app_name__ = "mailsubmit"

from mailsubmit.core import Credential, File, Message, SenderConfig
from mailsubmit.mime import MessageWriter
from mailsubmit.smtp import SendResult, SubmissionClient

__all__ = [
    "Message",
    "File",
    "Credential",
    "SenderConfig",
    "MessageWriter",
    "SubmissionClient",
    "SendResult",
    "__version__",
    "__app_name__",
]
