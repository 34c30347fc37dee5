# =============================================================================
# MIME Message Writer
# =============================================================================
# Serializes a Message into a multipart/mixed byte stream, ready to be used
# as the SMTP DATA payload.
#
# Output layout (all lines end with CRLF):
#
#   MIME-Version: 1.0
#   Message-ID: ...
#   Date: ...
#   From: ...
#   To: ...
#   CC: ...                  (only if set)
#   Subject: ...             (only if set)
#   <extra headers>          (in the order supplied)
#   Content-Type: multipart/mixed; boundary=TOKEN
#
#   --TOKEN                  text body, HTML body, or nothing
#   --TOKEN                  one part per inline file
#   --TOKEN                  one part per attachment
#   --TOKEN--                (no line break after the closing boundary)
#
# Header values, extra headers and file names are written as-is. Nothing is
# escaped or folded, so callers must not pass values containing CR or LF.
# =============================================================================

import io
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime
from email.utils import format_datetime, make_msgid, parseaddr

from mailsubmit.core import File, Message
from mailsubmit.mime.boundary import generate_boundary

CRLF = "\r\n"


@dataclass(frozen=True)
class RenderedMessage:
    """
    Result of rendering a message.

    Attributes:
        data: The complete message, headers and body.
        boundary: The boundary token used for this rendering.
        message_id: The Message-ID written to the headers.
    """
    data: bytes
    boundary: str
    message_id: str


class MessageWriter:
    """
    Renders Message objects into MIME multipart/mixed bytes.

    A writer keeps no state between calls: every call gets its own buffer
    and a fresh boundary token. One writer can serve concurrent sends.

    Usage:
        >>> writer = MessageWriter()
        >>> data = writer.render(message, {"X-Mailer": "mailsubmit"})

    Args:
        boundary_factory: Returns a new boundary token on each call.
        clock: Returns the (timezone-aware) time used for the Date header.
    """

    def __init__(
        self,
        boundary_factory: Callable[[], str] = generate_boundary,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._boundary_factory = boundary_factory
        self._clock = clock or _local_now

    def render(self, message: Message, extra_headers: Mapping[str, str] | None = None) -> bytes:
        """
        Render a message to bytes.

        Rendering never fails and never validates anything: addresses are
        checked later, at submission time.
        """
        return self.build(message, extra_headers).data

    def build(
        self,
        message: Message,
        extra_headers: Mapping[str, str] | None = None,
    ) -> RenderedMessage:
        """Render a message and report the boundary and Message-ID used."""
        boundary = self._boundary_factory()
        message_id = message.id or _new_message_id(message.sender)
        out = _PartBuffer(boundary)

        # Message header
        out.write_header("MIME-Version", "1.0")
        out.write_header("Message-ID", message_id)
        out.write_header("Date", format_datetime(self._clock()))
        out.write_header("From", message.sender)
        out.write_header("To", message.to)
        if message.cc:
            out.write_header("CC", message.cc)
        if message.subject:
            out.write_header("Subject", message.subject)
        for key, value in (extra_headers or {}).items():
            out.write_header(key, value)
        out.write_header("Content-Type", f"multipart/mixed; boundary={boundary}")
        out.write(CRLF)

        # Message body. Text wins over HTML; there is no multipart/alternative.
        if message.body_text:
            out.write_text(message.body_text, "text/plain")
        elif message.body_html:
            out.write_text(message.body_html, "text/html")
        else:
            out.write_boundary()

        for f in message.inlines:
            out.write_file(f, "inline")
        for f in message.attachments:
            out.write_file(f, "attachment")
        out.write(f"--{boundary}--")

        return RenderedMessage(
            data=out.getvalue().encode("utf-8"),
            boundary=boundary,
            message_id=message_id,
        )


class _PartBuffer:
    """Scratch buffer for one rendering."""

    def __init__(self, boundary: str) -> None:
        self.boundary = boundary
        self._buf = io.StringIO()

    def write(self, text: str) -> None:
        self._buf.write(text)

    def getvalue(self) -> str:
        return self._buf.getvalue()

    def write_header(self, key: str, value: str) -> None:
        self.write(f"{key}: {value}{CRLF}")

    def write_boundary(self) -> None:
        self.write(f"--{self.boundary}{CRLF}")

    def write_text(self, content: str, content_type: str) -> None:
        self.write_boundary()
        self.write_header("Content-Type", f"{content_type}; charset=UTF-8")
        self.write(CRLF)
        self.write(content)
        self.write(CRLF + CRLF)

    def write_file(self, f: File, disposition: str) -> None:
        self.write_boundary()
        self.write_header("Content-Type", f'{f.content_type}; name="{f.name}"')
        self.write_header("Content-Disposition", f'{disposition}; filename="{f.name}"')
        self.write_header("Content-Transfer-Encoding", "base64")
        self.write(CRLF)
        self.write(f.content)
        self.write(CRLF + CRLF)


def _local_now() -> datetime:
    return datetime.now().astimezone()


def _new_message_id(sender: str) -> str:
    """Generate a Message-ID, using the sender's domain when there is one."""
    _, addr = parseaddr(sender)
    domain = addr.rpartition("@")[2] or None
    return make_msgid(domain=domain)
