# =============================================================================
# Message Model
# =============================================================================
# Represents an outgoing email message and the files attached to it.
#
# A message carries:
#   - Envelope-ish headers (From, To, CC, Subject, Message-ID)
#   - Exactly one body (plain text wins over HTML when both are set)
#   - Inline files (e.g. images referenced from the body)
#   - Regular attachments
#
# File content is stored already base64-encoded. The MIME writer copies it
# into the output verbatim, so encoding happens once, when the File is built.
# =============================================================================

import base64
import mimetypes
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

# Used when the content type can't be guessed from the file name
DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class File:
    """
    A file carried by a message, either inline or as an attachment.

    Attributes:
        name: File name shown to the recipient (e.g. "report.pdf").
        content_type: MIME type (e.g. "application/pdf", "image/png").
        content: The file data, already encoded as base64 text.

    Example:
        >>> logo = File.from_bytes("logo.png", png_data)
        >>> logo.content_type
        'image/png'
    """
    name: str
    content_type: str
    content: str

    @classmethod
    def from_bytes(
        cls,
        name: str,
        data: bytes,
        content_type: str | None = None,
    ) -> "File":
        """
        Build a File from raw bytes, base64-encoding them.

        Args:
            name: File name.
            data: Raw file content.
            content_type: MIME type. Guessed from the name if not given.
        """
        if not content_type:
            content_type = guess_content_type(name)
        return cls(
            name=name,
            content_type=content_type,
            content=base64.b64encode(data).decode("ascii"),
        )

    @classmethod
    def from_path(cls, path: str | Path, content_type: str | None = None) -> "File":
        """
        Read a file from disk.

        Raises:
            OSError: If the file can't be read.
        """
        path = Path(path)
        return cls.from_bytes(path.name, path.read_bytes(), content_type)

    @property
    def size(self) -> int:
        """Decoded size in bytes (computed from the base64 length)."""
        stripped = "".join(self.content.split())
        padding = stripped[-2:].count("=")
        return len(stripped) * 3 // 4 - padding

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "type": self.content_type, "content": self.content}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "File":
        return cls(
            name=data.get("name", ""),
            content_type=data.get("type", "") or DEFAULT_CONTENT_TYPE,
            content=data.get("content", ""),
        )


@dataclass
class Message:
    """
    An outgoing email message.

    The message belongs to the caller. Rendering and sending read it but
    never modify it, so the same Message can be sent more than once.

    Attributes:
        sender: The "From" header value (e.g. "Alice <alice@example.com>").
        to: The "To" header value. One string, may list several addresses
            separated by commas.
        cc: The "CC" header value. Omitted from the output when empty.
        subject: Subject line. Omitted from the output when empty.
        body_text: Plain text body.
        body_html: HTML body. Only used when body_text is empty.
        inlines: Files rendered with "Content-Disposition: inline".
        attachments: Files rendered with "Content-Disposition: attachment".
        id: Message-ID header value (e.g. "<abc123@example.com>").

    Example:
        >>> message = Message(
        ...     sender="a@x.com",
        ...     to="b@x.com",
        ...     subject="Hi",
        ...     body_text="hello",
        ... )
    """

    sender: str = ""
    to: str = ""
    cc: str = ""
    subject: str = ""

    # Only one body is ever rendered (text first)
    body_text: str = ""
    body_html: str = ""

    inlines: list[File] = field(default_factory=list)
    attachments: list[File] = field(default_factory=list)

    id: str = ""                        # RFC Message-ID header

    @property
    def has_body(self) -> bool:
        """Returns True if either body is set."""
        return bool(self.body_text or self.body_html)

    @property
    def files(self) -> list[File]:
        """All files in output order: inlines first, then attachments."""
        return [*self.inlines, *self.attachments]

    # -------------------------------------------------------------------------
    # JSON payload conversion
    # -------------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Message":
        """
        Create a Message from a JSON-style dictionary.

        Keys follow the payload format: "id", "from", "to", "cc", "subject",
        "body_text", "body_html", "inlines", "attachments". Missing keys
        fall back to empty values.
        """
        return cls(
            sender=data.get("from", ""),
            to=data.get("to", ""),
            cc=data.get("cc", ""),
            subject=data.get("subject", ""),
            body_text=data.get("body_text", ""),
            body_html=data.get("body_html", ""),
            inlines=[File.from_dict(f) for f in data.get("inlines") or []],
            attachments=[File.from_dict(f) for f in data.get("attachments") or []],
            id=data.get("id", ""),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON payload format (see from_dict)."""
        return {
            "id": self.id,
            "from": self.sender,
            "to": self.to,
            "cc": self.cc,
            "subject": self.subject,
            "body_text": self.body_text,
            "body_html": self.body_html,
            "inlines": [f.to_dict() for f in self.inlines],
            "attachments": [f.to_dict() for f in self.attachments],
        }

    def __repr__(self) -> str:
        """Developer-friendly representation."""
        return (
            f"Message(id={self.id!r}, subject={self.subject!r}, "
            f"from={self.sender!r}, to={self.to!r}, files={len(self.files)})"
        )


def guess_content_type(name: str) -> str:
    """Guess a MIME type from a file name."""
    content_type, _ = mimetypes.guess_type(name)
    return content_type or DEFAULT_CONTENT_TYPE
