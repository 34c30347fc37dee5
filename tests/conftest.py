# =============================================================================
# Pytest Configuration and Fixtures
# =============================================================================
# Shared fixtures for the mailsubmit test suite.
#
# No test talks to a real SMTP server: `smtp_server` replaces aiosmtplib.SMTP
# with DummySMTP, which records every command and can be told to fail any of
# them.
# =============================================================================

import tempfile
from datetime import datetime, timezone
from pathlib import Path

import pytest

from mailsubmit.core import Credential, File, Message, SenderConfig
from mailsubmit.mime import MessageWriter

BOUNDARY = "TESTBOUNDARY0001"
FIXED_TIME = datetime(2024, 1, 15, 10, 30, 0, tzinfo=timezone.utc)


class DummySMTP:
    """Stand-in for aiosmtplib.SMTP driven by a DummyServer."""

    def __init__(self, server, hostname, port, timeout=None, start_tls=None,
                 validate_certs=True, **kwargs):
        self.server = server
        self.hostname = hostname
        self.port = port
        self.timeout = timeout
        self.start_tls = start_tls
        self.validate_certs = validate_certs
        self.is_connected = False
        self.closed = False
        self.commands = []
        self.tls_hostname = None
        self.login_credentials = None
        self.mail_from = None
        self.mail_options = []
        self.recipients = []
        self.payload = None

    async def _run(self, name):
        self.commands.append(name)
        hang = self.server.hang.get(name)
        if hang:
            await hang()
        error = self.server.failures.get(name)
        if error is not None:
            raise error

    async def connect(self):
        await self._run("connect")
        self.is_connected = True

    async def ehlo(self):
        await self._run("ehlo")

    async def helo(self):
        await self._run("helo")

    def supports_extension(self, extension):
        return extension.lower() in self.server.extensions

    async def starttls(self, server_hostname=None, validate_certs=None):
        await self._run("starttls")
        self.tls_hostname = server_hostname

    async def login(self, username, password):
        await self._run("login")
        self.login_credentials = (username, password)

    async def mail(self, sender, options=None, encoding="ascii"):
        await self._run("mail")
        # aiosmtplib encodes addresses with the given codec
        sender.encode(encoding)
        self.mail_options = options or []
        self.mail_from = sender

    async def rcpt(self, recipient, options=None, encoding="ascii"):
        await self._run("rcpt")
        recipient.encode(encoding)
        error = self.server.rejected_recipients.get(recipient)
        if error is not None:
            raise error
        self.recipients.append(recipient)

    async def data(self, message):
        await self._run("data")
        self.payload = message

    async def quit(self):
        await self._run("quit")
        self.is_connected = False

    def close(self):
        self.closed = True
        self.is_connected = False


class DummyServer:
    """
    Behaviour shared by every DummySMTP created during a test.

    Attributes:
        extensions: ESMTP extensions advertised after EHLO.
        failures: command name -> exception raised by that command.
        rejected_recipients: address -> exception raised by RCPT TO.
        hang: command name -> coroutine function awaited before the command.
        sessions: every DummySMTP created, in order.
    """

    def __init__(self):
        self.extensions = {"starttls", "auth"}
        self.failures = {}
        self.rejected_recipients = {}
        self.hang = {}
        self.sessions = []

    def factory(self, **kwargs):
        smtp = DummySMTP(self, **kwargs)
        self.sessions.append(smtp)
        return smtp

    @property
    def session(self):
        """The most recent session."""
        return self.sessions[-1]


@pytest.fixture
def smtp_server(monkeypatch):
    """Replace aiosmtplib.SMTP with DummySMTP for the duration of a test."""
    server = DummyServer()
    monkeypatch.setattr("mailsubmit.smtp.client.aiosmtplib.SMTP", server.factory)
    return server


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def writer():
    """A MessageWriter with a fixed boundary and clock."""
    return MessageWriter(boundary_factory=lambda: BOUNDARY, clock=lambda: FIXED_TIME)


@pytest.fixture
def sample_message():
    """The simple text message used throughout the suite."""
    return Message(
        sender="a@x.com",
        to="b@x.com",
        subject="Hi",
        body_text="hello",
        id="<test123@x.com>",
    )


@pytest.fixture
def sample_files():
    """Two inline files and two attachments."""
    inlines = [
        File("logo.png", "image/png", "aW1hZ2Ux"),
        File("banner.gif", "image/gif", "aW1hZ2Uy"),
    ]
    attachments = [
        File("report.pdf", "application/pdf", "cmVwb3J0"),
        File("notes.txt", "text/plain", "bm90ZXM="),
    ]
    return inlines, attachments


@pytest.fixture
def sender_config():
    """Anonymous submission to smtp.example.com."""
    return SenderConfig(host="smtp.example.com", port=587, headers={"X-Mailer": "mailsubmit"})


@pytest.fixture
def auth_sender_config():
    """Authenticated submission to smtp.example.com."""
    return SenderConfig(
        host="smtp.example.com",
        port=587,
        credential=Credential("a@x.com", password="secret"),
    )
