# =============================================================================
# SMTP Submission Client
# =============================================================================
# Delivers rendered messages to an SMTP server, one attempt per call.
#
# Each attempt runs these steps in order on its own connection:
#
#   1. connect               -> SubmissionConnectionError
#   2. EHLO + STARTTLS       -> SecurityUpgradeError   (only if advertised)
#   3. AUTH                  -> AuthenticationError    (only with a credential)
#   4. MAIL FROM / RCPT TO   -> AddressParseError, EnvelopeRejectedError
#   5. DATA                  -> TransferError
#
# The first failing step ends the attempt. Whatever happens, the session is
# closed with QUIT on the way out. Nothing is retried here; callers get a
# SendResult and decide what to do with failures.
#
# Uses aiosmtplib for async operations.
# =============================================================================

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

import aiosmtplib
import keyring
from keyring.errors import KeyringError

from mailsubmit.core import Message, SenderConfig
from mailsubmit.mime import MessageWriter, RenderedMessage
from mailsubmit.smtp.addresses import parse_address, parse_address_list
from mailsubmit.smtp.errors import (
    AuthenticationError,
    DeadlineExceededError,
    EnvelopeRejectedError,
    SecurityUpgradeError,
    SubmissionConnectionError,
    SubmissionError,
    TransferError,
)
from mailsubmit.smtp.states import STEP_ORDER, SubmissionState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SendResult:
    """
    Outcome of one delivery attempt.

    Attributes:
        state: DELIVERED or FAILED.
        reached: The last step that completed, or None if connecting failed.
        message_id: Message-ID written to the message headers.
        error: The error that ended a failed attempt.

    Usage:
        >>> result = await client.send(message)
        >>> if not result.ok:
        ...     print(f"Failed during {result.error.state.label}: {result.error}")
    """
    state: SubmissionState
    reached: SubmissionState | None = None
    message_id: str = ""
    error: SubmissionError | None = None

    def __post_init__(self) -> None:
        if not self.state.is_terminal:
            raise ValueError(f"SendResult needs a terminal state, got {self.state.label}")

    @property
    def ok(self) -> bool:
        """Returns True if the message was delivered."""
        return self.state is SubmissionState.DELIVERED

    def raise_for_error(self) -> None:
        """Raise the error of a failed attempt. Does nothing on success."""
        if self.error is not None:
            raise self.error

    def __bool__(self) -> bool:
        return self.ok


class SubmissionClient:
    """
    Async SMTP client that submits one message per call.

    The client holds only its (read-only) SenderConfig and a stateless
    MessageWriter, so one client can run many sends concurrently; each send
    opens its own connection.

    Usage:
        >>> client = SubmissionClient(SenderConfig("smtp.example.com", 587))
        >>> result = await client.send(message)
        >>> result.raise_for_error()

    Attributes:
        config: Server address, credential and extra headers.
        writer: Renders messages into the DATA payload.
    """

    def __init__(self, config: SenderConfig, writer: MessageWriter | None = None) -> None:
        """
        Initialize the submission client.

        Args:
            config: Sender configuration.
            writer: Message writer. A default MessageWriter if not given.
        """
        self.config = config
        self.writer = writer or MessageWriter()

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    async def send(self, message: Message, *, deadline: float | None = None) -> SendResult:
        """
        Make one delivery attempt.

        Args:
            message: The message to send. It is not modified.
            deadline: Optional limit in seconds for the whole attempt, on top
                      of the per-command timeout from the config.

        Returns:
            A SendResult. Failures are reported in the result, not raised.
        """
        rendered = self.writer.build(message, self.config.headers)
        steps = (
            (SubmissionState.SECURITY_NEGOTIATED, self._negotiate_security),
            (SubmissionState.AUTHENTICATED, self._authenticate),
            (SubmissionState.ENVELOPE_ACCEPTED, self._send_envelope),
            (SubmissionState.DATA_SENT, self._send_data),
        )
        reached: SubmissionState | None = None

        logger.info(f"Sending {rendered.message_id} via {self.config.address}")

        try:
            async with asyncio.timeout(deadline):
                async with self._session() as smtp:
                    reached = SubmissionState.CONNECTED
                    for state, step in steps:
                        await step(smtp, message, rendered)
                        reached = state
        except SubmissionError as e:
            return self._failed(rendered, reached, e)
        except TimeoutError as e:
            error = DeadlineExceededError(
                f"Deadline of {deadline}s exceeded",
                state=_next_state(reached),
            )
            error.__cause__ = e
            return self._failed(rendered, reached, error)

        logger.info(f"Delivered {rendered.message_id}")
        return SendResult(
            state=SubmissionState.DELIVERED,
            reached=reached,
            message_id=rendered.message_id,
        )

    def send_blocking(self, message: Message, *, deadline: float | None = None) -> SendResult:
        """
        Synchronous variant of send(), for callers without an event loop.

        Must not be called from inside a running event loop.
        """
        return asyncio.run(self.send(message, deadline=deadline))

    # -------------------------------------------------------------------------
    # Session
    # -------------------------------------------------------------------------

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[aiosmtplib.SMTP]:
        """
        Open a connection and guarantee it is closed again.

        Raises:
            SubmissionConnectionError: If unable to connect.
        """
        logger.debug(f"Connecting to SMTP {self.config.address}")
        smtp = aiosmtplib.SMTP(
            hostname=self.config.host,
            port=self.config.port,
            timeout=self.config.timeout,
            start_tls=False,                # STARTTLS is negotiated by hand
            validate_certs=self.config.validate_certs,
        )
        try:
            await smtp.connect()
        except (aiosmtplib.SMTPException, OSError) as e:
            raise SubmissionConnectionError(
                f"Failed to connect to SMTP {self.config.address}: {e}"
            ) from e
        logger.debug("SMTP connection established")

        try:
            yield smtp
        finally:
            await self._disconnect(smtp)

    async def _disconnect(self, smtp: aiosmtplib.SMTP) -> None:
        """Send QUIT, dropping the connection if the server doesn't answer."""
        if not smtp.is_connected:
            return
        try:
            logger.debug("Disconnecting from SMTP")
            await smtp.quit()
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.warning(f"Error during SMTP disconnect: {e}")
            smtp.close()

    # -------------------------------------------------------------------------
    # Steps
    # -------------------------------------------------------------------------

    async def _negotiate_security(
        self,
        smtp: aiosmtplib.SMTP,
        message: Message,
        rendered: RenderedMessage,
    ) -> None:
        """
        Upgrade to TLS if the server offers STARTTLS.

        Raises:
            SecurityUpgradeError: If the greeting or the upgrade fails.
        """
        try:
            await smtp.ehlo()
        except aiosmtplib.SMTPHeloError as e:
            # No ESMTP, so no extensions to look for
            logger.debug(f"EHLO refused ({e}), falling back to HELO")
            try:
                await smtp.helo()
            except (aiosmtplib.SMTPException, OSError) as e:
                raise SecurityUpgradeError(f"SMTP greeting failed: {e}") from e
            return
        except (aiosmtplib.SMTPException, OSError) as e:
            raise SecurityUpgradeError(f"SMTP greeting failed: {e}") from e

        if not smtp.supports_extension("starttls"):
            logger.debug("Server does not offer STARTTLS, staying in plaintext")
            return

        logger.debug(f"Starting TLS with {self.config.host}")
        try:
            await smtp.starttls(
                server_hostname=self.config.host,
                validate_certs=self.config.validate_certs,
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            raise SecurityUpgradeError(
                f"STARTTLS with {self.config.host} failed: {e}"
            ) from e

    async def _authenticate(
        self,
        smtp: aiosmtplib.SMTP,
        message: Message,
        rendered: RenderedMessage,
    ) -> None:
        """
        Log in with the configured credential, if there is one.

        Raises:
            AuthenticationError: If no password is available or login fails.
        """
        credential = self.config.credential
        if credential is None:
            logger.debug("No credential configured, submitting anonymously")
            return

        password = credential.password
        if not password and credential.keyring_service:
            try:
                password = keyring.get_password(
                    credential.keyring_service,
                    credential.username,
                )
            except KeyringError as e:
                raise AuthenticationError(
                    f"Keyring lookup failed for {credential.username}: {e}"
                ) from e

        if not password:
            raise AuthenticationError(
                f"No password found for {credential.username}. "
                f"Set it with: keyring set {credential.keyring_service or '<service>'} "
                f"{credential.username}"
            )

        logger.debug(f"Authenticating as {credential.username}")
        try:
            await smtp.login(credential.username, password)
        except (aiosmtplib.SMTPException, OSError) as e:
            raise AuthenticationError(
                f"SMTP authentication failed for {credential.username}: {e}"
            ) from e
        logger.debug("SMTP authentication successful")

    async def _send_envelope(
        self,
        smtp: aiosmtplib.SMTP,
        message: Message,
        rendered: RenderedMessage,
    ) -> None:
        """
        Issue MAIL FROM and one RCPT TO per recipient.

        The first refused recipient ends the attempt.

        Raises:
            AddressParseError: If From or To can't be parsed.
            EnvelopeRejectedError: If the server refuses an address.
        """
        # Non-ASCII addresses need SMTPUTF8, declared on MAIL FROM
        smtputf8 = smtp.supports_extension("smtputf8") and not (
            message.sender.isascii() and message.to.isascii()
        )
        encoding = "utf-8" if smtputf8 else "ascii"

        sender = parse_address(message.sender)
        _check_encodable("sender", sender, encoding)
        try:
            await smtp.mail(
                sender,
                options=["SMTPUTF8"] if smtputf8 else None,
                encoding=encoding,
            )
        except (aiosmtplib.SMTPException, OSError, UnicodeError) as e:
            raise _rejected("sender", sender, e) from e
        logger.debug(f"Envelope sender accepted: {sender}")

        recipients = parse_address_list(message.to)
        for recipient in recipients:
            _check_encodable("recipient", recipient, encoding)
            try:
                await smtp.rcpt(recipient, encoding=encoding)
            except (aiosmtplib.SMTPException, OSError, UnicodeError) as e:
                raise _rejected("recipient", recipient, e) from e
            logger.debug(f"Envelope recipient accepted: {recipient}")

    async def _send_data(
        self,
        smtp: aiosmtplib.SMTP,
        message: Message,
        rendered: RenderedMessage,
    ) -> None:
        """
        Stream the rendered message in the DATA phase.

        aiosmtplib opens the DATA channel, writes the payload and the
        terminating "." line, then waits for the server's verdict.

        Raises:
            TransferError: If the transfer fails or the server rejects it.
        """
        logger.debug(f"Sending {len(rendered.data)} bytes of message data")
        try:
            await smtp.data(rendered.data)
        except (aiosmtplib.SMTPException, OSError) as e:
            raise TransferError(f"Message transfer failed: {e}") from e

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _failed(
        self,
        rendered: RenderedMessage,
        reached: SubmissionState | None,
        error: SubmissionError,
    ) -> SendResult:
        logger.error(
            f"Failed to send {rendered.message_id} during {error.state.label}: {error}"
        )
        return SendResult(
            state=SubmissionState.FAILED,
            reached=reached,
            message_id=rendered.message_id,
            error=error,
        )


def _rejected(role: str, address: str, error: Exception) -> EnvelopeRejectedError:
    """Build an EnvelopeRejectedError from an aiosmtplib error."""
    code = getattr(error, "code", None)
    return EnvelopeRejectedError(
        f"Server rejected {role} {address}: {error}",
        address=address,
        code=code,
    )


def _check_encodable(role: str, address: str, encoding: str) -> None:
    """
    Refuse an address the session can't carry.

    Raises:
        EnvelopeRejectedError: If the address is non-ASCII and the server
                               doesn't offer SMTPUTF8.
    """
    if encoding == "ascii" and not address.isascii():
        raise EnvelopeRejectedError(
            f"Cannot send to {role} {address}: non-ASCII address and "
            f"the server does not support SMTPUTF8",
            address=address,
        )


def _next_state(reached: SubmissionState | None) -> SubmissionState:
    """The step that follows `reached`, i.e. the one in progress."""
    if reached is None:
        return STEP_ORDER[0]
    index = STEP_ORDER.index(reached)
    return STEP_ORDER[min(index + 1, len(STEP_ORDER) - 1)]
