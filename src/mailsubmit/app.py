# =============================================================================
# mailsubmit Command Line
# =============================================================================
# Command-line front end for composing and sending one message:
#
#   mailsubmit send --to bob@example.com --subject Hi --text "hello" \
#       --attach report.pdf
#
# The SMTP server, login and extra headers come from the config file
# (see mailsubmit.config). Exit codes:
#   0  message delivered
#   1  delivery attempt failed
#   2  bad arguments, unreadable files or invalid config
# =============================================================================

import argparse
import logging
import sys
from pathlib import Path

from mailsubmit import __app_name__, __version__
from mailsubmit.config import Config, ConfigError, print_paths
from mailsubmit.core import File, Message
from mailsubmit.smtp import SubmissionClient

logger = logging.getLogger(__name__)


# =============================================================================
# CLI Entry Point
# =============================================================================

def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments namespace.
    """
    parser = argparse.ArgumentParser(
        prog=__app_name__,
        description="mailsubmit: compose a MIME message and submit it over SMTP",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--paths",
        action="store_true",
        help="Print configuration paths and exit",
    )

    parser.add_argument(
        "--config",
        type=Path,
        help="Path to config file (default: XDG config location)",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode (verbose logging)",
    )

    subparsers = parser.add_subparsers(dest="command")

    send = subparsers.add_parser("send", help="Send one message")
    send.add_argument("--from", dest="sender", help="From address (default: from config)")
    send.add_argument("--to", required=True, help="Recipients, comma separated")
    send.add_argument("--cc", default="", help="CC recipients, comma separated")
    send.add_argument("--subject", default="", help="Subject line")
    send.add_argument("--id", dest="message_id", default="", help="Message-ID header")

    body = send.add_mutually_exclusive_group()
    body.add_argument("--text", default="", help="Plain text body")
    body.add_argument("--html", default="", help="HTML body")

    send.add_argument(
        "--inline",
        type=Path,
        action="append",
        default=[],
        help="File to include inline (repeatable)",
    )
    send.add_argument(
        "--attach",
        type=Path,
        action="append",
        default=[],
        help="File to attach (repeatable)",
    )
    send.add_argument(
        "--deadline",
        type=float,
        help="Give up on the whole attempt after this many seconds",
    )

    return parser.parse_args(argv)


def setup_logging(debug: bool) -> None:
    """Configure root logging for command-line use."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_message(args: argparse.Namespace, config: Config) -> Message:
    """
    Build a Message from the `send` arguments.

    Raises:
        OSError: If an inline or attached file can't be read.
    """
    message = Message(
        sender=args.sender or config.default_from,
        to=args.to,
        cc=args.cc,
        subject=args.subject,
        body_text=args.text,
        body_html=args.html,
        inlines=[File.from_path(p) for p in args.inline],
        attachments=[File.from_path(p) for p in args.attach],
        id=args.message_id,
    )
    for f in message.files:
        logger.debug(f"Read {f.name} ({f.content_type}, {f.size} bytes)")
    return message


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for mailsubmit.

    This function:
        1. Parses command-line arguments
        2. Handles special commands (--paths, --version)
        3. Loads configuration
        4. Builds and sends the message

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    args = parse_args(argv)
    setup_logging(args.debug)

    # Handle --paths flag
    if args.paths:
        print_paths()
        return 0

    if args.command != "send":
        print(f"Nothing to do. Try: {__app_name__} send --help", file=sys.stderr)
        return 2

    # Load configuration
    try:
        config = Config.load(args.config)
    except ConfigError as e:
        print(f"Config error: {e}", file=sys.stderr)
        return 2

    try:
        message = build_message(args, config)
    except OSError as e:
        print(f"Cannot read file: {e}", file=sys.stderr)
        return 2

    if not message.sender:
        print("No From address: pass --from or set default_from", file=sys.stderr)
        return 2

    if not message.has_body:
        logger.warning("Sending a message with no body")

    client = SubmissionClient(config.sender_config())
    result = client.send_blocking(message, deadline=args.deadline)

    if not result.ok:
        print(f"Send failed during {result.error.state.label}: {result.error}", file=sys.stderr)
        return 1

    print(f"Sent {result.message_id}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
