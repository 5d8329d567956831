"""Command-line interface for mailsend.

Usage:
    mailsend -r recipients.txt -t newsletter.html
    mailsend -c mailsend.toml -r recipients.txt -t notice.txt --attachments a.pdf --attachments b.pdf
    mailsend -r recipients.txt -t notice.txt --debug

Without ``--config-file`` the configuration is read from ``mailsend.toml``
next to the running executable (or from ``$MAILSEND_CONFIG``).

Exit codes:
    0  all mails sent, dry run, or sending cancelled
    1  fatal input error or a failed send phase
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape

from mailsend.config_loader import default_config_path
from mailsend.core import BatchOrchestrator
from mailsend.errors import MailSendError
from mailsend.logger import configure_logging, get_logger

console = Console()
err_console = Console(stderr=True)

logger = get_logger("CLI")


def print_error(message: str) -> None:
    """Print an error message to stderr."""
    err_console.print(f"[red]Error:[/red] {escape(message)}", highlight=False, soft_wrap=True)


@click.command(name="mailsend")
@click.version_option(package_name="mailsend")
@click.option(
    "--config-file", "-c",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar="MAILSEND_CONFIG",
    help="Path to the TOML configuration file (default: mailsend.toml next to the executable).",
)
@click.option(
    "--recipients-file", "-r", required=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help="File containing email addresses (one address on each line).",
)
@click.option(
    "--text-file", "-t", required=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Content file: subject line, blank line or ---, body (.txt or .html).",
)
@click.option(
    "--attachments", "attachments", multiple=True,
    type=click.Path(path_type=Path),
    help="File to attach. Repeat the option for several files.",
)
@click.option("--debug", is_flag=True, help="Dry run: print the resolved state, do not send mail.")
@click.option(
    "--workers", "-w", type=click.IntRange(min=1), default=None,
    help="Number of concurrent senders (default: number of CPUs).",
)
@click.option(
    "--log-level", envvar="MAILSEND_LOG_LEVEL", default="WARNING", show_default=True,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level for diagnostics.",
)
def main(
    config_file: Optional[Path],
    recipients_file: Path,
    text_file: Path,
    attachments: tuple[Path, ...],
    debug: bool,
    workers: Optional[int],
    log_level: str,
) -> None:
    """Send one personalized email per recipient over SMTP."""
    configure_logging(log_level)
    orchestrator = BatchOrchestrator(console=console, err_console=err_console, workers=workers)
    try:
        result = orchestrator.run(
            text_file=text_file,
            recipients_file=recipients_file,
            config_file=config_file or default_config_path(),
            attachment_paths=list(attachments),
            debug=debug,
        )
    except MailSendError as exc:
        logger.debug("Fatal error (%s)", exc.code)
        print_error(str(exc))
        sys.exit(1)

    if not result.succeeded:
        sys.exit(1)


if __name__ == "__main__":
    main()
