# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Batch orchestration for a bulk send run.

The run goes through fixed phases:

1. Load content, recipients and configuration (any failure is fatal).
2. Load attachments (fatal on failure).
3. Build one message per recipient; bad addresses become BuildError values.
4. Print a summary and the list of build errors.
5. In debug mode, dump the resolved state and stop.
6. Otherwise show the content and ask for confirmation.
7. Send all prepared messages with a bounded pool of asyncio workers.
8. Report success or the first failure.

Send phase failure policy:
    Dispatch is fail-fast. After the first transport failure no worker
    starts a new send. Sends already in flight run to completion, so the
    final state is "sent up to the in-flight set", and the messages that
    were never started are reported as skipped.

Example:
    Running a batch with an injected transport::

        orchestrator = BatchOrchestrator(transport=SmtpTransport())
        result = orchestrator.run(
            text_file="news.html",
            recipients_file="recipients.txt",
            config_file="mailsend.toml",
        )
        print(result.outcome)
"""

from __future__ import annotations

import asyncio
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Sequence

import click
from rich.console import Console
from rich.markup import escape
from rich.pretty import Pretty
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn, TimeElapsedColumn

from mailsend.attachments import load_attachments
from mailsend.builder import build_all
from mailsend.config_loader import load_config
from mailsend.content import parse_content, parse_recipients
from mailsend.errors import TransportSendError
from mailsend.logger import get_logger
from mailsend.models import (
    Attachment,
    BatchOutcome,
    BatchResult,
    BuildError,
    MailAddress,
    MailConfiguration,
    MailContent,
    PreparedMessage,
    SendReport,
)
from mailsend.transport import MailTransport, SmtpTransport

ConfirmationGate = Callable[[], bool]

logger = get_logger("Orchestrator")


def default_workers() -> int:
    """Worker pool size matching the host's available parallelism."""
    return os.cpu_count() or 1


def prompt_confirmation() -> bool:
    """Ask ``Proceed? [y/n]`` on the terminal until the answer is y or n."""
    while True:
        answer = click.prompt("Proceed? [y/n]", default="", show_default=False)
        if answer in ("y", "Y"):
            return True
        if answer in ("n", "N"):
            return False
        click.echo("Unexpected input.")


async def send_all(
    messages: Sequence[PreparedMessage],
    transport: MailTransport,
    *,
    workers: int | None = None,
    on_progress: Callable[[], None] | None = None,
) -> SendReport:
    """Send ``messages`` concurrently and stop dispatching at the first failure.

    Args:
        messages: Prepared messages, each sent exactly once at most.
        transport: Transport used for every send.
        workers: Pool size; defaults to the host CPU count.
        on_progress: Called once after every attempted send.

    Returns:
        A SendReport with sent/skipped counts and the first failure, if any.
    """
    report = SendReport(total=len(messages))
    if not messages:
        return report

    queue: asyncio.Queue[PreparedMessage] = asyncio.Queue()
    for prepared in messages:
        queue.put_nowait(prepared)
    stop = asyncio.Event()

    async def worker() -> None:
        while not stop.is_set():
            try:
                prepared = queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            try:
                await transport.send(prepared)
            except Exception as exc:
                if not isinstance(exc, TransportSendError):
                    exc = TransportSendError(prepared.recipient, str(exc) or exc.__class__.__name__)
                # First failure wins; later ones are only logged.
                if report.failure is None:
                    report.failure = exc
                else:
                    logger.warning("Additional send failure: %s", exc)
                stop.set()
            else:
                report.sent += 1
            finally:
                if on_progress is not None:
                    on_progress()

    pool_size = max(1, min(workers or default_workers(), len(messages)))
    logger.debug("Sending %d message(s) with %d worker(s)", len(messages), pool_size)
    await asyncio.gather(*(worker() for _ in range(pool_size)))
    report.skipped = queue.qsize()
    return report


@dataclass(frozen=True)
class BatchInputs:
    """Read-only inputs shared by every per-recipient build."""

    content: MailContent
    recipients: list[MailAddress]
    config: MailConfiguration
    attachments: list[Attachment]


class BatchOrchestrator:
    """Drive a bulk send run from input files to a single verdict.

    Attributes:
        transport: Mail transport used in the send phase.
        confirm: Confirmation gate, called once before sending.
        console: Console for operator output.
        err_console: Console for diagnostics.
        workers: Send worker pool size (None = CPU count).
        show_progress: Whether to render the progress bar.
    """

    def __init__(
        self,
        transport: MailTransport | None = None,
        confirm: ConfirmationGate | None = None,
        console: Console | None = None,
        err_console: Console | None = None,
        workers: int | None = None,
        show_progress: bool = True,
    ):
        self.transport = transport if transport is not None else SmtpTransport()
        self.confirm = confirm or prompt_confirmation
        self.console = console or Console()
        self.err_console = err_console or Console(stderr=True)
        self.workers = workers
        self.show_progress = show_progress

    def load_inputs(
        self,
        text_file: str | Path,
        recipients_file: str | Path,
        config_file: str | Path,
        attachment_paths: Iterable[str | Path] | None = None,
    ) -> BatchInputs:
        """Load every prerequisite; the first failure propagates."""
        content = parse_content(text_file)
        recipients = parse_recipients(recipients_file)
        config = load_config(config_file)
        attachments = load_attachments(attachment_paths)
        return BatchInputs(content=content, recipients=recipients, config=config, attachments=attachments)

    def run(
        self,
        text_file: str | Path,
        recipients_file: str | Path,
        config_file: str | Path,
        attachment_paths: Iterable[str | Path] | None = None,
        debug: bool = False,
    ) -> BatchResult:
        """Execute the whole batch.

        Raises:
            FatalConfigError: If content, recipients or config are unusable.
            AttachmentError: If an attachment cannot be loaded.
        """
        inputs = self.load_inputs(text_file, recipients_file, config_file, attachment_paths)
        messages, errors = build_all(inputs.recipients, inputs.content, inputs.config, inputs.attachments)
        result = BatchResult(
            outcome=BatchOutcome.SENT,
            recipients=inputs.recipients,
            messages=messages,
            errors=errors,
        )
        self.report_build(len(inputs.recipients), messages, errors)

        if debug:
            self.dump_state(inputs)
            result.outcome = BatchOutcome.DRY_RUN
            return result

        if not messages:
            self.console.print("[yellow]No valid recipients, nothing to send.[/yellow]")
            result.report = SendReport()
            return result

        self.console.print("Will now send the following email to the successfully parsed addresses:\n")
        self.console.print(escape(str(inputs.content)))
        if inputs.attachments:
            names = ", ".join(escape(str(att)) for att in inputs.attachments)
            self.console.print(f"\nAttachments: {names}")
        self.console.print()

        if not self.confirm():
            self.console.print("Sending cancelled.")
            result.outcome = BatchOutcome.CANCELLED
            return result

        report = self.dispatch(messages)
        result.report = report
        if report.ok:
            self.console.print(f"[green]✓[/green] Successfully sent all emails ({report.sent})")
        else:
            result.outcome = BatchOutcome.FAILED
            self.err_console.print(
                f"[red]Failure occurred during sending:[/red] {escape(str(report.failure))}\n"
                "Some mails may have been sent and others not. "
                f"(sent: {report.sent}, failed: {report.failed}, skipped: {report.skipped})"
            )
        return result

    def report_build(
        self,
        total: int,
        messages: Sequence[PreparedMessage],
        errors: Sequence[BuildError],
    ) -> None:
        self.console.print(
            f"Found {total} email addresses. {len(messages)} parsed successfully, "
            f"{len(errors)} error(s) occurred."
        )
        if errors:
            self.err_console.print("Errors:")
            for error in errors:
                self.err_console.print(f"\t{escape(str(error))}")
            self.err_console.print()

    def dump_state(self, inputs: BatchInputs) -> None:
        """Print the resolved run state for a dry run."""
        self.console.print("[bold]Recipients:[/bold]")
        self.console.print(Pretty(inputs.recipients))
        self.console.print("[bold]Config:[/bold]")
        self.console.print(Pretty(inputs.config.redacted()))
        self.console.print("[bold]Attachments:[/bold]")
        self.console.print(Pretty([f"{att.filename} ({len(att.content)} bytes)" for att in inputs.attachments]))
        self.console.print("[bold]Text:[/bold]")
        self.console.print(escape(str(inputs.content)))

    def dispatch(self, messages: Sequence[PreparedMessage]) -> SendReport:
        """Run the send phase on a fresh event loop with a progress bar."""
        with Progress(
            TextColumn("[bold]Sending"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=self.console,
            disable=not self.show_progress,
        ) as progress:
            task_id = progress.add_task("send", total=len(messages))
            report = asyncio.run(
                send_all(
                    messages,
                    self.transport,
                    workers=self.workers,
                    on_progress=lambda: progress.advance(task_id),
                )
            )
        logger.info("Send phase done: %d sent, %d skipped, ok=%s", report.sent, report.skipped, report.ok)
        return report
