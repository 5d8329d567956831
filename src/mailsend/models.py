# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Data models for a bulk send run.

Configuration, content and attachments are loaded once per run and are
frozen: every per-recipient build reads them, none may change them.

Models:
    - MailConfiguration: SMTP credentials and addressing from the TOML file
    - ContentType: closed set of body media types (plain, html)
    - MailContent: subject/body/content type parsed from the content file
    - Attachment: file name and raw bytes of one attachment
    - SmtpSettings: connection parameters bound into every prepared message
    - PreparedMessage: a validated, recipient-specific, send-ready message
    - BuildError: a recipient whose message could not be built
    - SendReport, BatchOutcome, BatchResult: outcome of a run
"""

from __future__ import annotations

from dataclasses import dataclass, field
from email.message import EmailMessage
from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field

from mailsend.errors import TransportSendError

MailAddress = str


class MailConfiguration(BaseModel):
    """Credentials and addressing loaded from ``mailsend.toml``.

    Attributes:
        username: SMTP login.
        password: SMTP password.
        sender: From address, validated at build time.
        reply_to: Reply-To address, validated at build time.
        mailserver: SMTP relay host name.
        port: SMTP port (465 = implicit TLS).
        use_tls: Encrypt the connection: implicit TLS on port 465, STARTTLS
            on any other port. False means plain SMTP.
        timeout: Per-connection timeout in seconds.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    username: str
    password: str
    sender: MailAddress
    reply_to: MailAddress
    mailserver: str
    port: Annotated[int, Field(default=465, ge=1, le=65535, description="SMTP port")]
    use_tls: Annotated[bool, Field(default=True, description="Use TLS (implicit on 465, STARTTLS elsewhere)")]
    timeout: Annotated[float, Field(default=30.0, gt=0, description="Connection timeout in seconds")]

    def redacted(self) -> dict[str, Any]:
        """Return the configuration as a dict with the password masked."""
        data = self.model_dump()
        data["password"] = "********" if self.password else ""
        return data


class ContentType(str, Enum):
    """Media type of the mail body, derived from the content file extension."""

    PLAIN = "plain"
    HTML = "html"

    @property
    def subtype(self) -> str:
        return self.value

    @property
    def media_type(self) -> str:
        return f"text/{self.value}"


class MailContent(BaseModel):
    """Subject and body shared by every message of the run."""

    model_config = ConfigDict(frozen=True)

    subject: str
    body: str
    content_type: ContentType

    def __str__(self) -> str:
        return f"Content Type: {self.content_type.name.capitalize()}\n\n{self.subject}\n---\n{self.body}"


class Attachment(BaseModel):
    """A file attached to every message, in load order."""

    model_config = ConfigDict(frozen=True)

    filename: str
    content: bytes

    def __str__(self) -> str:
        return self.filename


class SmtpSettings(BaseModel):
    """Transport parameters needed to deliver one prepared message."""

    model_config = ConfigDict(frozen=True)

    host: str
    port: int
    username: str
    password: str
    use_tls: bool
    timeout: float

    @classmethod
    def from_config(cls, config: MailConfiguration) -> SmtpSettings:
        return cls(
            host=config.mailserver,
            port=config.port,
            username=config.username,
            password=config.password,
            use_tls=config.use_tls,
            timeout=config.timeout,
        )

    @property
    def implicit_tls(self) -> bool:
        """True for direct TLS (port 465), False for STARTTLS or plain."""
        return self.use_tls and self.port == 465

    @property
    def start_tls(self) -> bool:
        return self.use_tls and self.port != 465


@dataclass(frozen=True)
class PreparedMessage:
    """A send-ready message owned by exactly one recipient."""

    recipient: MailAddress
    message: EmailMessage = field(repr=False, compare=False)
    smtp: SmtpSettings = field(repr=False)

    @property
    def subject(self) -> str:
        return str(self.message["Subject"])


@dataclass(frozen=True)
class BuildError:
    """A recipient paired with the reason its message could not be built."""

    recipient: MailAddress
    reason: str

    def __str__(self) -> str:
        return f"{self.recipient!r}: {self.reason}"


@dataclass
class SendReport:
    """Aggregated result of the send phase.

    Attributes:
        total: Number of prepared messages handed to the send phase.
        sent: Messages the transport accepted.
        skipped: Messages never attempted because a failure stopped dispatch.
        failure: First transport failure, in completion order.
    """

    total: int = 0
    sent: int = 0
    skipped: int = 0
    failure: TransportSendError | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def failed(self) -> int:
        return self.total - self.sent - self.skipped


class BatchOutcome(str, Enum):
    """Terminal state of a run."""

    DRY_RUN = "dry_run"
    CANCELLED = "cancelled"
    SENT = "sent"
    FAILED = "failed"


@dataclass
class BatchResult:
    outcome: BatchOutcome
    recipients: list[MailAddress] = field(default_factory=list)
    messages: list[PreparedMessage] = field(default_factory=list)
    errors: list[BuildError] = field(default_factory=list)
    report: SendReport | None = None

    @property
    def succeeded(self) -> bool:
        return self.outcome is not BatchOutcome.FAILED
