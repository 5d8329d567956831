# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Per-recipient message construction.

``build_message`` turns one raw recipient line into either a PreparedMessage
or a BuildError. It never raises for a bad address and never touches the
network, so the batch can partition all recipients up front and report every
bad line at once.

Address checks run in a fixed order (sender, reply-to, recipient) and the
first failing one names itself in the error, e.g.
``Invalid email address: not-an-address``.
"""

from __future__ import annotations

from email.errors import HeaderParseError
from email.headerregistry import Address
from email.message import EmailMessage
from typing import Iterable, Sequence

from pydantic import NameEmail, TypeAdapter, ValidationError

from mailsend.errors import AddressBuildError
from mailsend.logger import get_logger
from mailsend.models import (
    Attachment,
    BuildError,
    MailAddress,
    MailConfiguration,
    MailContent,
    PreparedMessage,
    SmtpSettings,
)

ATTACHMENT_MAINTYPE = "application"
ATTACHMENT_SUBTYPE = "octet-stream"

_email_adapter = TypeAdapter(NameEmail)

logger = get_logger("Builder")


def validate_address(address: str) -> Address:
    """Validate one address and return it as a header Address.

    Both ``user@example.com`` and ``Display Name <user@example.com>`` are
    accepted; the display name is kept for the header.

    Raises:
        AddressBuildError: Naming ``address`` and the validator's reason.
    """
    try:
        parsed = _email_adapter.validate_python(address)
    except ValidationError as exc:
        errors = exc.errors()
        reason = errors[0]["msg"] if errors else None
        raise AddressBuildError(address, reason) from exc
    # NameEmail falls back to the local part when no display name is given.
    display_name = parsed.name if "<" in address else ""
    try:
        return Address(display_name=display_name, addr_spec=parsed.email)
    except (ValueError, HeaderParseError) as exc:
        raise AddressBuildError(address, str(exc)) from exc


def create_mail(
    recipient: MailAddress,
    content: MailContent,
    config: MailConfiguration,
    attachments: Sequence[Attachment],
) -> EmailMessage:
    """Assemble the multipart/mixed message for one recipient.

    Raises:
        AddressBuildError: If the sender, reply-to or recipient is invalid.
        ValueError: If a header value cannot be encoded.
    """
    sender = validate_address(config.sender)
    reply_to = validate_address(config.reply_to)
    to = validate_address(recipient)

    msg = EmailMessage()
    msg["Subject"] = content.subject
    msg["From"] = sender
    msg["Reply-To"] = reply_to
    msg["To"] = to
    msg.set_content(content.body, subtype=content.content_type.subtype, charset="utf-8")
    # Always multipart, body first, attachments after it in load order.
    msg.make_mixed()
    for att in attachments:
        msg.add_attachment(
            att.content,
            maintype=ATTACHMENT_MAINTYPE,
            subtype=ATTACHMENT_SUBTYPE,
            filename=att.filename,
        )
    return msg


def build_message(
    recipient: MailAddress,
    content: MailContent,
    config: MailConfiguration,
    attachments: Sequence[Attachment],
) -> PreparedMessage | BuildError:
    """Build a send-ready message for ``recipient`` or describe why it failed."""
    try:
        msg = create_mail(recipient, content, config, attachments)
    except AddressBuildError as exc:
        return BuildError(recipient=recipient, reason=exc.message)
    except (ValueError, TypeError) as exc:
        return BuildError(recipient=recipient, reason=f"Could not encode message: {exc}")
    return PreparedMessage(recipient=recipient, message=msg, smtp=SmtpSettings.from_config(config))


def build_all(
    recipients: Iterable[MailAddress],
    content: MailContent,
    config: MailConfiguration,
    attachments: Sequence[Attachment],
) -> tuple[list[PreparedMessage], list[BuildError]]:
    """Build every recipient independently and partition the outcomes.

    Both returned lists keep the recipient input order.
    """
    messages: list[PreparedMessage] = []
    errors: list[BuildError] = []
    for recipient in recipients:
        result = build_message(recipient, content, config, attachments)
        if isinstance(result, BuildError):
            errors.append(result)
        else:
            messages.append(result)
    logger.info("Built %d message(s), %d error(s)", len(messages), len(errors))
    return messages, errors
