# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""SMTP mail transport.

Each call to ``SmtpTransport.send`` opens its own connection with the
settings bound into the prepared message, authenticates, sends and closes.
No connection is shared between recipients, so concurrent sends need no
locking.

TLS behavior based on port and use_tls flag:
    - Port 465 with use_tls=True: Direct TLS (implicit TLS)
    - Other port with use_tls=True: STARTTLS (upgrade plain to TLS)
    - use_tls=False: Plain SMTP (no encryption)

Example:
    Sending one prepared message::

        transport = SmtpTransport()
        await transport.send(prepared)
"""

from __future__ import annotations

import asyncio
from typing import Protocol

import aiosmtplib

from mailsend.errors import TransportSendError
from mailsend.logger import get_logger
from mailsend.models import PreparedMessage


class MailTransport(Protocol):
    """Anything able to deliver a prepared message."""

    async def send(self, prepared: PreparedMessage) -> None:
        """Deliver ``prepared`` or raise TransportSendError."""
        ...


def _smtp_code(exc: Exception) -> int | None:
    if isinstance(exc, aiosmtplib.SMTPException):
        # aiosmtplib stores the code in different attributes depending on exception type
        code = getattr(exc, "smtp_code", None) or getattr(exc, "code", None)
        if isinstance(code, int):
            return code
    return None


class SmtpTransport:
    """Transport delivering prepared messages through ``aiosmtplib``."""

    def __init__(self) -> None:
        self.logger = get_logger("SmtpTransport")

    async def send(self, prepared: PreparedMessage) -> None:
        smtp = prepared.smtp
        try:
            await aiosmtplib.send(
                prepared.message,
                hostname=smtp.host,
                port=smtp.port,
                username=smtp.username or None,
                password=smtp.password or None,
                use_tls=smtp.implicit_tls,
                start_tls=smtp.start_tls,
                timeout=smtp.timeout,
            )
        except (aiosmtplib.SMTPException, OSError, asyncio.TimeoutError) as exc:
            code = _smtp_code(exc)
            self.logger.warning("Send to %s failed: %s", prepared.recipient, exc)
            raise TransportSendError(prepared.recipient, str(exc) or exc.__class__.__name__, code) from exc
        self.logger.info("Sent mail to %s via %s:%s", prepared.recipient, smtp.host, smtp.port)
