# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Error taxonomy for the bulk mail sender.

Every error carries a short machine-readable ``code`` next to the human
message, so the CLI and the tests can tell failure kinds apart without
matching on text.

Hierarchy::

    MailSendError
    ├── FatalConfigError          (aborts the run before any address work)
    │   ├── FileNotFound
    │   ├── UnsupportedContentType
    │   ├── MalformedContent
    │   └── InvalidConfiguration
    ├── AttachmentError           (fatal, raised while loading attachments)
    │   ├── AttachmentReadError
    │   └── AttachmentNamingError
    ├── AddressBuildError         (per recipient, collected as BuildError)
    └── TransportSendError        (send phase, first one ends the batch)
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence


class MailSendError(RuntimeError):
    """Base class for all errors raised by mailsend."""

    code = "mailsend_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class FatalConfigError(MailSendError):
    """A prerequisite file (config, content, recipients) is unusable."""

    code = "fatal_config"

    def __init__(self, message: str, path: str | Path | None = None):
        super().__init__(message)
        self.path = path


class FileNotFound(FatalConfigError):
    """Raised when an input file cannot be read."""

    code = "file_not_found"

    def __init__(self, path: str | Path, reason: str | None = None):
        message = f"Could not find file at: {str(path)!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message, path)


class UnsupportedContentType(FatalConfigError):
    """Raised when the content file is neither ``.txt`` nor ``.html``."""

    code = "unsupported_content_type"

    def __init__(self, path: str | Path):
        super().__init__(
            f"Unrecognized content file type: {str(path)!r}. Only .txt and .html is allowed.",
            path,
        )


class MalformedContent(FatalConfigError):
    """Raised when the content file does not follow the subject/separator/body layout."""

    code = "malformed_content"

    def __init__(self, reason: str, path: str | Path, content: str):
        super().__init__(
            f"Error while parsing mail content file {str(path)!r}: {reason}\n"
            f"File content:\n{content}",
            path,
        )
        self.reason = reason
        self.content = content


class InvalidConfiguration(FatalConfigError):
    """Raised when the TOML configuration cannot be parsed or validated."""

    code = "invalid_configuration"

    def __init__(
        self,
        path: str | Path,
        content: str,
        reason: str,
        fields: Sequence[str] = (),
    ):
        message = f"Error parsing configuration file at {str(path)!r}: {reason}"
        if fields:
            message += f"\nOffending field(s): {', '.join(fields)}"
        message += f"\nwith content\n{content}"
        super().__init__(message, path)
        self.content = content
        self.reason = reason
        self.fields = tuple(fields)


class AttachmentError(MailSendError):
    """An operator-supplied attachment could not be loaded."""

    code = "attachment_error"

    def __init__(self, message: str, path: str | Path):
        super().__init__(message)
        self.path = path


class AttachmentReadError(AttachmentError):
    code = "attachment_read_error"

    def __init__(self, path: str | Path, reason: str | None = None):
        message = f"Error parsing attachment at {str(path)!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, path)


class AttachmentNamingError(AttachmentError):
    code = "attachment_naming_error"

    def __init__(self, path: str | Path):
        super().__init__(f"Could not parse attachment file name at {str(path)!r}", path)


class AddressBuildError(MailSendError):
    """A single recipient's message could not be built."""

    code = "invalid_address"

    def __init__(self, address: str, reason: str | None = None):
        message = f"Invalid email address: {address}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.address = address


class TransportSendError(MailSendError):
    """The mail transport failed to deliver a prepared message."""

    code = "send_failed"

    def __init__(self, recipient: str, reason: str, smtp_code: int | None = None):
        message = f"Could not send mail to {recipient}: {reason}"
        if smtp_code is not None:
            message = f"{message} (SMTP {smtp_code})"
        super().__init__(message)
        self.recipient = recipient
        self.reason = reason
        self.smtp_code = smtp_code
