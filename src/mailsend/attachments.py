# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Attachment loading from the local filesystem.

Attachments are operator-supplied and few, so any failure here is fatal for
the run. The returned order is the order of the given paths and becomes the
order of the MIME parts after the body.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable

from mailsend.errors import AttachmentNamingError, AttachmentReadError
from mailsend.logger import get_logger
from mailsend.models import Attachment

logger = get_logger("Attachments")


def attachment_filename(path: str | Path) -> str:
    """Return the final path segment of ``path`` as text.

    Raises:
        AttachmentNamingError: If the path has no file name or the name holds
            undecodable bytes (surrogate escapes from the filesystem encoding).
    """
    name = Path(os.fsdecode(path)).name
    if not name or name in (".", ".."):
        raise AttachmentNamingError(path)
    try:
        name.encode("utf-8")
    except UnicodeEncodeError:
        raise AttachmentNamingError(path) from None
    return name


def load_attachments(paths: Iterable[str | Path] | None) -> list[Attachment]:
    """Read every path into an Attachment, preserving input order.

    Args:
        paths: Attachment file paths, or None for no attachments.

    Returns:
        The loaded attachments.

    Raises:
        AttachmentReadError: If a file cannot be read.
        AttachmentNamingError: If a file name cannot be derived from a path.
    """
    attachments: list[Attachment] = []
    for path in paths or ():
        try:
            content = Path(os.fsdecode(path)).read_bytes()
        except OSError as exc:
            raise AttachmentReadError(path, exc.strerror or exc.__class__.__name__) from exc
        attachments.append(Attachment(filename=attachment_filename(path), content=content))
        logger.debug("Loaded attachment %s (%d bytes)", path, len(content))
    return attachments
