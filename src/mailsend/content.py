# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Parsers for the content file and the recipient file.

Content file layout::

    Subject line
    ---                 (or an empty line)
    First body line
    ...

The file extension selects the body media type: ``.txt`` for plain text,
``.html`` for HTML.

The recipient file holds one raw address candidate per line. Lines are kept
verbatim (no trimming, no de-duplication) so that every bad line surfaces
later as its own build error.
"""

from __future__ import annotations

from pathlib import Path

from mailsend.config_loader import read_text
from mailsend.errors import MalformedContent, UnsupportedContentType
from mailsend.logger import get_logger
from mailsend.models import ContentType, MailAddress, MailContent

SEPARATORS = ("", "---")

EXTENSION_CONTENT_TYPES = {
    ".txt": ContentType.PLAIN,
    ".html": ContentType.HTML,
}

PREMATURE_END = (
    "Premature end of content file. Content file needs to have format: "
    "Subject line, blank line, body."
)
MISSING_SEPARATOR = (
    "Line separator missing. Subject header and body must be separated "
    "by a blank line or three dashes (---)."
)

logger = get_logger("ContentParser")


def split_lines(text: str) -> list[str]:
    """Split on "\\n" only, dropping one trailing "\\r" per line.

    A final line terminator does not start an empty line. Other Unicode line
    boundaries (form feed, U+2028, ...) stay part of the line.
    """
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def content_type_for(path: str | Path) -> ContentType:
    """Map a content file path to its ContentType by extension."""
    try:
        return EXTENSION_CONTENT_TYPES[Path(path).suffix]
    except KeyError:
        raise UnsupportedContentType(path) from None


def parse_content(path: str | Path) -> MailContent:
    """Parse a content file into subject, body and content type.

    Raises:
        FileNotFound: If the file cannot be read.
        UnsupportedContentType: If the extension is not .txt or .html.
        MalformedContent: If the subject or the separator line is missing.
    """
    text = read_text(path)
    content_type = content_type_for(path)

    lines = split_lines(text)
    if len(lines) < 2:
        raise MalformedContent(PREMATURE_END, path, text)
    subject, separator, *body = lines
    if separator not in SEPARATORS:
        raise MalformedContent(MISSING_SEPARATOR, path, text)

    logger.debug("Parsed %s content from %s (%d body lines)", content_type.value, path, len(body))
    return MailContent(subject=subject, body="\n".join(body), content_type=content_type)


def parse_recipients(path: str | Path) -> list[MailAddress]:
    """Read the recipient file into an ordered list of raw lines."""
    recipients = split_lines(read_text(path))
    logger.debug("Read %d recipient line(s) from %s", len(recipients), path)
    return recipients
