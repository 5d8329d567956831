# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Configuration loader for SMTP credentials and addressing.

The configuration is a TOML file, by default ``mailsend.toml`` placed next to
the running executable. Recognized keys::

    username = "mailer@example.com"
    password = "secret"
    sender = "news@example.com"
    reply_to = "office@example.com"
    mailserver = "smtp.example.com"

    # optional
    port = 465
    use_tls = true
    timeout = 30.0

Example:
    Loading the configuration::

        config = load_config(default_config_path())
        print(config.mailserver)
"""

from __future__ import annotations

import sys
import tomllib
from pathlib import Path

from pydantic import ValidationError

from mailsend.errors import FileNotFound, InvalidConfiguration
from mailsend.logger import get_logger
from mailsend.models import MailConfiguration

CONFIG_FILENAME = "mailsend.toml"

logger = get_logger("ConfigLoader")


def default_config_path() -> Path:
    """Return ``mailsend.toml`` in the directory of the running executable."""
    return Path(sys.argv[0]).resolve().parent / CONFIG_FILENAME


def read_text(path: str | Path) -> str:
    """Read a whole text file, raising FileNotFound on any I/O failure."""
    try:
        return Path(path).read_bytes().decode("utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise FileNotFound(path, exc.__class__.__name__) from exc


def load_config(path: str | Path) -> MailConfiguration:
    """Load and validate the TOML configuration at ``path``.

    Args:
        path: Location of the TOML file.

    Returns:
        A frozen MailConfiguration.

    Raises:
        FileNotFound: If the file cannot be read.
        InvalidConfiguration: If the TOML is malformed or a key is missing,
            of the wrong type. The error names the path, the file content
            and the offending fields. Unknown keys are ignored with a warning.
    """
    content = read_text(path)
    try:
        data = tomllib.loads(content)
    except tomllib.TOMLDecodeError as exc:
        raise InvalidConfiguration(path, content, str(exc)) from exc

    try:
        config = MailConfiguration.model_validate(data)
    except ValidationError as exc:
        fields = [".".join(str(part) for part in err["loc"]) or "<root>" for err in exc.errors()]
        raise InvalidConfiguration(path, content, "invalid configuration", fields) from exc

    unknown = sorted(set(data) - set(MailConfiguration.model_fields))
    if unknown:
        logger.warning("Ignoring unknown configuration key(s) in %s: %s", path, ", ".join(unknown))

    logger.debug("Loaded configuration from %s (server %s:%s)", path, config.mailserver, config.port)
    return config
