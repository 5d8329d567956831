"""Shared fixtures for mailsend tests."""

import pytest

from mailsend.errors import TransportSendError
from mailsend.models import ContentType, MailConfiguration, MailContent

CONFIG_TOML = """\
username = "mailer@example.com"
password = "secret"
sender = "news@example.com"
reply_to = "office@example.com"
mailserver = "smtp.example.com"
"""


class StubTransport:
    """Transport double recording every send; fails for chosen recipients."""

    def __init__(self, fail_for=()):
        self.fail_for = set(fail_for)
        self.sent = []
        self.calls = 0

    async def send(self, prepared):
        self.calls += 1
        if prepared.recipient in self.fail_for:
            raise TransportSendError(prepared.recipient, "550 mailbox unavailable", 550)
        self.sent.append(prepared.recipient)


@pytest.fixture
def config():
    return MailConfiguration(
        username="mailer@example.com",
        password="secret",
        sender="news@example.com",
        reply_to="office@example.com",
        mailserver="smtp.example.com",
    )


@pytest.fixture
def content():
    return MailContent(subject="Hi there", body="Line one\nLine two", content_type=ContentType.PLAIN)


@pytest.fixture
def stub_transport():
    return StubTransport()


@pytest.fixture
def inputs(tmp_path):
    """Write a valid config, content file and recipient file; return their paths."""
    config_file = tmp_path / "mailsend.toml"
    config_file.write_text(CONFIG_TOML)
    text_file = tmp_path / "notice.txt"
    text_file.write_text("Hi there\n---\nLine one\nLine two\n")
    recipients_file = tmp_path / "recipients.txt"
    recipients_file.write_text("a@example.com\nnot-an-address\nb@example.com\n")
    return {
        "config_file": config_file,
        "text_file": text_file,
        "recipients_file": recipients_file,
    }
