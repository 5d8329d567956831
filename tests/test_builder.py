"""Tests for per-recipient message building."""

import random

import pytest

from mailsend.builder import build_all, build_message, validate_address
from mailsend.errors import AddressBuildError
from mailsend.models import Attachment, BuildError, ContentType, MailContent, PreparedMessage


@pytest.fixture
def attachments():
    return [
        Attachment(filename="report.pdf", content=b"%PDF-1.4 data"),
        Attachment(filename="photo.jpg", content=b"\xff\xd8\xff"),
    ]


class TestBuildMessage:
    def test_headers_and_body(self, content, config):
        result = build_message("a@example.com", content, config, [])

        assert isinstance(result, PreparedMessage)
        msg = result.message
        assert msg["To"] == "a@example.com"
        assert msg["From"] == "news@example.com"
        assert msg["Reply-To"] == "office@example.com"
        assert msg["Subject"] == "Hi there"
        assert msg.get_content_type() == "multipart/mixed"
        body = msg.get_body(preferencelist=("plain",))
        assert body.get_content().rstrip("\n") == "Line one\nLine two"

    def test_display_names_kept(self, content, config):
        named = config.model_copy(
            update={"sender": "Club News <news@example.com>", "reply_to": "Office <office@example.com>"}
        )

        result = build_message("Jane Doe <jane@example.com>", content, named, [])

        assert isinstance(result, PreparedMessage)
        assert result.recipient == "Jane Doe <jane@example.com>"
        assert result.message["From"] == "Club News <news@example.com>"
        assert result.message["Reply-To"] == "Office <office@example.com>"
        assert result.message["To"] == "Jane Doe <jane@example.com>"
        assert result.message["To"].addresses[0].addr_spec == "jane@example.com"

    def test_html_body(self, config):
        html = MailContent(subject="News", body="<p>Hello</p>", content_type=ContentType.HTML)

        result = build_message("a@example.com", html, config, [])

        parts = list(result.message.iter_parts())
        assert parts[0].get_content_type() == "text/html"
        assert "<p>Hello</p>" in parts[0].get_content()

    def test_attachment_parts_follow_body_in_order(self, content, config, attachments):
        result = build_message("a@example.com", content, config, attachments)

        parts = list(result.message.iter_parts())
        assert [p.get_content_type() for p in parts] == [
            "text/plain",
            "application/octet-stream",
            "application/octet-stream",
        ]
        assert [p.get_filename() for p in parts[1:]] == ["report.pdf", "photo.jpg"]
        assert parts[1].get_content() == b"%PDF-1.4 data"
        assert parts[2].is_attachment()

    def test_smtp_settings_bound_from_config(self, content, config):
        result = build_message("a@example.com", content, config, [])

        assert result.smtp.host == "smtp.example.com"
        assert result.smtp.port == 465
        assert result.smtp.username == "mailer@example.com"
        assert result.smtp.password == "secret"
        assert result.smtp.implicit_tls is True
        assert result.smtp.start_tls is False

    def test_invalid_recipient(self, content, config):
        result = build_message("not-an-address", content, config, [])

        assert isinstance(result, BuildError)
        assert result.recipient == "not-an-address"
        assert "Invalid email address: not-an-address" in result.reason

    def test_blank_recipient_is_an_error(self, content, config):
        result = build_message("", content, config, [])

        assert isinstance(result, BuildError)
        assert result.recipient == ""

    def test_invalid_sender_reported_first(self, content, config):
        bad = config.model_copy(update={"sender": "broken-sender", "reply_to": "also broken"})

        result = build_message("also-not-valid", content, bad, [])

        assert isinstance(result, BuildError)
        assert "broken-sender" in result.reason
        assert "also broken" not in result.reason

    def test_invalid_reply_to_before_recipient(self, content, config):
        bad = config.model_copy(update={"reply_to": "nobody"})

        result = build_message("also-not-valid", content, bad, [])

        assert "Invalid email address: nobody" in result.reason

    def test_subject_with_newline_is_build_error(self, config):
        broken = MailContent(subject="Hi\nBcc: x@example.com", body="", content_type=ContentType.PLAIN)

        result = build_message("a@example.com", broken, config, [])

        assert isinstance(result, BuildError)
        assert result.recipient == "a@example.com"


class TestBuildAll:
    def test_partition_example(self, content, config):
        messages, errors = build_all(
            ["a@example.com", "not-an-address", "b@example.com"], content, config, []
        )

        assert [m.recipient for m in messages] == ["a@example.com", "b@example.com"]
        assert len(errors) == 1
        assert errors[0].recipient == "not-an-address"

    def test_counts_are_order_independent(self, content, config):
        valid = [f"user{i}@example.com" for i in range(8)]
        invalid = ["", "no-at-sign", "two@@example.com", "spaces in@example.com"]
        recipients = valid + invalid

        for seed in range(5):
            shuffled = recipients[:]
            random.Random(seed).shuffle(shuffled)
            messages, errors = build_all(shuffled, content, config, [])

            assert len(messages) == len(valid)
            assert len(errors) == len(invalid)
            assert [m.recipient for m in messages] == [r for r in shuffled if r in valid]
            assert [e.recipient for e in errors] == [r for r in shuffled if r in invalid]

    def test_building_twice_is_idempotent(self, content, config, attachments):
        recipients = ["a@example.com", "b@example.com"]

        first, _ = build_all(recipients, content, config, attachments)
        second, _ = build_all(recipients, content, config, attachments)

        for one, two in zip(first, second, strict=True):
            assert one.recipient == two.recipient
            assert one.smtp == two.smtp
            for header in ("From", "Reply-To", "To", "Subject"):
                assert one.message[header] == two.message[header]
            assert [p.get_content() for p in one.message.iter_parts()] == [
                p.get_content() for p in two.message.iter_parts()
            ]
            assert one.message is not two.message

    def test_shared_inputs_not_mutated(self, content, config, attachments):
        before = (content.model_dump(), config.model_dump(), [a.model_dump() for a in attachments])

        build_all(["a@example.com", "bad"], content, config, attachments)

        assert before == (content.model_dump(), config.model_dump(), [a.model_dump() for a in attachments])


def test_validate_address_raises_with_address():
    with pytest.raises(AddressBuildError) as exc_info:
        validate_address("nope")

    assert exc_info.value.address == "nope"
    assert exc_info.value.code == "invalid_address"


def test_validate_address_accepts_plain_address():
    address = validate_address("someone@example.org")

    assert address.display_name == ""
    assert address.addr_spec == "someone@example.org"
    assert str(address) == "someone@example.org"


def test_validate_address_keeps_display_name():
    address = validate_address("Club News <news@example.com>")

    assert address.display_name == "Club News"
    assert address.addr_spec == "news@example.com"
