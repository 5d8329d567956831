"""Command-line bulk mail sender.

Given a recipient list, a content file (subject + body, plain text or HTML),
optional attachments and SMTP credentials, mailsend builds one message per
recipient and sends them concurrently over SMTP:

- Per-recipient address errors are collected and reported, never fatal
- Bounded concurrent sending with a progress bar
- Confirmation prompt before anything is sent, and a ``--debug`` dry run

Example:
    Programmatic usage::

        from mailsend.core import BatchOrchestrator

        result = BatchOrchestrator().run(
            text_file="notice.txt",
            recipients_file="recipients.txt",
            config_file="mailsend.toml",
        )
"""

__version__ = "0.2.0"
