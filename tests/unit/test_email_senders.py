"""
Unit tests for EmailSender adapters.

Tests verify:
- ConsoleEmailSender logs codes in the expected format
- SmtpEmailSender builds the message, bounds the connection with a
  timeout and reports failures as EmailDeliveryError
"""

import logging
import smtplib
import socket
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock, patch

import pytest

from authflow.adapters.smtp.console import ConsoleEmailSender
from authflow.adapters.smtp.smtp import SUBJECT, SmtpEmailSender
from authflow.domain.exceptions import EmailDeliveryError
from authflow.domain.ports import EmailSender


class TestConsoleEmailSender:
    """Tests for the logging-only sender."""

    def test_satisfies_protocol_structurally(self) -> None:
        """ConsoleEmailSender uses structural subtyping, not inheritance."""
        sender: EmailSender = ConsoleEmailSender()
        assert callable(sender.send_verification_code)
        assert ConsoleEmailSender.__bases__ == (object,)

    def test_logs_code_at_info(self, caplog: pytest.LogCaptureFixture) -> None:
        sender = ConsoleEmailSender()

        with caplog.at_level(logging.INFO):
            sender.send_verification_code("user@example.com", "567890")

        assert len(caplog.records) == 1
        assert caplog.records[0].levelno == logging.INFO
        assert caplog.records[0].message == "[VERIFICATION] Email: user@example.com Code: 567890"

    def test_returns_none(self) -> None:
        assert ConsoleEmailSender().send_verification_code("a@b.com", "123456") is None

    def test_concurrent_logging_keeps_records_whole(self, caplog: pytest.LogCaptureFixture) -> None:
        sender = ConsoleEmailSender()

        with caplog.at_level(logging.INFO), ThreadPoolExecutor(max_workers=5) as executor:
            futures = [
                executor.submit(sender.send_verification_code, f"user{i}@example.com", str(100000 + i))
                for i in range(10)
            ]
            for f in futures:
                f.result()

        assert len(caplog.records) == 10
        for record in caplog.records:
            assert record.message.startswith("[VERIFICATION] Email: user")


@pytest.fixture
def smtp_class():
    """Patch smtplib.SMTP and return the mock class."""
    with patch("authflow.adapters.smtp.smtp.smtplib.SMTP") as smtp:
        server = MagicMock()
        smtp.return_value = server
        server.__enter__.return_value = server
        yield smtp


def make_sender(**overrides) -> SmtpEmailSender:
    options = {
        "host": "smtp.example.com",
        "port": 587,
        "username": "noreply@example.com",
        "password": "app-password",
        "sender_name": "authflow",
        "timeout": 5.0,
    }
    options.update(overrides)
    return SmtpEmailSender(**options)


class TestSmtpEmailSender:
    """Tests for the SMTP sender."""

    def test_connects_with_timeout(self, smtp_class) -> None:
        make_sender().send_verification_code("a@b.com", "123456")

        smtp_class.assert_called_once_with("smtp.example.com", 587, timeout=5.0)

    def test_starttls_and_login(self, smtp_class) -> None:
        make_sender().send_verification_code("a@b.com", "123456")

        server = smtp_class.return_value
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("noreply@example.com", "app-password")

    def test_no_starttls_no_login_when_disabled(self, smtp_class) -> None:
        make_sender(starttls=False, username="").send_verification_code("a@b.com", "123456")

        server = smtp_class.return_value
        server.starttls.assert_not_called()
        server.login.assert_not_called()

    def test_message_contents(self, smtp_class) -> None:
        make_sender().send_verification_code("a@b.com", "482913")

        message = smtp_class.return_value.send_message.call_args[0][0]
        assert message["To"] == "a@b.com"
        assert message["Subject"] == SUBJECT
        assert "noreply@example.com" in message["From"]
        assert "authflow" in message["From"]

        text = message.get_body(preferencelist=("plain",)).get_content()
        html = message.get_body(preferencelist=("html",)).get_content()
        assert "482913" in text
        assert "482913" in html
        assert "10 minutes" in text

    def test_sender_defaults_to_username(self) -> None:
        assert make_sender().sender == "noreply@example.com"
        assert make_sender(sender="codes@example.com").sender == "codes@example.com"

    def test_smtp_error_raises_delivery_error(self, smtp_class) -> None:
        smtp_class.return_value.send_message.side_effect = smtplib.SMTPRecipientsRefused({})

        with pytest.raises(EmailDeliveryError):
            make_sender().send_verification_code("a@b.com", "123456")

    def test_timeout_raises_delivery_error(self, smtp_class) -> None:
        smtp_class.side_effect = socket.timeout("timed out")

        with pytest.raises(EmailDeliveryError):
            make_sender().send_verification_code("a@b.com", "123456")

    def test_auth_failure_closes_connection(self, smtp_class) -> None:
        server = smtp_class.return_value
        server.login.side_effect = smtplib.SMTPAuthenticationError(535, b"bad credentials")

        with pytest.raises(EmailDeliveryError):
            make_sender().send_verification_code("a@b.com", "123456")

        server.close.assert_called_once()
        server.send_message.assert_not_called()

    def test_delivery_error_does_not_leak_password(self, smtp_class) -> None:
        smtp_class.return_value.send_message.side_effect = smtplib.SMTPServerDisconnected("gone")

        with pytest.raises(EmailDeliveryError) as exc_info:
            make_sender().send_verification_code("a@b.com", "123456")

        assert "app-password" not in str(exc_info.value)

    def test_verify_connection_success(self, smtp_class) -> None:
        make_sender().verify_connection()

        smtp_class.return_value.noop.assert_called_once()

    def test_verify_connection_failure(self, smtp_class) -> None:
        smtp_class.side_effect = ConnectionRefusedError()

        with pytest.raises(EmailDeliveryError):
            make_sender().verify_connection()
