"""Unit tests for core/mailer.py -- forgot-password email delivery.

smtplib.SMTP is patched in every test; nothing leaves the process.
"""

import smtplib
from unittest.mock import MagicMock, patch

from core.config import Settings
from core.mailer import Mailer


def _settings(**overrides) -> Settings:
    values = {
        "secret_key": "k" * 32,
        "smtp_host": "smtp.example.com",
        "smtp_port": 2525,
        "smtp_username": "mailer",
        "smtp_password": "hunter22",
        "mail_sender": "no-reply@example.com",
        "frontend_url": "https://app.example.com/",
        "temp_password_ttl_seconds": 1800,
    }
    values.update(overrides)
    return Settings(**values)


def test_reset_link_joins_frontend_url():
    mailer = Mailer(_settings())
    assert mailer.reset_link("abc") == "https://app.example.com/reset-password/abc"


def test_message_contents():
    mailer = Mailer(_settings())
    message = mailer.build_forgot_password_message("Ada  Lovelace", "ada@example.com", "tok-123")
    assert message["To"] == "ada@example.com"
    assert message["From"] == "no-reply@example.com"
    assert message["Subject"] == "Reset your password"
    body = message.get_payload(decode=True).decode("utf-8")
    assert "Hello Ada  Lovelace," in body
    assert "https://app.example.com/reset-password/tok-123" in body
    assert "30 minutes" in body


@patch("core.mailer.smtplib.SMTP")
def test_send_uses_starttls_and_login(mock_smtp):
    server = MagicMock()
    mock_smtp.return_value.__enter__.return_value = server

    assert Mailer(_settings()).send_forgot_password_mail("Ada  Lovelace", "ada@example.com", "tok") is True

    mock_smtp.assert_called_once_with("smtp.example.com", 2525, timeout=10)
    server.starttls.assert_called_once()
    server.login.assert_called_once_with("mailer", "hunter22")
    server.send_message.assert_called_once()
    sent = server.send_message.call_args.args[0]
    assert sent["To"] == "ada@example.com"


@patch("core.mailer.smtplib.SMTP")
def test_send_without_credentials_or_tls(mock_smtp):
    server = MagicMock()
    mock_smtp.return_value.__enter__.return_value = server

    mailer = Mailer(_settings(smtp_username="", smtp_starttls=False))
    assert mailer.send_forgot_password_mail("Ada  Lovelace", "ada@example.com", "tok") is True

    server.starttls.assert_not_called()
    server.login.assert_not_called()
    server.send_message.assert_called_once()


@patch("core.mailer.smtplib.SMTP")
def test_unconfigured_mailer_does_not_connect(mock_smtp):
    mailer = Mailer(_settings(smtp_host=""))
    assert mailer.send_forgot_password_mail("Ada  Lovelace", "ada@example.com", "tok") is False
    mock_smtp.assert_not_called()


@patch("core.mailer.smtplib.SMTP")
def test_smtp_failure_returns_false(mock_smtp):
    server = MagicMock()
    server.send_message.side_effect = smtplib.SMTPRecipientsRefused({"ada@example.com": (550, b"no such user")})
    mock_smtp.return_value.__enter__.return_value = server

    assert Mailer(_settings()).send_forgot_password_mail("Ada  Lovelace", "ada@example.com", "tok") is False


@patch("core.mailer.smtplib.SMTP", side_effect=ConnectionRefusedError("refused"))
def test_connection_failure_returns_false(_mock_smtp):
    assert Mailer(_settings()).send_forgot_password_mail("Ada  Lovelace", "ada@example.com", "tok") is False
