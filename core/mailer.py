"""
core/mailer.py -- Outbound email for the forgot-password flow.

Delivery goes through smtplib against the SMTP relay named in settings. The
mailer never raises: a failed or unconfigured send is logged and reported as
False, so a mail outage cannot turn a forgot-password request into a 500.

Usage:
    mailer = Mailer(get_settings())
    mailer.send_forgot_password_mail("Ada  Lovelace", "ada@example.com", token)
"""

import logging
import smtplib
from email.mime.text import MIMEText

from core.config import Settings

logger = logging.getLogger("gatehouse.mailer")

_FORGOT_PASSWORD_SUBJECT = "Reset your password"

_FORGOT_PASSWORD_BODY = """Hello {name},

We received a request to reset the password for your account.

Open the link below to choose a new password:

{link}

The link can be used once and expires in {ttl_minutes} minutes.
If you did not ask for a reset, you can ignore this email.
"""


class Mailer:
    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def reset_link(self, token: str) -> str:
        return f"{self.settings.frontend_url.rstrip('/')}/reset-password/{token}"

    def build_forgot_password_message(self, name: str, email: str, token: str) -> MIMEText:
        body = _FORGOT_PASSWORD_BODY.format(
            name=name,
            link=self.reset_link(token),
            ttl_minutes=max(1, self.settings.temp_password_ttl_seconds // 60),
        )
        message = MIMEText(body, "plain", "utf-8")
        message["From"] = self.settings.mail_sender
        message["To"] = email
        message["Subject"] = _FORGOT_PASSWORD_SUBJECT
        return message

    def send_forgot_password_mail(self, name: str, email: str, token: str) -> bool:
        """Send the reset link to the user. Returns True if the relay accepted it."""
        if not self.settings.mail_enabled:
            logger.error("Mail not configured (SMTP_HOST / MAIL_SENDER unset); reset email to %s dropped", email)
            return False

        message = self.build_forgot_password_message(name, email, token)
        try:
            with smtplib.SMTP(self.settings.smtp_host, self.settings.smtp_port, timeout=10) as server:
                if self.settings.smtp_starttls:
                    server.starttls()
                if self.settings.smtp_username:
                    server.login(self.settings.smtp_username, self.settings.smtp_password)
                server.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("SMTP error sending reset email to %s: %s", email, e)
            return False

        logger.info("Reset email sent to %s", email)
        return True
