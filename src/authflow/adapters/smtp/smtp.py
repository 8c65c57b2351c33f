"""
SMTP email sender adapter - Implements EmailSender protocol.

Delivers verification codes through an SMTP relay. Every connection is
opened with a socket timeout, so a stalled relay fails the delivery
instead of blocking registration indefinitely.
"""

import logging
import smtplib
from email.message import EmailMessage
from email.utils import formataddr

from authflow.domain.exceptions import EmailDeliveryError

logger = logging.getLogger(__name__)

SUBJECT = "Email Verification for Your Account"

_TEXT_BODY = """Thank you for registering.

Please use the following code to verify your email address: {code}

This code will expire in {minutes} minutes.
If you didn't request this verification, please ignore this email.
"""

_HTML_BODY = """\
<h1>Email Verification</h1>
<p>Thank you for registering. Please use the following code to verify your email address:</p>
<h2 style="color: #4CAF50; letter-spacing: 2px;">{code}</h2>
<p>This code will expire in {minutes} minutes.</p>
<p>If you didn't request this verification, please ignore this email.</p>
"""


class SmtpEmailSender:
    """
    Implements EmailSender protocol via smtplib.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(
        self,
        host: str,
        port: int,
        username: str = "",
        password: str = "",
        sender: str = "",
        sender_name: str = "",
        starttls: bool = True,
        timeout: float = 10.0,
        code_ttl_minutes: int = 10,
    ) -> None:
        self.host = host
        self.port = port
        self.username = username
        self._password = password
        self.sender = sender or username
        self.sender_name = sender_name
        self.starttls = starttls
        self.timeout = timeout
        self.code_ttl_minutes = code_ttl_minutes

    def send_verification_code(self, email: str, code: str) -> None:
        """
        Send the verification code to ``email``.

        Raises:
            EmailDeliveryError: On any SMTP, network or timeout failure
        """
        message = self._build_message(email, code)
        try:
            with self._connect() as server:
                server.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            raise EmailDeliveryError(f"SMTP delivery to {email} failed: {e}") from e

        logger.info("Verification email sent to %s", email)

    def verify_connection(self) -> None:
        """
        Check that the relay accepts our connection and credentials.

        Raises:
            EmailDeliveryError: If the relay is unreachable or rejects login
        """
        try:
            with self._connect() as server:
                server.noop()
        except (smtplib.SMTPException, OSError) as e:
            raise EmailDeliveryError(f"SMTP configuration check failed: {e}") from e

        logger.info("Email configuration verified for %s:%s", self.host, self.port)

    def _connect(self) -> smtplib.SMTP:
        server = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        try:
            if self.starttls:
                server.starttls()
            if self.username:
                server.login(self.username, self._password)
        except BaseException:
            server.close()
            raise
        return server

    def _build_message(self, email: str, code: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = formataddr((self.sender_name, self.sender)) if self.sender_name else self.sender
        message["To"] = email
        message["Subject"] = SUBJECT
        message.set_content(_TEXT_BODY.format(code=code, minutes=self.code_ttl_minutes))
        message.add_alternative(
            _HTML_BODY.format(code=code, minutes=self.code_ttl_minutes), subtype="html"
        )
        return message
