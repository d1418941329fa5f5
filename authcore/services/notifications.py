"""Dispatch of verification and password reset emails."""

import logging
import smtplib
from email.message import EmailMessage

from ..exceptions import NotificationFailed

logger = logging.getLogger(__name__)

OTP_SUBJECT = 'Verify your email address'
OTP_BODY = """Hello,

Your verification code is {code}.

If you did not create an account, you can ignore this message.
"""

RESET_SUBJECT = 'Password reset code'
RESET_BODY = """Hello,

Use the code {code} to reset your password.

If you did not ask to reset your password, you can ignore this message.
"""


class Notifier(object):
    """Outbound messages sent on behalf of the orchestrator."""

    def send_otp_email(self, email: str, code: str) -> None:
        """Send a verification code to ``email``."""
        raise NotImplementedError()

    def send_password_reset_email(self, email: str, code: str) -> None:
        """Send a password reset code to ``email``."""
        raise NotImplementedError()


class SMTPNotifier(Notifier):
    """Sends plain-text email through an SMTP relay."""

    def __init__(self, host: str = 'localhost', port: int = 25,
                 sender: str = 'no-reply@localhost',
                 timeout: float = 10.0) -> None:
        self._host = host
        self._port = port
        self._sender = sender
        self._timeout = timeout

    def _new_connection(self) -> smtplib.SMTP:
        return smtplib.SMTP(host=self._host, port=self._port,
                            timeout=self._timeout)

    def _message(self, to: str, subject: str, body: str) -> EmailMessage:
        message = EmailMessage()
        message['From'] = self._sender
        message['To'] = to
        message['Subject'] = subject
        message.set_content(body)
        return message

    def send_message(self, message: EmailMessage) -> None:
        """Send ``message``, opening a new connection for it."""
        try:
            with self._new_connection() as conn:
                conn.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error('Could not send email via %s:%s: %s',
                         self._host, self._port, e)
            raise NotificationFailed(f'Could not send email: {e}') from e

    def send_otp_email(self, email: str, code: str) -> None:
        self.send_message(self._message(email, OTP_SUBJECT,
                                        OTP_BODY.format(code=code)))

    def send_password_reset_email(self, email: str, code: str) -> None:
        self.send_message(self._message(email, RESET_SUBJECT,
                                        RESET_BODY.format(code=code)))
