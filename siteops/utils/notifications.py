"""
Email alert utilities.

Alerts are handed to the local mail system: the ``mail`` command is tried
first, then ``sendmail``. If neither is installed, or delivery fails, the
alert is logged as a warning and dropped. There is no queue and no retry.
"""

import logging
import shutil
from email.message import EmailMessage
from typing import Callable, Optional

from siteops.utils.process import CommandError, run_command

logger = logging.getLogger(__name__)

DEFAULT_SUBJECT_PREFIX = "[siteops]"
DEFAULT_MAIL_TIMEOUT = 30


def build_sendmail_message(recipient: str, subject: str, body: str) -> str:
    """Render a minimal RFC 822 message for ``sendmail`` on stdin."""
    msg = EmailMessage()
    msg["To"] = recipient
    msg["Subject"] = subject
    msg.set_content(body)
    return msg.as_string()


class AlertDispatcher:
    """
    Send alerts through the first available mail command.

    Args:
        recipient: Alert e-mail address; empty disables delivery
        subject_prefix: Prefix added to every subject
        timeout: Seconds allowed for the mail command
        which: PATH lookup (injectable for tests)
        runner: Command runner (injectable for tests)
    """

    def __init__(
        self,
        recipient: str,
        subject_prefix: str = DEFAULT_SUBJECT_PREFIX,
        timeout: float = DEFAULT_MAIL_TIMEOUT,
        which: Callable[[str], Optional[str]] = shutil.which,
        runner: Callable = run_command,
    ):
        self.recipient = (recipient or "").strip()
        self.subject_prefix = subject_prefix
        self.timeout = timeout
        self.which = which
        self.runner = runner

    def _subject(self, subject: str) -> str:
        if not self.subject_prefix:
            return subject
        return f"{self.subject_prefix} {subject}"

    def send(self, subject: str, message: str) -> bool:
        """
        Deliver one alert.

        Returns:
            True if a mail command accepted the alert, False if it was dropped
        """
        if not self.recipient:
            logger.warning(f"No alert recipient configured, dropping alert: {subject}")
            return False

        full_subject = self._subject(subject)

        try:
            mail_path = self.which("mail")
            if mail_path:
                self.runner(
                    [mail_path, "-s", full_subject, self.recipient],
                    input_text=message,
                    timeout=self.timeout,
                )
                logger.info(f"Alert sent via mail to {self.recipient}: {subject}")
                return True

            sendmail_path = self.which("sendmail")
            if sendmail_path:
                self.runner(
                    [sendmail_path, self.recipient],
                    input_text=build_sendmail_message(self.recipient, full_subject, message),
                    timeout=self.timeout,
                )
                logger.info(f"Alert sent via sendmail to {self.recipient}: {subject}")
                return True

        except CommandError as e:
            logger.warning(f"Failed to send alert '{subject}': {e}")
            return False

        logger.warning("Email sending not available. Install mailutils or sendmail.")
        return False
