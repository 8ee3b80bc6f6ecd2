"""
SMTP mail transport.

smtplib is blocking, so each send runs in a worker thread. The only bound
is the socket timeout (MailSettings.timeout_seconds, per operation): send()
returns only once the worker thread has finished, so no delivery can
happen after a failure was reported.
"""

import asyncio
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from src.app.services.mail_notifier import IMailNotifier
from src.app.settings import MailSettings

logger = logging.getLogger(__name__)


class SmtpMailNotifier(IMailNotifier):
    def __init__(self, settings: MailSettings):
        self.settings = settings

    def _build_message(self, to: str, subject: str, html: str, text: str) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = f'"{self.settings.from_name}" <{self.settings.user}>'
        msg["To"] = to

        msg.attach(MIMEText(text, "plain"))
        msg.attach(MIMEText(html, "html"))
        return msg

    def _send_blocking(self, to: str, msg: MIMEMultipart) -> None:
        with smtplib.SMTP(
            self.settings.host, self.settings.port, timeout=self.settings.timeout_seconds
        ) as server:
            server.ehlo()
            server.starttls()
            server.ehlo()
            server.login(self.settings.user, self.settings.password)
            server.sendmail(self.settings.user, to, msg.as_string())

    async def send(self, to: str, subject: str, html: str, text: str) -> bool:
        msg = self._build_message(to, subject, html, text)
        try:
            await asyncio.to_thread(self._send_blocking, to, msg)
        except TimeoutError:
            logger.error(
                f"Timed out sending mail to {to} after {self.settings.timeout_seconds}s"
            )
            return False
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send mail to {to}: {e}")
            return False

        logger.info(f"Mail '{subject}' sent to {to}")
        return True
