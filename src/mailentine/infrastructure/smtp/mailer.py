"""
SMTP Mailer.

Delivers one plaintext email per call over an SMTP submission port:
connect, EHLO, STARTTLS when offered, AUTH PLAIN, MAIL/RCPT/DATA, QUIT.
"""

import smtplib
import ssl
from contextlib import contextmanager
from dataclasses import dataclass
from email.message import EmailMessage
from email.policy import SMTP as SMTP_POLICY
from typing import Callable, Iterator, Optional

from mailentine.config import EmailSettings, SmtpSettings
from mailentine.core.exceptions import MailDeliveryError
from mailentine.infrastructure.logging import get_logger, log_duration


logger = get_logger(__name__)

LOOPBACK_HOSTS = frozenset(["localhost", "127.0.0.1", "::1"])


@dataclass(frozen=True)
class OutgoingEmail:
    """Envelope and content of a single notification email."""
    sender: str
    receiver: str
    subject: str
    body: str

    def to_message(self) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = self.receiver
        message["Subject"] = self.subject
        message.set_content(self.body)
        return message

    def as_bytes(self) -> bytes:
        """Serialize with CRLF line endings as required on the wire."""
        return self.to_message().as_bytes(policy=SMTP_POLICY)


def _reply_text(reply: object) -> str:
    if isinstance(reply, bytes):
        return reply.decode("utf-8", errors="replace")
    return str(reply)


@contextmanager
def _smtp_step(step: str) -> Iterator[None]:
    """Translate any SMTP or socket failure inside a step into MailDeliveryError."""
    try:
        yield
    except MailDeliveryError:
        raise
    except smtplib.SMTPResponseException as e:
        raise MailDeliveryError(
            step,
            _reply_text(e.smtp_error),
            smtp_code=e.smtp_code,
        ) from e
    except (smtplib.SMTPException, OSError) as e:
        raise MailDeliveryError(step, str(e) or type(e).__name__) from e


def _expect(step: str, reply: tuple, *accepted: int) -> None:
    code, text = reply
    if code not in accepted:
        raise MailDeliveryError(step, _reply_text(text), smtp_code=code)


class SmtpMailer:
    """
    Sends notification emails through the configured SMTP server.

    Each send opens its own connection; nothing is pooled or retried.
    Any failing step aborts the send with MailDeliveryError.
    """

    def __init__(
        self,
        smtp_settings: SmtpSettings,
        email_settings: EmailSettings,
        smtp_factory: Optional[Callable[..., smtplib.SMTP]] = None,
    ) -> None:
        """
        Initialize the mailer.

        Args:
            smtp_settings: Server, credentials, TLS and timeout settings.
            email_settings: Subject template.
            smtp_factory: Connection factory, smtplib.SMTP by default.
        """
        self._smtp = smtp_settings
        self._email = email_settings
        self._smtp_factory = smtp_factory or smtplib.SMTP

    def build_email(self, day: int, text: str) -> OutgoingEmail:
        return OutgoingEmail(
            sender=self._smtp.sender_email,
            receiver=self._smtp.receiver_email,
            subject=self._email.subject_for(day),
            body=text,
        )

    @log_duration("smtp_send")
    def send(self, day: int, text: str) -> None:
        """
        Send the message for a day.

        Args:
            day: Day number, used in the subject.
            text: Plaintext body.

        Raises:
            ConfigurationError: If sender or receiver settings are missing.
            MailDeliveryError: If any step of the SMTP exchange fails.
        """
        self._smtp.validate()
        email = self.build_email(day, text)
        send_logger = logger.with_fields(
            smtp_host=self._smtp.host,
            smtp_port=self._smtp.port,
            day=day,
        )

        with _smtp_step("connect"):
            client = self._smtp_factory(
                self._smtp.host,
                self._smtp.port,
                timeout=self._smtp.connect_timeout,
            )
        send_logger.info("Connected to SMTP server")

        try:
            self._deliver(client, email, send_logger)
        finally:
            self._close(client)

        send_logger.info(f"Email sent for day {day}")

    def _deliver(self, client: smtplib.SMTP, email: OutgoingEmail, send_logger) -> None:
        client.sock.settimeout(self._smtp.initial_timeout)

        with _smtp_step("ehlo"):
            _expect("ehlo", client.ehlo(), 250)

        encrypted = self._start_tls(client, send_logger)
        self._authenticate(client, encrypted)
        send_logger.info("Authenticated")

        with _smtp_step("mail"):
            _expect("mail", client.mail(email.sender), 250)
        with _smtp_step("rcpt"):
            _expect("rcpt", client.rcpt(email.receiver), 250, 251)
        with _smtp_step("data"):
            _expect("data", client.data(email.as_bytes()), 250)

    def _start_tls(self, client: smtplib.SMTP, send_logger) -> bool:
        """Upgrade the connection when offered. Returns True if encrypted."""
        if not client.has_extn("starttls"):
            if self._smtp.require_tls:
                raise MailDeliveryError(
                    "starttls",
                    "server does not support STARTTLS",
                )
            send_logger.warning("STARTTLS not supported, proceeding without TLS upgrade")
            return False

        client.sock.settimeout(self._smtp.tls_timeout)
        with _smtp_step("starttls"):
            _expect("starttls", client.starttls(context=self._tls_context()), 220)
        client.sock.settimeout(None)

        # Capabilities advertised before the upgrade are discarded
        with _smtp_step("ehlo"):
            _expect("ehlo", client.ehlo(), 250)

        send_logger.info("TLS started")
        return True

    def _authenticate(self, client: smtplib.SMTP, encrypted: bool) -> None:
        if not encrypted and self._smtp.host.lower() not in LOOPBACK_HOSTS:
            raise MailDeliveryError(
                "auth",
                "refusing to send credentials over an unencrypted connection",
            )
        if not client.has_extn("auth"):
            raise MailDeliveryError("auth", "server does not support AUTH")

        client.user = self._smtp.sender_email
        client.password = self._smtp.sender_password
        with _smtp_step("auth"):
            _expect("auth", client.auth("PLAIN", client.auth_plain), 235)

    def _tls_context(self) -> ssl.SSLContext:
        context = ssl.create_default_context()
        if not self._smtp.verify_tls:
            logger.warning(
                "TLS certificate verification is disabled, any server certificate is accepted",
                extra={"extra_fields": {"smtp_host": self._smtp.host}}
            )
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        return context

    def _close(self, client: smtplib.SMTP) -> None:
        try:
            client.quit()
        except (smtplib.SMTPException, OSError) as e:
            logger.debug(
                f"SMTP QUIT failed: {e}",
                extra={"extra_fields": {"error_type": type(e).__name__}}
            )
            client.close()
