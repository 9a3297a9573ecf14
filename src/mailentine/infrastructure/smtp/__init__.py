"""
SMTP Package.

Outgoing mail delivery.
"""

from mailentine.infrastructure.smtp.mailer import (
    OutgoingEmail,
    SmtpMailer,
)


__all__ = [
    "OutgoingEmail",
    "SmtpMailer",
]
