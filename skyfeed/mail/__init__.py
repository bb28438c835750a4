"""skyfeed.mail

Outbound mail for account-action tokens.
"""

from skyfeed.mail.mailer import Mailer, SmtpMailer, build_message

__all__ = ["Mailer", "SmtpMailer", "build_message"]
