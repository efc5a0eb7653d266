import logging
import smtplib
from email.message import EmailMessage

from backend.core import config

logger = logging.getLogger(__name__)

NEW_PASSWORD_SUBJECT = "Your new password"


class MailerError(RuntimeError):
    pass


def build_new_password_message(recipient: str, new_password: str) -> EmailMessage:
    message = EmailMessage()
    message["Subject"] = NEW_PASSWORD_SUBJECT
    message["From"] = config.SMTP_SENDER
    message["To"] = recipient
    message.set_content(
        "Your password has been reset.\n\n"
        f"New password: {new_password}\n\n"
        "Log in with this password and change it as soon as possible.\n"
    )
    return message


def send_email(message: EmailMessage) -> None:
    if not config.SMTP_HOST:
        raise MailerError("SMTP_HOST is not configured.")

    try:
        with smtplib.SMTP(config.SMTP_HOST, config.SMTP_PORT, timeout=30) as smtp:
            if config.SMTP_TLS:
                smtp.starttls()
            if config.SMTP_USER:
                smtp.login(config.SMTP_USER, config.SMTP_PASSWORD)
            smtp.send_message(message)
    except (smtplib.SMTPException, OSError) as exc:
        raise MailerError(f"Could not send email to {message['To']}") from exc


def send_new_password_email(recipient: str, new_password: str) -> None:
    send_email(build_new_password_message(recipient, new_password))
    logger.info("Sent password reset email to %s", recipient)
