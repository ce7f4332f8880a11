import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from urllib.parse import urlencode

import settings
from models.auth import User

logger = logging.getLogger("mediator.email")


def _smtp_configured() -> bool:
    return bool(
        settings.SMTP_HOST and settings.SMTP_USERNAME and settings.SMTP_PASSWORD
    )


def _send_email(subject: str, html: str, text: str, to_email: str) -> bool:
    if settings.TESTING_MODE or not _smtp_configured():
        # Skip sending in tests or when SMTP is not configured
        logger.info(
            f"[Email skipped] To={to_email} Subject={subject} TESTING_MODE={settings.TESTING_MODE} SMTP_CONFIGURED={_smtp_configured()}"
        )
        return False

    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = formataddr((settings.SMTP_FROM_NAME, settings.SMTP_FROM_EMAIL))
    msg["To"] = to_email
    msg.attach(MIMEText(text, "plain", "utf-8"))
    msg.attach(MIMEText(html, "html", "utf-8"))

    try:
        with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=20) as server:
            if settings.SMTP_USE_TLS:
                server.starttls()
            server.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
            server.send_message(msg)
        logger.info(f"Email sent to {to_email}: {subject}")
        return True
    except (smtplib.SMTPException, OSError) as e:  # pragma: no cover
        logger.error(f"Failed to send email to {to_email}: {e}")
        return False


def reset_link(token: str) -> str:
    return f"{settings.BASE_URL}/reset-password?{urlencode({'token': token})}"


def send_password_reset_email(*, user: User, token: str) -> bool:
    """Mail the reset link; the token is valid for RESET_TOKEN_EXPIRE_MINUTES."""
    link = reset_link(token)
    subject = "Reset your Mediator password"
    html = (
        f"<p>Hey {user.username},</p>"
        "<p>Someone asked to reset the password of your Mediator account.</p>"
        f'<p><a href="{link}">Choose a new password</a></p>'
        f"<p>The link expires in {settings.RESET_TOKEN_EXPIRE_MINUTES} minutes. "
        "If you did not ask for it, ignore this email.</p>"
    )
    text = (
        f"Hey {user.username},\n\n"
        f"Reset your Mediator password here: {link}\n"
        f"The link expires in {settings.RESET_TOKEN_EXPIRE_MINUTES} minutes.\n"
    )
    return _send_email(subject, html, text, user.email)
