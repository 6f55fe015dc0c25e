"""
Outgoing email over SMTP
"""
import smtplib
import logging
from email.message import EmailMessage

from i18n import i18n
from settings import get_setting, smtp_configured

logger = logging.getLogger("main")

SMTP_TIMEOUT = 15


def build_password_reset_message(to, reset_url, locale=None):
    message = EmailMessage()
    message["Subject"] = i18n.t("email.reset.subject", locale=locale)
    message["From"] = get_setting("smtp", "from", "OMNILOG <noreply@example.com>")
    message["To"] = to
    message.set_content(i18n.t("email.reset.text", locale=locale, url=reset_url))
    message.add_alternative(i18n.t("email.reset.html", locale=locale, url=reset_url), subtype="html")
    return message


def send_message(message):
    host = get_setting("smtp", "host")
    port = int(get_setting("smtp", "port", 587))
    if get_setting("smtp", "secure", False):
        server = smtplib.SMTP_SSL(host, port, timeout=SMTP_TIMEOUT)
    else:
        server = smtplib.SMTP(host, port, timeout=SMTP_TIMEOUT)
        server.starttls()
    with server:
        server.login(get_setting("smtp", "user"), get_setting("smtp", "password"))
        server.send_message(message)


def send_password_reset_email(to, reset_url, locale=None):
    """
    Send the reset link. Without SMTP settings the link is only logged.
    Returns True when a message was handed to the SMTP server.
    """
    if not smtp_configured():
        logger.info(f"SMTP not configured. Password reset link: {reset_url}")
        return False

    message = build_password_reset_message(to, reset_url, locale)
    try:
        send_message(message)
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"Error sending password reset email: {e}")
        return False
    logger.info("Password reset email sent")
    return True
