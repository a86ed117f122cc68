"""
Email Service for Authentication Notifications

Delivery is fire-and-forget from the caller's point of view: failures are
logged here and never propagate into the request that triggered them.
"""

import logging
from html import escape
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from .config import config

logger = logging.getLogger(__name__)


def send_email(to_email: str, subject: str, body_html: str) -> bool:
    """Send email. Returns False when delivery failed or is disabled."""
    if not config.EMAIL_ENABLED:
        logger.info("Email disabled; not sending %r to %s", subject, to_email)
        return False

    msg = MIMEMultipart('alternative')
    msg['Subject'] = subject
    msg['From'] = config.EMAIL_FROM
    msg['To'] = to_email
    msg.attach(MIMEText(body_html, 'html'))

    try:
        with smtplib.SMTP(config.SMTP_HOST, config.SMTP_PORT, timeout=config.SMTP_TIMEOUT) as server:
            if config.SMTP_USE_TLS:
                server.starttls()
            if config.SMTP_USERNAME and config.SMTP_PASSWORD:
                server.login(config.SMTP_USERNAME, config.SMTP_PASSWORD)
            server.send_message(msg)
    except (smtplib.SMTPException, OSError):
        logger.exception("Failed to send %r to %s", subject, to_email)
        return False

    return True


def send_verification_email(to_email: str, token: str) -> bool:
    verify_url = f"{config.FRONTEND_URL}/verify-email?token={token}"

    body = f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
      <h2 style="color: #FF6B6B;">Welcome to Laid!</h2>
      <p>Thanks for signing up. Please verify your email address to get started.</p>
      <p><a href="{verify_url}">Verify Email</a></p>
      <p style="color: #666; font-size: 14px;">This link will expire in 24 hours.</p>
      <p style="color: #666; font-size: 14px;">If you didn't create an account, you can safely ignore this email.</p>
    </div>
    """

    return send_email(to_email, "Verify your email - Laid", body)


def send_welcome_email(to_email: str, name: str) -> bool:
    body = f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
      <h2 style="color: #FF6B6B;">Welcome, {escape(name)}!</h2>
      <p>Your email has been verified. You're all set to start connecting with amazing people.</p>
      <p><a href="{config.FRONTEND_URL}/discover">Start Exploring</a></p>
    </div>
    """

    return send_email(to_email, "Welcome to Laid!", body)
