"""
Email Service using Resend

Sends the owner a notification for every new contact-form submission.
Delivery is best effort: it runs as a background task after the response
has gone out, and any failure is logged and dropped.
"""

from html import escape
from typing import Any, Dict

import resend

from portfolio_api.core.config import settings
from portfolio_api.core.errors import error_boundary
from portfolio_api.core.logging_config import get_logger
from portfolio_api.core.timeutils import utcnow
from portfolio_api.models.contact import Contact

logger = get_logger(__name__)

# Initialize Resend
resend.api_key = settings.RESEND_API_KEY


def _notification_recipient() -> str:
    return settings.CONTACT_NOTIFY_EMAIL or settings.ADMIN_EMAIL


def build_contact_notification(contact: Contact) -> Dict[str, Any]:
    """Resend payload for a contact submission. User input is HTML-escaped."""
    name = escape(contact.name)
    email = escape(contact.email)
    subject = escape(contact.subject or "No subject provided")
    message = escape(contact.message)
    received = (contact.created_at or utcnow()).strftime("%A, %B %d, %Y %H:%M UTC")

    return {
        "from": settings.FROM_EMAIL,
        "to": [_notification_recipient()],
        "reply_to": contact.email,
        "subject": f"New Contact: {contact.subject or 'No Subject'} - from {contact.name}",
        "html": f"""
<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
</head>
<body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Arial, sans-serif; line-height: 1.6; color: #333; margin: 0; padding: 20px;">
    <div style="max-width: 600px; margin: 0 auto;">
        <!-- Header -->
        <div style="background: linear-gradient(135deg, #00ffaa, #e2a61a); padding: 30px; border-radius: 10px 10px 0 0;">
            <h1 style="color: #fff; margin: 0; font-size: 24px;">New Contact Form Submission</h1>
        </div>

        <!-- Content -->
        <div style="background: #f8f9fa; padding: 30px; border-radius: 0 0 10px 10px;">
            <p style="font-size: 12px; font-weight: bold; text-transform: uppercase; letter-spacing: 1px; margin: 0;">From</p>
            <p style="margin: 5px 0 20px 0; padding: 15px; background: #fff; border-left: 4px solid #00ffaa;">{name}</p>

            <p style="font-size: 12px; font-weight: bold; text-transform: uppercase; letter-spacing: 1px; margin: 0;">Email</p>
            <p style="margin: 5px 0 20px 0; padding: 15px; background: #fff; border-left: 4px solid #00ffaa;"><a href="mailto:{email}">{email}</a></p>

            <p style="font-size: 12px; font-weight: bold; text-transform: uppercase; letter-spacing: 1px; margin: 0;">Subject</p>
            <p style="margin: 5px 0 20px 0; padding: 15px; background: #fff; border-left: 4px solid #00ffaa;">{subject}</p>

            <p style="font-size: 12px; font-weight: bold; text-transform: uppercase; letter-spacing: 1px; margin: 0;">Message</p>
            <div style="margin: 5px 0 20px 0; padding: 20px; background: #fff; border-left: 4px solid #7c3aed; white-space: pre-wrap;">{message}</div>

            <p style="font-size: 12px; font-weight: bold; text-transform: uppercase; letter-spacing: 1px; margin: 0;">Received At</p>
            <p style="margin: 5px 0 0 0; padding: 15px; background: #fff; border-left: 4px solid #00ffaa;">{received}</p>
        </div>

        <!-- Footer -->
        <p style="text-align: center; margin-top: 20px; color: #666; font-size: 12px;">
            Sent from the portfolio contact form at {escape(settings.FRONTEND_URL)}
        </p>
    </div>
</body>
</html>
        """,
        "text": (
            "New Contact Form Submission\n"
            "===========================\n\n"
            f"From: {contact.name}\n"
            f"Email: {contact.email}\n"
            f"Subject: {contact.subject or 'No subject'}\n\n"
            f"Message:\n{contact.message}\n\n"
            f"---\nReceived: {received}\n"
        ),
    }


def send_contact_notification(contact: Contact) -> bool:
    """
    Notify the site owner about a new contact submission.
    Returns True if sent successfully, False otherwise. Never raises.
    """
    if not settings.RESEND_API_KEY:
        logger.info("Skipping contact notification - RESEND_API_KEY not configured", contact_id=contact.id)
        return False

    if not _notification_recipient():
        logger.warning("Skipping contact notification - no recipient configured", contact_id=contact.id)
        return False

    with error_boundary("send_contact_notification", contact_id=contact.id) as boundary:
        resend.api_key = settings.RESEND_API_KEY
        result = resend.Emails.send(build_contact_notification(contact))

    if boundary.failed:
        return False

    email_id = result.get("id") if isinstance(result, dict) else None
    logger.info("Contact notification sent", contact_id=contact.id, email_id=email_id)
    return True
