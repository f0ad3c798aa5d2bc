"""
Registration confirmation emails over SMTP.

``smtplib`` blocks, so the send runs in a worker thread. When no SMTP
credentials are configured the message is written to the log instead.
"""
import asyncio
import html
import smtplib
from email.message import EmailMessage
from typing import Any, Dict

from app.core.config import settings
from app.core.logging import logger

SUBJECT = "Event Registration Confirmation"


def build_registration_message(recipient: str, event: Dict[str, Any]) -> EmailMessage:
    description = event.get("description") or "N/A"
    msg = EmailMessage()
    msg["Subject"] = SUBJECT
    msg["From"] = settings.EMAIL_FROM
    msg["To"] = recipient
    safe = {key: html.escape(str(event.get(key) or "")) for key in ("title", "date", "time")}
    msg.set_content(
        "Event Registration Confirmed!\n\n"
        "You have successfully registered for the following event:\n\n"
        f"Title: {event['title']}\n"
        f"Date: {event['date']}\n"
        f"Time: {event['time']}\n"
        f"Description: {description}\n\n"
        "We look forward to seeing you at the event!\n\n"
        "Best regards,\nEvent Management Team\n"
    )
    msg.add_alternative(
        f"""\
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h2 style="color: #333;">Event Registration Confirmed!</h2>
  <p>You have successfully registered for the following event:</p>
  <div style="background-color: #f5f5f5; padding: 20px; border-radius: 5px; margin: 20px 0;">
    <h3 style="margin-top: 0; color: #2c3e50;">{safe['title']}</h3>
    <p><strong>Date:</strong> {safe['date']}</p>
    <p><strong>Time:</strong> {safe['time']}</p>
    <p><strong>Description:</strong> {html.escape(description)}</p>
  </div>
  <p>We look forward to seeing you at the event!</p>
  <p>Best regards,<br>Event Management Team</p>
</div>
""",
        subtype="html",
    )
    return msg


def _deliver(msg: EmailMessage) -> None:
    with smtplib.SMTP(settings.EMAIL_HOST, settings.EMAIL_PORT, timeout=30) as server:
        server.starttls()
        server.login(settings.EMAIL_USER, settings.EMAIL_PASS)
        server.send_message(msg)


async def send_registration_email(recipient: str, event: Dict[str, Any]) -> Dict[str, Any]:
    """
    Send a registration confirmation.

    Args:
        recipient: Address of the registered user
        event: Mapping with ``title``, ``date``, ``time`` and ``description``

    Returns:
        ``{"success": True}`` on delivery (or log fallback),
        ``{"success": False, "error": ...}`` when SMTP fails
    """
    msg = build_registration_message(recipient, event)

    if not settings.email_configured:
        logger.info(
            f"Email service not configured; registration email to {recipient} "
            f"for \"{event['title']}\" on {event['date']} at {event['time']}"
        )
        return {"success": True, "message": "Email logged (email service not configured)"}

    try:
        await asyncio.to_thread(_deliver, msg)
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"Error sending registration email to {recipient}: {e}")
        return {"success": False, "error": str(e)}

    logger.info(f"Registration email sent to {recipient}")
    return {"success": True}
