"""
Transactional email service using Resend.
All sends are no-ops when RESEND_API_KEY is not configured.
"""
import logging

import resend

from gymdesk.config import settings

logger = logging.getLogger(__name__)


async def send_email(to: str, subject: str, html_body: str) -> bool:
    """Send a transactional email via Resend. Returns True on success."""
    if not settings.resend_enabled:
        logger.info("Email skipped (Resend not configured): to=%s, subject=%s", to, subject)
        return False

    resend.api_key = settings.RESEND_API_KEY
    try:
        resend.Emails.send({
            "from": settings.RESEND_FROM_EMAIL,
            "to": [to],
            "subject": subject,
            "html": html_body,
        })
        logger.info("Email sent: to=%s, subject=%s", to, subject)
        return True
    except Exception as e:
        logger.warning("Email send failed: %s", e)
        return False


async def send_password_reset_code(to: str, name: str, code: str, gym_name: str) -> bool:
    subject = f"{gym_name}: password reset code"
    html = f"""
    <div style="font-family: sans-serif; max-width: 600px; margin: 0 auto;">
        <h2 style="color: #2563eb;">Password reset</h2>
        <p>Hello {name},</p>
        <p>Use this code to reset your password:</p>
        <p style="font-size: 28px; letter-spacing: 6px;"><strong>{code}</strong></p>
        <p>The code expires in {settings.RESET_CODE_TTL_MINUTES} minutes.
        If you did not request it, you can ignore this email.</p>
        <hr style="border: none; border-top: 1px solid #e5e7eb; margin: 20px 0;" />
        <p style="color: #9ca3af; font-size: 12px;">{gym_name}</p>
    </div>
    """
    return await send_email(to, subject, html)
