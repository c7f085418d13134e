"""
app/utils/email.py
Transactional emails via Resend; a failed send never fails the request
"""
import logging

import resend

from app.config import settings

logger = logging.getLogger(__name__)

resend.api_key = settings.RESEND_API_KEY


def _send(to_email: str, subject: str, html: str) -> bool:
    if not settings.RESEND_API_KEY:
        logger.debug("RESEND_API_KEY not set, skipping email to %s", to_email)
        return False
    try:
        resend.Emails.send({
            "from": settings.MAIL_FROM,
            "to": to_email,
            "subject": subject,
            "html": html,
        })
        return True
    except Exception as e:
        logger.warning("Email to %s not sent: %s", to_email, e)
        return False


def send_booking_confirmation(customer_email: str, customer_name: str, club_name: str, price: float) -> bool:
    amount = "Free" if not price else f"{price:.2f}"
    return _send(
        customer_email,
        f"Your membership of {club_name} is confirmed",
        f"""
        <div style="font-family:Arial,sans-serif;max-width:560px;margin:0 auto;padding:32px 24px;">
          <h2 style="margin:0 0 16px 0;">Welcome to {club_name}!</h2>
          <p style="line-height:1.6;">Hi {customer_name or 'there'},</p>
          <p style="line-height:1.6;">Your booking is confirmed. Amount paid: <strong>{amount}</strong>.</p>
          <a href="{settings.CLIENT_DOMAIN}/dashboard/my-orders"
             style="display:inline-block;padding:12px 24px;background:#2563eb;color:#fff;text-decoration:none;">
            View my memberships →
          </a>
        </div>
        """,
    )


def send_role_changed(user_email: str, role: str) -> bool:
    return _send(
        user_email,
        f"Your ClubSphere role is now {role}",
        f"""
        <div style="font-family:Arial,sans-serif;max-width:560px;margin:0 auto;padding:32px 24px;">
          <p style="line-height:1.6;">An administrator updated your account role to <strong>{role}</strong>.</p>
          <a href="{settings.CLIENT_DOMAIN}/dashboard">Open my dashboard →</a>
        </div>
        """,
    )
