from __future__ import annotations

import logging
from dataclasses import dataclass
from html import escape
from urllib.parse import urlencode

from portal.domain.ports.email_port import EmailPort

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MailContext:
    app_name: str
    app_url: str


@dataclass(frozen=True)
class OutgoingMail:
    to: str
    subject: str
    html: str


_LAYOUT = """<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{title}</title>
  </head>
  <body style="font-family: -apple-system, 'Segoe UI', Roboto, Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
    <h1 style="font-size: 28px;">{app_name}</h1>
    <h2>{title}</h2>
    <p>{intro}</p>
    <p style="text-align: center; margin: 30px 0;">
      <a href="{link}" style="background: #FEC200; color: #000; padding: 14px 28px; text-decoration: none; border-radius: 6px; font-weight: 600;">{action}</a>
    </p>
    <p style="color: #999; font-size: 14px;">{ignore}</p>
    <p style="color: #999; font-size: 14px;">This link will expire in {lifetime}.</p>
    <p style="color: #999; font-size: 12px;">
      If the button doesn't work, copy and paste this link into your browser:<br>
      <a href="{link}">{link}</a>
    </p>
  </body>
</html>
"""


def _link(app_url: str, path: str, token: str) -> str:
    return f"{app_url.rstrip('/')}{path}?{urlencode({'token': token})}"


def verification_email(mail: MailContext, token: str) -> tuple[str, str]:
    """Return (subject, html) for the email-verification message."""
    link = escape(_link(mail.app_url, "/verify-email", token))
    html = _LAYOUT.format(
        title="Verify Your Email Address",
        app_name=escape(mail.app_name),
        intro="Thank you for registering! Please click the button below to verify your email address.",
        link=link,
        action="Verify Email",
        ignore="If you didn't create an account, you can safely ignore this email.",
        lifetime="24 hours",
    )
    return f"Verify your email - {mail.app_name}", html


def password_reset_email(mail: MailContext, token: str) -> tuple[str, str]:
    """Return (subject, html) for the password-reset message."""
    link = escape(_link(mail.app_url, "/reset-password", token))
    html = _LAYOUT.format(
        title="Reset Your Password",
        app_name=escape(mail.app_name),
        intro="We received a request to reset your password. Click the button below to create a new password.",
        link=link,
        action="Reset Password",
        ignore="If you didn't request a password reset, you can safely ignore this email.",
        lifetime="1 hour",
    )
    return f"Reset your password - {mail.app_name}", html


async def deliver(email_port: EmailPort, outgoing: OutgoingMail) -> bool:
    """
    Send a prepared message. Runs after the response for the enumeration-safe
    flows, so a failure is only logged.
    """
    result = await email_port.send(
        to=outgoing.to, subject=outgoing.subject, html=outgoing.html
    )
    if not result.success:
        logger.error(
            "email delivery failed",
            extra={"subject": outgoing.subject, "error": result.error},
        )
    return result.success
