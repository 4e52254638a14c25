"""Composing and sending transactional emails."""

from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from html import escape

from wildway.core.config import Settings

logger = logging.getLogger(__name__)


def _wrap_email_html(*, title: str, intro: str, content: str, footer: str) -> str:
    return f"""\
<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>{escape(title)}</title>
  </head>
  <body style="margin:0;padding:0;background:#f7f7f7;font-family:Arial,sans-serif;color:#333333;">
    <table role="presentation" width="100%" cellpadding="0" cellspacing="0" style="padding:24px 12px;">
      <tr>
        <td align="center">
          <table role="presentation" width="100%" cellpadding="0" cellspacing="0" style="max-width:600px;background:#ffffff;border-radius:12px;overflow:hidden;">
            <tr>
              <td style="padding:20px 24px;background:#55c57a;color:#ffffff;">
                <h1 style="margin:0;font-size:20px;line-height:1.3;">{escape(title)}</h1>
              </td>
            </tr>
            <tr>
              <td style="padding:24px;">
                <p style="margin:0 0 14px;font-size:15px;line-height:1.6;">{escape(intro)}</p>
                {content}
              </td>
            </tr>
            <tr>
              <td style="padding:16px 24px;background:#f7f7f7;">
                <p style="margin:0;font-size:12px;line-height:1.6;color:#777777;">{escape(footer)}</p>
              </td>
            </tr>
          </table>
        </td>
      </tr>
    </table>
  </body>
</html>
"""


def _cta_button(label: str, href: str) -> str:
    return (
        '<p style="margin:20px 0;">'
        f'<a href="{escape(href, quote=True)}" '
        'style="display:inline-block;background:#55c57a;color:#ffffff;text-decoration:none;'
        'padding:12px 18px;border-radius:100px;font-weight:600;font-size:14px;">'
        f"{escape(label)}</a></p>"
    )


def build_password_reset_email(name: str, link: str, expires_minutes: int) -> tuple[str, str, str]:
    first_name = (name or "").split(" ")[0] or "there"
    subject = f"Your password reset token (valid for {expires_minutes} minutes)"
    body = (
        f"Hi {first_name},\n\n"
        "Forgot your password? Submit a PATCH request with your new password and "
        f"confirmPassword to: {link}\n\n"
        f"This link expires in {expires_minutes} minutes.\n\n"
        "If you didn't forget your password, please ignore this email!"
    )
    html_content = (
        f'<p style="margin:0 0 12px;font-size:14px;">Hi {escape(first_name)},</p>'
        '<p style="margin:0 0 14px;font-size:14px;line-height:1.6;">'
        "We received a request to reset the password of your Wildway account.</p>"
        f"{_cta_button('Reset my password', link)}"
        '<p style="margin:0;font-size:12px;color:#777777;line-height:1.6;">'
        f"This link expires in {expires_minutes} minutes. Direct link:<br>{escape(link)}</p>"
    )
    html_body = _wrap_email_html(
        title="Reset your password",
        intro="Security action for your Wildway account.",
        content=html_content,
        footer="If you didn't forget your password, please ignore this email.",
    )
    return subject, body, html_body


class Mailer:
    """SMTP mail notifier built once from settings."""

    def __init__(
        self,
        *,
        host: str,
        port: int,
        user: str,
        password: str,
        sender: str,
        use_tls: bool = True,
        timeout: float = 30.0,
    ) -> None:
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.sender = sender
        self.use_tls = use_tls
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "Mailer":
        return cls(
            host=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            user=settings.SMTP_USER,
            password=settings.SMTP_PASSWORD,
            sender=settings.SMTP_FROM,
            use_tls=settings.SMTP_TLS,
            timeout=settings.SMTP_TIMEOUT_SECONDS,
        )

    def build_message(self, to: str, subject: str, body: str, *, html_body: str | None = None) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content(body)
        if html_body:
            message.add_alternative(html_body, subtype="html")
        return message

    def send(self, to: str, subject: str, body: str, *, html_body: str | None = None) -> bool:
        message = self.build_message(to, subject, body, html_body=html_body)
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                server.ehlo()
                if self.use_tls:
                    server.starttls()
                    server.ehlo()
                if self.user:
                    server.login(self.user, self.password)
                server.send_message(message)
        except (smtplib.SMTPException, OSError):
            logger.exception("Email send failed: %s", to)
            return False
        logger.info("Email sent: %s", to)
        return True
