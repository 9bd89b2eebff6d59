"""
SpecialStandard Backend — Email Service
========================================

What:  Sends transactional email (verification codes, password-reset codes)
       through the Resend REST API.
How:   `POST {resend_api_url}` with a Bearer API key and a JSON body of
       from / to / subject / html. Returns the message id Resend assigns.
Who:   Verification routes and AuthService.

Failures are not retried: a retried send can deliver the same code twice.
"""

import logging
from typing import Optional

import httpx

from specialstandard.config import settings
from specialstandard.exceptions import TransportError, UpstreamServiceError

logger = logging.getLogger(__name__)

SERVICE_NAME = "email"

VERIFICATION_SUBJECT = "The Special Standard Verification Code"
RESET_SUBJECT = "Password Reset OTP"


def verification_email_html(code: str, ttl_minutes: int) -> str:
    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
</head>
<body>
  <div style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
    <h1 style="color: #333333; font-size: 24px;">Verify Your Email</h1>
    <p style="color: #666666; font-size: 16px;">
      Please use the verification code below to confirm your email address.
    </p>
    <p style="font-size: 32px; font-weight: bold; letter-spacing: 8px; color: #333333;">{code}</p>
    <p style="color: #666666; font-size: 14px;">
      This code will expire in <strong>{ttl_minutes} minutes</strong>.
    </p>
    <p style="color: #999999; font-size: 13px;">
      If you didn't request this verification code, you can safely ignore this email.
    </p>
  </div>
</body>
</html>"""


def reset_email_html(code: str, ttl_minutes: int) -> str:
    return (
        "<h2>Password Reset</h2>\n"
        f"<p>Your OTP is: <strong>{code}</strong></p>\n"
        f"<p>This OTP expires in {ttl_minutes} minutes.</p>"
    )


class EmailService:
    def __init__(
        self,
        api_key: Optional[str] = None,
        from_email: Optional[str] = None,
        api_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.resend_api_key
        self.from_email = from_email if from_email is not None else settings.resend_from_email
        self.api_url = api_url if api_url is not None else settings.resend_api_url
        self._transport = transport

    async def send(self, to: str, subject: str, html: str) -> str:
        """Send one message and return its id."""
        payload = {"from": self.from_email, "to": [to], "subject": subject, "html": html}
        try:
            async with httpx.AsyncClient(
                timeout=settings.http_timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    self.api_url,
                    json=payload,
                    headers={
                        "Authorization": f"Bearer {self.api_key}",
                        "Accept": "application/json",
                    },
                )
        except httpx.TransportError as e:
            logger.error("Email delivery unreachable: %s", str(e))
            raise TransportError(context={"service": SERVICE_NAME}) from e

        if response.status_code >= 400:
            logger.error(
                "Email rejected (HTTP %d): %s", response.status_code, response.text[:500]
            )
            raise UpstreamServiceError(message="Failed to send email", service=SERVICE_NAME)

        message_id = response.json().get("id", "")
        logger.info("Email sent: subject=%r message_id=%s", subject, message_id)
        return message_id

    async def send_verification_code(self, to: str, code: str) -> str:
        ttl = settings.verification_code_ttl_minutes
        return await self.send(to, VERIFICATION_SUBJECT, verification_email_html(code, ttl))

    async def send_reset_code(self, to: str, code: str) -> str:
        ttl = settings.reset_otp_ttl_minutes
        return await self.send(to, RESET_SUBJECT, reset_email_html(code, ttl))


email_service = EmailService()
