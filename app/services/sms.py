"""SMS delivery of one-time codes through the ping4sms HTTP API."""
import logging
from dataclasses import dataclass

import httpx

from app.config import Settings, get_settings
from app.exceptions import DeliveryError

logger = logging.getLogger("uvicorn.error")

SMS_TIMEOUT_SECONDS = 10.0

OTP_SMS_TEMPLATE = (
    "Dear Users,\n\n"
    "Your login OTP is {code}. Please do not share this code with anyone. "
    "It will expire in {minutes} minutes.\n"
    "Team - Eleserv"
)


@dataclass(frozen=True)
class OtpConfig:
    """Provider credentials plus the OTP policy shared by every code-issuing flow."""

    api_key: str = ""
    route: str = "2"
    sender: str = "ELESOF"
    template_id: str = ""
    expiry_minutes: int = 15
    attempt_limit: int = 5
    base_url: str = "https://site.ping4sms.com/api/smsapi"
    dry_run: bool = False

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "OtpConfig":
        s = settings or get_settings()
        return cls(
            api_key=s.sms_api_key,
            route=s.sms_route,
            sender=s.sms_sender,
            template_id=s.sms_template_id,
            expiry_minutes=s.otp_expiry_minutes,
            attempt_limit=s.otp_attempt_limit,
            base_url=s.sms_base_url,
            dry_run=s.sms_dry_run,
        )


class SmsGateway:
    """Fire-and-forget sender: one HTTP call per code, no retries, no delivery receipts."""

    def __init__(self, config: OtpConfig, transport: httpx.BaseTransport | None = None):
        self.config = config
        self._transport = transport

    def build_message(self, code: str) -> str:
        return OTP_SMS_TEMPLATE.format(code=code, minutes=self.config.expiry_minutes)

    def send_code(self, phone: str, code: str) -> None:
        """Send `code` to `phone`. Raises DeliveryError unless the provider answers 2xx."""
        if self.config.dry_run:
            logger.info("[SMS] Dry run, not sent: to=%s code=%s", phone, code)
            return
        if not self.config.api_key:
            logger.warning("[SMS] NOT SENT: to=%s. SMS_API_KEY is missing; set it in .env and restart.", phone)
            raise DeliveryError("SMS provider is not configured.")

        params = {
            "key": self.config.api_key,
            "route": self.config.route,
            "sender": self.config.sender,
            "number": phone,
            "sms": self.build_message(code),
            "templateid": self.config.template_id,
        }
        try:
            with httpx.Client(timeout=SMS_TIMEOUT_SECONDS, transport=self._transport) as client:
                r = client.get(self.config.base_url, params=params)
        except httpx.HTTPError as e:
            logger.error("[SMS] Transport error: to=%s error=%s: %s", phone, type(e).__name__, e)
            raise DeliveryError() from e
        if not 200 <= r.status_code < 300:
            logger.error("[SMS] API failed: status=%s to=%s body=%s", r.status_code, phone, r.text[:500])
            raise DeliveryError()
        logger.info("[SMS] API success: to=%s status=%s", phone, r.status_code)
