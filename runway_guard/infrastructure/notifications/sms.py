"""SMS notifier placeholder until a provider is wired in"""

import logging
from runway_guard.domain.models import NotificationMessage, NotificationResult

NOT_CONFIGURED = "SMS integration not yet implemented. Configure Twilio or similar service."


def mask_phone_number(phone_number: str | None) -> str:
    """Keep only the last 4 digits for logs"""
    digits = "".join(c for c in phone_number or "" if c.isdigit())
    return f"***{digits[-4:]}" if len(digits) > 4 else "***"


class SMSNotifier:
    """Honors the notifier contract but always reports a failed delivery"""

    channel = "sms"

    async def send(self, phone_number: str, message: NotificationMessage) -> NotificationResult:
        sms_text = f"{message.title}\n\n{message.body}"
        logging.info(
            f"SMS not sent: {sms_text[:100]}",
            extra={"channel": self.channel, "destination": mask_phone_number(phone_number)},
        )
        return NotificationResult(channel=self.channel, success=False, error=NOT_CONFIGURED)
