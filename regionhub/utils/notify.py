# regionhub/utils/notify.py
import httpx
import logging
from regionhub.config import settings

logger = logging.getLogger(__name__)

class Notifier:
    """Delivers email notifications through an HTTP mail relay.

    Meant to run as a background task: failures are logged and swallowed so
    they never reach the request that triggered them.
    """

    def __init__(self, relay_url: str = None, sender: str = None, timeout: float = 10.0):
        self.relay_url = relay_url if relay_url is not None else settings.NOTIFY_URL
        self.sender = sender or settings.NOTIFY_SENDER
        self.timeout = timeout

    def send(self, recipient: str, subject: str, body: str) -> bool:
        if not recipient:
            logger.warning("Notification '%s' skipped: no recipient", subject)
            return False
        if not self.relay_url:
            logger.info("Notification to %s (relay not configured): %s", recipient, subject)
            return False

        payload = {"from": self.sender, "to": recipient, "subject": subject, "text": body}
        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.post(self.relay_url, json=payload)
                response.raise_for_status()
            return True
        except httpx.HTTPError as e:
            logger.error(f"Notification to {recipient} failed: {e}")
            return False

notifier = Notifier()

def order_status_message(order_id: int, status: str) -> tuple:
    subject = f"Order #{order_id} is {status}"
    body = f"Hello,\n\nyour order #{order_id} is now {status}.\n\nRegionHub"
    return subject, body

def vendor_accepted_message(vendor_name: str) -> tuple:
    subject = "Your vendor account was approved"
    body = f"Hello {vendor_name},\n\nyour shop is now visible on RegionHub.\n\nRegionHub"
    return subject, body

def agent_activated_message(name: str) -> tuple:
    subject = "Your delivery account was activated"
    body = f"Hello {name},\n\nyou can now accept orders on RegionHub.\n\nRegionHub"
    return subject, body
