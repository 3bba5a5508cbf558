"""Outbound notification sender (email/push fan-out lives behind the webhook)."""
import logging
import uuid
from typing import Optional

import aiohttp

from app.config.constants import NOTIFY_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)


class Notifier:
    def __init__(self, webhook_url: Optional[str]):
        self.webhook_url = webhook_url

    @property
    def is_configured(self) -> bool:
        return bool(self.webhook_url)

    async def send(self, user_id: uuid.UUID, title: str, body: str, url: str, tag: str) -> bool:
        """POST one notification. Returns False when it could not be delivered."""
        if not self.is_configured:
            logger.error("NOTIFY_WEBHOOK_URL is not set.")
            return False

        payload = {
            "userId": str(user_id),
            "title": title,
            "body": body,
            "url": url,
            "tag": tag,
        }
        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(
                    self.webhook_url,
                    json=payload,
                    timeout=aiohttp.ClientTimeout(total=NOTIFY_TIMEOUT_SECONDS),
                ) as response:
                    if response.status >= 300:
                        error_text = await response.text()
                        logger.warning(f"Notification for {user_id} rejected ({response.status}): {error_text[:200]}")
                        return False
        except aiohttp.ClientError as e:
            logger.warning(f"Notification for {user_id} failed: {e}")
            return False

        logger.info(f"Sent notification to {user_id}: {title[:20]}...")
        return True
