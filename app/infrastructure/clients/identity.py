"""Identity provider client: bearer token -> user id."""
import logging
import uuid
from typing import Optional

import aiohttp

from app.core.errors import AuthError, ConfigurationError

logger = logging.getLogger(__name__)

VERIFY_TIMEOUT_SECONDS = 10


class IdentityClient:
    """Verifies access tokens against the hosted auth provider."""

    def __init__(self, base_url: Optional[str], api_key: Optional[str]):
        self.base_url = (base_url or "").rstrip("/")
        self.api_key = api_key

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url and self.api_key)

    async def get_user_id(self, token: str) -> uuid.UUID:
        """
        Resolve the user behind ``token``.

        Raises:
            ConfigurationError: provider URL or key not set
            AuthError: token rejected, malformed, or the provider unreachable
        """
        if not self.is_configured:
            raise ConfigurationError()
        if not token:
            raise AuthError("missing_token")

        url = f"{self.base_url}/auth/v1/user"
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {token}",
        }

        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(
                    url,
                    headers=headers,
                    timeout=aiohttp.ClientTimeout(total=VERIFY_TIMEOUT_SECONDS),
                ) as response:
                    if response.status != 200:
                        logger.warning(f"Token rejected by identity provider ({response.status})")
                        raise AuthError("invalid_token")
                    data = await response.json()
        except aiohttp.ClientError as e:
            logger.error(f"Identity provider network error: {e}")
            raise AuthError("unverifiable_token")

        try:
            return uuid.UUID(str(data.get("id")))
        except (ValueError, AttributeError):
            logger.warning("Identity provider returned no usable user id")
            raise AuthError("invalid_token")
