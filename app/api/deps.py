"""Shared route dependencies."""
import uuid
from typing import Optional

from fastapi import Depends, Header

from app.core.config import settings
from app.core.errors import AuthError
from app.infrastructure.clients.identity import IdentityClient

BEARER_PREFIX = "Bearer "


def get_identity_client() -> IdentityClient:
    return IdentityClient(settings.SUPABASE_URL, settings.SUPABASE_ANON_KEY)


async def require_user_id(
    authorization: Optional[str] = Header(None),
    identity: IdentityClient = Depends(get_identity_client),
) -> uuid.UUID:
    """Resolve the caller from ``Authorization: Bearer <token>``."""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise AuthError("missing_token")
    return await identity.get_user_id(authorization[len(BEARER_PREFIX):].strip())
