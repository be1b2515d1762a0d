"""
Authentication for the Storefront API
Validates session JWTs issued by the identity provider and exposes the caller
as an optional Identity
"""
import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import BaseModel

from .config import Settings, get_settings

logger = logging.getLogger(__name__)

# Security scheme for bearer tokens
security = HTTPBearer(auto_error=False)


class Identity(BaseModel):
    """Authenticated caller extracted from the session token"""
    id: str
    email: Optional[str] = None
    name: Optional[str] = None


def decode_session_token(token: str, settings: Settings) -> dict:
    """
    Decode and validate a session JWT.

    Session token structure:
    {
        "sub": "user_2abc...",
        "email": "buyer@example.com",
        "name": "Buyer",
        "iss": "https://clerk.example.com",
        "iat": 1234567890,
        "exp": 1234567890
    }

    Raises:
        JWTError: If the signature, expiry or issuer is invalid
    """
    if not settings.AUTH_SECRET:
        raise JWTError("AUTH_SECRET is not configured")

    options = {"verify_aud": False}
    kwargs = {}
    if settings.AUTH_ISSUER:
        kwargs["issuer"] = settings.AUTH_ISSUER

    return jwt.decode(
        token,
        settings.AUTH_SECRET,
        algorithms=[settings.AUTH_ALGORITHM],
        options=options,
        **kwargs
    )


async def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    settings: Settings = Depends(get_settings)
) -> Optional[Identity]:
    """
    Returns the caller's Identity, or None when no valid token is provided.

    Services decide what an absent identity means (Unauthenticated for writes,
    an empty result for cart reads), so this dependency never raises.

    Usage:
        @router.get("/cart")
        def read_cart(identity: Optional[Identity] = Depends(get_current_identity)):
            ...
    """
    if not credentials:
        return None

    try:
        payload = decode_session_token(credentials.credentials, settings)
    except JWTError as e:
        logger.info(f"Rejected session token: {e}")
        return None

    user_id = payload.get("sub") or payload.get("id")
    if not user_id:
        logger.info("Rejected session token: missing subject")
        return None

    return Identity(
        id=user_id,
        email=payload.get("email"),
        name=payload.get("name")
    )
