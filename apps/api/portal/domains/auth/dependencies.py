# apps/api/portal/domains/auth/dependencies.py
import logging

import jwt
from fastapi import Depends, Header, HTTPException, status
from jwt import PyJWKClient

from portal.core.settings import settings
from portal.shared.exceptions import InvalidTokenError

from .types import JwtPayload

logger = logging.getLogger(__name__)

_jwks_client = PyJWKClient(settings.AUTH_JWKS_URL) if settings.AUTH_JWKS_URL else None


def decode_token(token: str) -> JwtPayload:
    """
    Verifies JWT token. Uses JWT_SECRET for development mode if available,
    otherwise falls back to the auth service JWKS for production.
    """
    # Development mode: prefer JWT_SECRET if available
    if settings.JWT_SECRET:
        try:
            payload = jwt.decode(
                token,
                settings.JWT_SECRET,
                algorithms=["HS256"],
                options={"verify_aud": False},
            )
            return JwtPayload(**dict(payload))
        except jwt.PyJWTError as e:
            logger.info(f"Rejected token: {e}")
            raise InvalidTokenError("Invalid or expired token")

    # Production mode: use JWKS
    if not _jwks_client:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Token verification not configured",
        )
    try:
        signing_key = _jwks_client.get_signing_key_from_jwt(token).key
        payload = jwt.decode(
            token,
            signing_key,
            algorithms=["RS256"],
            options={"verify_aud": False},
        )
        return JwtPayload(**dict(payload))
    except jwt.PyJWTError as e:
        logger.info(f"Rejected token: {e}")
        raise InvalidTokenError("Invalid or expired token")


def get_token_payload(authorization: str = Header(None)) -> JwtPayload:
    """
    Extracts and validates the JWT from the Authorization header.
    """
    if not authorization or not authorization.startswith("Bearer "):
        raise InvalidTokenError("Missing token")

    token = authorization.split(" ", 1)[1]
    payload = decode_token(token)
    if not payload.sub:
        raise InvalidTokenError("Token has no subject")
    return payload


def get_current_user_id(payload: JwtPayload = Depends(get_token_payload)) -> str:
    """Returns the user's ID (from the `sub` claim)."""
    return payload.sub or ""
