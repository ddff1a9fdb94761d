"""Auth domain type definitions for type safety."""

from typing import Optional

from pydantic import BaseModel, Field


class JwtPayload(BaseModel):
    """Access token payload issued by the external auth service."""

    # Standard JWT claims
    sub: Optional[str] = Field(None, description="Subject (user ID)")
    iss: Optional[str] = Field(None, description="Token issuer")
    aud: Optional[str | list[str]] = Field(None, description="Token audience")
    exp: Optional[int] = Field(None, description="Expiration timestamp")
    iat: Optional[int] = Field(None, description="Issued at timestamp")
    nbf: Optional[int] = Field(None, description="Not before timestamp")
    jti: Optional[str] = Field(None, description="JWT ID")

    email: Optional[str] = Field(None, description="User email address")
    name: Optional[str] = Field(None, description="User display name")

    model_config = {"extra": "allow"}
