"""
Auth core.

JWT bearer authentication with Authlib. Store owners carry their tenant id
in the token; platform operators carry ``is_platform_admin`` and may act on
any tenant.
"""

import secrets
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Annotated, Any, cast

import structlog
from authlib.jose import JoseError, jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from fleeting.platform.settings import settings

logger = structlog.get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


class TokenType(str, Enum):
    """Token types."""

    ACCESS = "access"
    REFRESH = "refresh"


class UserInfo(BaseModel):
    """User information from auth.

    ``tenant_id`` is None for platform admins, who are not bound to a store.
    """

    model_config = ConfigDict(extra="forbid")

    user_id: str
    email: EmailStr | None = None
    username: str | None = None
    roles: list[str] = Field(default_factory=list)
    tenant_id: str | None = None
    is_platform_admin: bool = Field(
        default=False, description="Platform admin with cross-tenant access"
    )


class JWTService:
    """JWT issue and verification using Authlib."""

    def __init__(self, secret: str | None = None, algorithm: str | None = None):
        self.secret = secret or settings.jwt.secret_key
        self.algorithm = algorithm or settings.jwt.algorithm
        self.header = {"alg": self.algorithm}

    def create_access_token(
        self,
        subject: str,
        additional_claims: dict[str, Any] | None = None,
        expire_minutes: int | None = None,
    ) -> str:
        """Create access token."""
        data: dict[str, Any] = {"sub": subject, "type": TokenType.ACCESS.value}
        if additional_claims:
            data.update(additional_claims)

        minutes = expire_minutes or settings.jwt.access_token_expire_minutes
        return self._create_token(data, timedelta(minutes=minutes))

    def _create_token(self, data: dict[str, Any], expires_delta: timedelta) -> str:
        to_encode = data.copy()
        now = datetime.now(UTC)
        to_encode.update(
            {
                "exp": int((now + expires_delta).timestamp()),
                "iat": int(now.timestamp()),
                "iss": settings.jwt.issuer,
                "jti": secrets.token_urlsafe(16),
            }
        )
        token = jwt.encode(self.header, to_encode, self.secret)
        return token.decode("utf-8") if isinstance(token, bytes) else token

    def verify_token(self, token: str, expected_type: TokenType | None = None) -> dict[str, Any]:
        """Verify and decode a token.

        Raises:
            HTTPException: If the token is invalid, expired or of the wrong type
        """
        try:
            claims_raw = jwt.decode(token, self.secret)
            claims_raw.validate()
            claims = cast(dict[str, Any], dict(claims_raw))

            if expected_type:
                token_type = claims.get("type")
                if token_type != expected_type.value:
                    raise JoseError(
                        f"Invalid token type. Expected {expected_type.value}, got {token_type}"
                    )
            return claims
        except JoseError as e:
            logger.info("auth.token_rejected", reason=str(e))
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid or expired token",
                headers={"WWW-Authenticate": "Bearer"},
            ) from e


jwt_service = JWTService()


def _claims_to_user_info(claims: dict[str, Any]) -> UserInfo:
    """Convert JWT claims to UserInfo."""
    return UserInfo(
        user_id=claims.get("sub", ""),
        email=claims.get("email"),
        username=claims.get("username"),
        roles=claims.get("roles", []),
        tenant_id=claims.get("tenant_id"),
        is_platform_admin=claims.get("is_platform_admin", False),
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> UserInfo:
    """Get current authenticated user from the Bearer token."""
    if credentials and credentials.credentials:
        claims = jwt_service.verify_token(credentials.credentials, TokenType.ACCESS)
        return _claims_to_user_info(claims)

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
        headers={"WWW-Authenticate": "Bearer"},
    )


async def require_platform_admin(
    current_user: Annotated[UserInfo, Depends(get_current_user)],
) -> UserInfo:
    """Allow only platform operators (plan catalog and payment verification)."""
    if not current_user.is_platform_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Platform administrator access required",
        )
    return current_user


def create_access_token(user_id: str, **kwargs: Any) -> str:
    """Create access token."""
    return jwt_service.create_access_token(user_id, kwargs)


__all__ = [
    "TokenType",
    "UserInfo",
    "JWTService",
    "jwt_service",
    "get_current_user",
    "require_platform_admin",
    "create_access_token",
]
