"""Security utilities: bearer token validation for the identity provider's JWTs."""

import structlog
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from finledger.config import settings
from finledger.core.exceptions import UnauthorizedError
from finledger.schemas.user import AuthenticatedUser

logger = structlog.get_logger()


def decode_access_token(token: str) -> dict:
    """Decode and verify an access token signed with the shared secret."""
    try:
        return jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as e:
        logger.info("Rejected access token", reason=str(e))
        raise UnauthorizedError("Invalid access token") from e


# ── Auth Dependencies ─────────────────────────────
# auto_error=False so a missing header goes through our own envelope
security_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security_scheme),
) -> AuthenticatedUser:
    """FastAPI dependency: validate the bearer token and return the caller's identity."""
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Access token is required")

    payload = decode_access_token(credentials.credentials)

    user_id = payload.get("id")
    if not user_id:
        raise UnauthorizedError("Invalid access token")

    return AuthenticatedUser(
        id=int(user_id),
        email=payload.get("email", ""),
        full_name=payload.get("fullName", "") or payload.get("full_name", ""),
        role_id=payload.get("role_id"),
    )
