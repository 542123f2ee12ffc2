"""
Caller identity.

Tokens are minted by the external identity provider; this module only turns a
verified bearer token into an opaque subject id (the provider's uid). Nothing
here issues tokens or manages users.
"""
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from loguru import logger

from orderdesk.core.config import settings

bearer_scheme = HTTPBearer(auto_error=False)

# Claim names that carry the subject, in order of preference
_SUBJECT_CLAIMS = ("uid", "user_id", "sub")


def decode_subject(token: str) -> str:
    """Verify ``token`` and return its subject id. Raises 401 on any failure."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid token",
        headers={"WWW-Authenticate": "Bearer"},
    )
    options = {"verify_aud": bool(settings.AUTH_AUDIENCE)}
    try:
        payload = jwt.decode(
            token,
            settings.AUTH_SECRET,
            algorithms=[settings.AUTH_ALGORITHM],
            audience=settings.AUTH_AUDIENCE or None,
            options=options,
        )
    except JWTError as exc:
        logger.warning(f"Token verification error: {exc}")
        raise credentials_exception

    for claim in _SUBJECT_CLAIMS:
        subject = payload.get(claim)
        if subject:
            return str(subject)
    raise credentials_exception


def get_current_uid(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    """FastAPI dependency: the verified subject id of the caller."""
    if not settings.AUTH_ENABLED:
        return settings.AUTH_DEV_SUBJECT
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No token provided",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return decode_subject(credentials.credentials)
