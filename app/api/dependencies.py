"""
API Dependencies

Supabase session verification for the VocabWorld routes, plus the DB
dependency aliases routers import from here.

Access tokens are verified against the project's JWKS (ES256). Projects
still on the shared-secret signing scheme fall back to HS256 with
SUPABASE_JWT_SECRET. Tokens are never decoded unverified.
"""

import logging
from typing import Annotated, Optional

import jwt
from jwt import PyJWKClient
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.config.settings import get_settings


logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

TOKEN_AUDIENCE = "authenticated"
REQUIRED_CLAIMS = ["exp", "sub", "iss"]

# PyJWKClient caches signing keys between requests
_jwks_client: Optional[PyJWKClient] = None


def _get_jwks_client() -> PyJWKClient:
    global _jwks_client
    if _jwks_client is None:
        settings = get_settings()
        _jwks_client = PyJWKClient(
            f"{settings.supabase_url}/auth/v1/.well-known/jwks.json",
            cache_keys=True,
        )
    return _jwks_client


def _decode_with_jwks(token: str, issuer: str) -> dict:
    signing_key = _get_jwks_client().get_signing_key_from_jwt(token)
    return jwt.decode(
        token,
        signing_key.key,
        algorithms=["ES256"],
        issuer=issuer,
        audience=TOKEN_AUDIENCE,
        options={"require": REQUIRED_CLAIMS},
    )


def _decode_with_secret(token: str, secret: str, issuer: str) -> dict:
    """HS256 verification for the legacy shared JWT secret."""
    return jwt.decode(
        token,
        secret,
        algorithms=["HS256"],
        issuer=issuer,
        audience=TOKEN_AUDIENCE,
        options={"require": REQUIRED_CLAIMS},
    )


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    """
    Return the Supabase user id (``sub``) of the bearer token.

    Raises:
        HTTPException 401: token missing, expired or not verifiable.
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authorization token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = credentials.credentials
    settings = get_settings()
    issuer = f"{settings.supabase_url}/auth/v1"

    payload: Optional[dict] = None

    try:
        payload = _decode_with_jwks(token, issuer)
    except (jwt.exceptions.PyJWKClientError, jwt.InvalidTokenError) as jwks_err:
        logger.debug(f"JWKS verification failed, trying HS256: {jwks_err}")

    if payload is None and settings.supabase_jwt_secret:
        try:
            payload = _decode_with_secret(token, settings.supabase_jwt_secret, issuer)
        except jwt.ExpiredSignatureError:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Token has expired",
            )
        except jwt.InvalidTokenError as e:
            logger.warning(f"HS256 verification failed: {e}")

    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or unverifiable token",
        )

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token: missing user ID",
        )

    return user_id


async def get_optional_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[str]:
    """Same as get_current_user_id, but anonymous callers get ``None``."""
    if not credentials:
        return None

    try:
        return await get_current_user_id(credentials)
    except HTTPException:
        return None


# Declare ahead of repository dependencies: FastAPI resolves them in
# signature order, so a missing token answers 401 before a session opens.
CurrentUserId = Annotated[str, Depends(get_current_user_id)]


# Routers import the DB dependency aliases from here
from app.infrastructure.db.dependencies import (  # noqa: E402, F401
    SessionDep,
    UserProfileRepoDep,
    VocabularyRepoDep,
    ProgressRepoDep,
)
