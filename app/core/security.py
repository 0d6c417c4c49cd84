"""
Password hashing, signed tokens and caller identity.

Caller identity is resolved from the ``Authorization`` header through a
pluggable ``TokenVerifier``. ``JWTTokenVerifier`` checks signed HS256 tokens
and is the default. ``LegacyTokenVerifier`` understands the old
``jwt-token-<id>`` placeholder, which carries no signature and must only be
enabled for migrating existing clients.
"""

import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Protocol

from fastapi import Depends, Request
from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.config import Settings, settings
from app.core.errors import IdentityRequired

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

LEGACY_TOKEN_PATTERN = re.compile(r"jwt-token-(\d+)")
BEARER_PREFIX = re.compile(r"^Bearer\s+", re.IGNORECASE)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # stored value is not a recognised hash
        return False


def _create_token(
    data: dict, token_type: str, expires_delta: timedelta, config: Settings
) -> str:
    to_encode = data.copy()
    if "sub" in to_encode:
        to_encode["sub"] = str(to_encode["sub"])
    to_encode.update({"exp": datetime.now(timezone.utc) + expires_delta, "type": token_type})
    return jwt.encode(to_encode, config.SECRET_KEY, algorithm=config.ALGORITHM)


def create_access_token(
    data: dict, expires_delta: Optional[timedelta] = None, config: Settings = settings
) -> str:
    """Signed access token; ``data["sub"]`` is the user id"""
    return _create_token(
        data,
        "access",
        expires_delta or timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES),
        config,
    )


def create_refresh_token(data: dict, config: Settings = settings) -> str:
    return _create_token(
        data, "refresh", timedelta(days=config.REFRESH_TOKEN_EXPIRE_DAYS), config
    )


def verify_token(token: str, token_type: str = "access", config: Settings = settings) -> Dict[str, Any]:
    """Decode a signed token, raising ``IdentityRequired`` when it is unusable"""
    try:
        payload = jwt.decode(token, config.SECRET_KEY, algorithms=[config.ALGORITHM])
    except JWTError:
        raise IdentityRequired("Invalid or expired token")

    if payload.get("type") != token_type:
        raise IdentityRequired("Invalid token type")
    try:
        payload["sub"] = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise IdentityRequired("Invalid token subject")
    return payload


class TokenVerifier(Protocol):
    def verify(self, token: str) -> Dict[str, Any]:
        """Return the claims of ``token`` (with an integer ``sub``) or raise ``IdentityRequired``"""

    def issue(self, user_id: int) -> str:
        """Return an access token for ``user_id``"""


class JWTTokenVerifier:
    def __init__(self, config: Settings = settings):
        self.config = config

    def verify(self, token: str) -> Dict[str, Any]:
        return verify_token(token, "access", self.config)

    def issue(self, user_id: int) -> str:
        return create_access_token({"sub": user_id}, config=self.config)


class LegacyTokenVerifier:
    """Accepts ``jwt-token-<id>``. Anyone who knows an id can impersonate it."""

    def verify(self, token: str) -> Dict[str, Any]:
        match = LEGACY_TOKEN_PATTERN.fullmatch(token)
        if not match:
            raise IdentityRequired("Invalid token")
        return {"sub": int(match.group(1))}

    def issue(self, user_id: int) -> str:
        return f"jwt-token-{user_id}"


def build_token_verifier(config: Settings) -> TokenVerifier:
    if config.TOKEN_SCHEME == "legacy":
        return LegacyTokenVerifier()
    return JWTTokenVerifier(config)


def get_token_verifier() -> TokenVerifier:
    return build_token_verifier(settings)


def get_settings() -> Settings:
    return settings


def resolve_caller_id(
    request: Request, verifier: TokenVerifier, allow_query_user_id: bool = False
) -> Optional[int]:
    """Caller id from the bearer token, else from ``?user_id=`` when allowed.

    Returns ``None`` when neither source yields a number.
    """
    auth_header = request.headers.get("authorization")
    if auth_header:
        token = BEARER_PREFIX.sub("", auth_header).strip()
        try:
            return verifier.verify(token)["sub"]
        except IdentityRequired as e:
            logger.debug("Rejected bearer token: %s", e.message)

    if allow_query_user_id:
        raw = request.query_params.get("user_id")
        if raw:
            try:
                return int(raw)
            except ValueError:
                return None
    return None


async def get_caller_id(
    request: Request,
    verifier: TokenVerifier = Depends(get_token_verifier),
    config: Settings = Depends(get_settings),
) -> Optional[int]:
    return resolve_caller_id(request, verifier, config.ALLOW_QUERY_USER_ID)


async def get_current_user_id(caller_id: Optional[int] = Depends(get_caller_id)) -> int:
    """Caller id, or 401 when the request carries no identity"""
    if caller_id is None:
        raise IdentityRequired("Authentication required")
    return caller_id
