import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, Request
import redis.asyncio as redis
from redis.exceptions import RedisError

from app.core.config import Settings
from app.core.errors import IdentityRequired, NotFoundOrDenied, StoreError, ValidationFailed
from app.core.http import parse_body, validate_body
from app.core.redis_client import get_redis, get_refresh_token, revoke_tokens, store_refresh_token
from app.core.rest_client import RestClient, get_rest_client
from app.core.security import (
    TokenVerifier,
    create_refresh_token,
    get_caller_id,
    get_current_user_id,
    get_password_hash,
    get_settings,
    get_token_verifier,
    verify_password,
    verify_token,
)
from app.models.user import User
from app.crud.owned import utc_now
from app.schemas.auth import (
    ForgotPasswordRequest,
    LoginRequest,
    LoginResponse,
    RefreshRequest,
    RegisterRequest,
    RegisterResponse,
    Token,
)

logger = logging.getLogger(__name__)

router = APIRouter()

USERS = User.__tablename__
USER_FIELDS = "id,username,email,password"


def public_user(user: Dict[str, Any]) -> Dict[str, Any]:
    return {"id": user["id"], "username": user["username"], "email": user["email"]}


async def find_user(rest: RestClient, **filters) -> Optional[Dict[str, Any]]:
    rows = await rest.query(USERS, select=USER_FIELDS, filters=filters, limit=1)
    return rows[0] if rows else None


async def login_user(
    body: Dict[str, Any],
    rest: RestClient,
    redis_client: redis.Redis,
    verifier: TokenVerifier,
    config: Settings,
) -> Dict[str, Any]:
    """Check credentials and issue an access token plus a stored refresh token"""
    credentials = validate_body(LoginRequest, body, "Both username and password are required")
    if credentials.username:
        user = await find_user(rest, username=credentials.username)
    else:
        user = await find_user(rest, email=credentials.email)
    if not user or not verify_password(credentials.password, user.get("password")):
        logger.info("Login rejected for %s", credentials.username or credentials.email)
        raise IdentityRequired("Invalid credentials")

    refresh_token = create_refresh_token({"sub": user["id"]}, config=config)
    try:
        await store_refresh_token(
            redis_client, user["id"], refresh_token, config.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60
        )
    except RedisError as e:
        logger.warning("Refresh token not stored for user %s: %s", user["id"], e)
        refresh_token = None

    logger.info("User %s logged in", user["id"])
    return LoginResponse(
        message="Login successful",
        token=verifier.issue(user["id"]),
        refresh_token=refresh_token,
        user=public_user(user),
    ).model_dump()


async def register_user(body: Dict[str, Any], rest: RestClient) -> Dict[str, Any]:
    """Create a user; username and email must both be unused"""
    new = validate_body(RegisterRequest, body, "All fields are required")
    if await find_user(rest, username=new.username) or await find_user(rest, email=new.email):
        raise ValidationFailed("Username or email already exists")

    try:
        new_user = await rest.insert(
            USERS,
            {"username": new.username, "email": new.email, "password": get_password_hash(new.password)},
        )
    except StoreError as e:
        # unique index hit by a concurrent registration
        if e.status == 409:
            raise ValidationFailed("Username or email already exists")
        raise
    logger.info("Registered user %s", new_user.get("id"))
    return RegisterResponse(message="Registration successful!", user=public_user(new_user)).model_dump()


async def reset_password(body: Dict[str, Any], rest: RestClient) -> Dict[str, Any]:
    reset = validate_body(ForgotPasswordRequest, body, "Email and new password are required")
    user = await find_user(rest, email=reset.email)
    if not user:
        raise NotFoundOrDenied("Email not found")

    patch = {"password": get_password_hash(reset.newPassword), "last_updated": utc_now()}
    updated = await rest.update(USERS, user["id"], patch)
    if updated is None:
        raise StoreError("Password update failed", details="Update failed")
    logger.info("Password reset for user %s", user["id"])
    return {"message": "Password updated successfully", "success": True}


async def refresh_access_token(
    body: Dict[str, Any],
    redis_client: redis.Redis,
    verifier: TokenVerifier,
    config: Settings,
) -> Dict[str, Any]:
    refresh_token = validate_body(RefreshRequest, body, "refresh_token is required").refresh_token
    payload = verify_token(refresh_token, "refresh", config)
    stored = await get_refresh_token(redis_client, payload["sub"])
    if not stored or stored != refresh_token:
        raise IdentityRequired("Invalid refresh token")

    return Token(access_token=verifier.issue(payload["sub"])).model_dump()


async def logout_user(user_id: Optional[int], redis_client: redis.Redis) -> Dict[str, Any]:
    if user_id is None:
        raise IdentityRequired("Authentication required")
    await revoke_tokens(redis_client, user_id)
    return {"message": "Successfully logged out"}


@router.post("")
async def auth_action(
    request: Request,
    action: Optional[str] = Query(None),
    caller_id: Optional[int] = Depends(get_caller_id),
    rest: RestClient = Depends(get_rest_client),
    redis_client: redis.Redis = Depends(get_redis),
    verifier: TokenVerifier = Depends(get_token_verifier),
    config: Settings = Depends(get_settings),
):
    """Single entry point dispatching on ``?action=`` (default ``login``)"""
    body = await parse_body(request)
    action = action or body.get("action") or "login"

    if action == "login":
        return await login_user(body, rest, redis_client, verifier, config)
    if action == "register":
        return await register_user(body, rest)
    if action == "forgot-password":
        return await reset_password(body, rest)
    if action == "refresh":
        return await refresh_access_token(body, redis_client, verifier, config)
    if action == "logout":
        return await logout_user(caller_id, redis_client)
    raise ValidationFailed("Invalid action")


@router.post("/login", response_model=LoginResponse)
async def login(
    request: Request,
    rest: RestClient = Depends(get_rest_client),
    redis_client: redis.Redis = Depends(get_redis),
    verifier: TokenVerifier = Depends(get_token_verifier),
    config: Settings = Depends(get_settings),
):
    """Login with username (or email) and password"""
    return await login_user(await parse_body(request), rest, redis_client, verifier, config)


@router.post("/register", response_model=RegisterResponse)
async def register(request: Request, rest: RestClient = Depends(get_rest_client)):
    """Register a new user"""
    return await register_user(await parse_body(request), rest)


@router.post("/forgot-password")
async def forgot_password(request: Request, rest: RestClient = Depends(get_rest_client)):
    return await reset_password(await parse_body(request), rest)


@router.post("/refresh", response_model=Token)
async def refresh(
    request: Request,
    redis_client: redis.Redis = Depends(get_redis),
    verifier: TokenVerifier = Depends(get_token_verifier),
    config: Settings = Depends(get_settings),
):
    """Refresh access token using refresh token"""
    return await refresh_access_token(await parse_body(request), redis_client, verifier, config)


@router.post("/logout")
async def logout(
    user_id: int = Depends(get_current_user_id),
    redis_client: redis.Redis = Depends(get_redis),
):
    """Logout user by removing the stored refresh token"""
    return await logout_user(user_id, redis_client)
