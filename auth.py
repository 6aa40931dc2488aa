import logging
from datetime import timedelta

from fastapi import Request
from fastapi.responses import JSONResponse

from config import MAX_PASSWORD_BYTES, MIN_PASSWORD_LENGTH, ROLES, get_settings
from database import UniqueViolation, create_user, get_user_by_email, get_user_by_email_and_role
from errors import (
    Conflict,
    InvalidCredentials,
    Unauthenticated,
    ValidationError,
    error_content,
)
from security import Principal, hash_password, issue_token, verify_password, verify_token

logger = logging.getLogger(__name__)

# Paths reachable without a bearer token
PUBLIC_PATHS = {
    "/",
    "/docs",
    "/redoc",
    "/openapi.json",
    "/api/health",
    "/api/auth/login",
    "/api/auth/register",
    "/api/doctors",
}


def token_lifetime() -> timedelta:
    return timedelta(minutes=get_settings().access_token_expire_minutes)


def create_access_token(user: dict) -> str:
    """Create JWT access token for a stored user"""
    principal = Principal(subject_id=user["id"], email=user["email"], role=user["role"])
    return issue_token(principal, token_lifetime())


def _require_fields(**fields):
    missing = [name for name, value in fields.items() if value is None or value == ""]
    if missing:
        raise ValidationError(f"All fields are required (missing: {', '.join(missing)})")


def register_user(name: str, email: str, password: str, role: str, **profile):
    """Create an identity and log it straight in.

    Returns the public user fields and a fresh access token.
    """
    _require_fields(name=name, email=email, password=password, role=role)
    if role not in ROLES:
        raise ValidationError(f"Invalid role. Must be one of: {', '.join(ROLES)}")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")

    # Fast path; the UNIQUE constraint below is what actually decides
    if get_user_by_email(email):
        raise Conflict("User already exists")

    try:
        user = create_user(name, email, hash_password(password), role, **profile)
    except UniqueViolation:
        raise Conflict("User already exists")

    logger.info("Registered %s %s", role, user["id"])
    return user, create_access_token(user)


def authenticate_user(email: str, password: str, role: str):
    """Authenticate user against the (email, role) login key"""
    # Over-long passwords can never have been stored, so they simply fail to match
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        return None
    user = get_user_by_email_and_role(email, role)
    if user and verify_password(password, user["password_hash"]):
        return user
    return None


def login_user(email: str, password: str, role: str):
    """Verify credentials and issue an access token"""
    _require_fields(email=email, password=password, role=role)

    user = authenticate_user(email, password, role)
    if not user:
        logger.info("Rejected login attempt for role %s", role)
        raise InvalidCredentials()

    user.pop("password_hash")
    logger.info("Logged in %s %s", user["role"], user["id"])
    return user, create_access_token(user)


def principal_from_header(auth_header: str) -> Principal:
    """Resolve an Authorization header value to a Principal"""
    # Auth scheme names are case-insensitive
    if not auth_header or auth_header[:7].lower() != "bearer ":
        raise Unauthenticated("Missing or invalid authorization header")

    token = auth_header[7:].strip()
    if not token:
        raise Unauthenticated("Missing or invalid authorization header")

    return verify_token(token).principal


def get_current_principal(request: Request) -> Principal:
    """Get the principal attached by jwt_middleware"""
    principal = getattr(request.state, "principal", None)
    if principal is None:
        raise Unauthenticated("Not authenticated")
    return principal


async def jwt_middleware(request: Request, call_next):
    """JWT Authentication Middleware

    Token claims are trusted for the token's lifetime; the identity is not
    re-read from the database on each request.
    """
    # Skip auth for public endpoints
    if request.url.path in PUBLIC_PATHS or request.method == "OPTIONS":
        return await call_next(request)

    try:
        principal = principal_from_header(request.headers.get("Authorization"))
    except Unauthenticated as exc:
        logger.debug("Rejected %s %s: %s", request.method, request.url.path, exc.code)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_content(exc),
            headers={"WWW-Authenticate": "Bearer"},
        )

    # Add principal to request state
    request.state.principal = principal
    return await call_next(request)
