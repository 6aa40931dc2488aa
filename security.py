import time
from dataclasses import dataclass
from datetime import timedelta

import bcrypt
from jose import JWTError, jwt

from config import ALGORITHM, PATIENT, PROVIDER, ROLES, get_settings
from errors import InvalidToken, TokenExpired


@dataclass(frozen=True)
class Principal:
    """Identity resolved from a verified token"""
    subject_id: str
    email: str
    role: str

    @property
    def is_provider(self) -> bool:
        return self.role == PROVIDER

    @property
    def is_patient(self) -> bool:
        return self.role == PATIENT


@dataclass(frozen=True)
class TokenClaims:
    principal: Principal
    issued_at: int
    expires_at: float


def hash_password(password: str) -> str:
    """Hash a password with bcrypt using a fresh salt"""
    rounds = get_settings().bcrypt_rounds
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a password against a bcrypt digest.

    Returns False on mismatch. A digest that is not a bcrypt hash raises
    ValueError instead.
    """
    return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))


def issue_token(principal: Principal, ttl: timedelta) -> str:
    """Create signed JWT access token"""
    now = time.time()
    to_encode = {
        "sub": principal.subject_id,
        "email": principal.email,
        "role": principal.role,
        "iat": int(now),
        # Sub-second precision so short lifetimes are not cut to zero
        "exp": now + ttl.total_seconds(),
    }
    return jwt.encode(to_encode, get_settings().jwt_secret_key, algorithm=ALGORITHM)


def verify_token(token: str) -> TokenClaims:
    """Validate a JWT and return its claims.

    Raises InvalidToken for bad signatures, malformed tokens and missing
    claims, TokenExpired once the expiry time has been reached.
    """
    try:
        # Expiry is checked below so that exp == now already counts as expired
        payload = jwt.decode(
            token,
            get_settings().jwt_secret_key,
            algorithms=[ALGORITHM],
            options={"verify_exp": False},
        )
    except JWTError:
        raise InvalidToken("Invalid token")

    try:
        principal = Principal(
            subject_id=payload["sub"],
            email=payload["email"],
            role=payload["role"],
        )
        issued_at = int(payload["iat"])
        expires_at = float(payload["exp"])
    except (KeyError, TypeError, ValueError):
        raise InvalidToken("Invalid token")

    if principal.role not in ROLES:
        raise InvalidToken("Invalid token")
    if time.time() >= expires_at:
        raise TokenExpired("Token has expired")

    return TokenClaims(principal=principal, issued_at=issued_at, expires_at=expires_at)
