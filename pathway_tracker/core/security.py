"""
Security utilities for JWT authentication and password hashing
"""

import hashlib
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import HTTPException, status
from joserfc import jwt as jose_jwt
from joserfc.errors import JoseError
from joserfc.jwk import OctKey
from pwdlib import PasswordHash
from pwdlib.exceptions import UnknownHashError
from pwdlib.hashers.bcrypt import BcryptHasher
import structlog

from pathway_tracker.core.config import settings

logger = structlog.get_logger()

pwd_context = PasswordHash((BcryptHasher(rounds=settings.BCRYPT_ROUNDS),))

ALGORITHM = settings.JWT_ALGORITHM
ACCESS_TOKEN_EXPIRE_MINUTES = settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES
REFRESH_TOKEN_EXPIRE_DAYS = settings.JWT_REFRESH_TOKEN_EXPIRE_DAYS

_access_key = OctKey.import_key(settings.JWT_SECRET_KEY)
_refresh_key = OctKey.import_key(settings.JWT_REFRESH_SECRET_KEY)

_claims_registry = jose_jwt.JWTClaimsRegistry(
    sub={"essential": True},
    exp={"essential": True},
    iss={"essential": True, "value": settings.JWT_ISSUER},
)


@dataclass(frozen=True)
class TokenPayload:
    subject: str
    claims: dict

    @property
    def email(self) -> Optional[str]:
        return self.claims.get("email")

    @property
    def role(self) -> Optional[str]:
        return self.claims.get("role")


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str
    expires_in: int


def _credentials_exception(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _encode(claims: dict, key: OctKey, expires_delta: timedelta) -> str:
    now = datetime.now(timezone.utc)
    to_encode = {
        **claims,
        "iss": settings.JWT_ISSUER,
        "iat": int(now.timestamp()),
        "exp": int((now + expires_delta).timestamp()),
    }
    return jose_jwt.encode({"alg": ALGORITHM}, to_encode, key)


def _decode(token: str, key: OctKey, token_type: str) -> TokenPayload:
    try:
        token_obj = jose_jwt.decode(token, key, algorithms=[ALGORITHM])
        _claims_registry.validate(token_obj.claims)
    except (JoseError, ValueError) as exc:
        logger.warning("JWT verification failed", error=str(exc), type=token_type)
        raise _credentials_exception("Invalid or expired token")

    payload = token_obj.claims
    if payload.get("type") != token_type:
        logger.warning("Invalid token type", expected=token_type, actual=payload.get("type"))
        raise _credentials_exception("Invalid token type")

    return TokenPayload(subject=str(payload["sub"]), claims=dict(payload))


def create_access_token(
    subject: str,
    email: str,
    role: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create JWT access token carrying the principal claims

    Args:
        subject: User ID
        email: User email
        role: User role name
        expires_delta: Custom expiration time

    Returns:
        Encoded JWT token
    """
    expires_delta = expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    token = _encode(
        {"sub": str(subject), "email": email, "role": role, "type": "access"},
        _access_key,
        expires_delta,
    )
    logger.debug("Access token created", subject=str(subject))
    return token


def create_refresh_token(subject: str, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create JWT refresh token signed with the refresh secret

    Args:
        subject: User ID
        expires_delta: Custom expiration time

    Returns:
        Encoded JWT refresh token
    """
    expires_delta = expires_delta or timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS)
    token = _encode(
        {"sub": str(subject), "type": "refresh", "jti": uuid.uuid4().hex},
        _refresh_key,
        expires_delta,
    )
    logger.debug("Refresh token created", subject=str(subject))
    return token


def create_token_pair(subject: str, email: str, role: str) -> TokenPair:
    return TokenPair(
        access_token=create_access_token(subject, email, role),
        refresh_token=create_refresh_token(subject),
        expires_in=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )


def decode_access_token(token: str) -> TokenPayload:
    """
    Verify an access token

    Raises:
        HTTPException: 401 if the token is invalid, expired or not an access token
    """
    return _decode(token, _access_key, "access")


def decode_refresh_token(token: str) -> TokenPayload:
    """
    Verify a refresh token

    Raises:
        HTTPException: 401 if the token is invalid, expired or not a refresh token
    """
    return _decode(token, _refresh_key, "refresh")


def hash_token(token: str) -> str:
    """Digest stored in place of the raw refresh token"""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _truncate_for_bcrypt(password: str) -> str:
    # Bcrypt has a 72 byte limit
    password_bytes = password.encode("utf-8")
    if len(password_bytes) > 72:
        logger.warning("Password truncated to 72 bytes for bcrypt")
        return password_bytes[:72].decode("utf-8", errors="ignore")
    return password


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a password against its hash

    Returns:
        True if password matches, False otherwise
    """
    try:
        return pwd_context.verify(_truncate_for_bcrypt(plain_password), hashed_password)
    except (UnknownHashError, ValueError) as e:
        logger.error("Password verification error", error=str(e))
        return False


def get_password_hash(password: str) -> str:
    """
    Hash a password

    Args:
        password: Plain text password

    Returns:
        Hashed password
    """
    return pwd_context.hash(_truncate_for_bcrypt(password))
