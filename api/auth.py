"""Authentication utilities: password hashing, JWT tokens and identity resolution."""

from __future__ import annotations

import hashlib
import hmac
import os
import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import structlog
from bson import ObjectId
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from opentelemetry import trace
from pymongo.errors import PyMongoError

from .database import get_db
from .errors import Unauthenticated
from .models.common import parse_object_id

# Initialize logger
logger = structlog.get_logger(__name__)


# JWT Configuration
SECRET_KEY = os.getenv("JWT_SECRET_KEY", "your-secret-key-here-change-in-production")
ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
EXPIRATION_DAYS = int(os.getenv("JWT_EXPIRATION_DAYS", "30"))

SESSION_COOKIE = "access_token"
PASSWORD_ITERATIONS = 240_000

security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Identity:
    """The authenticated principal a request acts as.

    Passed explicitly to every repository; nothing reads it from global state.
    """

    user_id: str
    email: str

    @property
    def object_id(self) -> ObjectId:
        return ObjectId(self.user_id)


def hash_password(password: str) -> str:
    """Hash a password as ``pbkdf2_sha256$iterations$salt$digest``."""
    salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), PASSWORD_ITERATIONS)
    return f"pbkdf2_sha256${PASSWORD_ITERATIONS}${salt}${digest.hex()}"


def verify_password(password: str, encoded: str) -> bool:
    try:
        algorithm, iterations, salt, expected = encoded.split("$")
    except ValueError:
        return False
    if algorithm != "pbkdf2_sha256":
        return False

    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), int(iterations))
    return hmac.compare_digest(digest.hex(), expected)


def create_access_token(user_id: str, email: str) -> str:
    """
    Create a JWT access token for a user.

    Args:
        user_id: The user's ID
        email: The user's email

    Returns:
        Encoded JWT token
    """
    tracer = trace.get_tracer(__name__)

    with tracer.start_as_current_span("create_access_token") as span:
        span.set_attribute("user.id", user_id)

        expire = datetime.now(UTC) + timedelta(days=EXPIRATION_DAYS)
        to_encode = {
            "sub": user_id,  # Subject (user_id)
            "email": email,
            "exp": expire,
        }
        encoded_jwt = jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)

        logger.debug("jwt_token_created", user_id=user_id)

        return encoded_jwt


def decode_access_token(token: str) -> dict | None:
    """
    Decode and verify a JWT token.

    Returns:
        Decoded token payload or None if invalid
    """
    tracer = trace.get_tracer(__name__)

    with tracer.start_as_current_span("decode_access_token") as span:
        try:
            payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        except JWTError as e:
            logger.warning("jwt_token_decode_failed", error=str(e), error_type=type(e).__name__)
            span.set_attribute("error", True)
            span.set_attribute("error.type", type(e).__name__)
            return None

        span.set_attribute("user.id", payload.get("sub") or "")
        return payload


def token_from_request(
    request: Request, credentials: HTTPAuthorizationCredentials | None = None
) -> str | None:
    """Bearer header first, then the browser session cookie."""
    if credentials is not None and credentials.credentials:
        return credentials.credentials

    # Middleware runs before the security dependency and reads the header itself
    scheme, _, token = request.headers.get("authorization", "").partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return token.strip()

    return request.cookies.get(SESSION_COOKIE)


def identity_from_token(token: str | None) -> Identity | None:
    """Resolve a token to an identity without touching the database."""
    if not token:
        return None

    payload = decode_access_token(token)
    if payload is None:
        return None

    user_id = payload.get("sub")
    if not user_id or parse_object_id(user_id) is None:
        logger.warning("auth_failed_missing_user_id")
        return None

    return Identity(user_id=user_id, email=payload.get("email", ""))


async def load_identity(token: str | None) -> Identity:
    """
    Resolve a token to the identity of an existing, active user.

    Raises:
        Unauthenticated: Missing or invalid token, unknown user or disabled account
    """
    identity = identity_from_token(token)
    if identity is None:
        raise Unauthenticated()

    db = get_db()
    try:
        user = await db.users.find_one({"_id": identity.object_id}, {"status": 1})
    except PyMongoError as e:
        logger.error("auth_db_error", user_id=identity.user_id, error=str(e))
        raise Unauthenticated() from e

    if user is None:
        logger.warning("auth_failed_user_not_found", user_id=identity.user_id)
        raise Unauthenticated()

    if user.get("status") != "active":
        logger.warning("auth_failed_account_disabled", user_id=identity.user_id)
        raise Unauthenticated("User account is disabled")

    return identity


async def get_identity(
    request: Request, credentials: HTTPAuthorizationCredentials | None = Depends(security)
) -> Identity:
    """
    Dependency resolving the caller's identity.

    The token must be valid and name an existing, active user. Any failure
    is reported as ``Unauthenticated``.
    """
    tracer = trace.get_tracer(__name__)

    with tracer.start_as_current_span("get_identity") as span:
        try:
            identity = await load_identity(token_from_request(request, credentials))
        except Unauthenticated:
            logger.info("auth_no_identity", path=request.url.path)
            span.set_attribute("auth.failed", True)
            raise

        span.set_attribute("user.id", identity.user_id)
        logger.debug("auth_user_authenticated", user_id=identity.user_id)

        return identity
