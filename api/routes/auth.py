"""Authentication endpoints."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Response
from pymongo.errors import DuplicateKeyError, PyMongoError

from ..auth import (
    EXPIRATION_DAYS,
    SESSION_COOKIE,
    create_access_token,
    hash_password,
    verify_password,
)
from ..database import get_db
from ..errors import AuthenticationFailed, EmailAlreadyRegistered, PersistenceError, ValidationError
from ..models import ActionResult, AuthSession, Credentials, Redirect, UserResponse
from ..models.common import utc_now
from ..observability import get_app_metrics, get_tracer
from ..validation import validate_credentials

# Initialize logger
logger = structlog.get_logger(__name__)

# Get tracer and metrics
tracer = get_tracer(__name__)
metrics = get_app_metrics()

router = APIRouter(prefix="/auth", tags=["authentication"])


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def _start_session(response: Response, user: dict) -> AuthSession:
    user_id = str(user["_id"])
    access_token = create_access_token(user_id=user_id, email=user["email"])
    response.set_cookie(
        SESSION_COOKIE,
        access_token,
        max_age=EXPIRATION_DAYS * 24 * 3600,
        httponly=True,
        samesite="lax",
    )
    return AuthSession(
        access_token=access_token,
        user=UserResponse(
            id=user_id,
            email=user["email"],
            status=user["status"],
            created_at=user["created_at"],
        ),
        redirect_to="/dashboard",
    )


@router.post("/signup", response_model=ActionResult[AuthSession], status_code=201)
async def sign_up(credentials: Credentials, response: Response):
    """
    Register a new user with email and password.

    Signs the user in straight away and points the client at the dashboard.
    """
    with tracer.start_as_current_span("sign_up") as span:
        validation = validate_credentials(credentials.email, credentials.password)
        if not validation.valid:
            metrics.auth_failures.add(1, {"reason": "validation"})
            raise ValidationError(validation.error)

        email = _normalize_email(credentials.email)
        span.set_attribute("user.email", email)
        logger.info("user_signup_attempt", email=email)

        db = get_db()
        user_doc = {
            "email": email,
            "password_hash": hash_password(credentials.password),
            "status": "active",
            "created_at": utc_now(),
        }

        try:
            taken = await db.users.find_one({"email": email}, {"_id": 1}) is not None
            if not taken:
                result = await db.users.insert_one(user_doc)
        except DuplicateKeyError:
            # Lost a race against a concurrent sign-up
            taken = True
        except PyMongoError as e:
            logger.error("signup_failed_store_error", email=email, error=str(e))
            raise PersistenceError("Failed to create account") from e

        if taken:
            logger.warning("signup_failed_duplicate_email", email=email)
            metrics.auth_failures.add(1, {"reason": "duplicate_email"})
            raise EmailAlreadyRegistered()

        user_doc["_id"] = result.inserted_id
        span.set_attribute("user.id", str(result.inserted_id))

        logger.info("user_signed_up", user_id=str(result.inserted_id), email=email)
        metrics.user_signups.add(1)

        return ActionResult(data=_start_session(response, user_doc))


@router.post("/login", response_model=ActionResult[AuthSession])
async def sign_in(credentials: Credentials, response: Response):
    """
    Sign in with email and password.

    Every failure, including a wrong password, reports the same message.
    """
    with tracer.start_as_current_span("sign_in") as span:
        validation = validate_credentials(credentials.email, credentials.password)
        if not validation.valid:
            metrics.auth_failures.add(1, {"reason": "validation"})
            raise ValidationError(validation.error)

        email = _normalize_email(credentials.email)
        span.set_attribute("user.email", email)
        logger.info("user_login_attempt", email=email)

        db = get_db()
        try:
            user = await db.users.find_one({"email": email})
        except PyMongoError as e:
            logger.error("login_failed_store_error", email=email, error=str(e))
            raise AuthenticationFailed() from e

        if not user or not verify_password(credentials.password, user.get("password_hash", "")):
            logger.warning("login_failed_bad_credentials", email=email)
            metrics.auth_failures.add(1, {"reason": "bad_credentials"})
            raise AuthenticationFailed()

        if user.get("status") != "active":
            logger.warning("login_failed_account_disabled", email=email)
            metrics.auth_failures.add(1, {"reason": "account_disabled"})
            raise AuthenticationFailed()

        span.set_attribute("user.id", str(user["_id"]))
        logger.info("user_logged_in", user_id=str(user["_id"]), email=email)
        metrics.user_logins.add(1)

        return ActionResult(data=_start_session(response, user))


@router.post("/logout", response_model=ActionResult[Redirect])
async def sign_out(response: Response):
    """Drop the session cookie. Bearer tokens simply stop being sent by the client."""
    response.delete_cookie(SESSION_COOKIE)
    logger.info("user_logged_out")
    return ActionResult(data=Redirect(redirect_to="/login"))
