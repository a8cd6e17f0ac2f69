from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from collabill.auth.passwords import hash_password, verify_password
from collabill.auth.tokens import (
    build_link,
    hash_one_time_token,
    issue_access_token,
    new_one_time_token,
    now_utc,
    password_reset_expiry,
)
from collabill.config import settings
from collabill.db import get_db
from collabill.models.tokens import PasswordResetToken
from collabill.models.user import User
from collabill.ratelimit import rate_limit
from collabill.schemas.auth import (
    AccessTokenOut,
    ForgotPasswordIn,
    LinkIssuedOut,
    MessageOut,
    ResetPasswordIn,
    SignInIn,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

FORGOT_PASSWORD_MESSAGE = "If an account exists, an email has been sent."

@router.post("/sign-in", response_model=AccessTokenOut)
def sign_in(
    payload: SignInIn,
    db: Session = Depends(get_db),
    _: None = Depends(
        rate_limit(
            "auth:sign_in",
            limit_per_window=settings.rate_limit_sign_in_per_min,
            window_seconds=60,
        )
    ),
) -> AccessTokenOut:
    email = payload.email.lower().strip()

    user = db.scalar(select(User).where(User.email == email))
    # same answer for unknown email and wrong password
    if user is None or not verify_password(payload.password, user.password_hash):
        logger.info("sign-in rejected for %s", email)
        raise HTTPException(status_code=401, detail="invalid credentials")

    return AccessTokenOut(access_token=issue_access_token(user.id))

@router.post("/forgot-password", response_model=LinkIssuedOut)
def forgot_password(
    payload: ForgotPasswordIn,
    db: Session = Depends(get_db),
    _: None = Depends(
        rate_limit(
            "auth:forgot_password",
            limit_per_window=settings.rate_limit_forgot_password_per_min,
            window_seconds=60,
        )
    ),
) -> LinkIssuedOut:
    email = payload.email.lower().strip()

    user = db.scalar(select(User).where(User.email == email))
    if user is None:
        return LinkIssuedOut(message=FORGOT_PASSWORD_MESSAGE)

    token = new_one_time_token()
    db.add(
        PasswordResetToken(
            token_hash=hash_one_time_token(token),
            user_id=user.id,
            expires_at=password_reset_expiry(),
        )
    )
    db.commit()

    logger.info("password reset link issued for user %s: %s", user.id, build_link("/reset-password", token))

    if settings.app_env == "prod":
        return LinkIssuedOut(message=FORGOT_PASSWORD_MESSAGE)

    return LinkIssuedOut(message=FORGOT_PASSWORD_MESSAGE, token=token)

@router.post("/reset-password", response_model=MessageOut)
def reset_password(
    payload: ResetPasswordIn,
    db: Session = Depends(get_db),
    _: None = Depends(
        rate_limit(
            "auth:reset_password",
            limit_per_window=settings.rate_limit_reset_password_per_min,
            window_seconds=60,
        )
    ),
) -> MessageOut:
    now = now_utc()

    # atomic single-use + expiry gate
    stmt = (
        delete(PasswordResetToken)
        .where(PasswordResetToken.token_hash == hash_one_time_token(payload.token.strip()))
        .where(PasswordResetToken.expires_at > now)
        .returning(PasswordResetToken.user_id)
    )
    user_id = db.scalar(stmt)
    if user_id is None:
        raise HTTPException(status_code=400, detail="Invalid or expired token")

    db.execute(
        update(User)
        .where(User.id == user_id)
        .values(password_hash=hash_password(payload.password))
    )
    db.commit()

    logger.info("password reset completed for user %s", user_id)
    return MessageOut(message="Password updated successfully")
