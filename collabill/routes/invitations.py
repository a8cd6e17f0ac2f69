import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from collabill.audit import record_audit
from collabill.auth.passwords import hash_password
from collabill.auth.tokens import (
    build_link,
    hash_one_time_token,
    invitation_expiry,
    new_one_time_token,
    now_utc,
)
from collabill.config import settings
from collabill.db import get_db
from collabill.models.tokens import Invitation
from collabill.models.user import User, UserRole
from collabill.rbac.deps import require_perm
from collabill.schemas.auth import LinkIssuedOut, MessageOut
from collabill.schemas.invitations import AcceptInvitationIn, InvitationOut, InviteIn

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/invitations", tags=["invitations"])

def _find_live_invitation(db: Session, token: str) -> Invitation | None:
    return db.scalar(
        select(Invitation).where(
            Invitation.token_hash == hash_one_time_token(token.strip()),
            Invitation.expires_at > now_utc(),
        )
    )

@router.post("", response_model=LinkIssuedOut)
def invite_user(
    payload: InviteIn,
    inviter: User = Depends(require_perm("invitations:create")),
    db: Session = Depends(get_db),
) -> LinkIssuedOut:
    email = payload.email.lower().strip()

    if db.scalar(select(User.id).where(User.email == email)) is not None:
        raise HTTPException(status_code=409, detail="User already exists")

    token = new_one_time_token()

    # re-inviting an address replaces its pending invitation
    invitation = db.scalar(select(Invitation).where(Invitation.email == email).with_for_update())
    if invitation is None:
        invitation = Invitation(email=email)
        db.add(invitation)

    invitation.token_hash = hash_one_time_token(token)
    invitation.role = payload.role
    invitation.expires_at = invitation_expiry()
    invitation.created_at = now_utc()
    record_audit(db, actor_id=inviter.id, action="invitation.sent", entity="invitation", detail=email)
    db.commit()

    logger.info(
        "invitation issued to %s as %s: %s",
        email,
        payload.role.value,
        build_link("/create-password", token),
    )

    message = "Invitation sent successfully"
    if settings.app_env == "prod":
        return LinkIssuedOut(message=message)
    return LinkIssuedOut(message=message, token=token)

@router.get("/{token}", response_model=InvitationOut)
def get_invitation(token: str, db: Session = Depends(get_db)) -> InvitationOut:
    invitation = _find_live_invitation(db, token)
    if invitation is None:
        raise HTTPException(status_code=404, detail="invitation not found or expired")
    return InvitationOut(email=invitation.email, role=invitation.role, expires_at=invitation.expires_at)

@router.post("/accept", response_model=MessageOut, status_code=201)
def accept_invitation(payload: AcceptInvitationIn, db: Session = Depends(get_db)) -> MessageOut:
    invitation = _find_live_invitation(db, payload.token)
    if invitation is None:
        raise HTTPException(status_code=400, detail="Invalid or expired invitation token")

    if db.scalar(select(User.id).where(User.email == invitation.email)) is not None:
        raise HTTPException(status_code=409, detail="A user with this email already exists")

    user = User(
        email=invitation.email,
        name=payload.name.strip(),
        password_hash=hash_password(payload.password),
    )
    db.add(user)
    db.flush()

    db.add(UserRole(user_id=user.id, role=invitation.role))
    db.execute(delete(Invitation).where(Invitation.id == invitation.id))
    db.commit()

    logger.info("invitation accepted, user %s created as %s", user.id, invitation.role.value)
    return MessageOut(message="Account created successfully")
