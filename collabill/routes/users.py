import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from collabill.auth.deps import get_current_user
from collabill.db import get_db
from collabill.models.user import CollaboratorRate, User, UserRole
from collabill.rbac.deps import get_user_roles, require_perm
from collabill.schemas.users import RatesIn, RatesOut, UserOut

router = APIRouter(prefix="/users", tags=["users"])

def _user_out(user: User, roles) -> UserOut:
    return UserOut(
        id=user.id,
        email=user.email,
        name=user.name,
        roles=sorted(roles, key=lambda r: r.value),
        created_at=user.created_at,
    )

@router.get("/me", response_model=UserOut)
def get_me(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> UserOut:
    return _user_out(user, get_user_roles(db, user.id))

@router.get("", response_model=list[UserOut])
def list_users(
    _: User = Depends(require_perm("users:list")),
    db: Session = Depends(get_db),
) -> list[UserOut]:
    users = db.scalars(select(User).order_by(User.name.asc())).all()

    roles_by_user: dict[uuid.UUID, set] = {}
    for r in db.scalars(select(UserRole)).all():
        roles_by_user.setdefault(r.user_id, set()).add(r.role)

    return [_user_out(u, roles_by_user.get(u.id, set())) for u in users]

@router.put("/{user_id}/rates", response_model=RatesOut)
def set_rates(
    user_id: uuid.UUID,
    payload: RatesIn,
    _: User = Depends(require_perm("users:rates")),
    db: Session = Depends(get_db),
) -> RatesOut:
    if db.get(User, user_id) is None:
        raise HTTPException(status_code=404, detail="user not found")

    rate = db.get(CollaboratorRate, user_id)
    if rate is None:
        rate = CollaboratorRate(user_id=user_id)
        db.add(rate)

    rate.daily_rate = payload.daily_rate
    rate.rate_xs = payload.rate_xs
    rate.rate_s = payload.rate_s
    rate.rate_m = payload.rate_m
    rate.rate_l = payload.rate_l
    db.commit()
    db.refresh(rate)

    return RatesOut(
        user_id=rate.user_id,
        daily_rate=rate.daily_rate,
        rate_xs=rate.rate_xs,
        rate_s=rate.rate_s,
        rate_m=rate.rate_m,
        rate_l=rate.rate_l,
    )
