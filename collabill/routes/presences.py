import datetime as dt

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.orm import Session

from collabill.auth.deps import get_current_user
from collabill.db import get_db
from collabill.models.enums import InvoiceStatus
from collabill.models.invoice import Invoice
from collabill.models.presence import Presence
from collabill.models.user import User
from collabill.schemas.presences import PresenceIn, PresenceOut

router = APIRouter(prefix="/presences", tags=["presences"])

@router.post("", response_model=PresenceOut, status_code=201)
def record_presence(
    payload: PresenceIn,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> PresenceOut:
    existing = db.scalar(
        select(Presence).where(Presence.user_id == user.id, Presence.date == payload.date)
    )
    if existing is not None:
        raise HTTPException(status_code=409, detail="presence already recorded for this date")

    p = Presence(user_id=user.id, date=payload.date)
    db.add(p)
    db.commit()
    db.refresh(p)
    return PresenceOut.model_validate(p)

@router.get("", response_model=list[PresenceOut])
def list_presences(
    start: dt.date | None = Query(default=None),
    end: dt.date | None = Query(default=None),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[PresenceOut]:
    q = select(Presence).where(Presence.user_id == user.id)
    if start is not None:
        q = q.where(Presence.date >= start)
    if end is not None:
        q = q.where(Presence.date <= end)

    rows = db.scalars(q.order_by(Presence.date.asc())).all()
    return [PresenceOut.model_validate(r) for r in rows]

@router.delete("/{day}")
def delete_presence(
    day: dt.date,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    p = db.scalar(select(Presence).where(Presence.user_id == user.id, Presence.date == day))
    if p is None:
        raise HTTPException(status_code=404, detail="presence not found")

    # days already on a validated or paid invoice are frozen
    locked = db.scalar(
        select(Invoice.id).where(
            Invoice.user_id == user.id,
            Invoice.status != InvoiceStatus.DRAFT,
            Invoice.period_start <= day,
            Invoice.period_end >= day,
        )
    )
    if locked is not None:
        raise HTTPException(status_code=409, detail="presence is already invoiced")

    db.delete(p)
    db.commit()
    return {"deleted": True}
