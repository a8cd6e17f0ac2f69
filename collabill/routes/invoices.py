import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from collabill.audit import record_audit
from collabill.auth.deps import get_current_user
from collabill.auth.tokens import now_utc
from collabill.billing.invoices import (
    build_invoice_lines,
    count_presence_days,
    enforce_invoice_transition,
    find_locked_overlap,
    find_validated_tasks,
    invoice_total,
)
from collabill.db import get_db
from collabill.models.enums import InvoiceStatus
from collabill.models.invoice import Invoice, InvoiceLine
from collabill.models.user import CollaboratorRate, User
from collabill.rbac.deps import has_perm, require_perm
from collabill.schemas.invoices import (
    InvoiceCreateIn,
    InvoiceDetailOut,
    InvoiceLineOut,
    InvoiceOut,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/invoices", tags=["invoices"])

def _detail(db: Session, invoice: Invoice) -> InvoiceDetailOut:
    lines = db.scalars(
        select(InvoiceLine)
        .where(InvoiceLine.invoice_id == invoice.id)
        .order_by(InvoiceLine.type.asc(), InvoiceLine.label.asc())
    ).all()
    return InvoiceDetailOut(
        **InvoiceOut.model_validate(invoice).model_dump(),
        lines=[InvoiceLineOut.model_validate(line) for line in lines],
    )

def _get_invoice(db: Session, invoice_id: uuid.UUID, lock: bool = False) -> Invoice:
    q = select(Invoice).where(Invoice.id == invoice_id)
    if lock:
        q = q.with_for_update().execution_options(populate_existing=True)
    inv = db.scalar(q)
    if inv is None:
        raise HTTPException(status_code=404, detail="invoice not found")
    return inv

@router.post("", response_model=InvoiceDetailOut, status_code=201)
def generate_invoice(
    payload: InvoiceCreateIn,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> InvoiceDetailOut:
    if payload.period_end < payload.period_start:
        raise HTTPException(status_code=400, detail="period_end must not be before period_start")

    rate = db.get(CollaboratorRate, user.id)
    if rate is None:
        raise HTTPException(status_code=400, detail="no rate card configured for this user")

    if find_locked_overlap(db, user.id, payload.period_start, payload.period_end) is not None:
        raise HTTPException(status_code=409, detail="period overlaps a validated invoice")

    # regenerating a draft replaces it
    stale_ids = db.scalars(
        select(Invoice.id).where(
            Invoice.user_id == user.id,
            Invoice.status == InvoiceStatus.DRAFT,
            Invoice.period_start == payload.period_start,
            Invoice.period_end == payload.period_end,
        )
    ).all()
    if stale_ids:
        db.execute(delete(InvoiceLine).where(InvoiceLine.invoice_id.in_(stale_ids)))
        db.execute(delete(Invoice).where(Invoice.id.in_(stale_ids)))

    presence_days = count_presence_days(db, user.id, payload.period_start, payload.period_end)
    tasks = find_validated_tasks(db, user.id, payload.period_start, payload.period_end)
    drafts = build_invoice_lines(presence_days, tasks, rate)

    inv = Invoice(
        user_id=user.id,
        period_start=payload.period_start,
        period_end=payload.period_end,
        status=InvoiceStatus.DRAFT,
        total_amount=invoice_total(drafts),
        note=payload.note,
    )
    db.add(inv)
    db.flush()

    for d in drafts:
        db.add(
            InvoiceLine(
                invoice_id=inv.id,
                type=d.type,
                reference_id=d.reference_id,
                label=d.label,
                quantity=d.quantity,
                unit_price=d.unit_price,
                total=d.total,
            )
        )
    db.commit()
    db.refresh(inv)

    logger.info(
        "draft invoice %s for user %s (%s..%s): %d lines, total %s",
        inv.id,
        user.id,
        inv.period_start,
        inv.period_end,
        len(drafts),
        inv.total_amount,
    )
    return _detail(db, inv)

@router.get("", response_model=list[InvoiceOut])
def list_invoices(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[InvoiceOut]:
    q = select(Invoice).order_by(Invoice.period_start.desc(), Invoice.created_at.desc())
    if not has_perm(db, user, "invoices:read_all"):
        q = q.where(Invoice.user_id == user.id)

    rows = db.scalars(q).all()
    return [InvoiceOut.model_validate(r) for r in rows]

@router.get("/{invoice_id}", response_model=InvoiceDetailOut)
def get_invoice(
    invoice_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> InvoiceDetailOut:
    inv = _get_invoice(db, invoice_id)
    if inv.user_id != user.id and not has_perm(db, user, "invoices:read_all"):
        raise HTTPException(status_code=403, detail="forbidden")
    return _detail(db, inv)

@router.post("/{invoice_id}/validate", response_model=InvoiceOut)
def validate_invoice(
    invoice_id: uuid.UUID,
    user: User = Depends(require_perm("invoices:validate")),
    db: Session = Depends(get_db),
) -> InvoiceOut:
    inv = _get_invoice(db, invoice_id, lock=True)
    enforce_invoice_transition(inv, InvoiceStatus.VALIDATED)

    # the same days and tasks must not end up on two frozen invoices
    if find_locked_overlap(db, inv.user_id, inv.period_start, inv.period_end, exclude_id=inv.id) is not None:
        raise HTTPException(status_code=409, detail="period overlaps a validated invoice")

    inv.status = InvoiceStatus.VALIDATED
    inv.validated_at = now_utc()
    record_audit(db, actor_id=user.id, action="invoice.validated", entity="invoice", entity_id=inv.id)
    db.commit()
    db.refresh(inv)

    logger.info("invoice %s validated by %s", inv.id, user.id)
    return InvoiceOut.model_validate(inv)

@router.post("/{invoice_id}/pay", response_model=InvoiceOut)
def pay_invoice(
    invoice_id: uuid.UUID,
    user: User = Depends(require_perm("invoices:pay")),
    db: Session = Depends(get_db),
) -> InvoiceOut:
    inv = _get_invoice(db, invoice_id, lock=True)
    enforce_invoice_transition(inv, InvoiceStatus.PAID)

    inv.status = InvoiceStatus.PAID
    inv.paid_at = now_utc()
    record_audit(db, actor_id=user.id, action="invoice.paid", entity="invoice", entity_id=inv.id)
    db.commit()
    db.refresh(inv)

    logger.info("invoice %s marked paid by %s", inv.id, user.id)
    return InvoiceOut.model_validate(inv)
