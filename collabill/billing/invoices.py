"""Invoice drafting from presences and validated tasks."""
import uuid
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal

from fastapi import HTTPException
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from collabill.models.enums import InvoiceLineType, InvoiceStatus, TaskSize, TaskStatus
from collabill.models.invoice import Invoice
from collabill.models.presence import Presence
from collabill.models.task import Task
from collabill.models.user import CollaboratorRate

CENT = Decimal("0.01")

INVOICE_TRANSITIONS: dict[InvoiceStatus, set[InvoiceStatus]] = {
    InvoiceStatus.DRAFT: {InvoiceStatus.VALIDATED},
    InvoiceStatus.VALIDATED: {InvoiceStatus.PAID},
    InvoiceStatus.PAID: set(),
}

_SIZE_RATE_COLUMN = {
    TaskSize.XS: "rate_xs",
    TaskSize.S: "rate_s",
    TaskSize.M: "rate_m",
    TaskSize.L: "rate_l",
}

@dataclass(frozen=True)
class LineDraft:
    type: InvoiceLineType
    label: str
    quantity: int
    unit_price: Decimal
    total: Decimal
    reference_id: uuid.UUID | None = None

def money(value: Decimal | int | str) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)

def rate_for_size(rate: CollaboratorRate, size: TaskSize) -> Decimal:
    return money(getattr(rate, _SIZE_RATE_COLUMN[TaskSize(size)]))

def build_invoice_lines(
    presence_days: int,
    validated_tasks: Iterable[Task],
    rate: CollaboratorRate,
) -> list[LineDraft]:
    lines: list[LineDraft] = []

    if presence_days > 0:
        daily = money(rate.daily_rate)
        lines.append(
            LineDraft(
                type=InvoiceLineType.PRESENCE,
                label=f"Presence ({presence_days} day{'s' if presence_days != 1 else ''})",
                quantity=presence_days,
                unit_price=daily,
                total=money(daily * presence_days),
            )
        )

    for t in validated_tasks:
        price = rate_for_size(rate, t.size)
        lines.append(
            LineDraft(
                type=InvoiceLineType.TASK,
                label=f"[{TaskSize(t.size).value}] {t.title}"[:300],
                quantity=1,
                unit_price=price,
                total=price,
                reference_id=t.id,
            )
        )

    return lines

def invoice_total(lines: Sequence[LineDraft]) -> Decimal:
    return money(sum((line.total for line in lines), Decimal("0")))

def enforce_invoice_transition(invoice: Invoice, target: InvoiceStatus) -> None:
    if target not in INVOICE_TRANSITIONS[invoice.status]:
        raise HTTPException(
            status_code=409,
            detail=f"invoice cannot move from {invoice.status.value} to {target.value}",
        )

def period_bounds(period_start: date, period_end: date) -> tuple[datetime, datetime]:
    # half-open [start 00:00, day after end 00:00) in UTC
    start = datetime.combine(period_start, time.min, tzinfo=timezone.utc)
    end = datetime.combine(period_end + timedelta(days=1), time.min, tzinfo=timezone.utc)
    return start, end

def count_presence_days(db: Session, user_id: uuid.UUID, period_start: date, period_end: date) -> int:
    n = db.scalar(
        select(func.count())
        .select_from(Presence)
        .where(
            Presence.user_id == user_id,
            Presence.date >= period_start,
            Presence.date <= period_end,
        )
    )
    return n or 0

def find_validated_tasks(db: Session, user_id: uuid.UUID, period_start: date, period_end: date) -> list[Task]:
    start, end = period_bounds(period_start, period_end)
    q = (
        select(Task)
        .where(
            Task.assigned_to == user_id,
            Task.status == TaskStatus.VALIDATED,
            Task.validated_at >= start,
            Task.validated_at < end,
        )
        .order_by(Task.validated_at.asc())
    )
    return list(db.scalars(q).all())

def find_locked_overlap(
    db: Session,
    user_id: uuid.UUID,
    period_start: date,
    period_end: date,
    exclude_id: uuid.UUID | None = None,
) -> Invoice | None:
    # validated / paid invoices freeze their period
    q = select(Invoice).where(
        Invoice.user_id == user_id,
        Invoice.status != InvoiceStatus.DRAFT,
        Invoice.period_start <= period_end,
        Invoice.period_end >= period_start,
    )
    if exclude_id is not None:
        q = q.where(Invoice.id != exclude_id)
    return db.scalar(q.limit(1))
