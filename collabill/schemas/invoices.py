import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict

from collabill.models.enums import InvoiceLineType, InvoiceStatus

class InvoiceCreateIn(BaseModel):
    period_start: date
    period_end: date
    note: str | None = None

class InvoiceLineOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    type: InvoiceLineType
    reference_id: uuid.UUID | None
    label: str
    quantity: int
    unit_price: Decimal
    total: Decimal

class InvoiceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    period_start: date
    period_end: date
    status: InvoiceStatus
    total_amount: Decimal
    validated_at: datetime | None
    paid_at: datetime | None
    note: str | None
    created_at: datetime

class InvoiceDetailOut(InvoiceOut):
    lines: list[InvoiceLineOut]
