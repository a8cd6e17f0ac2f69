import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from types import SimpleNamespace

import pytest
from fastapi import HTTPException

from collabill.billing.invoices import (
    build_invoice_lines,
    enforce_invoice_transition,
    invoice_total,
    money,
    period_bounds,
    rate_for_size,
)
from collabill.models.enums import InvoiceLineType, InvoiceStatus, TaskSize

RATE = SimpleNamespace(
    daily_rate=Decimal("400"),
    rate_xs=Decimal("50"),
    rate_s=Decimal("120.5"),
    rate_m=Decimal("300"),
    rate_l=Decimal("650"),
)

def _task(title: str, size: TaskSize):
    return SimpleNamespace(id=uuid.uuid4(), title=title, size=size)

def test_presence_and_task_lines():
    tasks = [_task("login page", TaskSize.S), _task("billing", TaskSize.L)]

    lines = build_invoice_lines(3, tasks, RATE)

    assert [line.type for line in lines] == [
        InvoiceLineType.PRESENCE,
        InvoiceLineType.TASK,
        InvoiceLineType.TASK,
    ]

    presence = lines[0]
    assert presence.quantity == 3
    assert presence.unit_price == Decimal("400.00")
    assert presence.total == Decimal("1200.00")
    assert presence.label == "Presence (3 days)"
    assert presence.reference_id is None

    assert lines[1].unit_price == Decimal("120.50")
    assert lines[1].reference_id == tasks[0].id
    assert lines[1].label == "[S] login page"
    assert lines[2].total == Decimal("650.00")

    assert invoice_total(lines) == Decimal("1970.50")

def test_no_presence_line_without_days():
    lines = build_invoice_lines(0, [_task("x", TaskSize.XS)], RATE)
    assert len(lines) == 1
    assert lines[0].type == InvoiceLineType.TASK

def test_empty_invoice_totals_zero():
    assert invoice_total(build_invoice_lines(0, [], RATE)) == Decimal("0.00")

def test_single_day_label():
    (line,) = build_invoice_lines(1, [], RATE)
    assert line.label == "Presence (1 day)"

def test_rate_for_size_and_rounding():
    assert rate_for_size(RATE, TaskSize.M) == Decimal("300.00")
    assert rate_for_size(RATE, "XS") == Decimal("50.00")
    assert money("10.005") == Decimal("10.01")

def test_period_bounds_cover_whole_last_day():
    start, end = period_bounds(date(2026, 3, 1), date(2026, 3, 31))
    assert start == datetime(2026, 3, 1, tzinfo=timezone.utc)
    assert end == datetime(2026, 4, 1, tzinfo=timezone.utc)

def test_invoice_status_moves():
    draft = SimpleNamespace(status=InvoiceStatus.DRAFT)
    enforce_invoice_transition(draft, InvoiceStatus.VALIDATED)

    with pytest.raises(HTTPException) as exc:
        enforce_invoice_transition(draft, InvoiceStatus.PAID)
    assert exc.value.status_code == 409

    paid = SimpleNamespace(status=InvoiceStatus.PAID)
    for target in InvoiceStatus:
        with pytest.raises(HTTPException):
            enforce_invoice_transition(paid, target)
