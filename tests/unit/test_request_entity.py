"""Tests for RequestEntity, RequestItem and CombinedRequestEntity."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from procurement.domain.entities import (
    CombinedRequestEntity,
    RequestEntity,
    RequestItem,
    to_money,
)
from procurement.domain.enums import RequestStatus
from procurement.domain.exceptions import ValidationException

AT = datetime(2026, 3, 14, 9, 0, tzinfo=timezone.utc)


def _request(**kwargs) -> RequestEntity:
    defaults = dict(
        id=1,
        reference="REQ-20260314-0001",
        title="Printers",
        description=None,
        department_id=1,
        requester_id=10,
    )
    defaults.update(kwargs)
    return RequestEntity(**defaults)


def test_to_money_rounds_half_up() -> None:
    assert to_money("10.005") == Decimal("10.01")
    assert to_money(3) == Decimal("3.00")


def test_item_total_is_derived() -> None:
    item = RequestItem(description="Toner", quantity=3, unit_price=Decimal("19.995"))
    assert item.unit_price == Decimal("20.00")
    assert item.total_price == Decimal("60.00")


@pytest.mark.parametrize(
    ("kwargs", "field"),
    [
        ({"description": " ", "quantity": 1, "unit_price": Decimal("1")}, "description"),
        ({"description": "Paper", "quantity": 0, "unit_price": Decimal("1")}, "quantity"),
        ({"description": "Paper", "quantity": 1, "unit_price": Decimal("-0.01")}, "unit_price"),
    ],
)
def test_item_validation(kwargs: dict, field: str) -> None:
    with pytest.raises(ValidationException) as exc_info:
        RequestItem(**kwargs)
    assert exc_info.value.details["field"] == field


def test_replace_items_recomputes_total() -> None:
    request = _request(total_estimated=Decimal("999"))
    request.replace_items(
        [
            RequestItem(description="Desk", quantity=2, unit_price=Decimal("150.50")),
            RequestItem(description="Chair", quantity=4, unit_price=Decimal("75.25")),
        ]
    )
    assert request.total_estimated == Decimal("602.00")


def test_total_kept_when_no_items() -> None:
    request = _request(total_estimated=Decimal("1234.567"))
    request.replace_items([])
    assert request.total_estimated == Decimal("1234.57")


def test_record_status_appends_pending_history() -> None:
    request = _request()
    entry = request.record_status(RequestStatus.SUBMITTED, 10, AT, "sent")
    assert request.status is RequestStatus.SUBMITTED
    assert request.version == 2
    assert entry.id is None
    assert request.pending_history() == [entry]


def test_annotate_keeps_status_and_version() -> None:
    request = _request(status=RequestStatus.FINANCE_REVIEW)
    request.annotate(41, AT, "note")
    assert request.status is RequestStatus.FINANCE_REVIEW
    assert request.version == 1
    assert request.history[-1].status is RequestStatus.FINANCE_REVIEW


def test_lot_requires_parent() -> None:
    assert not _request(is_combined=True).is_lot
    assert _request(is_combined=True, combined_request_id=4, lot_number=1).is_lot


def test_terminal_statuses() -> None:
    assert _request(status=RequestStatus.CLOSED).is_terminal
    assert _request(status=RequestStatus.REJECTED).is_terminal
    assert not _request(status=RequestStatus.FINANCE_RETURNED).is_terminal


def test_combined_aggregates_come_from_lots() -> None:
    lot_a = _request(
        id=1,
        lot_number=2,
        items=[RequestItem(description="A", quantity=1, unit_price=Decimal("100"))],
        total_estimated=Decimal("100.00"),
    )
    lot_b = _request(
        id=2,
        lot_number=1,
        items=[
            RequestItem(description="B", quantity=1, unit_price=Decimal("50")),
            RequestItem(description="C", quantity=2, unit_price=Decimal("25")),
        ],
        total_estimated=Decimal("100.00"),
    )
    combined = CombinedRequestEntity(
        id=9,
        reference="CMB-20260314090000",
        title="Bundle",
        description=None,
        created_by_id=30,
        lots=[lot_a, lot_b],
    )
    assert combined.lots_count == 2
    assert combined.total_items == 3
    assert combined.total_value == Decimal("200.00")
    assert [lot.id for lot in combined.ordered_lots()] == [2, 1]
