"""Combined request endpoints with the in-memory unit of work."""

import pytest
from httpx import AsyncClient

from fakes import FIN, IT, OTHER_REQUESTER, PROCUREMENT_OFFICER, REQUESTER, make_request
from procurement.domain.enums import RequestStatus

pytestmark = pytest.mark.usefixtures("api_overrides")


async def test_combine_over_threshold(
    client: AsyncClient, auth_headers, store, side_effects, notifications
) -> None:
    a = make_request(
        store,
        requester_id=REQUESTER,
        department_id=IT,
        status=RequestStatus.SUBMITTED,
        title="Roof repair",
        total="3000000",
        procurement_types=["works"],
    )
    b = make_request(
        store,
        requester_id=OTHER_REQUESTER,
        department_id=FIN,
        status=RequestStatus.PROCUREMENT_REVIEW,
        title="Car park paving",
        total="2500000",
        procurement_types=["construction"],
    )
    response = await client.post(
        "/api/v1/combined-requests",
        json={"title": "Facilities works", "request_ids": [a.id, b.id], "config": {"lot_mode": "by_site"}},
        headers=auth_headers(PROCUREMENT_OFFICER),
    )
    assert response.status_code == 201, response.text
    data = response.json()
    combined = data["combined_request"]
    assert combined["reference"].startswith("CMB-")
    assert combined["lots_count"] == 2
    assert combined["total_value"] == "5500000.00"
    assert combined["config"] == {"lot_mode": "by_site"}
    assert [lot["title"] for lot in combined["lots"]] == [
        "LOT-1: Roof repair",
        "LOT-2: Car park paving",
    ]
    assert all(lot["status"] == "PROCUREMENT_REVIEW" for lot in combined["lots"])
    assert data["threshold"]["requires_executive_approval"] is True
    assert data["threshold"]["category"] == "works"
    assert data["threshold"]["reason"] == "Works procurement over JMD 5,000,000"

    await side_effects.run()
    assert notifications.calls[0]["department_name"] == "Multiple Departments"

    fetched = await client.get(
        f"/api/v1/combined-requests/{combined['id']}", headers=auth_headers(REQUESTER)
    )
    assert fetched.status_code == 200
    assert [lot["lot_number"] for lot in fetched.json()["lots"]] == [1, 2]

    listing = await client.get("/api/v1/combined-requests", headers=auth_headers(PROCUREMENT_OFFICER))
    assert [row["id"] for row in listing.json()] == [combined["id"]]


async def test_lot_cannot_be_acted_on_individually(client: AsyncClient, auth_headers, store) -> None:
    a = make_request(store, requester_id=REQUESTER, department_id=IT, status=RequestStatus.SUBMITTED)
    created = await client.post(
        "/api/v1/combined-requests",
        json={"title": "Single", "request_ids": [a.id]},
        headers=auth_headers(PROCUREMENT_OFFICER),
    )
    assert created.status_code == 201
    response = await client.post(
        f"/api/v1/requests/{a.id}/actions",
        json={"action": "APPROVE"},
        headers=auth_headers(PROCUREMENT_OFFICER),
    )
    assert response.status_code == 403


async def test_invalid_members_are_listed(client: AsyncClient, auth_headers, store) -> None:
    closed = make_request(store, requester_id=REQUESTER, department_id=IT, status=RequestStatus.CLOSED)
    response = await client.post(
        "/api/v1/combined-requests",
        json={"title": "Bad", "request_ids": [closed.id, 424242]},
        headers=auth_headers(PROCUREMENT_OFFICER),
    )
    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "BAD_REQUEST"
    assert body["details"]["invalid_ids"] == sorted([closed.id, 424242])
    assert store.combined == {}


async def test_duplicate_ids_are_validation_error(client: AsyncClient, auth_headers) -> None:
    response = await client.post(
        "/api/v1/combined-requests",
        json={"title": "Dup", "request_ids": [1, 1]},
        headers=auth_headers(PROCUREMENT_OFFICER),
    )
    assert response.status_code == 400
    assert response.json()["error"] == "VALIDATION_ERROR"


async def test_requester_cannot_combine_or_list(client: AsyncClient, auth_headers, store) -> None:
    a = make_request(store, requester_id=REQUESTER, department_id=IT)
    response = await client.post(
        "/api/v1/combined-requests",
        json={"title": "Mine", "request_ids": [a.id]},
        headers=auth_headers(REQUESTER),
    )
    assert response.status_code == 403
    combinable = await client.get(
        "/api/v1/combined-requests/combinable", headers=auth_headers(REQUESTER)
    )
    assert combinable.status_code == 403


async def test_combinable_list(client: AsyncClient, auth_headers, store) -> None:
    draft = make_request(store, requester_id=REQUESTER, department_id=IT)
    make_request(store, requester_id=REQUESTER, department_id=IT, status=RequestStatus.FINANCE_REVIEW)
    response = await client.get(
        "/api/v1/combined-requests/combinable", headers=auth_headers(PROCUREMENT_OFFICER)
    )
    assert response.status_code == 200
    assert [row["id"] for row in response.json()] == [draft.id]


async def test_missing_combined_request(client: AsyncClient, auth_headers) -> None:
    response = await client.get("/api/v1/combined-requests/5", headers=auth_headers(REQUESTER))
    assert response.status_code == 404
