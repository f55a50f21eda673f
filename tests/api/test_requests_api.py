"""Request lifecycle over HTTP, with the in-memory unit of work."""

import pytest
from httpx import AsyncClient

from fakes import (
    ADMIN,
    DEPT_HEAD,
    DIVISION_HEAD,
    FINANCE_MANAGER,
    FINANCE_OFFICER,
    INACTIVE_OFFICER,
    OTHER_REQUESTER,
    PROCUREMENT_OFFICER,
    REQUESTER,
)

pytestmark = pytest.mark.usefixtures("api_overrides")

DRAFT = {
    "title": "Conference room AV",
    "items": [
        {"description": "Projector", "quantity": 1, "unit_price": "180000.00"},
        {"description": "Speakers", "quantity": 2, "unit_price": "35000.00"},
    ],
    "procurement_types": ["equipment"],
}


async def _create(client: AsyncClient, auth_headers, body: dict | None = None) -> dict:
    response = await client.post(
        "/api/v1/requests", json=body or DRAFT, headers=auth_headers(REQUESTER)
    )
    assert response.status_code == 201, response.text
    return response.json()


async def _act(client: AsyncClient, auth_headers, request_id: int, user_id: int, action: str):
    return await client.post(
        f"/api/v1/requests/{request_id}/actions",
        json={"action": action},
        headers=auth_headers(user_id),
    )


async def test_create_draft(client: AsyncClient, auth_headers, side_effects) -> None:
    data = await _create(client, auth_headers)
    assert data["status"] == "DRAFT"
    assert data["reference"].startswith("REQ-")
    assert data["total_estimated"] == "250000.00"
    assert data["currency"] == "JMD"
    assert data["requester_id"] == REQUESTER
    assert [i["total_price"] for i in data["items"]] == ["180000.00", "70000.00"]
    assert data["history"][0]["comment"] == "Request created"
    assert side_effects.names == ["audit:created"]


async def test_create_rejects_negative_quantity(client: AsyncClient, auth_headers) -> None:
    body = {"title": "X", "items": [{"description": "Pen", "quantity": 0, "unit_price": "1.00"}]}
    response = await client.post("/api/v1/requests", json=body, headers=auth_headers(REQUESTER))
    assert response.status_code == 422
    assert response.json()["error"] == "VALIDATION_ERROR"


async def test_full_flow_to_closed(client: AsyncClient, auth_headers) -> None:
    created = await _create(client, auth_headers)
    rid = created["id"]

    submitted = await client.post(f"/api/v1/requests/{rid}/submit", headers=auth_headers(REQUESTER))
    assert submitted.json()["status"] == "SUBMITTED"

    steps = [
        (DEPT_HEAD, "DEPARTMENT_REVIEW"),
        (DEPT_HEAD, "HOD_REVIEW"),
        (DIVISION_HEAD, "PROCUREMENT_REVIEW"),
        (PROCUREMENT_OFFICER, "FINANCE_REVIEW"),
        (FINANCE_OFFICER, "FINANCE_APPROVED"),
        (PROCUREMENT_OFFICER, "SENT_TO_VENDOR"),
        (PROCUREMENT_OFFICER, "CLOSED"),
    ]
    for user_id, expected in steps:
        response = await _act(client, auth_headers, rid, user_id, "APPROVE")
        assert response.status_code == 200, response.text
        assert response.json()["status"] == expected

    history = await client.get(f"/api/v1/requests/{rid}/history", headers=auth_headers(REQUESTER))
    statuses = [e["status"] for e in history.json()]
    assert statuses == [
        "DRAFT",
        "SUBMITTED",
        "DEPARTMENT_REVIEW",
        "DEPARTMENT_APPROVED",
        "HOD_REVIEW",
        "PROCUREMENT_REVIEW",
        "FINANCE_REVIEW",
        "FINANCE_APPROVED",
        "SENT_TO_VENDOR",
        "CLOSED",
    ]

    closed = await _act(client, auth_headers, rid, ADMIN, "REJECT")
    assert closed.status_code == 409
    body = closed.json()
    assert body["error"] == "ILLEGAL_TRANSITION"
    assert body["details"]["allowed_actions"] == []


async def test_double_submit_is_conflict(client: AsyncClient, auth_headers) -> None:
    rid = (await _create(client, auth_headers))["id"]
    await client.post(f"/api/v1/requests/{rid}/submit", headers=auth_headers(REQUESTER))
    again = await client.post(f"/api/v1/requests/{rid}/submit", headers=auth_headers(REQUESTER))
    assert again.status_code == 409
    assert again.json()["error"] == "INVALID_STATE"


async def test_reviewer_without_capability_is_forbidden(client: AsyncClient, auth_headers) -> None:
    rid = (await _create(client, auth_headers))["id"]
    await client.post(f"/api/v1/requests/{rid}/submit", headers=auth_headers(REQUESTER))
    response = await _act(client, auth_headers, rid, FINANCE_OFFICER, "APPROVE")
    assert response.status_code == 403
    assert response.json()["error"] == "PERMISSION_DENIED"


async def test_unknown_action_is_422(client: AsyncClient, auth_headers) -> None:
    rid = (await _create(client, auth_headers))["id"]
    response = await _act(client, auth_headers, rid, DEPT_HEAD, "SHRED")
    assert response.status_code == 422


async def test_patch_draft_and_locked_after_submit(client: AsyncClient, auth_headers) -> None:
    rid = (await _create(client, auth_headers))["id"]
    patched = await client.patch(
        f"/api/v1/requests/{rid}",
        json={"title": "AV upgrade", "priority": "HIGH"},
        headers=auth_headers(REQUESTER),
    )
    assert patched.status_code == 200
    assert patched.json()["title"] == "AV upgrade"
    assert patched.json()["priority"] == "HIGH"

    foreign = await client.patch(
        f"/api/v1/requests/{rid}", json={"title": "Mine"}, headers=auth_headers(OTHER_REQUESTER)
    )
    assert foreign.status_code == 403

    await client.post(f"/api/v1/requests/{rid}/submit", headers=auth_headers(REQUESTER))
    locked = await client.patch(
        f"/api/v1/requests/{rid}", json={"title": "Too late"}, headers=auth_headers(REQUESTER)
    )
    assert locked.status_code == 409

    override = await client.patch(
        f"/api/v1/requests/{rid}",
        json={"description": "Corrected by admin", "override": True},
        headers=auth_headers(ADMIN),
    )
    assert override.status_code == 200
    assert override.json()["status"] == "SUBMITTED"


async def test_assign_during_finance_review(client: AsyncClient, auth_headers, store) -> None:
    rid = (await _create(client, auth_headers))["id"]
    await client.post(f"/api/v1/requests/{rid}/submit", headers=auth_headers(REQUESTER))
    for user_id in (DEPT_HEAD, DEPT_HEAD, DIVISION_HEAD, PROCUREMENT_OFFICER):
        await _act(client, auth_headers, rid, user_id, "APPROVE")

    response = await client.post(
        f"/api/v1/requests/{rid}/assign",
        json={"user_id": FINANCE_OFFICER, "comment": "please review"},
        headers=auth_headers(FINANCE_MANAGER),
    )
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "FINANCE_REVIEW"
    assert data["current_assignee_id"] == FINANCE_OFFICER
    assert data["history"][-1]["comment"] == (
        f"Assigned to user {FINANCE_OFFICER} by user {FINANCE_MANAGER}: please review"
    )

    inactive = await client.post(
        f"/api/v1/requests/{rid}/assign",
        json={"user_id": INACTIVE_OFFICER},
        headers=auth_headers(FINANCE_MANAGER),
    )
    assert inactive.status_code == 404

    not_manager = await client.post(
        f"/api/v1/requests/{rid}/assign", json={}, headers=auth_headers(FINANCE_OFFICER)
    )
    assert not_manager.status_code == 403


async def test_get_missing_request(client: AsyncClient, auth_headers) -> None:
    response = await client.get("/api/v1/requests/999999", headers=auth_headers(REQUESTER))
    assert response.status_code == 404
    body = response.json()
    assert body["error"] == "RESOURCE_NOT_FOUND"
    assert body["details"] == {"resource_type": "request", "resource_id": 999999}


async def test_aborted_transaction_is_503(client: AsyncClient, auth_headers, uow) -> None:
    uow.fail_commits = 1
    response = await client.post("/api/v1/requests", json=DRAFT, headers=auth_headers(REQUESTER))
    assert response.status_code == 503
    assert response.json()["details"] == {"retryable": True}


async def test_splintering_check(client: AsyncClient, auth_headers, side_effects) -> None:
    first = await _create(client, auth_headers)
    second = await _create(client, auth_headers)
    for created in (first, second):
        submitted = await client.post(
            f"/api/v1/requests/{created['id']}/submit", headers=auth_headers(REQUESTER)
        )
        assert submitted.status_code == 200, submitted.text
    assert side_effects.names.count("audit:splintering_flagged") == 1

    response = await client.get(
        f"/api/v1/requests/{second['id']}/splintering", headers=auth_headers(DEPT_HEAD)
    )
    assert response.status_code == 200, response.text
    data = response.json()
    assert data["flagged"] is True
    assert data["threshold"] == "250000"
    assert data["window_days"] == 30
    assert data["combined_total"] == "500000.00"
    assert [m["reference"] for m in data["matches"]] == [first["reference"]]


async def test_splintering_check_missing_request(client: AsyncClient, auth_headers) -> None:
    response = await client.get("/api/v1/requests/999999/splintering", headers=auth_headers(REQUESTER))
    assert response.status_code == 404
