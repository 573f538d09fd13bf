"""
Integration tests for the order lifecycle API.

Covers intake, whitelist updates, transition policy, terminal immutability
and the closing timestamp.
"""

import pytest
from sqlalchemy import select, func

from backend.app.models.ledger_entry import LedgerEntry
from backend.app.models.order_enums import OrderStatus


async def _ledger_count(db_session):
    return (await db_session.execute(select(func.count(LedgerEntry.id)))).scalar()


# TEST 1: Intake
@pytest.mark.asyncio
async def test_create_order_starts_pending(client, admin_headers, master):
    response = await client.post("/v1/orders", json={
        "city": "Moscow",
        "phone": "+79991112233",
        "client_name": "Anna",
        "address": "Tverskaya 10",
        "problem": "Fridge does not cool",
        "date_meeting": "2026-10-20T10:00:00",
        "master_id": master.id,
        "settlement": 400,
        "expense": 100,
    }, headers=admin_headers)

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "Pending"
    assert data["master"]["name"] == "Ivan Petrov"
    assert data["net"] == 300
    assert data["payout"] == 150
    assert data["closed_at"] is None
    assert data["version"] == 1


@pytest.mark.asyncio
async def test_create_order_requires_intake_fields(client, admin_headers):
    response = await client.post("/v1/orders", json={
        "city": "Moscow",
        "phone": "+79991112233",
    }, headers=admin_headers)

    assert response.status_code == 422
    assert response.json()["error_code"] == "ERR_VALIDATION"


@pytest.mark.asyncio
async def test_requests_require_token(client):
    response = await client.get("/v1/orders")
    assert response.status_code in (401, 403)


# TEST 2: Updates
@pytest.mark.asyncio
async def test_update_applies_whitelist_and_derives(client, admin_headers, make_order):
    order = await make_order()

    response = await client.put(f"/v1/orders/{order.id}", json={
        "status": "InProgress",
        "settlement": 1000,
        "expense": 200,
        "net": 1,
        "payout": 1,
        "closed_at": "2020-01-01T00:00:00",
        "created_at": "2020-01-01T00:00:00",
        "unknown_field": "x",
    }, headers=admin_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["ledger"]["status"] == "skipped"
    data = body["order"]
    assert data["status"] == "InProgress"
    assert data["net"] == 800
    assert data["payout"] == 400
    assert data["closed_at"] is None
    assert data["version"] == 2


@pytest.mark.asyncio
async def test_null_clears_settlement(client, admin_headers, make_order):
    order = await make_order(settlement=500.0, expense=100.0, net=400.0, payout=200.0)

    response = await client.put(
        f"/v1/orders/{order.id}", json={"settlement": None}, headers=admin_headers
    )

    assert response.status_code == 200
    data = response.json()["order"]
    assert data["settlement"] is None
    assert data["expense"] == 100
    assert data["net"] == -100
    assert data["payout"] == -50


@pytest.mark.asyncio
async def test_update_with_only_derived_fields_rejected(client, admin_headers, make_order):
    order = await make_order()

    response = await client.put(
        f"/v1/orders/{order.id}", json={"net": 10, "payout": 5}, headers=admin_headers
    )

    assert response.status_code == 422
    assert response.json()["error_code"] == "ERR_VALIDATION"


@pytest.mark.asyncio
async def test_update_missing_order(client, admin_headers):
    response = await client.put("/v1/orders/999", json={"city": "Tver"}, headers=admin_headers)

    assert response.status_code == 404
    assert response.json()["error_code"] == "ERR_ORDER_NOT_FOUND"


@pytest.mark.asyncio
async def test_unknown_status_rejected(client, admin_headers, make_order):
    order = await make_order()

    response = await client.put(
        f"/v1/orders/{order.id}", json={"status": "Archived"}, headers=admin_headers
    )
    assert response.status_code == 422


# TEST 3: Modern lock-in
@pytest.mark.asyncio
@pytest.mark.parametrize("target", ["Pending", "Accepted", "InProgress"])
async def test_modern_cannot_go_back(client, admin_headers, make_order, target):
    order = await make_order(status=OrderStatus.MODERN)

    response = await client.put(
        f"/v1/orders/{order.id}", json={"status": target}, headers=admin_headers
    )

    assert response.status_code == 409
    assert response.json()["error_code"] == "ERR_INVALID_TRANSITION"

    current = await client.get(f"/v1/orders/{order.id}", headers=admin_headers)
    assert current.json()["status"] == "Modern"
    assert current.json()["version"] == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("target", ["Modern", "Done", "Refused", "NotOrdered"])
async def test_modern_can_resolve(client, admin_headers, make_order, target):
    order = await make_order(status=OrderStatus.MODERN)

    response = await client.put(
        f"/v1/orders/{order.id}", json={"status": target}, headers=admin_headers
    )

    assert response.status_code == 200
    assert response.json()["order"]["status"] == target


# TEST 4: Terminal immutability and closing timestamp
@pytest.mark.asyncio
@pytest.mark.parametrize("terminal", ["Done", "Refused", "NotOrdered"])
async def test_closed_order_is_immutable(client, admin_headers, make_order, db_session, terminal):
    order = await make_order(status=OrderStatus.ACCEPTED, settlement=700.0)

    first = await client.put(
        f"/v1/orders/{order.id}", json={"status": terminal}, headers=admin_headers
    )
    assert first.status_code == 200
    closed = first.json()["order"]
    assert closed["closed_at"] is not None
    entries_after_close = await _ledger_count(db_session)

    for payload in (
        {"city": "Tver"},
        {"status": "Pending"},
        {"status": terminal},
        {"settlement": 1},
        {"net": 5},
    ):
        response = await client.put(f"/v1/orders/{order.id}", json=payload, headers=admin_headers)
        assert response.status_code == 409
        assert response.json()["error_code"] == "ERR_ORDER_CLOSED"

    close_again = await client.post(
        f"/v1/orders/{order.id}/close", json={"settlement": 900}, headers=admin_headers
    )
    assert close_again.status_code == 409

    current = (await client.get(f"/v1/orders/{order.id}", headers=admin_headers)).json()
    assert current == closed
    assert await _ledger_count(db_session) == entries_after_close


# TEST 5: Assign master
@pytest.mark.asyncio
async def test_assign_master(client, admin_headers, make_order, master):
    order = await make_order()

    response = await client.post(
        f"/v1/orders/{order.id}/assign-master",
        json={"master_id": master.id},
        headers=admin_headers,
    )

    assert response.status_code == 200
    data = response.json()["order"]
    assert data["master_id"] == master.id
    assert data["status"] == "Pending"


@pytest.mark.asyncio
async def test_assign_unknown_master(client, admin_headers, make_order):
    order = await make_order()

    response = await client.post(
        f"/v1/orders/{order.id}/assign-master", json={"master_id": 404}, headers=admin_headers
    )

    assert response.status_code == 404
    assert response.json()["error_code"] == "ERR_MASTER_NOT_FOUND"


@pytest.mark.asyncio
async def test_assign_master_on_closed_order(client, admin_headers, make_order, master):
    order = await make_order(status=OrderStatus.REFUSED)

    response = await client.post(
        f"/v1/orders/{order.id}/assign-master", json={"master_id": master.id}, headers=admin_headers
    )
    assert response.status_code == 409


# TEST 6: City scope
@pytest.mark.asyncio
async def test_director_cannot_touch_other_cities(client, director_headers, make_order):
    order = await make_order(city="Kazan")

    read = await client.get(f"/v1/orders/{order.id}", headers=director_headers)
    assert read.status_code == 403

    write = await client.put(f"/v1/orders/{order.id}", json={"address": "x"}, headers=director_headers)
    assert write.status_code == 403


@pytest.mark.asyncio
async def test_director_cannot_move_order_out_of_scope(client, director_headers, make_order):
    order = await make_order(city="Moscow")

    response = await client.put(
        f"/v1/orders/{order.id}", json={"city": "Kazan"}, headers=director_headers
    )
    assert response.status_code == 403
