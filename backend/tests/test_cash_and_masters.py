"""
Tests for the cash book and master directory read APIs.
"""

import pytest
from datetime import datetime

from backend.app.models.ledger_entry import LedgerEntry
from backend.app.models.ledger_enums import LedgerDirection
from backend.app.models.master import Master
from backend.app.models.order_enums import OrderStatus


@pytest.fixture
async def cash_book(db_session):
    entries = [
        LedgerEntry(direction=LedgerDirection.INCOME, amount=1000, city="Moscow", created_by="System",
                    created_at=datetime(2026, 10, 1, 9, 0, 0)),
        LedgerEntry(direction=LedgerDirection.EXPENSE, amount=150, city="Moscow", created_by="admin",
                    memo="Spare parts", created_at=datetime(2026, 10, 2, 9, 0, 0)),
        LedgerEntry(direction=LedgerDirection.INCOME, amount=400, city="Tver", created_by="System",
                    created_at=datetime(2026, 10, 3, 9, 0, 0)),
    ]
    db_session.add_all(entries)
    await db_session.commit()
    return entries


# TEST 1: Cash book
@pytest.mark.asyncio
async def test_cash_list_newest_first(client, admin_headers, cash_book):
    response = await client.get("/v1/cash?limit=2", headers=admin_headers)

    assert response.status_code == 200
    data = response.json()
    assert [e["amount"] for e in data["operations"]] == [400, 150]
    assert data["pagination"] == {"page": 1, "limit": 2, "total": 3, "pages": 2}


@pytest.mark.asyncio
async def test_cash_list_filters(client, admin_headers, cash_book):
    income = (await client.get("/v1/cash?type=income", headers=admin_headers)).json()
    assert {e["direction"] for e in income["operations"]} == {"income"}
    assert income["pagination"]["total"] == 2

    window = (await client.get(
        "/v1/cash?date_from=2026-10-02&date_to=2026-10-02", headers=admin_headers
    )).json()
    assert [e["memo"] for e in window["operations"]] == ["Spare parts"]

    bad = await client.get("/v1/cash?type=refund", headers=admin_headers)
    assert bad.status_code == 422


@pytest.mark.asyncio
async def test_cash_stats(client, admin_headers, cash_book):
    response = await client.get("/v1/cash/stats", headers=admin_headers)

    assert response.json()["stats"] == {
        "total_income": 1400,
        "total_expenses": 150,
        "net_income": 1250,
        "income_count": 2,
        "expense_count": 1,
    }


@pytest.mark.asyncio
async def test_cash_entry_detail(client, admin_headers, cash_book):
    entry = cash_book[1]

    found = await client.get(f"/v1/cash/{entry.id}", headers=admin_headers)
    assert found.json()["memo"] == "Spare parts"

    missing = await client.get("/v1/cash/999", headers=admin_headers)
    assert missing.status_code == 404
    assert missing.json()["error_code"] == "ERR_LEDGER_NOT_FOUND"


# TEST 2: Master directory
@pytest.mark.asyncio
async def test_master_list_filters(client, admin_headers, db_session, master):
    db_session.add(Master(name="Oleg Sidorov", cities=["Kazan"], is_active=False))
    await db_session.commit()

    everyone = (await client.get("/v1/masters", headers=admin_headers)).json()
    assert everyone["total"] == 2

    tver = (await client.get("/v1/masters?city=Tver", headers=admin_headers)).json()
    assert [m["name"] for m in tver["masters"]] == ["Ivan Petrov"]

    inactive = (await client.get("/v1/masters?active=false", headers=admin_headers)).json()
    assert [m["name"] for m in inactive["masters"]] == ["Oleg Sidorov"]


@pytest.mark.asyncio
async def test_master_detail_with_history(client, admin_headers, make_order, master):
    order = await make_order(master_id=master.id, status=OrderStatus.ACCEPTED)

    response = await client.get(f"/v1/masters/{master.id}", headers=admin_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Ivan Petrov"
    assert [o["id"] for o in data["orders"]] == [order.id]
    assert data["orders"][0]["status"] == "Accepted"


@pytest.mark.asyncio
async def test_master_detail_missing(client, admin_headers):
    response = await client.get("/v1/masters/77", headers=admin_headers)

    assert response.status_code == 404
    assert response.json()["error_code"] == "ERR_MASTER_NOT_FOUND"
