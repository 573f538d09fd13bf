"""
Pre-Deploy and Smoke Test Script.

Runs the application in-process against the configured database and Redis
and executes a full smoke test:
1. Health Check
2. Order Intake -> Close -> Cash Book Verification
3. Report Check

Uses TestClient so the deployed code path is exercised without needing a
running server or a login flow.
"""

import sys
from datetime import datetime, timedelta

from fastapi.testclient import TestClient
from backend.app.main import app
from backend.app.core.jwt import create_principal_token


def print_step(step, msg):
    print(f"[{step}] {msg}")


def fail(msg):
    print(f"❌ FAILURE: {msg}")
    sys.exit(1)


def success(msg):
    print(f"✅ {msg}")


def main():
    print("🚀 Starting Deployment Validation...")

    with TestClient(app) as client:
        # 1. Health Check
        print_step("PRE-DEPLOY", "Checking /health...")
        response = client.get("/health")
        if response.status_code != 200:
            fail(f"Health check failed: {response.status_code} {response.text}")
        success("Health check passed")

        # 2. Admin principal
        print_step("AUTH", "Generating Admin Token...")
        token = create_principal_token(1, "deploy_bot", "ADMIN")
        headers = {"Authorization": f"Bearer {token}"}

        # 3. Smoke Test: Order flow
        print_step("SMOKE", "Running Intake -> Close -> Cash flow...")
        res = client.post("/v1/orders", json={
            "city": "Smoke City",
            "phone": "+70000000000",
            "client_name": "Smoke Test",
            "address": "Deploy street 1",
            "problem": "Deployment smoke test",
            "date_meeting": (datetime.utcnow() + timedelta(days=1)).isoformat(),
        }, headers=headers)
        if res.status_code != 201:
            fail(f"Order intake failed: {res.status_code} {res.text}")
        order = res.json()
        success(f"Created order #{order['id']} ({order['status']})")

        res = client.post(
            f"/v1/orders/{order['id']}/close",
            json={"settlement": 1, "expense": 0},
            headers=headers,
        )
        if res.status_code != 200:
            fail(f"Close failed: {res.status_code} {res.text}")
        closed = res.json()
        if closed["ledger"]["status"] != "posted":
            fail(f"Ledger post did not land: {closed['ledger']}")
        success(f"Order closed, ledger entry #{closed['ledger']['entry_id']} posted")

        res = client.get(f"/v1/cash/{closed['ledger']['entry_id']}", headers=headers)
        if res.status_code != 200 or res.json()["payment_purpose"] != f"Order #{order['id']}":
            fail(f"Cash entry mismatch: {res.status_code} {res.text}")
        success("Cash book entry verified")

        # 4. Reports (read-only verify)
        print_step("VERIFY", "Checking city report...")
        res = client.get("/v1/reports/city?city=Smoke City", headers=headers)
        if res.status_code != 200 or not res.json():
            fail(f"City report failed: {res.status_code} {res.text}")
        success(f"City report: {res.json()[0]}")

    success("Deployment Validation Passed!")


if __name__ == "__main__":
    main()
