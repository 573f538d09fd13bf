"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from backend.app.api.v1.endpoints import orders, reports, cash, masters

router = APIRouter()

# Order lifecycle and live queue
router.include_router(orders.router)

# Read-only rollups
router.include_router(reports.router)

# Cash book (ledger entries)
router.include_router(cash.router)

# Master directory
router.include_router(masters.router)
