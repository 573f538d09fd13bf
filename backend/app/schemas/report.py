"""
Report Schemas.
"""

from pydantic import BaseModel
from typing import List


class MasterReportRow(BaseModel):
    """Per-master rollup of DONE orders."""
    id: int
    name: str
    cities: List[str]
    orders_count: int
    total_revenue: float  # sum of settlement
    clean_total: float  # sum of net
    salary: float  # sum of payout
    average_check: int  # round(total_revenue / orders_count)


class CityReportRow(BaseModel):
    """Per-city rollup of closed DONE orders joined with cash."""
    city: str
    closed_orders: int
    total_revenue: float
    average_check: int
    company_income: float  # sum of payout, same figure as master salary
    cash_income: float
    cash_expense: float
    cash_balance: float


class CashStats(BaseModel):
    """Income/expense totals over a set of ledger entries."""
    total_income: float = 0.0
    total_expenses: float = 0.0
    net_income: float = 0.0
    income_count: int = 0
    expense_count: int = 0
