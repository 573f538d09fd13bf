"""
Ledger (cash) enumerations.
"""

import enum


class LedgerDirection(str, enum.Enum):
    """Cash movement direction."""
    INCOME = "income"  # Money received, e.g. a closed order's settlement
    EXPENSE = "expense"  # Money paid out


class LedgerPostStatus(str, enum.Enum):
    """Outcome of posting the income entry for an order mutation."""
    POSTED = "posted"
    SKIPPED = "skipped"  # Trigger conditions not met
    FAILED = "failed"  # Order write kept, entry not written
