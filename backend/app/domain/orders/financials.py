"""
Financial Deriver.

``net = settlement - expense`` and ``payout = net / 2``, always recomputed
together right before persistence.
"""

from typing import Any, Dict, Optional, Tuple

RAW_FINANCIAL_FIELDS = ("settlement", "expense")
DERIVED_FINANCIAL_FIELDS = ("net", "payout")


def derive_financials(
    settlement: Optional[float],
    expense: Optional[float],
) -> Tuple[Optional[float], Optional[float]]:
    """
    Compute ``(net, payout)`` from the raw inputs.

    An unset input counts as 0. When both inputs are unset the derived
    fields are unset as well.
    """
    if settlement is None and expense is None:
        return None, None
    net = float(settlement or 0) - float(expense or 0)
    return net, net / 2


def touches_financials(changes: Dict[str, Any]) -> bool:
    return any(field in changes for field in RAW_FINANCIAL_FIELDS)


def apply_derived_fields(changes: Dict[str, Any], current: Any = None) -> Dict[str, Any]:
    """
    Add ``net``/``payout`` to a change set that touches settlement/expense.

    Values for the untouched raw input come from ``current`` (the stored
    order, or None on creation). Caller-supplied ``net``/``payout`` are
    discarded. Returns the same dict.
    """
    for field in DERIVED_FINANCIAL_FIELDS:
        changes.pop(field, None)

    if not touches_financials(changes):
        return changes

    settlement = changes["settlement"] if "settlement" in changes else getattr(current, "settlement", None)
    expense = changes["expense"] if "expense" in changes else getattr(current, "expense", None)

    changes["net"], changes["payout"] = derive_financials(settlement, expense)
    return changes
