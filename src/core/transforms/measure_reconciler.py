"""
Reconciliation of sales line measures.

Repairs the (quantity, unit_price, sales_amount) triple so that
sales_amount == quantity * unit_price holds for every emitted row. Rows are
corrected, never rejected.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, NamedTuple

from src.core.models import SalesLineRecord
from src.core.normalizers import fits_signed


class ReconciliationStats(NamedTuple):
    """How many rows had each measure rewritten."""

    unit_price_repaired: int = 0
    sales_amount_repaired: int = 0


def repair_unit_price(
    unit_price: int | None,
    quantity: int | None,
    sales_amount: int | None,
) -> int | None:
    """
    Repaired unit price: |raw price| when present and non-zero, else
    |sales_amount / quantity| when quantity is non-zero, rounded half away
    from zero. None when neither is available or the result does not fit
    the INTEGER price column.
    """
    if unit_price:
        candidate = Decimal(abs(unit_price))
    elif quantity and sales_amount is not None:
        candidate = abs(Decimal(sales_amount) / Decimal(quantity))
    else:
        return None
    repaired = int(candidate.quantize(Decimal(1), rounding=ROUND_HALF_UP))
    return repaired if fits_signed(repaired) else None


def repair_sales_amount(
    sales_amount: int | None,
    quantity: int | None,
    unit_price: int | None,
) -> int | None:
    """
    Repaired sales amount: the raw value when it is positive and equals
    quantity * unit_price, otherwise quantity * unit_price (None when
    either factor is missing).
    """
    expected = None
    if quantity is not None and unit_price is not None:
        expected = quantity * unit_price
    if sales_amount is None or sales_amount <= 0 or sales_amount != expected:
        return expected
    return sales_amount


def reconcile(record: SalesLineRecord) -> SalesLineRecord:
    """
    Repair one sales line.

    Args:
        record: Normalized sales line with raw measures

    Returns:
        Copy with unit_price and sales_amount repaired, quantity unchanged
    """
    unit_price = repair_unit_price(record.unit_price, record.quantity, record.sales_amount)
    sales_amount = repair_sales_amount(record.sales_amount, record.quantity, unit_price)
    return record.model_copy(update={"unit_price": unit_price, "sales_amount": sales_amount})


def reconcile_all(
    records: Iterable[SalesLineRecord],
) -> tuple[list[SalesLineRecord], ReconciliationStats]:
    """
    Repair every sales line, preserving input order.

    Args:
        records: Normalized sales lines

    Returns:
        Tuple of (repaired_records, stats)
    """
    repaired: list[SalesLineRecord] = []
    price_fixes = 0
    amount_fixes = 0
    for record in records:
        fixed = reconcile(record)
        if fixed.unit_price != record.unit_price:
            price_fixes += 1
        if fixed.sales_amount != record.sales_amount:
            amount_fixes += 1
        repaired.append(fixed)

    return repaired, ReconciliationStats(price_fixes, amount_fixes)
