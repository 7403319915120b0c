"""
Pure aggregation helpers for the sales report.

The repository hands over plain rows; everything here works in memory on
already-filtered, small result sets.
"""
from collections import OrderedDict
from datetime import date, datetime, timezone
from typing import Iterable, List, NamedTuple, Tuple

TOP_N = 5


class SaleRow(NamedTuple):
    created_at: datetime
    total_amount: int


class ItemRow(NamedTuple):
    key: int
    quantity: int
    price: int


def _utc_date(moment: datetime) -> date:
    # Naive timestamps are stored in UTC
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.date()


def summarize_sales(sales: Iterable[SaleRow]) -> Tuple[int, int, float]:
    """Return (total sales, order count, average order value)."""
    totals = [row.total_amount for row in sales]
    total_sales = sum(totals)
    total_orders = len(totals)
    average = total_sales / total_orders if total_orders else 0
    return total_sales, total_orders, average


def daily_sales(sales: Iterable[SaleRow]) -> List[dict]:
    by_day = {}
    for row in sales:
        day = _utc_date(row.created_at)
        bucket = by_day.setdefault(day, {"sales": 0, "orders": 0})
        bucket["sales"] += row.total_amount
        bucket["orders"] += 1

    return [
        {"date": day, "sales": bucket["sales"], "orders": bucket["orders"]}
        for day, bucket in sorted(by_day.items())
    ]


def rank_by_quantity(rows: Iterable[ItemRow], limit: int = TOP_N) -> List[dict]:
    """Group item rows by key and keep the ``limit`` largest by quantity.

    Ties keep first-seen order.
    """
    grouped = OrderedDict()
    for row in rows:
        bucket = grouped.setdefault(row.key, {"key": row.key, "quantity": 0, "sales": 0})
        bucket["quantity"] += row.quantity
        bucket["sales"] += row.quantity * row.price

    ranked = sorted(grouped.values(), key=lambda bucket: bucket["quantity"], reverse=True)
    return ranked[:limit]
