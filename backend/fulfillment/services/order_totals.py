"""Line-item quantities, money totals and invoice snapshots."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Any


_CENT = Decimal("0.01")


def to_money(value: Any) -> Decimal:
    if value is None:
        return Decimal("0.00")
    return Decimal(str(value)).quantize(_CENT, rounding=ROUND_HALF_UP)


def normalize_sizes(sizes: Mapping[str, Any] | None) -> dict[str, int]:
    """Coerce a size map to ``{name: int}``; negative quantities are rejected."""
    result: dict[str, int] = {}
    for name, qty in (sizes or {}).items():
        value = int(qty or 0)
        if value < 0:
            raise ValueError(f"Size quantity must be >= 0 (size {name!r} has {value})")
        result[str(name).strip().lower()] = value
    return result


def line_item_quantity(line_item: Any) -> int:
    return sum(normalize_sizes(getattr(line_item, "sizes", None)).values())


def line_item_total(line_item: Any) -> Decimal:
    return to_money(to_money(getattr(line_item, "unit_price", 0)) * line_item_quantity(line_item))


def order_subtotal(line_items: Iterable[Any]) -> Decimal:
    return to_money(sum((line_item_total(item) for item in line_items), Decimal("0")))


def empty_line_items(line_items: Iterable[Any]) -> list[Any]:
    """Return line items whose summed size quantities are zero."""
    return [item for item in line_items if line_item_quantity(item) <= 0]


@dataclass(frozen=True)
class InvoiceTotals:
    subtotal: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    total_amount: Decimal


def compute_invoice_totals(line_items: Iterable[Any], *, tax_rate: Decimal | int | str = 0) -> InvoiceTotals:
    subtotal = order_subtotal(line_items)
    rate = Decimal(str(tax_rate))
    tax_amount = to_money(subtotal * rate)
    return InvoiceTotals(
        subtotal=subtotal,
        tax_rate=rate,
        tax_amount=tax_amount,
        total_amount=to_money(subtotal + tax_amount),
    )


def build_invoice_number(*, prefix: str, order_id: Any, issue_date: date) -> str:
    short_id = str(order_id).replace("-", "")[:8].upper()
    return f"{prefix}-{issue_date.year}-{short_id}"


def build_invoice_data(
    *,
    order: Any,
    line_items: Iterable[Any],
    issue_date: date,
    due_days: int,
    tax_rate: Decimal | int | str,
    number_prefix: str,
    created_by: Any,
) -> dict[str, Any]:
    """Snapshot an order's line items into invoice fields; totals are frozen here."""
    totals = compute_invoice_totals(list(line_items), tax_rate=tax_rate)
    return {
        "invoice_number": build_invoice_number(prefix=number_prefix, order_id=order.id, issue_date=issue_date),
        "order_id": order.id,
        "org_id": getattr(order, "org_id", None),
        "salesperson_id": getattr(order, "salesperson_id", None),
        "issue_date": issue_date,
        "due_date": issue_date + timedelta(days=due_days),
        "status": "sent",
        "subtotal": totals.subtotal,
        "discount": Decimal("0.00"),
        "tax_rate": totals.tax_rate,
        "tax_amount": totals.tax_amount,
        "total_amount": totals.total_amount,
        "amount_paid": Decimal("0.00"),
        "payment_terms": f"Net {due_days}",
        "created_by": created_by,
    }
