"""Strip monetary fields from payloads shown to manufacturer users."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


REDACTED_ROLES: frozenset[str] = frozenset({"manufacturer"})

FINANCIAL_FIELDS: frozenset[str] = frozenset({
    "unit_price", "unitPrice",
    "line_total", "lineTotal",
    "subtotal",
    "total", "total_amount", "totalAmount",
    "tax_amount", "taxAmount",
    "tax_rate", "taxRate",
    "discount",
    "msrp",
    "cost",
    "base_price", "basePrice",
    "commission",
    "revenue",
    "amount_paid", "amountPaid",
    "amount_due", "amountDue",
    "invoice_url", "invoiceUrl",
})

_LINE_ITEM_KEYS: tuple[str, ...] = ("line_items", "lineItems")
_VARIANT_KEY = "variant"


def _strip(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return [_strip(item) for item in value]

    if isinstance(value, Mapping):
        filtered = {key: item for key, item in value.items() if key not in FINANCIAL_FIELDS}

        for key in _LINE_ITEM_KEYS:
            if isinstance(filtered.get(key), (list, tuple)):
                filtered[key] = [_strip(item) for item in filtered[key]]

        if isinstance(filtered.get(_VARIANT_KEY), Mapping):
            filtered[_VARIANT_KEY] = _strip(filtered[_VARIANT_KEY])

        return filtered

    return value


def redact_financial_fields(value: Any, role: str | None) -> Any:
    """Return ``value`` without monetary fields when ``role`` is restricted.

    Other roles get the value back untouched. The input is never mutated, and
    redacting an already redacted payload is a no-op.
    """
    if role not in REDACTED_ROLES:
        return value
    return _strip(value)
