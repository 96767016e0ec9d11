from decimal import Decimal
from typing import Iterable, Any

from pydantic import BaseModel

from pavilion.core.config import DEFAULT_TAX_RATE
from pavilion.services.pricing_services.calculator import round_money, to_decimal, HUNDRED, ZERO


class DocumentTotals(BaseModel):
    subtotal: Decimal
    tax_rate: Decimal
    tax: Decimal
    discount: Decimal = ZERO
    shipping_cost: Decimal = ZERO
    total: Decimal


def line_total(item: Any) -> Decimal:
    price = to_decimal(getattr(item, "custom_price", None))
    if price is None:
        price = to_decimal(getattr(item, "unit_price", None)) or ZERO
    return round_money(price * int(getattr(item, "quantity", 0) or 0))


def compute_totals(items: Iterable[Any], tax_rate: Decimal = DEFAULT_TAX_RATE) -> DocumentTotals:
    """
    Sum the already-rounded line totals and apply one flat document rate.

    Tax and total are exact (no rounding past the per-line rounding); callers
    quantize them with `stored_totals` when persisting, and the PDF rounds on display.
    Per-line gst_rate is display only.
    """
    rate = to_decimal(tax_rate)
    if rate is None:
        rate = DEFAULT_TAX_RATE
    subtotal = sum((line_total(item) for item in items), ZERO)
    tax = subtotal * rate / HUNDRED
    return DocumentTotals(
        subtotal=subtotal,
        tax_rate=rate,
        tax=tax,
        total=subtotal + tax,
    )


def line_gst_amount(item: Any) -> Decimal:
    rate = to_decimal(getattr(item, "gst_rate", None)) or ZERO
    return round_money(line_total(item) * rate / HUNDRED)


def stored_totals(totals: DocumentTotals) -> DocumentTotals:
    """Totals quantized to the 2 dp money columns."""
    return totals.model_copy(update={
        "tax": round_money(totals.tax),
        "total": round_money(totals.total),
    })
