from decimal import Decimal
from types import SimpleNamespace

from pavilion.services.pricing_services.calculator import BasePriceType, PricingTier
from pavilion.services.pricing_services.line_item_builder import add_product, update_quantity
from pavilion.services.pricing_services.totals import compute_totals, stored_totals, line_gst_amount


def product(product_id, mrp, dealer=None, gst="18"):
    return SimpleNamespace(
        id=product_id,
        name=f"Product {product_id}",
        mrp_price=Decimal(mrp),
        dealer_price=Decimal(dealer) if dealer else None,
        shop_price=None,
        gst_rate=Decimal(gst),
    )


def test_subtotal_tax_and_total():
    dealer = PricingTier(base_price_type=BasePriceType.dealer, percentage=Decimal("10"))
    items = add_product([], product(1, "1500", dealer="1000"), dealer).items
    items = update_quantity(items, 0, 2)
    items = add_product(items, product(2, "1700")).items

    totals = compute_totals(items)
    assert totals.subtotal == Decimal("3900.00")
    assert totals.tax_rate == Decimal("18")
    assert totals.tax == Decimal("702.00")
    assert totals.total == Decimal("4602.00")
    assert totals.discount == 0
    assert totals.shipping_cost == 0


def test_custom_tax_rate():
    items = add_product([], product(1, "1000")).items
    totals = compute_totals(items, Decimal("5"))
    assert totals.tax == Decimal("50.00")
    assert totals.total == Decimal("1050.00")


def test_total_is_exact_subtotal_plus_tax():
    items = add_product([], product(1, "10.05")).items
    totals = compute_totals(items, Decimal("18"))
    assert totals.subtotal == Decimal("10.05")
    assert totals.tax == Decimal("1.809")
    assert totals.total == totals.subtotal + totals.subtotal * Decimal("18") / 100
    assert totals.total == Decimal("11.859")


def test_stored_totals_round_half_up_to_money():
    items = add_product([], product(1, "10.05")).items
    stored = stored_totals(compute_totals(items, Decimal("18")))
    assert stored.tax == Decimal("1.81")
    assert stored.total == Decimal("11.86")
    assert stored.subtotal == Decimal("10.05")


def test_empty_document():
    totals = compute_totals([])
    assert totals.subtotal == 0
    assert totals.total == 0


def test_stored_rows_use_unit_price():
    rows = [SimpleNamespace(unit_price=Decimal("250.00"), quantity=4), SimpleNamespace(unit_price="99.99", quantity=1)]
    totals = compute_totals(rows, Decimal("0"))
    assert totals.subtotal == Decimal("1099.99")
    assert totals.total == Decimal("1099.99")


def test_line_gst_is_display_only():
    items = add_product([], product(1, "1000", gst="12")).items
    items = update_quantity(items, 0, 2)
    assert line_gst_amount(items[0]) == Decimal("240.00")
    # the document still uses the single document rate
    assert compute_totals(items, Decimal("18")).tax == Decimal("360.00")
