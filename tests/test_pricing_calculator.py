from decimal import Decimal
from types import SimpleNamespace
import logging

import pytest

from pavilion.services.pricing_services.calculator import (
    BasePriceType,
    PricingTier,
    DealerBasis,
    ShopPriceBasis,
    MrpBasis,
    resolve_tier,
    resolve_price_basis,
    price_for_tier,
    price_from_adjustment,
    adjustment_from_price,
    price_product,
)


def dealer_tier(pct):
    return PricingTier(base_price_type=BasePriceType.dealer, percentage=Decimal(pct))


def mrp_tier(pct):
    return PricingTier(base_price_type=BasePriceType.mrp, percentage=Decimal(pct))


# --------------------------
# Tier pricing
# --------------------------
def test_dealer_tier_marks_up_dealer_price():
    unit = price_for_tier(mrp=Decimal("1500"), dealer=Decimal("1000"), tier=dealer_tier("10"))
    assert unit.custom_price == Decimal("1100.00")
    assert unit.discount == Decimal("10")
    assert unit.base_price == Decimal("1000")
    assert unit.price_mode == BasePriceType.dealer


def test_mrp_tier_discounts_mrp():
    unit = price_for_tier(mrp=Decimal("2000"), dealer=Decimal("1200"), tier=mrp_tier("15"))
    assert unit.custom_price == Decimal("1700.00")
    assert unit.discount == Decimal("15")
    assert unit.base_price == Decimal("2000")
    assert unit.price_mode == BasePriceType.mrp


def test_dealer_tier_without_dealer_price_marks_up_shop_price():
    unit = price_for_tier(mrp=Decimal("2000"), dealer=None, shop=Decimal("1500"), tier=dealer_tier("10"))
    assert unit.base_price == Decimal("1500")
    assert unit.custom_price == Decimal("1650.00")


def test_no_tier_uses_best_price_and_back_computes_discount():
    unit = price_for_tier(mrp=Decimal("2000"), dealer=Decimal("1000"))
    assert unit.custom_price == Decimal("1000.00")
    assert unit.price_mode == BasePriceType.mrp
    assert unit.base_price == Decimal("2000")
    assert unit.discount == Decimal("50.0000")


def test_no_tier_mrp_only_has_zero_discount():
    unit = price_for_tier(mrp="799", dealer=None)
    assert unit.custom_price == Decimal("799.00")
    assert unit.discount == Decimal("0")


def test_no_prices_degrades_to_zero():
    unit = price_for_tier(mrp=None, dealer=None, shop=None)
    assert unit.custom_price == Decimal("0")
    assert unit.base_price == Decimal("0")


def test_price_product_reads_product_fields():
    product = SimpleNamespace(mrp_price=Decimal("2000"), dealer_price=Decimal("1000"), shop_price=None)
    assert price_product(product, dealer_tier("10")).custom_price == Decimal("1100.00")
    assert price_product(product, mrp_tier("15")).custom_price == Decimal("1700.00")


# --------------------------
# Forward / inverse formulas
# --------------------------
@pytest.mark.parametrize(
    "base,mode,pct,price",
    [
        ("1000", BasePriceType.dealer, "12.5", "1125.00"),
        ("2000", BasePriceType.mrp, "15", "1700.00"),
        ("849", BasePriceType.mrp, "7.25", "787.45"),
    ],
)
def test_forward_and_inverse_agree(base, mode, pct, price):
    assert price_from_adjustment(Decimal(base), mode, Decimal(pct)) == Decimal(price)
    recovered = adjustment_from_price(Decimal(base), mode, Decimal(price))
    assert abs(recovered - Decimal(pct)) < Decimal("0.01")


def test_money_rounds_half_up():
    # 10.05 * 0.5 = 5.025
    assert price_from_adjustment(Decimal("10.05"), BasePriceType.mrp, Decimal("50")) == Decimal("5.03")


def test_inverse_with_zero_base_is_zero():
    assert adjustment_from_price(Decimal("0"), BasePriceType.dealer, Decimal("100")) == Decimal("0")


def test_negative_price_is_allowed_but_logged(caplog):
    with caplog.at_level(logging.WARNING, logger="pavilion.services.pricing_services.calculator"):
        price = price_from_adjustment(Decimal("100"), BasePriceType.mrp, Decimal("150"))
    assert price == Decimal("-50.00")
    assert "Negative unit price" in caplog.text


# --------------------------
# Tier resolution
# --------------------------
def test_customer_percentage_wins_over_type():
    customer_type = SimpleNamespace(base_price_type="dealer", percentage=Decimal("12"))
    customer = SimpleNamespace(base_price_type=None, percentage=Decimal("5"), customer_type=customer_type)
    tier = resolve_tier(customer)
    assert tier.base_price_type == BasePriceType.dealer
    assert tier.percentage == Decimal("5")


def test_customer_zero_percentage_still_overrides_type():
    customer_type = SimpleNamespace(base_price_type="mrp", percentage=Decimal("12"))
    customer = SimpleNamespace(base_price_type=None, percentage=Decimal("0"))
    assert resolve_tier(customer, customer_type).percentage == Decimal("0")


def test_customer_base_price_type_wins_over_type():
    customer_type = SimpleNamespace(base_price_type="mrp", percentage=Decimal("12"))
    customer = SimpleNamespace(base_price_type="dealer", percentage=None, customer_type=customer_type)
    tier = resolve_tier(customer)
    assert tier.base_price_type == BasePriceType.dealer
    assert tier.percentage == Decimal("12")


def test_customer_without_type_uses_own_fields():
    customer = SimpleNamespace(base_price_type="mrp", percentage=Decimal("8"), customer_type=None)
    tier = resolve_tier(customer)
    assert tier.base_price_type == BasePriceType.mrp
    assert tier.percentage == Decimal("8")


def test_no_resolvable_tier():
    customer = SimpleNamespace(base_price_type=None, percentage=Decimal("8"), customer_type=None)
    assert resolve_tier(customer) is None
    assert resolve_tier(None) is None


# --------------------------
# Price basis
# --------------------------
def test_basis_prefers_dealer_then_shop_then_mrp():
    assert resolve_price_basis(mrp=2000, dealer=1000, shop=1500) == DealerBasis(amount=Decimal("1000"))
    assert resolve_price_basis(mrp=2000, dealer=0, shop=1500) == ShopPriceBasis(amount=Decimal("1500"))
    assert resolve_price_basis(mrp=2000, dealer=None, shop=None) == MrpBasis(amount=Decimal("2000"))
    assert resolve_price_basis() is None
