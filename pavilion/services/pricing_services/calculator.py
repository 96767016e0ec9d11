"""
Customer-tier pricing.

A tier is a base price (dealer or MRP) plus a percentage. On a dealer tier the
percentage is a markup over the dealer price, on an MRP tier it is a discount
off the MRP. The same formulas are used for the initial price of a line and
for staff re-edits of either the percentage or the price.
"""
from decimal import Decimal, ROUND_HALF_UP
import enum
import logging
from typing import Optional, Union, Any

from pydantic import BaseModel, Field
from typing_extensions import Annotated, Literal

logger = logging.getLogger(__name__)

MONEY = Decimal("0.01")
PERCENT = Decimal("0.0001")
HUNDRED = Decimal("100")
ZERO = Decimal("0")


class BasePriceType(str, enum.Enum):
    dealer = "dealer"
    mrp = "mrp"


class PricingTier(BaseModel):
    base_price_type: BasePriceType
    percentage: Annotated[Decimal, Field(ge=0)] = ZERO


# --------------------------
# Price basis (tagged variant)
# --------------------------
class DealerBasis(BaseModel):
    kind: Literal["dealer"] = "dealer"
    amount: Decimal


class ShopPriceBasis(BaseModel):
    kind: Literal["shop"] = "shop"
    amount: Decimal


class MrpBasis(BaseModel):
    kind: Literal["mrp"] = "mrp"
    amount: Decimal


PriceBasis = Annotated[Union[DealerBasis, ShopPriceBasis, MrpBasis], Field(discriminator="kind")]


class PricedUnit(BaseModel):
    base_price: Decimal
    price_mode: BasePriceType
    custom_price: Decimal
    discount: Decimal


# --------------------------
# Helpers
# --------------------------
def to_decimal(value: Any) -> Optional[Decimal]:
    """Coerce a DB / JSON value to Decimal; None for missing or unparsable input."""
    if value is None or value == "":
        return None
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (ArithmeticError, ValueError):
        return None


def round_money(value: Decimal) -> Decimal:
    return value.quantize(MONEY, rounding=ROUND_HALF_UP)


def round_percent(value: Decimal) -> Decimal:
    return value.quantize(PERCENT, rounding=ROUND_HALF_UP)


def _positive(value: Any) -> Optional[Decimal]:
    amount = to_decimal(value)
    if amount is None or amount <= 0:
        return None
    return amount


# --------------------------
# Tier resolution
# --------------------------
def resolve_tier(customer: Any, customer_type: Any = None) -> Optional[PricingTier]:
    """
    Customer-level fields win over the assigned customer type. A customer
    without a type falls back to its own base price type and percentage.
    """
    if customer is None and customer_type is None:
        return None
    if customer_type is None and customer is not None:
        customer_type = getattr(customer, "customer_type", None)

    base_price_type = getattr(customer, "base_price_type", None) or getattr(customer_type, "base_price_type", None)
    if not base_price_type:
        return None

    percentage = to_decimal(getattr(customer, "percentage", None))
    if percentage is None:
        percentage = to_decimal(getattr(customer_type, "percentage", None))

    return PricingTier(base_price_type=base_price_type, percentage=percentage or ZERO)


def resolve_price_basis(mrp: Any = None, dealer: Any = None, shop: Any = None) -> Optional[PriceBasis]:
    """Resolution order: dealer price, then shop price, then MRP."""
    dealer_amount = _positive(dealer)
    if dealer_amount is not None:
        return DealerBasis(amount=dealer_amount)
    shop_amount = _positive(shop)
    if shop_amount is not None:
        return ShopPriceBasis(amount=shop_amount)
    mrp_amount = _positive(mrp)
    if mrp_amount is not None:
        return MrpBasis(amount=mrp_amount)
    return None


# --------------------------
# Forward / inverse formulas
# --------------------------
def price_from_adjustment(base: Decimal, mode: BasePriceType, percentage: Decimal) -> Decimal:
    base = to_decimal(base) or ZERO
    percentage = to_decimal(percentage) or ZERO
    if BasePriceType(mode) == BasePriceType.dealer:
        price = base * (1 + percentage / HUNDRED)
    else:
        price = base * (1 - percentage / HUNDRED)
    price = round_money(price)
    if price < 0:
        logger.warning("Negative unit price %s from base %s and %s%% (%s)", price, base, percentage, mode)
    return price


def adjustment_from_price(base: Decimal, mode: BasePriceType, price: Decimal) -> Decimal:
    base = to_decimal(base) or ZERO
    price = to_decimal(price) or ZERO
    if base <= 0:
        return ZERO
    if BasePriceType(mode) == BasePriceType.dealer:
        pct = (price - base) / base * HUNDRED
    else:
        pct = (base - price) / base * HUNDRED
    return round_percent(pct)


def price_for_tier(mrp: Any, dealer: Any, shop: Any = None, tier: Optional[PricingTier] = None) -> PricedUnit:
    mrp_amount = _positive(mrp)

    if tier is not None and tier.base_price_type == BasePriceType.dealer:
        basis = resolve_price_basis(mrp=mrp, dealer=dealer, shop=shop)
        base = basis.amount if basis is not None else ZERO
        return PricedUnit(
            base_price=base,
            price_mode=BasePriceType.dealer,
            custom_price=price_from_adjustment(base, BasePriceType.dealer, tier.percentage),
            discount=round_percent(tier.percentage),
        )

    if tier is not None:
        base = mrp_amount or ZERO
        return PricedUnit(
            base_price=base,
            price_mode=BasePriceType.mrp,
            custom_price=price_from_adjustment(base, BasePriceType.mrp, tier.percentage),
            discount=round_percent(tier.percentage),
        )

    # No tier: take the best available price and express it against MRP
    basis = resolve_price_basis(mrp=mrp, dealer=dealer, shop=shop)
    if basis is None:
        return PricedUnit(base_price=ZERO, price_mode=BasePriceType.mrp, custom_price=ZERO, discount=ZERO)

    price = round_money(basis.amount)
    discount = adjustment_from_price(mrp_amount, BasePriceType.mrp, price) if mrp_amount else ZERO
    return PricedUnit(
        base_price=mrp_amount or price,
        price_mode=BasePriceType.mrp,
        custom_price=price,
        discount=discount,
    )


def price_product(product: Any, tier: Optional[PricingTier] = None) -> PricedUnit:
    return price_for_tier(
        getattr(product, "mrp_price", None),
        getattr(product, "dealer_price", None),
        getattr(product, "shop_price", None),
        tier,
    )
