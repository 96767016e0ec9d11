"""
Quotation / order line-item builder.

Line items are immutable; every operation takes the current list and returns
a new one, so a draft can be replayed or discarded without side effects.
Adding a product that is already on the list is not an error: the list comes
back unchanged together with a notice for the user.
"""
from decimal import Decimal
import logging
from typing import List, Optional, Any, Iterable

from pydantic import BaseModel, ConfigDict, computed_field

from pavilion.services.pricing_services.calculator import (
    BasePriceType,
    PricingTier,
    price_product,
    price_from_adjustment,
    adjustment_from_price,
    round_money,
    round_percent,
    to_decimal,
    ZERO,
)

logger = logging.getLogger(__name__)

EDITABLE_PRICE_FIELDS = ("discount", "custom_price")


class LineItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_id: int
    name: str
    sku: Optional[str] = None
    slug: Optional[str] = None
    category_name: Optional[str] = None
    sub_category_name: Optional[str] = None
    brand_name: Optional[str] = None
    image_url: Optional[str] = None
    description: Optional[str] = None

    mrp: Decimal = ZERO
    dealer_price: Optional[Decimal] = None
    base_price: Decimal = ZERO
    price_mode: BasePriceType = BasePriceType.mrp
    custom_price: Decimal = ZERO
    discount: Decimal = ZERO
    quantity: int = 1
    gst_rate: Decimal = Decimal("18")
    is_detailed: bool = False

    @computed_field
    @property
    def line_total(self) -> Decimal:
        return round_money(self.custom_price * self.quantity)


class BuilderNotice(BaseModel):
    level: str = "info"
    message: str


class BuilderResult(BaseModel):
    items: List[LineItem]
    notice: Optional[BuilderNotice] = None


def _check_index(items: List[LineItem], index: int) -> None:
    if not 0 <= index < len(items):
        raise IndexError(f"Line item index {index} out of range (0..{len(items) - 1})")


def _replace(items: List[LineItem], index: int, item: LineItem) -> List[LineItem]:
    return [item if i == index else existing for i, existing in enumerate(items)]


def line_item_from_product(product: Any, tier: Optional[PricingTier] = None, quantity: int = 1) -> LineItem:
    priced = price_product(product, tier)
    return LineItem(
        product_id=product.id,
        name=product.name,
        sku=getattr(product, "sku", None),
        slug=getattr(product, "slug", None),
        category_name=getattr(product, "category_name", None),
        sub_category_name=getattr(product, "sub_category_name", None),
        brand_name=getattr(product, "brand_name", None),
        image_url=getattr(product, "image_url", None),
        description=getattr(product, "description", None),
        mrp=to_decimal(getattr(product, "mrp_price", None)) or ZERO,
        dealer_price=to_decimal(getattr(product, "dealer_price", None)),
        base_price=priced.base_price,
        price_mode=priced.price_mode,
        custom_price=priced.custom_price,
        discount=priced.discount,
        quantity=quantity,
        gst_rate=to_decimal(getattr(product, "gst_rate", None)) or Decimal("18"),
    )


# --------------------------
# Builder operations
# --------------------------
def add_product(items: List[LineItem], product: Any, tier: Optional[PricingTier] = None) -> BuilderResult:
    if any(item.product_id == product.id for item in items):
        return BuilderResult(
            items=list(items),
            notice=BuilderNotice(level="warning", message=f"'{product.name}' is already in this quotation"),
        )
    new_item = line_item_from_product(product, tier)
    return BuilderResult(items=[*items, new_item])


def add_products(items: List[LineItem], products: Iterable[Any], tier: Optional[PricingTier] = None) -> BuilderResult:
    added = 0
    skipped = []
    current = list(items)
    for product in products:
        result = add_product(current, product, tier)
        if result.notice:
            skipped.append(product.name)
        else:
            added += 1
        current = result.items

    message = f"Added {added} products"
    if skipped:
        message += f"; skipped {len(skipped)} already in the list"
    return BuilderResult(items=current, notice=BuilderNotice(level="warning" if skipped else "info", message=message))


def update_quantity(items: List[LineItem], index: int, quantity: int) -> List[LineItem]:
    _check_index(items, index)
    if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 0:
        raise ValueError("Quantity must be a non-negative integer")
    return _replace(items, index, items[index].model_copy(update={"quantity": quantity}))


def update_discount_or_price(items: List[LineItem], index: int, field: str, value: Any) -> List[LineItem]:
    """Edit either side of a line's pricing and recompute the other one."""
    _check_index(items, index)
    if field not in EDITABLE_PRICE_FIELDS:
        raise ValueError(f"Field must be one of {EDITABLE_PRICE_FIELDS}, got '{field}'")

    item = items[index]
    amount = to_decimal(value) or ZERO

    if field == "discount":
        update = {
            "discount": round_percent(amount),
            "custom_price": price_from_adjustment(item.base_price, item.price_mode, amount),
        }
    else:
        update = {
            "custom_price": round_money(amount),
            "discount": adjustment_from_price(item.base_price, item.price_mode, amount),
        }
    return _replace(items, index, item.model_copy(update=update))


def remove_item(items: List[LineItem], index: int) -> List[LineItem]:
    _check_index(items, index)
    return [item for i, item in enumerate(items) if i != index]


def toggle_detail(items: List[LineItem], index: int) -> List[LineItem]:
    _check_index(items, index)
    item = items[index]
    return _replace(items, index, item.model_copy(update={"is_detailed": not item.is_detailed}))
