# pavilion/models/quotation_models.py
from sqlalchemy import (
    Column, Integer, String, Text, Boolean, ForeignKey,
    DateTime, Date, JSON, func, DECIMAL
)
from sqlalchemy.orm import relationship
from pavilion.core.db import Base


# ==================================================
# QUOTATION MODEL
# ==================================================
class Quotation(Base):
    __tablename__ = "quotations"

    id = Column(Integer, primary_key=True, index=True)
    quotation_number = Column(String, unique=True, nullable=False)
    reference_number = Column(String, nullable=True)
    status = Column(String(20), nullable=False, default="draft")  # draft | sent | cancelled

    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False)
    customer_snapshot = Column(JSON, nullable=True)

    issue_date = Column(Date, nullable=True)
    valid_until = Column(Date, nullable=True)
    payment_terms = Column(String, nullable=True)
    delivery_terms = Column(String, nullable=True)
    terms_and_conditions = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    show_total = Column(Boolean, default=True)

    # Financial fields
    tax_rate = Column(DECIMAL(5, 2), default=18)
    subtotal = Column(DECIMAL(14, 2), default=0)
    tax = Column(DECIMAL(14, 2), default=0)
    discount_value = Column(DECIMAL(14, 2), default=0)  # kept on record, not applied to totals
    shipping_cost = Column(DECIMAL(14, 2), default=0)
    total_amount = Column(DECIMAL(14, 2), default=0)

    # Audit fields
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    updated_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    customer = relationship("Customer", lazy="selectin")
    items = relationship(
        "QuotationItem",
        back_populates="quotation",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="QuotationItem.position",
    )


# ==================================================
# QUOTATION ITEM MODEL
# ==================================================
class QuotationItem(Base):
    __tablename__ = "quotation_items"

    id = Column(Integer, primary_key=True, index=True)
    quotation_id = Column(Integer, ForeignKey("quotations.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False, default=0)

    # Product snapshot
    product_id = Column(Integer, nullable=False)
    product_name = Column(String, nullable=False)
    sku = Column(String, nullable=True)
    slug = Column(String, nullable=True)
    category_name = Column(String, nullable=True)
    sub_category_name = Column(String, nullable=True)
    brand_name = Column(String, nullable=True)
    image_url = Column(String, nullable=True)
    description = Column(Text, nullable=True)

    # Pricing snapshot
    mrp = Column(DECIMAL(12, 2), default=0)
    dealer_price = Column(DECIMAL(12, 2), nullable=True)
    base_price = Column(DECIMAL(12, 2), default=0)
    price_mode = Column(String(10), nullable=False, default="mrp")
    discount = Column(DECIMAL(9, 4), default=0)
    unit_price = Column(DECIMAL(12, 2), nullable=False)
    quantity = Column(Integer, nullable=False)
    gst_rate = Column(DECIMAL(5, 2), default=18)
    line_total = Column(DECIMAL(14, 2), nullable=False)
    is_detailed = Column(Boolean, default=False)

    quotation = relationship("Quotation", back_populates="items")
