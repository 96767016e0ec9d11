# pavilion/models/order_models.py
from sqlalchemy import Column, Integer, String, Text, ForeignKey, DateTime, DECIMAL, func
from sqlalchemy.orm import relationship
from pavilion.core.db import Base


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    order_number = Column(String, unique=True, nullable=False)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False)

    # pending -> approved -> processing -> shipped -> completed, or cancelled
    status = Column(String(20), nullable=False, default="pending")

    tax_rate = Column(DECIMAL(5, 2), default=18)
    subtotal = Column(DECIMAL(14, 2), default=0)
    discount = Column(DECIMAL(14, 2), default=0)
    tax = Column(DECIMAL(14, 2), default=0)
    total = Column(DECIMAL(14, 2), default=0)
    notes = Column(Text, nullable=True)
    edited_by = Column(String, nullable=True)

    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    customer = relationship("Customer", lazy="selectin")
    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="OrderItem.id",
    )


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(Integer, nullable=False)
    product_name = Column(String, nullable=False)
    sku = Column(String, nullable=True)
    mrp = Column(DECIMAL(12, 2), default=0)
    discount = Column(DECIMAL(9, 4), default=0)
    unit_price = Column(DECIMAL(12, 2), nullable=False)
    quantity = Column(Integer, nullable=False)
    line_total = Column(DECIMAL(14, 2), nullable=False)

    order = relationship("Order", back_populates="items")
