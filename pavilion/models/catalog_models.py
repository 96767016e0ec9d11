# pavilion/models/catalog_models.py
from sqlalchemy import (
    Column, Integer, String, Text, Boolean, ForeignKey, Table,
    DateTime, JSON, DECIMAL, CheckConstraint, Index, func
)
from sqlalchemy.orm import relationship
from pavilion.core.db import Base


product_tags = Table(
    "product_tags",
    Base.metadata,
    Column("product_id", Integer, ForeignKey("products.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(150), unique=True, nullable=False)
    slug = Column(String(150), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    image_url = Column(String, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    sub_categories = relationship(
        "SubCategory", back_populates="category", lazy="selectin", cascade="all, delete-orphan"
    )


class SubCategory(Base):
    __tablename__ = "sub_categories"

    id = Column(Integer, primary_key=True, index=True)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(150), nullable=False)
    slug = Column(String(150), unique=True, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    category = relationship("Category", back_populates="sub_categories")


class Brand(Base):
    __tablename__ = "brands"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(150), unique=True, nullable=False)
    slug = Column(String(150), unique=True, nullable=False, index=True)
    logo_url = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Tag(Base):
    __tablename__ = "tags"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False)
    slug = Column(String(100), unique=True, nullable=False)


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    sku = Column(String(100), unique=True, nullable=False, index=True)
    name = Column(String(255), index=True, nullable=False)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    images = Column(JSON, nullable=True)  # list of URLs / paths, first one is the cover

    # Reference prices; any of them may be missing on imported catalog rows
    mrp_price = Column(DECIMAL(12, 2), nullable=True)
    dealer_price = Column(DECIMAL(12, 2), nullable=True)
    shop_price = Column(DECIMAL(12, 2), nullable=True)
    gst_rate = Column(DECIMAL(5, 2), default=18, nullable=False)

    stock = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    is_quote_hidden = Column(Boolean, default=False, nullable=False)

    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    sub_category_id = Column(Integer, ForeignKey("sub_categories.id"), nullable=True)
    brand_id = Column(Integer, ForeignKey("brands.id"), nullable=True)

    category = relationship("Category", lazy="selectin")
    sub_category = relationship("SubCategory", lazy="selectin")
    brand = relationship("Brand", lazy="selectin")
    tags = relationship("Tag", secondary=product_tags, lazy="selectin")

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    updated_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    __table_args__ = (
        CheckConstraint("gst_rate >= 0", name="check_product_gst_non_negative"),
        CheckConstraint("stock >= 0", name="check_product_stock_non_negative"),
        Index("ix_product_category_brand", "category_id", "brand_id"),
    )

    @property
    def category_name(self):
        return self.category.name if self.category else None

    @property
    def sub_category_name(self):
        return self.sub_category.name if self.sub_category else None

    @property
    def brand_name(self):
        return self.brand.name if self.brand else None

    @property
    def image_url(self):
        if isinstance(self.images, list) and self.images:
            return self.images[0]
        if isinstance(self.images, str) and self.images:
            return self.images
        return None

    def __repr__(self):
        return f"<Product(id={self.id}, sku='{self.sku}')>"
