from sqlalchemy import Column, Integer, String, Boolean, DateTime, DECIMAL, Text, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from pavilion.core.db import Base


class CustomerType(Base):
    __tablename__ = "customer_types"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False)
    base_price_type = Column(String(10), nullable=False, default="mrp")  # dealer | mrp
    percentage = Column(DECIMAL(6, 2), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        CheckConstraint("percentage >= 0", name="check_customer_type_percentage_non_negative"),
    )


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    company_name = Column(String, nullable=True)
    email = Column(String, unique=True, nullable=False)
    phone = Column(String, nullable=True)
    gst_number = Column(String(20), nullable=True)
    address = Column(Text, nullable=True)

    # Pricing tier; own fields override the assigned type
    customer_type_id = Column(Integer, ForeignKey("customer_types.id"), nullable=True)
    base_price_type = Column(String(10), nullable=True)
    percentage = Column(DECIMAL(6, 2), nullable=True)

    # B2B registration: pending -> approved | rejected
    status = Column(String(20), nullable=False, default="approved")
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, unique=True)

    is_active = Column(Boolean, default=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    updated_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    customer_type = relationship("CustomerType", lazy="selectin")
    contacts = relationship(
        "CustomerContact",
        back_populates="customer",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="CustomerContact.id",
    )

    @property
    def customer_type_name(self):
        return self.customer_type.name if self.customer_type else None

    @property
    def primary_contact(self):
        for contact in self.contacts:
            if contact.is_primary:
                return contact
        return self.contacts[0] if self.contacts else None


class CustomerContact(Base):
    __tablename__ = "customer_contacts"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="CASCADE"), nullable=False)
    name = Column(String, nullable=False)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    designation = Column(String, nullable=True)
    is_primary = Column(Boolean, default=False)

    customer = relationship("Customer", back_populates="contacts")
