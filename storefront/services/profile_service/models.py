from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String

from storefront.core.database import Base, utcnow

# Postal fields shared by Address rows and the profile's embedded billing snapshot
POSTAL_FIELDS = ("address_line1", "address_line2", "city", "state", "postal_code", "country")
# Address columns that cannot be NULL
REQUIRED_POSTAL_FIELDS = ("address_line1", "city", "postal_code")


class UserProfile(Base):
    __tablename__ = "user_profiles"

    id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    tax_id = Column(String(64), nullable=True)
    company_name = Column(String(255), nullable=True)
    phone = Column(String(32), nullable=True)
    phone_prefix = Column(String(8), nullable=True)
    payment_mode = Column(String(16), default="prepaid", nullable=False)
    billing_address = Column(JSON, default=dict, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class Address(Base):
    __tablename__ = "addresses"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String(16), nullable=False)  # shipping, billing
    name = Column(String(255), nullable=False)
    address_line1 = Column(String(255), nullable=False)
    address_line2 = Column(String(255), nullable=True)
    city = Column(String(128), nullable=False)
    state = Column(String(128), nullable=True)
    postal_code = Column(String(32), nullable=False)
    country = Column(String(2), default="ES", nullable=False)
    is_default = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
