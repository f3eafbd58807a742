# storefront/models/users.py
from sqlalchemy import Column, Integer, String, DateTime, func
from storefront.database import Base

# Account profile: credentials, role and default shipping address
class Profile(Base):
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    full_name = Column(String, nullable=True)
    role = Column(String, nullable=False, default="normal") # "admin" or "normal"

    street = Column(String, nullable=True)
    city = Column(String, nullable=True)
    state = Column(String, nullable=True)
    zip = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())


# Admin-facing user directory, one row per profile sharing its id
class ManagedUser(Base):
    __tablename__ = "managed_users"

    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String, nullable=True)
    email = Column(String, nullable=False, index=True)
    status = Column(String, nullable=False, default="active")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
