from sqlalchemy import Column, String, Text, DateTime, Boolean, JSON, Enum as SQLEnum
import enum

from fundflow.models.base import Base, new_id, utcnow


class Role(str, enum.Enum):
    """User roles; authorization compares them by exact match"""
    DONOR = "donor"
    CREATOR = "creator"
    ADMIN = "admin"


class User(Base):
    """Registered donor, creator or administrator"""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)  # always lower-cased
    password_hash = Column(String(255), nullable=False)
    role = Column(
        SQLEnum(Role, name="user_role", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=Role.DONOR,
    )
    profile_pic = Column(String(500), nullable=False, default="")
    bio = Column(Text, nullable=True)
    social_links = Column(JSON, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    is_verified = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role='{self.role.value}')>"
