"""
User Model
Volunteer and staff accounts
"""

from sqlalchemy import Column, String, Boolean, DateTime, Index
from pathway_tracker.core.rbac import Role
from pathway_tracker.models.base import SoftDeleteModel


class User(SoftDeleteModel):
    """Application user; ``role`` names an entry of the permission registry"""
    __tablename__ = "users"

    email = Column(String(254), nullable=False, unique=True, index=True)
    hashed_password = Column(String(128), nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    phone = Column(String(32), nullable=True)

    role = Column(String(32), nullable=False, default=Role.VOLUNTEER.value, index=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)

    # Profile
    avatar_url = Column(String(500), nullable=True)
    gender = Column(String(32), nullable=True)
    address = Column(String(255), nullable=True)
    location = Column(String(255), nullable=True)
    postal_code = Column(String(20), nullable=True)
    date_of_birth = Column(String(20), nullable=True)

    # Session tracking
    refresh_token_hash = Column(String(64), nullable=True)
    last_login_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_user_email_active", "email", "is_active"),
    )

    def __repr__(self):
        return f"<User(email='{self.email}', role='{self.role}')>"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
