"""
SQLAlchemy model for user profiles
"""
from sqlalchemy import Column, String, DateTime, Boolean
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from netatrack.core.database import Base


class Profile(Base):
    """
    Local mirror of an auth-provider account.
    The id is the provider's subject claim; the row is created on first request.
    """
    __tablename__ = "profiles"

    id = Column(String(64), primary_key=True)
    email = Column(String, nullable=True, index=True)
    full_name = Column(String, nullable=True)
    is_admin = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    votes = relationship("UserVote", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Profile(id={self.id}, email={self.email}, is_admin={self.is_admin})>"
