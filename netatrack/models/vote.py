"""
SQLAlchemy model for the user vote ledger
"""
from sqlalchemy import Column, String, ForeignKey, DateTime, UniqueConstraint, Uuid
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid

from netatrack.core.database import Base


class UserVote(Base):
    """
    A user's up/down vote on a politician, party, promise or bill.
    A neutral vote is the absence of a row.
    """
    __tablename__ = "user_votes"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(String(64), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    item_id = Column(Uuid, nullable=False, index=True)
    item_type = Column(String(16), nullable=False)  # Enum: politician, party, promise, bill
    vote_type = Column(String(8), nullable=False)  # Enum: up, down
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    user = relationship("Profile", back_populates="votes")

    __table_args__ = (
        UniqueConstraint('user_id', 'item_id', 'item_type', name='uq_user_vote_user_item'),
    )

    def __repr__(self):
        return f"<UserVote(user_id={self.user_id}, item_type={self.item_type}, item_id={self.item_id}, vote_type={self.vote_type})>"
