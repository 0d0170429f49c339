"""
SQLAlchemy model for campaign promises
"""
from sqlalchemy import Column, String, ForeignKey, DateTime, Date, Boolean, Integer, Text, CheckConstraint, Uuid
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid
from datetime import date

from netatrack.core.database import Base


class Promise(Base):
    """
    A campaign promise made by a politician or by a party (never both).
    """
    __tablename__ = "promises"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String, nullable=False, index=True)
    description = Column(Text, nullable=True)
    status = Column(String, nullable=False, default="Pending", index=True)  # Enum: Pending, In Progress, Fulfilled, Broken, Overdue
    category = Column(String, nullable=True, index=True)
    deadline = Column(Date, nullable=True)
    source_url = Column(String, nullable=True)
    evidence_url = Column(String, nullable=True)
    date_added = Column(Date, nullable=False, default=date.today)
    update_log = Column(Text, nullable=True)

    politician_id = Column(Uuid, ForeignKey("politicians.id", ondelete="SET NULL"), nullable=True, index=True)
    party_id = Column(Uuid, ForeignKey("parties.id", ondelete="SET NULL"), nullable=True, index=True)

    is_featured = Column(Boolean, nullable=False, default=False, index=True)
    upvotes = Column(Integer, nullable=False, default=0)
    downvotes = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    politician = relationship("Politician")
    party = relationship("Party")

    __table_args__ = (
        CheckConstraint("politician_id IS NULL OR party_id IS NULL", name="ck_promise_single_sponsor"),
    )

    def __repr__(self):
        return f"<Promise(id={self.id}, title={self.title}, status={self.status})>"
