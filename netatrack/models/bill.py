"""
SQLAlchemy model for legislative bills
"""
from sqlalchemy import Column, String, ForeignKey, DateTime, Date, Boolean, Integer, Text, CheckConstraint, Uuid
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid

from netatrack.core.database import Base


class Bill(Base):
    """
    A bill registered in parliament, sponsored by a politician or a party (never both).
    """
    __tablename__ = "bills"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String, nullable=False, index=True)
    registration_number = Column(String, nullable=True, index=True)
    registration_date = Column(Date, nullable=True)
    ministry = Column(String, nullable=True, index=True)
    status = Column(String, nullable=False, default="Proposed", index=True)  # Enum: Proposed, In Committee, Passed House, ...
    proposal_date = Column(Date, nullable=True)
    summary = Column(Text, nullable=True)
    parliament_info_url = Column(String, nullable=True)

    sponsor_politician_id = Column(Uuid, ForeignKey("politicians.id", ondelete="SET NULL"), nullable=True, index=True)
    sponsor_party_id = Column(Uuid, ForeignKey("parties.id", ondelete="SET NULL"), nullable=True, index=True)

    is_featured = Column(Boolean, nullable=False, default=False, index=True)
    upvotes = Column(Integer, nullable=False, default=0)
    downvotes = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    sponsor_politician = relationship("Politician")
    sponsor_party = relationship("Party")

    __table_args__ = (
        CheckConstraint(
            "sponsor_politician_id IS NULL OR sponsor_party_id IS NULL",
            name="ck_bill_single_sponsor",
        ),
    )

    def __repr__(self):
        return f"<Bill(id={self.id}, title={self.title}, status={self.status})>"
