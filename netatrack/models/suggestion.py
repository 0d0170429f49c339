"""
SQLAlchemy model for community edit suggestions
"""
from sqlalchemy import Column, String, ForeignKey, DateTime, Boolean, Text, JSON, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func
import uuid

from netatrack.core.database import Base


class Suggestion(Base):
    """
    A proposed create or edit awaiting moderation.

    Lifecycle: pending -> approved | rejected (both terminal).
    suggested_data holds the full form payload and is applied verbatim on approval.
    """
    __tablename__ = "suggestions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    entity_type = Column(String(16), nullable=False, index=True)  # Enum: politician, party, promise, bill
    entity_id = Column(Uuid, nullable=True, index=True)  # Null for new-item suggestions until approved
    suggested_data = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=False)
    is_new_item_suggestion = Column(Boolean, nullable=False, default=False)
    notes = Column(Text, nullable=True)

    submitter_id = Column(String(64), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True, index=True)
    submitter_name = Column(String, nullable=True)

    status = Column(String(16), nullable=False, default="pending", index=True)  # Enum: pending, approved, rejected
    resolved_by = Column(String(64), nullable=True)
    resolved_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Suggestion(id={self.id}, entity_type={self.entity_type}, status={self.status})>"
