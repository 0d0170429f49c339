"""
SQLAlchemy models for tags and the polymorphic tag link
"""
from sqlalchemy import Column, Integer, String, ForeignKey, Uuid
from sqlalchemy.orm import relationship

from netatrack.core.database import Base


class Tag(Base):
    """A free-text label shared by all entity kinds"""
    __tablename__ = "tags"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, unique=True, nullable=False, index=True)

    # Relationships
    links = relationship("EntityTag", back_populates="tag", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Tag(id={self.id}, name={self.name})>"


class EntityTag(Base):
    """
    Links a tag to a politician, party, promise or bill.
    entity_type is one of: politician, party, promise, bill
    """
    __tablename__ = "entity_tags"

    entity_type = Column(String(16), primary_key=True)
    entity_id = Column(Uuid, primary_key=True, index=True)
    tag_id = Column(Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True)

    # Relationships
    tag = relationship("Tag", back_populates="links")

    def __repr__(self):
        return f"<EntityTag(entity_type={self.entity_type}, entity_id={self.entity_id}, tag_id={self.tag_id})>"
