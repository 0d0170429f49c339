"""
SQLAlchemy models for political parties
"""
from sqlalchemy import Column, String, ForeignKey, DateTime, Date, Boolean, Integer, Numeric, Text, Uuid
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid

from netatrack.core.database import Base


class Party(Base):
    """
    A political party. ideology is stored comma-delimited ("Socialism, Federalism").
    """
    __tablename__ = "parties"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False, unique=True, index=True)
    short_name = Column(String, nullable=True)
    logo_url = Column(String, nullable=True)
    ideology = Column(String, nullable=True)
    founding_date = Column(Date, nullable=True)
    chairperson_id = Column(Uuid, ForeignKey("politicians.id", ondelete="SET NULL"), nullable=True)
    headquarters = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    history = Column(Text, nullable=True)
    election_symbol_url = Column(String, nullable=True)
    website = Column(String, nullable=True)
    contact_email = Column(String, nullable=True)
    contact_phone = Column(String, nullable=True)
    key_policy_positions = Column(Text, nullable=True)
    is_featured = Column(Boolean, nullable=False, default=False, index=True)
    upvotes = Column(Integer, nullable=False, default=0)
    downvotes = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    chairperson = relationship("Politician", foreign_keys=[chairperson_id])
    election_history = relationship("ElectionHistoryEntry", back_populates="party", cascade="all, delete-orphan",
                                    order_by="ElectionHistoryEntry.election_year.desc()")
    controversies = relationship("PartyControversy", back_populates="party", cascade="all, delete-orphan",
                                 order_by="PartyControversy.id")

    def __repr__(self):
        return f"<Party(id={self.id}, name={self.name})>"


class ElectionHistoryEntry(Base):
    """
    A party's result in one election.
    election_type: Federal Parliament, Provincial Assembly, Local Level, National Assembly, By-election - ...
    """
    __tablename__ = "election_history_entries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    party_id = Column(Uuid, ForeignKey("parties.id", ondelete="CASCADE"), nullable=False, index=True)
    election_year = Column(Integer, nullable=False)
    election_type = Column(String, nullable=False)
    seats_contested = Column(Integer, nullable=True)
    seats_won = Column(Integer, nullable=True)
    vote_percentage = Column(Numeric(5, 2), nullable=True)

    party = relationship("Party", back_populates="election_history")

    def __repr__(self):
        return f"<ElectionHistoryEntry(party_id={self.party_id}, year={self.election_year})>"


class PartyControversy(Base):
    __tablename__ = "party_controversies"

    id = Column(Integer, primary_key=True, autoincrement=True)
    party_id = Column(Uuid, ForeignKey("parties.id", ondelete="CASCADE"), nullable=False, index=True)
    description = Column(Text, nullable=False)
    controversy_date = Column(Date, nullable=True)

    party = relationship("Party", back_populates="controversies")
    sources = relationship("PartyControversySource", back_populates="controversy", cascade="all, delete-orphan",
                           order_by="PartyControversySource.id")

    def __repr__(self):
        return f"<PartyControversy(id={self.id}, party_id={self.party_id})>"


class PartyControversySource(Base):
    __tablename__ = "party_controversy_sources"

    id = Column(Integer, primary_key=True, autoincrement=True)
    controversy_id = Column(Integer, ForeignKey("party_controversies.id", ondelete="CASCADE"), nullable=False, index=True)
    url = Column(String, nullable=False)
    description = Column(String, nullable=True)

    controversy = relationship("PartyControversy", back_populates="sources")
