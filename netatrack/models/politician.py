"""
SQLAlchemy models for politicians and their nested records
"""
from sqlalchemy import (
    Column, String, ForeignKey, DateTime, Date, Boolean, Integer, Text, Index, Uuid, text,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid

from netatrack.core.database import Base


class Politician(Base):
    """
    A politician profile with denormalized vote counters
    """
    __tablename__ = "politicians"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False, index=True)
    image_url = Column(String, nullable=True)
    bio = Column(Text, nullable=True)
    date_of_birth = Column(Date, nullable=True)
    province = Column(String, nullable=True, index=True)  # e.g. "Bagmati Province"
    constituency = Column(String, nullable=True)
    position = Column(String, nullable=True)  # e.g. "Member of Parliament"
    education = Column(Text, nullable=True)
    contact_email = Column(String, nullable=True)
    contact_phone = Column(String, nullable=True)
    is_featured = Column(Boolean, nullable=False, default=False, index=True)
    upvotes = Column(Integer, nullable=False, default=0)
    downvotes = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    memberships = relationship("PartyMembership", back_populates="politician", cascade="all, delete-orphan",
                               order_by="PartyMembership.id")
    career_entries = relationship("PoliticalCareerEntry", back_populates="politician", cascade="all, delete-orphan",
                                  order_by="PoliticalCareerEntry.year")
    asset_declarations = relationship("AssetDeclaration", back_populates="politician", cascade="all, delete-orphan",
                                      order_by="AssetDeclaration.id")
    criminal_records = relationship("CriminalRecord", back_populates="politician", cascade="all, delete-orphan",
                                    order_by="CriminalRecord.id")
    social_links = relationship("SocialMediaLink", back_populates="politician", cascade="all, delete-orphan",
                                order_by="SocialMediaLink.id")

    def __repr__(self):
        return f"<Politician(id={self.id}, name={self.name})>"


class PartyMembership(Base):
    """
    A politician's membership in a party. At most one row per politician is active.
    """
    __tablename__ = "party_memberships"

    id = Column(Integer, primary_key=True, autoincrement=True)
    politician_id = Column(Uuid, ForeignKey("politicians.id", ondelete="CASCADE"), nullable=False, index=True)
    party_id = Column(Uuid, ForeignKey("parties.id", ondelete="CASCADE"), nullable=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    role_in_party = Column(String, nullable=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)

    # Relationships
    politician = relationship("Politician", back_populates="memberships")
    party = relationship("Party")

    __table_args__ = (
        Index(
            "uq_party_membership_active",
            "politician_id",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active = 1"),
        ),
    )

    def __repr__(self):
        return f"<PartyMembership(politician_id={self.politician_id}, party_id={self.party_id}, is_active={self.is_active})>"


class PoliticalCareerEntry(Base):
    __tablename__ = "political_career_entries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    politician_id = Column(Uuid, ForeignKey("politicians.id", ondelete="CASCADE"), nullable=False, index=True)
    year = Column(Integer, nullable=True)
    role = Column(String, nullable=False)

    politician = relationship("Politician", back_populates="career_entries")

    def __repr__(self):
        return f"<PoliticalCareerEntry(year={self.year}, role={self.role})>"


class AssetDeclaration(Base):
    __tablename__ = "asset_declarations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    politician_id = Column(Uuid, ForeignKey("politicians.id", ondelete="CASCADE"), nullable=False, index=True)
    summary = Column(Text, nullable=False)
    declaration_date = Column(Date, nullable=True)

    politician = relationship("Politician", back_populates="asset_declarations")
    sources = relationship("AssetDeclarationSource", back_populates="declaration", cascade="all, delete-orphan",
                           order_by="AssetDeclarationSource.id")

    def __repr__(self):
        return f"<AssetDeclaration(id={self.id}, politician_id={self.politician_id})>"


class AssetDeclarationSource(Base):
    __tablename__ = "asset_declaration_sources"

    id = Column(Integer, primary_key=True, autoincrement=True)
    declaration_id = Column(Integer, ForeignKey("asset_declarations.id", ondelete="CASCADE"), nullable=False, index=True)
    url = Column(String, nullable=False)
    description = Column(String, nullable=True)

    declaration = relationship("AssetDeclaration", back_populates="sources")


class CriminalRecord(Base):
    """
    A criminal record entry.
    severity: Minor, Moderate, Significant/Severe
    status: Allegation, Under Investigation, Charges Filed, Acquitted, Convicted, Sentence Served, Expunged
    """
    __tablename__ = "criminal_record_entries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    politician_id = Column(Uuid, ForeignKey("politicians.id", ondelete="CASCADE"), nullable=False, index=True)
    severity = Column(String, nullable=False)
    status = Column(String, nullable=False)
    offense_type = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    case_date = Column(Date, nullable=True)

    politician = relationship("Politician", back_populates="criminal_records")
    sources = relationship("CriminalRecordSource", back_populates="record", cascade="all, delete-orphan",
                           order_by="CriminalRecordSource.id")

    def __repr__(self):
        return f"<CriminalRecord(id={self.id}, status={self.status}, severity={self.severity})>"


class CriminalRecordSource(Base):
    __tablename__ = "criminal_record_sources"

    id = Column(Integer, primary_key=True, autoincrement=True)
    record_id = Column(Integer, ForeignKey("criminal_record_entries.id", ondelete="CASCADE"), nullable=False, index=True)
    url = Column(String, nullable=False)
    description = Column(String, nullable=True)

    record = relationship("CriminalRecord", back_populates="sources")


class SocialMediaLink(Base):
    __tablename__ = "social_media_links"

    id = Column(Integer, primary_key=True, autoincrement=True)
    politician_id = Column(Uuid, ForeignKey("politicians.id", ondelete="CASCADE"), nullable=False, index=True)
    platform = Column(String, nullable=False)  # e.g. Twitter, Facebook
    url = Column(String, nullable=False)

    politician = relationship("Politician", back_populates="social_links")
