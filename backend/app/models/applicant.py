"""
VoterReg Backend — Applicant SQLAlchemy Models
===============================================

What:  ORM models for the person-level tables: `applicant`,
       `applicant_special_sector` and `applicant_voter_record`.
Who:   Written by the Applicant Resolver, the Application Writer (special
       sector) and the Approval Orchestrator (voter record, voting status).

Table Design:
    - applicant: one row per identity (`auth_id` is unique). Re-registration
      after a disapproval updates this row in place; rows are never deleted.
    - applicant_special_sector: 0-or-1 per applicant, keyed by applicant_id,
      overwritten on conflict.
    - applicant_voter_record: created on approval, keyed by applicant_id.
"""

from datetime import date
from typing import Optional

from sqlalchemy import Boolean, Date, ForeignKey, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Applicant(Base):
    """
    A person who has submitted at least one application.

    `father_name` and `mother_maiden_name` are stored as single
    "first last" strings; the Application Reader splits them back.
    """

    __tablename__ = "applicant"

    applicant_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    auth_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
        comment="Identity of the authenticated user who owns this applicant record",
    )

    first_name: Mapped[Optional[str]] = mapped_column(String(100))
    last_name: Mapped[Optional[str]] = mapped_column(String(100))
    middle_name: Mapped[Optional[str]] = mapped_column(String(100))
    suffix: Mapped[Optional[str]] = mapped_column(String(20))
    citizenship_type: Mapped[Optional[str]] = mapped_column(String(50))
    date_of_naturalization: Mapped[Optional[date]] = mapped_column(Date)
    certificate_number: Mapped[Optional[str]] = mapped_column(String(100))
    profession_occupation: Mapped[Optional[str]] = mapped_column(String(100))
    contact_number: Mapped[Optional[str]] = mapped_column(String(30))
    email_address: Mapped[Optional[str]] = mapped_column(String(255))
    civil_status: Mapped[Optional[str]] = mapped_column(String(30))
    spouse_name: Mapped[Optional[str]] = mapped_column(String(200))
    sex: Mapped[Optional[str]] = mapped_column(String(10))
    date_of_birth: Mapped[Optional[date]] = mapped_column(Date)
    place_of_birth_municipality: Mapped[Optional[str]] = mapped_column(String(100))
    place_of_birth_province: Mapped[Optional[str]] = mapped_column(String(100))
    father_name: Mapped[Optional[str]] = mapped_column(String(200))
    mother_maiden_name: Mapped[Optional[str]] = mapped_column(String(200))

    # Values: NULL until first approval, then 'Active'
    voting_status: Mapped[Optional[str]] = mapped_column(String(30))

    def __repr__(self) -> str:
        return f"<Applicant(applicant_id={self.applicant_id}, auth_id='{self.auth_id}')>"


class ApplicantSpecialSector(Base):
    """Accessibility and sector flags declared on a registration."""

    __tablename__ = "applicant_special_sector"

    applicant_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("applicant.applicant_id", ondelete="CASCADE"),
        primary_key=True,
    )
    is_illiterate: Mapped[Optional[bool]] = mapped_column(Boolean)
    is_senior_citizen: Mapped[Optional[bool]] = mapped_column(Boolean)
    tribe: Mapped[Optional[str]] = mapped_column(String(100))
    type_of_disability: Mapped[Optional[str]] = mapped_column(String(100))
    assistance_needed: Mapped[Optional[bool]] = mapped_column(Boolean)
    assistor_name: Mapped[Optional[str]] = mapped_column(String(200))
    vote_on_ground_floor: Mapped[Optional[bool]] = mapped_column(
        Boolean, server_default=text("false")
    )


class ApplicantVoterRecord(Base):
    """Precinct and voter identifiers issued when a registration is approved."""

    __tablename__ = "applicant_voter_record"

    applicant_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("applicant.applicant_id", ondelete="CASCADE"),
        primary_key=True,
    )
    precinct_number: Mapped[str] = mapped_column(String(50), nullable=False)
    voter_id: Mapped[str] = mapped_column(String(50), nullable=False)
