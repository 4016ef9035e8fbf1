"""
VoterReg Backend — Application SQLAlchemy Models
=================================================

What:  ORM models for `application` and its per-type detail tables.
How:   The parent row carries type, status and review fields; each detail
       table is keyed by the parent's internal `application_number`, so at
       most one row of each kind can exist per application.
Who:   Written by the Application Writer and the review services; read by
       the Application Reader.

Identifiers:
    application_number  Internal sequence number. Never leaves the backend.
    public_facing_id    Opaque "APP-XXXXXXXXXX" string shown to users and used
                        in every API path.

Registration Uniqueness:
    `uq_application_active_register` is a partial unique index: one applicant
    can hold at most one register application that is pending, verified or
    approved. The Applicant Resolver checks the same rule before writing, but
    the index is what actually holds under concurrent submissions.
"""

import secrets
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


APPLICATION_TYPES = (
    "register",
    "transfer",
    "transfer_with_reactivation",
    "reactivation",
    "correction_of_entry",
    "reinstatement",
)

APPLICATION_STATUSES = ("pending", "verified", "approved", "disapproved")

_ACTIVE_REGISTER_CLAUSE = (
    "application_type = 'register' AND status IN ('pending', 'verified', 'approved')"
)


def generate_public_id() -> str:
    """Returns a new opaque public identifier, e.g. 'APP-7F3A9C21D4'."""
    return f"APP-{secrets.token_hex(5).upper()}"


class Application(Base):
    """
    One submitted request of a specific type.

    Lifecycle:
        pending → verified → approved
        pending / verified → disapproved (reason required)
        any → pending (officer resets; processing_date cleared)
    """

    __tablename__ = "application"

    application_number: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    public_facing_id: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        unique=True,
        default=generate_public_id,
        comment="Opaque identifier exposed to users",
    )
    applicant_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("applicant.applicant_id"),
        nullable=False,
        index=True,
    )
    application_type: Mapped[str] = mapped_column(String(40), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="pending",
        server_default=text("'pending'"),
    )
    application_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
        comment="When the application was submitted (UTC)",
    )
    processing_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        comment="When an officer last moved the application out of pending",
    )
    reason_for_disapproval: Mapped[Optional[str]] = mapped_column(Text)
    erb_hearing_date: Mapped[Optional[date]] = mapped_column(
        Date,
        comment="Election Registration Board hearing date",
    )
    remarks: Mapped[Optional[str]] = mapped_column(Text)

    __table_args__ = (
        Index(
            "uq_application_active_register",
            "applicant_id",
            unique=True,
            postgresql_where=text(_ACTIVE_REGISTER_CLAUSE),
            sqlite_where=text(_ACTIVE_REGISTER_CLAUSE),
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<Application(public_facing_id='{self.public_facing_id}', "
            f"type='{self.application_type}', status='{self.status}')>"
        )


def _application_fk():
    return mapped_column(
        Integer,
        ForeignKey("application.application_number", ondelete="CASCADE"),
        primary_key=True,
    )


class ApplicationRegistration(Base):
    __tablename__ = "application_registration"

    application_number: Mapped[int] = _application_fk()
    registration_type: Mapped[Optional[str]] = mapped_column(String(50))
    adult_registration_consent: Mapped[Optional[bool]] = mapped_column(Boolean)
    government_id_front_url: Mapped[Optional[str]] = mapped_column(Text)
    government_id_back_url: Mapped[Optional[str]] = mapped_column(Text)
    id_selfie_url: Mapped[Optional[str]] = mapped_column(Text)


class ApplicationTransfer(Base):
    __tablename__ = "application_transfer"

    application_number: Mapped[int] = _application_fk()
    previous_precinct_number: Mapped[Optional[str]] = mapped_column(String(50))
    previous_barangay: Mapped[Optional[str]] = mapped_column(String(100))
    previous_city_municipality: Mapped[Optional[str]] = mapped_column(String(100))
    previous_province: Mapped[Optional[str]] = mapped_column(String(100))
    previous_foreign_post: Mapped[Optional[str]] = mapped_column(String(100))
    previous_country: Mapped[Optional[str]] = mapped_column(String(100))
    transfer_type: Mapped[Optional[str]] = mapped_column(String(50))


class ApplicationReactivation(Base):
    __tablename__ = "application_reactivation"

    application_number: Mapped[int] = _application_fk()
    reason_for_deactivation: Mapped[Optional[str]] = mapped_column(Text)


class ApplicationCorrection(Base):
    __tablename__ = "application_correction"

    application_number: Mapped[int] = _application_fk()
    target_field: Mapped[Optional[str]] = mapped_column(String(100))
    current_value: Mapped[Optional[str]] = mapped_column(Text)
    requested_value: Mapped[Optional[str]] = mapped_column(Text)


class ApplicationReinstatement(Base):
    __tablename__ = "application_reinstatement"

    application_number: Mapped[int] = _application_fk()
    reinstatement_type: Mapped[Optional[str]] = mapped_column(String(50))


class ApplicationDeclaredAddress(Base):
    """
    Residence declared on register and transfer applications.

    `house_number_street` holds house number and street joined by a single
    space; see the Application Reader for how it is split back.
    """

    __tablename__ = "application_declared_address"

    application_number: Mapped[int] = _application_fk()
    house_number_street: Mapped[Optional[str]] = mapped_column(String(255))
    barangay: Mapped[Optional[str]] = mapped_column(String(100))
    city_municipality: Mapped[Optional[str]] = mapped_column(String(100))
    province: Mapped[Optional[str]] = mapped_column(String(100))
    years_in_country: Mapped[Optional[int]] = mapped_column(Integer)
    years_of_residence_municipality: Mapped[Optional[int]] = mapped_column(Integer)
    months_of_residence_municipality: Mapped[Optional[int]] = mapped_column(Integer)
    years_of_residence_address: Mapped[Optional[int]] = mapped_column(Integer)
    months_of_residence_address: Mapped[Optional[int]] = mapped_column(Integer)
