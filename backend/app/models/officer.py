"""
VoterReg Backend — Officer SQLAlchemy Models
=============================================

What:  `officer` (election officers, keyed to an identity) and
       `officer_assignment` (which officer last did what to an application).

Assignment semantics:
    One row per (officer_id, application_number). A second action by the same
    officer on the same application overwrites `action` in place, so the table
    answers "which officer last did X", not "every action ever taken".
"""

from typing import Optional

from sqlalchemy import ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


OFFICER_ACTIONS = ("set_pending", "verify", "approve", "disapprove")


class Officer(Base):
    __tablename__ = "officer"

    officer_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    auth_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    first_name: Mapped[Optional[str]] = mapped_column(String(100))
    last_name: Mapped[Optional[str]] = mapped_column(String(100))
    position: Mapped[Optional[str]] = mapped_column(String(100))


class OfficerAssignment(Base):
    __tablename__ = "officer_assignment"

    assignment_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    officer_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("officer.officer_id"), nullable=False
    )
    application_number: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("application.application_number", ondelete="CASCADE"),
        nullable=False,
    )
    # One of OFFICER_ACTIONS
    action: Mapped[str] = mapped_column(String(20), nullable=False)

    __table_args__ = (
        UniqueConstraint("officer_id", "application_number", name="uq_officer_assignment"),
    )
