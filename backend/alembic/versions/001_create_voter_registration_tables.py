"""Create voter registration tables

Revision ID: 001
Revises: None
Create Date: 2026-10-18 00:00:00.000000+00:00

What:  Creates the applicant, application, per-type detail, officer and
       voter-record tables.
How:   Detail tables are keyed by the parent's application_number (one row
       each at most); applicant-level tables by applicant_id.

Registration guard:
    uq_application_active_register is a partial unique index; one applicant
    can hold at most one register application that is pending, verified or
    approved.

Rollback: downgrade() drops every table (destructive — all data lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ACTIVE_REGISTER_CLAUSE = (
    "application_type = 'register' AND status IN ('pending', 'verified', 'approved')"
)


def _application_key() -> sa.Column:
    return sa.Column(
        "application_number",
        sa.Integer(),
        sa.ForeignKey("application.application_number", ondelete="CASCADE"),
        primary_key=True,
    )


def upgrade() -> None:
    # ── Applicant ─────────────────────────────────────────────────────────
    op.create_table(
        "applicant",
        sa.Column("applicant_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "auth_id",
            sa.String(64),
            nullable=False,
            unique=True,
            comment="Identity of the authenticated user who owns this applicant record",
        ),
        sa.Column("first_name", sa.String(100)),
        sa.Column("last_name", sa.String(100)),
        sa.Column("middle_name", sa.String(100)),
        sa.Column("suffix", sa.String(20)),
        sa.Column("citizenship_type", sa.String(50)),
        sa.Column("date_of_naturalization", sa.Date()),
        sa.Column("certificate_number", sa.String(100)),
        sa.Column("profession_occupation", sa.String(100)),
        sa.Column("contact_number", sa.String(30)),
        sa.Column("email_address", sa.String(255)),
        sa.Column("civil_status", sa.String(30)),
        sa.Column("spouse_name", sa.String(200)),
        sa.Column("sex", sa.String(10)),
        sa.Column("date_of_birth", sa.Date()),
        sa.Column("place_of_birth_municipality", sa.String(100)),
        sa.Column("place_of_birth_province", sa.String(100)),
        sa.Column("father_name", sa.String(200)),
        sa.Column("mother_maiden_name", sa.String(200)),
        sa.Column("voting_status", sa.String(30)),
    )

    op.create_table(
        "applicant_special_sector",
        sa.Column(
            "applicant_id",
            sa.Integer(),
            sa.ForeignKey("applicant.applicant_id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("is_illiterate", sa.Boolean()),
        sa.Column("is_senior_citizen", sa.Boolean()),
        sa.Column("tribe", sa.String(100)),
        sa.Column("type_of_disability", sa.String(100)),
        sa.Column("assistance_needed", sa.Boolean()),
        sa.Column("assistor_name", sa.String(200)),
        sa.Column("vote_on_ground_floor", sa.Boolean(), server_default=sa.text("false")),
    )

    op.create_table(
        "applicant_voter_record",
        sa.Column(
            "applicant_id",
            sa.Integer(),
            sa.ForeignKey("applicant.applicant_id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("precinct_number", sa.String(50), nullable=False),
        sa.Column("voter_id", sa.String(50), nullable=False),
    )

    # ── Application ───────────────────────────────────────────────────────
    op.create_table(
        "application",
        sa.Column("application_number", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "public_facing_id",
            sa.String(20),
            nullable=False,
            unique=True,
            comment="Opaque identifier exposed to users",
        ),
        sa.Column(
            "applicant_id",
            sa.Integer(),
            sa.ForeignKey("applicant.applicant_id"),
            nullable=False,
        ),
        sa.Column("application_type", sa.String(40), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'pending'")),
        sa.Column(
            "application_date",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
            comment="When the application was submitted (UTC)",
        ),
        sa.Column(
            "processing_date",
            sa.TIMESTAMP(timezone=True),
            comment="When an officer last moved the application out of pending",
        ),
        sa.Column("reason_for_disapproval", sa.Text()),
        sa.Column("erb_hearing_date", sa.Date(), comment="Election Registration Board hearing date"),
        sa.Column("remarks", sa.Text()),
    )
    op.create_index("ix_application_applicant_id", "application", ["applicant_id"])
    op.create_index(
        "uq_application_active_register",
        "application",
        ["applicant_id"],
        unique=True,
        postgresql_where=sa.text(ACTIVE_REGISTER_CLAUSE),
        sqlite_where=sa.text(ACTIVE_REGISTER_CLAUSE),
    )

    # ── Application Details (0-or-1 each) ─────────────────────────────────
    op.create_table(
        "application_registration",
        _application_key(),
        sa.Column("registration_type", sa.String(50)),
        sa.Column("adult_registration_consent", sa.Boolean()),
        sa.Column("government_id_front_url", sa.Text()),
        sa.Column("government_id_back_url", sa.Text()),
        sa.Column("id_selfie_url", sa.Text()),
    )
    op.create_table(
        "application_transfer",
        _application_key(),
        sa.Column("previous_precinct_number", sa.String(50)),
        sa.Column("previous_barangay", sa.String(100)),
        sa.Column("previous_city_municipality", sa.String(100)),
        sa.Column("previous_province", sa.String(100)),
        sa.Column("previous_foreign_post", sa.String(100)),
        sa.Column("previous_country", sa.String(100)),
        sa.Column("transfer_type", sa.String(50)),
    )
    op.create_table(
        "application_reactivation",
        _application_key(),
        sa.Column("reason_for_deactivation", sa.Text()),
    )
    op.create_table(
        "application_correction",
        _application_key(),
        sa.Column("target_field", sa.String(100)),
        sa.Column("current_value", sa.Text()),
        sa.Column("requested_value", sa.Text()),
    )
    op.create_table(
        "application_reinstatement",
        _application_key(),
        sa.Column("reinstatement_type", sa.String(50)),
    )
    op.create_table(
        "application_declared_address",
        _application_key(),
        sa.Column("house_number_street", sa.String(255)),
        sa.Column("barangay", sa.String(100)),
        sa.Column("city_municipality", sa.String(100)),
        sa.Column("province", sa.String(100)),
        sa.Column("years_in_country", sa.Integer()),
        sa.Column("years_of_residence_municipality", sa.Integer()),
        sa.Column("months_of_residence_municipality", sa.Integer()),
        sa.Column("years_of_residence_address", sa.Integer()),
        sa.Column("months_of_residence_address", sa.Integer()),
    )

    # ── Officers ──────────────────────────────────────────────────────────
    op.create_table(
        "officer",
        sa.Column("officer_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("auth_id", sa.String(64), nullable=False, unique=True),
        sa.Column("first_name", sa.String(100)),
        sa.Column("last_name", sa.String(100)),
        sa.Column("position", sa.String(100)),
    )
    op.create_table(
        "officer_assignment",
        sa.Column("assignment_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("officer_id", sa.Integer(), sa.ForeignKey("officer.officer_id"), nullable=False),
        sa.Column(
            "application_number",
            sa.Integer(),
            sa.ForeignKey("application.application_number", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("action", sa.String(20), nullable=False),
        sa.UniqueConstraint("officer_id", "application_number", name="uq_officer_assignment"),
    )


def downgrade() -> None:
    """Drops every table, children first."""
    op.drop_table("officer_assignment")
    op.drop_table("officer")
    for table in (
        "application_declared_address",
        "application_reinstatement",
        "application_correction",
        "application_reactivation",
        "application_transfer",
        "application_registration",
    ):
        op.drop_table(table)
    op.drop_index("uq_application_active_register", table_name="application")
    op.drop_index("ix_application_applicant_id", table_name="application")
    op.drop_table("application")
    op.drop_table("applicant_voter_record")
    op.drop_table("applicant_special_sector")
    op.drop_table("applicant")
