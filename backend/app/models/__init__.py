"""
VoterReg Backend — ORM Models
==============================

Importing this package registers every table on `Base.metadata`
(used by Alembic autogenerate and by the SQLite test fixtures).
"""

from app.models.applicant import Applicant, ApplicantSpecialSector, ApplicantVoterRecord
from app.models.application import (
    APPLICATION_STATUSES,
    APPLICATION_TYPES,
    Application,
    ApplicationCorrection,
    ApplicationDeclaredAddress,
    ApplicationReactivation,
    ApplicationRegistration,
    ApplicationReinstatement,
    ApplicationTransfer,
)
from app.models.officer import OFFICER_ACTIONS, Officer, OfficerAssignment

__all__ = [
    "APPLICATION_STATUSES",
    "APPLICATION_TYPES",
    "OFFICER_ACTIONS",
    "Applicant",
    "ApplicantSpecialSector",
    "ApplicantVoterRecord",
    "Application",
    "ApplicationCorrection",
    "ApplicationDeclaredAddress",
    "ApplicationReactivation",
    "ApplicationRegistration",
    "ApplicationReinstatement",
    "ApplicationTransfer",
    "Officer",
    "OfficerAssignment",
]
