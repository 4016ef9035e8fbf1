"""
VoterReg Backend — Pydantic Request/Response Schemas
=====================================================

What:  Pydantic models defining the API contract with the registration UI.
How:   Field names are snake_case in Python and camelCase on the wire
       (alias generator), so the submission form and the flattened read-back
       share one shape: `houseNumber`, `fatherFirstName`, `transferType`, ...
Who:   Used by route handlers and by the intake/review services.

Layout:
    Section mixins (personal, special sector, address, one per detail table)
    are combined into ApplicationForm (what the applicant submits) and
    ApplicationView (what the Application Reader returns).
"""

from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


ApplicationType = Literal[
    "register",
    "transfer",
    "transfer_with_reactivation",
    "reactivation",
    "correction_of_entry",
    "reinstatement",
]


class CamelModel(BaseModel):
    """Base model: snake_case attributes, camelCase JSON, either accepted on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ══════════════════════════════════════════════════════════════════════════
# Form Sections
# ══════════════════════════════════════════════════════════════════════════


class PersonalDetails(CamelModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    middle_name: Optional[str] = None
    suffix: Optional[str] = None
    citizenship_type: Optional[str] = None
    date_of_naturalization: Optional[date] = None
    certificate_number: Optional[str] = None
    profession_occupation: Optional[str] = None
    contact_number: Optional[str] = None
    email_address: Optional[str] = None
    civil_status: Optional[str] = None
    spouse_name: Optional[str] = None
    sex: Optional[str] = None
    date_of_birth: Optional[date] = None
    place_of_birth_municipality: Optional[str] = None
    place_of_birth_province: Optional[str] = None
    father_first_name: Optional[str] = None
    father_last_name: Optional[str] = None
    mother_first_name: Optional[str] = None
    mother_maiden_last_name: Optional[str] = None


class SpecialSectorDetails(CamelModel):
    is_illiterate: Optional[bool] = None
    is_senior_citizen: Optional[bool] = None
    tribe: Optional[str] = None
    type_of_disability: Optional[str] = None
    assistance_needed: Optional[bool] = None
    assistor_name: Optional[str] = None
    vote_on_ground_floor: Optional[bool] = None


class AddressDetails(CamelModel):
    house_number: Optional[str] = None
    street: Optional[str] = None
    barangay: Optional[str] = None
    city_municipality: Optional[str] = None
    province: Optional[str] = None
    years_in_country: Optional[int] = Field(default=None, ge=0)
    years_of_residence_municipality: Optional[int] = Field(default=None, ge=0)
    months_of_residence_municipality: Optional[int] = Field(default=None, ge=0, le=11)
    years_of_residence_address: Optional[int] = Field(default=None, ge=0)
    months_of_residence_address: Optional[int] = Field(default=None, ge=0, le=11)


class RegistrationDetails(CamelModel):
    registration_type: Optional[str] = None
    adult_registration_consent: Optional[bool] = None


class TransferDetails(CamelModel):
    previous_precinct_number: Optional[str] = None
    previous_barangay: Optional[str] = None
    previous_city_municipality: Optional[str] = None
    previous_province: Optional[str] = None
    previous_foreign_post: Optional[str] = None
    previous_country: Optional[str] = None
    transfer_type: Optional[str] = None


class ReactivationDetails(CamelModel):
    reason_for_deactivation: Optional[str] = None


class CorrectionDetails(CamelModel):
    target_field: Optional[str] = None
    current_value: Optional[str] = None
    requested_value: Optional[str] = None


class ReinstatementDetails(CamelModel):
    reinstatement_type: Optional[str] = None


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class ApplicationForm(
    PersonalDetails,
    SpecialSectorDetails,
    AddressDetails,
    RegistrationDetails,
    TransferDetails,
    ReactivationDetails,
    CorrectionDetails,
    ReinstatementDetails,
):
    """
    What:  Everything an applicant can submit in one request.
    How:   Only the sections relevant to `application_type` are persisted;
           ID photos travel as multipart files next to this JSON payload.
    """

    application_type: ApplicationType
    # Checkbox-only flags: they gate the special-sector write but are
    # represented in storage by `tribe` / `type_of_disability`.
    is_indigenous_person: Optional[bool] = None
    is_pwd: Optional[bool] = None


class StatusUpdateRequest(CamelModel):
    status: str = Field(description="pending, verified, approved or disapproved")
    reason_for_disapproval: Optional[str] = Field(
        default=None,
        description="Required when status is 'disapproved'",
    )


class RemarksUpdateRequest(CamelModel):
    remarks: str = Field(default="", description="Officer remarks; blank clears them")


class HearingDateUpdateRequest(CamelModel):
    erb_hearing_date: Optional[date] = Field(
        default=None,
        description="Election Registration Board hearing date; null clears it",
    )


class VoterRecordRequest(CamelModel):
    precinct_number: str
    voter_id: str


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class ApplicationView(
    PersonalDetails,
    SpecialSectorDetails,
    AddressDetails,
    RegistrationDetails,
    TransferDetails,
    ReactivationDetails,
    CorrectionDetails,
    ReinstatementDetails,
):
    """
    What:  Flattened read-back of one application and all its related records.
    Who:   Returned by GET /api/applications/{public_id}.
    """

    id: str = Field(description="Public-facing application identifier")
    application_type: str
    status: str
    submission_date: Optional[datetime] = None
    approval_date: Optional[datetime] = Field(
        default=None,
        description="Processing date of the last status change out of pending",
    )
    remarks: Optional[str] = None
    reason_for_disapproval: Optional[str] = None
    erb_hearing_date: Optional[date] = None
    government_id_front_url: Optional[str] = None
    government_id_back_url: Optional[str] = None
    id_selfie_url: Optional[str] = None


class SubmitResponse(BaseModel):
    public_facing_id: str = Field(description="Identifier to track the new application")
    message: str = Field(default="Application submitted successfully")


class ActionResponse(BaseModel):
    message: str


class OfficerAssignmentItem(CamelModel):
    """Which officer last performed which action on an application."""

    action: str
    officer_first_name: Optional[str] = None
    officer_last_name: Optional[str] = None
    officer_position: Optional[str] = None


class OfficerAssignmentList(CamelModel):
    assignments: List[OfficerAssignmentItem]


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "duplicate_submission",
            "message": "You already have a pending registration application. ...",
            "details": {"blocking_status": "pending"},
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    storage: str = Field(description="Bucket availability: available, missing_buckets")
    uptime_seconds: float = Field(description="Seconds since service started")
