"""
VoterReg Backend — Application Intake Routes
=============================================

What:  POST /api/applications (submit) and GET /api/applications/{public_id}.
How:   Accepts multipart/form-data: a `payload` field holding the form as
       JSON plus up to three optional photo files. Everything else is done
       by SubmissionService / ApplicationReader.
Who:   Called by the applicant-facing registration UI.

Request Shape (POST):
    payload              JSON ApplicationForm (camelCase keys)
    government_id_front  image file (register only)
    government_id_back   image file (register only)
    id_selfie            image file (register only)
"""

import logging
from typing import Dict, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from pydantic import ValidationError as PydanticValidationError

from app.dependencies import get_current_auth_id, get_store
from app.exceptions import ValidationError
from app.schemas.application import (
    ApplicationForm,
    ApplicationView,
    ErrorResponse,
    SubmitResponse,
)
from app.services.application_reader import application_reader
from app.services.file_service import Attachment
from app.services.submission_service import submission_service
from app.store import Store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/applications", tags=["Applications"])


def parse_form(payload: str) -> ApplicationForm:
    """
    Raises:
        ValidationError: payload is not valid JSON or does not fit the form.
    """
    try:
        return ApplicationForm.model_validate_json(payload)
    except PydanticValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ())) or "payload"
        raise ValidationError(
            message=f"Invalid application form: {location}: {first.get('msg')}",
            field=location,
            context={"errors": e.errors(include_url=False, include_context=False)},
        ) from e


async def read_attachment(upload: Optional[UploadFile]) -> Optional[Attachment]:
    if upload is None or not upload.filename:
        return None
    try:
        content = await upload.read()
    finally:
        await upload.close()
    return Attachment(
        filename=upload.filename,
        content=content,
        content_type=upload.content_type,
    )


@router.post(
    "",
    status_code=201,
    response_model=SubmitResponse,
    responses={
        400: {"description": "Invalid form or photo", "model": ErrorResponse},
        403: {"description": "No caller identity", "model": ErrorResponse},
        404: {"description": "No applicant record for a non-register request", "model": ErrorResponse},
        409: {"description": "Registration already pending, verified or approved", "model": ErrorResponse},
    },
    summary="Submit an application",
)
async def submit_application(
    payload: str = Form(..., description="ApplicationForm as JSON"),
    government_id_front: Optional[UploadFile] = File(default=None),
    government_id_back: Optional[UploadFile] = File(default=None),
    id_selfie: Optional[UploadFile] = File(default=None),
    auth_id: str = Depends(get_current_auth_id),
    store: Store = Depends(get_store),
) -> SubmitResponse:
    form = parse_form(payload)
    attachments: Dict[str, Optional[Attachment]] = {
        "government_id_front": await read_attachment(government_id_front),
        "government_id_back": await read_attachment(government_id_back),
        "id_selfie": await read_attachment(id_selfie),
    }

    logger.info(
        "Received %s application from auth_id=%s (%d files)",
        form.application_type,
        auth_id,
        sum(1 for a in attachments.values() if a is not None),
    )

    public_id = await submission_service.submit(store, form, auth_id, attachments)
    return SubmitResponse(public_facing_id=public_id)


@router.get(
    "/{public_id}",
    response_model=ApplicationView,
    response_model_by_alias=True,
    responses={404: {"description": "Unknown application", "model": ErrorResponse}},
    summary="Get an application with all its details",
)
async def get_application(
    public_id: str,
    store: Store = Depends(get_store),
) -> ApplicationView:
    return await application_reader.get_application(store, public_id)
