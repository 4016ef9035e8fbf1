"""
VoterReg Backend — Officer Review Routes
=========================================

What:  Review-side operations on an existing application, addressed by its
       public id:

    PATCH /api/applications/{public_id}/status            status transition
    PATCH /api/applications/{public_id}/remarks           officer remarks
    PATCH /api/applications/{public_id}/erb-hearing-date  ERB hearing date
    POST  /api/applications/{public_id}/approve           approve + voter record
    GET   /api/applications/{public_id}/assignments       who did what

Who:   Called by the officer dashboard. The acting officer is resolved from
       the caller's X-Auth-Id by the services.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from app.dependencies import get_current_auth_id, get_optional_auth_id, get_store
from app.schemas.application import (
    ActionResponse,
    ErrorResponse,
    HearingDateUpdateRequest,
    OfficerAssignmentList,
    RemarksUpdateRequest,
    StatusUpdateRequest,
    VoterRecordRequest,
)
from app.services.approval_service import approval_service
from app.services.status_service import status_service
from app.store import Store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/applications", tags=["Review"])

_NOT_FOUND = {404: {"description": "Unknown application", "model": ErrorResponse}}


@router.patch(
    "/{public_id}/status",
    response_model=ActionResponse,
    responses={
        400: {"description": "Unknown status or missing disapproval reason", "model": ErrorResponse},
        403: {"description": "Caller is not an officer", "model": ErrorResponse},
        **_NOT_FOUND,
    },
    summary="Change an application's status",
)
async def update_status(
    public_id: str,
    body: StatusUpdateRequest,
    auth_id: Optional[str] = Depends(get_optional_auth_id),
    store: Store = Depends(get_store),
) -> ActionResponse:
    await status_service.update_application_status(
        store,
        public_id,
        body.status,
        reason=body.reason_for_disapproval,
        auth_id=auth_id,
    )
    return ActionResponse(message=f"Application status updated to {body.status}")


@router.patch(
    "/{public_id}/remarks",
    response_model=ActionResponse,
    responses=_NOT_FOUND,
    summary="Set or clear officer remarks",
)
async def update_remarks(
    public_id: str,
    body: RemarksUpdateRequest,
    store: Store = Depends(get_store),
) -> ActionResponse:
    await status_service.update_application_remarks(store, public_id, body.remarks)
    return ActionResponse(message="Remarks updated")


@router.patch(
    "/{public_id}/erb-hearing-date",
    response_model=ActionResponse,
    responses=_NOT_FOUND,
    summary="Set or clear the ERB hearing date",
)
async def update_erb_hearing_date(
    public_id: str,
    body: HearingDateUpdateRequest,
    store: Store = Depends(get_store),
) -> ActionResponse:
    await status_service.update_erb_hearing_date(store, public_id, body.erb_hearing_date)
    return ActionResponse(message="ERB hearing date updated")


@router.post(
    "/{public_id}/approve",
    response_model=ActionResponse,
    responses={
        400: {"description": "Blank precinct number or voter ID", "model": ErrorResponse},
        403: {"description": "Caller is not an officer", "model": ErrorResponse},
        500: {"description": "Voter record could not be saved; status reverted", "model": ErrorResponse},
        **_NOT_FOUND,
    },
    summary="Approve an application and issue the voter record",
)
async def approve_application(
    public_id: str,
    body: VoterRecordRequest,
    auth_id: str = Depends(get_current_auth_id),
    store: Store = Depends(get_store),
) -> ActionResponse:
    await approval_service.approve_application_with_voter_record(
        store, public_id, body.precinct_number, body.voter_id, auth_id
    )
    return ActionResponse(message="Application approved and voter record created")


@router.get(
    "/{public_id}/assignments",
    response_model=OfficerAssignmentList,
    responses=_NOT_FOUND,
    summary="List officer actions on an application",
)
async def list_assignments(
    public_id: str,
    store: Store = Depends(get_store),
) -> OfficerAssignmentList:
    items = await status_service.list_officer_assignments(store, public_id)
    return OfficerAssignmentList(assignments=items)
