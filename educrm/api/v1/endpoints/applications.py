from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from educrm.api.deps import get_acting_user, get_application_tracker
from educrm.schemas.application import (
    ApplicationCreate,
    ApplicationDetail,
    ApplicationFilter,
    ApplicationListResponse,
    ApplicationProgress,
    ApplicationRead,
    ApplicationUpdate,
    FilterOptions,
    Stage,
    VerificationRead,
)
from educrm.schemas.assignment import CounselorAssignment, FollowUpRead, ProcessorAssignment
from educrm.services.application_tracker import ApplicationTracker
from educrm.services.lifecycle import derive_status_badge


logger = logging.getLogger("educrm.api")

router = APIRouter(prefix="/applications", tags=["applications"])

_TRAVEL_INSURANCE_VALUES = {"Complete": True, "Pending": False}


def _detail(app: ApplicationRead) -> ApplicationDetail:
    return ApplicationDetail(**app.model_dump(), status_badge=derive_status_badge(app))


@router.get("", response_model=ApplicationListResponse)
async def list_applications_endpoint(
    university: str | None = Query(None, description="Exact university name"),
    student: str | None = Query(None, description="Exact student name"),
    travel_insurance: str | None = Query(None, description="Complete | Pending"),
    step: str | None = Query(None, description="Application | Interview | Visa"),
    tracker: ApplicationTracker = Depends(get_application_tracker),
) -> ApplicationListResponse:
    if travel_insurance is not None and travel_insurance not in _TRAVEL_INSURANCE_VALUES:
        raise HTTPException(status_code=422, detail="Invalid travel_insurance")

    try:
        stage = Stage(step) if step is not None else None
    except ValueError:
        raise HTTPException(status_code=422, detail="Invalid step")

    flt = ApplicationFilter(
        university=university or None,
        student=student or None,
        travel_insurance=_TRAVEL_INSURANCE_VALUES.get(travel_insurance) if travel_insurance else None,
        stage=stage,
    )
    items = await tracker.list_applications(flt)
    return ApplicationListResponse(items=items, total=len(items))


@router.get("/filter-options", response_model=FilterOptions)
async def filter_options_endpoint(
    tracker: ApplicationTracker = Depends(get_application_tracker),
) -> FilterOptions:
    return await tracker.filter_options()


@router.post("", response_model=ApplicationDetail, status_code=status.HTTP_201_CREATED)
async def create_application_endpoint(
    payload: ApplicationCreate,
    tracker: ApplicationTracker = Depends(get_application_tracker),
    acting_user: uuid.UUID | None = Depends(get_acting_user),
) -> ApplicationDetail:
    app = await tracker.create_application(
        payload.student_id,
        payload.university_id,
        payload.program_name,
        application_date=payload.application_date,
        decision_status=payload.decision_status,
        offer_letter=payload.offer_letter,
        acting_user=acting_user,
    )
    return _detail(app)


@router.get("/{application_id}", response_model=ApplicationDetail)
async def get_application_endpoint(
    application_id: str,
    tracker: ApplicationTracker = Depends(get_application_tracker),
) -> ApplicationDetail:
    return _detail(await tracker.get_application(application_id))


@router.patch("/{application_id}", response_model=ApplicationDetail)
async def patch_application_endpoint(
    application_id: str,
    payload: ApplicationUpdate,
    tracker: ApplicationTracker = Depends(get_application_tracker),
    acting_user: uuid.UUID | None = Depends(get_acting_user),
) -> ApplicationDetail:
    app = await tracker.update_application(application_id, payload, acting_user=acting_user)
    return _detail(app)


@router.delete("/{application_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_application_endpoint(
    application_id: str,
    tracker: ApplicationTracker = Depends(get_application_tracker),
    acting_user: uuid.UUID | None = Depends(get_acting_user),
) -> Response:
    """Hard delete. Deleting an id that is already gone is a 404."""

    await tracker.delete_application(application_id, acting_user=acting_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{application_id}/progress", response_model=ApplicationDetail)
async def record_progress_endpoint(
    application_id: str,
    payload: ApplicationProgress,
    tracker: ApplicationTracker = Depends(get_application_tracker),
    acting_user: uuid.UUID | None = Depends(get_acting_user),
) -> ApplicationDetail:
    app = await tracker.record_progress(application_id, payload, acting_user=acting_user)
    return _detail(app)


@router.post(
    "/{application_id}/counselor",
    response_model=FollowUpRead,
    status_code=status.HTTP_201_CREATED,
)
async def assign_counselor_endpoint(
    application_id: str,
    payload: CounselorAssignment,
    tracker: ApplicationTracker = Depends(get_application_tracker),
    acting_user: uuid.UUID | None = Depends(get_acting_user),
) -> FollowUpRead:
    follow_up = await tracker.assign_counselor(
        application_id,
        payload.counselor_id,
        payload.follow_up,
        payload.notes,
        acting_user=acting_user,
    )

    # Best-effort: the assignment stands even if the broker is down.
    from educrm.worker import dispatch

    try:
        dispatch.enqueue_follow_up_reminder(follow_up_id=follow_up.id, follow_up=follow_up.follow_up)
    except Exception:
        logger.exception(
            "Failed to enqueue follow-up reminder follow_up_id=%s application_id=%s",
            follow_up.id,
            follow_up.application_id,
        )

    return follow_up


@router.post("/{application_id}/processor", response_model=ApplicationDetail)
async def assign_processor_endpoint(
    application_id: str,
    payload: ProcessorAssignment,
    tracker: ApplicationTracker = Depends(get_application_tracker),
    acting_user: uuid.UUID | None = Depends(get_acting_user),
) -> ApplicationDetail:
    app = await tracker.assign_processor(application_id, payload.processor_id, acting_user=acting_user)
    return _detail(app)


@router.post("/{application_id}/verification", response_model=VerificationRead)
async def toggle_verification_endpoint(
    application_id: str,
    tracker: ApplicationTracker = Depends(get_application_tracker),
    acting_user: uuid.UUID | None = Depends(get_acting_user),
) -> VerificationRead:
    new_status = await tracker.toggle_verification(application_id, acting_user=acting_user)
    app_id = uuid.UUID(str(application_id))
    return VerificationRead(application_id=app_id, status=new_status)


@router.get("/{application_id}/follow-ups", response_model=list[FollowUpRead])
async def list_follow_ups_endpoint(
    application_id: str,
    tracker: ApplicationTracker = Depends(get_application_tracker),
) -> list[FollowUpRead]:
    return await tracker.list_follow_ups(application_id)
