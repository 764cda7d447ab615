from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date
from typing import Any
from uuid import UUID

from educrm.errors import NotFoundError, ValidationError
from educrm.schemas.application import (
    ApplicationFilter,
    ApplicationProgress,
    ApplicationRead,
    ApplicationUpdate,
    DecisionStatus,
    FilterOptions,
    VerificationStatus,
)
from educrm.schemas.assignment import FollowUpRead
from educrm.services import lifecycle
from educrm.services.collaborators import ApplicationStore


logger = logging.getLogger("educrm.services")


def require_id(value: Any, field: str) -> UUID:
    """Return ``value`` as a UUID or raise ``ValidationError`` naming ``field``."""

    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(field)
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value).strip())
    except ValueError as e:
        raise ValidationError(field, f"{field} must be a valid id") from e


def require_date(value: Any, field: str) -> date:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(field)
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError as e:
        raise ValidationError(field, f"{field} must be a date (YYYY-MM-DD)") from e


def _decision_status(value: Any) -> str:
    if value is None or value == "":
        return DecisionStatus.PENDING.value
    try:
        return DecisionStatus(value).value
    except ValueError as e:
        allowed = ", ".join(s.value for s in DecisionStatus)
        raise ValidationError("decision_status", f"decision_status must be one of: {allowed}") from e


def _application_uuid(application_id: Any) -> UUID:
    # A malformed id cannot resolve to anything, so it is "not found" rather
    # than a validation problem.
    if isinstance(application_id, UUID):
        return application_id
    try:
        return UUID(str(application_id))
    except ValueError as e:
        raise NotFoundError("application", application_id) from e


class ApplicationTracker:
    """Application lifecycle operations over an ``ApplicationStore``.

    Every mutation issues its collaborator calls one at a time and returns the
    updated entity; re-reading the list afterwards is up to the caller.
    """

    def __init__(self, store: ApplicationStore, *, today: Callable[[], date] = date.today) -> None:
        self._store = store
        self._today = today

    async def list_applications(self, flt: ApplicationFilter | None = None) -> list[ApplicationRead]:
        applications = await self._store.fetch_applications()
        return lifecycle.filter_applications(applications, flt)

    async def filter_options(self) -> FilterOptions:
        return lifecycle.filter_options(await self._store.fetch_applications())

    async def get_application(self, application_id: Any) -> ApplicationRead:
        return await self._store.get_application(_application_uuid(application_id))

    async def create_application(
        self,
        student_id: Any,
        university_id: Any,
        program_name: str | None,
        application_date: date | None = None,
        decision_status: DecisionStatus | str | None = None,
        offer_letter: str | None = None,
        *,
        acting_user: UUID | None = None,
    ) -> ApplicationRead:
        student_uuid = require_id(student_id, "student_id")
        university_uuid = require_id(university_id, "university_id")
        if not program_name or not program_name.strip():
            raise ValidationError("program_name")

        payload = {
            "student_id": student_uuid,
            "university_id": university_uuid,
            "program_name": program_name.strip(),
            "application_date": application_date or self._today(),
            "decision_status": _decision_status(decision_status),
            "offer_letter": offer_letter or None,
        }

        created = await self._store.create_application_record(payload, acting_user=acting_user)
        logger.info("application created id=%s student_id=%s", created.id, student_uuid)
        return created

    async def update_application(
        self,
        application_id: Any,
        changes: ApplicationUpdate,
        *,
        acting_user: UUID | None = None,
    ) -> ApplicationRead:
        app_id = _application_uuid(application_id)
        payload = changes.model_dump(exclude_unset=True)

        if "program_name" in payload:
            name = (payload["program_name"] or "").strip()
            if not name:
                raise ValidationError("program_name")
            payload["program_name"] = name
        if payload.get("decision_status") is not None:
            payload["decision_status"] = DecisionStatus(payload["decision_status"]).value
        # None would null out required columns; only offer_letter may be cleared.
        payload = {k: v for k, v in payload.items() if v is not None or k == "offer_letter"}

        if not payload:
            return await self._store.get_application(app_id)

        updated = await self._store.update_application_record(app_id, payload, acting_user=acting_user)
        logger.info("application updated id=%s fields=%s", app_id, sorted(payload))
        return updated

    async def record_progress(
        self,
        application_id: Any,
        progress: ApplicationProgress,
        *,
        acting_user: UUID | None = None,
    ) -> ApplicationRead:
        """Set stage flags and document flags; verification is untouched."""

        app_id = _application_uuid(application_id)
        payload = progress.model_dump(exclude_unset=True, by_alias=False)
        # Document flags are not nullable; stage flags may be reset to unset.
        payload = {
            k: v for k, v in payload.items() if v is not None or k not in ("travel_insurance", "proof_of_income")
        }
        if not payload:
            return await self._store.get_application(app_id)

        updated = await self._store.update_application_record(app_id, payload, acting_user=acting_user)
        logger.info("application progress id=%s fields=%s", app_id, sorted(payload))
        return updated

    async def delete_application(self, application_id: Any, *, acting_user: UUID | None = None) -> None:
        app_id = _application_uuid(application_id)
        await self._store.delete_application_record(app_id, acting_user=acting_user)
        logger.info("application deleted id=%s", app_id)

    async def assign_counselor(
        self,
        application_id: Any,
        counselor_id: Any,
        follow_up: Any,
        notes: str | None = None,
        *,
        acting_user: UUID | None = None,
    ) -> FollowUpRead:
        counselor_uuid = require_id(counselor_id, "counselor_id")
        follow_up_date = require_date(follow_up, "follow_up")
        app_id = _application_uuid(application_id)

        payload = {
            "application_id": app_id,
            "counselor_id": counselor_uuid,
            "follow_up": follow_up_date,
            "notes": (notes or "").strip() or None,
        }
        record = await self._store.assign_counselor_record(payload, acting_user=acting_user)
        logger.info(
            "counselor assigned application_id=%s counselor_id=%s follow_up=%s",
            app_id,
            counselor_uuid,
            follow_up_date.isoformat(),
        )
        return record

    async def assign_processor(
        self,
        application_id: Any,
        processor_id: Any,
        *,
        acting_user: UUID | None = None,
    ) -> ApplicationRead:
        processor_uuid = require_id(processor_id, "processor_id")
        app_id = _application_uuid(application_id)

        updated = await self._store.assign_processor_record(
            {"application_id": app_id, "processor_id": processor_uuid},
            acting_user=acting_user,
        )
        logger.info("processor assigned application_id=%s processor_id=%s", app_id, processor_uuid)
        return updated

    async def toggle_verification(
        self,
        application_id: Any,
        *,
        acting_user: UUID | None = None,
    ) -> VerificationStatus:
        app_id = _application_uuid(application_id)
        current = await self._store.get_application(app_id)
        new_status = lifecycle.next_verification_status(current.status)

        await self._store.set_verification(app_id, new_status, acting_user=acting_user)
        logger.info("verification toggled id=%s status=%s", app_id, int(new_status))
        return new_status

    async def list_follow_ups(self, application_id: Any) -> list[FollowUpRead]:
        return await self._store.list_follow_ups(_application_uuid(application_id))
