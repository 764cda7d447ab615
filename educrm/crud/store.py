"""SQLAlchemy implementations of the persistence collaborator protocols."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from educrm.crud import application as application_crud
from educrm.crud import invoice as invoice_crud
from educrm.crud import reference as reference_crud
from educrm.errors import NotFoundError, PersistenceError
from educrm.models.application import Application
from educrm.models.student import Student
from educrm.models.university import University
from educrm.schemas.application import ApplicationRead, VerificationStatus
from educrm.schemas.assignment import FollowUpRead
from educrm.schemas.invoice import InvoiceRead
from educrm.schemas.reference import ReferenceOption


logger = logging.getLogger("educrm.crud")


@asynccontextmanager
async def _guard(session: AsyncSession, operation: str) -> AsyncIterator[None]:
    try:
        yield
    except SQLAlchemyError as e:
        await session.rollback()
        logger.warning("storage failure operation=%s error=%s", operation, e.__class__.__name__)
        raise PersistenceError(f"{operation} failed") from e


class SqlApplicationStore:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _load(self, application_id: UUID) -> Application:
        app = await application_crud.get_application(self._session, application_id=application_id)
        if app is None:
            raise NotFoundError("application", application_id)
        return app

    async def _ensure_exists(self, model: type, entity: str, entity_id: UUID) -> None:
        if await self._session.get(model, entity_id) is None:
            raise NotFoundError(entity, entity_id)

    async def _ensure_staff(self, role: str, user_id: UUID) -> None:
        if await reference_crud.get_staff(self._session, user_id=user_id, role=role) is None:
            raise NotFoundError(role, user_id)

    async def fetch_applications(self) -> list[ApplicationRead]:
        async with _guard(self._session, "fetch_applications"):
            rows = await application_crud.list_applications(self._session)
            return [ApplicationRead.model_validate(r) for r in rows]

    async def get_application(self, application_id: UUID) -> ApplicationRead:
        async with _guard(self._session, "get_application"):
            return ApplicationRead.model_validate(await self._load(application_id))

    async def create_application_record(
        self, payload: dict[str, Any], *, acting_user: UUID | None = None
    ) -> ApplicationRead:
        async with _guard(self._session, "create_application"):
            await self._ensure_exists(Student, "student", payload["student_id"])
            await self._ensure_exists(University, "university", payload["university_id"])
            app = await application_crud.create_application(self._session, data=payload, acting_user=acting_user)
            return ApplicationRead.model_validate(app)

    async def update_application_record(
        self, application_id: UUID, payload: dict[str, Any], *, acting_user: UUID | None = None
    ) -> ApplicationRead:
        async with _guard(self._session, "update_application"):
            app = await self._load(application_id)
            updated = await application_crud.update_application(
                self._session, db_obj=app, data=payload, acting_user=acting_user
            )
            return ApplicationRead.model_validate(updated)

    async def delete_application_record(self, application_id: UUID, *, acting_user: UUID | None = None) -> None:
        async with _guard(self._session, "delete_application"):
            app = await self._load(application_id)
            await application_crud.delete_application(self._session, db_obj=app, acting_user=acting_user)

    async def assign_counselor_record(
        self, payload: dict[str, Any], *, acting_user: UUID | None = None
    ) -> FollowUpRead:
        async with _guard(self._session, "assign_counselor"):
            app = await self._load(payload["application_id"])
            await self._ensure_staff("counselor", payload["counselor_id"])
            entry = await application_crud.create_follow_up(
                self._session,
                db_obj=app,
                counselor_id=payload["counselor_id"],
                follow_up=payload["follow_up"],
                notes=payload.get("notes"),
                acting_user=acting_user,
            )
            return FollowUpRead.model_validate(entry)

    async def assign_processor_record(
        self, payload: dict[str, Any], *, acting_user: UUID | None = None
    ) -> ApplicationRead:
        async with _guard(self._session, "assign_processor"):
            app = await self._load(payload["application_id"])
            await self._ensure_staff("processor", payload["processor_id"])
            updated = await application_crud.update_application(
                self._session,
                db_obj=app,
                data={"processor_id": payload["processor_id"]},
                action="assign_processor",
                acting_user=acting_user,
            )
            return ApplicationRead.model_validate(updated)

    async def set_verification(
        self, application_id: UUID, new_status: VerificationStatus, *, acting_user: UUID | None = None
    ) -> None:
        async with _guard(self._session, "set_verification"):
            app = await self._load(application_id)
            await application_crud.update_application(
                self._session,
                db_obj=app,
                data={"status": int(new_status)},
                action="verification",
                acting_user=acting_user,
            )

    async def list_follow_ups(self, application_id: UUID) -> list[FollowUpRead]:
        async with _guard(self._session, "list_follow_ups"):
            await self._load(application_id)
            rows = await application_crud.list_follow_ups(self._session, application_id=application_id)
            return [FollowUpRead.model_validate(r) for r in rows]


class SqlInvoiceStore:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create_invoice_record(self, payload: dict[str, Any]) -> InvoiceRead:
        async with _guard(self._session, "create_invoice"):
            if await self._session.get(Student, payload["student_id"]) is None:
                raise NotFoundError("student", payload["student_id"])
            if await self._session.get(University, payload["university_id"]) is None:
                raise NotFoundError("university", payload["university_id"])
            invoice = await invoice_crud.create_invoice(self._session, data=payload)
            return InvoiceRead.model_validate(invoice)

    async def invoice_id_exists(self, invoice_id: str) -> bool:
        async with _guard(self._session, "invoice_id_exists"):
            return await invoice_crud.invoice_id_exists(self._session, invoice_id=invoice_id)

    async def get_invoice(self, invoice_id: str) -> InvoiceRead:
        async with _guard(self._session, "get_invoice"):
            invoice = await invoice_crud.get_invoice(self._session, invoice_id=invoice_id)
            if invoice is None:
                raise NotFoundError("invoice", invoice_id)
            return InvoiceRead.model_validate(invoice)

    async def fetch_invoices(self, *, created_by: UUID | None = None) -> list[InvoiceRead]:
        async with _guard(self._session, "fetch_invoices"):
            rows = await invoice_crud.list_invoices(self._session, created_by=created_by)
            return [InvoiceRead.model_validate(r) for r in rows]


class SqlReferenceStore:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def fetch_students(self) -> list[ReferenceOption]:
        async with _guard(self._session, "fetch_students"):
            rows = await reference_crud.list_students(self._session)
            return [ReferenceOption(value=str(s.id), label=f"{s.full_name} ({s.email or 'No email'})") for s in rows]

    async def fetch_universities(self) -> list[ReferenceOption]:
        async with _guard(self._session, "fetch_universities"):
            rows = await reference_crud.list_universities(self._session)
            return [ReferenceOption(value=str(u.id), label=u.name) for u in rows]

    async def fetch_counselors(self) -> list[ReferenceOption]:
        return await self._fetch_staff("counselor")

    async def fetch_processors(self) -> list[ReferenceOption]:
        return await self._fetch_staff("processor")

    async def is_active_staff(self, user_id: UUID) -> bool:
        async with _guard(self._session, "is_active_staff"):
            return await reference_crud.get_active_staff(self._session, user_id=user_id) is not None

    async def _fetch_staff(self, role: str) -> list[ReferenceOption]:
        async with _guard(self._session, f"fetch_{role}s"):
            rows = await reference_crud.list_staff(self._session, role=role)
            return [ReferenceOption(value=str(u.id), label=u.full_name) for u in rows]
