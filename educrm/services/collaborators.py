"""Contracts of the persistence collaborator.

The services only ever talk to storage through these protocols. Unknown ids
raise ``NotFoundError``; any storage failure raises ``PersistenceError``.
"""

from __future__ import annotations

from typing import Any, Protocol
from uuid import UUID

from educrm.schemas.application import ApplicationRead, VerificationStatus
from educrm.schemas.assignment import FollowUpRead
from educrm.schemas.invoice import InvoiceRead
from educrm.schemas.reference import ReferenceOption


class ApplicationStore(Protocol):
    async def fetch_applications(self) -> list[ApplicationRead]: ...

    async def get_application(self, application_id: UUID) -> ApplicationRead: ...

    async def create_application_record(
        self, payload: dict[str, Any], *, acting_user: UUID | None = None
    ) -> ApplicationRead: ...

    async def update_application_record(
        self, application_id: UUID, payload: dict[str, Any], *, acting_user: UUID | None = None
    ) -> ApplicationRead: ...

    async def delete_application_record(self, application_id: UUID, *, acting_user: UUID | None = None) -> None: ...

    async def assign_counselor_record(
        self, payload: dict[str, Any], *, acting_user: UUID | None = None
    ) -> FollowUpRead: ...

    async def assign_processor_record(
        self, payload: dict[str, Any], *, acting_user: UUID | None = None
    ) -> ApplicationRead: ...

    async def set_verification(
        self, application_id: UUID, new_status: VerificationStatus, *, acting_user: UUID | None = None
    ) -> None: ...

    async def list_follow_ups(self, application_id: UUID) -> list[FollowUpRead]: ...


class InvoiceStore(Protocol):
    async def create_invoice_record(self, payload: dict[str, Any]) -> InvoiceRead: ...

    async def invoice_id_exists(self, invoice_id: str) -> bool: ...

    async def get_invoice(self, invoice_id: str) -> InvoiceRead: ...

    async def fetch_invoices(self, *, created_by: UUID | None = None) -> list[InvoiceRead]: ...


class ReferenceStore(Protocol):
    async def fetch_students(self) -> list[ReferenceOption]: ...

    async def fetch_universities(self) -> list[ReferenceOption]: ...

    async def fetch_counselors(self) -> list[ReferenceOption]: ...

    async def fetch_processors(self) -> list[ReferenceOption]: ...

    async def is_active_staff(self, user_id: UUID) -> bool: ...
