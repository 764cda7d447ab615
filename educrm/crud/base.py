from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from educrm.models.audit_log import AuditLog


def jsonable(value: Any) -> Any:
    """Convert a value for storage in a JSON column."""

    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (UUID, Decimal)):
        return str(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [jsonable(v) for v in value]
    return value


def snapshot(obj: Any, fields: list[str] | tuple[str, ...]) -> dict[str, Any]:
    return {f: jsonable(getattr(obj, f, None)) for f in fields}


def add_audit_entry(
    session: AsyncSession,
    *,
    entity_type: str,
    entity_id: UUID,
    action: str,
    user_id: UUID | None,
    old_value: dict[str, Any] | None = None,
    new_value: dict[str, Any] | None = None,
    change_summary: str | None = None,
) -> AuditLog:
    """Stage an audit row in the caller's transaction (no flush, no commit)."""

    entry = AuditLog(
        user_id=user_id,
        entity_type=entity_type,
        entity_id=entity_id,
        action=action,
        old_value=jsonable(old_value) if old_value is not None else None,
        new_value=jsonable(new_value) if new_value is not None else None,
        change_summary=change_summary,
    )
    session.add(entry)
    return entry
