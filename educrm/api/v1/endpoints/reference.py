from __future__ import annotations

from fastapi import APIRouter, Depends

from educrm.api.deps import get_reference_store
from educrm.crud.store import SqlReferenceStore
from educrm.schemas.reference import ReferenceOption


router = APIRouter(prefix="/reference", tags=["reference"])


@router.get("/students", response_model=list[ReferenceOption])
async def list_students_endpoint(store: SqlReferenceStore = Depends(get_reference_store)) -> list[ReferenceOption]:
    return await store.fetch_students()


@router.get("/universities", response_model=list[ReferenceOption])
async def list_universities_endpoint(
    store: SqlReferenceStore = Depends(get_reference_store),
) -> list[ReferenceOption]:
    return await store.fetch_universities()


@router.get("/counselors", response_model=list[ReferenceOption])
async def list_counselors_endpoint(
    store: SqlReferenceStore = Depends(get_reference_store),
) -> list[ReferenceOption]:
    return await store.fetch_counselors()


@router.get("/processors", response_model=list[ReferenceOption])
async def list_processors_endpoint(
    store: SqlReferenceStore = Depends(get_reference_store),
) -> list[ReferenceOption]:
    return await store.fetch_processors()
