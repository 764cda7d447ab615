from fastapi import APIRouter

from educrm.api.v1.endpoints.applications import router as applications_router
from educrm.api.v1.endpoints.invoices import router as invoices_router
from educrm.api.v1.endpoints.reference import router as reference_router

router = APIRouter()


@router.get("/ping")
async def ping():
    return {"ping": "pong"}


router.include_router(applications_router)
router.include_router(invoices_router)
router.include_router(reference_router)
