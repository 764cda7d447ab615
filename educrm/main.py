import logging
import time
import uuid

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from educrm.api.v1.router import router as v1_router
from educrm.config import settings
from educrm.errors import NotFoundError, PersistenceError, ValidationError

logger = logging.getLogger("educrm.api")


def create_app() -> FastAPI:
    logging.getLogger("educrm").setLevel(settings.log_level.upper())

    app = FastAPI(title="Education Consultancy CRM Core API")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        """Attach a request id to every response and log a compact access line.

        - If the caller provides X-Request-ID, we reuse it.
        - Otherwise we generate a UUID4.
        """

        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id

        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000

        response.headers["X-Request-ID"] = request_id
        logger.info(
            "access request_id=%s method=%s path=%s status=%s duration_ms=%.2f",
            request_id,
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
        )
        return response

    def _request_id_from_request(request: Request) -> str | None:
        return getattr(request.state, "request_id", None)

    def _error_response(request: Request, status_code: int, content: dict) -> JSONResponse:
        request_id = _request_id_from_request(request)
        response = JSONResponse(status_code=status_code, content={**content, "request_id": request_id})
        if request_id:
            response.headers["X-Request-ID"] = request_id
        return response

    @app.exception_handler(StarletteHTTPException)
    async def starlette_http_exception_handler(request: Request, exc: StarletteHTTPException):
        return _error_response(request, exc.status_code, {"detail": exc.detail})

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
        return _error_response(request, 422, {"detail": jsonable_errors(exc)})

    @app.exception_handler(ValidationError)
    async def crm_validation_error_handler(request: Request, exc: ValidationError):
        return _error_response(request, 422, {"detail": exc.message, "field": exc.field})

    @app.exception_handler(NotFoundError)
    async def not_found_error_handler(request: Request, exc: NotFoundError):
        return _error_response(request, 404, {"detail": f"{exc.entity.capitalize()} not found"})

    @app.exception_handler(PersistenceError)
    async def persistence_error_handler(request: Request, exc: PersistenceError):
        logger.warning(
            "persistence_error request_id=%s error=%s",
            _request_id_from_request(request),
            exc,
        )
        return _error_response(request, 503, {"detail": str(exc)})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        request_id = _request_id_from_request(request)
        logger.exception("unhandled_error request_id=%s", request_id, exc_info=exc)
        return _error_response(request, 500, {"detail": "Internal Server Error"})

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    app.include_router(v1_router, prefix="/api/v1")
    return app


def jsonable_errors(exc: RequestValidationError) -> list:
    # Pydantic may put exception objects in ``ctx``; they are not JSON serializable.
    errors = []
    for err in exc.errors():
        err = dict(err)
        if "ctx" in err:
            err["ctx"] = {k: str(v) for k, v in err["ctx"].items()}
        errors.append(err)
    return errors


app = create_app()
