import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from claims import router as claims_router
from claims.repository import ClaimStore
from core import settings
from core.db import Database
from core.errors import ServiceError, ValidationError

logger = logging.getLogger(__name__)

LIVENESS_MESSAGE = "Giveaway claim service is running."

# Empty strings count as missing for the mandatory text fields.
_MISSING_TYPES = ("missing", "string_too_short")


def _error_fields(exc: RequestValidationError) -> tuple[list[str], bool]:
    fields: list[str] = []
    missing = False
    for error in exc.errors():
        # ("body", "selectedPrizes", 0, "name") -> ["selectedPrizes", "0", "name"]
        loc = [str(part) for part in error.get("loc", ())[1:]]
        if loc and loc[0] not in fields:
            fields.append(loc[0])
        if len(loc) <= 1 and (error.get("type") in _MISSING_TYPES or error.get("input", ...) is None):
            missing = True
    return fields, missing


async def _service_error_handler(_: Request, exc: ServiceError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("request_failed method=%s path=%s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": "Internal server error.", "error": str(exc) or exc.__class__.__name__},
    )


async def _request_validation_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    fields, missing = _error_fields(exc)
    if missing:
        message = "Missing required claim fields."
    elif any(error.get("loc", ("",))[0] == "body" for error in exc.errors()):
        message = "Invalid claim fields."
    else:
        message = "Invalid request parameters."
    error = ValidationError(message, fields=fields)
    return JSONResponse(status_code=error.status_code, content=error.to_payload())


def create_app(*, database: Database | None = None, store: ClaimStore | None = None) -> FastAPI:
    database = database or Database.from_env()
    store = store or ClaimStore(database)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup never fails on DB problems; requests report them instead.
        await database.open()
        try:
            await store.init_schema()
        except ServiceError as exc:
            logger.error("claims_schema_failed error=%s detail=%s", exc.message, exc.error)
        try:
            yield
        finally:
            await database.close()

    app = FastAPI(title="giveaway-claims", lifespan=lifespan)
    app.state.database = database
    app.state.claim_store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ServiceError, _service_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)

    app.include_router(claims_router.router, tags=["claims"])

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    @app.get("/", response_class=PlainTextResponse)
    def root() -> str:
        return LIVENESS_MESSAGE

    return app


logging.basicConfig(
    level=settings.log_level(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

app = create_app()
