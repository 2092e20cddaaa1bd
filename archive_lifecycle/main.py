# archive_lifecycle/main.py

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from archive_lifecycle.api.dependencies import close_document_store, prepare_document_store
from archive_lifecycle.api.middleware import (
    ActorContextMiddleware,
    CorrelationIdMiddleware,
    RequestAuditMiddleware,
)
from archive_lifecycle.api.routers import health, records
from archive_lifecycle.application.exceptions import ApplicationError, TransportFailureError
from archive_lifecycle.config.logging import configure_logging
from archive_lifecycle.config.settings import get_settings
from archive_lifecycle.domain.exceptions import (
    DomainError,
    DomainValidationError,
    UnknownRecordKindError,
)

settings = get_settings()
configure_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await prepare_document_store()
    yield
    await close_document_store()


app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    debug=settings.debug,
    lifespan=lifespan,
)

# Middleware order: last added runs first (outermost). Request flow: CorrelationId -> ActorContext -> RequestAudit.
app.add_middleware(RequestAuditMiddleware)
app.add_middleware(ActorContextMiddleware)
app.add_middleware(CorrelationIdMiddleware)


@app.exception_handler(DomainValidationError)
async def domain_validation_error_handler(request, exc: DomainValidationError):
    return JSONResponse(status_code=422, content={"detail": exc.message})


@app.exception_handler(UnknownRecordKindError)
async def unknown_kind_error_handler(request, exc: UnknownRecordKindError):
    return JSONResponse(status_code=404, content={"detail": exc.message})


@app.exception_handler(DomainError)
async def domain_error_handler(request, exc: DomainError):
    return JSONResponse(status_code=400, content={"detail": exc.message})


@app.exception_handler(TransportFailureError)
async def transport_failure_error_handler(request, exc: TransportFailureError):
    return JSONResponse(status_code=503, content={"detail": exc.message})


@app.exception_handler(ApplicationError)
async def application_error_handler(request, exc: ApplicationError):
    return JSONResponse(status_code=500, content={"detail": exc.message})


@app.exception_handler(Exception)
async def unexpected_error_handler(request, exc: Exception):
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


# Routers: /health, /records
app.include_router(health.router)
app.include_router(records.router, prefix="/records")
