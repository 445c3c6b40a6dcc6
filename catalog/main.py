import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from catalog.core.config import settings
from catalog.core.logging import setup_logging, get_logger, request_id_ctx
from catalog.db.session import engine, init_models
from catalog.schemas.common import ErrorDetail, ErrorResponse

logger = get_logger("catalog.main")

# Location prefixes FastAPI puts in front of the offending field name
_LOCATION_PREFIXES = {"body", "query", "path", "header"}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown."""
    setup_logging()
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    await init_models(engine)

    yield

    await engine.dispose()
    logger.info("Application shutdown complete")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description=(
        "## Library Catalog API\n\n"
        "- **Books** – Catalog CRUD with genre filter, sorting and limit\n"
        "- **Borrow** – Borrow copies of a book and view the borrowed-books summary\n\n"
        "Every response uses the envelope "
        "`{success, message, data}`; failures carry `errors: [{field, message}]` "
        "when the request body or query did not validate.\n"
    ),
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=[
        {
            "name": "Health",
            "description": "Application health checks",
        },
        {
            "name": "Books",
            "description": "Book catalog management",
        },
        {
            "name": "Borrow",
            "description": "Borrow transactions and the per-book borrow summary",
        },
    ],
    license_info={
        "name": "MIT",
    },
    servers=[
        {"url": "http://localhost:8000", "description": "Local development"},
    ],
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request ID and timing middleware
@app.middleware("http")
async def request_middleware(request: Request, call_next):
    req_id = str(uuid.uuid4())[:8]
    request_id_ctx.set(req_id)

    start_time = time.time()
    response = await call_next(request)
    duration = time.time() - start_time

    logger.info(
        f"{request.method} {request.url.path} -> {response.status_code} "
        f"({duration:.3f}s)"
    )

    response.headers["X-Request-ID"] = req_id
    return response


# ─── Error envelope ─────────────────────────────────────────────


def _error_response(status_code: int, message: str, errors=None) -> JSONResponse:
    body = ErrorResponse(message=message, errors=errors)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return _error_response(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in _LOCATION_PREFIXES]
        errors.append(ErrorDetail(field=".".join(loc), message=err.get("msg", "Invalid value")))
    logger.info(f"Validation failed: {request.method} {request.url.path} errors={len(errors)}")
    return _error_response(status.HTTP_400_BAD_REQUEST, "Validation failed", errors)


@app.exception_handler(SQLAlchemyError)
async def store_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Store error on {request.method} {request.url.path}: {exc}")
    return _error_response(status.HTTP_400_BAD_REQUEST, str(exc))


@app.get("/", include_in_schema=False)
async def root():
    return PlainTextResponse("welcome to library app")


@app.get("/health", tags=["Health"], summary="Health check", description="Returns the current health status and API version.")
async def health_check():
    return {"status": "healthy", "version": settings.APP_VERSION}


# Include routers
from catalog.api.v1.endpoints.books import router as books_router
from catalog.api.v1.endpoints.borrow import router as borrow_router

app.include_router(books_router, prefix=settings.API_PREFIX)
app.include_router(borrow_router, prefix=settings.API_PREFIX)
