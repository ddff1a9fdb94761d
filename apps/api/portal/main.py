import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from portal.core.database import get_client
from portal.core.settings import settings
from portal.domains.catalog.routes import router as catalog_router
from portal.domains.organizations.routes import router as organizations_router
from portal.domains.tickets.routes import router as tickets_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # Startup
    prisma = get_client() if settings.DATABASE_URL else None
    if prisma is not None:
        await prisma.connect()
    else:
        logger.warning("DATABASE_URL is not set, starting without a database")
    yield
    # Shutdown
    if prisma is not None:
        await prisma.disconnect()


app = FastAPI(
    title="Portal API",
    description="API for organisation tickets, lookup lists and permissions",
    version="0.1.0",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Render errors as {"success": false, "error": ..., "retryable": ...}."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": exc.detail,
            "retryable": getattr(exc, "retryable", False),
        },
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = "; ".join(
        f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
    )
    return JSONResponse(
        status_code=422,
        content={"success": False, "error": errors, "retryable": False},
    )


# Include routers
app.include_router(catalog_router, prefix="/api/v1")
app.include_router(organizations_router, prefix="/api/v1")
app.include_router(tickets_router, prefix="/api/v1")


@app.get("/")
async def root() -> dict[str, str]:
    return {"message": "Portal API is running"}


@app.get("/health")
async def health_check() -> dict[str, str]:
    return {"status": "healthy"}
