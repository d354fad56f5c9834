import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.api.v1.endpoints.auth import router as auth_router
from taskboard.api.v1.endpoints.profile import router as profile_router
from taskboard.api.v1.endpoints.tasks import router as tasks_router
from taskboard.core.config import settings
from taskboard.core.database import aget_db, session_manager
from taskboard.core.exceptions import TaskboardError
from taskboard.core.rate_limit import limiter
from taskboard.core.route_guard import RouteGuard
from taskboard.core.security import build_token_codec

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Async context manager for app lifespan events"""

    try:
        logger.info("🚀 Starting Taskboard application...")
        logger.info("🔌 Initializing database connection pool...")
        await session_manager.init()
        logger.info("✅ Database connection pool ready")
    except Exception as e:
        logger.critical(f"🔥 Application startup failed: {str(e)}")
        raise

    try:
        logger.info("🏁 Taskboard application startup complete")
        yield
    finally:
        logger.info("🔌 Closing database connections...")
        await session_manager.close()
        logger.info("👋 Application shutdown complete")


app = FastAPI(
    title="Taskboard API",
    description="Personal task management API",
    version="1.0.0",
    lifespan=lifespan,
)

# Raises at import when JWT_SECRET is empty
app.state.token_codec = build_token_codec()
app.state.route_guard = RouteGuard.from_settings(settings)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.middleware("http")
async def guard_routes(request: Request, call_next):
    has_credential = bool(request.cookies.get(settings.AUTH_COOKIE_NAME))
    decision = request.app.state.route_guard.decide(request.url.path, has_credential)
    if not decision.allowed:
        return RedirectResponse(url=decision.location, status_code=307)
    return await call_next(request)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info(f"Request: {request.method} {request.url}")
    response = await call_next(request)
    logger.info(f"Response status: {response.status_code}")
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(TaskboardError)
async def taskboard_exception_handler(request: Request, exc: TaskboardError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message},
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.error(f"Validation Error: {exc.errors()}")
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request body"},
    )


@app.get(f"{settings.API_PREFIX}/health", tags=["Health Check"])
async def health_check(db: AsyncSession = Depends(aget_db)):
    try:
        await db.execute(text("SELECT 1"))
        return {
            "status": "healthy",
            "service": "Taskboard API",
            "database": "connected",
        }
    except Exception as e:
        logger.error(f"Health check failed: {str(e)}")
        return {
            "status": "unhealthy",
            "service": "Taskboard API",
            "database": "disconnected",
        }


app.include_router(auth_router, prefix=settings.API_PREFIX, tags=["Authentication"])
app.include_router(tasks_router, prefix=settings.API_PREFIX, tags=["Tasks"])
app.include_router(profile_router, prefix=settings.API_PREFIX, tags=["Profile"])

logger.info(f"✅ Loaded {len(app.routes)} routes")
