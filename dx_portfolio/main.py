"""
Главный файл FastAPI приложения.

Локальный мост между UI и файловым хранилищем DX Portfolio.
Слушает только 127.0.0.1: это не сетевой сервис.

Запуск:
    dx-portfolio
    uvicorn dx_portfolio.main:app --reload

API документация:
    http://127.0.0.1:8000/docs       - Swagger UI
    http://127.0.0.1:8000/redoc      - ReDoc
"""

import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

import uvicorn
from fastapi import APIRouter, Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api import config_router, projects_router, session_router, users_router
from .api.dependencies import get_context, verify_origin
from .api.errors import register_error_handlers
from .api.middleware import RequestLoggingMiddleware
from .context import AppContext
from .core.config import settings
from .core.logging import get_logger, setup_logging

# LOG_LEVEL: DEBUG/INFO/WARNING/ERROR - что логировать
# LOG_FORMAT: json / simple
setup_logging(log_level=settings.LOG_LEVEL, log_format=settings.LOG_FORMAT)

logger = get_logger(__name__)

# ============================================================================
# APPLICATION METADATA
# ============================================================================

APP_VERSION = "1.0.0"
APP_START_TIME: float = 0.0  # Will be set on startup


# ============================================================================
# LIFESPAN EVENT HANDLER
# ============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup: создаём AppContext, сидируем данные, загружаем индекс.
    Shutdown: сбрасываем сессию и состояние в памяти.
    """
    global APP_START_TIME

    APP_START_TIME = time.time()

    context = AppContext(settings.DATA_ROOT, settings.LEGACY_PROJECTS_FILE)
    report = await context.init()
    app.state.context = context

    logger.info(
        "Application started",
        extra={
            "app_name": settings.APP_NAME,
            "version": APP_VERSION,
            "data_root": str(settings.DATA_ROOT),
            "seeded_users": report.seeded_users,
            "imported_projects": report.imported_projects,
        },
    )

    yield

    await context.close()
    uptime = int(time.time() - APP_START_TIME)
    logger.info("Application stopped", extra={"uptime_seconds": uptime})


# ============================================================================
# CREATE APPLICATION
# ============================================================================

app = FastAPI(
    lifespan=lifespan,
    title=settings.APP_NAME,
    description="""
    Портфолио проектов цифровой трансформации (DX).

    ## Хранение

    ```
    data/users.json, data/config.json, data/projects-index.json
    users/{ownerId}/projects/{projectId}/project.json
                                        /images, /videos, /gantt
    ```

    Медиа в API передаются как data URI, на диске лежат отдельными файлами.

    ## Авторизация

    Одна сессия на процесс (POST /api/v1/session/login).
    Читать можно всё, изменять - только свои проекты.
    """,
    version=APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)


# ============================================================================
# MIDDLEWARE
# ============================================================================

# Только origins UI из настроек; preflight с чужого origin получает 400
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "X-Request-ID"],
    expose_headers=["X-Request-ID"],
)

app.add_middleware(RequestLoggingMiddleware)


# ============================================================================
# API VERSIONING
# ============================================================================

api_v1_router = APIRouter(prefix="/api/v1")

api_v1_router.include_router(session_router)
api_v1_router.include_router(users_router)
api_v1_router.include_router(config_router)
api_v1_router.include_router(projects_router)

# Запросы с чужим Origin отклоняются до обработчиков (403 FORBIDDEN_ORIGIN)
app.include_router(api_v1_router, dependencies=[Depends(verify_origin)])

register_error_handlers(app, debug=settings.DEBUG)


# ============================================================================
# ROOT ENDPOINT
# ============================================================================


@app.get("/", tags=["root"], summary="Root endpoint", description="Информация о API")
async def root():
    return {
        "name": settings.APP_NAME,
        "version": APP_VERSION,
        "api_version": "v1",
        "docs": "/docs",
        "endpoints": {
            "session": "/api/v1/session",
            "users": "/api/v1/users",
            "config": "/api/v1/config",
            "projects": "/api/v1/projects",
        },
    }


# ============================================================================
# HEALTH CHECK
# ============================================================================


@app.get(
    "/health", tags=["health"], summary="Health check", description="Проверка работоспособности"
)
async def health_check(context: AppContext = Depends(get_context)):
    """
    Пример ответа (200 OK):
    ```json
    {
        "status": "ok",
        "checks": {
            "storage": "ready",
            "projects": 4,
            "version": "1.0.0",
            "uptime_seconds": 3600
        },
        "timestamp": "2026-01-22T12:00:00Z"
    }
    ```
    503 - контекст не инициализирован.
    """
    uptime_seconds = int(time.time() - APP_START_TIME) if APP_START_TIME > 0 else 0

    checks = {
        "storage": "ready" if context.ready else "not ready",
        "projects": len(context.store.projects),
        "version": APP_VERSION,
        "uptime_seconds": uptime_seconds,
    }

    overall_status = "ok" if context.ready else "error"
    return JSONResponse(
        status_code=200 if context.ready else 503,
        content={
            "status": overall_status,
            "checks": checks,
            "timestamp": datetime.now(UTC).isoformat(),
        },
    )


def run() -> None:
    """Console entry point: serve the bridge on the loopback interface."""
    uvicorn.run("dx_portfolio.main:app", host=settings.HOST, port=settings.PORT)
