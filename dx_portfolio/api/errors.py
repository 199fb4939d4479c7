"""
Обработчики ошибок (Exception Handlers) для API.

Хранилище не бросает исключений: оно возвращает False / None.
Эндпоинты превращают такие результаты в APIError, а handlers ниже -
в единый формат ErrorResponse.
"""

import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .schemas import ErrorBody, ErrorDetail, ErrorResponse

logger = logging.getLogger(__name__)


# =============================================================================
# CUSTOM EXCEPTIONS
# =============================================================================


class APIError(Exception):
    """
    Базовый класс для всех API ошибок.

    Использование:
        raise APIError(
            code="NOT_FOUND",
            message="Project not found",
            status_code=404
        )
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 400,
        details: list[dict] | None = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(message)


class NotFoundError(APIError):
    """
    Ресурс не найден (404).

    Использование:
        raise NotFoundError("Project", "proj001")
    """

    def __init__(self, resource: str, resource_id: str):
        super().__init__(
            code="NOT_FOUND",
            message=f"{resource} with id={resource_id} not found",
            status_code=status.HTTP_404_NOT_FOUND,
        )


class UnauthorizedError(APIError):
    """Нет активной сессии или неверные логин/пароль (401)."""

    def __init__(self, message: str = "Login required"):
        super().__init__(
            code="UNAUTHORIZED",
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
        )


class ForbiddenError(APIError):
    """
    Проект принадлежит другому пользователю (403).

    Проверяется ДО любого обращения к диску.
    """

    def __init__(self, project_id: str):
        super().__init__(
            code="FORBIDDEN",
            message=f"Only the owner can modify project {project_id}",
            status_code=status.HTTP_403_FORBIDDEN,
        )


class OriginNotAllowedError(APIError):
    """Запрос со страницы, которая не является UI приложения (403)."""

    def __init__(self, origin: str):
        super().__init__(
            code="FORBIDDEN_ORIGIN",
            message=f"Origin {origin} is not allowed",
            status_code=status.HTTP_403_FORBIDDEN,
        )


class MediaPathError(APIError):
    """
    Медиа ссылаются на файлы вне папок проекта (422).

    Использование:
        raise MediaPathError([{"field": "images.0", "path": "data/users.json"}])
    """

    def __init__(self, foreign: list[dict[str, str]]):
        super().__init__(
            code="VALIDATION_ERROR",
            message="Media paths must point into the project's own media directories",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details=[
                {"field": item["field"], "message": f"path not allowed: {item['path']}"}
                for item in foreign
            ],
        )


class StorageError(APIError):
    """
    Ошибка ввода-вывода (500).

    Отката нет: пользователь повторяет действие вручную.
    """

    def __init__(self, operation: str, resource_id: str):
        super().__init__(
            code="STORAGE_ERROR",
            message=f"Could not {operation} {resource_id}, please retry",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Преобразует APIError в единый формат ErrorResponse."""
    logger.warning(f"API Error: {exc.code} - {exc.message}")

    details = None
    if exc.details:
        details = [ErrorDetail(field=d["field"], message=d["message"]) for d in exc.details]

    error_response = ErrorResponse(
        error=ErrorBody(code=exc.code, message=exc.message, details=details)
    )

    return JSONResponse(status_code=exc.status_code, content=error_response.model_dump())


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Обработчик для ошибок валидации Pydantic (422).

    ["body", "progress"] -> field "progress",
    ["body", "images", 0, "src"] -> field "images.0.src"
    """
    logger.warning(f"Validation Error: {exc.errors()}")

    details = []
    for error in exc.errors():
        field_path = error.get("loc", [])
        field_name = field_path[-1] if field_path else "unknown"

        if len(field_path) > 1 and field_path[0] == "body":
            field_name = ".".join(str(p) for p in field_path[1:])

        details.append(
            ErrorDetail(field=str(field_name), message=error.get("msg", "Validation error"))
        )

    error_response = ErrorResponse(
        error=ErrorBody(
            code="VALIDATION_ERROR",
            message="Request validation failed",
            details=details,
        )
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_response.model_dump(),
    )


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Обработчик для всех остальных ошибок (500).

    Детали внутренних ошибок клиенту не показываем, только в лог.
    """
    logger.error(f"Internal Error: {type(exc).__name__}: {exc}", exc_info=True)

    error_response = ErrorResponse(
        error=ErrorBody(code="INTERNAL_ERROR", message="Internal error", details=None)
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_response.model_dump(),
    )


# =============================================================================
# РЕГИСТРАЦИЯ HANDLERS
# =============================================================================


def register_error_handlers(app, debug: bool = False):
    """
    Регистрирует все error handlers в приложении FastAPI.

    В DEBUG режиме generic handler не ставим - видно полный traceback.
    """
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    if not debug:
        app.add_exception_handler(Exception, generic_error_handler)

    logger.info("Error handlers registered")
