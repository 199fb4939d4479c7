"""HTTP middleware: журнал обращений UI к хранилищу."""

import re
import time

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ..core.logging import generate_request_id, get_logger, request_id_var

logger = get_logger("api.requests")

# Не логируем служебные пути
_QUIET_PATHS = {"/health", "/docs", "/redoc", "/openapi.json"}

# Методы, которые меняют файлы на диске
_WRITE_METHODS = {"POST", "PUT", "DELETE"}

# UI может передать свой X-Request-ID, чтобы связать логи моста со своими
_REQUEST_ID_RE = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


def _request_id(request: Request) -> str:
    incoming = request.headers.get("x-request-id", "")
    return incoming if _REQUEST_ID_RE.match(incoming) else generate_request_id()


def _storage_fields(request: Request) -> dict:
    """
    Поля, по которым запрос находится в логах хранилища.

    project_id - из маршрута, owner_id - из фильтра списка,
    user - пользователь, прошедший require_user (для изменяющих запросов).
    """
    fields = {}
    path_params = request.scope.get("path_params") or {}
    if "project_id" in path_params:
        fields["project_id"] = path_params["project_id"]
    if "owner_id" in request.query_params:
        fields["owner_id"] = request.query_params["owner_id"]

    if request.method in _WRITE_METHODS:
        fields["user"] = getattr(request.state, "user_id", None)

    origin = request.headers.get("origin")
    if origin:
        fields["origin"] = origin
    return fields


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Логирует каждое обращение к мосту.

    Кроме метода, пути, статуса и времени пишет id проекта и владельца
    из маршрута, пользователя сессии для записи на диск и Origin.
    Request ID попадает во все логи хранилища, сделанные во время запроса,
    и возвращается клиенту в заголовке X-Request-ID.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = _request_id(request)
        request_id_var.set(request_id)

        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "Request failed",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "duration_ms": int((time.perf_counter() - start_time) * 1000),
                    "error": str(e),
                    **_storage_fields(request),
                },
                exc_info=True,
            )
            raise

        duration_ms = int((time.perf_counter() - start_time) * 1000)
        response.headers["X-Request-ID"] = request_id

        if request.url.path in _QUIET_PATHS:
            return response

        if response.status_code >= 400:
            level = "warning"
        elif request.method in _WRITE_METHODS:
            level = "info"
        else:
            # чтение списка и карточек UI делает постоянно
            level = "debug"

        getattr(logger, level)(
            "Write request" if request.method in _WRITE_METHODS else "Request completed",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "duration_ms": duration_ms,
                **_storage_fields(request),
            },
        )
        return response
