"""
Dependencies для FastAPI endpoints.

Всё состояние процесса живёт в AppContext (app.state.context):
хранилище проектов, индекс, текущая сессия, конфиг.
Эндпоинты получают нужные части через Depends().

В тестах get_context подменяется через app.dependency_overrides.
"""

from fastapi import Depends, Request

from ..context import AppContext
from ..core.config import settings
from ..models import User
from ..services import ProjectStore, SessionService
from .errors import OriginNotAllowedError, UnauthorizedError


async def verify_origin(request: Request) -> None:
    """
    Dependency: запрос пришёл от UI приложения.

    Сессия одна на процесс и без токенов, поэтому страница с чужого
    сайта в браузере пользователя могла бы вызывать мост от его имени.
    Браузер всегда ставит Origin на cross-origin запросы; запрос
    с Origin не из settings.CORS_ORIGINS отклоняется.
    Запросы без Origin (curl, тот же origin для GET) пропускаются.

    Использование:
        app.include_router(api_v1_router, dependencies=[Depends(verify_origin)])
    """
    origin = request.headers.get("origin")
    if origin is not None and origin not in settings.CORS_ORIGINS:
        raise OriginNotAllowedError(origin)


async def get_context(request: Request) -> AppContext:
    """Контекст приложения, созданный в lifespan."""
    return request.app.state.context


async def get_project_store(context: AppContext = Depends(get_context)) -> ProjectStore:
    return context.store


async def get_session_service(context: AppContext = Depends(get_context)) -> SessionService:
    return context.session


async def require_user(
    request: Request, session: SessionService = Depends(get_session_service)
) -> User:
    """
    Dependency: текущий пользователь или 401.

    id пользователя сохраняется в request.state для журнала запросов.

    Использование:
        @router.delete("/{project_id}")
        async def delete_project(user: User = Depends(require_user)):
            ...
    """
    if session.current_user is None:
        raise UnauthorizedError()
    request.state.user_id = session.current_user.id
    return session.current_user
