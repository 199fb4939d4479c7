"""
API endpoints для пользователей.

Пользователи создаются только при первом запуске (seed).
Изменяемое поле одно - аватар текущего пользователя.
"""

from fastapi import APIRouter, Depends

from ..models import User
from ..services import SessionService
from .dependencies import get_session_service, require_user
from .errors import StorageError
from .schemas import AvatarUpdate, ErrorResponse, UserResponse

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=list[UserResponse], summary="Список пользователей")
async def list_users(session: SessionService = Depends(get_session_service)) -> list[UserResponse]:
    """Все пользователи (без паролей) - нужны UI для подписи владельца проекта."""
    return [UserResponse.model_validate(user.public_dict()) for user in session.list_users()]


@router.put(
    "/me/avatar",
    response_model=UserResponse,
    summary="Обновить аватар",
    responses={
        401: {"model": ErrorResponse, "description": "Нет активной сессии"},
        500: {"model": ErrorResponse, "description": "Не удалось записать users.json"},
    },
)
async def update_avatar(
    data: AvatarUpdate,
    user: User = Depends(require_user),
    session: SessionService = Depends(get_session_service),
) -> UserResponse:
    """
    Заменить аватар текущего пользователя.

    Пример запроса:
    ```json
    {"avatar": "data:image/png;base64,iVBORw0..."}
    ```
    """
    updated = await session.update_avatar(user.id, data.avatar)
    if updated is None:
        raise StorageError("update avatar of", user.id)
    return UserResponse.model_validate(updated.public_dict())
