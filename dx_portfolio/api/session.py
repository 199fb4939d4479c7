"""
API endpoints для сессии.

Сессия одна на процесс: приложение локальное и однопользовательское,
поэтому токенов и cookies нет. Текущий пользователь хранится
в SessionService и сбрасывается при logout или перезапуске.

URL структура:
- POST /session/login   - войти
- POST /session/logout  - выйти
- GET  /session/me      - текущий пользователь
"""

from fastapi import APIRouter, Depends, status

from ..models import User
from ..services import SessionService
from .dependencies import get_session_service, require_user
from .errors import UnauthorizedError
from .schemas import ErrorResponse, LoginRequest, UserResponse

router = APIRouter(prefix="/session", tags=["session"])


@router.post(
    "/login",
    response_model=UserResponse,
    summary="Войти",
    responses={
        200: {"description": "Вход выполнен"},
        401: {"model": ErrorResponse, "description": "Неверный логин или пароль"},
    },
)
async def login(
    data: LoginRequest, session: SessionService = Depends(get_session_service)
) -> UserResponse:
    """
    Войти под пользователем из data/users.json.

    Пример запроса:
    ```json
    {"username": "hiram", "password": "password123"}
    ```
    """
    user = session.login(data.username, data.password)
    if user is None:
        raise UnauthorizedError("Invalid username or password")
    return UserResponse.model_validate(user.public_dict())


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT, summary="Выйти")
async def logout(session: SessionService = Depends(get_session_service)):
    session.logout()


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Текущий пользователь",
    responses={401: {"model": ErrorResponse, "description": "Нет активной сессии"}},
)
async def current_user(user: User = Depends(require_user)) -> UserResponse:
    return UserResponse.model_validate(user.public_dict())
