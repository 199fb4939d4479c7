"""Session / identity service."""

from typing import Protocol

from ..core.logging import get_logger
from ..models import User
from ..repositories import UserRepository

logger = get_logger(__name__)


class Owned(Protocol):
    owner_id: str


class SessionService:
    """
    Сервис пользователей и текущей сессии.

    Содержит:
    - Проверку логина/пароля по плоскому списку пользователей
    - Текущего пользователя (живёт только в памяти процесса)
    - Единственное правило авторизации: can_edit

    ВАЖНО: пароли сравниваются в открытом виде. Это осознанное
    ограничение локального однопользовательского приложения.
    Проверку по солёному хешу можно подставить в authenticate(),
    не меняя вызывающий код.
    """

    def __init__(self, user_repo: UserRepository):
        self.user_repo = user_repo
        self.users: list[User] = []
        self.current_user: User | None = None

    async def load_users(self) -> list[User]:
        users = await self.user_repo.load_all()
        if users is None:
            logger.error("Users file unreadable, no user can log in")
            users = []
        self.users = users
        logger.info("Users loaded", extra={"users": len(users)})
        return self.users

    # ==================== LOOKUPS ====================

    def list_users(self) -> list[User]:
        return list(self.users)

    def get_user(self, user_id: str) -> User | None:
        return next((user for user in self.users if user.id == user_id), None)

    def get_user_by_username(self, username: str) -> User | None:
        return next((user for user in self.users if user.username == username), None)

    # ==================== AUTH ====================

    def authenticate(self, username: str, password: str) -> User | None:
        """
        Проверить логин и пароль.

        Returns:
            Пользователь или None (неизвестный логин или неверный пароль)
        """
        user = self.get_user_by_username(username)
        if user is not None and user.password == password:
            return user
        return None

    def login(self, username: str, password: str) -> User | None:
        user = self.authenticate(username, password)
        if user is None:
            logger.warning("Login rejected", extra={"username": username})
            return None
        self.current_user = user
        logger.info("User logged in", extra={"user_id": user.id})
        return user

    def logout(self) -> None:
        if self.current_user is not None:
            logger.info("User logged out", extra={"user_id": self.current_user.id})
        self.current_user = None

    def can_edit(self, project: Owned | None) -> bool:
        """True only when a user is logged in and owns the project."""
        if self.current_user is None or project is None:
            return False
        return project.owner_id == self.current_user.id

    # ==================== PROFILE ====================

    async def update_avatar(self, user_id: str, avatar: str | None) -> User | None:
        """
        Обновить аватар (единственное изменяемое поле пользователя).

        Returns:
            Обновлённый пользователь или None (нет такого пользователя
            или не удалось записать users.json)
        """
        user = self.get_user(user_id)
        if user is None:
            return None

        updated = user.model_copy(update={"avatar": avatar})
        users = [updated if item.id == user_id else item for item in self.users]
        if not await self.user_repo.save_all(users):
            logger.error("Failed to persist avatar", extra={"user_id": user_id})
            return None

        self.users = users
        if self.current_user is not None and self.current_user.id == user_id:
            self.current_user = updated
        return updated
