"""
Тесты для SessionService.

Проверяем:
- Аутентификацию по seed-пользователям
- login / logout
- Правило can_edit
- Обновление аватара
"""

import pytest
import pytest_asyncio

from dx_portfolio.models import IndexEntry
from dx_portfolio.repositories import UserRepository
from dx_portfolio.services import SessionService, default_users


@pytest_asyncio.fixture
async def session(backend) -> SessionService:
    repo = UserRepository(backend)
    await repo.save_all(default_users())
    service = SessionService(repo)
    await service.load_users()
    return service


# ============================================================================
# AUTH
# ============================================================================


@pytest.mark.asyncio
async def test_authenticate_success(session):
    """Test: hiram/password123 - возвращается соответствующий пользователь."""
    user = session.authenticate("hiram", "password123")

    assert user is not None
    assert user.id == "user1"
    assert user.name == "Hiram"


@pytest.mark.asyncio
async def test_authenticate_wrong_password(session):
    """Test: неверный пароль или неизвестный логин - None."""
    assert session.authenticate("hiram", "wrong") is None
    assert session.authenticate("nobody", "password123") is None


@pytest.mark.asyncio
async def test_login_logout(session):
    """Test: login устанавливает текущего пользователя, logout сбрасывает."""
    assert session.login("ana", "wrong") is None
    assert session.current_user is None

    user = session.login("ana", "password123")
    assert session.current_user == user

    session.logout()
    assert session.current_user is None


@pytest.mark.asyncio
async def test_lookups(session):
    """Test: поиск пользователя по ID и логину."""
    assert session.get_user("user2").username == "ana"
    assert session.get_user_by_username("hiram").id == "user1"
    assert session.get_user("user9") is None
    assert [user.id for user in session.list_users()] == ["user1", "user2"]


# ============================================================================
# CAN EDIT
# ============================================================================


@pytest.mark.asyncio
async def test_can_edit(session):
    """Test: нет сессии - False, чужой проект - False, свой - True."""
    own = IndexEntry(id="proj001", owner_id="user1")
    foreign = IndexEntry(id="proj002", owner_id="user2")

    assert not session.can_edit(own)

    session.login("hiram", "password123")
    assert session.can_edit(own)
    assert not session.can_edit(foreign)
    assert not session.can_edit(None)


# ============================================================================
# AVATAR
# ============================================================================


@pytest.mark.asyncio
async def test_update_avatar_persists(session, backend):
    """Test: аватар записывается в users.json и в текущую сессию."""
    session.login("hiram", "password123")

    updated = await session.update_avatar("user1", "data:image/png;base64,AAAA")

    assert updated.avatar == "data:image/png;base64,AAAA"
    assert session.current_user.avatar == "data:image/png;base64,AAAA"
    users = await UserRepository(backend).load_all()
    assert users[0].avatar == "data:image/png;base64,AAAA"
    assert users[0].password == "password123"


@pytest.mark.asyncio
async def test_update_avatar_unknown_user(session):
    """Test: неизвестный пользователь - None."""
    assert await session.update_avatar("user9", None) is None


@pytest.mark.asyncio
async def test_load_users_malformed_file(backend):
    """Test: повреждённый users.json - никто не может войти."""
    (backend.root / "data").mkdir()
    (backend.root / "data" / "users.json").write_text("oops", encoding="utf-8")
    service = SessionService(UserRepository(backend))

    assert await service.load_users() == []
    assert service.login("hiram", "password123") is None
