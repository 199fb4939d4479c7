"""
Pytest fixtures для тестов.

Предоставляет:
- backend: файловое хранилище в tmp_path (изолированный корень на тест)
- store: ProjectStore поверх него с пустым индексом
- context: инициализированный AppContext (seed пользователей и конфига)
- test_client: HTTP клиент для тестирования API endpoints
"""

import base64

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from dx_portfolio.api.dependencies import get_context
from dx_portfolio.context import AppContext
from dx_portfolio.main import app
from dx_portfolio.services import ProjectStore
from dx_portfolio.storage import StorageBackend

# Минимальный валидный PNG (1x1, прозрачный)
PNG_BYTES = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)


def data_uri(payload: bytes, mime_type: str = "image/png") -> str:
    return f"data:{mime_type};base64,{base64.b64encode(payload).decode('ascii')}"


def project_data(project_id: str = "proj001", owner_id: str = "user1", **overrides) -> dict:
    """Полная запись проекта в формате UI (camelCase)."""
    data = {
        "id": project_id,
        "ownerId": owner_id,
        "title": "Demo",
        "icon": "🚀",
        "status": "discovery",
        "priority": "medium",
        "progress": 0,
        "targetDate": "2026-12-31",
        "currentPhase": "Research",
        "achievements": {"2026-01": "Kickoff"},
        "blockers": {"type": "info", "message": ""},
        "nextSteps": {"2026-02": "Prototype"},
        "ganttImage": None,
        "images": [],
        "videos": [],
        "createdAt": "2026-01-10",
        "updatedAt": "2026-01-10",
    }
    data.update(overrides)
    return data


@pytest.fixture
def png_bytes() -> bytes:
    return PNG_BYTES


@pytest.fixture
def backend(tmp_path) -> StorageBackend:
    """Хранилище с корнем во временной папке теста."""
    return StorageBackend(tmp_path)


@pytest.fixture
def store(backend) -> ProjectStore:
    """ProjectStore с пустым индексом в памяти."""
    return ProjectStore(backend)


@pytest_asyncio.fixture
async def context(tmp_path):
    """
    Полностью инициализированный контекст приложения.

    init() сидирует users.json, config.json и пустой индекс.
    """
    app_context = AppContext(tmp_path)
    await app_context.init()
    yield app_context
    await app_context.close()


@pytest_asyncio.fixture
async def test_client(context):
    """
    HTTP клиент для тестирования API endpoints.

    ASGITransport не запускает lifespan, поэтому контекст
    подставляется через dependency_overrides.
    """

    async def override_get_context():
        return context

    app.dependency_overrides[get_context] = override_get_context

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def logged_in_client(test_client, context):
    """Клиент с активной сессией hiram (user1)."""
    response = await test_client.post(
        "/api/v1/session/login", json={"username": "hiram", "password": "password123"}
    )
    assert response.status_code == 200
    return test_client


# Pytest configuration
@pytest.fixture(scope="session")
def anyio_backend():
    """Используем asyncio для всех async тестов."""
    return "asyncio"
