"""
Тесты для API Layer (REST endpoints).

Проверяем:
- HTTP статус-коды
- Формат ошибок ErrorResponse (401, 403, 404, 422)
- Интеграцию слоёв (API -> ProjectStore -> файлы на диске)
"""

import logging

import pytest
from httpx import AsyncClient

from conftest import data_uri, project_data
from dx_portfolio.core.config import settings

# ============================================================================
# HEALTH / ROOT
# ============================================================================


@pytest.mark.asyncio
async def test_health(test_client: AsyncClient):
    """Test: GET /health - контекст готов."""
    response = await test_client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["checks"]["storage"] == "ready"
    assert response.headers["X-Request-ID"]


# ============================================================================
# SESSION API TESTS
# ============================================================================


@pytest.mark.asyncio
async def test_login_success(test_client: AsyncClient):
    """Test: POST /session/login - пароль не возвращается."""
    response = await test_client.post(
        "/api/v1/session/login", json={"username": "hiram", "password": "password123"}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["id"] == "user1"
    assert data["username"] == "hiram"
    assert "password" not in data


@pytest.mark.asyncio
async def test_login_wrong_password(test_client: AsyncClient):
    """Test: неверный пароль - 401 UNAUTHORIZED."""
    response = await test_client.post(
        "/api/v1/session/login", json={"username": "hiram", "password": "wrong"}
    )

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "UNAUTHORIZED"


@pytest.mark.asyncio
async def test_me_and_logout(logged_in_client: AsyncClient):
    """Test: /session/me до и после logout."""
    response = await logged_in_client.get("/api/v1/session/me")
    assert response.status_code == 200
    assert response.json()["name"] == "Hiram"

    response = await logged_in_client.post("/api/v1/session/logout")
    assert response.status_code == 204

    response = await logged_in_client.get("/api/v1/session/me")
    assert response.status_code == 401


# ============================================================================
# USERS / CONFIG API TESTS
# ============================================================================


@pytest.mark.asyncio
async def test_list_users_without_passwords(test_client: AsyncClient):
    """Test: GET /users - оба seed-пользователя, без паролей."""
    response = await test_client.get("/api/v1/users")

    assert response.status_code == 200
    data = response.json()
    assert [user["username"] for user in data] == ["hiram", "ana"]
    assert all("password" not in user for user in data)


@pytest.mark.asyncio
async def test_update_avatar(logged_in_client: AsyncClient, context):
    """Test: PUT /users/me/avatar - аватар сохраняется."""
    response = await logged_in_client.put(
        "/api/v1/users/me/avatar", json={"avatar": "data:image/png;base64,AAAA"}
    )

    assert response.status_code == 200
    assert response.json()["avatar"] == "data:image/png;base64,AAAA"
    assert context.session.get_user("user1").avatar == "data:image/png;base64,AAAA"


@pytest.mark.asyncio
async def test_update_avatar_requires_session(test_client: AsyncClient):
    """Test: без сессии - 401."""
    response = await test_client.put("/api/v1/users/me/avatar", json={"avatar": None})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_config_lookup(test_client: AsyncClient):
    """Test: GET /config и /config/{kind}/{key}, неизвестный ключ - {}."""
    response = await test_client.get("/api/v1/config")
    assert response.status_code == 200
    assert "in-progress" in response.json()["projectStatuses"]

    response = await test_client.get("/api/v1/config/priorities/high")
    assert response.json()["badgeClass"] == "badge-priority-high"

    response = await test_client.get("/api/v1/config/statuses/unknown")
    assert response.status_code == 200
    assert response.json() == {}


# ============================================================================
# PROJECT API TESTS
# ============================================================================


@pytest.mark.asyncio
async def test_create_project(logged_in_client: AsyncClient, png_bytes):
    """Test: POST /projects - ID назначает сервер, ответ - запись индекса."""
    payload = project_data(
        project_id="ignored",
        owner_id="user2",
        images=[{"src": data_uri(png_bytes), "title": "Screen"}],
    )

    response = await logged_in_client.post("/api/v1/projects", json=payload)

    assert response.status_code == 201
    data = response.json()
    assert data["id"] == "proj001"
    assert data["ownerId"] == "user1"
    assert data["imageCount"] == 1
    assert data["images"][0]["path"].endswith("/images/image_1.png")
    assert "src" not in data["images"][0]


@pytest.mark.asyncio
async def test_create_project_requires_session(test_client: AsyncClient):
    """Test: без сессии - 401, ничего не сохраняется."""
    response = await test_client.post("/api/v1/projects", json=project_data())

    assert response.status_code == 401
    response = await test_client.get("/api/v1/projects")
    assert response.json() == []


@pytest.mark.asyncio
async def test_create_project_validation_error(logged_in_client: AsyncClient):
    """Test: progress > 100 - 422 VALIDATION_ERROR с полем."""
    response = await logged_in_client.post("/api/v1/projects", json=project_data(progress=101))

    assert response.status_code == 422
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert any(detail["field"] == "progress" for detail in error["details"])


@pytest.mark.asyncio
async def test_create_project_rejects_media_type(logged_in_client: AsyncClient):
    """Test: видео в images (не из allow-list) - 422."""
    payload = project_data(images=[{"src": data_uri(b"clip", "video/mp4")}])

    response = await logged_in_client.post("/api/v1/projects", json=payload)

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_get_project_embeds_media(logged_in_client: AsyncClient, png_bytes):
    """Test: GET /projects/{id} - медиа снова data URI, droppedMedia = 0."""
    payload = project_data(ganttImage={"src": data_uri(png_bytes)})
    created = (await logged_in_client.post("/api/v1/projects", json=payload)).json()

    response = await logged_in_client.get(f"/api/v1/projects/{created['id']}")

    assert response.status_code == 200
    data = response.json()
    assert data["ganttImage"]["src"] == data_uri(png_bytes)
    assert data["droppedMedia"] == 0
    assert data["title"] == "Demo"


@pytest.mark.asyncio
async def test_get_project_not_found(test_client: AsyncClient):
    """Test: неизвестный ID - 404 NOT_FOUND."""
    response = await test_client.get("/api/v1/projects/proj999")

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_update_project(logged_in_client: AsyncClient):
    """Test: PUT /projects/{id} - полная замена записи."""
    await logged_in_client.post("/api/v1/projects", json=project_data())

    response = await logged_in_client.put(
        "/api/v1/projects/proj001",
        json=project_data(title="Renamed", status="in-progress", progress=30),
    )

    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Renamed"
    assert data["status"] == "in-progress"
    assert data["progress"] == 30


@pytest.mark.asyncio
async def test_update_and_delete_other_users_project_forbidden(
    logged_in_client: AsyncClient, context
):
    """Test: чужой проект - 403 на PUT и DELETE, файлы не трогаются."""
    await context.store.save("user2", context.store.new_draft("user2").model_copy(update={"id": "proj001"}))

    response = await logged_in_client.put("/api/v1/projects/proj001", json=project_data())
    assert response.status_code == 403
    assert response.json()["error"]["code"] == "FORBIDDEN"

    response = await logged_in_client.delete("/api/v1/projects/proj001")
    assert response.status_code == 403

    assert context.store.get("proj001").owner_id == "user2"
    assert context.store.get("proj001").title == "New project"


@pytest.mark.asyncio
async def test_update_without_session_unauthorized(test_client: AsyncClient, context):
    """Test: существующий проект без сессии - 401."""
    await context.store.save("user1", context.store.new_draft("user1").model_copy(update={"id": "proj001"}))

    response = await test_client.put("/api/v1/projects/proj001", json=project_data())
    assert response.status_code == 401

    response = await test_client.delete("/api/v1/projects/proj001")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_update_unknown_project_not_found(logged_in_client: AsyncClient):
    """Test: PUT/DELETE неизвестного ID - 404."""
    response = await logged_in_client.put("/api/v1/projects/proj404", json=project_data())
    assert response.status_code == 404

    response = await logged_in_client.delete("/api/v1/projects/proj404")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_project(logged_in_client: AsyncClient, context):
    """Test: DELETE /projects/{id} - 204, проект исчезает из индекса и с диска."""
    await logged_in_client.post("/api/v1/projects", json=project_data())

    response = await logged_in_client.delete("/api/v1/projects/proj001")

    assert response.status_code == 204
    assert (await logged_in_client.get("/api/v1/projects/proj001")).status_code == 404
    assert not (context.backend.root / "users/user1/projects/proj001").exists()


@pytest.mark.asyncio
async def test_list_filters_mine_and_stats(logged_in_client: AsyncClient, context):
    """Test: фильтры списка, /mine и /stats."""
    await logged_in_client.post(
        "/api/v1/projects", json=project_data(title="ERP Migration", status="in-progress", progress=50)
    )
    await logged_in_client.post("/api/v1/projects", json=project_data(title="Chatbot", priority="high"))
    await context.store.save(
        "user2",
        context.store.new_draft("user2").model_copy(update={"id": "proj003", "progress": 10}),
    )

    response = await logged_in_client.get("/api/v1/projects", params={"status": "in-progress"})
    assert [p["id"] for p in response.json()] == ["proj001"]

    response = await logged_in_client.get("/api/v1/projects", params={"q": "chat"})
    assert [p["id"] for p in response.json()] == ["proj002"]

    response = await logged_in_client.get("/api/v1/projects", params={"owner_id": "user2"})
    assert [p["id"] for p in response.json()] == ["proj003"]

    response = await logged_in_client.get("/api/v1/projects/mine")
    assert [p["id"] for p in response.json()] == ["proj001", "proj002"]

    stats = (await logged_in_client.get("/api/v1/projects/stats")).json()
    assert stats["totalProjects"] == 3
    assert stats["highPriority"] == 1
    assert stats["avgProgress"] == 20

    stats = (await logged_in_client.get("/api/v1/projects/stats", params={"owner_id": "user1"})).json()
    assert stats["totalProjects"] == 2
    assert stats["avgProgress"] == 25


@pytest.mark.asyncio
async def test_draft(logged_in_client: AsyncClient, context):
    """Test: GET /projects/draft - черновик не попадает в индекс."""
    response = await logged_in_client.get("/api/v1/projects/draft")

    assert response.status_code == 200
    data = response.json()
    assert data["ownerId"] == "user1"
    assert data["title"] == "New project"
    assert context.store.all() == []


@pytest.mark.asyncio
async def test_create_project_with_foreign_path_rejected(logged_in_client: AsyncClient, context):
    """Test: path на data/users.json - 422, проект не создаётся."""
    payload = project_data(images=[{"path": "data/users.json", "title": "Users"}])

    response = await logged_in_client.post("/api/v1/projects", json=payload)

    assert response.status_code == 422
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert error["details"][0]["field"] == "images.0"
    assert (await logged_in_client.get("/api/v1/projects")).json() == []
    assert not (context.backend.root / "users/user1/projects/proj001").exists()


@pytest.mark.asyncio
async def test_update_with_other_projects_media_rejected(
    logged_in_client: AsyncClient, context, png_bytes
):
    """Test: PUT со ссылкой на медиа другого проекта - 422, запись не меняется."""
    await logged_in_client.post(
        "/api/v1/projects", json=project_data(images=[{"src": data_uri(png_bytes)}])
    )
    await logged_in_client.post("/api/v1/projects", json=project_data(title="Second"))
    other_image = "users/user1/projects/proj001/images/image_1.png"

    response = await logged_in_client.put(
        "/api/v1/projects/proj002",
        json=project_data(
            project_id="proj002",
            images=[{"path": other_image}],
            ganttImage={"path": "users/user2/projects/proj009/gantt/gantt.png"},
        ),
    )

    assert response.status_code == 422
    fields = [detail["field"] for detail in response.json()["error"]["details"]]
    assert fields == ["ganttImage", "images.0"]
    assert context.store.get("proj002").image_count == 0
    assert context.store.get("proj002").title == "Second"


# ============================================================================
# ORIGIN / CORS
# ============================================================================


@pytest.mark.asyncio
async def test_foreign_origin_cannot_delete(logged_in_client: AsyncClient, context):
    """Test: запрос со страницы чужого сайта - 403, проект остаётся."""
    await logged_in_client.post("/api/v1/projects", json=project_data())

    response = await logged_in_client.delete(
        "/api/v1/projects/proj001", headers={"Origin": "https://evil.example"}
    )

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "FORBIDDEN_ORIGIN"
    assert "access-control-allow-origin" not in response.headers
    assert context.store.get("proj001") is not None
    assert (context.backend.root / "users/user1/projects/proj001/project.json").exists()


@pytest.mark.asyncio
async def test_foreign_origin_preflight_refused(test_client: AsyncClient):
    """Test: preflight с чужого origin - 400 без Access-Control-Allow-Origin."""
    response = await test_client.options(
        "/api/v1/projects/proj001",
        headers={"Origin": "https://evil.example", "Access-Control-Request-Method": "DELETE"},
    )

    assert response.status_code == 400
    assert "access-control-allow-origin" not in response.headers


@pytest.mark.asyncio
async def test_ui_origin_allowed(test_client: AsyncClient):
    """Test: origin UI из CORS_ORIGINS проходит и получает CORS заголовки."""
    ui_origin = settings.CORS_ORIGINS[0]

    response = await test_client.options(
        "/api/v1/projects",
        headers={"Origin": ui_origin, "Access-Control-Request-Method": "POST"},
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == ui_origin

    response = await test_client.get("/api/v1/projects", headers={"Origin": ui_origin})
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == ui_origin


# ============================================================================
# REQUEST ID
# ============================================================================


@pytest.mark.asyncio
async def test_request_id_from_ui_is_kept(test_client: AsyncClient):
    """Test: X-Request-ID от UI возвращается как есть, некорректный заменяется."""
    response = await test_client.get("/api/v1/projects", headers={"X-Request-ID": "ui-save-42"})
    assert response.headers["X-Request-ID"] == "ui-save-42"

    response = await test_client.get("/api/v1/projects", headers={"X-Request-ID": "bad id!"})
    assert response.headers["X-Request-ID"] != "bad id!"
    assert len(response.headers["X-Request-ID"]) == 36


@pytest.mark.asyncio
async def test_request_log_fields(logged_in_client: AsyncClient, caplog):
    """Test: в логе запроса есть пользователь сессии (запись) и project_id (маршрут)."""
    with caplog.at_level(logging.DEBUG, logger="api.requests"):
        await logged_in_client.post("/api/v1/projects", json=project_data())
        await logged_in_client.get("/api/v1/projects/proj001")

    write, read = [r for r in caplog.records if r.name == "api.requests"][-2:]
    assert write.getMessage() == "Write request"
    assert write.levelno == logging.INFO
    assert write.user == "user1"
    assert read.getMessage() == "Request completed"
    assert read.levelno == logging.DEBUG
    assert read.project_id == "proj001"
