"""
Тесты для первого запуска (DataBootstrapper / AppContext.init).

Проверяем:
- Seed пользователей, конфига и пустого индекса
- Импорт legacy projects.json с выносом медиа в файлы
- Повторный запуск ничего не перезаписывает
"""

import json

import pytest

from conftest import data_uri, project_data
from dx_portfolio.context import AppContext
from dx_portfolio.services import DataBootstrapper, ProjectStore


def write_legacy(root, projects) -> None:
    (root / "projects.json").write_text(
        json.dumps({"projects": projects}, ensure_ascii=False), encoding="utf-8"
    )


@pytest.mark.asyncio
async def test_first_run_seeds_everything(tmp_path):
    """Test: пустой корень -> users.json, config.json, пустой индекс, папки пользователей."""
    context = AppContext(tmp_path)

    report = await context.init()

    assert report.seeded_users
    assert report.seeded_config
    assert report.created_index
    assert report.imported_projects == 0
    assert [user.username for user in context.session.users] == ["hiram", "ana"]
    assert (tmp_path / "users" / "user1" / "projects").is_dir()
    assert (tmp_path / "users" / "user2" / "projects").is_dir()
    index = json.loads((tmp_path / "data" / "projects-index.json").read_text(encoding="utf-8"))
    assert index == {"projects": []}
    assert context.config.status_config("hold")["label"] == "Hold"
    assert context.ready


@pytest.mark.asyncio
async def test_second_run_keeps_existing_files(tmp_path):
    """Test: повторный init не пересоздаёт файлы."""
    first = AppContext(tmp_path)
    await first.init()
    await first.session.update_avatar("user1", "data:image/png;base64,AAAA")

    second = AppContext(tmp_path)
    report = await second.init()

    assert not report.seeded_users
    assert not report.seeded_config
    assert not report.created_index
    assert second.session.get_user("user1").avatar == "data:image/png;base64,AAAA"


@pytest.mark.asyncio
async def test_legacy_projects_imported(tmp_path, png_bytes):
    """Test: legacy projects.json импортируется через save, gantt-строка выносится в файл."""
    write_legacy(
        tmp_path,
        [
            project_data(
                ganttImage=data_uri(png_bytes),
                images=[{"src": data_uri(png_bytes), "title": "Old"}],
            ),
            project_data(project_id="proj002", owner_id="user2", ganttImage=""),
        ],
    )
    context = AppContext(tmp_path)

    report = await context.init()

    assert report.imported_projects == 2
    assert [entry.id for entry in context.store.all()] == ["proj001", "proj002"]
    assert (tmp_path / "users/user1/projects/proj001/gantt/gantt.png").read_bytes() == png_bytes
    assert (tmp_path / "users/user1/projects/proj001/images/image_1.png").exists()
    assert context.store.get("proj001").has_gantt
    assert not context.store.get("proj002").has_gantt

    loaded = await context.store.load("user1", "proj001")
    assert loaded.images[0].title == "Old"


@pytest.mark.asyncio
async def test_legacy_invalid_project_skipped(tmp_path):
    """Test: невалидная запись пропускается, остальные импортируются."""
    write_legacy(tmp_path, [project_data(progress=500), project_data(project_id="proj002")])
    context = AppContext(tmp_path)

    report = await context.init()

    assert report.imported_projects == 1
    assert report.skipped_projects == ["proj001"]
    assert [entry.id for entry in context.store.all()] == ["proj002"]


@pytest.mark.asyncio
async def test_legacy_file_unreadable_falls_back_to_empty_index(tmp_path, backend):
    """Test: повреждённый legacy-файл - пустой индекс."""
    (tmp_path / "projects.json").write_text("{broken", encoding="utf-8")
    store = ProjectStore(backend)

    report = await DataBootstrapper(backend, store).run()

    assert report.created_index
    assert report.imported_projects == 0
    assert (await store.index_repo.load_all()) == []
