"""
Тесты для StorageBackend.

Каждая операция возвращает StorageResult и никогда не бросает
исключения наружу.
"""

import json

import pytest

from conftest import data_uri

# ============================================================================
# JSON
# ============================================================================


@pytest.mark.asyncio
async def test_write_json_creates_parents_and_pretty_prints(backend):
    """Test: родительские папки создаются, отступ 2, не-ASCII сохраняется."""
    result = await backend.write_json("data/nested/doc.json", {"name": "Ana García"})

    assert result.success
    content = (backend.root / "data" / "nested" / "doc.json").read_text(encoding="utf-8")
    assert content == json.dumps({"name": "Ana García"}, indent=2, ensure_ascii=False)
    assert "García" in content


@pytest.mark.asyncio
async def test_read_json_roundtrip(backend):
    """Test: записанный JSON читается обратно."""
    await backend.write_json("data/doc.json", {"projects": [{"id": "proj001"}]})

    result = await backend.read_json("data/doc.json")

    assert result.success
    assert result.data == {"projects": [{"id": "proj001"}]}


@pytest.mark.asyncio
async def test_read_json_missing_file(backend):
    """Test: нет файла - success=False с описанием ошибки."""
    result = await backend.read_json("data/missing.json")

    assert not result.success
    assert result.error


@pytest.mark.asyncio
async def test_read_json_malformed(backend):
    """Test: повреждённый JSON - ошибка ввода-вывода, не исключение."""
    (backend.root / "broken.json").write_text("{not json", encoding="utf-8")

    result = await backend.read_json("broken.json")

    assert not result.success


# ============================================================================
# MEDIA
# ============================================================================


@pytest.mark.asyncio
async def test_save_and_read_media(backend, png_bytes):
    """Test: save_media пишет байты, read_media возвращает data URI и MIME."""
    saved = await backend.save_media("images/a.png", data_uri(png_bytes))
    assert saved.success
    assert saved.data == "images/a.png"

    result = await backend.read_media("images/a.png")

    assert result.success
    assert result.mime_type == "image/png"
    assert result.data == data_uri(png_bytes)


@pytest.mark.asyncio
async def test_read_media_missing(backend):
    """Test: нет файла - success=False."""
    result = await backend.read_media("images/none.png")

    assert not result.success


# ============================================================================
# FILES & DIRECTORIES
# ============================================================================


@pytest.mark.asyncio
async def test_exists_and_delete(backend):
    """Test: exists отражает delete."""
    await backend.write_json("data/x.json", {})
    assert (await backend.exists("data/x.json")).data is True

    assert (await backend.delete("data/x.json")).success
    assert (await backend.exists("data/x.json")).data is False


@pytest.mark.asyncio
async def test_delete_missing_file_fails(backend):
    """Test: удаление несуществующего файла - ошибка."""
    assert not (await backend.delete("data/none.json")).success


@pytest.mark.asyncio
async def test_delete_dir_recursive_and_idempotent(backend):
    """Test: delete_dir удаляет дерево; повторный вызов тоже успешен."""
    await backend.write_json("users/u/projects/p/project.json", {})
    await backend.save_media("users/u/projects/p/images/a.png", "aGVsbG8=")

    assert (await backend.delete_dir("users/u/projects/p")).success
    assert not (backend.root / "users" / "u" / "projects" / "p").exists()
    assert (await backend.delete_dir("users/u/projects/p")).success


@pytest.mark.asyncio
async def test_list_dir_sorted(backend):
    """Test: list_dir возвращает имена по алфавиту."""
    await backend.make_dirs("root/b", "root/a", "root/c")

    result = await backend.list_dir("root")

    assert result.data == ["a", "b", "c"]


@pytest.mark.asyncio
async def test_path_escaping_root_is_a_failure(backend):
    """Test: путь за пределами корня - failure result, а не исключение."""
    result = await backend.read_json("../outside.json")

    assert not result.success
    assert "escapes" in result.error
