"""
API endpoints для работы с проектами.

URL структура:
- GET    /projects          - индекс (фильтры: owner_id, status, priority, q)
- GET    /projects/mine     - проекты текущего пользователя
- GET    /projects/stats    - сводка по статусам/приоритетам
- GET    /projects/draft    - черновик нового проекта (не сохраняется)
- POST   /projects          - создать проект
- GET    /projects/{id}     - полная запись с медиа (data URI)
- PUT    /projects/{id}     - заменить запись целиком
- DELETE /projects/{id}     - удалить проект с файлами

Чтение открыто всем. Изменение - только владельцу,
проверка делается ДО обращения к диску.
"""

from fastapi import APIRouter, Depends, Query, status

from ..models import IndexEntry, Project, User
from ..services import ProjectStore, SessionService
from .dependencies import get_project_store, get_session_service, require_user
from .errors import (
    ForbiddenError,
    MediaPathError,
    NotFoundError,
    StorageError,
    UnauthorizedError,
)
from .schemas import ErrorResponse, ProjectDetailResponse, ProjectPayload

router = APIRouter(prefix="/projects", tags=["projects"])


def _editable_entry(project_id: str, store: ProjectStore, session: SessionService) -> IndexEntry:
    """404 -> 401 -> 403, в этом порядке."""
    entry = store.get(project_id)
    if entry is None:
        raise NotFoundError("Project", project_id)
    if session.current_user is None:
        raise UnauthorizedError()
    if not session.can_edit(entry):
        raise ForbiddenError(project_id)
    return entry


async def _save(store: ProjectStore, owner_id: str, project: Project) -> IndexEntry:
    """Чужие пути медиа -> 422 до записи, ошибка записи -> 500."""
    foreign = store.foreign_media_paths(owner_id, project)
    if foreign:
        raise MediaPathError(foreign)
    if not await store.save(owner_id, project):
        raise StorageError("save project", project.id)
    return store.get(project.id)


# ============================================================================
# INDEX QUERIES
# ============================================================================


@router.get("", response_model=list[IndexEntry], summary="Список проектов")
async def list_projects(
    owner_id: str | None = Query(None, description="Только проекты владельца"),
    status_filter: str | None = Query(None, alias="status", description="Статус"),
    priority: str | None = Query(None, description="Приоритет"),
    q: str | None = Query(None, description="Поиск по названию, фазе и статусу"),
    store: ProjectStore = Depends(get_project_store),
) -> list[IndexEntry]:
    """
    Записи индекса в порядке добавления.

    Примеры запросов:
    ```
    GET /projects?owner_id=user1
    GET /projects?status=in-progress&priority=high
    GET /projects?q=migration
    ```
    """
    entries = store.filter(status=status_filter, priority=priority, owner_id=owner_id)
    if q:
        matched = {entry.id for entry in store.search(q)}
        entries = [entry for entry in entries if entry.id in matched]
    return entries


@router.get(
    "/mine",
    response_model=list[IndexEntry],
    summary="Мои проекты",
    responses={401: {"model": ErrorResponse, "description": "Нет активной сессии"}},
)
async def my_projects(
    user: User = Depends(require_user), store: ProjectStore = Depends(get_project_store)
) -> list[IndexEntry]:
    return store.list_by_owner(user.id)


@router.get("/stats", summary="Сводка по проектам")
async def project_stats(
    owner_id: str | None = Query(None, description="Сводка только по владельцу"),
    store: ProjectStore = Depends(get_project_store),
) -> dict[str, int]:
    """
    Пример ответа:
    ```json
    {
        "totalProjects": 4,
        "inProgress": 2,
        "hold": 1,
        "discovery": 1,
        "paused": 0,
        "completed": 0,
        "highPriority": 1,
        "mediumPriority": 3,
        "lowPriority": 0,
        "avgProgress": 43
    }
    ```
    """
    if owner_id:
        return store.owner_stats(owner_id)
    return store.stats()


@router.get(
    "/draft",
    response_model=Project,
    summary="Черновик проекта",
    responses={401: {"model": ErrorResponse, "description": "Нет активной сессии"}},
)
async def draft_project(
    user: User = Depends(require_user), store: ProjectStore = Depends(get_project_store)
) -> Project:
    """Значения по умолчанию для формы нового проекта. На диск ничего не пишется."""
    return store.new_draft(user.id)


# ============================================================================
# CREATE PROJECT
# ============================================================================


@router.post(
    "",
    response_model=IndexEntry,
    status_code=status.HTTP_201_CREATED,
    summary="Создать проект",
    responses={
        201: {"description": "Проект создан, возвращается запись индекса"},
        401: {"model": ErrorResponse, "description": "Нет активной сессии"},
        422: {"model": ErrorResponse, "description": "Ошибка валидации"},
        500: {"model": ErrorResponse, "description": "Ошибка записи на диск"},
    },
)
async def create_project(
    data: ProjectPayload,
    user: User = Depends(require_user),
    store: ProjectStore = Depends(get_project_store),
) -> IndexEntry:
    """
    Создать проект под текущим пользователем.

    ID назначается сервером (proj + следующий номер),
    id и ownerId из тела запроса игнорируются.
    """
    return await _save(store, user.id, data.to_project(store.generate_id(), user.id))


# ============================================================================
# GET PROJECT
# ============================================================================


@router.get(
    "/{project_id}",
    response_model=ProjectDetailResponse,
    summary="Полная запись проекта",
    responses={404: {"model": ErrorResponse, "description": "Проект не найден"}},
)
async def get_project(
    project_id: str, store: ProjectStore = Depends(get_project_store)
) -> ProjectDetailResponse:
    """
    Полная запись с медиа, встроенными как data URI.

    Нечитаемые файлы медиа не ломают запрос: они исключаются,
    а их количество возвращается в droppedMedia.
    """
    entry = store.get(project_id)
    if entry is None:
        raise NotFoundError("Project", project_id)

    loaded = await store.load_with_report(entry.owner_id, project_id)
    if loaded is None:
        raise NotFoundError("Project", project_id)

    return ProjectDetailResponse.model_validate(
        {**loaded.project.model_dump(by_alias=True), "droppedMedia": loaded.dropped_media}
    )


# ============================================================================
# UPDATE PROJECT
# ============================================================================


@router.put(
    "/{project_id}",
    response_model=IndexEntry,
    summary="Заменить проект",
    responses={
        401: {"model": ErrorResponse, "description": "Нет активной сессии"},
        403: {"model": ErrorResponse, "description": "Проект другого пользователя"},
        404: {"model": ErrorResponse, "description": "Проект не найден"},
        422: {"model": ErrorResponse, "description": "Ошибка валидации"},
        500: {"model": ErrorResponse, "description": "Ошибка записи на диск"},
    },
)
async def update_project(
    project_id: str,
    data: ProjectPayload,
    store: ProjectStore = Depends(get_project_store),
    session: SessionService = Depends(get_session_service),
) -> IndexEntry:
    """
    Полная замена записи (не patch).

    Медиа, пришедшие с path (уже на диске), не перезаписываются;
    пришедшие с src (data URI) записываются в файлы.
    updatedAt проставляет клиент.
    """
    entry = _editable_entry(project_id, store, session)
    return await _save(store, entry.owner_id, data.to_project(project_id, entry.owner_id))


# ============================================================================
# DELETE PROJECT
# ============================================================================


@router.delete(
    "/{project_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Удалить проект",
    responses={
        204: {"description": "Проект удалён"},
        401: {"model": ErrorResponse, "description": "Нет активной сессии"},
        403: {"model": ErrorResponse, "description": "Проект другого пользователя"},
        404: {"model": ErrorResponse, "description": "Проект не найден"},
        500: {"model": ErrorResponse, "description": "Ошибка удаления с диска"},
    },
)
async def delete_project(
    project_id: str,
    store: ProjectStore = Depends(get_project_store),
    session: SessionService = Depends(get_session_service),
):
    """Удалить папку проекта целиком, затем запись индекса."""
    entry = _editable_entry(project_id, store, session)
    if not await store.delete(entry.owner_id, project_id):
        raise StorageError("delete project", project_id)
