"""
Pydantic схемы для API.

DTOs (Data Transfer Objects) - объекты для передачи данных через HTTP.
Ключи в camelCase, как в JSON-файлах на диске.
"""

from pydantic import BaseModel, Field, model_validator

from ..models import CamelModel, EmbeddedMedia, Project
from ..storage import declared_mime_type, is_allowed_upload

# ============================================================================
# SESSION / USER SCHEMAS
# ============================================================================


class LoginRequest(BaseModel):
    """
    Схема для входа (POST /session/login).

    Пример запроса:
    {
        "username": "hiram",
        "password": "password123"
    }
    """

    username: str = Field(..., min_length=1)
    password: str


class UserResponse(CamelModel):
    """Пользователь без пароля."""

    id: str
    username: str
    name: str = ""
    role: str = ""
    email: str = ""
    avatar: str | None = None
    created_at: str = ""


class AvatarUpdate(BaseModel):
    """Схема для PUT /users/me/avatar. avatar=null убирает аватар."""

    avatar: str | None = None


# ============================================================================
# PROJECT SCHEMAS
# ============================================================================


def _check_upload(media: EmbeddedMedia, kind: str, field: str) -> None:
    mime_type = declared_mime_type(media.src)
    if is_allowed_upload(kind, mime_type):
        return
    # Файл без расширения читается как octet-stream - смотрим на fileType
    if mime_type in ("", "application/octet-stream") and is_allowed_upload(kind, media.file_type):
        return
    raise ValueError(f"{field}: unsupported media type '{mime_type or media.file_type}'")


class ProjectPayload(Project):
    """
    Полная запись проекта от UI (POST /projects, PUT /projects/{id}).

    id и ownerId назначает сервер: при создании - generate_id()
    и текущий пользователь, при обновлении - из индекса.

    Встроенные медиа (src = data URI) проверяются по allow-list:
    - ganttImage, images: png / jpeg / gif / webp
    - videos: mp4 / webm / ogg / quicktime
    """

    id: str | None = None
    owner_id: str | None = None

    @model_validator(mode="after")
    def _check_media_types(self) -> "ProjectPayload":
        if isinstance(self.gantt_image, EmbeddedMedia):
            _check_upload(self.gantt_image, "image", "ganttImage")
        for image in self.images:
            if isinstance(image, EmbeddedMedia):
                _check_upload(image, "image", "images")
        for video in self.videos:
            if isinstance(video, EmbeddedMedia):
                _check_upload(video, "video", "videos")
        return self

    def to_project(self, project_id: str, owner_id: str) -> Project:
        data = self.model_dump(by_alias=True, exclude={"id", "owner_id"})
        return Project.model_validate({**data, "id": project_id, "ownerId": owner_id})


class ProjectDetailResponse(Project):
    """
    Полная запись проекта с медиа в виде data URI (GET /projects/{id}).

    droppedMedia - сколько файлов медиа не удалось прочитать
    (они исключены из ответа).
    """

    dropped_media: int = 0


# ============================================================================
# ERROR SCHEMAS
# ============================================================================


class ErrorDetail(BaseModel):
    """
    Детали ошибки для конкретного поля.

    Пример:
    {
        "field": "progress",
        "message": "Input should be less than or equal to 100"
    }
    """

    field: str = Field(..., description="Название поля с ошибкой")
    message: str = Field(..., description="Описание ошибки")


class ErrorBody(BaseModel):
    """
    Тело ошибки с кодом и деталями.

    Примеры кодов:
    - VALIDATION_ERROR: ошибка валидации полей
    - NOT_FOUND: проект не найден
    - UNAUTHORIZED: нет активной сессии / неверный пароль
    - FORBIDDEN: проект принадлежит другому пользователю
    - STORAGE_ERROR: ошибка записи/чтения файлов (повторите действие)
    """

    code: str = Field(..., description="Код ошибки (VALIDATION_ERROR, NOT_FOUND, etc.)")
    message: str = Field(..., description="Человекочитаемое сообщение")
    details: list[ErrorDetail] | None = Field(
        default=None, description="Список ошибок по полям (для валидации)"
    )


class ErrorResponse(BaseModel):
    """
    Единый формат ответа для всех ошибок API.

    Пример ошибки "не найдено":
    {
        "error": {
            "code": "NOT_FOUND",
            "message": "Project with id=proj999 not found",
            "details": null
        }
    }
    """

    error: ErrorBody
