"""Project store: decomposition of project records onto disk plus the index."""

import re
from dataclasses import dataclass
from pathlib import PurePosixPath

from ..core.logging import get_logger
from ..models import (
    EmbeddedMedia,
    ExternalizedMedia,
    IndexEntry,
    Project,
    derive_index_entry,
    new_draft,
)
from ..repositories import ProjectDetailRepository, ProjectIndexRepository
from ..repositories.project_detail import gantt_path, media_path
from ..storage import MediaCodec, StorageBackend

logger = get_logger(__name__)

_PROJECT_ID_RE = re.compile(r"^proj(\d+)$")


@dataclass
class ProjectLoad:
    """Full record with media re-embedded, plus how many media files were unreadable."""

    project: Project
    dropped_media: int = 0


def _safe_file_name(file_name: str, fallback: str) -> str:
    # Только имя файла: "../x.png" и "a/b.png" не должны выходить из папки медиа
    name = PurePosixPath((file_name or "").replace("\\", "/")).name
    return name or fallback


def _round_half_up(value: float) -> int:
    return int(value + 0.5)


def _fallback_name(pattern: str, position: int, taken: set[str]) -> str:
    # image_<n>.png, но не имя, которое уже занято другим медиа этой записи
    n = position + 1
    while pattern.format(n=n) in taken:
        n += 1
    return pattern.format(n=n)


def is_own_media_path(owner_id: str, project_id: str, subdir: str, path: str) -> bool:
    """
    True, если ``path`` - файл прямо в папке ``subdir`` этого проекта.

    gantt допускает только gantt/gantt.png.
    """
    if subdir == "gantt":
        return path == gantt_path(owner_id, project_id)
    name = PurePosixPath(path).name
    return bool(name) and name not in (".", "..") and path == media_path(
        owner_id, project_id, subdir, name
    )


class ProjectStore:
    """
    Хранилище проектов.

    Отвечает за:
    - Разложение полной записи на диск (project.json + файлы медиа)
    - Обратную сборку записи с медиа в виде data URI
    - Индекс проектов (в памяти и data/projects-index.json)

    Авторизация (владелец == текущий пользователь) проверяется
    вызывающей стороной до обращения к хранилищу.
    """

    def __init__(self, backend: StorageBackend):
        """
        Инициализация хранилища.

        Args:
            backend: Файловое хранилище

        Store создаёт нужные репозитории внутри себя.
        """
        self.backend = backend
        self.index_repo = ProjectIndexRepository(backend)
        self.detail_repo = ProjectDetailRepository(backend)
        self.codec = MediaCodec(backend)
        self.projects: list[IndexEntry] = []

    # ==================== INDEX ====================

    async def load_index(self) -> bool:
        """
        Загрузить индекс с диска в память.

        Returns:
            False если индекс повреждён (в памяти остаётся пустой список)
        """
        entries = await self.index_repo.load_all()
        if entries is None:
            logger.error("Project index unreadable, starting with an empty index")
            self.projects = []
            return False
        self.projects = entries
        logger.info("Project index loaded", extra={"projects": len(entries)})
        return True

    async def _write_index(self, operation: str, project_id: str) -> bool:
        if await self.index_repo.save_all(self.projects):
            return True
        # Отката нет: detail-файлы и индекс на диске теперь расходятся
        logger.error(
            "Index rewrite failed, on-disk index diverges from project files",
            extra={"operation": operation, "project_id": project_id},
        )
        return False

    def _upsert_entry(self, entry: IndexEntry) -> bool:
        """Replace the entry with the same id or append. Returns True if appended."""
        for position, existing in enumerate(self.projects):
            if existing.id == entry.id:
                self.projects[position] = entry
                return False
        self.projects.append(entry)
        return True

    def generate_id(self) -> str:
        """
        Следующий ID: proj + (максимальный номер + 1), минимум 3 цифры.

        Дыры не заполняются: proj001, proj003 -> proj004.
        ID не в формате proj<цифры> игнорируются.
        """
        max_id = 0
        for project in self.projects:
            match = _PROJECT_ID_RE.match(project.id)
            if match:
                max_id = max(max_id, int(match.group(1)))
        return f"proj{max_id + 1:03d}"

    def new_draft(self, owner_id: str) -> Project:
        return new_draft(owner_id)

    # ==================== SAVE ====================

    def foreign_media_paths(self, owner_id: str, project: Project) -> list[dict[str, str]]:
        """
        Ссылки на файлы вне папок медиа этого проекта.

        Медиа с path принимаются только если файл лежит в
        users/<owner>/projects/<id>/{images,videos,gantt}/ этого же проекта.

        Returns:
            [{"field": "images.0", "path": "..."}] для каждой чужой ссылки
        """
        refs: list[tuple[str, str, EmbeddedMedia | ExternalizedMedia | None]] = [
            ("ganttImage", "gantt", project.gantt_image)
        ]
        refs += [(f"images.{n}", "images", item) for n, item in enumerate(project.images)]
        refs += [(f"videos.{n}", "videos", item) for n, item in enumerate(project.videos)]

        return [
            {"field": field, "path": item.path}
            for field, subdir, item in refs
            if isinstance(item, ExternalizedMedia)
            and not is_own_media_path(owner_id, project.id, subdir, item.path)
        ]

    async def _externalize_list(
        self,
        owner_id: str,
        project_id: str,
        items: list[EmbeddedMedia | ExternalizedMedia],
        subdir: str,
        fallback_pattern: str,
        default_type: str,
    ) -> list[ExternalizedMedia] | None:
        saved: list[ExternalizedMedia] = []
        # Имена файлов, на которые запись уже ссылается, не перезаписываем
        taken = {
            PurePosixPath(item.path).name for item in items if isinstance(item, ExternalizedMedia)
        }
        for position, item in enumerate(items):
            if isinstance(item, ExternalizedMedia):
                saved.append(item)
                continue

            file_name = _safe_file_name(item.file_name, "")
            if not file_name:
                file_name = _fallback_name(fallback_pattern, position, taken)
            taken.add(file_name)
            externalized = await self.codec.externalize(
                item.model_copy(update={"file_name": file_name}),
                media_path(owner_id, project_id, subdir, file_name),
                default_type=default_type,
            )
            if externalized is None:
                return None
            saved.append(externalized)
        return saved

    async def save(self, owner_id: str, project: Project) -> bool:
        """
        Сохранить проект целиком (полная замена, не patch).

        Args:
            owner_id: ID владельца (уже проверен вызывающей стороной)
            project: Полная запись; медиа могут быть встроены или уже вынесены

        Returns:
            True при успехе. При ошибке ввода-вывода - False;
            уже записанные файлы не откатываются.
        """
        if project.owner_id != owner_id:
            logger.error(
                "Refusing to save project under a different owner",
                extra={"project_id": project.id, "owner_id": owner_id, "record_owner": project.owner_id},
            )
            return False

        foreign = self.foreign_media_paths(owner_id, project)
        if foreign:
            logger.error(
                "Refusing to save project referencing files outside its media directories",
                extra={"project_id": project.id, "owner_id": owner_id, "paths": foreign},
            )
            return False

        # 1. Структура папок
        if not await self.detail_repo.create_project_dir(owner_id, project.id):
            logger.error("Failed to create project directory", extra={"project_id": project.id})
            return False

        # 2. Gantt - всегда gantt/gantt.png, новый файл перезаписывает старый
        gantt = project.gantt_image
        if isinstance(gantt, EmbeddedMedia):
            gantt = await self.codec.externalize(
                gantt.model_copy(update={"file_name": gantt.file_name or "gantt.png"}),
                gantt_path(owner_id, project.id),
                default_type="image/png",
            )
            if gantt is None:
                return False

        # 3-4. Изображения и видео
        images = await self._externalize_list(
            owner_id, project.id, project.images, "images", "image_{n}.png", "image/png"
        )
        if images is None:
            return False
        videos = await self._externalize_list(
            owner_id, project.id, project.videos, "videos", "video_{n}.mp4", "video/mp4"
        )
        if videos is None:
            return False

        stored = project.model_copy(update={"gantt_image": gantt, "images": images, "videos": videos})

        # 5. project.json - полная перезапись
        if not await self.detail_repo.write(stored):
            logger.error("Failed to write project record", extra={"project_id": project.id})
            return False

        # 6. Индекс: в памяти, затем на диске
        created = self._upsert_entry(derive_index_entry(stored))
        if not await self._write_index("save", project.id):
            return False

        logger.info(
            "Project created" if created else "Project updated",
            extra={
                "project_id": project.id,
                "owner_id": owner_id,
                "images": len(images),
                "videos": len(videos),
                "has_gantt": gantt is not None,
            },
        )
        return True

    # ==================== LOAD ====================

    async def _embed(
        self,
        owner_id: str,
        project_id: str,
        subdir: str,
        item: EmbeddedMedia | ExternalizedMedia,
    ) -> EmbeddedMedia | None:
        if isinstance(item, EmbeddedMedia):
            return item
        if not is_own_media_path(owner_id, project_id, subdir, item.path):
            logger.warning(
                "Media path outside the project directory, dropping it from the record",
                extra={"project_id": project_id, "path": item.path},
            )
            return None
        return await self.codec.embed(item)

    async def load_with_report(self, owner_id: str, project_id: str) -> ProjectLoad | None:
        """
        Загрузить полную запись и встроить медиа обратно как data URI.

        Нечитаемый файл медиа выбрасывается из результата (с логом),
        их количество возвращается в dropped_media.

        Returns:
            ProjectLoad или None, если project.json нет или он повреждён
        """
        stored = await self.detail_repo.read(owner_id, project_id)
        if stored is None:
            logger.info(
                "Project record not found",
                extra={"project_id": project_id, "owner_id": owner_id},
            )
            return None

        dropped = 0

        gantt = None
        if stored.gantt_image is not None:
            gantt = await self._embed(owner_id, project_id, "gantt", stored.gantt_image)
            if gantt is None:
                dropped += 1

        embedded: dict[str, list[EmbeddedMedia]] = {"images": [], "videos": []}
        for field in embedded:
            for item in getattr(stored, field):
                media = await self._embed(owner_id, project_id, field, item)
                if media is None:
                    dropped += 1
                    continue
                embedded[field].append(media)

        if dropped:
            logger.warning(
                "Project loaded with unreadable media dropped",
                extra={"project_id": project_id, "dropped_media": dropped},
            )

        project = stored.model_copy(
            update={"gantt_image": gantt, "images": embedded["images"], "videos": embedded["videos"]}
        )
        return ProjectLoad(project=project, dropped_media=dropped)

    async def load(self, owner_id: str, project_id: str) -> Project | None:
        loaded = await self.load_with_report(owner_id, project_id)
        return loaded.project if loaded else None

    # ==================== DELETE ====================

    async def delete(self, owner_id: str, project_id: str) -> bool:
        """
        Удалить проект: папку целиком, затем запись индекса.

        Если папку удалить не удалось - индекс не трогаем.
        """
        if not await self.detail_repo.delete_project_dir(owner_id, project_id):
            logger.error("Failed to remove project directory", extra={"project_id": project_id})
            return False

        self.projects = [entry for entry in self.projects if entry.id != project_id]

        if not await self._write_index("delete", project_id):
            return False

        logger.info("Project deleted", extra={"project_id": project_id, "owner_id": owner_id})
        return True

    # ==================== QUERIES ====================

    def get(self, project_id: str) -> IndexEntry | None:
        return next((entry for entry in self.projects if entry.id == project_id), None)

    def all(self) -> list[IndexEntry]:
        return list(self.projects)

    def list_by_owner(self, owner_id: str) -> list[IndexEntry]:
        """Index entries of one owner, in insertion order."""
        return [entry for entry in self.projects if entry.owner_id == owner_id]

    def by_status(self, status: str) -> list[IndexEntry]:
        return [entry for entry in self.projects if entry.status == status]

    def search(self, query: str) -> list[IndexEntry]:
        """Case-insensitive substring search over title, current phase and status."""
        needle = query.lower()
        return [
            entry
            for entry in self.projects
            if needle in entry.title.lower()
            or needle in entry.current_phase.lower()
            or needle in entry.status.value
        ]

    def filter(
        self,
        status: str | None = None,
        priority: str | None = None,
        owner_id: str | None = None,
    ) -> list[IndexEntry]:
        filtered = list(self.projects)
        if status:
            filtered = [entry for entry in filtered if entry.status == status]
        if priority:
            filtered = [entry for entry in filtered if entry.priority == priority]
        if owner_id:
            filtered = [entry for entry in filtered if entry.owner_id == owner_id]
        return filtered

    @staticmethod
    def _summarize(entries: list[IndexEntry]) -> dict[str, int]:
        def count_status(status: str) -> int:
            return sum(1 for entry in entries if entry.status == status)

        def count_priority(priority: str) -> int:
            return sum(1 for entry in entries if entry.priority == priority)

        avg_progress = (
            _round_half_up(sum(entry.progress for entry in entries) / len(entries)) if entries else 0
        )
        return {
            "totalProjects": len(entries),
            "inProgress": count_status("in-progress"),
            "hold": count_status("hold"),
            "discovery": count_status("discovery"),
            "paused": count_status("paused"),
            "completed": count_status("completed"),
            "highPriority": count_priority("high"),
            "mediumPriority": count_priority("medium"),
            "lowPriority": count_priority("low"),
            "avgProgress": avg_progress,
        }

    def stats(self) -> dict[str, int]:
        """Counts per status / priority and rounded average progress over all projects."""
        return self._summarize(self.projects)

    def owner_stats(self, owner_id: str) -> dict[str, int]:
        return self._summarize(self.list_by_owner(owner_id))

    async def find_orphans(self, owner_id: str) -> list[str]:
        """
        Проекты на диске, которых нет в индексе.

        Возникают после частичного сбоя (project.json записан,
        а индекс - нет). Только для диагностики, ничего не чинит.
        """
        indexed = {entry.id for entry in self.list_by_owner(owner_id)}
        on_disk = await self.detail_repo.list_project_ids(owner_id)
        return [project_id for project_id in on_disk if project_id not in indexed]
