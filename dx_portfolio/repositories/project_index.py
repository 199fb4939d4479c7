"""Project index repository (data/projects-index.json)."""

from ..models import IndexEntry
from .base import JsonCollectionRepository

INDEX_FILE = "data/projects-index.json"


class ProjectIndexRepository(JsonCollectionRepository[IndexEntry]):
    """{ "projects": [IndexEntry...] } - the listing view of all projects."""

    path = INDEX_FILE
    model = IndexEntry
    key = "projects"
