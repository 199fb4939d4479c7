"""User repository (data/users.json)."""

from ..models import User
from .base import JsonCollectionRepository

USERS_FILE = "data/users.json"


class UserRepository(JsonCollectionRepository[User]):
    """Flat user list: { "users": [User...] }."""

    path = USERS_FILE
    model = User
    key = "users"

    async def create_user_dir(self, user_id: str) -> bool:
        """Create ``users/<id>/projects/`` for a user."""
        result = await self.backend.make_dirs(f"users/{user_id}/projects")
        return result.success
