"""
Directory Repository

Read-only lookups behind the assignment controls: staff profiles, teams
and categories.
"""
from typing import List

from pydantic import ValidationError as PydanticValidationError

from supportsphere.exceptions import PersistenceError
from supportsphere.models.schemas import AppRole, Category, Profile, Team
from supportsphere.repositories.base_repository import BaseRepository
from supportsphere.utils.logger import get_logger

logger = get_logger(__name__)


class DirectoryRepository(BaseRepository):
    """Profiles, teams and categories. Failures degrade to empty lists."""

    async def list_agents(self) -> List[Profile]:
        """Profiles that can take assignments (agents and admins)."""
        return await self._safe_models(
            self.client.table("profiles")
            .select("user_id, name, email, role")
            .in_("role", [AppRole.AGENT.value, AppRole.ADMIN.value])
            .order("name"),
            Profile,
            "list agents"
        )

    async def list_teams(self) -> List[Team]:
        return await self._safe_models(
            self.client.table("teams").select("id, name, description").order("name"),
            Team,
            "list teams"
        )

    async def list_categories(self) -> List[Category]:
        return await self._safe_models(
            self.client.table("categories").select("id, name, description").order("name"),
            Category,
            "list categories"
        )

    async def _safe_models(self, query, model, operation: str):
        if not self.session.is_authenticated:
            return []
        try:
            rows = self._rows(await self._execute(query, operation))
            return [model(**row) for row in rows]
        except (PersistenceError, PydanticValidationError) as exc:
            logger.error("Error during %s: %s", operation, exc)
            return []
