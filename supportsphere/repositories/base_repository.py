"""
Base Repository with session and gateway plumbing

Every repository receives the caller's Session explicitly and runs its
Supabase calls off the event loop.
"""
import asyncio
from typing import Any, Dict, List, Optional

from supportsphere.auth.session import Session
from supportsphere.exceptions import PersistenceError
from supportsphere.models.schemas import Actor
from supportsphere.utils.logger import get_logger

logger = get_logger(__name__)


class BaseRepository:
    """
    Base repository class.

    Row-level security on the Supabase side scopes what each actor can read
    and write; queries issued here are unscoped.
    """

    def __init__(self, session: Session, supabase_client=None):
        """
        Args:
            session: Identity context for this repository
            supabase_client: Supabase client instance (uses default if None)
        """
        if supabase_client is None:
            from supportsphere.services.supabase_client import get_supabase_client
            supabase_client = get_supabase_client()

        self.session = session
        self.client = supabase_client

    def _require_actor(self) -> Actor:
        return self.session.require_actor()

    async def _execute(self, query, operation: str):
        """
        Execute a built query in a worker thread.

        Raises:
            PersistenceError: Wrapping whatever the gateway raised
        """
        try:
            return await asyncio.to_thread(query.execute)
        except Exception as exc:
            logger.error("Repository error during %s: %s", operation, exc)
            raise PersistenceError(str(exc), operation=operation) from exc

    @staticmethod
    def _rows(response) -> List[Dict[str, Any]]:
        if response is None:
            return []
        return list(getattr(response, "data", None) or [])

    @classmethod
    def _first(cls, response) -> Optional[Dict[str, Any]]:
        rows = cls._rows(response)
        return rows[0] if rows else None
