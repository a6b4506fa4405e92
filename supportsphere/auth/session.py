"""
Session: the explicit identity context handed to every repository.

The session is the only source of the acting user id. Repositories never
accept a caller-supplied actor for attribution.
"""
from typing import Optional

from supportsphere.exceptions import AuthRequired
from supportsphere.models.schemas import Actor, AppRole
from supportsphere.utils.logger import get_logger

logger = get_logger(__name__)


class Session:
    """Holds the current actor, or ``None`` when signed out."""

    def __init__(self, actor: Optional[Actor] = None):
        self._actor = actor

    @property
    def actor(self) -> Optional[Actor]:
        return self._actor

    @property
    def is_authenticated(self) -> bool:
        return self._actor is not None

    def require_actor(self) -> Actor:
        """
        Return the current actor.

        Raises:
            AuthRequired: If nobody is signed in
        """
        if self._actor is None:
            raise AuthRequired()
        return self._actor

    def sign_in(self, actor: Actor) -> None:
        self._actor = actor
        logger.info("Session signed in as %s (%s)", actor.id, actor.role.value)

    def sign_out(self) -> None:
        self._actor = None

    @classmethod
    def anonymous(cls) -> "Session":
        return cls(None)

    @classmethod
    def from_supabase(cls, client) -> "Session":
        """
        Build a session from the client's authenticated user and profile.

        Returns an anonymous session when the client has no signed-in user.
        Profile lookup failures fall back to the auth record alone.
        """
        try:
            response = client.auth.get_user()
        except Exception as exc:
            logger.warning("Could not read authenticated user: %s", exc)
            return cls.anonymous()

        user = getattr(response, "user", None) if response else None
        if user is None:
            return cls.anonymous()

        name = ""
        email = getattr(user, "email", None) or ""
        role = AppRole.USER
        try:
            profile = client.table("profiles") \
                .select("name, email, role") \
                .eq("user_id", user.id) \
                .limit(1) \
                .execute()
            if profile.data:
                row = profile.data[0]
                name = row.get("name") or ""
                email = row.get("email") or email
                role = AppRole(row.get("role") or AppRole.USER.value)
        except Exception as exc:
            logger.warning("Could not load profile for %s: %s", user.id, exc)

        return cls(Actor(id=user.id, display_name=name, email=email, role=role))
