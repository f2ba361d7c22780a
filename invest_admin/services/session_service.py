"""
Admin session lifecycle — login, lookup and logout.

An AdminSession is the explicit replacement for a token kept in browser
storage: it is created when an admin logs in, stored in Redis under
``session:<id>`` with a TTL that never outlives the platform token, and torn
down on logout (or on first lookup after it expired). Teardown also drops
the session's list stores and closes its notification streams.
"""

import logging
from datetime import datetime, timedelta, timezone

from pydantic import BaseModel, ValidationError

from invest_admin.config import settings
from invest_admin.core.security import is_token_expired, new_session_id, token_expiry
from invest_admin.schemas.user import User
from invest_admin.services.list_store import store_registry
from invest_admin.services.notification_hub import notification_hub
from invest_admin.services.platform_client import (
    PlatformAPIError,
    PlatformClient,
    get_platform_client,
)

logger = logging.getLogger(__name__)

SESSION_KEY_PREFIX = "session:"


class NotAdminError(Exception):
    """Raised when valid platform credentials belong to a non-admin user."""
    pass


class SessionExpiredError(Exception):
    """Raised when the platform issued a token that has already expired."""
    pass


class AdminSession(BaseModel):
    """One logged-in operator."""
    session_id: str
    token: str
    user: User
    is_admin: bool = True
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime | None = None) -> bool:
        return self.expires_at <= (now or datetime.now(timezone.utc))


def _key(session_id: str) -> str:
    return f"{SESSION_KEY_PREFIX}{session_id}"


class SessionService:
    """Creates, resolves and ends admin sessions."""

    def __init__(self, redis, client: PlatformClient | None = None):
        self.redis = redis
        self._client = client

    @property
    def client(self) -> PlatformClient:
        return self._client or get_platform_client()

    async def _confirm_admin(self, token: str, user: User) -> bool:
        """
        Trust the ``is_admin`` flag when set; otherwise probe an admin-only
        endpoint, since some platform builds omit the flag from login.
        """
        if user.is_admin:
            return True
        try:
            await self.client.get_stats(token)
        except PlatformAPIError:
            return False
        return True

    async def login(self, email: str, password: str, device_id: str | None = None) -> AdminSession:
        """
        Log in against the platform API and open a session.

        Raises PlatformAPIError for rejected credentials or an unreachable
        platform, NotAdminError for non-admin accounts.
        """
        result = await self.client.login(email, password, device_id)
        token: str = result["token"]
        user: User = result["user"]

        if not await self._confirm_admin(token, user):
            logger.info("Refused console login for non-admin user %s", user.id)
            raise NotAdminError("Admin access required")

        now = datetime.now(timezone.utc)
        ttl = settings.SESSION_TTL_SECONDS
        expires_at = token_expiry(token)
        if expires_at is not None:
            remaining = int((expires_at - now).total_seconds())
            if remaining <= 0:
                raise SessionExpiredError("Platform token has already expired")
            ttl = min(ttl, remaining)

        session = AdminSession(
            session_id=new_session_id(),
            token=token,
            user=user,
            is_admin=True,
            created_at=now,
            expires_at=now + timedelta(seconds=ttl),
        )
        await self.redis.setex(_key(session.session_id), ttl, session.model_dump_json())
        logger.info("Admin session started for user %s (ttl=%ss)", user.id, ttl)
        return session

    async def get(self, session_id: str) -> AdminSession | None:
        """Resolve a session id; expired or unreadable sessions are ended."""
        raw = await self.redis.get(_key(session_id))
        if raw is None:
            # Redis expired the record; release what this process still holds.
            self._release(session_id)
            return None

        try:
            session = AdminSession.model_validate_json(raw)
        except ValidationError:
            logger.warning("Dropping unreadable session record %s", session_id[:8])
            await self.logout(session_id)
            return None

        if session.is_expired() or is_token_expired(session.token):
            await self.logout(session_id)
            return None
        return session

    async def verify(self, session: AdminSession) -> bool:
        """
        Ask the platform whether the session's token is still accepted.
        A revoked token ends the session.
        """
        if await self.client.validate_token(session.token):
            return True
        logger.info("Platform revoked the token of session %s", session.session_id[:8])
        await self.logout(session.session_id)
        return False

    async def logout(self, session_id: str) -> None:
        """End a session and release everything held for it."""
        await self.redis.delete(_key(session_id))
        self._release(session_id)
        logger.info("Admin session %s ended", session_id[:8])

    def _release(self, session_id: str) -> None:
        store_registry.drop(session_id)
        notification_hub.close_session(session_id)
