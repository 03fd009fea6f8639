# storefront/services/admin_service.py
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable

from fastapi import HTTPException, status
from pydantic import TypeAdapter
from supabase import Client

from storefront.core.local_storage import LocalStorage, StorageSchema
from storefront.core.notifications import Notifier
from storefront.repositories.admin_repo import AdminRepository
from storefront.schemas.admin import AdminSession, AdminSignIn

logger = logging.getLogger(__name__)

ADMIN_SESSION = StorageSchema(
    key="simple_admin_session",
    adapter=TypeAdapter(AdminSession | None),
    default_factory=lambda: None,
)

REMEMBERED_EMAIL = StorageSchema(
    key="admin_remembered_email",
    adapter=TypeAdapter(str | None),
    default_factory=lambda: None,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AdminSessionService:
    """
    Admin sign-in and the session persisted for one client.

    Responsibilities:
      - authenticate through Supabase Auth, then require an active
        `admin_users` row (non-admins are signed out again)
      - persist the session with its last-activity timestamp
      - expire sessions idle for longer than `session_ttl`
      - remember the admin email when asked to
    """

    def __init__(
        self,
        storage: LocalStorage,
        repo: AdminRepository,
        client: Client,
        notifier: Notifier,
        session_ttl: timedelta = timedelta(hours=24),
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.storage = storage
        self.repo = repo
        self.client = client
        self.notifier = notifier
        self.session_ttl = session_ttl
        self._clock = clock

    def get_remembered_email(self) -> str | None:
        return self.storage.load(REMEMBERED_EMAIL)

    def sign_in(self, payload: AdminSignIn) -> AdminSession:
        try:
            user_id = self.repo.sign_in(self.client, payload.email, payload.password)
        except Exception as e:
            logger.warning(f"Supabase auth error for {payload.email}: {e}")
            user_id = None

        if user_id is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid email or password",
            )

        try:
            admin = self.repo.get_active_admin(self.client, user_id)
        except Exception as e:
            logger.error(f"Failed to fetch admin data for {user_id}: {e}")
            admin = None

        if admin is None:
            try:
                self.repo.sign_out(self.client)
            except Exception as e:
                logger.warning(f"Sign out after rejected admin login failed: {e}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Access denied. Admin account required.",
            )

        session = AdminSession(
            email=admin.get("email") or payload.email,
            role=admin.get("role") or "admin",
            auto_login=payload.auto_login,
            last_activity=self._clock(),
        )
        self.storage.save(ADMIN_SESSION, session)

        if payload.remember_me:
            self.storage.save(REMEMBERED_EMAIL, payload.email)
        else:
            self.storage.remove(REMEMBERED_EMAIL)

        self.notifier.notify("Success", "Signed in successfully")
        return session

    def get_active_session(self) -> AdminSession | None:
        """
        Return the stored session unless it has expired.
        Expired sessions are deleted.
        """
        session = self.storage.load(ADMIN_SESSION)
        if session is None:
            return None

        if self._clock() - session.last_activity >= self.session_ttl:
            logger.info(f"Admin session for {session.email} expired")
            self.storage.remove(ADMIN_SESSION)
            return None
        return session

    def touch(self) -> AdminSession | None:
        """Refresh last_activity of a live session."""
        session = self.get_active_session()
        if session is None:
            return None
        session.last_activity = self._clock()
        self.storage.save(ADMIN_SESSION, session)
        return session

    def sign_out(self) -> None:
        try:
            self.repo.sign_out(self.client)
        except Exception as e:
            logger.warning(f"Sign out error: {e}")
        self.storage.remove(ADMIN_SESSION)
        self.notifier.notify("Signed out", "You have been signed out successfully")
