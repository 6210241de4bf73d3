"""Session Manager — the single owner of ``current_user`` and ``employee_profile``.

  - ``start()`` restores an existing session, bounded by ``load_timeout``
  - every auth event re-resolves the profile, or clears it on sign-out
  - profile resolutions are fenced; only the latest dispatched one lands
  - after ``close()`` nothing is written
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import uuid
from typing import Any, Awaitable, Callable, Optional, Union

from grofast.client.backend import AuthClient
from grofast.client.fetcher import EntityFetcher, RequestFence
from grofast.client.result import BackendError, Err, Ok, Result

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"

Listener = Callable[["SessionManager"], Union[Awaitable[None], None]]


class SessionManager:
    def __init__(
        self,
        auth: AuthClient,
        profiles: EntityFetcher,
        *,
        load_timeout: float = 8.0,
    ) -> None:
        self.auth = auth
        self.profiles = profiles
        self.load_timeout = load_timeout

        self.current_user: Optional[dict] = None
        self.employee_profile: Optional[dict] = None
        self.is_loading = True
        self.last_error: Optional[str] = None

        self._fence = RequestFence()
        self._listeners: list[Listener] = []
        self._closed = False
        self._auth_unsubscribe = auth.on_auth_state_change(self._on_auth_event)

    # ── Lifecycle ───────────────────────────────────────────────────

    async def start(self) -> None:
        try:
            await asyncio.wait_for(self._initial_load(), timeout=self.load_timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "Session load exceeded %.1fs; continuing without a session",
                self.load_timeout,
            )
        finally:
            if not self._closed:
                self.is_loading = False
                await self._notify()

    async def _initial_load(self) -> None:
        result = await self.auth.get_session()
        if isinstance(result, Err):
            logger.warning("Could not restore session: %s", result.error)
            self.last_error = result.error.message
            return
        await self._apply_session(result.value)

    def close(self) -> None:
        self._closed = True
        self._auth_unsubscribe()
        self._listeners.clear()

    # ── Change notification ─────────────────────────────────────────

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                outcome = listener(self)
                if inspect.isawaitable(outcome):
                    await outcome
            except Exception:
                logger.exception("Session listener failed")

    # ── Profile resolution ──────────────────────────────────────────

    async def _on_auth_event(self, event: str, session: Optional[dict]) -> None:
        logger.debug("Auth event %s", event)
        await self._apply_session(session)

    async def _apply_session(self, session: Optional[dict]) -> None:
        if self._closed:
            return
        generation = self._fence.next()
        user = (session or {}).get("user")
        if user is None:
            self.current_user = None
            self.employee_profile = None
            await self._notify()
            return

        if self.current_user is None or self.current_user.get("id") != user.get("id"):
            self.employee_profile = None
        self.current_user = user
        profile = await self._resolve_profile(user["id"])
        if self._closed or not self._fence.is_current(generation):
            return
        self.employee_profile = profile
        await self._notify()

    async def _resolve_profile(self, user_id: Any) -> Optional[dict]:
        """Employee row for ``user_id``; ``None`` (logged) when it cannot be read."""
        result = await self.profiles.get(user_id)
        if isinstance(result, Err):
            logger.warning("Employee profile lookup failed for %s: %s", user_id, result.error)
            return None
        if result.value is None:
            logger.warning("No employee profile for %s", user_id)
        return result.value

    async def refresh_employee_profile(self) -> Optional[dict]:
        if self._closed or self.current_user is None:
            return None
        generation = self._fence.next()
        profile = await self._resolve_profile(self.current_user["id"])
        if not self._closed and self._fence.is_current(generation):
            self.employee_profile = profile
            await self._notify()
        return self.employee_profile

    # ── Sign-in / sign-out ──────────────────────────────────────────

    async def sign_in(self, email: str, password: str) -> Result[dict]:
        """Never raises; a failure is returned and kept in ``last_error``."""
        self.last_error = None
        try:
            result = await self.auth.sign_in_with_password(email, password)
        except Exception as exc:
            logger.exception("Sign-in raised")
            result = Err(BackendError.from_exception(exc))
        if isinstance(result, Err):
            self.last_error = result.error.message
            logger.warning("Sign-in failed for %s: %s", email, result.error)
            await self._notify()
        return result

    async def sign_out(self) -> Result[None]:
        result = await self.auth.sign_out()
        if isinstance(result, Err):
            logger.warning("Server sign-out failed: %s", result.error)
        return result

    # ── Role ────────────────────────────────────────────────────────

    @property
    def user_id(self) -> Optional[uuid.UUID]:
        if self.current_user is None:
            return None
        return uuid.UUID(str(self.current_user["id"]))

    @property
    def role(self) -> Optional[str]:
        if self.employee_profile is None:
            return None
        return self.employee_profile.get("role")

    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE
