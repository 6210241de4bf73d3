"""HTTP access to the GROFAST API: the shared transport and the auth client.

``BackendClient`` owns one ``httpx.AsyncClient``, adds the ``apikey`` and
bearer headers, and turns every response into ``Ok``/``Err``. ``AuthClient``
keeps the token pair and emits auth state change events.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Union
from urllib.parse import urlencode

import httpx
from pydantic_core import to_jsonable_python

from grofast.client.config import ClientSettings, load_client_settings
from grofast.client.fetcher import EntityFetcher
from grofast.client.result import BackendError, Err, Ok, Result

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"

# ── Auth events ─────────────────────────────────────────────────────

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"
TOKEN_REFRESHED = "TOKEN_REFRESHED"
USER_UPDATED = "USER_UPDATED"

AuthListener = Callable[[str, Optional[dict]], Union[Awaitable[None], None]]


def websocket_url(base_url: str, path: str, params: dict[str, str]) -> str:
    """``http(s)://host`` -> ``ws(s)://host/api/v1<path>?<params>``."""
    base = base_url.rstrip("/")
    if base.startswith("https://"):
        base = "wss://" + base[len("https://"):]
    elif base.startswith("http://"):
        base = "ws://" + base[len("http://"):]
    return f"{base}{API_PREFIX}{path}?{urlencode(params)}"


class BackendClient:
    """Single entry point for HTTP calls against the API."""

    def __init__(
        self,
        base_url: str,
        anon_key: str,
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.anon_key = anon_key
        self.access_token: Optional[str] = None
        # Awaited with the refused token when a bearer call gets a 401
        self.on_unauthorized: Optional[Callable[[str], Awaitable[None]]] = None
        self._http = httpx.AsyncClient(
            base_url=f"{self.base_url}{API_PREFIX}",
            headers={"apikey": anon_key},
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Optional[ClientSettings] = None,
        **kwargs: Any,
    ) -> BackendClient:
        settings = settings or load_client_settings()
        return cls(settings.BACKEND_URL, settings.ANON_KEY, **kwargs)

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[dict[str, str]] = None,
    ) -> Result[Any]:
        headers = {}
        token = self.access_token
        if token:
            headers["Authorization"] = f"Bearer {token}"
        try:
            response = await self._http.request(
                method,
                path,
                json=to_jsonable_python(json) if json is not None else None,
                params=params,
                headers=headers,
            )
        except httpx.HTTPError as exc:
            error = BackendError.from_exception(exc)
            logger.warning("%s %s failed: %s", method, path, error)
            return Err(error)

        if response.is_error:
            error = BackendError.from_response(response)
            logger.warning("%s %s failed: %s", method, path, error)
            # The call itself is not retried; auth endpoints handle their own 401s
            if (
                response.status_code == 401
                and token
                and self.on_unauthorized is not None
                and not path.startswith("/auth/")
            ):
                await self.on_unauthorized(token)
            return Err(error)
        if response.status_code == 204 or not response.content:
            return Ok(None)
        return Ok(response.json())

    def table(self, resource: str) -> EntityFetcher:
        return EntityFetcher(self, resource)

    def websocket_url(self, path: str, params: dict[str, str]) -> str:
        return websocket_url(self.base_url, path, params)

    async def aclose(self) -> None:
        await self._http.aclose()


class AuthClient:
    """Password sign-in, session lookup, token refresh and sign-out.

    ``session`` restores a token pair persisted by an earlier process; the
    current pair is always readable from ``.session`` for storing. A bearer
    call refused with 401 triggers one refresh, which emits
    ``TOKEN_REFRESHED`` or ``SIGNED_OUT``.
    """

    def __init__(self, backend: BackendClient, session: Optional[dict] = None) -> None:
        self.backend = backend
        self.session: Optional[dict] = None
        self._listeners: list[AuthListener] = []
        self._refreshing: Optional[asyncio.Task] = None
        backend.on_unauthorized = self._on_unauthorized
        if session:
            self._store(session)

    # ── Events ──────────────────────────────────────────────────────

    def on_auth_state_change(self, listener: AuthListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def _emit(self, event: str) -> None:
        for listener in list(self._listeners):
            try:
                outcome = listener(event, self.session)
                if inspect.isawaitable(outcome):
                    await outcome
            except Exception:
                logger.exception("Auth listener failed on %s", event)

    def _store(self, session: Optional[dict]) -> None:
        self.session = session
        self.backend.access_token = session["access_token"] if session else None

    async def _on_unauthorized(self, refused_token: str) -> None:
        # Only the current token is refreshed, and concurrent refusals share one refresh
        if self.session is None or self.session.get("access_token") != refused_token:
            return
        if self._refreshing is None or self._refreshing.done():
            self._refreshing = asyncio.create_task(self.refresh_session())
        await self._refreshing

    # ── Calls ───────────────────────────────────────────────────────

    async def sign_in_with_password(self, email: str, password: str) -> Result[dict]:
        result = await self.backend.request(
            "POST", "/auth/sign-in", json={"email": email, "password": password},
        )
        if isinstance(result, Err):
            return result
        self._store(result.value)
        await self._emit(SIGNED_IN)
        return Ok(result.value)

    async def get_session(self) -> Result[Optional[dict]]:
        """The live session, refreshing an expired access token once.

        ``Ok(None)`` when there is no session to restore.
        """
        if self.session is None:
            return Ok(None)
        result = await self.backend.request("GET", "/auth/session")
        if isinstance(result, Ok):
            return Ok(self.session)
        if result.error.status != 401:
            return result
        refreshed = await self.refresh_session()
        if isinstance(refreshed, Ok):
            return refreshed
        return Ok(None)

    async def refresh_session(self) -> Result[dict]:
        if self.session is None or not self.session.get("refresh_token"):
            return Err(BackendError(message="No refresh token available.", status=401))
        result = await self.backend.request(
            "POST", "/auth/refresh", json={"refresh_token": self.session["refresh_token"]},
        )
        if isinstance(result, Err):
            if result.error.status == 401:
                self._store(None)
                await self._emit(SIGNED_OUT)
            return result
        self._store(result.value)
        await self._emit(TOKEN_REFRESHED)
        return Ok(result.value)

    async def update_password(self, password: str) -> Result[Any]:
        result = await self.backend.request("PUT", "/auth/password", json={"password": password})
        if isinstance(result, Ok):
            await self._emit(USER_UPDATED)
        return result

    async def sign_out(self) -> Result[None]:
        """Revoke the server session; local state is cleared either way."""
        result: Result[Any] = Ok(None)
        if self.session is not None:
            result = await self.backend.request("POST", "/auth/sign-out")
        self._store(None)
        await self._emit(SIGNED_OUT)
        return Ok(None) if isinstance(result, Ok) else result
