"""Role Gate — route access from session state alone."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Mapping, Optional

LOGIN_PATH = "/login"
HOME_PATH = "/dashboard"

# path -> requires admin
ROUTES: dict[str, bool] = {
    "/login": False,
    "/dashboard": False,
    "/tasks": False,
    "/team": False,
    "/client-of-month": False,
    "/calendar": False,
    "/settings": False,
    "/profile": False,
    "/my-leaves": False,
    "/leaves": True,
    "/attendance": False,
    "/chat": False,
    "/meetings": False,
    "/work-update": False,
    "/learning-update": False,
    "/activity": False,
    "/reports": True,
}


class GateState(str, enum.Enum):
    loading = "loading"
    unauthenticated = "unauthenticated"
    forbidden = "forbidden"
    authorized = "authorized"


@dataclass(frozen=True)
class GateDecision:
    state: GateState
    redirect: Optional[str] = None

    @property
    def render(self) -> bool:
        return self.state == GateState.authorized and self.redirect is None


class RoleGate:
    def __init__(self, routes: Optional[Mapping[str, bool]] = None) -> None:
        self.routes = dict(routes if routes is not None else ROUTES)

    @staticmethod
    def _normalize(path: str) -> str:
        path = path.split("?", 1)[0]
        if len(path) > 1:
            path = path.rstrip("/")
        return path or "/"

    def decide(
        self,
        path: str,
        *,
        current_user: Optional[Any],
        role: Optional[str],
        is_loading: bool,
    ) -> GateDecision:
        if is_loading:
            return GateDecision(GateState.loading)

        path = self._normalize(path)
        if path == LOGIN_PATH:
            if current_user is not None:
                return GateDecision(GateState.authorized, redirect=HOME_PATH)
            return GateDecision(GateState.authorized)

        if current_user is None:
            return GateDecision(GateState.unauthenticated, redirect=LOGIN_PATH)

        requires_admin = self.routes.get(path)
        if requires_admin is None:
            return GateDecision(GateState.authorized, redirect=HOME_PATH)
        if requires_admin and role != "admin":
            return GateDecision(GateState.forbidden, redirect=HOME_PATH)
        return GateDecision(GateState.authorized)

    def decide_for(self, path: str, session) -> GateDecision:
        """Shortcut over a ``SessionManager``."""
        return self.decide(
            path,
            current_user=session.current_user,
            role=session.role,
            is_loading=session.is_loading,
        )
