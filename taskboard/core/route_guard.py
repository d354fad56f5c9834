"""
Coarse pre-dispatch gate.

Only the presence of the auth cookie is checked here, never its validity.
Real authorization happens in the API operations, which decode the token.
"""

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Optional

from taskboard.core.config import Settings


class PathClass(str, Enum):
    PUBLIC = "public"
    API = "api"
    PROTECTED = "protected"
    ASSET = "asset"


class GuardAction(str, Enum):
    ALLOW = "allow"
    REDIRECT = "redirect"


@dataclass(frozen=True)
class GuardDecision:
    action: GuardAction
    location: Optional[str] = None

    @property
    def allowed(self) -> bool:
        return self.action == GuardAction.ALLOW


ALLOW = GuardDecision(GuardAction.ALLOW)


@dataclass(frozen=True)
class RouteGuard:
    public_paths: FrozenSet[str]
    api_prefix: str
    login_path: str
    dashboard_path: str
    exempt_paths: FrozenSet[str] = frozenset()

    @classmethod
    def from_settings(cls, settings: Settings) -> "RouteGuard":
        return cls(
            public_paths=frozenset(settings.PUBLIC_PATHS),
            api_prefix=settings.API_PREFIX.rstrip("/"),
            login_path=settings.LOGIN_PATH,
            dashboard_path=settings.DASHBOARD_PATH,
            exempt_paths=frozenset(settings.GUARD_EXEMPT_PATHS),
        )

    def classify(self, path: str) -> PathClass:
        if path in self.public_paths:
            return PathClass.PUBLIC
        if path == self.api_prefix or path.startswith(self.api_prefix + "/"):
            return PathClass.API
        # API docs and static files (favicon.ico, robots.txt) are never gated
        if path in self.exempt_paths or "." in path.rsplit("/", 1)[-1]:
            return PathClass.ASSET
        return PathClass.PROTECTED

    def decide(self, path: str, has_credential: bool) -> GuardDecision:
        path_class = self.classify(path)
        if not has_credential and path_class == PathClass.PROTECTED:
            return GuardDecision(GuardAction.REDIRECT, self.login_path)
        if has_credential and path_class == PathClass.PUBLIC:
            return GuardDecision(GuardAction.REDIRECT, self.dashboard_path)
        return ALLOW
