"""
Role-based gating of application areas.

`evaluate` is a pure function from a `GuardState` snapshot to a `Decision`.
`NavigationGuard` is the thin adapter that drives the identity lookups,
re-evaluates after every state change and performs the navigation.
"""
from dataclasses import dataclass, replace
from typing import Callable, Iterable, Optional, Union

from config import AUTH_PATH
from iwems.entities import Principal, Role
from iwems.exceptions import SessionExpired
from iwems.identity import IdentityResolver, SessionContext
from logger import json_logger as logger


@dataclass(frozen=True)
class Allow:
    pass


@dataclass(frozen=True)
class Pending:
    pass


@dataclass(frozen=True)
class RedirectTo:
    path: str


Decision = Union[Allow, Pending, RedirectTo]

ALLOW = Allow()
PENDING = Pending()

DEFAULT_HOME = "/dashboard"
ROLE_HOMES = {
    Role.VENDOR: "/vendor-dashboard",
    Role.VENUE_MANAGER: "/venue-manager",
    Role.ADMIN: "/admin",
}

PLANNING_ROLES = frozenset({Role.COUPLE, Role.PLANNER})

ROUTE_ROLES = {
    "/dashboard": PLANNING_ROLES,
    "/events": PLANNING_ROLES,
    "/events/create": PLANNING_ROLES,
    "/vendors": PLANNING_ROLES,
    "/venues": PLANNING_ROLES,
    "/budget": PLANNING_ROLES,
    "/cultural": PLANNING_ROLES,
    "/admin": frozenset({Role.ADMIN}),
    "/venue-manager": frozenset({Role.VENUE_MANAGER}),
    "/vendor-dashboard": frozenset({Role.VENDOR}),
}


def role_home_of(role) -> str:
    if not isinstance(role, Role):
        role = Role.parse(role)
    return ROLE_HOMES.get(role, DEFAULT_HOME)


def normalize_path(path: str) -> str:
    path = (path or "/").split("?", 1)[0].split("#", 1)[0].strip()
    if not path.startswith("/"):
        path = "/" + path
    if len(path) > 1:
        path = path.rstrip("/") or "/"
    return path


def allowed_roles_for(path: str) -> Optional[frozenset]:
    """Role set guarding `path`, or None for public and catch-all paths."""
    return ROUTE_ROLES.get(normalize_path(path))


def coerce_roles(roles: Optional[Iterable]) -> Optional[frozenset]:
    if roles is None:
        return None
    parsed = {role if isinstance(role, Role) else Role.parse(role) for role in roles}
    parsed.discard(None)
    return frozenset(parsed)


@dataclass(frozen=True)
class GuardState:
    session_loading: bool = True
    principal: Optional[Principal] = None
    role_loading: bool = True
    role: Optional[Role] = None


def evaluate(state: GuardState, allowed_roles: Optional[Iterable] = None) -> Decision:
    allowed = coerce_roles(allowed_roles)
    if state.session_loading:
        return PENDING
    if state.principal is None:
        return RedirectTo(AUTH_PATH)
    if allowed is None:
        return ALLOW
    # Never redirect on a role that has not finished loading.
    if state.role_loading:
        return PENDING
    # A principal without a role record has no role-gated access.
    if state.role is None or state.role not in allowed:
        return RedirectTo(role_home_of(state.role))
    return ALLOW


class NavigationGuard:
    """Keeps an area's access decision current and navigates on redirects.

    Every state change re-runs `evaluate`. A redirect to the same target is
    issued once. After `unmount()` late lookup results are dropped. A public
    guard allows at once and never looks up the session.
    """

    def __init__(self, resolver: IdentityResolver, context: Optional[SessionContext],
                 navigate: Callable[[str], None], allowed_roles: Optional[Iterable] = None,
                 public: bool = False):
        self.resolver = resolver
        self.context = context
        self.navigate = navigate
        self.allowed_roles = coerce_roles(allowed_roles)
        self.state = GuardState()
        self.decision: Decision = PENDING
        self.active = True
        self._generation = 0
        self._last_redirect: Optional[str] = None
        self.public = public
        if public:
            self.decision = ALLOW

    @classmethod
    def for_path(cls, resolver: IdentityResolver, context: Optional[SessionContext],
                 navigate: Callable[[str], None], path: str) -> "NavigationGuard":
        allowed = allowed_roles_for(path)
        return cls(resolver, context, navigate, allowed, public=allowed is None)

    @property
    def principal(self) -> Optional[Principal]:
        return self.state.principal

    async def start(self) -> Decision:
        if self.public:
            return self.decision
        generation = self._generation
        self._reevaluate()
        try:
            principal = await self.resolver.resolve_principal(self.context)
        except SessionExpired:
            logger.info("NavigationGuard: session expired, sending the user to sign in.")
            if self.context is not None:
                self.context.invalidate()
            principal = None
        if not self._current(generation):
            return self.decision
        self._update(session_loading=False, principal=principal,
                     role_loading=principal is not None, role=None)
        if principal is None:
            return self.decision
        await self._load_role(generation)
        return self.decision

    async def refresh_role(self) -> Decision:
        """Re-reads the role, e.g. after a switch or revocation, and re-evaluates."""
        if self.public or self.state.principal is None:
            return self.decision
        self._generation += 1
        generation = self._generation
        self._update(role_loading=True)
        await self._load_role(generation)
        return self.decision

    def set_allowed_roles(self, allowed_roles: Optional[Iterable]) -> Decision:
        self.allowed_roles = coerce_roles(allowed_roles)
        self.public = False
        self._reevaluate()
        return self.decision

    def unmount(self) -> None:
        self.active = False
        self._generation += 1

    async def _load_role(self, generation: int) -> None:
        role = await self.resolver.lookup_role(self.state.principal.id)
        if not self._current(generation):
            return
        self._update(role_loading=False, role=role)

    def _current(self, generation: int) -> bool:
        return self.active and generation == self._generation

    def _update(self, **changes) -> None:
        self.state = replace(self.state, **changes)
        self._reevaluate()

    def _reevaluate(self) -> None:
        if not self.active:
            return
        self.decision = evaluate(self.state, self.allowed_roles)
        if isinstance(self.decision, RedirectTo):
            if self.decision.path != self._last_redirect:
                self._last_redirect = self.decision.path
                self.navigate(self.decision.path)
        elif isinstance(self.decision, Allow):
            self._last_redirect = None


async def authorize(resolver: IdentityResolver, context: Optional[SessionContext],
                    allowed_roles: Optional[Iterable] = None) -> NavigationGuard:
    """Runs a guard to completion without navigating; used by the HTTP layer."""
    guard = NavigationGuard(resolver, context, lambda _path: None, allowed_roles)
    await guard.start()
    return guard


async def decide(resolver: IdentityResolver, context: Optional[SessionContext], path: str) -> NavigationGuard:
    """Decision for a navigation target. Paths outside the route table are public."""
    guard = NavigationGuard.for_path(resolver, context, lambda _path: None, path)
    await guard.start()
    return guard
