import itertools
import pytest
from unittest.mock import AsyncMock, MagicMock

from config import AUTH_PATH
from iwems.access_guard import (
    ALLOW,
    PENDING,
    PLANNING_ROLES,
    ROUTE_ROLES,
    GuardState,
    NavigationGuard,
    RedirectTo,
    allowed_roles_for,
    authorize,
    decide,
    evaluate,
    role_home_of,
)
from iwems.entities import Principal, Role
from iwems.exceptions import SessionExpired
from iwems.identity import SessionContext

ALICE = Principal(id="alice", display_name="Alice")


def loaded(role, principal=ALICE):
    return GuardState(session_loading=False, principal=principal, role_loading=False, role=role)


def test_loading_session_is_pending():
    assert evaluate(GuardState(), PLANNING_ROLES) == PENDING


def test_no_principal_goes_to_sign_in():
    state = GuardState(session_loading=False, principal=None)
    assert evaluate(state, PLANNING_ROLES) == RedirectTo(AUTH_PATH)
    assert evaluate(state, None) == RedirectTo(AUTH_PATH)


def test_ungated_area_allows_any_principal_while_role_loads():
    state = GuardState(session_loading=False, principal=ALICE, role_loading=True)
    assert evaluate(state, None) == ALLOW


def test_gated_area_waits_for_role():
    state = GuardState(session_loading=False, principal=ALICE, role_loading=True)
    assert evaluate(state, PLANNING_ROLES) == PENDING


def test_vendor_on_dashboard_goes_to_vendor_home():
    assert evaluate(loaded(Role.VENDOR), ["couple", "planner"]) == RedirectTo("/vendor-dashboard")


def test_missing_role_has_no_gated_access():
    assert evaluate(loaded(None), PLANNING_ROLES) == RedirectTo("/dashboard")
    assert evaluate(loaded(None), {Role.ADMIN}) == RedirectTo("/dashboard")


@pytest.mark.parametrize("role", [Role.COUPLE, Role.PLANNER])
def test_planning_roles_reach_planning_areas(role):
    for path in ("/dashboard", "/events", "/events/create", "/vendors", "/venues", "/budget", "/cultural"):
        assert evaluate(loaded(role), allowed_roles_for(path)) == ALLOW


@pytest.mark.parametrize("path", list(ROUTE_ROLES))
def test_every_gated_area_redirects_outsiders_home(path):
    allowed = ROUTE_ROLES[path]
    for role in Role:
        decision = evaluate(loaded(role), allowed)
        if role in allowed:
            assert decision == ALLOW
        else:
            assert decision == RedirectTo(role_home_of(role))


def test_never_redirects_before_session_is_known():
    roles = [None] + list(Role)
    for principal, role_loading, role in itertools.product([None, ALICE], [True, False], roles):
        state = GuardState(session_loading=True, principal=principal, role_loading=role_loading, role=role)
        assert evaluate(state, PLANNING_ROLES) == PENDING


def test_role_homes():
    assert role_home_of(Role.VENDOR) == "/vendor-dashboard"
    assert role_home_of("venue_manager") == "/venue-manager"
    assert role_home_of(Role.ADMIN) == "/admin"
    assert role_home_of(Role.COUPLE) == "/dashboard"
    assert role_home_of(None) == "/dashboard"
    assert role_home_of("superuser") == "/dashboard"


def test_unlisted_paths_are_ungated():
    assert allowed_roles_for("/") is None
    assert allowed_roles_for("/no-such-page") is None
    assert allowed_roles_for("/events/?tab=upcoming") == PLANNING_ROLES


def make_resolver(principal=ALICE, role=Role.COUPLE):
    resolver = MagicMock()
    resolver.resolve_principal = AsyncMock(return_value=principal)
    resolver.lookup_role = AsyncMock(return_value=role)
    return resolver


@pytest.mark.asyncio
async def test_guard_redirects_vendor_once():
    navigate = MagicMock()
    resolver = make_resolver(role=Role.VENDOR)
    guard = NavigationGuard.for_path(resolver, SessionContext(access_token="t"), navigate, "/dashboard")

    decision = await guard.start()
    guard.set_allowed_roles(PLANNING_ROLES)

    assert decision == RedirectTo("/vendor-dashboard")
    navigate.assert_called_once_with("/vendor-dashboard")


@pytest.mark.asyncio
async def test_guard_allows_couple():
    navigate = MagicMock()
    guard = NavigationGuard(make_resolver(), SessionContext(access_token="t"), navigate, PLANNING_ROLES)

    assert await guard.start() == ALLOW
    assert guard.principal == ALICE
    navigate.assert_not_called()


@pytest.mark.asyncio
async def test_guard_without_session_skips_role_lookup():
    navigate = MagicMock()
    resolver = make_resolver(principal=None)
    guard = NavigationGuard(resolver, None, navigate, PLANNING_ROLES)

    assert await guard.start() == RedirectTo(AUTH_PATH)
    resolver.lookup_role.assert_not_awaited()
    navigate.assert_called_once_with(AUTH_PATH)


@pytest.mark.asyncio
async def test_expired_session_invalidates_context():
    navigate = MagicMock()
    resolver = make_resolver()
    resolver.resolve_principal.side_effect = SessionExpired()
    context = SessionContext(access_token="stale")
    guard = NavigationGuard(resolver, context, navigate, PLANNING_ROLES)

    assert await guard.start() == RedirectTo(AUTH_PATH)
    assert not context.is_active
    resolver.lookup_role.assert_not_awaited()


@pytest.mark.asyncio
async def test_result_after_unmount_is_discarded():
    navigate = MagicMock()
    resolver = make_resolver()
    guard = NavigationGuard(resolver, SessionContext(access_token="t"), navigate, PLANNING_ROLES)

    async def lookup_then_leave(principal_id):
        guard.unmount()
        return Role.VENDOR

    resolver.lookup_role.side_effect = lookup_then_leave

    assert await guard.start() == PENDING
    assert guard.state.role is None
    navigate.assert_not_called()


@pytest.mark.asyncio
async def test_refresh_role_after_role_change_redirects():
    navigate = MagicMock()
    resolver = make_resolver(role=Role.COUPLE)
    guard = NavigationGuard(resolver, SessionContext(access_token="t"), navigate, PLANNING_ROLES)
    assert await guard.start() == ALLOW

    resolver.lookup_role.return_value = Role.VENUE_MANAGER
    assert await guard.refresh_role() == RedirectTo("/venue-manager")
    navigate.assert_called_once_with("/venue-manager")


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ["/", "/auth", "/no-such-page"])
async def test_public_paths_allow_without_session(path):
    navigate = MagicMock()
    resolver = make_resolver(principal=None)
    guard = NavigationGuard.for_path(resolver, None, navigate, path)

    assert await guard.start() == ALLOW
    resolver.resolve_principal.assert_not_awaited()
    navigate.assert_not_called()


@pytest.mark.asyncio
async def test_decide_on_public_path_skips_identity_lookup():
    resolver = make_resolver()
    resolver.resolve_principal.side_effect = SessionExpired()

    guard = await decide(resolver, SessionContext(access_token="stale"), "/auth")

    assert guard.decision == ALLOW
    resolver.resolve_principal.assert_not_awaited()


@pytest.mark.asyncio
async def test_authorize_without_roles_still_needs_sign_in():
    guard = await authorize(make_resolver(principal=None), None, None)

    assert guard.decision == RedirectTo(AUTH_PATH)
