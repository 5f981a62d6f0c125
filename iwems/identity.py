"""
Session and role resolution.

The current principal is never looked up from global state: callers hold a
`SessionContext` created at sign-in and pass it in. Resolution runs two
dependent lookups, the Auth user first and the `user_roles` row second; the
role lookup is skipped when the session does not resolve to a principal.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from config import ROLE_SWITCH_ENABLED
from iwems import db_queries
from iwems.auth_client import SupabaseAuthClient, auth_client
from iwems.entities import Principal, Role
from iwems.exceptions import NotFound, RoleSwitchDisabled, SessionExpired, ValidationError
from iwems.helpers import fetch_rows
from logger import json_logger as logger


class SessionState(str, Enum):
    ACTIVE = "active"
    INVALIDATED = "invalidated"


@dataclass
class SessionContext:
    access_token: str
    refresh_token: Optional[str] = None
    state: SessionState = SessionState.ACTIVE

    @classmethod
    def from_auth_payload(cls, payload: Dict[str, Any]) -> "SessionContext":
        """Builds a context from a sign-in response. Raises ValidationError when no session was issued."""
        access_token = payload.get("access_token")
        if not access_token:
            raise ValidationError("Sign-in did not return a session.")
        return cls(access_token=access_token, refresh_token=payload.get("refresh_token"))

    @property
    def is_active(self) -> bool:
        return self.state is SessionState.ACTIVE

    def invalidate(self) -> None:
        self.state = SessionState.INVALIDATED


class Unauthenticated:
    def __repr__(self):
        return "UNAUTHENTICATED"

    def __bool__(self):
        return False


UNAUTHENTICATED = Unauthenticated()

# Admin is granted out of band, never chosen by the account holder.
SELF_SERVICE_ROLES = frozenset({Role.COUPLE, Role.PLANNER, Role.VENDOR, Role.VENUE_MANAGER})


@dataclass(frozen=True)
class SessionResolution:
    principal: Principal
    # None means the principal has no role record and no role-gated access.
    role: Optional[Role]


def principal_from_auth_user(user: Dict[str, Any]) -> Principal:
    metadata = user.get("user_metadata") or {}
    return Principal(
        id=str(user["id"]),
        display_name=metadata.get("full_name"),
        email=user.get("email"),
        authenticated=True,
    )


class IdentityResolver:
    def __init__(self, auth: SupabaseAuthClient = auth_client, role_switch_enabled: bool = ROLE_SWITCH_ENABLED):
        self.auth = auth
        self.role_switch_enabled = role_switch_enabled

    async def resolve_principal(self, context: Optional[SessionContext]) -> Optional[Principal]:
        """Returns the principal for an active session, None when there is no usable session.

        Raises SessionExpired when the Auth API rejects the token.
        """
        if context is None or not context.is_active:
            return None
        user = await self.auth.get_user(context.access_token)
        if not user or not user.get("id"):
            return None
        return principal_from_auth_user(user)

    async def lookup_role(self, principal_id: str) -> Optional[Role]:
        rows = await fetch_rows(db_queries.get_user_role_query(), {"user_id": principal_id})
        if not rows:
            logger.info(f"lookup_role: no role record for principal {principal_id}")
            return None
        role = Role.parse(rows[0].get("role"))
        if role is None:
            logger.warning(f"lookup_role: unknown role value {rows[0].get('role')!r} for principal {principal_id}")
        return role

    async def resolve_session(self, context: Optional[SessionContext]) -> Union[SessionResolution, Unauthenticated]:
        principal = await self.resolve_principal(context)
        if principal is None:
            return UNAUTHENTICATED
        role = await self.lookup_role(principal.id)
        return SessionResolution(principal=principal, role=role)

    async def switch_role(self, principal_id: str, new_role: Any) -> Role:
        """Explicit role switch (`UPDATE user_roles`). Disabled unless ROLE_SWITCH_ENABLED is set."""
        with logger.contextualize(principal_id=principal_id, new_role=str(new_role)):
            if not self.role_switch_enabled:
                logger.warning("switch_role: rejected, self-service role switching is disabled.")
                raise RoleSwitchDisabled()
            role = Role.parse(new_role)
            if role not in SELF_SERVICE_ROLES:
                raise ValidationError(f"Unknown role: {new_role}")
            rows = await fetch_rows(db_queries.update_user_role_query(), {"user_id": principal_id, "role": role})
            if not rows:
                raise NotFound("No role record exists for this account.")
            logger.info(f"switch_role: principal now has role {role.value}")
            return role

    async def assign_initial_role(self, principal_id: str, role: Any) -> Role:
        """Records the role chosen at sign-up."""
        parsed = Role.parse(role)
        if parsed not in SELF_SERVICE_ROLES:
            raise ValidationError(f"Unknown role: {role}")
        await fetch_rows(db_queries.insert_user_role_query(), {"user_id": principal_id, "role": parsed})
        logger.info(f"assign_initial_role: principal {principal_id} registered as {parsed.value}")
        return parsed

    async def sign_in(self, email: str, password: str) -> Tuple[SessionContext, SessionResolution]:
        """Password sign-in. Returns the new session context and what it resolves to."""
        payload = await self.auth.sign_in_with_password(email, password)
        context = SessionContext.from_auth_payload(payload)
        resolution = await self.resolve_session(context)
        if not resolution:
            raise SessionExpired()
        return context, resolution

    async def sign_up(self, email: str, password: str, full_name: Optional[str], role: Any) -> Principal:
        parsed = Role.parse(role)
        if parsed not in SELF_SERVICE_ROLES:
            raise ValidationError(f"Unknown role: {role}")
        payload = await self.auth.sign_up(email, password, full_name)
        # GoTrue returns the user at the top level, or under "user" when a session is issued too.
        user = payload.get("user") or payload
        if not user.get("id"):
            raise ValidationError("The account could not be created.")
        await self.assign_initial_role(user["id"], parsed)
        return principal_from_auth_user(user)

    async def sign_out(self, context: Optional[SessionContext]) -> None:
        if context is None or not context.is_active:
            return
        try:
            await self.auth.sign_out(context.access_token)
        finally:
            context.invalidate()


identity_resolver = IdentityResolver()
