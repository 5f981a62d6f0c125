from fastapi import Depends, Header, HTTPException, status
from typing import Iterable, Optional
import logging

from config import AUTH_PATH
from iwems.access_guard import Allow, RedirectTo, allowed_roles_for, authorize
from iwems.engagement_store import EngagementStore, engagement_store
from iwems.identity import IdentityResolver, SessionContext, SessionResolution, identity_resolver


def get_identity_resolver() -> IdentityResolver:
    return identity_resolver


def get_engagement_store() -> EngagementStore:
    return engagement_store


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def get_session_context(authorization: Optional[str] = Header(None)) -> SessionContext:
    """
    Builds the per-request SessionContext from the `Authorization: Bearer <token>`
    header issued at sign-in. The token itself is verified when the session is resolved.
    """
    token = _bearer_token(authorization)
    if not token:
        logging.warning("Missing or malformed Authorization header.")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "unauthenticated", "redirect": AUTH_PATH},
            headers={"WWW-Authenticate": "Bearer"},
        )
    return SessionContext(access_token=token)


async def get_optional_session_context(authorization: Optional[str] = Header(None)) -> Optional[SessionContext]:
    token = _bearer_token(authorization)
    return SessionContext(access_token=token) if token else None


def require_roles(allowed_roles: Optional[Iterable] = None):
    """
    Dependency factory: runs the access decision for `allowed_roles` and returns
    the resolved principal and role on Allow. A redirect to sign-in becomes 401,
    any other redirect becomes 403; both carry the redirect target.
    """
    allowed = frozenset(allowed_roles) if allowed_roles is not None else None

    async def dependency(
        context: SessionContext = Depends(get_session_context),
        resolver: IdentityResolver = Depends(get_identity_resolver),
    ) -> SessionResolution:
        guard = await authorize(resolver, context, allowed)
        decision = guard.decision
        if isinstance(decision, Allow):
            logging.info(f"Authorized user_id={guard.state.principal.id} role={guard.state.role}")
            return SessionResolution(principal=guard.state.principal, role=guard.state.role)
        redirect = decision.path if isinstance(decision, RedirectTo) else AUTH_PATH
        if redirect == AUTH_PATH:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail={"error": "unauthenticated", "redirect": redirect},
                headers={"WWW-Authenticate": "Bearer"},
            )
        logging.info(f"Access denied, redirecting to {redirect}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"error": "forbidden", "redirect": redirect},
        )

    return dependency


def require_area(path: str):
    """Same as `require_roles`, using the role set that guards the application area `path`."""
    return require_roles(allowed_roles_for(path))
