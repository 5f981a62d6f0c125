from fastapi import APIRouter, Depends
from pydantic import BaseModel
from typing import List, Optional

from api.security import get_identity_resolver, get_optional_session_context
from iwems.access_guard import Allow, RedirectTo, allowed_roles_for, decide, normalize_path
from iwems.identity import IdentityResolver, SessionContext

access_router = APIRouter()


class AccessDecisionResponse(BaseModel):
    path: str
    decision: str
    redirect: Optional[str] = None
    allowed_roles: Optional[List[str]] = None


@access_router.get("/evaluate", response_model=AccessDecisionResponse)
async def evaluate_access(
    path: str,
    context: Optional[SessionContext] = Depends(get_optional_session_context),
    resolver: IdentityResolver = Depends(get_identity_resolver),
):
    """Runs the navigation decision for `path` so a client can route before rendering."""
    guard = await decide(resolver, context, path)
    allowed = allowed_roles_for(path)
    response = AccessDecisionResponse(
        path=normalize_path(path),
        decision="pending",
        allowed_roles=sorted(role.value for role in allowed) if allowed is not None else None,
    )
    if isinstance(guard.decision, Allow):
        response.decision = "allow"
    elif isinstance(guard.decision, RedirectTo):
        response.decision = "redirect"
        response.redirect = guard.decision.path
    return response
