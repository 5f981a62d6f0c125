from fastapi import APIRouter, Depends, HTTPException, status
from typing import Optional
import logging

from api.auth.models import (
    RoleSwitchRequest,
    SessionResponse,
    SignInRequest,
    SignInResponse,
    SignUpRequest,
)
from api.security import (
    get_identity_resolver,
    get_optional_session_context,
    get_session_context,
    require_roles,
)
from config import AUTH_PATH
from iwems.access_guard import role_home_of
from iwems.entities import Principal
from iwems.identity import IdentityResolver, SessionContext, SessionResolution

auth_router = APIRouter()


@auth_router.post("/sign-in", response_model=SignInResponse)
async def sign_in(body: SignInRequest, resolver: IdentityResolver = Depends(get_identity_resolver)):
    context, resolution = await resolver.sign_in(body.email, body.password)
    logging.info(f"Signed in user_id={resolution.principal.id} role={resolution.role}")
    return SignInResponse(
        access_token=context.access_token,
        refresh_token=context.refresh_token,
        principal=resolution.principal,
        role=resolution.role,
        home=role_home_of(resolution.role),
    )


@auth_router.post("/sign-up", response_model=Principal, status_code=status.HTTP_201_CREATED)
async def sign_up(body: SignUpRequest, resolver: IdentityResolver = Depends(get_identity_resolver)):
    logging.info(f"Sign-up request for {body.email} as {body.role.value}")
    return await resolver.sign_up(body.email, body.password, body.full_name, body.role)


@auth_router.post("/sign-out", status_code=status.HTTP_204_NO_CONTENT)
async def sign_out(
    context: Optional[SessionContext] = Depends(get_optional_session_context),
    resolver: IdentityResolver = Depends(get_identity_resolver),
):
    await resolver.sign_out(context)


@auth_router.get("/session", response_model=SessionResponse)
async def get_session(
    context: SessionContext = Depends(get_session_context),
    resolver: IdentityResolver = Depends(get_identity_resolver),
):
    resolution = await resolver.resolve_session(context)
    if not resolution:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "unauthenticated", "redirect": AUTH_PATH},
        )
    return SessionResponse(principal=resolution.principal, role=resolution.role, home=role_home_of(resolution.role))


@auth_router.put("/role", response_model=SessionResponse)
async def switch_role(
    body: RoleSwitchRequest,
    session: SessionResolution = Depends(require_roles()),
    resolver: IdentityResolver = Depends(get_identity_resolver),
):
    role = await resolver.switch_role(session.principal.id, body.role)
    return SessionResponse(principal=session.principal, role=role, home=role_home_of(role))
