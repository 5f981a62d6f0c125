from pydantic import BaseModel
from typing import Optional

from iwems.entities import Principal, Role


class SignInRequest(BaseModel):
    email: str
    password: str


class SignUpRequest(BaseModel):
    email: str
    password: str
    full_name: Optional[str] = None
    role: Role = Role.COUPLE


class SessionResponse(BaseModel):
    principal: Principal
    role: Optional[Role] = None
    home: str


class SignInResponse(SessionResponse):
    access_token: str
    refresh_token: Optional[str] = None


class RoleSwitchRequest(BaseModel):
    role: str
