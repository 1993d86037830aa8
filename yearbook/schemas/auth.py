"""Auth request/response schemas."""

from typing import Optional

from pydantic import BaseModel


class RegisterRequest(BaseModel):
    email: str
    password: str
    name: Optional[str] = None


class LoginRequest(BaseModel):
    email: str
    password: str


class TokenResponse(BaseModel):
    user_id: str
    access_token: str
    token_type: str = "bearer"
    role: str


class MeResponse(BaseModel):
    user_id: str
    email: Optional[str]
    name: Optional[str]
    global_role: str


class NotificationResponse(BaseModel):
    id: str
    kind: str
    album_id: Optional[str]
    message: Optional[str]
    created_at: str
    read_at: Optional[str]
