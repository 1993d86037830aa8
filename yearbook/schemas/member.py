"""Membership and invite schemas."""

from typing import Optional

from pydantic import BaseModel


class MemberUpsertRequest(BaseModel):
    user_id: Optional[str] = None
    email: Optional[str] = None
    role: str = "member"


class MemberResponse(BaseModel):
    album_id: str
    user_id: str
    role: str
    joined_at: str


class RosterEntry(BaseModel):
    user_id: Optional[str]
    email: Optional[str]
    name: Optional[str]
    role: str  # 'owner' | 'admin' | 'member' | 'student' | 'no-account'
    has_account: bool
    class_id: Optional[str]


class InviteCreateRequest(BaseModel):
    role: str = "member"


class InviteResponse(BaseModel):
    id: str
    album_id: str
    token: str
    role: str
    invite_link: str
    expires_at: str
    revoked_at: Optional[str]
    created_by: str


class InvitePreviewResponse(BaseModel):
    album_id: str
    album_name: str
    role: str
    expires_at: str


class InviteJoinResponse(BaseModel):
    album_id: str
    role: str
    result: str  # 'joined' | 'upgraded' | 'already_member' | 'owner'
