"""Join request and class access schemas."""

from typing import Optional

from pydantic import BaseModel


class ClassRequestBody(BaseModel):
    student_name: str
    email: Optional[str] = None


class AlbumJoinBody(BaseModel):
    student_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    class_name: Optional[str] = None
    class_id: Optional[str] = None


class ApproveBody(BaseModel):
    class_id: Optional[str] = None


class RejectBody(BaseModel):
    reason: Optional[str] = None


class ProfileUpdateRequest(BaseModel):
    student_name: Optional[str] = None
    email: Optional[str] = None
    date_of_birth: Optional[str] = None
    instagram: Optional[str] = None
    message: Optional[str] = None
    video_url: Optional[str] = None
    photos: Optional[list[str]] = None


class PhotoAddRequest(BaseModel):
    url: str


class AccessResponse(BaseModel):
    id: str
    album_id: str
    class_id: str
    user_id: Optional[str]
    student_name: str
    email: Optional[str]
    status: str
    date_of_birth: Optional[str]
    instagram: Optional[str]
    message: Optional[str]
    video_url: Optional[str]
    photos: list[str]
    created_at: str
    updated_at: str


class ClassMemberResponse(AccessResponse):
    is_me: bool


class JoinRequestResponse(BaseModel):
    id: str
    album_id: str
    user_id: Optional[str]
    scope: str
    assigned_class_id: Optional[str]
    student_name: str
    email: Optional[str]
    phone: Optional[str]
    class_name: Optional[str]
    status: str
    rejected_reason: Optional[str]
    requested_at: str
    decided_at: Optional[str]
    decided_by: Optional[str]


class RegistrationResponse(BaseModel):
    """Outcome of filing a registration: an approved grant or a pending request."""
    status: str
    access: Optional[AccessResponse] = None
    request: Optional[JoinRequestResponse] = None


class MyAccessResponse(BaseModel):
    status: str  # 'none' | 'pending' | 'approved' | 'rejected'
    access: Optional[AccessResponse]
    request: Optional[JoinRequestResponse]
