"""Album and class schemas."""

from typing import Optional

from pydantic import BaseModel, Field


class AlbumCreateRequest(BaseModel):
    name: str
    students_count: Optional[int] = Field(default=None, ge=0)


class AlbumUpdateRequest(BaseModel):
    name: Optional[str] = None
    students_count: Optional[int] = Field(default=None, ge=0)


class AlbumStatusRequest(BaseModel):
    status: str  # 'pending' | 'approved' | 'declined'
    payment_status: Optional[str] = None


class AlbumResponse(BaseModel):
    id: str
    name: str
    owner_id: str
    status: str
    payment_status: Optional[str]
    students_count: Optional[int]
    created_at: str


class AlbumDetailResponse(AlbumResponse):
    my_role: str
    can_manage: bool


class JoinStatsResponse(BaseModel):
    limit_count: Optional[int]
    approved_count: int
    pending_count: int
    rejected_count: int
    available_slots: Optional[int]


class ClassCreateRequest(BaseModel):
    name: str
    sort_order: Optional[int] = None


class ClassUpdateRequest(BaseModel):
    name: Optional[str] = None
    sort_order: Optional[int] = None


class ClassResponse(BaseModel):
    id: str
    album_id: str
    name: str
    sort_order: int
    student_count: int = 0
    created_at: str
