"""Class access grants and join requests."""

import secrets
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


class AlbumClassAccess(SQLModel, table=True):
    __tablename__ = "album_class_access"
    # One class per user per album. NULL user_ids (no account yet) are exempt.
    __table_args__ = (UniqueConstraint("album_id", "user_id", name="uq_class_access_album_user"),)

    id: str = Field(default_factory=lambda: f"acc_{secrets.token_hex(4)}", primary_key=True)
    album_id: str = Field(foreign_key="albums.id", ondelete="CASCADE", index=True)
    class_id: str = Field(foreign_key="album_classes.id", ondelete="CASCADE", index=True)
    user_id: Optional[str] = Field(default=None, foreign_key="users.id", ondelete="CASCADE", index=True)
    student_name: str
    email: Optional[str] = None
    status: str = Field(default="approved")  # 'approved' | 'rejected'
    date_of_birth: Optional[str] = None
    instagram: Optional[str] = None
    message: Optional[str] = None
    video_url: Optional[str] = None
    photos: str = "[]"  # JSON array of photo URLs
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class AlbumJoinRequest(SQLModel, table=True):
    __tablename__ = "album_join_requests"
    __table_args__ = (UniqueConstraint("album_id", "user_id", name="uq_join_request_album_user"),)

    id: str = Field(default_factory=lambda: f"req_{secrets.token_hex(4)}", primary_key=True)
    album_id: str = Field(foreign_key="albums.id", ondelete="CASCADE", index=True)
    user_id: Optional[str] = Field(default=None, foreign_key="users.id", ondelete="CASCADE", index=True)
    scope: str = Field(default="class")  # 'album' | 'class'
    assigned_class_id: Optional[str] = Field(
        default=None, foreign_key="album_classes.id", ondelete="SET NULL", index=True
    )
    student_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    class_name: Optional[str] = None  # free-text hint on album-scope requests
    status: str = Field(default="pending", index=True)  # 'pending' | 'approved' | 'rejected'
    rejected_reason: Optional[str] = None
    requested_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    decided_at: Optional[datetime] = None
    decided_by: Optional[str] = None
