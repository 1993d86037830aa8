"""Album, class and membership models."""

import secrets
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


class Album(SQLModel, table=True):
    __tablename__ = "albums"

    id: str = Field(default_factory=lambda: f"alb_{secrets.token_hex(4)}", primary_key=True)
    owner_id: str = Field(foreign_key="users.id", index=True)
    name: str
    status: str = Field(default="pending")  # 'pending' | 'approved' | 'declined'
    payment_status: Optional[str] = None
    students_count: Optional[int] = None  # registration capacity, None = unlimited
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class AlbumClass(SQLModel, table=True):
    __tablename__ = "album_classes"
    __table_args__ = (UniqueConstraint("album_id", "name", name="uq_album_class_name"),)

    id: str = Field(default_factory=lambda: f"cls_{secrets.token_hex(4)}", primary_key=True)
    album_id: str = Field(foreign_key="albums.id", ondelete="CASCADE", index=True)
    name: str
    sort_order: int = Field(default=0)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class AlbumMember(SQLModel, table=True):
    __tablename__ = "album_members"
    __table_args__ = (UniqueConstraint("album_id", "user_id", name="uq_album_member"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    album_id: str = Field(foreign_key="albums.id", ondelete="CASCADE", index=True)
    user_id: str = Field(foreign_key="users.id", ondelete="CASCADE", index=True)
    role: str = Field(default="member")  # 'admin' | 'member'
    joined_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
