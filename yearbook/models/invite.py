"""Album invite model."""

import secrets
from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel


class AlbumInvite(SQLModel, table=True):
    __tablename__ = "album_invites"

    id: str = Field(default_factory=lambda: f"inv_{secrets.token_hex(4)}", primary_key=True)
    album_id: str = Field(foreign_key="albums.id", ondelete="CASCADE", index=True)
    created_by: str = Field(foreign_key="users.id")
    token: str = Field(unique=True, index=True)
    role: str = Field(default="member")  # 'admin' | 'member'
    expires_at: datetime
    revoked_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
