"""Yearbook Database Models."""

from yearbook.models.user import User
from yearbook.models.album import Album, AlbumClass, AlbumMember
from yearbook.models.access import AlbumClassAccess, AlbumJoinRequest
from yearbook.models.invite import AlbumInvite
from yearbook.models.notification import Notification

__all__ = [
    "User",
    "Album",
    "AlbumClass",
    "AlbumMember",
    "AlbumClassAccess",
    "AlbumJoinRequest",
    "AlbumInvite",
    "Notification",
]
