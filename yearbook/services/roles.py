"""Role resolution: a caller's effective permission tier inside one album."""

from dataclasses import dataclass

from yearbook.models.album import Album
from yearbook.services.identity import Identity
from yearbook.services.store import AlbumStore


@dataclass(frozen=True)
class EffectiveRole:
    is_owner: bool = False
    is_global_admin: bool = False
    is_album_admin: bool = False
    is_member: bool = False

    @property
    def can_manage(self) -> bool:
        """Approve requests, edit other profiles, manage classes and team."""
        return self.is_owner or self.is_global_admin or self.is_album_admin

    @property
    def can_view(self) -> bool:
        return self.can_manage or self.is_member

    @property
    def label(self) -> str:
        if self.is_owner:
            return "owner"
        if self.is_global_admin:
            return "global_admin"
        if self.is_album_admin:
            return "admin"
        if self.is_member:
            return "member"
        return "none"


def effective_role(store: AlbumStore, identity: Identity, album: Album) -> EffectiveRole:
    """Combine ownership, global role, album membership and class access.

    Owner and global admin dominate everything else, so the membership and
    class access lookups are skipped for them.
    """
    is_owner = album.owner_id == identity.user_id
    is_global_admin = identity.is_global_admin
    if is_owner or is_global_admin:
        return EffectiveRole(is_owner=is_owner, is_global_admin=is_global_admin)

    member = store.get_member(album.id, identity.user_id)
    is_album_admin = member is not None and member.role == "admin"
    is_member = (member is not None and member.role == "member") or store.has_approved_access(
        album.id, identity.user_id
    )
    return EffectiveRole(is_album_admin=is_album_admin, is_member=is_member)
