"""Authorization facade: "can this caller do X on this album or class".

Callers that cannot view an album get ``NotFound`` rather than
``Forbidden`` so probing an album id does not confirm it exists.
"""

from yearbook.errors import Forbidden, NotFound
from yearbook.models.album import Album, AlbumClass
from yearbook.services.identity import Identity
from yearbook.services.roles import EffectiveRole, effective_role
from yearbook.services.store import AlbumStore


def load_album(store: AlbumStore, album_id: str) -> Album:
    album = store.get_album(album_id)
    if not album:
        raise NotFound("Album not found")
    return album


def require_class(store: AlbumStore, album: Album, class_id: str) -> AlbumClass:
    cls = store.get_class(album.id, class_id)
    if not cls:
        raise NotFound("Class not found")
    return cls


def require_view(store: AlbumStore, identity: Identity, album_id: str) -> tuple[Album, EffectiveRole]:
    album = load_album(store, album_id)
    role = effective_role(store, identity, album)
    if not role.can_view:
        raise NotFound("Album not found")
    return album, role


def require_manage(store: AlbumStore, identity: Identity, album_id: str) -> tuple[Album, EffectiveRole]:
    album, role = require_view(store, identity, album_id)
    if not role.can_manage:
        raise Forbidden("Only the album owner or an album admin can do this")
    return album, role


def require_owner(store: AlbumStore, identity: Identity, album_id: str) -> tuple[Album, EffectiveRole]:
    """Owner or platform admin. Album admins are refused."""
    album, role = require_view(store, identity, album_id)
    if not (role.is_owner or role.is_global_admin):
        raise Forbidden("Only the album owner can do this")
    return album, role
