"""Album and class management."""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, col, func, select

from yearbook.errors import Conflict, Forbidden, InvalidInput
from yearbook.models.access import AlbumClassAccess
from yearbook.models.album import Album, AlbumClass, AlbumMember
from yearbook.services.authorization import (
    load_album,
    require_class,
    require_manage,
    require_owner,
    require_view,
)
from yearbook.services.identity import Identity
from yearbook.services.store import AlbumStore

logger = logging.getLogger(__name__)

ALBUM_STATUSES = ("pending", "approved", "declined")


def create_album(
    session: Session, identity: Identity, name: str, students_count: Optional[int] = None
) -> Album:
    name = (name or "").strip()
    if not name:
        raise InvalidInput("Album name is required")
    if students_count is not None and students_count < 0:
        raise InvalidInput("students_count cannot be negative")

    album = Album(owner_id=identity.user_id, name=name, students_count=students_count)
    session.add(album)
    session.commit()
    session.refresh(album)
    logger.info("Album %s created by %s", album.id, identity.user_id)
    return album


def list_my_albums(session: Session, identity: Identity) -> list[Album]:
    """Albums the caller owns, is a member of, or holds class access in."""
    member_ids = session.exec(
        select(AlbumMember.album_id).where(AlbumMember.user_id == identity.user_id)
    ).all()
    access_ids = session.exec(
        select(AlbumClassAccess.album_id).where(
            AlbumClassAccess.user_id == identity.user_id,
            AlbumClassAccess.status == "approved",
        )
    ).all()
    related = set(member_ids) | set(access_ids)

    query = select(Album)
    if related:
        query = query.where(
            (Album.owner_id == identity.user_id) | col(Album.id).in_(related)
        )
    else:
        query = query.where(Album.owner_id == identity.user_id)
    return list(session.exec(query.order_by(col(Album.created_at).desc())).all())


def get_album(session: Session, identity: Identity, album_id: str):
    return require_view(AlbumStore(session), identity, album_id)


def update_album(
    session: Session,
    identity: Identity,
    album_id: str,
    name: Optional[str] = None,
    students_count: Optional[int] = None,
) -> Album:
    album, _ = require_manage(AlbumStore(session), identity, album_id)
    if name is not None:
        name = name.strip()
        if not name:
            raise InvalidInput("Album name cannot be empty")
        album.name = name
    if students_count is not None:
        if students_count < 0:
            raise InvalidInput("students_count cannot be negative")
        album.students_count = students_count
    session.add(album)
    session.commit()
    session.refresh(album)
    return album


def set_album_status(
    session: Session,
    identity: Identity,
    album_id: str,
    status: str,
    payment_status: Optional[str] = None,
) -> Album:
    """Platform moderation of an album's lifecycle."""
    if not identity.is_global_admin:
        raise Forbidden("Admin access required")
    if status not in ALBUM_STATUSES:
        raise InvalidInput("status must be pending, approved or declined")

    album = load_album(AlbumStore(session), album_id)
    album.status = status
    if payment_status is not None:
        album.payment_status = payment_status
    session.add(album)
    session.commit()
    session.refresh(album)
    logger.info("Album %s status set to %s by %s", album.id, status, identity.user_id)
    return album


def delete_album(session: Session, identity: Identity, album_id: str) -> None:
    """Delete an album with its classes, members, grants, requests and invites."""
    album, _ = require_owner(AlbumStore(session), identity, album_id)
    session.delete(album)
    session.commit()
    logger.info("Album %s deleted by %s", album_id, identity.user_id)


# --- Classes ---

def list_classes(session: Session, identity: Identity, album_id: str) -> list[dict]:
    store = AlbumStore(session)
    album, _ = require_view(store, identity, album_id)
    counts = dict(session.exec(
        select(AlbumClassAccess.class_id, func.count())
        .where(
            AlbumClassAccess.album_id == album.id,
            AlbumClassAccess.status == "approved",
        )
        .group_by(AlbumClassAccess.class_id)
    ).all())
    return [
        {"class": cls, "student_count": counts.get(cls.id, 0)}
        for cls in store.list_classes(album.id)
    ]


def create_class(
    session: Session, identity: Identity, album_id: str, name: str, sort_order: Optional[int] = None
) -> AlbumClass:
    store = AlbumStore(session)
    album, _ = require_manage(store, identity, album_id)

    name = (name or "").strip()
    if not name:
        raise InvalidInput("Class name is required")
    if store.find_class_by_name(album.id, name):
        raise Conflict("A class with this name already exists in this album")

    if sort_order is None:
        sort_order = len(store.list_classes(album.id))
    cls = AlbumClass(album_id=album.id, name=name, sort_order=sort_order)
    session.add(cls)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise Conflict("A class with this name already exists in this album")
    session.refresh(cls)
    return cls


def update_class(
    session: Session,
    identity: Identity,
    album_id: str,
    class_id: str,
    name: Optional[str] = None,
    sort_order: Optional[int] = None,
) -> AlbumClass:
    store = AlbumStore(session)
    album, _ = require_manage(store, identity, album_id)
    cls = require_class(store, album, class_id)

    if name is not None:
        name = name.strip()
        if not name:
            raise InvalidInput("Class name is required")
        existing = store.find_class_by_name(album.id, name)
        if existing and existing.id != cls.id:
            raise Conflict("A class with this name already exists in this album")
        cls.name = name
    if sort_order is not None:
        cls.sort_order = sort_order

    session.add(cls)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise Conflict("A class with this name already exists in this album")
    session.refresh(cls)
    return cls


def delete_class(session: Session, identity: Identity, album_id: str, class_id: str) -> None:
    """Delete a class. Its grants go with it; requests pointing at it lose their class."""
    store = AlbumStore(session)
    album, _ = require_manage(store, identity, album_id)
    cls = require_class(store, album, class_id)
    session.delete(cls)
    session.commit()
    logger.info("Class %s of album %s deleted by %s", class_id, album.id, identity.user_id)
