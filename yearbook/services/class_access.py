"""Class access workflow: join requests, approvals and class access grants.

One state machine covers both request scopes (a request pinned to a class,
or an album-wide request whose class is chosen at approval time):

    NoRecord -> Pending -> Approved | Rejected
    Rejected -> Pending        (re-registration reuses the request row)
    Approved -> NoRecord       (revocation or self-withdrawal)

The access grant is the source of truth. Approval commits the grant first
and retires the request in a second commit; if that second write fails the
leftover pending request is rejected as a duplicate by the next approval.
"""

import json
import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session

from yearbook.config import settings
from yearbook.errors import (
    CapacityExceeded,
    Conflict,
    Forbidden,
    InvalidInput,
    NotFound,
)
from yearbook.models.access import AlbumClassAccess, AlbumJoinRequest
from yearbook.models.album import Album, AlbumClass
from yearbook.services.authorization import (
    load_album,
    require_class,
    require_manage,
    require_view,
)
from yearbook.services.identity import Identity
from yearbook.services.notifier import notifier
from yearbook.services.roles import EffectiveRole, effective_role
from yearbook.services.store import AlbumStore
from yearbook.utils.security import utcnow

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("student_name", "email", "date_of_birth", "instagram", "message", "video_url")
REQUEST_STATUSES = ("pending", "approved", "rejected")


# --- Helpers ---

def photos_of(access: AlbumClassAccess) -> list[str]:
    try:
        photos = json.loads(access.photos or "[]")
    except (TypeError, ValueError):
        return []
    return [p for p in photos if isinstance(p, str)]


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def join_stats(store: AlbumStore, album: Album) -> dict:
    """Registration capacity for an album. ``available_slots`` is None when unlimited."""
    approved = store.count_access(album.id, "approved")
    pending = store.count_requests(album.id, "pending")
    rejected = store.count_requests(album.id, "rejected")
    limit = album.students_count
    available = None if limit is None else max(limit - approved - pending, 0)
    return {
        "limit_count": limit,
        "approved_count": approved,
        "pending_count": pending,
        "rejected_count": rejected,
        "available_slots": available,
    }


def _check_capacity(store: AlbumStore, album: Album) -> None:
    stats = join_stats(store, album)
    if stats["available_slots"] is not None and stats["available_slots"] <= 0:
        raise CapacityExceeded(
            "Sorry, this album is full and cannot accept more registrations"
        )


def _profile_owner_role(
    store: AlbumStore, identity: Identity, album: Album, target_user_id: str
) -> EffectiveRole:
    """Managers may touch any profile, everyone else only their own."""
    role = effective_role(store, identity, album)
    if role.can_manage or target_user_id == identity.user_id:
        return role
    if role.can_view:
        raise Forbidden("Only the album owner, an album admin or the student can change this profile")
    raise NotFound("Album not found")


def _find_profile(
    store: AlbumStore, identity: Identity, album_id: str, class_id: str, target_user_id: str
) -> tuple[AlbumClassAccess, EffectiveRole]:
    album = load_album(store, album_id)
    role = _profile_owner_role(store, identity, album, target_user_id)
    cls = require_class(store, album, class_id)
    access = store.get_access_in_class(cls.id, target_user_id)
    if not access:
        raise NotFound("Profile not found")
    return access, role


# --- Request ---

def _join_as_owner(
    session: Session,
    store: AlbumStore,
    album: Album,
    cls: AlbumClass,
    identity: Identity,
    student_name: str,
    email: Optional[str],
) -> AlbumClassAccess:
    """The owner skips moderation and is granted access directly."""
    existing = store.get_access_in_album(album.id, identity.user_id)
    if existing:
        if existing.status == "approved":
            if existing.class_id == cls.id:
                return existing
            raise Conflict(
                "You are already registered in another class. Only one class per album is allowed."
            )
        session.delete(existing)
        session.flush()

    access = AlbumClassAccess(
        album_id=album.id,
        class_id=cls.id,
        user_id=identity.user_id,
        student_name=student_name,
        email=email,
        status="approved",
    )
    session.add(access)

    lingering = store.get_request_for_user(album.id, identity.user_id)
    if lingering and lingering.status != "approved":
        session.delete(lingering)

    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise Conflict(
            "You are already registered in another class. Only one class per album is allowed."
        )
    session.refresh(access)
    logger.info("Owner %s joined class %s of album %s", identity.user_id, cls.id, album.id)
    return access


def _reopen(
    session: Session,
    store: AlbumStore,
    album: Album,
    req: AlbumJoinRequest,
    cls: Optional[AlbumClass],
    student_name: str,
    email: Optional[str],
    phone: Optional[str],
    class_name: Optional[str],
) -> AlbumJoinRequest:
    _check_capacity(store, album)

    req.student_name = student_name
    req.email = email
    req.phone = phone
    req.class_name = class_name
    req.scope = "class" if cls else "album"
    req.assigned_class_id = cls.id if cls else None
    req.status = "pending"
    req.rejected_reason = None
    req.decided_at = None
    req.decided_by = None
    req.requested_at = utcnow()
    session.add(req)
    session.commit()
    session.refresh(req)
    logger.info("Join request %s re-opened for album %s", req.id, album.id)
    return req


def request_access(
    session: Session,
    identity: Optional[Identity],
    album_id: str,
    class_id: Optional[str],
    student_name: str,
    email: Optional[str] = None,
    phone: Optional[str] = None,
    class_name: Optional[str] = None,
):
    """File (or re-file) a registration into a class of an album.

    Returns the caller's approved ``AlbumClassAccess`` when they already hold
    one, otherwise their pending ``AlbumJoinRequest``. Anonymous callers may
    only file album-scope requests; they are matched by email.
    """
    store = AlbumStore(session)
    album = load_album(store, album_id)

    student_name = _clean(student_name) or ""
    if not student_name:
        raise InvalidInput("Student name is required")
    email = _clean(email) or (identity.email if identity else None)
    phone = _clean(phone)
    class_name = _clean(class_name)

    cls = require_class(store, album, class_id) if class_id else None

    if identity is None:
        if cls is not None:
            raise InvalidInput("Sign in to register into a class")
        return _request_anonymous(session, store, album, student_name, email, phone, class_name)

    if album.owner_id == identity.user_id:
        if cls is None:
            raise InvalidInput("Choose a class to join")
        return _join_as_owner(session, store, album, cls, identity, student_name, email)

    existing = store.get_access_in_album(album.id, identity.user_id)
    if existing and existing.status == "approved":
        return existing

    req = store.get_request_for_user(album.id, identity.user_id)
    if req and req.status == "pending":
        return req

    if existing is not None:
        # A rejected grant blocks the unique (album, user) slot
        session.delete(existing)
        session.flush()

    if req is not None:
        return _reopen(session, store, album, req, cls, student_name, email, phone, class_name)

    _check_capacity(store, album)
    req = AlbumJoinRequest(
        album_id=album.id,
        user_id=identity.user_id,
        scope="class" if cls else "album",
        assigned_class_id=cls.id if cls else None,
        student_name=student_name,
        email=email,
        phone=phone,
        class_name=class_name,
        status="pending",
    )
    session.add(req)
    try:
        session.commit()
    except IntegrityError:
        # A concurrent request from the same user won the insert
        session.rollback()
        winner = store.get_request_for_user(album.id, identity.user_id)
        if winner is None:
            raise Conflict("Could not register the request, please retry")
        return winner
    session.refresh(req)
    logger.info("Join request %s filed by %s for album %s", req.id, identity.user_id, album.id)
    return req


def _request_anonymous(
    session: Session,
    store: AlbumStore,
    album: Album,
    student_name: str,
    email: Optional[str],
    phone: Optional[str],
    class_name: Optional[str],
) -> AlbumJoinRequest:
    if not email:
        raise InvalidInput("Name and email are required")
    email = email.lower()

    grant = store.find_anonymous_access(album.id, email)
    if grant and grant.status == "approved":
        raise Conflict("This email is already registered and approved")

    existing = store.find_anonymous_request(album.id, email)
    if existing:
        if existing.status == "pending":
            return existing
        # Rejected, or approved but its grant has since been removed
        return _reopen(session, store, album, existing, None, student_name, email, phone, class_name)

    _check_capacity(store, album)
    req = AlbumJoinRequest(
        album_id=album.id,
        scope="album",
        student_name=student_name,
        email=email,
        phone=phone,
        class_name=class_name,
        status="pending",
    )
    session.add(req)
    session.commit()
    session.refresh(req)
    logger.info("Anonymous join request %s filed for album %s", req.id, album.id)
    return req


# --- Moderation ---

def _load_request(store: AlbumStore, album_id: str, request_id: str) -> AlbumJoinRequest:
    req = store.get_request(request_id)
    if not req or req.album_id != album_id:
        raise NotFound("Request not found")
    return req


def approve(
    session: Session,
    identity: Identity,
    album_id: str,
    request_id: str,
    class_id: Optional[str] = None,
) -> AlbumClassAccess:
    store = AlbumStore(session)
    album, _ = require_manage(store, identity, album_id)
    req = _load_request(store, album.id, request_id)

    if req.status != "pending":
        raise Conflict("This request has already been processed")

    target_class_id = class_id or req.assigned_class_id
    if not target_class_id:
        raise InvalidInput("A class must be chosen when approving an album-wide request")
    cls = require_class(store, album, target_class_id)

    if req.user_id:
        if store.get_access_in_class(cls.id, req.user_id):
            raise Conflict("This student already has access to this class")
        other = store.get_access_in_album(album.id, req.user_id)
        if other and other.status == "approved":
            raise Conflict("This student is already registered in another class of this album")
        if other:
            session.delete(other)
            session.flush()

    access = AlbumClassAccess(
        album_id=album.id,
        class_id=cls.id,
        user_id=req.user_id,
        student_name=req.student_name,
        email=req.email,
        status="approved",
    )
    session.add(access)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise Conflict("This student is already registered in another class of this album")
    session.refresh(access)

    # Bookkeeping: the grant above already stands even if this fails
    try:
        req.status = "approved"
        req.assigned_class_id = cls.id
        req.decided_at = utcnow()
        req.decided_by = identity.user_id
        session.add(req)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("Granted access %s but failed to retire request %s: %s", access.id, req.id, e)

    logger.info("Request %s approved by %s into class %s", request_id, identity.user_id, cls.id)
    notifier.notify(
        access.user_id,
        "request_approved",
        album_id=album.id,
        message=f"Your registration for {cls.name} in {album.name} was approved",
    )
    return access


def reject(
    session: Session,
    identity: Identity,
    album_id: str,
    request_id: str,
    reason: Optional[str] = None,
) -> AlbumJoinRequest:
    store = AlbumStore(session)
    album, _ = require_manage(store, identity, album_id)
    req = _load_request(store, album.id, request_id)

    if req.status != "pending":
        raise Conflict("This request has already been processed")

    req.status = "rejected"
    req.rejected_reason = _clean(reason)
    req.decided_at = utcnow()
    req.decided_by = identity.user_id
    session.add(req)
    session.commit()
    session.refresh(req)

    logger.info("Request %s rejected by %s", request_id, identity.user_id)
    notifier.notify(
        req.user_id,
        "request_rejected",
        album_id=album.id,
        message=req.rejected_reason or f"Your registration for {album.name} was rejected",
    )
    return req


def delete_request(session: Session, identity: Identity, album_id: str, request_id: str) -> None:
    store = AlbumStore(session)
    album, _ = require_manage(store, identity, album_id)
    req = _load_request(store, album.id, request_id)
    session.delete(req)
    session.commit()


def list_requests(
    session: Session,
    identity: Identity,
    album_id: str,
    class_id: Optional[str] = None,
    status: str = "pending",
) -> list[AlbumJoinRequest]:
    """Join requests of an album, newest first."""
    store = AlbumStore(session)
    album, _ = require_manage(store, identity, album_id)
    if class_id:
        require_class(store, album, class_id)
    if status != "all" and status not in REQUEST_STATUSES:
        raise InvalidInput("status must be pending, approved, rejected or all")
    return store.list_requests(album.id, class_id, None if status == "all" else status)


# --- Grants ---

def get_my_status(session: Session, identity: Identity, album_id: str) -> dict:
    store = AlbumStore(session)
    album = load_album(store, album_id)
    access = store.get_access_in_album(album.id, identity.user_id)
    req = store.get_request_for_user(album.id, identity.user_id)

    if access and access.status == "approved":
        return {"status": "approved", "access": access, "request": req}

    if req and req.status == "approved":
        # Grant gone (revoked, or its class deleted): free to register again
        req = None

    if req:
        status = req.status
    elif access:
        status = access.status
    else:
        status = "none"
    return {"status": status, "access": access, "request": req}


def list_class_members(
    session: Session, identity: Identity, album_id: str, class_id: str
) -> list[AlbumClassAccess]:
    store = AlbumStore(session)
    album, _ = require_view(store, identity, album_id)
    cls = require_class(store, album, class_id)
    return store.list_access(album.id, cls.id, "approved")


def list_album_members(session: Session, identity: Identity, album_id: str) -> list[AlbumClassAccess]:
    """Profiles of every class in one list. Only managers see non-approved rows."""
    store = AlbumStore(session)
    album, role = require_view(store, identity, album_id)
    return store.list_access(album.id, None, None if role.can_manage else "approved")


def edit_access(
    session: Session,
    identity: Identity,
    album_id: str,
    class_id: str,
    target_user_id: str,
    fields: dict,
) -> AlbumClassAccess:
    """Update profile fields. Never changes the grant's status."""
    store = AlbumStore(session)
    access, role = _find_profile(store, identity, album_id, class_id, target_user_id)

    if not role.can_manage and access.status != "approved":
        raise Forbidden("You can edit your profile only after your access is approved")

    updates = {}
    for key in PROFILE_FIELDS:
        if key in fields:
            updates[key] = _clean(fields[key])
    if "student_name" in updates and not updates["student_name"]:
        raise InvalidInput("Student name cannot be empty")

    photos = fields.get("photos")
    if photos is not None:
        photos = [p.strip() for p in photos if p and p.strip()]
        if len(photos) > settings.max_profile_photos:
            raise InvalidInput(f"A profile can hold at most {settings.max_profile_photos} photos")
        updates["photos"] = json.dumps(photos)

    if not updates:
        raise InvalidInput(
            "At least one field is required (student_name, email, date_of_birth, "
            "instagram, message, video_url, photos)"
        )

    for key, value in updates.items():
        setattr(access, key, value)
    access.updated_at = utcnow()
    session.add(access)
    session.commit()
    session.refresh(access)
    return access


def add_photo(
    session: Session,
    identity: Identity,
    album_id: str,
    class_id: str,
    target_user_id: str,
    url: str,
) -> AlbumClassAccess:
    store = AlbumStore(session)
    access, role = _find_profile(store, identity, album_id, class_id, target_user_id)
    if not role.can_manage and access.status != "approved":
        raise Forbidden("You can add photos only after your access is approved")

    url = _clean(url)
    if not url:
        raise InvalidInput("Photo URL is required")

    photos = photos_of(access)
    if len(photos) >= settings.max_profile_photos:
        raise Conflict(f"A profile can hold at most {settings.max_profile_photos} photos")
    photos.append(url)

    access.photos = json.dumps(photos)
    access.updated_at = utcnow()
    session.add(access)
    session.commit()
    session.refresh(access)
    return access


def remove_photo(
    session: Session,
    identity: Identity,
    album_id: str,
    class_id: str,
    target_user_id: str,
    index: int,
) -> AlbumClassAccess:
    store = AlbumStore(session)
    access, role = _find_profile(store, identity, album_id, class_id, target_user_id)
    if not role.can_manage and access.status != "approved":
        raise Forbidden("You can remove photos only after your access is approved")

    photos = photos_of(access)
    if index < 0 or index >= len(photos):
        raise NotFound("Photo not found")
    photos.pop(index)

    access.photos = json.dumps(photos)
    access.updated_at = utcnow()
    session.add(access)
    session.commit()
    session.refresh(access)
    return access


def revoke_access(
    session: Session,
    identity: Identity,
    album_id: str,
    class_id: str,
    target_user_id: str,
) -> None:
    """Delete a grant. Any lingering join request goes too so the user can register afresh."""
    store = AlbumStore(session)
    access, _ = _find_profile(store, identity, album_id, class_id, target_user_id)

    session.delete(access)
    lingering = store.get_request_for_user(access.album_id, target_user_id)
    if lingering:
        session.delete(lingering)
    session.commit()
    logger.info("Access of %s to class %s revoked by %s", target_user_id, class_id, identity.user_id)


def revoke_access_row(session: Session, identity: Identity, album_id: str, access_id: str) -> None:
    """Manager removal by grant id, for rows without an account."""
    store = AlbumStore(session)
    album, _ = require_manage(store, identity, album_id)
    access = session.get(AlbumClassAccess, access_id)
    if not access or access.album_id != album.id:
        raise NotFound("Profile not found")

    if access.user_id:
        lingering = store.get_request_for_user(album.id, access.user_id)
    elif access.email:
        lingering = store.find_anonymous_request(album.id, access.email)
    else:
        lingering = None

    session.delete(access)
    if lingering:
        session.delete(lingering)
    session.commit()
    logger.info("Access row %s removed by %s", access_id, identity.user_id)
