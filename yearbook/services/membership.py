"""Album membership: explicit admin/member grants and the merged roster."""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from yearbook.errors import Conflict, InvalidInput, InvalidOperation, NotFound
from yearbook.models.album import AlbumMember
from yearbook.services.authorization import load_album, require_manage, require_owner
from yearbook.services.identity import Identity
from yearbook.services.store import AlbumStore

logger = logging.getLogger(__name__)

MEMBER_ROLES = ("admin", "member")
ROLE_RANK = {"member": 1, "admin": 2}


def upsert_member(
    session: Session,
    identity: Identity,
    album_id: str,
    role: str,
    user_id: Optional[str] = None,
    email: Optional[str] = None,
) -> AlbumMember:
    """Add or re-role a member. Only the owner (or a platform admin) may do this."""
    if role not in MEMBER_ROLES:
        raise InvalidInput("Role must be 'admin' or 'member'")

    store = AlbumStore(session)
    album, _ = require_owner(store, identity, album_id)

    if user_id:
        target = store.get_user(user_id)
    elif email:
        target = store.find_user_by_email(email)
    else:
        raise InvalidInput("User ID or email is required")
    if not target:
        raise NotFound("No account is registered for this user. Ask them to sign up first.")

    if target.id == album.owner_id:
        raise InvalidOperation("The album owner cannot be given a member role")

    member = store.get_member(album.id, target.id)
    if member:
        member.role = role
    else:
        member = AlbumMember(album_id=album.id, user_id=target.id, role=role)
    session.add(member)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise Conflict("Membership changed concurrently, please retry")
    session.refresh(member)

    logger.info("Member %s set to %s in album %s by %s", target.id, role, album.id, identity.user_id)
    return member


def remove_member(session: Session, identity: Identity, album_id: str, user_id: str) -> None:
    """Remove an explicit membership.

    Removing the owner, or removing yourself, is refused before any role
    check so an admin can never orphan an album they could no longer view.
    """
    store = AlbumStore(session)
    album = load_album(store, album_id)

    if user_id == album.owner_id:
        raise InvalidOperation("Cannot remove the album owner")
    if user_id == identity.user_id:
        raise InvalidOperation("Cannot remove yourself")

    require_manage(store, identity, album.id)

    member = store.get_member(album.id, user_id)
    if not member:
        raise NotFound("Member not found")
    session.delete(member)
    session.commit()
    logger.info("Member %s removed from album %s by %s", user_id, album.id, identity.user_id)


def list_roster(session: Session, identity: Identity, album_id: str) -> list[dict]:
    """Owner, members and approved students merged into one list.

    Role precedence: owner > admin > member > student > no-account.
    """
    store = AlbumStore(session)
    album, _ = require_manage(store, identity, album_id)

    roster: dict[str, dict] = {}

    owner = store.get_user(album.owner_id)
    roster[album.owner_id] = {
        "user_id": album.owner_id,
        "email": owner.email if owner else None,
        "name": owner.name if owner else None,
        "role": "owner",
        "has_account": True,
        "class_id": None,
    }

    for m in store.list_members(album.id):
        if m.user_id == album.owner_id:
            continue
        user = store.get_user(m.user_id)
        roster[m.user_id] = {
            "user_id": m.user_id,
            "email": user.email if user else None,
            "name": user.name if user else None,
            "role": m.role if m.role in MEMBER_ROLES else "member",
            "has_account": True,
            "class_id": None,
        }

    for s in store.list_access(album.id, status="approved"):
        if s.user_id and s.user_id in roster:
            # Keep the stronger role, only fill in the student details
            entry = roster[s.user_id]
            entry["name"] = s.student_name
            entry["email"] = entry["email"] or s.email
            entry["class_id"] = s.class_id
            continue

        key = s.user_id or f"no-account-{s.id}"
        roster[key] = {
            "user_id": s.user_id,
            "email": s.email,
            "name": s.student_name,
            "role": "student" if s.user_id else "no-account",
            "has_account": bool(s.user_id),
            "class_id": s.class_id,
        }

    return list(roster.values())
