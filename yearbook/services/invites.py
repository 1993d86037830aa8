"""Album invite tokens.

Tokens are bearer credentials that grant an album membership role. They
can be redeemed any number of times until they expire or are revoked;
redemption only ever upgrades an existing membership.
"""

import logging
from datetime import timedelta
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from yearbook.config import settings
from yearbook.errors import Conflict, Forbidden, Gone, InvalidInput, NotFound
from yearbook.models.album import AlbumMember
from yearbook.models.invite import AlbumInvite
from yearbook.services.authorization import require_manage
from yearbook.services.identity import Identity
from yearbook.services.membership import MEMBER_ROLES, ROLE_RANK
from yearbook.services.store import AlbumStore
from yearbook.utils.security import as_utc, generate_invite_token, utcnow

logger = logging.getLogger(__name__)


def invite_link(token: str) -> str:
    return f"{settings.public_base_url.rstrip('/')}/join/{token}"


def _live_invite(store: AlbumStore, token: str) -> AlbumInvite:
    invite = store.get_invite_by_token(token)
    if not invite:
        raise NotFound("Invite not found or invalid")
    if invite.revoked_at is not None:
        raise Gone("Invite has been revoked")
    if as_utc(invite.expires_at) < utcnow():
        raise Gone("Invite has expired")
    return invite


def issue_invite(session: Session, identity: Identity, album_id: str, role: str = "member") -> AlbumInvite:
    """Create an invite. Admin invites are reserved for the owner and platform admins."""
    if role not in MEMBER_ROLES:
        raise InvalidInput("Role must be 'admin' or 'member'")

    store = AlbumStore(session)
    album, caller = require_manage(store, identity, album_id)
    if role == "admin" and not (caller.is_owner or caller.is_global_admin):
        raise Forbidden("Only the album owner can create admin invites")

    invite = AlbumInvite(
        album_id=album.id,
        created_by=identity.user_id,
        token=generate_invite_token(),
        role=role,
        expires_at=utcnow() + timedelta(days=settings.invite_expire_days),
    )
    session.add(invite)
    session.commit()
    session.refresh(invite)

    logger.info("Invite %s (%s) issued for album %s by %s", invite.id, role, album.id, identity.user_id)
    return invite


def list_invites(session: Session, identity: Identity, album_id: str) -> list[AlbumInvite]:
    store = AlbumStore(session)
    album, _ = require_manage(store, identity, album_id)
    return store.list_invites(album.id)


def revoke_invite(session: Session, identity: Identity, album_id: str, invite_id: str) -> AlbumInvite:
    """Disable a token before it expires. Mirrors the issuing rules."""
    store = AlbumStore(session)
    album, caller = require_manage(store, identity, album_id)
    invite = store.get_invite(album.id, invite_id)
    if not invite:
        raise NotFound("Invite not found")
    if invite.role == "admin" and not (caller.is_owner or caller.is_global_admin):
        raise Forbidden("Only the album owner can revoke admin invites")

    if invite.revoked_at is None:
        invite.revoked_at = utcnow()
        session.add(invite)
        session.commit()
        session.refresh(invite)
        logger.info("Invite %s revoked by %s", invite.id, identity.user_id)
    return invite


def preview_invite(session: Session, token: str) -> dict:
    """Public lookup used by the join page before the visitor signs in."""
    store = AlbumStore(session)
    invite = _live_invite(store, token)
    album = store.get_album(invite.album_id)
    if not album:
        raise NotFound("Invite not found or invalid")
    return {
        "album_id": album.id,
        "album_name": album.name,
        "role": invite.role,
        "expires_at": as_utc(invite.expires_at).isoformat(),
    }


def redeem_invite(session: Session, identity: Identity, token: str) -> dict:
    """Join the invite's album. Returns the album id and the resulting role."""
    store = AlbumStore(session)
    invite = _live_invite(store, token)
    album = store.get_album(invite.album_id)
    if not album:
        raise NotFound("Invite not found or invalid")

    if album.owner_id == identity.user_id:
        return {"album_id": album.id, "role": "owner", "result": "owner"}

    invite_role = invite.role if invite.role in MEMBER_ROLES else "member"
    member = store.get_member(album.id, identity.user_id)

    if member:
        if ROLE_RANK.get(invite_role, 0) > ROLE_RANK.get(member.role, 0):
            member.role = invite_role
            session.add(member)
            session.commit()
            logger.info("Member %s upgraded to %s in album %s via invite", identity.user_id, invite_role, album.id)
            return {"album_id": album.id, "role": invite_role, "result": "upgraded"}
        return {"album_id": album.id, "role": member.role, "result": "already_member"}

    session.add(AlbumMember(album_id=album.id, user_id=identity.user_id, role=invite_role))
    try:
        session.commit()
    except IntegrityError:
        # Joined concurrently through another redemption
        session.rollback()
        member = store.get_member(album.id, identity.user_id)
        if member is None:
            raise Conflict("Could not join the album, please retry")
        return {"album_id": album.id, "role": member.role, "result": "already_member"}

    logger.info("User %s joined album %s as %s via invite", identity.user_id, album.id, invite_role)
    return {"album_id": album.id, "role": invite_role, "result": "joined"}
