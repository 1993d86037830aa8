"""Album team (members & roster) and invite endpoints."""

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from yearbook.api.deps import get_identity
from yearbook.database import get_session
from yearbook.models.invite import AlbumInvite
from yearbook.schemas.member import (
    InviteCreateRequest,
    InviteJoinResponse,
    InvitePreviewResponse,
    InviteResponse,
    MemberResponse,
    MemberUpsertRequest,
    RosterEntry,
)
from yearbook.services import invites as invite_service
from yearbook.services import membership
from yearbook.services.identity import Identity
from yearbook.utils.security import as_utc

router = APIRouter(tags=["members"])


def _invite_to_response(invite: AlbumInvite) -> InviteResponse:
    return InviteResponse(
        id=invite.id,
        album_id=invite.album_id,
        token=invite.token,
        role=invite.role,
        invite_link=invite_service.invite_link(invite.token),
        expires_at=as_utc(invite.expires_at).isoformat(),
        revoked_at=as_utc(invite.revoked_at).isoformat() if invite.revoked_at else None,
        created_by=invite.created_by,
    )


# --- Team ---

@router.get("/albums/{album_id}/members", response_model=list[RosterEntry])
def list_roster(
    album_id: str,
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
):
    """Owner, admins, members and students of an album in one list."""
    return [RosterEntry(**entry) for entry in membership.list_roster(session, identity, album_id)]


@router.post("/albums/{album_id}/members", response_model=MemberResponse)
def upsert_member(
    album_id: str,
    request: MemberUpsertRequest,
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
):
    """Add or promote a member. Owner only."""
    member = membership.upsert_member(
        session, identity, album_id, request.role, user_id=request.user_id, email=request.email
    )
    return MemberResponse(
        album_id=member.album_id,
        user_id=member.user_id,
        role=member.role,
        joined_at=member.joined_at.isoformat(),
    )


@router.delete("/albums/{album_id}/members", status_code=status.HTTP_204_NO_CONTENT)
def remove_member(
    album_id: str,
    user_id: str = Query(...),
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
):
    membership.remove_member(session, identity, album_id, user_id)


# --- Invites ---

@router.post("/albums/{album_id}/invites", response_model=InviteResponse, status_code=201)
def create_invite(
    album_id: str,
    request: InviteCreateRequest,
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
):
    """Create an invite link. Admin invites are owner only."""
    invite = invite_service.issue_invite(session, identity, album_id, request.role)
    return _invite_to_response(invite)


@router.get("/albums/{album_id}/invites", response_model=list[InviteResponse])
def list_invites(
    album_id: str,
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
):
    return [_invite_to_response(i) for i in invite_service.list_invites(session, identity, album_id)]


@router.delete("/albums/{album_id}/invites/{invite_id}", response_model=InviteResponse)
def revoke_invite(
    album_id: str,
    invite_id: str,
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
):
    invite = invite_service.revoke_invite(session, identity, album_id, invite_id)
    return _invite_to_response(invite)


@router.get("/invites/{token}", response_model=InvitePreviewResponse)
def preview_invite(token: str, session: Session = Depends(get_session)):
    """Validate an invite token and describe its album. No auth required."""
    return InvitePreviewResponse(**invite_service.preview_invite(session, token))


@router.post("/invites/{token}/join", response_model=InviteJoinResponse)
def join_with_invite(
    token: str,
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
):
    return InviteJoinResponse(**invite_service.redeem_invite(session, identity, token))
