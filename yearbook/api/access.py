"""Class registration, join request moderation and student profile endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from yearbook.api.deps import get_identity, get_optional_identity
from yearbook.database import get_session
from yearbook.models.access import AlbumClassAccess, AlbumJoinRequest
from yearbook.schemas.access import (
    AccessResponse,
    AlbumJoinBody,
    ApproveBody,
    ClassMemberResponse,
    ClassRequestBody,
    JoinRequestResponse,
    MyAccessResponse,
    PhotoAddRequest,
    ProfileUpdateRequest,
    RegistrationResponse,
    RejectBody,
)
from yearbook.services import class_access
from yearbook.services.identity import Identity

router = APIRouter(prefix="/albums", tags=["class-access"])


def access_to_response(access: AlbumClassAccess) -> AccessResponse:
    return AccessResponse(
        id=access.id,
        album_id=access.album_id,
        class_id=access.class_id,
        user_id=access.user_id,
        student_name=access.student_name,
        email=access.email,
        status=access.status,
        date_of_birth=access.date_of_birth,
        instagram=access.instagram,
        message=access.message,
        video_url=access.video_url,
        photos=class_access.photos_of(access),
        created_at=access.created_at.isoformat() if access.created_at else "",
        updated_at=access.updated_at.isoformat() if access.updated_at else "",
    )


def request_to_response(req: AlbumJoinRequest) -> JoinRequestResponse:
    return JoinRequestResponse(
        id=req.id,
        album_id=req.album_id,
        user_id=req.user_id,
        scope=req.scope,
        assigned_class_id=req.assigned_class_id,
        student_name=req.student_name,
        email=req.email,
        phone=req.phone,
        class_name=req.class_name,
        status=req.status,
        rejected_reason=req.rejected_reason,
        requested_at=req.requested_at.isoformat() if req.requested_at else "",
        decided_at=req.decided_at.isoformat() if req.decided_at else None,
        decided_by=req.decided_by,
    )


def _registration_response(record) -> RegistrationResponse:
    if isinstance(record, AlbumClassAccess):
        return RegistrationResponse(status=record.status, access=access_to_response(record))
    return RegistrationResponse(status=record.status, request=request_to_response(record))


# --- Registration ---

@router.post("/{album_id}/classes/{class_id}/request", response_model=RegistrationResponse)
def request_class_access(
    album_id: str,
    class_id: str,
    body: ClassRequestBody,
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
):
    """Register into a class. The owner is approved directly; everyone else waits for approval."""
    record = class_access.request_access(
        session, identity, album_id, class_id, body.student_name, body.email
    )
    return _registration_response(record)


@router.post("/{album_id}/join-requests", response_model=RegistrationResponse)
def submit_join_request(
    album_id: str,
    body: AlbumJoinBody,
    identity: Optional[Identity] = Depends(get_optional_identity),
    session: Session = Depends(get_session),
):
    """Album-wide registration. Signed-out visitors may register by email."""
    record = class_access.request_access(
        session,
        identity,
        album_id,
        body.class_id,
        body.student_name,
        email=body.email,
        phone=body.phone,
        class_name=body.class_name,
    )
    return _registration_response(record)


@router.get("/{album_id}/my-access", response_model=MyAccessResponse)
def my_access(
    album_id: str,
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
):
    result = class_access.get_my_status(session, identity, album_id)
    return MyAccessResponse(
        status=result["status"],
        access=access_to_response(result["access"]) if result["access"] else None,
        request=request_to_response(result["request"]) if result["request"] else None,
    )


# --- Moderation ---

@router.get("/{album_id}/join-requests", response_model=list[JoinRequestResponse])
def list_join_requests(
    album_id: str,
    class_id: Optional[str] = Query(default=None),
    status_filter: str = Query(default="pending", alias="status"),
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
):
    """Join requests, newest first. ``status=all`` lists every state."""
    requests = class_access.list_requests(session, identity, album_id, class_id, status_filter)
    return [request_to_response(r) for r in requests]


@router.post("/{album_id}/join-requests/{request_id}/approve", response_model=AccessResponse)
def approve_join_request(
    album_id: str,
    request_id: str,
    body: Optional[ApproveBody] = None,
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
):
    access = class_access.approve(
        session, identity, album_id, request_id, body.class_id if body else None
    )
    return access_to_response(access)


@router.post("/{album_id}/join-requests/{request_id}/reject", response_model=JoinRequestResponse)
def reject_join_request(
    album_id: str,
    request_id: str,
    body: Optional[RejectBody] = None,
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
):
    req = class_access.reject(session, identity, album_id, request_id, body.reason if body else None)
    return request_to_response(req)


@router.delete("/{album_id}/join-requests/{request_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_join_request(
    album_id: str,
    request_id: str,
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
):
    class_access.delete_request(session, identity, album_id, request_id)


# --- Class members & profiles ---

@router.get("/{album_id}/classes/{class_id}/members", response_model=list[AccessResponse])
def list_class_members(
    album_id: str,
    class_id: str,
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
):
    members = class_access.list_class_members(session, identity, album_id, class_id)
    return [access_to_response(m) for m in members]


@router.get("/{album_id}/class-members", response_model=list[ClassMemberResponse])
def list_album_members(
    album_id: str,
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
):
    """Every class's students at once, with the caller's own row flagged."""
    members = class_access.list_album_members(session, identity, album_id)
    return [
        ClassMemberResponse(
            **access_to_response(m).model_dump(),
            is_me=m.user_id is not None and m.user_id == identity.user_id,
        )
        for m in members
    ]


@router.patch("/{album_id}/classes/{class_id}/members/{user_id}", response_model=AccessResponse)
def edit_profile(
    album_id: str,
    class_id: str,
    user_id: str,
    request: ProfileUpdateRequest,
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
):
    """Edit a student profile. Students edit their own once approved; managers edit anyone."""
    access = class_access.edit_access(
        session, identity, album_id, class_id, user_id, request.model_dump(exclude_unset=True)
    )
    return access_to_response(access)


@router.delete("/{album_id}/classes/{class_id}/members/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def revoke_profile(
    album_id: str,
    class_id: str,
    user_id: str,
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
):
    """Remove a student from a class. Managers remove anyone; students may withdraw themselves."""
    class_access.revoke_access(session, identity, album_id, class_id, user_id)


@router.post("/{album_id}/classes/{class_id}/members/{user_id}/photos", response_model=AccessResponse)
def add_profile_photo(
    album_id: str,
    class_id: str,
    user_id: str,
    request: PhotoAddRequest,
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
):
    access = class_access.add_photo(session, identity, album_id, class_id, user_id, request.url)
    return access_to_response(access)


@router.delete("/{album_id}/classes/{class_id}/members/{user_id}/photos/{index}", response_model=AccessResponse)
def remove_profile_photo(
    album_id: str,
    class_id: str,
    user_id: str,
    index: int,
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
):
    access = class_access.remove_photo(session, identity, album_id, class_id, user_id, index)
    return access_to_response(access)


@router.delete("/{album_id}/access/{access_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_access_row(
    album_id: str,
    access_id: str,
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
):
    """Remove a grant by id, for students registered without an account."""
    class_access.revoke_access_row(session, identity, album_id, access_id)
