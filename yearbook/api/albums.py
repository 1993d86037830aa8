"""Album and class API endpoints."""

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from yearbook.api.deps import get_identity
from yearbook.database import get_session
from yearbook.models.album import Album, AlbumClass
from yearbook.schemas.album import (
    AlbumCreateRequest,
    AlbumDetailResponse,
    AlbumResponse,
    AlbumStatusRequest,
    AlbumUpdateRequest,
    ClassCreateRequest,
    ClassResponse,
    ClassUpdateRequest,
    JoinStatsResponse,
)
from yearbook.services import albums as album_service
from yearbook.services.authorization import require_manage
from yearbook.services.class_access import join_stats
from yearbook.services.identity import Identity
from yearbook.services.store import AlbumStore

router = APIRouter(prefix="/albums", tags=["albums"])


def _album_to_response(album: Album) -> AlbumResponse:
    return AlbumResponse(
        id=album.id,
        name=album.name,
        owner_id=album.owner_id,
        status=album.status,
        payment_status=album.payment_status,
        students_count=album.students_count,
        created_at=album.created_at.isoformat() if album.created_at else "",
    )


def _class_to_response(cls: AlbumClass, student_count: int = 0) -> ClassResponse:
    return ClassResponse(
        id=cls.id,
        album_id=cls.album_id,
        name=cls.name,
        sort_order=cls.sort_order,
        student_count=student_count,
        created_at=cls.created_at.isoformat() if cls.created_at else "",
    )


@router.get("", response_model=list[AlbumResponse])
def list_albums(
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
):
    """Albums the caller owns, helps manage, or is a student in."""
    return [_album_to_response(a) for a in album_service.list_my_albums(session, identity)]


@router.post("", response_model=AlbumResponse, status_code=201)
def create_album(
    request: AlbumCreateRequest,
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
):
    album = album_service.create_album(session, identity, request.name, request.students_count)
    return _album_to_response(album)


@router.get("/{album_id}", response_model=AlbumDetailResponse)
def get_album(
    album_id: str,
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
):
    album, role = album_service.get_album(session, identity, album_id)
    return AlbumDetailResponse(
        **_album_to_response(album).model_dump(),
        my_role=role.label,
        can_manage=role.can_manage,
    )


@router.patch("/{album_id}", response_model=AlbumResponse)
def update_album(
    album_id: str,
    request: AlbumUpdateRequest,
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
):
    album = album_service.update_album(
        session, identity, album_id, name=request.name, students_count=request.students_count
    )
    return _album_to_response(album)


@router.patch("/{album_id}/status", response_model=AlbumResponse)
def set_album_status(
    album_id: str,
    request: AlbumStatusRequest,
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
):
    """Approve or decline an album. Platform admin only."""
    album = album_service.set_album_status(
        session, identity, album_id, request.status, request.payment_status
    )
    return _album_to_response(album)


@router.delete("/{album_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_album(
    album_id: str,
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
):
    album_service.delete_album(session, identity, album_id)


@router.get("/{album_id}/join-stats", response_model=JoinStatsResponse)
def get_join_stats(
    album_id: str,
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
):
    store = AlbumStore(session)
    album, _ = require_manage(store, identity, album_id)
    return JoinStatsResponse(**join_stats(store, album))


# --- Classes ---

@router.get("/{album_id}/classes", response_model=list[ClassResponse])
def list_classes(
    album_id: str,
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
):
    return [
        _class_to_response(item["class"], item["student_count"])
        for item in album_service.list_classes(session, identity, album_id)
    ]


@router.post("/{album_id}/classes", response_model=ClassResponse, status_code=201)
def create_class(
    album_id: str,
    request: ClassCreateRequest,
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
):
    cls = album_service.create_class(session, identity, album_id, request.name, request.sort_order)
    return _class_to_response(cls)


@router.patch("/{album_id}/classes/{class_id}", response_model=ClassResponse)
def update_class(
    album_id: str,
    class_id: str,
    request: ClassUpdateRequest,
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
):
    cls = album_service.update_class(
        session, identity, album_id, class_id, name=request.name, sort_order=request.sort_order
    )
    return _class_to_response(cls)


@router.delete("/{album_id}/classes/{class_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_class(
    album_id: str,
    class_id: str,
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
):
    album_service.delete_class(session, identity, album_id, class_id)
