"""Account & identity API endpoints."""

from fastapi import APIRouter, Depends
from sqlmodel import Session

from yearbook.api.deps import get_identity
from yearbook.database import get_session
from yearbook.schemas.auth import (
    LoginRequest,
    MeResponse,
    NotificationResponse,
    RegisterRequest,
    TokenResponse,
)
from yearbook.services import identity as identity_service
from yearbook.services.identity import Identity
from yearbook.services.notifier import list_notifications

router = APIRouter(tags=["auth"])


@router.post("/auth/register", response_model=TokenResponse, status_code=201)
def register(request: RegisterRequest, session: Session = Depends(get_session)):
    """Create an account and return an access token."""
    result = identity_service.register(session, request.email, request.password, request.name)
    return TokenResponse(**result)


@router.post("/auth/login", response_model=TokenResponse)
def login(request: LoginRequest, session: Session = Depends(get_session)):
    result = identity_service.login(session, request.email, request.password)
    return TokenResponse(**result)


@router.get("/auth/me", response_model=MeResponse)
def me(identity: Identity = Depends(get_identity)):
    return MeResponse(
        user_id=identity.user_id,
        email=identity.email,
        name=identity.name,
        global_role=identity.global_role,
    )


@router.get("/notifications", response_model=list[NotificationResponse])
def notifications(
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
):
    """Status-change notifications for the current user, newest first."""
    return [
        NotificationResponse(
            id=n.id,
            kind=n.kind,
            album_id=n.album_id,
            message=n.message,
            created_at=n.created_at.isoformat(),
            read_at=n.read_at.isoformat() if n.read_at else None,
        )
        for n in list_notifications(session, identity.user_id)
    ]
