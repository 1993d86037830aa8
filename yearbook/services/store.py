"""Privileged album store.

Reads across every user's rows inside an album (memberships, grants,
requests, invites). Only the role resolver, the access workflow and the
approval paths are handed an ``AlbumStore``; routers go through those
services instead of querying these tables for authorization decisions.
"""

from typing import Optional

from sqlmodel import Session, col, func, select

from yearbook.models.access import AlbumClassAccess, AlbumJoinRequest
from yearbook.models.album import Album, AlbumClass, AlbumMember
from yearbook.models.invite import AlbumInvite
from yearbook.models.user import User


class AlbumStore:
    def __init__(self, session: Session):
        self.session = session

    # --- Albums & classes ---

    def get_album(self, album_id: str) -> Optional[Album]:
        return self.session.get(Album, album_id)

    def get_class(self, album_id: str, class_id: str) -> Optional[AlbumClass]:
        cls = self.session.get(AlbumClass, class_id)
        if cls is None or cls.album_id != album_id:
            return None
        return cls

    def find_class_by_name(self, album_id: str, name: str) -> Optional[AlbumClass]:
        return self.session.exec(
            select(AlbumClass).where(
                AlbumClass.album_id == album_id,
                AlbumClass.name == name,
            )
        ).first()

    def list_classes(self, album_id: str) -> list[AlbumClass]:
        return list(self.session.exec(
            select(AlbumClass)
            .where(AlbumClass.album_id == album_id)
            .order_by(col(AlbumClass.sort_order).asc(), col(AlbumClass.created_at).asc())
        ).all())

    # --- Users ---

    def get_user(self, user_id: str) -> Optional[User]:
        return self.session.get(User, user_id)

    def find_user_by_email(self, email: str) -> Optional[User]:
        return self.session.exec(
            select(User).where(User.email == email.strip().lower())
        ).first()

    # --- Memberships ---

    def get_member(self, album_id: str, user_id: str) -> Optional[AlbumMember]:
        return self.session.exec(
            select(AlbumMember).where(
                AlbumMember.album_id == album_id,
                AlbumMember.user_id == user_id,
            )
        ).first()

    def list_members(self, album_id: str) -> list[AlbumMember]:
        return list(self.session.exec(
            select(AlbumMember)
            .where(AlbumMember.album_id == album_id)
            .order_by(col(AlbumMember.joined_at).asc())
        ).all())

    # --- Class access ---

    def get_access_in_album(self, album_id: str, user_id: str) -> Optional[AlbumClassAccess]:
        return self.session.exec(
            select(AlbumClassAccess).where(
                AlbumClassAccess.album_id == album_id,
                AlbumClassAccess.user_id == user_id,
            )
        ).first()

    def get_access_in_class(self, class_id: str, user_id: str) -> Optional[AlbumClassAccess]:
        return self.session.exec(
            select(AlbumClassAccess).where(
                AlbumClassAccess.class_id == class_id,
                AlbumClassAccess.user_id == user_id,
            )
        ).first()

    def find_anonymous_access(self, album_id: str, email: str) -> Optional[AlbumClassAccess]:
        return self.session.exec(
            select(AlbumClassAccess).where(
                AlbumClassAccess.album_id == album_id,
                col(AlbumClassAccess.user_id).is_(None),
                func.lower(AlbumClassAccess.email) == email.lower(),
            )
        ).first()

    def has_approved_access(self, album_id: str, user_id: str) -> bool:
        access = self.get_access_in_album(album_id, user_id)
        return access is not None and access.status == "approved"

    def list_access(self, album_id: str, class_id: Optional[str] = None,
                    status: Optional[str] = "approved") -> list[AlbumClassAccess]:
        query = select(AlbumClassAccess).where(AlbumClassAccess.album_id == album_id)
        if class_id is not None:
            query = query.where(AlbumClassAccess.class_id == class_id)
        if status is not None:
            query = query.where(AlbumClassAccess.status == status)
        return list(self.session.exec(
            query.order_by(col(AlbumClassAccess.student_name).asc())
        ).all())

    # --- Join requests ---

    def get_request(self, request_id: str) -> Optional[AlbumJoinRequest]:
        return self.session.get(AlbumJoinRequest, request_id)

    def get_request_for_user(self, album_id: str, user_id: str) -> Optional[AlbumJoinRequest]:
        return self.session.exec(
            select(AlbumJoinRequest).where(
                AlbumJoinRequest.album_id == album_id,
                AlbumJoinRequest.user_id == user_id,
            )
        ).first()

    def find_anonymous_request(self, album_id: str, email: str) -> Optional[AlbumJoinRequest]:
        return self.session.exec(
            select(AlbumJoinRequest).where(
                AlbumJoinRequest.album_id == album_id,
                col(AlbumJoinRequest.user_id).is_(None),
                func.lower(AlbumJoinRequest.email) == email.lower(),
            )
        ).first()

    def list_requests(self, album_id: str, class_id: Optional[str] = None,
                      status: Optional[str] = "pending") -> list[AlbumJoinRequest]:
        query = select(AlbumJoinRequest).where(AlbumJoinRequest.album_id == album_id)
        if class_id is not None:
            query = query.where(AlbumJoinRequest.assigned_class_id == class_id)
        if status is not None:
            query = query.where(AlbumJoinRequest.status == status)
        return list(self.session.exec(
            query.order_by(col(AlbumJoinRequest.requested_at).desc())
        ).all())

    # --- Counts ---

    def count_access(self, album_id: str, status: str) -> int:
        return self.session.exec(
            select(func.count()).select_from(AlbumClassAccess).where(
                AlbumClassAccess.album_id == album_id,
                AlbumClassAccess.status == status,
            )
        ).one()

    def count_requests(self, album_id: str, status: str) -> int:
        return self.session.exec(
            select(func.count()).select_from(AlbumJoinRequest).where(
                AlbumJoinRequest.album_id == album_id,
                AlbumJoinRequest.status == status,
            )
        ).one()

    # --- Invites ---

    def get_invite_by_token(self, token: str) -> Optional[AlbumInvite]:
        return self.session.exec(
            select(AlbumInvite).where(AlbumInvite.token == token)
        ).first()

    def get_invite(self, album_id: str, invite_id: str) -> Optional[AlbumInvite]:
        invite = self.session.get(AlbumInvite, invite_id)
        if invite is None or invite.album_id != album_id:
            return None
        return invite

    def list_invites(self, album_id: str) -> list[AlbumInvite]:
        return list(self.session.exec(
            select(AlbumInvite)
            .where(AlbumInvite.album_id == album_id)
            .order_by(col(AlbumInvite.created_at).desc())
        ).all())
