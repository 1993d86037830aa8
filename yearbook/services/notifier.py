"""Fire-and-forget notification sink.

Writes use their own session so a failed notification can never roll
back the approval or rejection that triggered it.
"""

import logging
from typing import Optional

from sqlmodel import Session, col, select

from yearbook.models.notification import Notification

logger = logging.getLogger(__name__)


class Notifier:
    def __init__(self, engine=None):
        self._engine = engine

    def _get_engine(self):
        if self._engine is None:
            from yearbook.database import engine
            self._engine = engine
        return self._engine

    def notify(
        self,
        user_id: Optional[str],
        kind: str,
        album_id: Optional[str] = None,
        message: Optional[str] = None,
    ) -> bool:
        """Store a notification for ``user_id``. Returns False on failure."""
        if not user_id:
            return False
        try:
            with Session(self._get_engine()) as session:
                session.add(Notification(
                    user_id=user_id,
                    kind=kind,
                    album_id=album_id,
                    message=message,
                ))
                session.commit()
        except Exception as e:
            logger.warning("Failed to deliver %s notification to %s: %s", kind, user_id, e)
            return False
        return True


notifier = Notifier()


def list_notifications(session: Session, user_id: str, limit: int = 50) -> list[Notification]:
    return list(session.exec(
        select(Notification)
        .where(Notification.user_id == user_id)
        .order_by(col(Notification.created_at).desc())
        .limit(limit)
    ).all())
