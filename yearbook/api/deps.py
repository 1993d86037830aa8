"""Common API dependencies: caller identity extraction."""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from yearbook.database import get_session
from yearbook.services.identity import Identity, resolve

bearer_scheme = HTTPBearer(auto_error=False)


def get_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    session: Session = Depends(get_session),
) -> Identity:
    """Resolve the caller from the bearer token. Raises Unauthenticated."""
    return resolve(session, credentials.credentials if credentials else None)


def get_optional_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    session: Session = Depends(get_session),
) -> Optional[Identity]:
    """Like get_identity, but anonymous callers get None instead of a 401."""
    if not credentials:
        return None
    return resolve(session, credentials.credentials)
