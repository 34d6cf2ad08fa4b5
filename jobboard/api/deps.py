"""
API dependencies: the portal store and the session, both created in the app
lifespan and kept on app.state.
"""
from typing import Optional

from fastapi import Depends, HTTPException, Request

from jobboard.clients.base import AuthClient
from jobboard.schemas.auth import User
from jobboard.services.job_portal import JobPortalStore


def get_store(request: Request) -> JobPortalStore:
    return request.app.state.store


def get_auth(store: JobPortalStore = Depends(get_store)) -> AuthClient:
    return store.client.auth


def get_optional_user(auth: AuthClient = Depends(get_auth)) -> Optional[User]:
    """The signed-in user, or None for anonymous browsing."""
    return auth.current_user


def get_current_user(user: Optional[User] = Depends(get_optional_user)) -> User:
    """
    Dependency for endpoints that need a session.

    Raises:
        HTTPException 401: If nobody is signed in
    """
    if user is None:
        raise HTTPException(status_code=401, detail="Sign in required.")
    return user
