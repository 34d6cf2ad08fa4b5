"""
Session endpoints.

The portal holds one session at a time, like the browser app it backs:
signing in loads the user's applications so "already applied" checks work
without a request per job.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException

from jobboard.api.deps import get_auth, get_current_user, get_store
from jobboard.clients.base import AuthClient
from jobboard.exceptions import RemoteRequestError
from jobboard.schemas.auth import SignInRequest, SignOutResponse, User
from jobboard.services.job_portal import JobPortalStore

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/sign-in", response_model=User)
async def sign_in(
    request: SignInRequest,
    auth: AuthClient = Depends(get_auth),
    store: JobPortalStore = Depends(get_store),
):
    """
    Start a session for the given email.

    Returns:
        200: The signed-in user
        502: The auth backend failed
    """
    try:
        user = await auth.sign_in(request.email, request.user_name)
    except RemoteRequestError as e:
        logger.error(f"Sign-in failed for {request.email}: {e}", exc_info=True)
        raise HTTPException(status_code=502, detail="Failed to sign in. Please try again.")

    # A failed fetch keeps the cache, so drop the previous user's first
    store.reset_applications()
    await store.fetch_user_applications(user.user_id)
    return user


@router.post("/sign-out", response_model=SignOutResponse)
async def sign_out(
    auth: AuthClient = Depends(get_auth),
    store: JobPortalStore = Depends(get_store),
):
    try:
        await auth.sign_out()
    except RemoteRequestError as e:
        # Session is cleared locally either way
        logger.warning(f"Sign-out call failed: {e}")
    store.reset_applications()
    return SignOutResponse(message="Signed out")


@router.get("/me", response_model=User)
async def me(current_user: User = Depends(get_current_user)):
    return current_user
