"""
Applications API endpoints.
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from jobboard.api.deps import get_current_user, get_store
from jobboard.exceptions import RemoteRequestError
from jobboard.schemas.application import ApplicationStatusUpdate, JobApplication
from jobboard.schemas.auth import User
from jobboard.services.job_portal import JobPortalStore

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/", response_model=List[JobApplication])
async def list_my_applications(
    store: JobPortalStore = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    """The signed-in user's applications, newest first (re-fetched on every call)."""
    return await store.fetch_user_applications(current_user.user_id)


@router.patch("/{application_id}", response_model=JobApplication)
async def update_application_status(
    application_id: str,
    update: ApplicationStatusUpdate,
    store: JobPortalStore = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    """
    Change the status of one of the cached applications.

    Returns:
        200: The updated application
        404: Application not among the signed-in user's applications
        502: The backend update failed
    """
    owned = any(
        app.id == application_id and app.applicant_id == current_user.user_id
        for app in store.applications
    )
    if not owned:
        raise HTTPException(status_code=404, detail="Application not found")

    try:
        updated = await store.update_application_status(application_id, update.status, update.feedback)
    except RemoteRequestError:
        raise HTTPException(status_code=502, detail="Failed to update application status")

    if updated is None:
        # Cache was replaced while the update was in flight
        raise HTTPException(status_code=404, detail="Application not found")
    return updated
