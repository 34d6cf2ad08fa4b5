"""
Jobs API endpoints.
Listing, detail, posting and applying.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from jobboard.api.deps import get_current_user, get_optional_user, get_store
from jobboard.exceptions import DuplicateApplicationError, RemoteRequestError
from jobboard.schemas.application import ApplicationCreate, ApplyRequest, JobApplication
from jobboard.schemas.auth import User
from jobboard.schemas.job import Job, JobCreate, JobFilters, JobListResponse, JobResponse
from jobboard.services.job_portal import JobPortalStore

logger = logging.getLogger(__name__)

router = APIRouter()


def _to_response(job: Job, store: JobPortalStore, user: Optional[User]) -> JobResponse:
    has_applied = store.has_user_applied(job.id, user.user_id) if user else False
    return JobResponse(**job.model_dump(), has_applied=has_applied)


def _listing(jobs: List[Job], store: JobPortalStore, user: Optional[User]) -> JobListResponse:
    return JobListResponse(
        jobs=[_to_response(job, store, user) for job in jobs],
        showing=len(jobs),
        total=len(store.jobs),
        loading=store.loading,
    )


@router.get("/", response_model=JobListResponse)
async def list_jobs(
    search: str = Query("", description="Title, company, description or skill"),
    location: str = Query("", description="Location (partial match)"),
    category: str = Query(""),
    employment_type: str = Query("", alias="employmentType"),
    experience_level: str = Query("", alias="experienceLevel"),
    salary_min: str = Query("", alias="salaryMin", description="Minimum salary threshold"),
    store: JobPortalStore = Depends(get_store),
    user: Optional[User] = Depends(get_optional_user),
):
    """
    List the loaded jobs narrowed by the filter form.
    Filtering happens in memory; use POST /refresh to reload from the backend.
    """
    filters = JobFilters(
        search=search,
        location=location,
        category=category,
        employment_type=employment_type,
        experience_level=experience_level,
        salary_min=salary_min,
    )
    jobs = store.filtered_jobs(filters)
    logger.debug(f"Showing {len(jobs)} of {len(store.jobs)} jobs")
    return _listing(jobs, store, user)


@router.post("/refresh", response_model=JobListResponse)
async def refresh_jobs(
    store: JobPortalStore = Depends(get_store),
    user: Optional[User] = Depends(get_optional_user),
):
    """Reload jobs from the backend. Failures keep the previous list."""
    jobs = await store.fetch_jobs()
    return _listing(jobs, store, user)


@router.post("/", response_model=Job, status_code=201)
async def create_job(
    job: JobCreate,
    store: JobPortalStore = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    """Post a new job owned by the signed-in user."""
    try:
        return await store.create_job(job.model_copy(update={"posted_by": current_user.user_id}))
    except RemoteRequestError:
        raise HTTPException(status_code=502, detail="Failed to post job")


@router.get("/{job_id}", response_model=JobResponse)
async def get_job(
    job_id: str,
    store: JobPortalStore = Depends(get_store),
    user: Optional[User] = Depends(get_optional_user),
):
    """Job detail, fetched from the backend on every call."""
    try:
        job = await store.get_job_by_id(job_id)
    except RemoteRequestError:
        raise HTTPException(status_code=404, detail="Job not found")
    return _to_response(job, store, user)


@router.post("/{job_id}/apply", response_model=JobApplication, status_code=201)
async def apply_for_job(
    job_id: str,
    request: ApplyRequest,
    store: JobPortalStore = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    """
    Apply to a job as the signed-in user.

    Returns:
        201: The pending application
        409: The user already applied to this job
        502: The backend rejected the application
    """
    application = ApplicationCreate(
        cover_letter=request.cover_letter,
        expected_salary=request.expected_salary,
        applicant_id=current_user.user_id,
    )
    try:
        return await store.apply_for_job(job_id, application)
    except DuplicateApplicationError:
        raise HTTPException(status_code=409, detail="You have already applied to this job")
    except RemoteRequestError:
        raise HTTPException(status_code=502, detail="Failed to submit application")
