"""
Landing page data.
"""
from fastapi import APIRouter, Depends

from jobboard.api.deps import get_store
from jobboard.schemas.portal import HomeResponse
from jobboard.services.job_portal import JobPortalStore

router = APIRouter()


@router.get("/home", response_model=HomeResponse)
async def home(store: JobPortalStore = Depends(get_store)):
    """Newest jobs and headline counts from the loaded state."""
    return HomeResponse(
        featured_jobs=store.featured_jobs(),
        stats=store.stats(),
        loading=store.loading,
    )
