"""
Companies API endpoints.
"""
from typing import List

from fastapi import APIRouter, Depends

from jobboard.api.deps import get_store
from jobboard.schemas.company import Company
from jobboard.services.job_portal import JobPortalStore

router = APIRouter()


@router.get("/", response_model=List[Company])
async def list_companies(store: JobPortalStore = Depends(get_store)):
    """Re-fetch companies (alphabetical). A failed fetch returns the last known list."""
    return await store.fetch_companies()
