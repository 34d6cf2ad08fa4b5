"""
Notification feed: the front end polls this and shows each entry as a toast.
"""
from typing import List

from fastapi import APIRouter, Depends

from jobboard.api.deps import get_store
from jobboard.services.job_portal import JobPortalStore
from jobboard.services.notifications import Notification

router = APIRouter()


@router.get("/", response_model=List[Notification])
async def drain_notifications(store: JobPortalStore = Depends(get_store)):
    return store.notifier.drain()
