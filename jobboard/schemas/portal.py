"""Schemas for the landing page."""
from jobboard.schemas.base import EntityModel
from jobboard.schemas.job import Job


class PortalStats(EntityModel):
    active_jobs: int
    companies: int


class HomeResponse(EntityModel):
    """Featured jobs and headline counts."""
    featured_jobs: list[Job]
    stats: PortalStats
    loading: bool = False
