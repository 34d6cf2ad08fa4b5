"""Entity and request schemas"""
from jobboard.schemas.application import (
    APPLICATION_STATUS_PENDING,
    ApplicationCreate,
    ApplicationStatusUpdate,
    ApplyRequest,
    JobApplication,
)
from jobboard.schemas.auth import SignInRequest, User
from jobboard.schemas.portal import HomeResponse, PortalStats
from jobboard.schemas.company import Company
from jobboard.schemas.job import (
    EmploymentType,
    ExperienceLevel,
    Job,
    JobCategory,
    JobCreate,
    JobFilters,
)

__all__ = [
    "APPLICATION_STATUS_PENDING",
    "ApplicationCreate",
    "ApplicationStatusUpdate",
    "ApplyRequest",
    "JobApplication",
    "SignInRequest",
    "HomeResponse",
    "PortalStats",
    "User",
    "Company",
    "EmploymentType",
    "ExperienceLevel",
    "Job",
    "JobCategory",
    "JobCreate",
    "JobFilters",
]
