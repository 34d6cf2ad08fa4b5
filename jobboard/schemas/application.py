"""Job application Pydantic schemas."""
from datetime import datetime
from typing import Optional

from pydantic import Field

from jobboard.schemas.base import EntityModel

APPLICATION_STATUS_PENDING = "pending"


class ApplicationCreate(EntityModel):
    """Data collected by the apply form."""
    cover_letter: str = ""
    expected_salary: float = Field(ge=0)
    applicant_id: str = Field(min_length=1)


class ApplyRequest(EntityModel):
    """Apply form body; the applicant comes from the session."""
    cover_letter: str = ""
    expected_salary: float = Field(ge=0)


class JobApplication(EntityModel):
    """An applicant's submission against a job."""
    id: str = Field(alias="_id")
    job_id: str
    applicant_id: str
    status: str = APPLICATION_STATUS_PENDING
    cover_letter: str = ""
    expected_salary: float = 0
    applied_at: datetime
    feedback: Optional[str] = None
    updated_at: Optional[datetime] = None


class ApplicationStatusUpdate(EntityModel):
    """Request body for changing an application's status."""
    status: str = Field(min_length=1)
    feedback: Optional[str] = None
