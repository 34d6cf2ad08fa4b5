"""Job-related Pydantic schemas."""
import enum
from datetime import date, datetime
from typing import Any, Optional

from pydantic import Field, field_validator

from jobboard.schemas.base import EntityModel


class EmploymentType(str, enum.Enum):
    """Employment type of a posting."""
    FULL_TIME = "full-time"
    PART_TIME = "part-time"
    CONTRACT = "contract"
    INTERNSHIP = "internship"
    REMOTE = "remote"


class JobCategory(str, enum.Enum):
    TECHNOLOGY = "technology"
    MARKETING = "marketing"
    SALES = "sales"
    DESIGN = "design"
    FINANCE = "finance"
    HR = "hr"
    OPERATIONS = "operations"
    OTHER = "other"


class ExperienceLevel(str, enum.Enum):
    ENTRY = "entry"
    MID = "mid"
    SENIOR = "senior"
    EXECUTIVE = "executive"


class JobBase(EntityModel):
    """Base schema with common job posting fields."""
    title: str = Field(min_length=1)
    company: str = Field(min_length=1)
    location: str = ""
    employment_type: EmploymentType
    salary_min: float = Field(0, ge=0)
    salary_max: float = Field(0, ge=0)  # min <= max is expected, not enforced
    description: str = ""
    requirements: list[str] = Field(default_factory=list)
    skills: list[str] = Field(default_factory=list)
    category: JobCategory = JobCategory.OTHER
    experience_level: ExperienceLevel
    status: str = "active"
    application_deadline: Optional[date] = None
    posted_by: Optional[str] = None

    @field_validator("requirements", "skills", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class JobCreate(JobBase):
    """Schema for posting a new job. Counter and timestamp are set on submission."""
    pass


class Job(JobBase):
    """A job posting as stored by the entity backend."""
    id: str = Field(alias="_id")
    applications_count: int = Field(0, ge=0)
    created_at: datetime


class JobResponse(Job):
    """Job listing entry as returned by the API."""
    has_applied: bool = False


class JobFilters(EntityModel):
    """
    Filter criteria for the job list.

    Every field holds the raw value of its form input; an empty string means
    the criterion is not applied.
    """
    search: str = ""
    location: str = ""
    category: str = ""
    employment_type: str = ""
    experience_level: str = ""
    salary_min: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def _coerce_to_str(cls, value: Any) -> Any:
        if value is None:
            return ""
        if isinstance(value, enum.Enum):
            return value.value
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    def is_empty(self) -> bool:
        """True when no criterion is set."""
        return not any(self.model_dump().values())


class JobListResponse(EntityModel):
    """
    Filtered job list with the counts shown above the results.

    loading is true while the store is still fetching jobs or companies.
    """
    jobs: list[JobResponse]
    showing: int
    total: int
    loading: bool = False
