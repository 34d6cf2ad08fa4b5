"""Company Pydantic schemas."""
from typing import Any, Optional

from pydantic import Field, field_validator

from jobboard.schemas.base import EntityModel


class Company(EntityModel):
    """An organization that posts jobs."""
    id: str = Field(alias="_id")
    name: str = Field(min_length=1)
    industry: str = ""
    size: str = ""
    location: str = ""
    description: str = ""
    website: Optional[str] = ""
    logo: Optional[str] = ""
    verified: bool = False

    @field_validator("website", "logo", mode="before")
    @classmethod
    def _missing_url_as_empty(cls, value: Any) -> Any:
        return value or ""

    @field_validator("verified", mode="before")
    @classmethod
    def _missing_flag_as_false(cls, value: Any) -> Any:
        return value or False
