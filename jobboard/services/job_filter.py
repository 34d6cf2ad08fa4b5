"""
Client-side job filtering.

The job list is fetched once and narrowed in memory on every change of the
filter form, so this module is pure: no I/O, no mutation of its inputs.
"""
import math
from typing import Any, Iterable, List, Mapping, Optional, Union

from jobboard.schemas.job import Job, JobFilters

# Select options of the filter form: (value, label). An empty value means "any".
CATEGORY_OPTIONS = [
    ("", "All Categories"),
    ("technology", "Technology"),
    ("marketing", "Marketing"),
    ("sales", "Sales"),
    ("design", "Design"),
    ("finance", "Finance"),
    ("hr", "Human Resources"),
    ("operations", "Operations"),
    ("other", "Other"),
]

EMPLOYMENT_TYPE_OPTIONS = [
    ("", "All Types"),
    ("full-time", "Full-time"),
    ("part-time", "Part-time"),
    ("contract", "Contract"),
    ("internship", "Internship"),
    ("remote", "Remote"),
]

EXPERIENCE_LEVEL_OPTIONS = [
    ("", "All Levels"),
    ("entry", "Entry Level"),
    ("mid", "Mid Level"),
    ("senior", "Senior Level"),
    ("executive", "Executive"),
]

SALARY_RANGE_OPTIONS = [
    ("", "Any Salary"),
    ("40000", "$40K+"),
    ("60000", "$60K+"),
    ("80000", "$80K+"),
    ("100000", "$100K+"),
    ("120000", "$120K+"),
]

FiltersLike = Union[JobFilters, Mapping[str, Any], None]


def clear_filters() -> JobFilters:
    """All criteria empty: matches every job."""
    return JobFilters()


def parse_salary_threshold(value: Any) -> Optional[float]:
    """
    Parse the minimum-salary criterion.

    Returns None (no filter) for empty, non-numeric, NaN or infinite input.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        threshold = float(value)
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            threshold = float(text)
        except ValueError:
            return None
    if math.isnan(threshold) or math.isinf(threshold):
        return None
    return threshold


def _as_filters(filters: FiltersLike) -> JobFilters:
    if filters is None:
        return JobFilters()
    if isinstance(filters, JobFilters):
        return filters
    return JobFilters.model_validate(dict(filters))


def _enum_value(value: Any) -> Any:
    return getattr(value, "value", value)


def matches_search(job: Job, needle: str) -> bool:
    """Case-insensitive substring of title, company, description or any skill."""
    needle = needle.lower()
    return (
        needle in job.title.lower()
        or needle in job.company.lower()
        or needle in job.description.lower()
        or any(needle in skill.lower() for skill in job.skills)
    )


def job_matches(job: Job, filters: JobFilters, salary_threshold: Optional[float] = None) -> bool:
    """True when the job satisfies every non-empty criterion."""
    if filters.search and not matches_search(job, filters.search):
        return False
    if filters.location and filters.location.lower() not in job.location.lower():
        return False
    if filters.category and _enum_value(job.category) != filters.category:
        return False
    if filters.employment_type and _enum_value(job.employment_type) != filters.employment_type:
        return False
    if filters.experience_level and _enum_value(job.experience_level) != filters.experience_level:
        return False
    if salary_threshold is not None and job.salary_min < salary_threshold:
        return False
    return True


def filter_jobs(jobs: Iterable[Job], filters: FiltersLike = None) -> List[Job]:
    """
    Return the jobs matching all supplied criteria, in their original order.

    Args:
        jobs: Full in-memory job list (not modified)
        filters: JobFilters, a mapping of criteria (snake or camel case), or None

    Returns:
        New list holding the matching jobs
    """
    criteria = _as_filters(filters)
    if criteria.is_empty():
        return list(jobs)

    threshold = parse_salary_threshold(criteria.salary_min)
    return [job for job in jobs if job_matches(job, criteria, threshold)]
