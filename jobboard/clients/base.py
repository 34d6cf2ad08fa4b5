"""
Remote entity client interface.

The hosted backend exposes three collections (jobs, companies,
job_applications) with the same list/get/create/update surface, plus a
session API. Both the HTTP client and the local SQL client implement these
protocols so the portal store never knows which one it is talking to.
"""
from typing import Any, Dict, List, Optional, Protocol, TypedDict

from jobboard.schemas.auth import User

JOBS = "jobs"
COMPANIES = "companies"
JOB_APPLICATIONS = "job_applications"
COLLECTIONS = (JOBS, COMPANIES, JOB_APPLICATIONS)

ASCENDING = 1
DESCENDING = -1


class EntityList(TypedDict):
    """List response: raw documents plus the collection total after filtering."""
    list: List[Dict[str, Any]]
    total: int


class EntityCollection(Protocol):
    """CRUD surface of one collection. Every method raises RemoteRequestError on failure."""

    name: str

    async def list(
        self,
        filter: Optional[Dict[str, Any]] = None,
        sort: Optional[Dict[str, int]] = None,
    ) -> EntityList:
        ...

    async def get(self, entity_id: str) -> Dict[str, Any]:
        ...

    async def create(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        ...

    async def update(self, entity_id: str, patch: Dict[str, Any]) -> Dict[str, Any]:
        ...


class AuthClient(Protocol):
    """Session primitives of the backend."""

    @property
    def current_user(self) -> Optional[User]:
        ...

    @property
    def is_authenticated(self) -> bool:
        ...

    async def sign_in(self, email: str, user_name: Optional[str] = None) -> User:
        ...

    async def sign_out(self) -> None:
        ...


class EntityClient(Protocol):
    """Everything the portal needs from the backend."""

    jobs: EntityCollection
    companies: EntityCollection
    job_applications: EntityCollection
    auth: AuthClient

    async def close(self) -> None:
        ...


def user_name_from_email(email: str) -> str:
    """Fallback display name when the backend has none: the address's local part."""
    return email.split("@", 1)[0]
