"""
Pytest fixtures for testing.
"""
import asyncio
from typing import Any, AsyncGenerator, Callable, Dict, Set

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from jobboard.clients.local import LocalEntityClient
from jobboard.exceptions import RemoteRequestError
from jobboard.main import app as fastapi_app
from jobboard.schemas.job import Job
from jobboard.services.job_portal import JobPortalStore

# Test database URL (use in-memory SQLite for fast tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


def job_document(**overrides: Any) -> Dict[str, Any]:
    """Wire-format job with sensible defaults."""
    document = {
        "title": "Software Engineer",
        "company": "Acme Corp",
        "location": "Remote",
        "employmentType": "full-time",
        "salaryMin": 80000,
        "salaryMax": 120000,
        "description": "Build and run our services.",
        "requirements": ["3+ years experience"],
        "skills": ["Python"],
        "category": "technology",
        "experienceLevel": "mid",
        "status": "active",
        "postedBy": "owner-1",
        "applicationsCount": 0,
        "createdAt": "2024-05-01T09:00:00+00:00",
    }
    document.update(overrides)
    return document


SEED_JOBS = [
    job_document(
        _id="job-designer",
        title="Product Designer",
        company="Initech",
        location="San Francisco, CA",
        employmentType="contract",
        salaryMin=70000,
        salaryMax=95000,
        description="Own the design system.",
        skills=["Figma", "Prototyping"],
        category="design",
        experienceLevel="mid",
        createdAt="2024-05-01T09:00:00+00:00",
    ),
    job_document(
        _id="job-backend",
        title="Backend Engineer",
        company="Acme Corp",
        location="Remote",
        employmentType="full-time",
        salaryMin=90000,
        salaryMax=130000,
        description="APIs and data pipelines.",
        skills=["Python", "PostgreSQL"],
        category="technology",
        experienceLevel="senior",
        applicationsCount=4,
        createdAt="2024-05-03T09:00:00+00:00",
    ),
    job_document(
        _id="job-sales",
        title="Sales Rep",
        company="Globex",
        location="NYC",
        employmentType="full-time",
        salaryMin=40000,
        salaryMax=55000,
        description="Grow our east coast accounts.",
        skills=["Negotiation"],
        category="sales",
        experienceLevel="entry",
        createdAt="2024-05-02T09:00:00+00:00",
    ),
]

SEED_COMPANIES = [
    {"_id": "co-globex", "name": "Globex", "industry": "Manufacturing", "size": "1000+", "location": "NYC",
     "description": "Industrial products.", "verified": True},
    {"_id": "co-acme", "name": "Acme Corp", "industry": "Software", "size": "51-200", "location": "Remote",
     "description": "Developer tools.", "website": "https://acme.example.com", "verified": True},
    {"_id": "co-initech", "name": "Initech", "industry": "Consulting", "size": "201-500",
     "location": "San Francisco, CA", "description": "Enterprise consulting.", "website": None, "logo": None},
]


@pytest.fixture
def make_job() -> Callable[..., Job]:
    """Build a validated Job from wire-format overrides."""
    counter = iter(range(1, 10_000))

    def _make(**overrides: Any) -> Job:
        overrides.setdefault("_id", f"job-{next(counter)}")
        return Job.model_validate(job_document(**overrides))

    return _make


@pytest_asyncio.fixture
async def entity_client() -> AsyncGenerator[LocalEntityClient, None]:
    """Fresh local backend on an in-memory database for each test."""
    client = await LocalEntityClient.from_url(TEST_DATABASE_URL)
    try:
        yield client
    finally:
        await client.close()


@pytest_asyncio.fixture
async def seeded_client(entity_client: LocalEntityClient) -> LocalEntityClient:
    """Local backend holding three jobs and three companies."""
    for document in SEED_JOBS:
        await entity_client.jobs.create(document)
    for document in SEED_COMPANIES:
        await entity_client.companies.create(document)
    return entity_client


class FlakyCollection:
    """
    Wraps a collection to record calls, fail chosen operations, and hold
    chosen operations until their gate opens.
    """

    def __init__(self, inner):
        self._inner = inner
        self.name = inner.name
        self.fail_on: Set[str] = set()
        self.gates: Dict[str, asyncio.Event] = {}
        self.calls: list = []

    def hold(self, operation: str) -> asyncio.Event:
        """Block operation until the returned event is set."""
        gate = asyncio.Event()
        self.gates[operation] = gate
        return gate

    def called(self, operation: str) -> int:
        return sum(1 for call in self.calls if call[0] == operation)

    async def _pass(self, operation: str) -> None:
        gate = self.gates.get(operation)
        if gate is not None:
            await gate.wait()
        self._maybe_fail(operation)

    def _maybe_fail(self, operation: str) -> None:
        if operation in self.fail_on:
            raise RemoteRequestError(f"{operation} {self.name} failed (injected)")

    async def list(self, filter=None, sort=None):
        self.calls.append(("list", filter, sort))
        await self._pass("list")
        return await self._inner.list(filter=filter, sort=sort)

    async def get(self, entity_id):
        self.calls.append(("get", entity_id))
        await self._pass("get")
        return await self._inner.get(entity_id)

    async def create(self, payload):
        self.calls.append(("create", payload))
        await self._pass("create")
        return await self._inner.create(payload)

    async def update(self, entity_id, patch):
        self.calls.append(("update", entity_id, patch))
        await self._pass("update")
        return await self._inner.update(entity_id, patch)


class FlakyClient:
    """Entity client whose collections can be made to fail on demand."""

    def __init__(self, inner: LocalEntityClient):
        self.inner = inner
        self.jobs = FlakyCollection(inner.jobs)
        self.companies = FlakyCollection(inner.companies)
        self.job_applications = FlakyCollection(inner.job_applications)
        self.auth = inner.auth

    async def close(self) -> None:
        await self.inner.close()


@pytest_asyncio.fixture
async def flaky_client(seeded_client: LocalEntityClient) -> FlakyClient:
    return FlakyClient(seeded_client)


@pytest_asyncio.fixture
async def store(flaky_client: FlakyClient) -> AsyncGenerator[JobPortalStore, None]:
    """Portal store with jobs and companies already loaded."""
    portal = JobPortalStore(flaky_client)
    await portal.load_initial()
    try:
        yield portal
    finally:
        await portal.close()


@pytest_asyncio.fixture
async def async_client(store: JobPortalStore) -> AsyncGenerator[AsyncClient, None]:
    """
    Create an async HTTP client for testing endpoints.

    ASGITransport does not run the lifespan, so the store is placed on
    app.state directly, the way the lifespan would.
    """
    original_store = getattr(fastapi_app.state, "store", None)
    fastapi_app.state.store = store
    transport = ASGITransport(app=fastapi_app)

    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        follow_redirects=True  # Follow 307 redirects for trailing slashes
    ) as client:
        yield client

    fastapi_app.state.store = original_store


@pytest_asyncio.fixture
async def client(async_client: AsyncClient, store: JobPortalStore) -> AsyncClient:
    """Client with a signed-in session."""
    response = await async_client.post("/api/auth/sign-in", json={"email": "ada@example.com"})
    assert response.status_code == 200
    store.notifier.drain()
    return async_client
