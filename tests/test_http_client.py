"""
Tests for the hosted-backend HTTP client.

A small aiohttp application stands in for the hosted backend.

Tests cover:
- List requests with JSON filter/sort query parameters
- Create, get and update
- Bearer token handling around sign-in and sign-out
- Status, body and connection failures as RemoteRequestError
- The portal store running on the HTTP client
"""
import json
import uuid

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from jobboard.clients.http import HttpEntityClient
from jobboard.exceptions import RemoteRequestError
from jobboard.services.job_portal import JobPortalStore

from conftest import SEED_COMPANIES, SEED_JOBS

PROJECT = "p-test"
TOKEN = "token-123"

STATE = web.AppKey("state", dict)


def build_fake_backend() -> web.Application:
    app = web.Application()
    app[STATE] = {
        "collections": {
            "jobs": {doc["_id"]: dict(doc) for doc in SEED_JOBS},
            "companies": {doc["_id"]: dict(doc) for doc in SEED_COMPANIES},
            "job_applications": {},
        },
        "requests": [],
        "fail_status": None,
        "raw_body": None,
    }

    def collection(request):
        return request.app[STATE]["collections"][request.match_info["collection"]]

    @web.middleware
    async def record(request, handler):
        request.app[STATE]["requests"].append({
            "method": request.method,
            "path": request.path,
            "query": dict(request.query),
            "authorization": request.headers.get("Authorization"),
        })
        if request.app[STATE]["fail_status"]:
            return web.json_response({"error": "injected"}, status=request.app[STATE]["fail_status"])
        if request.app[STATE]["raw_body"] is not None:
            return web.Response(text=request.app[STATE]["raw_body"], content_type="application/json")
        return await handler(request)

    async def list_entities(request):
        documents = list(collection(request).values())
        if "filter" in request.query:
            criteria = json.loads(request.query["filter"])
            documents = [d for d in documents if all(d.get(k) == v for k, v in criteria.items())]
        if "sort" in request.query:
            for field, direction in reversed(list(json.loads(request.query["sort"]).items())):
                documents.sort(key=lambda d: d.get(field) or "", reverse=direction < 0)
        return web.json_response({"list": documents, "total": len(documents)})

    async def get_entity(request):
        document = collection(request).get(request.match_info["entity_id"])
        if document is None:
            return web.json_response({"error": "not found"}, status=404)
        return web.json_response(document)

    async def create_entity(request):
        document = await request.json()
        document["_id"] = document.get("_id") or uuid.uuid4().hex
        collection(request)[document["_id"]] = document
        return web.json_response(document, status=201)

    async def update_entity(request):
        documents = collection(request)
        entity_id = request.match_info["entity_id"]
        if entity_id not in documents:
            return web.json_response({"error": "not found"}, status=404)
        documents[entity_id] = {**documents[entity_id], **(await request.json())}
        return web.json_response(documents[entity_id])

    async def sign_in(request):
        body = await request.json()
        return web.json_response({
            "accessToken": TOKEN,
            "user": {"userId": "u-1", "userName": body["userName"], "email": body["email"]},
        })

    async def sign_out(request):
        return web.Response(status=204)

    app.middlewares.append(record)
    base = f"/v1/projects/{PROJECT}"
    app.router.add_get(base + "/entities/{collection}", list_entities)
    app.router.add_post(base + "/entities/{collection}", create_entity)
    app.router.add_get(base + "/entities/{collection}/{entity_id}", get_entity)
    app.router.add_patch(base + "/entities/{collection}/{entity_id}", update_entity)
    app.router.add_post(base + "/auth/sign-in", sign_in)
    app.router.add_post(base + "/auth/sign-out", sign_out)
    return app


@pytest_asyncio.fixture
async def backend():
    server = TestServer(build_fake_backend())
    await server.start_server()
    try:
        yield server
    finally:
        await server.close()


@pytest_asyncio.fixture
async def http_client(backend):
    origin = f"http://{backend.host}:{backend.port}"
    client = HttpEntityClient.create(
        project_id=PROJECT,
        api_base_url=origin,
        auth_origin=origin,
        timeout_s=5,
    )
    try:
        yield client
    finally:
        await client.close()


def _requests(backend):
    return backend.app[STATE]["requests"]


# ============================================================
# COLLECTION TESTS
# ============================================================

@pytest.mark.asyncio
async def test_list_sends_filter_and_sort_as_json(http_client, backend):
    response = await http_client.jobs.list(filter={"category": "sales"}, sort={"createdAt": -1})

    assert [job["_id"] for job in response["list"]] == ["job-sales"]
    assert response["total"] == 1

    sent = _requests(backend)[-1]
    assert sent["method"] == "GET"
    assert sent["path"] == f"/v1/projects/{PROJECT}/entities/jobs"
    assert json.loads(sent["query"]["filter"]) == {"category": "sales"}
    assert json.loads(sent["query"]["sort"]) == {"createdAt": -1}


@pytest.mark.asyncio
async def test_list_without_criteria_sends_no_params(http_client, backend):
    response = await http_client.companies.list()

    assert response["total"] == 3
    assert _requests(backend)[-1]["query"] == {}


@pytest.mark.asyncio
async def test_create_get_update(http_client):
    created = await http_client.job_applications.create({"jobId": "job-sales", "applicantId": "u-1"})
    assert created["_id"]

    fetched = await http_client.job_applications.get(created["_id"])
    assert fetched["jobId"] == "job-sales"

    updated = await http_client.job_applications.update(created["_id"], {"status": "interview"})
    assert updated["status"] == "interview"
    assert updated["applicantId"] == "u-1"


@pytest.mark.asyncio
async def test_get_missing_raises(http_client):
    with pytest.raises(RemoteRequestError):
        await http_client.jobs.get("nope")


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [400, 401, 500, 503])
async def test_error_status_raises(http_client, backend, status):
    backend.app[STATE]["fail_status"] = status

    with pytest.raises(RemoteRequestError):
        await http_client.jobs.list()


@pytest.mark.asyncio
async def test_unreadable_body_raises(http_client, backend):
    backend.app[STATE]["raw_body"] = "{not json"

    with pytest.raises(RemoteRequestError):
        await http_client.jobs.list()


@pytest.mark.asyncio
async def test_unexpected_list_shape_raises(http_client, backend):
    backend.app[STATE]["raw_body"] = "[1, 2, 3]"

    with pytest.raises(RemoteRequestError):
        await http_client.jobs.list()


@pytest.mark.asyncio
async def test_connection_failure_raises():
    """Test an unreachable backend surfaces as RemoteRequestError."""
    server = TestServer(web.Application())
    await server.start_server()
    origin = f"http://{server.host}:{server.port}"
    await server.close()

    client = HttpEntityClient.create(project_id=PROJECT, api_base_url=origin, auth_origin=origin, timeout_s=2)
    try:
        with pytest.raises(RemoteRequestError):
            await client.jobs.list()
    finally:
        await client.close()


# ============================================================
# AUTH TESTS
# ============================================================

@pytest.mark.asyncio
async def test_sign_in_sets_bearer_token(http_client, backend):
    user = await http_client.auth.sign_in("ada@example.com")

    assert user.user_id == "u-1"
    assert user.user_name == "ada"
    assert http_client.auth.is_authenticated

    await http_client.jobs.list()
    assert _requests(backend)[-1]["authorization"] == f"Bearer {TOKEN}"


@pytest.mark.asyncio
async def test_anonymous_requests_have_no_token(http_client, backend):
    await http_client.jobs.list()

    assert _requests(backend)[-1]["authorization"] is None


@pytest.mark.asyncio
async def test_sign_out_clears_session(http_client, backend):
    await http_client.auth.sign_in("ada@example.com", user_name="Ada Lovelace")

    await http_client.auth.sign_out()

    assert _requests(backend)[-1]["path"] == f"/v1/projects/{PROJECT}/auth/sign-out"
    assert http_client.auth.current_user is None
    await http_client.jobs.list()
    assert _requests(backend)[-1]["authorization"] is None


@pytest.mark.asyncio
async def test_sign_out_clears_session_when_backend_fails(http_client, backend):
    await http_client.auth.sign_in("ada@example.com")
    backend.app[STATE]["fail_status"] = 500

    with pytest.raises(RemoteRequestError):
        await http_client.auth.sign_out()

    assert http_client.auth.current_user is None


# ============================================================
# STORE INTEGRATION TESTS
# ============================================================

@pytest.mark.asyncio
async def test_store_runs_on_http_client(http_client, backend):
    """Test the portal store works unchanged against the hosted backend."""
    store = JobPortalStore(http_client)
    await store.load_initial()

    assert [job.id for job in store.jobs] == ["job-backend", "job-sales", "job-designer"]
    assert [company.name for company in store.companies] == ["Acme Corp", "Globex", "Initech"]

    await store.apply_for_job("job-backend", {"expectedSalary": 100000, "applicantId": "u-1"})

    assert backend.app[STATE]["collections"]["jobs"]["job-backend"]["applicationsCount"] == 5
    assert store.has_user_applied("job-backend", "u-1")
    await store.close()
