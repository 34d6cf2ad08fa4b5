"""
HTTP client for the hosted entity backend.

Wire format:
    GET    {api}/v1/projects/{project}/entities/{collection}?filter=<json>&sort=<json>
    GET    {api}/v1/projects/{project}/entities/{collection}/{id}
    POST   {api}/v1/projects/{project}/entities/{collection}
    PATCH  {api}/v1/projects/{project}/entities/{collection}/{id}
    POST   {auth}/v1/projects/{project}/auth/sign-in | sign-out

Every failure (connection, timeout, non-2xx status, unreadable JSON) surfaces
as RemoteRequestError; the portal does not distinguish between them.
"""
import asyncio
import json
import logging
from typing import Any, Dict, Optional

import aiohttp

from jobboard.clients.base import (
    COMPANIES,
    JOB_APPLICATIONS,
    JOBS,
    EntityList,
    user_name_from_email,
)
from jobboard.exceptions import RemoteRequestError
from jobboard.schemas.auth import User
from jobboard.schemas.base import decode_entity

logger = logging.getLogger(__name__)

USER_AGENT = "jobboard/1.0"


class HttpSession:
    """
    Shared aiohttp session plus the bearer token of the signed-in user.
    """

    def __init__(self, session: aiohttp.ClientSession, timeout_s: float = 15.0):
        self.session = session
        self.timeout = aiohttp.ClientTimeout(total=timeout_s)
        self.access_token: Optional[str] = None

    def headers(self) -> Dict[str, str]:
        headers = {"User-Agent": USER_AGENT, "Accept": "application/json"}
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        return headers

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Dict[str, str]] = None,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Send one request and return the decoded JSON body."""
        try:
            async with self.session.request(
                method,
                url,
                params=params,
                json=json_body,
                headers=self.headers(),
                timeout=self.timeout,
            ) as resp:
                if resp.status >= 400:
                    body_text = await resp.text(errors="ignore")
                    logger.warning(f"{method} {url} -> {resp.status}: {body_text[:200]!r}")
                    raise RemoteRequestError(f"{method} {url} failed with status {resp.status}")
                if resp.status == 204:
                    return None
                return await resp.json(content_type=None)
        except RemoteRequestError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError, json.JSONDecodeError) as e:
            logger.error(f"{method} {url} failed: {type(e).__name__}: {str(e)[:200]}")
            raise RemoteRequestError(f"{method} {url} failed: {type(e).__name__}") from e


class HttpEntityCollection:
    """One collection of the hosted backend."""

    def __init__(self, name: str, http: HttpSession, base_url: str):
        self.name = name
        self._http = http
        self._url = f"{base_url}/entities/{name}"

    async def list(
        self,
        filter: Optional[Dict[str, Any]] = None,
        sort: Optional[Dict[str, int]] = None,
    ) -> EntityList:
        params = {}
        if filter:
            params["filter"] = json.dumps(filter, separators=(",", ":"))
        if sort:
            params["sort"] = json.dumps(sort, separators=(",", ":"))

        data = await self._http.request("GET", self._url, params=params or None)
        if not isinstance(data, dict):
            raise RemoteRequestError(f"Unexpected list response for {self.name}")
        documents = data.get("list") or []
        if not isinstance(documents, list):
            raise RemoteRequestError(f"Unexpected list response for {self.name}")
        return {"list": documents, "total": data.get("total", len(documents))}

    async def get(self, entity_id: str) -> Dict[str, Any]:
        return self._expect_document(await self._http.request("GET", f"{self._url}/{entity_id}"))

    async def create(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._expect_document(await self._http.request("POST", self._url, json_body=payload))

    async def update(self, entity_id: str, patch: Dict[str, Any]) -> Dict[str, Any]:
        return self._expect_document(
            await self._http.request("PATCH", f"{self._url}/{entity_id}", json_body=patch)
        )

    def _expect_document(self, data: Any) -> Dict[str, Any]:
        if not isinstance(data, dict):
            raise RemoteRequestError(f"Unexpected {self.name} response: {type(data).__name__}")
        return data


class HttpAuthClient:
    """Session API of the hosted backend."""

    def __init__(self, http: HttpSession, auth_url: str):
        self._http = http
        self._auth_url = auth_url
        self._current_user: Optional[User] = None

    @property
    def current_user(self) -> Optional[User]:
        return self._current_user

    @property
    def is_authenticated(self) -> bool:
        return self._current_user is not None

    async def sign_in(self, email: str, user_name: Optional[str] = None) -> User:
        data = await self._http.request(
            "POST",
            f"{self._auth_url}/sign-in",
            json_body={"email": email, "userName": user_name or user_name_from_email(email)},
        )
        if not isinstance(data, dict) or "user" not in data:
            raise RemoteRequestError("Unexpected sign-in response")

        user = decode_entity(User, data["user"])
        self._http.access_token = data.get("accessToken")
        self._current_user = user
        logger.info(f"Signed in {user.email}")
        return user

    async def sign_out(self) -> None:
        try:
            if self._http.access_token:
                await self._http.request("POST", f"{self._auth_url}/sign-out")
        finally:
            # The local session ends even if the backend call fails
            self._http.access_token = None
            self._current_user = None


class HttpEntityClient:
    """Entity client for the hosted backend, constructed once at startup."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        project_id: str,
        api_base_url: str,
        auth_origin: str,
        timeout_s: float = 15.0,
        owns_session: bool = False,
    ):
        self._session = session
        self._owns_session = owns_session
        self._http = HttpSession(session, timeout_s=timeout_s)

        base_url = f"{api_base_url.rstrip('/')}/v1/projects/{project_id}"
        self.jobs = HttpEntityCollection(JOBS, self._http, base_url)
        self.companies = HttpEntityCollection(COMPANIES, self._http, base_url)
        self.job_applications = HttpEntityCollection(JOB_APPLICATIONS, self._http, base_url)
        self.auth = HttpAuthClient(
            self._http,
            f"{auth_origin.rstrip('/')}/v1/projects/{project_id}/auth",
        )

    @classmethod
    def create(
        cls,
        project_id: str,
        api_base_url: str,
        auth_origin: str,
        timeout_s: float = 15.0,
    ) -> "HttpEntityClient":
        """Build a client with its own aiohttp session (closed by close())."""
        return cls(
            aiohttp.ClientSession(),
            project_id=project_id,
            api_base_url=api_base_url,
            auth_origin=auth_origin,
            timeout_s=timeout_s,
            owns_session=True,
        )

    async def close(self) -> None:
        if self._owns_session and not self._session.closed:
            await self._session.close()
