"""
Job portal state.

Owns the in-memory copies of jobs, companies and the signed-in user's
applications, and orchestrates every fetch and mutation against the entity
client. Policy:
- fetches log and notify on failure and keep the previous state;
- mutations notify and re-raise so the calling form can stay open;
- local state is replaced (never mutated in place) after each successful call.
"""
import asyncio
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple, Union

from jobboard.clients.base import COMPANIES, DESCENDING, ASCENDING, JOB_APPLICATIONS, JOBS, EntityClient
from jobboard.exceptions import DuplicateApplicationError, RemoteRequestError
from jobboard.schemas.application import (
    APPLICATION_STATUS_PENDING,
    ApplicationCreate,
    JobApplication,
)
from jobboard.schemas.base import decode_entities, decode_entity
from jobboard.schemas.company import Company
from jobboard.schemas.job import Job, JobCreate
from jobboard.schemas.portal import PortalStats
from jobboard.services.in_flight import InFlightRequests
from jobboard.services.job_filter import FiltersLike, filter_jobs
from jobboard.services.notifications import Notifier

logger = logging.getLogger(__name__)

FEATURED_JOBS_LIMIT = 3


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _query_key(filter: Optional[Mapping[str, Any]]) -> str:
    if not filter:
        return ""
    return json.dumps(filter, sort_keys=True, default=str)


class JobPortalStore:
    """
    Domain state for the job board.

    The entity client is injected; the store never builds one itself.
    """

    def __init__(self, client: EntityClient, notifier: Optional[Notifier] = None):
        self._client = client
        self.notifier = notifier or Notifier()
        self.jobs: List[Job] = []
        self.companies: List[Company] = []
        self.applications: List[JobApplication] = []
        self._loading_count = 0
        self._in_flight = InFlightRequests()
        # (job_id, applicant_id) pairs whose application is being submitted
        self._pending_applications: Set[Tuple[str, str]] = set()

    @property
    def client(self) -> EntityClient:
        return self._client

    @property
    def loading(self) -> bool:
        """True while a jobs or companies fetch is outstanding."""
        return self._loading_count > 0

    # ------------------------------------------------------------
    # FETCHES
    # ------------------------------------------------------------

    async def load_initial(self) -> None:
        """Fetch jobs and companies concurrently."""
        await asyncio.gather(self.fetch_jobs(), self.fetch_companies())

    async def fetch_jobs(self, filter: Optional[Dict[str, Any]] = None) -> List[Job]:
        """
        Fetch jobs newest first. An identical fetch already in flight is joined.

        Returns:
            The jobs held after the fetch (the previous list if it failed)
        """
        key = (JOBS, _query_key(filter))
        return await self._in_flight.run(key, lambda: self._load_jobs(filter))

    async def fetch_companies(self) -> List[Company]:
        """Fetch companies sorted by name."""
        return await self._in_flight.run((COMPANIES, ""), self._load_companies)

    async def fetch_user_applications(self, user_id: str) -> List[JobApplication]:
        """Fetch one applicant's applications newest first. Does not touch the loading flag."""
        return await self._in_flight.run(
            (JOB_APPLICATIONS, user_id),
            lambda: self._load_applications(user_id),
        )

    async def _load_jobs(self, filter: Optional[Dict[str, Any]]) -> List[Job]:
        self._loading_count += 1
        try:
            response = await self._client.jobs.list(filter=filter or None, sort={"createdAt": DESCENDING})
            self.jobs = decode_entities(Job, response["list"])
            logger.info(f"Fetched {len(self.jobs)} jobs (filter={filter})")
        except RemoteRequestError as e:
            logger.error(f"Failed to fetch jobs: {e}", exc_info=True)
            self.notifier.error("Failed to load jobs")
        finally:
            self._loading_count -= 1
        return self.jobs

    async def _load_companies(self) -> List[Company]:
        self._loading_count += 1
        try:
            response = await self._client.companies.list(sort={"name": ASCENDING})
            self.companies = decode_entities(Company, response["list"])
            logger.info(f"Fetched {len(self.companies)} companies")
        except RemoteRequestError as e:
            logger.error(f"Failed to fetch companies: {e}", exc_info=True)
            self.notifier.error("Failed to load companies")
        finally:
            self._loading_count -= 1
        return self.companies

    async def _load_applications(self, user_id: str) -> List[JobApplication]:
        try:
            response = await self._client.job_applications.list(
                filter={"applicantId": user_id},
                sort={"appliedAt": DESCENDING},
            )
            self.applications = decode_entities(JobApplication, response["list"])
            logger.info(f"Fetched {len(self.applications)} applications for user {user_id}")
        except RemoteRequestError as e:
            logger.error(f"Failed to fetch applications for user {user_id}: {e}", exc_info=True)
            self.notifier.error("Failed to load applications")
        return self.applications

    async def get_job_by_id(self, job_id: str) -> Job:
        """
        Fetch one job straight from the backend (not cached).

        Raises:
            RemoteRequestError: If the job cannot be loaded
        """
        try:
            return decode_entity(Job, await self._client.jobs.get(job_id))
        except RemoteRequestError as e:
            logger.error(f"Failed to fetch job {job_id}: {e}", exc_info=True)
            raise

    # ------------------------------------------------------------
    # MUTATIONS
    # ------------------------------------------------------------

    async def create_job(self, payload: Union[JobCreate, Mapping[str, Any]]) -> Job:
        """
        Post a new job with a zero applications counter and the current time
        as its creation timestamp, then put it at the top of the list.

        Raises:
            RemoteRequestError: If the backend rejects the job
        """
        if not isinstance(payload, JobCreate):
            payload = JobCreate.model_validate(payload)

        document = {
            **payload.to_wire(exclude_none=True),
            "applicationsCount": 0,
            "createdAt": _utcnow().isoformat(),
        }
        try:
            job = decode_entity(Job, await self._client.jobs.create(document))
        except RemoteRequestError as e:
            logger.error(f"Failed to create job {payload.title!r}: {e}", exc_info=True)
            self.notifier.error("Failed to post job")
            raise

        self.jobs = [job, *self.jobs]
        logger.info(f"Created job {job.id}: {job.title} at {job.company}")
        self.notifier.success("Job posted successfully")
        return job

    async def apply_for_job(
        self,
        job_id: str,
        application: Union[ApplicationCreate, Mapping[str, Any]],
    ) -> JobApplication:
        """
        Submit an application, then bump the job's applications counter.

        The two writes are not atomic. If the counter update fails after the
        application was created, the application stands, the local counter
        keeps its increment, and the remote counter stays stale.

        Raises:
            DuplicateApplicationError: If the applicant already applied to this
                job or an identical submission is still in flight
            RemoteRequestError: If the application itself cannot be created
        """
        if not isinstance(application, ApplicationCreate):
            application = ApplicationCreate.model_validate(application)

        pair = (job_id, application.applicant_id)
        if pair in self._pending_applications or self.has_user_applied(*pair):
            logger.warning(f"Rejected duplicate application of {application.applicant_id} to job {job_id}")
            raise DuplicateApplicationError(*pair)

        document = {
            "jobId": job_id,
            **application.to_wire(),
            "status": APPLICATION_STATUS_PENDING,
            "appliedAt": _utcnow().isoformat(),
        }
        self._pending_applications.add(pair)
        try:
            submitted = decode_entity(JobApplication, await self._client.job_applications.create(document))
        except RemoteRequestError as e:
            logger.error(f"Failed to apply for job {job_id}: {e}", exc_info=True)
            self.notifier.error("Failed to submit application")
            raise
        finally:
            self._pending_applications.discard(pair)

        self.applications = [submitted, *self.applications]
        logger.info(f"Application {submitted.id} submitted for job {job_id} by {submitted.applicant_id}")

        job = self.find_job(job_id)
        if job is not None:
            new_count = job.applications_count + 1
            self._replace_job(job_id, applications_count=new_count)
            try:
                await self._client.jobs.update(job_id, {"applicationsCount": new_count})
            except RemoteRequestError as e:
                logger.warning(
                    f"Application {submitted.id} saved but counter of job {job_id} not updated: {e}",
                    exc_info=True,
                )

        self.notifier.success("Application submitted successfully")
        return submitted

    async def update_application_status(
        self,
        application_id: str,
        status: str,
        feedback: Optional[str] = None,
    ) -> Optional[JobApplication]:
        """
        Change an application's status (and feedback, when given).

        Returns:
            The updated cached application, or None if it is not cached locally

        Raises:
            RemoteRequestError: If the backend update fails
        """
        now = _utcnow()
        patch: Dict[str, Any] = {"status": status, "updatedAt": now.isoformat()}
        if feedback:
            patch["feedback"] = feedback

        try:
            await self._client.job_applications.update(application_id, patch)
        except RemoteRequestError as e:
            logger.error(f"Failed to update application {application_id}: {e}", exc_info=True)
            self.notifier.error("Failed to update application status")
            raise

        local_update: Dict[str, Any] = {"status": status, "updated_at": now}
        if feedback:
            local_update["feedback"] = feedback

        updated: Optional[JobApplication] = None
        applications = []
        for existing in self.applications:
            if existing.id == application_id:
                existing = existing.model_copy(update=local_update)
                updated = existing
            applications.append(existing)
        self.applications = applications

        logger.info(f"Application {application_id} status -> {status}")
        self.notifier.success("Application status updated")
        return updated

    # ------------------------------------------------------------
    # QUERIES
    # ------------------------------------------------------------

    def has_user_applied(self, job_id: str, user_id: str) -> bool:
        """Membership test over the cached applications (no network)."""
        return any(
            app.job_id == job_id and app.applicant_id == user_id
            for app in self.applications
        )

    def find_job(self, job_id: str) -> Optional[Job]:
        return next((job for job in self.jobs if job.id == job_id), None)

    def filtered_jobs(self, filters: FiltersLike = None) -> List[Job]:
        return filter_jobs(self.jobs, filters)

    def featured_jobs(self, limit: int = FEATURED_JOBS_LIMIT) -> List[Job]:
        """Newest jobs for the landing page."""
        return self.jobs[:limit]

    def stats(self) -> PortalStats:
        return PortalStats(active_jobs=len(self.jobs), companies=len(self.companies))

    def reset_applications(self) -> None:
        """
        Forget the cached applications (on sign-in and sign-out).

        Application fetches still in flight are cancelled so a late response
        for the previous user cannot refill the cache.
        """
        cancelled = self._in_flight.cancel_where(lambda key: key[0] == JOB_APPLICATIONS)
        if cancelled:
            logger.info(f"Cancelled {cancelled} pending application fetch(es)")
        self.applications = []

    async def close(self) -> None:
        """Cancel outstanding fetches; cancelled fetches leave state untouched."""
        await self._in_flight.cancel_all()

    def _replace_job(self, job_id: str, **changes: Any) -> None:
        self.jobs = [
            job.model_copy(update=changes) if job.id == job_id else job
            for job in self.jobs
        ]
