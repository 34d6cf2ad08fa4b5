"""Entity client implementations and the factory that picks one from settings."""
import logging

from jobboard.clients.base import AuthClient, EntityClient, EntityCollection, EntityList
from jobboard.clients.http import HttpEntityClient
from jobboard.clients.local import LocalEntityClient
from jobboard.config import Settings

logger = logging.getLogger(__name__)


async def build_entity_client(settings: Settings) -> EntityClient:
    """
    Construct the configured entity client.

    "remote" talks to the hosted backend, "local" to the SQL database at
    DATABASE_URL.

    Raises:
        ValueError: If the backend name is unknown or the remote project is not configured
    """
    backend = settings.backend.lower()
    if backend == "remote":
        if not settings.lumi_project_id:
            raise ValueError("LUMI_PROJECT_ID is required when BACKEND=remote")
        logger.info(f"Using hosted entity backend at {settings.lumi_api_base_url}")
        return HttpEntityClient.create(
            project_id=settings.lumi_project_id,
            api_base_url=settings.lumi_api_base_url,
            auth_origin=settings.lumi_auth_origin,
            timeout_s=settings.request_timeout_s,
        )
    if backend == "local":
        logger.info("Using local entity backend")
        return await LocalEntityClient.from_url(settings.database_url, echo=settings.debug)
    raise ValueError(f"Unknown entity backend: {settings.backend}")


__all__ = [
    "AuthClient",
    "EntityClient",
    "EntityCollection",
    "EntityList",
    "HttpEntityClient",
    "LocalEntityClient",
    "build_entity_client",
]
