"""
FastAPI application entry point for the job board.

This is the main app that:
- Builds the entity client and the portal store at startup
- Loads jobs and companies before serving
- Registers all API routers
- Provides health check endpoint
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from jobboard.api import applications, auth, companies, home, jobs, notifications
from jobboard.clients import build_entity_client
from jobboard.config import settings
from jobboard.services.job_portal import JobPortalStore

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    On startup: construct the entity client, inject it into the store and
    load jobs and companies concurrently.
    On shutdown: cancel in-flight fetches and close the client.
    """
    logger.info("Starting job board API...")
    logger.info(f"Entity backend: {settings.backend}")
    logger.info(f"Debug mode: {settings.debug}")

    client = await build_entity_client(settings)
    store = JobPortalStore(client)
    app.state.store = store
    await store.load_initial()

    yield

    logger.info("Shutting down job board API...")
    await store.close()
    await client.close()


app = FastAPI(
    title="Job Board API",
    description="Browse, filter and apply to job postings",
    version="1.0.0",
    debug=settings.debug,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check():
    """Simple health check endpoint."""
    return {
        "status": "healthy",
        "service": "Job Board API",
        "version": "1.0.0",
    }


@app.get("/")
async def root():
    """API root with basic info."""
    return {
        "message": "Job Board API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
    }


# Register API routers
app.include_router(home.router, prefix="/api", tags=["home"])
app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(jobs.router, prefix="/api/jobs", tags=["jobs"])
app.include_router(companies.router, prefix="/api/companies", tags=["companies"])
app.include_router(applications.router, prefix="/api/applications", tags=["applications"])
app.include_router(notifications.router, prefix="/api/notifications", tags=["notifications"])
