"""
Local entity backend.

Implements the remote entity client interface on top of a SQL database so the
portal can run (and be tested) without the hosted backend. Each entity is one
EntityRecord row holding the JSON document exactly as the hosted backend would
return it.
"""
import functools
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker

from jobboard.clients.base import (
    COMPANIES,
    JOB_APPLICATIONS,
    JOBS,
    EntityList,
    user_name_from_email,
)
from jobboard.database import create_tables, make_engine, make_sessionmaker
from jobboard.exceptions import RemoteRequestError
from jobboard.models.entity_record import EntityRecord, new_entity_id
from jobboard.schemas.auth import User

logger = logging.getLogger(__name__)

USERS = "users"


def _matches(document: Dict[str, Any], filter: Optional[Dict[str, Any]]) -> bool:
    """Exact-match every filter field."""
    if not filter:
        return True
    return all(document.get(field) == value for field, value in filter.items())


def _compare_values(a: Any, b: Any) -> int:
    if a is None and b is None:
        return 0
    # Missing values always sort last, whatever the direction
    if a is None:
        return 1
    if b is None:
        return -1
    try:
        return (a > b) - (a < b)
    except TypeError:
        a, b = str(a), str(b)
        return (a > b) - (a < b)


def _sort_documents(documents: List[Dict[str, Any]], sort: Optional[Dict[str, int]]) -> List[Dict[str, Any]]:
    """Stable multi-field sort; direction 1 is ascending, -1 descending."""
    if not sort:
        return documents

    def compare(left: Dict[str, Any], right: Dict[str, Any]) -> int:
        for field, direction in sort.items():
            a, b = left.get(field), right.get(field)
            result = _compare_values(a, b)
            if result and a is not None and b is not None and direction < 0:
                result = -result
            if result:
                return result
        return 0

    return sorted(documents, key=functools.cmp_to_key(compare))


class LocalEntityCollection:
    """One collection stored in the entity_records table."""

    def __init__(self, name: str, sessionmaker: async_sessionmaker):
        self.name = name
        self._sessionmaker = sessionmaker

    async def list(
        self,
        filter: Optional[Dict[str, Any]] = None,
        sort: Optional[Dict[str, int]] = None,
    ) -> EntityList:
        try:
            async with self._sessionmaker() as db:
                result = await db.execute(
                    select(EntityRecord)
                    .where(EntityRecord.collection == self.name)
                    .order_by(EntityRecord.created_at.asc())
                )
                documents = [record.document for record in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error(f"Failed to list {self.name}: {e}", exc_info=True)
            raise RemoteRequestError(f"Failed to list {self.name}") from e

        documents = _sort_documents([d for d in documents if _matches(d, filter)], sort)
        logger.debug(f"Listed {len(documents)} {self.name} (filter={filter}, sort={sort})")
        return {"list": documents, "total": len(documents)}

    async def get(self, entity_id: str) -> Dict[str, Any]:
        try:
            async with self._sessionmaker() as db:
                record = await self._load(db, entity_id)
                return record.document
        except SQLAlchemyError as e:
            logger.error(f"Failed to get {self.name} {entity_id}: {e}", exc_info=True)
            raise RemoteRequestError(f"Failed to get {self.name} {entity_id}") from e

    async def create(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        entity_id = str(payload.get("_id") or new_entity_id())
        document = {**payload, "_id": entity_id}
        try:
            async with self._sessionmaker() as db:
                db.add(EntityRecord(id=entity_id, collection=self.name, document=document))
                await db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to create {self.name}: {e}", exc_info=True)
            raise RemoteRequestError(f"Failed to create {self.name}") from e

        logger.info(f"Created {self.name} {entity_id}")
        return document

    async def update(self, entity_id: str, patch: Dict[str, Any]) -> Dict[str, Any]:
        try:
            async with self._sessionmaker() as db:
                record = await self._load(db, entity_id)
                document = {**record.document, **patch, "_id": record.id}
                # Reassign so the JSON column is flagged as modified
                record.document = document
                await db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to update {self.name} {entity_id}: {e}", exc_info=True)
            raise RemoteRequestError(f"Failed to update {self.name} {entity_id}") from e

        logger.info(f"Updated {self.name} {entity_id}: {sorted(patch)}")
        return document

    async def _load(self, db, entity_id: str) -> EntityRecord:
        result = await db.execute(
            select(EntityRecord).where(
                EntityRecord.collection == self.name,
                EntityRecord.id == entity_id,
            )
        )
        record = result.scalar_one_or_none()
        if record is None:
            raise RemoteRequestError(f"{self.name} {entity_id} not found")
        return record


class LocalAuthClient:
    """
    Passwordless sessions against the local users collection.

    Signing in with an unknown email registers it, the way the hosted
    backend's login popup does on first use.
    """

    def __init__(self, sessionmaker: async_sessionmaker):
        self._users = LocalEntityCollection(USERS, sessionmaker)
        self._current_user: Optional[User] = None

    @property
    def current_user(self) -> Optional[User]:
        return self._current_user

    @property
    def is_authenticated(self) -> bool:
        return self._current_user is not None

    async def sign_in(self, email: str, user_name: Optional[str] = None) -> User:
        email = email.strip().lower()
        response = await self._users.list(filter={"email": email})
        if response["list"]:
            document = response["list"][0]
        else:
            document = await self._users.create({
                "email": email,
                "userName": user_name or user_name_from_email(email),
            })
            logger.info(f"Registered local user {email}")

        self._current_user = User(
            user_id=document["_id"],
            user_name=document.get("userName") or user_name_from_email(email),
            email=document["email"],
        )
        logger.info(f"Signed in {email}")
        return self._current_user

    async def sign_out(self) -> None:
        if self._current_user:
            logger.info(f"Signed out {self._current_user.email}")
        self._current_user = None


class LocalEntityClient:
    """Entity client backed by a SQL database through async SQLAlchemy."""

    def __init__(self, sessionmaker: async_sessionmaker, engine: Optional[AsyncEngine] = None):
        self._engine = engine
        self.jobs = LocalEntityCollection(JOBS, sessionmaker)
        self.companies = LocalEntityCollection(COMPANIES, sessionmaker)
        self.job_applications = LocalEntityCollection(JOB_APPLICATIONS, sessionmaker)
        self.auth = LocalAuthClient(sessionmaker)

    @classmethod
    async def from_url(cls, database_url: str, echo: bool = False) -> "LocalEntityClient":
        """Create the engine and tables, and return a client that owns the engine."""
        engine = make_engine(database_url, echo=echo)
        await create_tables(engine)
        logger.info("Local entity backend ready")
        return cls(make_sessionmaker(engine), engine=engine)

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
