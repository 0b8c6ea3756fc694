"""SQLAlchemy-backed project/task storage.

Runs on SQLite through the ``aiosqlite`` async driver. ``Base``,
``ProjectModel`` and ``TaskModel`` use SQLAlchemy 2.0 ``Mapped[T]`` syntax.

Schema notes:
- ids are ``AUTOINCREMENT`` so identities are never reused
- ``tasks.project_id`` references ``projects.id`` with ``ON DELETE CASCADE``;
  ``PRAGMA foreign_keys=ON`` is issued on every new connection
- priority/status carry CHECK constraints mirroring the enums
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    case,
    delete,
    event,
    func,
    or_,
    select,
    update,
)
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.pool import StaticPool

from project_tracker.core.exceptions import (
    ConfigurationError,
    EmptyUpdateError,
    ProjectNotFoundError,
    StoreError,
    TaskNotFoundError,
)
from project_tracker.core.types import (
    PROJECT_UPDATE_FIELDS,
    TASK_UPDATE_FIELDS,
    FieldPatch,
    Project,
    ProjectListing,
    ProjectSummary,
    Task,
    TaskFilter,
    TaskPriority,
    TaskStatus,
)
from project_tracker.storage.tracker_store import TrackerStore
from project_tracker.utils.db_compat import (
    ASYNC_SQLITE_SCHEME,
    DbDialect,
    detect_dialect,
    is_memory_database,
    requires_static_pool,
    url_scheme,
)

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite stores the timestamp without its offset
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _sql_in(values: type[StrEnum]) -> str:
    return ", ".join(f"'{v.value}'" for v in values)


def _plain(value: Any) -> Any:
    # bind enum members as their string value
    return value.value if isinstance(value, StrEnum) else value


class Base(DeclarativeBase):
    pass


class ProjectModel(Base):
    """ORM model for the ``projects`` table."""

    __tablename__ = "projects"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    client: Mapped[str | None] = mapped_column(Text, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now()
    )

    def to_domain(self) -> Project:
        return Project(
            id=self.id,
            name=self.name,
            client=self.client,
            description=self.description,
            created_at=_as_utc(self.created_at),
            updated_at=_as_utc(self.updated_at),
        )


class TaskModel(Base):
    """ORM model for the ``tasks`` table."""

    __tablename__ = "tasks"
    __table_args__ = (
        CheckConstraint(f"priority IN ({_sql_in(TaskPriority)})", name="ck_tasks_priority"),
        CheckConstraint(f"status IN ({_sql_in(TaskStatus)})", name="ck_tasks_status"),
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    project_id: Mapped[int] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    description: Mapped[str] = mapped_column(Text, nullable=False)
    priority: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=TaskPriority.MEDIUM.value,
        server_default=TaskPriority.MEDIUM.value,
        index=True,
    )
    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=TaskStatus.PENDING.value,
        server_default=TaskStatus.PENDING.value,
        index=True,
    )
    category: Mapped[str | None] = mapped_column(Text, nullable=True, index=True)
    assignee: Mapped[str | None] = mapped_column(Text, nullable=True, index=True)
    due_date: Mapped[str | None] = mapped_column(String(10), nullable=True, index=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now()
    )

    def to_domain(self) -> Task:
        return Task(
            id=self.id,
            project_id=self.project_id,
            description=self.description,
            priority=TaskPriority(self.priority),
            status=TaskStatus(self.status),
            category=self.category,
            assignee=self.assignee,
            due_date=self.due_date,
            notes=self.notes,
            created_at=_as_utc(self.created_at),
            updated_at=_as_utc(self.updated_at),
        )


def _count_where(condition: Any) -> Any:
    # COUNT skips the NULL produced by CASE when the condition is false
    return func.count(case((condition, 1)))


class SQLAlchemyTrackerStore(TrackerStore):
    """SQLAlchemy async project/task store on SQLite.

    Example
    -------
    .. code-block:: python

        store = SQLAlchemyTrackerStore("sqlite+aiosqlite:///./tracker.db")
        await store.initialize()
        project_id = await store.create_project("Smoke Project", client="VSCode")

    Example (in-memory, for tests)
    ------------------------------
    .. code-block:: python

        store = SQLAlchemyTrackerStore("sqlite+aiosqlite:///:memory:")
        await store.initialize()
    """

    def __init__(
        self,
        database_url: str,
        echo: bool = False,
        enable_wal: bool = True,
    ) -> None:
        dialect = detect_dialect(database_url)
        if dialect != DbDialect.SQLITE:
            raise ConfigurationError(
                "database_url", f"unsupported dialect {dialect.value!r}; expected sqlite"
            )
        if url_scheme(database_url) != ASYNC_SQLITE_SCHEME:
            raise ConfigurationError(
                "database_url",
                f"unsupported driver {url_scheme(database_url)!r}; expected {ASYNC_SQLITE_SCHEME}",
            )

        kw: dict[str, Any] = {"echo": echo}
        if requires_static_pool(database_url):
            kw["poolclass"] = StaticPool
            kw["connect_args"] = {"check_same_thread": False}

        self.database_url = database_url
        self._use_wal = enable_wal and not is_memory_database(database_url)
        self.engine: AsyncEngine = create_async_engine(database_url, **kw)
        event.listen(self.engine.sync_engine, "connect", self._on_connect)
        self.session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
        logger.info(
            "SQLAlchemyTrackerStore url=%s wal=%s",
            self.engine.url.render_as_string(hide_password=True),
            self._use_wal,
        )

    def _on_connect(self, dbapi_connection: Any, connection_record: Any) -> None:
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute("PRAGMA foreign_keys=ON")
            if self._use_wal:
                cursor.execute("PRAGMA journal_mode=WAL")
        finally:
            cursor.close()

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncIterator[AsyncSession]:
        """Yield a session; driver errors are rolled back and raised as StoreError."""
        async with self.session_factory() as session:
            try:
                yield session
            except SQLAlchemyError as exc:
                await session.rollback()
                reason = str(getattr(exc, "orig", None) or exc)
                logger.error("Store operation %s failed: %s", operation, reason)
                raise StoreError(operation, reason) from exc

    async def initialize(self) -> None:
        """Create both tables and their indexes if missing (idempotent)."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Tracker tables ready")

    async def close(self) -> None:
        await self.engine.dispose()
        logger.info("SQLAlchemyTrackerStore closed")

    # -- projects ---------------------------------------------------------

    async def create_project(
        self,
        name: str,
        client: str | None = None,
        description: str | None = None,
    ) -> int:
        async with self._session("create_project") as session:
            now = _utcnow()
            model = ProjectModel(
                name=name,
                client=client,
                description=description,
                created_at=now,
                updated_at=now,
            )
            session.add(model)
            await session.commit()
            logger.info("Created project id=%s", model.id)
            return model.id

    async def get_projects(self, client: str | None = None) -> list[ProjectListing]:
        labels = ["total_tasks"] + [f"{s.name.lower()}_tasks" for s in TaskStatus]
        query = (
            select(
                ProjectModel,
                func.count(TaskModel.id),
                *(_count_where(TaskModel.status == s.value) for s in TaskStatus),
            )
            .outerjoin(TaskModel, TaskModel.project_id == ProjectModel.id)
            .group_by(ProjectModel.id)
            .order_by(ProjectModel.updated_at.desc(), ProjectModel.id.desc())
        )
        if client:
            query = query.where(ProjectModel.client == client)

        async with self._session("get_projects") as session:
            result = await session.execute(query)
            listings = []
            for model, *counts in result.all():
                listings.append(
                    ProjectListing(
                        **model.to_domain().model_dump(), **dict(zip(labels, counts))
                    )
                )
            return listings

    async def get_project(self, project_id: int) -> Project:
        async with self._session("get_project") as session:
            model = await session.get(ProjectModel, project_id)
            if model is None:
                raise ProjectNotFoundError(project_id)
            return model.to_domain()

    async def update_project(self, project_id: int, updates: Mapping[str, Any]) -> bool:
        patch = FieldPatch(PROJECT_UPDATE_FIELDS, updates)
        if patch.is_empty:
            raise EmptyUpdateError("project", details={"project_id": project_id})

        values = {k: _plain(v) for k, v in patch.items()}
        values["updated_at"] = _utcnow()
        async with self._session("update_project") as session:
            result = await session.execute(
                update(ProjectModel).where(ProjectModel.id == project_id).values(**values)
            )
            await session.commit()
            return result.rowcount > 0

    async def delete_project(self, project_id: int) -> bool:
        async with self._session("delete_project") as session:
            result = await session.execute(
                delete(ProjectModel).where(ProjectModel.id == project_id)
            )
            await session.commit()
            if result.rowcount > 0:
                logger.info("Deleted project id=%s", project_id)
            return result.rowcount > 0

    # -- tasks ------------------------------------------------------------

    async def _touch_project(self, session: AsyncSession, project_id: int, now: datetime) -> None:
        await session.execute(
            update(ProjectModel).where(ProjectModel.id == project_id).values(updated_at=now)
        )

    async def add_task(
        self,
        project_id: int,
        description: str,
        priority: TaskPriority | str = TaskPriority.MEDIUM,
        category: str | None = None,
        assignee: str | None = None,
        due_date: str | None = None,
    ) -> int:
        async with self._session("add_task") as session:
            now = _utcnow()
            model = TaskModel(
                project_id=project_id,
                description=description,
                priority=_plain(priority),
                category=category,
                assignee=assignee,
                due_date=due_date,
                created_at=now,
                updated_at=now,
            )
            session.add(model)
            await session.flush()
            await self._touch_project(session, project_id, now)
            await session.commit()
            logger.info("Created task id=%s project_id=%s", model.id, project_id)
            return model.id

    async def get_task(self, task_id: int) -> Task:
        async with self._session("get_task") as session:
            model = await session.get(TaskModel, task_id)
            if model is None:
                raise TaskNotFoundError(task_id)
            return model.to_domain()

    async def update_task(self, task_id: int, updates: Mapping[str, Any]) -> bool:
        patch = FieldPatch(TASK_UPDATE_FIELDS, updates)
        if patch.is_empty:
            raise EmptyUpdateError("task", details={"task_id": task_id})

        now = _utcnow()
        values = {k: _plain(v) for k, v in patch.items()}
        values["updated_at"] = now
        async with self._session("update_task") as session:
            result = await session.execute(
                update(TaskModel).where(TaskModel.id == task_id).values(**values)
            )
            if result.rowcount == 0:
                await session.rollback()
                return False
            project_id = await session.scalar(
                select(TaskModel.project_id).where(TaskModel.id == task_id)
            )
            if project_id is not None:
                await self._touch_project(session, project_id, now)
            await session.commit()
            return True

    async def get_tasks(self, task_filter: TaskFilter | None = None) -> list[Task]:
        f = task_filter or TaskFilter()
        query = select(TaskModel)
        if f.project_id:
            query = query.where(TaskModel.project_id == f.project_id)
        if f.status:
            query = query.where(TaskModel.status == f.status.value)
        if f.priority:
            query = query.where(TaskModel.priority == f.priority.value)
        if f.category:
            query = query.where(TaskModel.category == f.category)
        if f.assignee:
            query = query.where(TaskModel.assignee == f.assignee)
        if f.search:
            pattern = f"%{f.search}%"
            query = query.where(
                or_(TaskModel.description.like(pattern), TaskModel.notes.like(pattern))
            )
        query = query.order_by(TaskModel.created_at.desc(), TaskModel.id.desc())

        async with self._session("get_tasks") as session:
            result = await session.execute(query)
            return [m.to_domain() for m in result.scalars().all()]

    async def delete_task(self, task_id: int) -> bool:
        async with self._session("delete_task") as session:
            project_id = await session.scalar(
                select(TaskModel.project_id).where(TaskModel.id == task_id)
            )
            result = await session.execute(delete(TaskModel).where(TaskModel.id == task_id))
            if result.rowcount > 0 and project_id is not None:
                await self._touch_project(session, project_id, _utcnow())
            await session.commit()
            return result.rowcount > 0

    # -- aggregates -------------------------------------------------------

    async def get_project_summary(self, project_id: int) -> ProjectSummary:
        columns = [func.count(TaskModel.id).label("total")]
        columns += [
            _count_where(TaskModel.status == s.value).label(s.name.lower()) for s in TaskStatus
        ]
        columns += [
            _count_where(TaskModel.priority == p.value).label(p.name.lower())
            for p in TaskPriority
        ]
        query = select(*columns).where(TaskModel.project_id == project_id)

        async with self._session("get_project_summary") as session:
            row = (await session.execute(query)).one()
            return ProjectSummary.from_counts(row._mapping)

    async def get_assignees(self, project_id: int | None = None) -> list[str]:
        query = (
            select(TaskModel.assignee)
            .distinct()
            .where(TaskModel.assignee.is_not(None), TaskModel.assignee != "")
            .order_by(TaskModel.assignee)
        )
        if project_id:
            query = query.where(TaskModel.project_id == project_id)

        async with self._session("get_assignees") as session:
            result = await session.execute(query)
            return list(result.scalars().all())


__all__ = ["Base", "ProjectModel", "SQLAlchemyTrackerStore", "TaskModel"]
