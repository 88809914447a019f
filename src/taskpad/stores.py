"""Task and project stores backed by a key-value store.

Each store owns its collection in memory. Mutations update memory first and
then persist the full collection through a WriteQueue, which serialises writes
per key so an older snapshot can never land after a newer one.
"""

import asyncio
import datetime
import logging
import time
from dataclasses import replace
from typing import Callable, Generic, TypeVar

from .core.tasks import (
    DEFAULT_PRIORITY,
    Project,
    Task,
    decode_projects,
    decode_tasks,
    encode_projects,
    encode_tasks,
    next_id,
    parse_tags,
)
from .errors import NotFoundError, StorageError, ValidationError
from .ports import KeyValueStore

logger = logging.getLogger(__name__)

TASKS_KEY = "tasks"
PROJECTS_KEY = "projects"

T = TypeVar("T", Task, Project)


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


class WriteQueue:
    """Serialises writes per key; writes to one key land in submission order."""

    def __init__(self, backend: KeyValueStore):
        self.backend = backend
        self._locks: dict[str, asyncio.Lock] = {}

    async def write(self, key: str, value: str) -> None:
        lock = self._locks.setdefault(key, asyncio.Lock())
        async with lock:
            try:
                await self.backend.store(key, value)
            except StorageError:
                raise
            except OSError as e:
                raise StorageError(f"Failed to store {key!r}: {e}") from e


class _CollectionStore(Generic[T]):
    """Shared load/persist plumbing for a single collection key."""

    key: str

    def __init__(
        self,
        backend: KeyValueStore,
        queue: WriteQueue | None = None,
        clock: Callable[[], int] = _now_ms,
    ):
        self.backend = backend
        self._queue = queue or WriteQueue(backend)
        self._clock = clock
        self._items: list[T] = []
        self._last_id = 0
        self._version = 0
        self._saved_version = 0

    # ---- serialisation hooks ----

    def _encode(self, items: list[T]) -> str:
        raise NotImplementedError

    def _decode(self, blob: str) -> list[T]:
        raise NotImplementedError

    @staticmethod
    def _copy(item: T) -> T:
        return replace(item)

    # ---- persistence ----

    async def load(self) -> None:
        """Replace the in-memory collection with the persisted one."""
        try:
            blob = await self.backend.load(self.key)
        except StorageError:
            raise
        except OSError as e:
            raise StorageError(f"Failed to load {self.key!r}: {e}") from e

        if blob is None:
            items: list[T] = []
        else:
            try:
                items = self._decode(blob)
            except (ValueError, TypeError, KeyError) as e:
                raise StorageError(f"Corrupt {self.key!r} data: {e}") from e

        self._items = items
        self._last_id = max((item.id for item in items), default=0)
        self._version = self._saved_version = 0
        logger.info("Loaded %d %s", len(items), self.key)

    async def _persist(self) -> None:
        """Write the current snapshot. In-memory state is kept on failure."""
        self._version += 1
        version = self._version
        blob = self._encode(self._items)
        try:
            await self._queue.write(self.key, blob)
        except StorageError:
            logger.warning("Persisting %s failed; %d item(s) held in memory", self.key, len(self._items))
            raise
        self._saved_version = max(self._saved_version, version)

    @property
    def dirty(self) -> bool:
        """True while the latest mutation has not been persisted."""
        return self._saved_version < self._version

    async def flush(self) -> None:
        """Retry persisting the current snapshot if a previous write failed."""
        if self.dirty:
            await self._persist()

    def _allocate_id(self) -> int:
        self._last_id = next_id(self._last_id, self._clock())
        return self._last_id

    def _index_of(self, item_id: int) -> int | None:
        for i, item in enumerate(self._items):
            if item.id == item_id:
                return i
        return None

    # ---- reads ----

    def get(self, item_id: int) -> T | None:
        index = self._index_of(item_id)
        return self._copy(self._items[index]) if index is not None else None

    def list(self) -> list[T]:
        """Current collection in insertion order."""
        return [self._copy(item) for item in self._items]

    def __len__(self) -> int:
        return len(self._items)


class TaskStore(_CollectionStore[Task]):
    """Owns the task collection."""

    key = TASKS_KEY

    def _encode(self, items: list[Task]) -> str:
        return encode_tasks(items)

    def _decode(self, blob: str) -> list[Task]:
        return decode_tasks(blob)

    @staticmethod
    def _copy(item: Task) -> Task:
        return replace(item, tags=list(item.tags))

    async def create(
        self,
        title: str,
        desc: str = "",
        tags: str | list[str] | None = None,
        priority: str = DEFAULT_PRIORITY,
        date: str | None = None,
        project: int | None = None,
    ) -> Task:
        """
        Add a task and persist the collection.

        Raises ValidationError if title is blank; the collection is untouched.
        """
        if not title or not title.strip():
            raise ValidationError("title is required")

        task = Task(
            id=self._allocate_id(),
            title=title,
            desc=desc or "",
            tags=parse_tags(tags),
            priority=priority,
            date=date if date is not None else datetime.date.today().isoformat(),
            project=project,
        )
        self._items.append(task)
        logger.debug("Task added id=%s title=%r", task.id, task.title)
        await self._persist()
        return self._copy(task)

    async def update(self, task_id: int, new_record: Task, *, missing_ok: bool = True) -> bool:
        """
        Replace the task with task_id by new_record as a whole.

        The stored record keeps task_id as its id and its tags pass through
        parse_tags, so a comma-separated string is split. Returns False (or raises
        NotFoundError when missing_ok is False) if no task matches.
        """
        index = self._index_of(task_id)
        if index is None:
            if not missing_ok:
                raise NotFoundError(f"No task with id {task_id}")
            return False

        self._items[index] = replace(new_record, id=task_id, tags=parse_tags(new_record.tags))
        logger.debug("Task updated id=%s", task_id)
        await self._persist()
        return True

    async def delete(self, task_id: int, *, missing_ok: bool = True) -> bool:
        """Remove the task with task_id. Deleting an absent id is a no-op."""
        index = self._index_of(task_id)
        if index is None:
            if not missing_ok:
                raise NotFoundError(f"No task with id {task_id}")
            return False

        del self._items[index]
        logger.debug("Task deleted id=%s", task_id)
        await self._persist()
        return True


class ProjectStore(_CollectionStore[Project]):
    """Owns the project collection. Projects cannot be edited or removed."""

    key = PROJECTS_KEY

    def _encode(self, items: list[Project]) -> str:
        return encode_projects(items)

    def _decode(self, blob: str) -> list[Project]:
        return decode_projects(blob)

    async def create(self, name: str) -> Project:
        """Add a project. Raises ValidationError if name is blank."""
        if not name or not name.strip():
            raise ValidationError("name is required")

        project = Project(id=self._allocate_id(), name=name)
        self._items.append(project)
        logger.debug("Project added id=%s name=%r", project.id, project.name)
        await self._persist()
        return self._copy(project)
