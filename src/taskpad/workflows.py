"""Shared workflow layer between the CLI and any other front end.

A Workspace loads the task and project stores together and applies the
policies that span both collections, such as project reference checks.
"""

import logging
from dataclasses import dataclass, replace
from datetime import date
from pathlib import Path

from .adapters.file_store import FileKeyValueStore
from .config import DATA_DIR, Config
from .core.filters import Window, apply, filter_by_project, parse_date
from .core.tasks import Project, Task, parse_tags
from .errors import NotFoundError, ValidationError
from .ports import KeyValueStore
from .stores import ProjectStore, TaskStore, WriteQueue

logger = logging.getLogger(__name__)


def get_data_dir(config: Config) -> Path:
    """Resolve data directory from config."""
    if config.data_dir:
        return Path(config.data_dir).expanduser()
    return DATA_DIR


def get_backend(config: Config) -> FileKeyValueStore:
    return FileKeyValueStore(get_data_dir(config))


@dataclass
class Workspace:
    """Task and project stores sharing one backend and write queue."""

    tasks: TaskStore
    projects: ProjectStore
    strict_projects: bool = False
    default_priority: str = "Medium"

    @classmethod
    def create(cls, backend: KeyValueStore, config: Config | None = None) -> "Workspace":
        config = config or Config()
        queue = WriteQueue(backend)
        return cls(
            tasks=TaskStore(backend, queue),
            projects=ProjectStore(backend, queue),
            strict_projects=config.strict_projects,
            default_priority=config.default_priority,
        )

    async def load(self) -> None:
        await self.tasks.load()
        await self.projects.load()

    async def flush(self) -> None:
        """Retry any write that failed earlier."""
        await self.tasks.flush()
        await self.projects.flush()

    def _check_project(self, project: int | None) -> None:
        if project is None or not self.strict_projects:
            return
        if self.projects.get(project) is None:
            raise ValidationError(f"No project with id {project}")

    async def add_task(
        self,
        title: str,
        desc: str = "",
        tags: str | list[str] | None = None,
        priority: str | None = None,
        date: str | None = None,
        project: int | None = None,
    ) -> Task:
        """Create a task, applying configured defaults and project policy."""
        self._check_project(project)
        return await self.tasks.create(
            title,
            desc=desc,
            tags=tags,
            priority=priority or self.default_priority,
            date=date,
            project=project,
        )

    async def edit_task(self, task_id: int, **changes) -> Task:
        """
        Apply field changes to an existing task and store the whole record.

        Only the given fields change. Raises NotFoundError for unknown ids
        and ValidationError for a blank title or a rejected project.
        """
        current = self.tasks.get(task_id)
        if current is None:
            raise NotFoundError(f"No task with id {task_id}")

        unknown = set(changes) - {"title", "desc", "tags", "priority", "date", "project"}
        if unknown:
            raise ValidationError(f"Unknown task field(s): {', '.join(sorted(unknown))}")

        if "tags" in changes:
            changes["tags"] = parse_tags(changes["tags"])
        if "title" in changes and not (changes["title"] or "").strip():
            raise ValidationError("title is required")
        if "project" in changes:
            self._check_project(changes["project"])

        updated = replace(current, **changes)
        await self.tasks.update(task_id, updated, missing_ok=False)
        return updated

    async def remove_task(self, task_id: int) -> None:
        await self.tasks.delete(task_id, missing_ok=False)

    async def add_project(self, name: str) -> Project:
        return await self.projects.create(name)

    def view(
        self,
        query: str = "",
        window: Window = Window.ALL,
        project: int | None = None,
        as_of: date | None = None,
    ) -> list[Task]:
        """Tasks matching query and window, optionally limited to one project."""
        tasks = self.tasks.list()
        if project is not None:
            tasks = filter_by_project(tasks, project)
        return apply(tasks, query, window, as_of)

    def project_name(self, task: Task) -> str | None:
        """Name of the task's project, or None if unset or dangling."""
        if task.project is None:
            return None
        project = self.projects.get(task.project)
        return project.name if project else None


async def open_workspace(config: Config, backend: KeyValueStore | None = None) -> Workspace:
    """Build a workspace for config and load both collections."""
    if backend is None:
        backend = get_backend(config)
    workspace = Workspace.create(backend, config)
    await workspace.load()
    logger.debug("Workspace ready: %d task(s), %d project(s)", len(workspace.tasks), len(workspace.projects))
    return workspace


def validate_date(value: str) -> str:
    """Return value if it is a YYYY-MM-DD date, else raise ValidationError."""
    if parse_date(value) is None:
        raise ValidationError(f"Invalid date {value!r}, expected YYYY-MM-DD")
    return value
