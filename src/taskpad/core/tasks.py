"""Pure task and project records - no I/O dependencies."""

import json
from dataclasses import asdict, dataclass, field
from typing import Iterable

DEFAULT_PRIORITY = "Medium"


@dataclass
class Task:
    """A to-do item, optionally linked to a project by id."""

    id: int
    title: str
    desc: str = ""
    tags: list[str] = field(default_factory=list)
    priority: str = DEFAULT_PRIORITY
    date: str = ""
    project: int | None = None

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Task":
        """Create Task from a stored JSON object."""
        project = data.get("project")
        return cls(
            id=int(data["id"]),
            title=str(data.get("title", "")),
            desc=str(data.get("desc") or ""),
            tags=[str(t) for t in data.get("tags") or []],
            priority=str(data.get("priority") or ""),
            date=str(data.get("date") or ""),
            project=int(project) if project is not None else None,
        )


@dataclass
class Project:
    """A named grouping that tasks may reference."""

    id: int
    name: str

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Project":
        return cls(id=int(data["id"]), name=str(data.get("name", "")))


def parse_tags(raw: str | Iterable[str] | None) -> list[str]:
    """
    Normalize tags to a list of trimmed, non-empty strings.

    A string is split on commas: "grocery, dairy,," -> ["grocery", "dairy"].
    """
    if raw is None:
        return []
    if isinstance(raw, str):
        raw = raw.split(",")
    return [t.strip() for t in raw if t and t.strip()]


def next_id(last_id: int, now_ms: int) -> int:
    """
    Allocate a timestamp-derived id strictly greater than last_id.

    Two allocations in the same millisecond (or a clock that moved
    backwards) still yield distinct, increasing ids.
    """
    return max(now_ms, last_id + 1)


def encode_tasks(tasks: list[Task]) -> str:
    return json.dumps([t.to_dict() for t in tasks], ensure_ascii=False)


def decode_tasks(blob: str) -> list[Task]:
    """Decode a stored task array. Raises ValueError on malformed data."""
    return [Task.from_dict(item) for item in _decode_array(blob)]


def encode_projects(projects: list[Project]) -> str:
    return json.dumps([p.to_dict() for p in projects], ensure_ascii=False)


def decode_projects(blob: str) -> list[Project]:
    """Decode a stored project array. Raises ValueError on malformed data."""
    return [Project.from_dict(item) for item in _decode_array(blob)]


def _decode_array(blob: str) -> list[dict]:
    data = json.loads(blob)
    if not isinstance(data, list):
        raise ValueError(f"expected a JSON array, got {type(data).__name__}")
    seen: set[int] = set()
    for item in data:
        if not isinstance(item, dict):
            raise ValueError(f"expected a JSON object, got {type(item).__name__}")
        if "id" not in item:
            raise ValueError("record is missing 'id'")
        item_id = int(item["id"])
        if item_id in seen:
            raise ValueError(f"duplicate id {item_id}")
        seen.add(item_id)
    return data
