"""Tests for the shared workflow layer."""

import asyncio
from datetime import date, timedelta
from pathlib import Path

import pytest

from taskpad.adapters.memory_store import MemoryKeyValueStore
from taskpad.config import DATA_DIR, Config
from taskpad.core.filters import Window
from taskpad.errors import NotFoundError, StorageError, ValidationError
from taskpad.workflows import Workspace, get_data_dir, open_workspace, validate_date


@pytest.fixture
def backend():
    return MemoryKeyValueStore()


def run(coro):
    return asyncio.run(coro)


class TestGetDataDir:
    def test_uses_configured_dir(self, tmp_path):
        assert get_data_dir(Config(data_dir=str(tmp_path))) == tmp_path

    def test_expands_user_path(self):
        data_dir = get_data_dir(Config(data_dir="~/some/data"))
        assert data_dir == Path.home() / "some" / "data"

    def test_falls_back_to_default(self):
        assert get_data_dir(Config()) == DATA_DIR


class TestOpenWorkspace:
    def test_loads_both_collections(self, backend):
        backend.data["tasks"] = '[{"id": 1, "title": "A", "project": 2}]'
        backend.data["projects"] = '[{"id": 2, "name": "Home"}]'

        ws = run(open_workspace(Config(), backend))
        assert [t.title for t in ws.tasks.list()] == ["A"]
        assert [p.name for p in ws.projects.list()] == ["Home"]

    def test_uses_file_backend_from_config(self, tmp_path):
        async def scenario():
            ws = await open_workspace(Config(data_dir=str(tmp_path)))
            await ws.add_task("On disk")

        run(scenario())
        assert (tmp_path / "tasks.json").exists()


class TestAddTask:
    def test_applies_default_priority(self, backend):
        async def scenario():
            ws = Workspace.create(backend, Config(default_priority="Low"))
            return await ws.add_task("A")

        assert run(scenario()).priority == "Low"

    def test_explicit_priority_wins(self, backend):
        async def scenario():
            ws = Workspace.create(backend, Config(default_priority="Low"))
            return await ws.add_task("A", priority="Urgent")

        assert run(scenario()).priority == "Urgent"

    def test_dangling_project_allowed_by_default(self, backend):
        async def scenario():
            ws = Workspace.create(backend)
            return await ws.add_task("A", project=404)

        assert run(scenario()).project == 404

    def test_strict_projects_rejects_unknown(self, backend):
        async def scenario():
            ws = Workspace.create(backend, Config(strict_projects=True))
            with pytest.raises(ValidationError):
                await ws.add_task("A", project=404)
            return ws

        assert run(scenario()).tasks.list() == []

    def test_strict_projects_accepts_known(self, backend):
        async def scenario():
            ws = Workspace.create(backend, Config(strict_projects=True))
            project = await ws.add_project("Home")
            return project, await ws.add_task("A", project=project.id)

        project, task = run(scenario())
        assert task.project == project.id


class TestEditTask:
    def test_changes_only_given_fields(self, backend):
        async def scenario():
            ws = Workspace.create(backend)
            task = await ws.add_task("A", desc="keep", tags="x", date="2024-01-01")
            return task, await ws.edit_task(task.id, title="B", tags="y, z")

        before, after = run(scenario())
        assert after.id == before.id
        assert after.title == "B"
        assert after.tags == ["y", "z"]
        assert after.desc == "keep"
        assert after.date == "2024-01-01"

    def test_clear_project(self, backend):
        async def scenario():
            ws = Workspace.create(backend)
            task = await ws.add_task("A", project=1)
            return await ws.edit_task(task.id, project=None)

        assert run(scenario()).project is None

    def test_unknown_task(self, backend):
        with pytest.raises(NotFoundError):
            run(Workspace.create(backend).edit_task(1, title="x"))

    def test_blank_title(self, backend):
        async def scenario():
            ws = Workspace.create(backend)
            task = await ws.add_task("A")
            with pytest.raises(ValidationError):
                await ws.edit_task(task.id, title=" ")
            return ws

        assert [t.title for t in run(scenario()).tasks.list()] == ["A"]

    def test_unknown_field(self, backend):
        async def scenario():
            ws = Workspace.create(backend)
            task = await ws.add_task("A")
            await ws.edit_task(task.id, id=5)

        with pytest.raises(ValidationError):
            run(scenario())


class TestRemoveTask:
    def test_removes(self, backend):
        async def scenario():
            ws = Workspace.create(backend)
            task = await ws.add_task("A")
            await ws.remove_task(task.id)
            return ws

        assert run(scenario()).tasks.list() == []

    def test_unknown_raises(self, backend):
        with pytest.raises(NotFoundError):
            run(Workspace.create(backend).remove_task(1))


class TestView:
    def test_query_window_and_project(self, backend):
        today = date(2025, 1, 15)

        async def scenario():
            ws = Workspace.create(backend)
            await ws.add_task("Report", priority="Urgent", date="2025-01-15", project=1)
            await ws.add_task("Report draft", priority="Low", date="2025-01-15", project=2)
            await ws.add_task("Urgent later", priority="Urgent", date="2025-03-01", project=1)
            return ws

        ws = run(scenario())
        assert [t.title for t in ws.view("urgent", Window.TODAY, as_of=today)] == ["Report"]
        assert [t.title for t in ws.view(project=1)] == ["Report", "Urgent later"]
        assert [t.title for t in ws.view("report", project=2, as_of=today)] == ["Report draft"]

    def test_default_is_everything(self, backend):
        async def scenario():
            ws = Workspace.create(backend)
            await ws.add_task("A", date=(date.today() + timedelta(days=400)).isoformat())
            await ws.add_task("B", date="garbage")
            return ws

        assert len(run(scenario()).view()) == 2


class TestProjectName:
    def test_resolves_and_handles_dangling(self, backend):
        async def scenario():
            ws = Workspace.create(backend)
            project = await ws.add_project("Home")
            linked = await ws.add_task("A", project=project.id)
            dangling = await ws.add_task("B", project=project.id + 1000)
            plain = await ws.add_task("C")
            return ws, linked, dangling, plain

        ws, linked, dangling, plain = run(scenario())
        assert ws.project_name(linked) == "Home"
        assert ws.project_name(dangling) is None
        assert ws.project_name(plain) is None


class TestFlush:
    def test_retries_both_stores(self):
        class Flaky(MemoryKeyValueStore):
            failing = True

            async def store(self, key, value):
                if self.failing:
                    raise OSError("disk full")
                await super().store(key, value)

        backend = Flaky()

        async def scenario():
            ws = Workspace.create(backend)
            with pytest.raises(StorageError):
                await ws.add_task("A")
            with pytest.raises(StorageError):
                await ws.add_project("Home")
            backend.failing = False
            await ws.flush()
            return ws

        ws = run(scenario())
        assert ws.tasks.dirty is False
        assert ws.projects.dirty is False
        assert "tasks" in backend.data and "projects" in backend.data


class TestValidateDate:
    def test_valid(self):
        assert validate_date("2024-01-01") == "2024-01-01"

    def test_invalid(self):
        with pytest.raises(ValidationError):
            validate_date("tomorrow")
