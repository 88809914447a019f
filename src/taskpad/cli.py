"""taskpad CLI - local to-do list manager."""

import asyncio
import json
import logging
import sys

import click

from .config import load_config
from .core.filters import Window
from .core.tasks import Task
from .errors import NotFoundError, TaskpadError
from .workflows import Workspace, open_workspace, validate_date

WINDOW_CHOICES = [w.value for w in Window]


def _run(ctx: click.Context, action):
    """Open the workspace, run action against it, and report core errors."""
    config = ctx.obj["config"]

    async def _main():
        workspace = await open_workspace(config)
        return await action(workspace)

    try:
        return asyncio.run(_main())
    except TaskpadError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _task_json(workspace: Workspace, task: Task) -> dict:
    data = task.to_dict()
    data["project_name"] = workspace.project_name(task)
    return data


def _format_task(workspace: Workspace, task: Task) -> str:
    parts = [p for p in (task.priority, task.date, workspace.project_name(task)) if p]
    line = f"[{task.id}] {task.title}"
    if parts:
        line += f" ({' • '.join(parts)})"
    if task.tags:
        line += "  " + " ".join(f"#{tag}" for tag in task.tags)
    return line


def _show_tasks(workspace: Workspace, tasks: list[Task], as_json: bool, empty_msg: str) -> None:
    """Shared task display logic."""
    if as_json:
        click.echo(json.dumps([_task_json(workspace, t) for t in tasks], indent=2, ensure_ascii=False))
        return

    if not tasks:
        click.echo(empty_msg)
        return

    for task in tasks:
        click.echo(_format_task(workspace, task))
        if task.desc:
            click.echo(f"    {task.desc}")


def _check_date(ctx, param, value):
    if value is None:
        return None
    try:
        return validate_date(value)
    except TaskpadError as e:
        raise click.BadParameter(str(e)) from e


@click.group()
@click.version_option(package_name="taskpad")
@click.option("--config", "config_path", default=None, type=click.Path(dir_okay=False),
              help="Path to taskpad.conf")
@click.option("--data-dir", default=None, help="Directory holding tasks.json and projects.json")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx, config_path: str | None, data_dir: str | None, debug: bool):
    """taskpad - local to-do list manager."""
    config = load_config(config_path)
    if data_dir:
        config.data_dir = data_dir

    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.DEBUG if debug else getattr(logging, config.log_level, logging.WARNING),
    )

    ctx.ensure_object(dict)
    ctx.obj["config"] = config


@main.command()
@click.argument("title")
@click.option("--desc", "-d", default="", help="Description")
@click.option("--tags", "-t", default="", help="Comma-separated tags")
@click.option("--priority", "-p", default=None, help="Priority label (default from config)")
@click.option("--date", "due", default=None, callback=_check_date, help="Date (YYYY-MM-DD), defaults to today")
@click.option("--project", type=int, default=None, help="Project ID")
@click.pass_context
def add(ctx, title: str, desc: str, tags: str, priority: str | None, due: str | None, project: int | None):
    """Add a task."""

    async def action(workspace: Workspace):
        return await workspace.add_task(
            title, desc=desc, tags=tags, priority=priority, date=due, project=project
        )

    task = _run(ctx, action)
    click.echo(f"Added task {task.id}: {task.title}")


@main.command("list")
@click.option("--window", "-w", type=click.Choice(WINDOW_CHOICES), default="all", help="Date window")
@click.option("--project", type=int, default=None, help="Only tasks in this project")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def list_tasks(ctx, window: str, project: int | None, as_json: bool):
    """List tasks."""

    async def action(workspace: Workspace):
        tasks = workspace.view(window=Window(window), project=project)
        _show_tasks(workspace, tasks, as_json, "No tasks.")

    _run(ctx, action)


@main.command()
@click.argument("query", default="")
@click.option("--window", "-w", type=click.Choice(WINDOW_CHOICES), default="all", help="Date window")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def search(ctx, query: str, window: str, as_json: bool):
    """Search tasks by title, description, tag or priority."""

    async def action(workspace: Workspace):
        tasks = workspace.view(query=query, window=Window(window))
        _show_tasks(workspace, tasks, as_json, "No matching tasks.")

    _run(ctx, action)


@main.command()
@click.argument("task_id", type=int)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def show(ctx, task_id: int, as_json: bool):
    """Show one task."""

    async def action(workspace: Workspace):
        task = workspace.tasks.get(task_id)
        if task is None:
            raise NotFoundError(f"No task with id {task_id}")
        if as_json:
            click.echo(json.dumps(_task_json(workspace, task), indent=2, ensure_ascii=False))
            return
        click.echo(f"ID:       {task.id}")
        click.echo(f"Title:    {task.title}")
        click.echo(f"Desc:     {task.desc}")
        click.echo(f"Tags:     {', '.join(task.tags)}")
        click.echo(f"Priority: {task.priority}")
        click.echo(f"Date:     {task.date}")
        name = workspace.project_name(task)
        if task.project is None:
            click.echo("Project:  -")
        else:
            click.echo(f"Project:  {task.project} ({name or 'unknown'})")

    _run(ctx, action)


@main.command()
@click.argument("task_id", type=int)
@click.option("--title", default=None)
@click.option("--desc", default=None)
@click.option("--tags", default=None, help="Comma-separated tags, replaces existing")
@click.option("--priority", default=None)
@click.option("--date", "due", default=None, callback=_check_date, help="Date (YYYY-MM-DD)")
@click.option("--project", type=int, default=None, help="Project ID")
@click.option("--no-project", is_flag=True, help="Clear the project link")
@click.pass_context
def edit(
    ctx,
    task_id: int,
    title: str | None,
    desc: str | None,
    tags: str | None,
    priority: str | None,
    due: str | None,
    project: int | None,
    no_project: bool,
):
    """Edit a task. Fields not given keep their value."""
    changes = {
        key: value
        for key, value in {
            "title": title,
            "desc": desc,
            "tags": tags,
            "priority": priority,
            "date": due,
            "project": project,
        }.items()
        if value is not None
    }
    if no_project:
        changes["project"] = None

    async def action(workspace: Workspace):
        return await workspace.edit_task(task_id, **changes)

    task = _run(ctx, action)
    click.echo(f"Updated task {task.id}: {task.title}")


@main.command()
@click.argument("task_id", type=int)
@click.pass_context
def delete(ctx, task_id: int):
    """Delete a task."""

    async def action(workspace: Workspace):
        await workspace.remove_task(task_id)

    _run(ctx, action)
    click.echo(f"Deleted task {task_id}")


@main.group()
def project():
    """Manage projects."""
    pass


@project.command("add")
@click.argument("name")
@click.pass_context
def project_add(ctx, name: str):
    """Add a project."""

    async def action(workspace: Workspace):
        return await workspace.add_project(name)

    created = _run(ctx, action)
    click.echo(f"Added project {created.id}: {created.name}")


@project.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def project_list(ctx, as_json: bool):
    """List projects."""

    async def action(workspace: Workspace):
        projects = workspace.projects.list()
        if as_json:
            click.echo(json.dumps([p.to_dict() for p in projects], indent=2, ensure_ascii=False))
            return
        if not projects:
            click.echo("No projects.")
            return
        for p in projects:
            count = len(workspace.view(project=p.id))
            click.echo(f"[{p.id}] {p.name} ({count} task{'s' if count != 1 else ''})")

    _run(ctx, action)


if __name__ == "__main__":
    main()
