import asyncio
import getpass
import json
from pathlib import Path

import typer
from rich import print
from rich.markup import escape

from .. import __version__
from ..auth import select_auth
from ..client import SpacesClient
from ..config import SpacesSettings
from ..errors import SpacesError
from ..models import CreateSpaceRunPayload, SpaceTaskSummary
from ..utils.time import now_millis, to_epoch_millis

app = typer.Typer(add_completion=False, pretty_exceptions_show_locals=False)


def _client() -> SpacesClient:
    return SpacesClient.from_settings(SpacesSettings.from_env())


def _run(coro) -> None:
    try:
        asyncio.run(coro)
    except (SpacesError, RuntimeError, ValueError) as exc:
        print(f"[bold red]Error[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc


@app.command()
def create_run(
    space_id: str = typer.Option(..., help="Space to report into"),
    command: str = typer.Option(..., help="Command line being reported"),
    repository_path: str | None = typer.Option(
        None, help="Package inference root, relative to the repository"
    ),
    git_branch: str | None = typer.Option(None, help="Git branch of the run"),
    git_sha: str | None = typer.Option(None, help="Git commit of the run"),
    user: str | None = typer.Option(None, help="Originating user (defaults to $USER)"),
    version: str = typer.Option(__version__, help="Client version to report"),
):
    """Open a run in a space and print its id."""

    async def _go() -> None:
        payload = CreateSpaceRunPayload.new(
            now_millis(),
            command,
            package_inference_root=repository_path,
            git_branch=git_branch,
            git_sha=git_sha,
            version=version,
            user=user or getpass.getuser(),
        )
        auth = select_auth()
        async with _client() as client:
            run = await client.create_run(space_id, auth, payload)
        print(f"[bold]Run created[/bold] {run.id}")
        if run.url:
            print(f"[cyan]{run.url}[/cyan]")

    _run(_go())


@app.command()
def report_task(
    space_id: str = typer.Option(..., help="Space the run belongs to"),
    run_id: str = typer.Option(..., help="Run to attach the task to"),
    task_file: Path = typer.Option(
        ..., exists=True, dir_okay=False, help="JSON file with the task summary"
    ),
):
    """Report one finished task of a run."""

    async def _go() -> None:
        task = SpaceTaskSummary.model_validate(json.loads(task_file.read_text()))
        auth = select_auth()
        async with _client() as client:
            await client.report_task(space_id, run_id, auth, task)
        print(f"[bold]Task reported[/bold] {task.key} -> {run_id}")

    _run(_go())


@app.command()
def finish_run(
    space_id: str = typer.Option(..., help="Space the run belongs to"),
    run_id: str = typer.Option(..., help="Run to close"),
    exit_code: int = typer.Option(..., help="Exit code of the run"),
    end_time: str | None = typer.Option(
        None, help="ISO timestamp or epoch millis (defaults to now)"
    ),
):
    """Mark a run as completed."""

    async def _go() -> None:
        end_millis = to_epoch_millis(end_time) if end_time else now_millis()
        auth = select_auth()
        async with _client() as client:
            await client.finish_run(space_id, run_id, auth, end_millis, exit_code)
        print(f"[bold]Run finished[/bold] {run_id} (exit {exit_code})")

    _run(_go())
