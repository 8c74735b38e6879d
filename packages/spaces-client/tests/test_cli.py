import json

import httpx
from typer.testing import CliRunner

from spaces_client.cli import app as cli_module
from spaces_client.client import SpacesClient
from spaces_client.retry import RetryPolicy

FAST = RetryPolicy(max_attempts=1, initial_backoff=0, max_backoff=0, jitter=0)


def install_fake_client(monkeypatch, handler):
    monkeypatch.setenv("TURBO_TOKEN", "tok")
    monkeypatch.setattr(
        cli_module,
        "_client",
        lambda: SpacesClient(
            "https://api.example.com",
            transport=httpx.MockTransport(handler),
            retry_policy=FAST,
            ci_constant=lambda: None,
        ),
    )


def test_create_run_prints_run_id(monkeypatch):
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"id": "run_9", "url": "https://example.com/run_9"})

    install_fake_client(monkeypatch, handler)
    result = CliRunner().invoke(
        cli_module.app,
        ["create-run", "--space-id", "space1", "--command", "turbo run build", "--user", "dev"],
    )

    assert result.exit_code == 0, result.output
    assert "run_9" in result.output
    body = json.loads(seen[0].content)
    assert body["command"] == "turbo run build"
    assert body["originationUser"] == "dev"


def test_report_task_reads_task_file(monkeypatch, tmp_path):
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200)

    task_file = tmp_path / "task.json"
    task_file.write_text(
        json.dumps(
            {
                "key": "web#build",
                "name": "build",
                "workspace": "web",
                "hash": "abc",
                "start_time": 1,
                "end_time": 2,
                "cache": {"status": "HIT", "source": "LOCAL", "time_saved": 10},
            }
        )
    )

    install_fake_client(monkeypatch, handler)
    result = CliRunner().invoke(
        cli_module.app,
        [
            "report-task",
            "--space-id",
            "space1",
            "--run-id",
            "run_9",
            "--task-file",
            str(task_file),
        ],
    )

    assert result.exit_code == 0, result.output
    assert seen[0].url.path == "/v0/spaces/space1/runs/run_9/tasks"


def test_finish_run_reports_rejection_without_traceback(monkeypatch):
    def handler(request):
        return httpx.Response(409, text="run already finished")

    install_fake_client(monkeypatch, handler)
    result = CliRunner().invoke(
        cli_module.app,
        [
            "finish-run",
            "--space-id",
            "space1",
            "--run-id",
            "run_9",
            "--exit-code",
            "1",
            "--end-time",
            "2024-01-01T00:00:00Z",
        ],
    )

    assert result.exit_code == 1
    assert "409" in result.output
    assert "Traceback" not in result.output


def test_report_task_rejects_malformed_task_file(monkeypatch, tmp_path):
    def handler(request):
        raise AssertionError("no request expected")

    task_file = tmp_path / "task.json"
    task_file.write_text("{not json")

    install_fake_client(monkeypatch, handler)
    result = CliRunner().invoke(
        cli_module.app,
        [
            "report-task",
            "--space-id",
            "space1",
            "--run-id",
            "run_9",
            "--task-file",
            str(task_file),
        ],
    )

    assert result.exit_code == 1
    assert "Error" in result.output
    assert result.exception is None or isinstance(result.exception, SystemExit)


def test_report_task_rejects_incomplete_task(monkeypatch, tmp_path):
    def handler(request):
        raise AssertionError("no request expected")

    task_file = tmp_path / "task.json"
    task_file.write_text(json.dumps({"key": "web#build"}))

    install_fake_client(monkeypatch, handler)
    result = CliRunner().invoke(
        cli_module.app,
        [
            "report-task",
            "--space-id",
            "space1",
            "--run-id",
            "run_9",
            "--task-file",
            str(task_file),
        ],
    )

    assert result.exit_code == 1
    assert "Error" in result.output


def test_finish_run_rejects_malformed_end_time(monkeypatch):
    def handler(request):
        raise AssertionError("no request expected")

    install_fake_client(monkeypatch, handler)
    result = CliRunner().invoke(
        cli_module.app,
        [
            "finish-run",
            "--space-id",
            "space1",
            "--run-id",
            "run_9",
            "--exit-code",
            "1",
            "--end-time",
            "yesterday",
        ],
    )

    assert result.exit_code == 1
    assert "Error" in result.output
    assert result.exception is None or isinstance(result.exception, SystemExit)
