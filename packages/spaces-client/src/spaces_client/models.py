from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .ci import Vendor, infer_vendor, run_context
from .utils.time import to_epoch_millis

_UNSET: Any = object()


class RunStatus(StrEnum):
    running = "running"
    completed = "completed"


class SpaceRunType(StrEnum):
    turbo = "TURBO"


class SpaceClientSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = "turbo"
    name: str = "Turbo"
    version: str


class SpacesCacheStatus(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: str
    source: str | None = None
    time_saved: int = Field(default=0, ge=0)


class SpaceTaskSummary(BaseModel):
    # The task schema on the server is snake_case; only run payloads are camelCase.
    model_config = ConfigDict(frozen=True)

    key: str
    name: str
    workspace: str
    hash: str
    start_time: int = Field(ge=0)
    end_time: int = Field(ge=0)
    cache: SpacesCacheStatus
    exit_code: int = Field(default=0, ge=0)
    dependencies: list[str] = Field(default_factory=list)
    dependents: list[str] = Field(default_factory=list)
    logs: str = ""


class CreateSpaceRunPayload(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    start_time: int = Field(ge=0, alias="startTime")
    status: RunStatus = RunStatus.running
    type: SpaceRunType = SpaceRunType.turbo
    command: str
    package_inference_root: str = Field(default="", alias="repositoryPath")
    run_context: str = Field(alias="context")
    git_branch: str | None = Field(default=None, alias="gitBranch")
    git_sha: str | None = Field(default=None, alias="gitSha")
    user: str = Field(alias="originationUser")
    client: SpaceClientSummary

    @classmethod
    def new(
        cls,
        start_time: datetime | int,
        command: str,
        package_inference_root=None,
        git_branch: str | None = None,
        git_sha: str | None = None,
        version: str = "",
        user: str = "",
        vendor: Vendor | None = _UNSET,
    ) -> "CreateSpaceRunPayload":
        """Build a run-start record.

        ``package_inference_root`` is any path-like value and is rendered with
        ``str()``. When ``vendor`` is omitted the CI environment is inspected.
        """
        if vendor is _UNSET:
            vendor = infer_vendor()
        return cls(
            start_time=to_epoch_millis(start_time),
            status=RunStatus.running,
            type=SpaceRunType.turbo,
            command=command,
            package_inference_root=(
                str(package_inference_root) if package_inference_root is not None else ""
            ),
            run_context=run_context(vendor),
            git_branch=git_branch,
            git_sha=git_sha,
            user=user,
            client=SpaceClientSummary(version=version),
        )


class FinishSpaceRunPayload(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    status: RunStatus = RunStatus.completed
    end_time: int = Field(ge=0, alias="endTime")
    exit_code: int = Field(alias="exitCode")

    @classmethod
    def new(cls, end_time: int, exit_code: int) -> "FinishSpaceRunPayload":
        return cls(status=RunStatus.completed, end_time=end_time, exit_code=exit_code)


class SpaceRun(BaseModel):
    """Run handle returned by the server when a run is created."""

    model_config = ConfigDict(frozen=True, extra="allow")

    id: str
    url: str | None = None
