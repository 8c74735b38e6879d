__version__ = "0.1.0"

from .auth import APIAuth, select_auth
from .client import SpacesClient
from .config import SpacesSettings
from .errors import (
    DeserializationError,
    PreflightError,
    RemoteRejected,
    SpacesError,
    TransportError,
)
from .models import (
    CreateSpaceRunPayload,
    FinishSpaceRunPayload,
    RunStatus,
    SpaceClientSummary,
    SpaceRun,
    SpaceRunType,
    SpacesCacheStatus,
    SpaceTaskSummary,
)
from .preflight import PreflightVerdict
from .retry import RetryPolicy

__all__ = [
    "APIAuth",
    "CreateSpaceRunPayload",
    "DeserializationError",
    "FinishSpaceRunPayload",
    "PreflightError",
    "PreflightVerdict",
    "RemoteRejected",
    "RetryPolicy",
    "RunStatus",
    "SpaceClientSummary",
    "SpaceRun",
    "SpaceRunType",
    "SpacesCacheStatus",
    "SpacesClient",
    "SpacesError",
    "SpacesSettings",
    "SpaceTaskSummary",
    "TransportError",
    "select_auth",
]
