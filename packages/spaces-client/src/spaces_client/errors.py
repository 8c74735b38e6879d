from __future__ import annotations


class SpacesError(RuntimeError):
    pass


class PreflightError(SpacesError):
    def __init__(self, url: str, detail: str) -> None:
        super().__init__(f"Preflight request to {url} failed: {detail}")
        self.url = url
        self.detail = detail


class TransportError(SpacesError):
    pass


class RemoteRejected(SpacesError):
    def __init__(self, status: int, body: str) -> None:
        super().__init__(f"Spaces API returned {status}: {body}")
        self.status = status
        self.body = body


class DeserializationError(SpacesError):
    def __init__(self, detail: str, body: str) -> None:
        super().__init__(f"Unexpected Spaces API response: {detail}")
        self.detail = detail
        self.body = body
