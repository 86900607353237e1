"""Error taxonomy shared by services and API routes."""

from __future__ import annotations


class DeliveryValidationError(ValueError):
    """A request is missing a required field or carries a malformed value."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class SlipRejectedError(DeliveryValidationError):
    """The slip upload service refused the file (4xx response)."""

    def __init__(self, message: str) -> None:
        super().__init__(message, field="file")


class DeliveryNotFoundError(LookupError):
    pass


class UpstreamServiceError(ConnectionError):
    """The document store, upload service or LINE API failed."""


class ServiceNotConfiguredError(RuntimeError):
    pass
