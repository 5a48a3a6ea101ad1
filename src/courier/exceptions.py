"""Courier exception hierarchy.

Every error derives from ``CourierError`` and carries a machine-readable
``code``. HTTP and transport failures during delivery are not raised:
they become attempt results and feed the retry loop.
"""

from __future__ import annotations


class CourierError(Exception):
    """Base class for Courier errors.

    Attributes:
        message: Human-readable description.
        code: Stable machine-readable code.
    """

    code: str = "courier_error"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def details(self) -> dict[str, object]:
        """Extra fields included in ``to_dict``."""
        return {}

    def to_dict(self) -> dict[str, object]:
        """Error envelope suitable for an API response or a log line."""
        return {"error": {"code": self.code, **self.details(), "message": self.message}}


class ValidationError(CourierError):
    """An argument to a Courier operation is invalid."""

    code: str = "validation_error"

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(f"{field}: {message}")

    def details(self) -> dict[str, object]:
        return {"field": self.field}


class NotFoundError(CourierError):
    """A looked-up resource does not exist."""

    code: str = "not_found"

    def __init__(self, resource_type: str, resource_id: str) -> None:
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(f"{resource_type} not found: {resource_id}")

    def details(self) -> dict[str, object]:
        return {"resource_type": self.resource_type, "resource_id": self.resource_id}


class RecordNotFoundError(NotFoundError):
    """No row with the requested id exists in the requested table."""

    code: str = "record_not_found"

    def __init__(self, table: str, record_id: str) -> None:
        self.table = table
        super().__init__(table, record_id)


class StorageError(CourierError):
    """A backing-store operation failed."""

    code: str = "storage_error"


class ResolutionError(StorageError):
    """Endpoint or subscription lookup failed.

    Distinct from an empty result: callers must not read this as
    "no subscribers".
    """

    code: str = "resolution_error"


class LedgerError(StorageError):
    """The pending ledger row for a delivery could not be written."""

    code: str = "ledger_error"

    def __init__(self, delivery_id: str, message: str) -> None:
        self.delivery_id = delivery_id
        super().__init__(f"Failed to create delivery record {delivery_id}: {message}")

    def details(self) -> dict[str, object]:
        return {"delivery_id": self.delivery_id}


class ConfigurationError(CourierError):
    """Configuration is missing or invalid."""

    code: str = "configuration_error"
