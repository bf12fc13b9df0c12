"""Custom exception hierarchy for pylbs."""

from __future__ import annotations


class LbsError(Exception):
    """Base exception for all pylbs errors."""


class LbsConfigError(LbsError):
    """Invalid or missing configuration."""


class EmptyRequestError(LbsError):
    """Geolocation request names no cell towers."""

    def __init__(self, message: str = "lbs: empty request") -> None:
        super().__init__(message)


class NotFoundError(LbsError):
    """No stored tower matches the request."""

    def __init__(self, message: str = "lbs: not found") -> None:
        super().__init__(message)


class StoreAccessError(LbsError):
    """Failure talking to or querying the backing store."""

    def __init__(self, message: str, *, operation: str = "") -> None:
        self.operation = operation
        super().__init__(message)


class RowParseError(LbsError):
    """A single dataset row could not be decoded.

    Non-fatal: the importer logs it, counts it as malformed and moves on
    to the next row.
    """

    def __init__(self, line: int, field: str, value: str) -> None:
        self.line = line
        self.field = field
        self.value = value
        super().__init__(f"[{line}] bad {field}: {value!r}")


class DatasetAccessError(LbsError):
    """The dataset cannot be opened, read or downloaded.

    Fatal for the import run.  When raised while opening the source no
    store mutation has happened yet.
    """

    def __init__(
        self,
        message: str,
        *,
        source: str = "",
        status_code: int | None = None,
    ) -> None:
        self.source = source
        self.status_code = status_code
        super().__init__(message)
