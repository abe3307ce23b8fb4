"""Custom exceptions for RoomSplit."""


class RoomSplitError(Exception):
    """Base exception for all RoomSplit errors."""

    pass


class ConfigurationError(RoomSplitError):
    """Raised when configuration is invalid or missing."""

    pass


class InvalidAmountError(RoomSplitError):
    """Raised when a paid or owed amount is missing, non-numeric or negative."""

    def __init__(
        self,
        value: object,
        field: str = "amount",
        record_id: str | None = None,
        message: str | None = None,
    ):
        self.value = value
        self.field = field
        self.record_id = record_id
        where = f" on record {record_id}" if record_id else ""
        super().__init__(message or f"Invalid {field}{where}: {value!r}")


class InvalidCategoryError(RoomSplitError):
    """Raised when an expense category is not one of the known categories."""

    pass


class RoomNotFoundError(RoomSplitError):
    """Raised when a room does not exist in the ledger."""

    def __init__(self, room_id: str, message: str | None = None):
        self.room_id = room_id
        super().__init__(message or f"Room {room_id} not found")


class LedgerError(RoomSplitError):
    """Base class for storage-layer errors."""

    pass


class LedgerAPIError(LedgerError):
    """Raised when the room HTTP API request fails."""

    pass
