"""Domain errors — each kind maps to one HTTP status at the API boundary."""


class DashboardError(Exception):
    """Base class for failures surfaced to dashboard callers."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(DashboardError):
    """Required input missing or malformed."""

    status_code = 400


class NotFound(DashboardError):
    """Stored record, channel or Discord message is absent."""

    status_code = 404


class ServiceUnavailable(DashboardError):
    """The Discord session is not authenticated yet."""

    status_code = 503


class RemoteOperationFailed(DashboardError):
    """Discord rejected the send/edit or the call errored."""

    status_code = 500


class PersistenceFailed(DashboardError):
    """Reading or writing the record file failed."""

    status_code = 500
