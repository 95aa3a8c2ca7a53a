"""Exception classes shared by the master and volume clients."""

from typing import Optional


class WeedError(Exception):
    """
    Base exception class for all cluster client errors.
    """
    pass


class TransportError(WeedError):
    """
    Raised when a remote server cannot be reached (connect failure or timeout).
    Generally safe to retry.
    """
    pass


class AllocationError(TransportError):
    """
    Raised when the master cannot be reached while assigning a file id.
    """
    pass


class RejectedError(WeedError):
    """
    Raised when a remote server answers with a non-success status.

    Carries the HTTP status code and the server's error text so callers can
    decide between retrying, requesting a new file id, or giving up.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"{self.message} (status={self.status_code})"


class AllocationRejected(RejectedError):
    """
    Raised when the master refuses to assign a file id
    (no writable volumes, invalid collection, quota exceeded).
    """
    pass


class LookupRejected(RejectedError):
    """
    Raised when the master cannot resolve a volume id to its locations.
    """
    pass


class UploadRejected(RejectedError):
    """
    Raised when a volume server refuses a write
    (key already has data, volume read-only).
    """
    pass


class ReadRejected(RejectedError):
    """
    Raised when a volume server refuses a read.
    """
    pass


class DeleteRejected(RejectedError):
    """
    Raised when a volume server refuses a delete.
    """
    pass


class BlobNotFound(RejectedError):
    """
    Raised when a volume server has no data for the requested file id.
    """
    pass


class MalformedIdentifier(WeedError, ValueError):
    """
    Raised when a file id string cannot be parsed.
    """
    pass


class MalformedAddress(WeedError, ValueError):
    """
    Raised when a server address is not of the form host:port.
    """
    pass


class DecodeError(WeedError):
    """
    Raised when a response body does not have the expected shape.
    """
    pass
