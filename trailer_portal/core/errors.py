from fastapi import status


class PortalError(Exception):
    """Base class for errors that map onto a plain-text HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ValidationError(PortalError):
    status_code = status.HTTP_400_BAD_REQUEST


class Forbidden(PortalError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFound(PortalError):
    status_code = status.HTTP_404_NOT_FOUND


class StoreError(PortalError):
    # Remote database or blob-store failure; message is the backend's own detail
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
