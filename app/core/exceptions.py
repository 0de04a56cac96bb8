from fastapi import status


class SalonError(Exception):
    """Base class for domain errors surfaced to API callers."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidRequestError(SalonError):
    """Malformed or out-of-range input (bad date, non-positive duration, ...)."""

    status_code = status.HTTP_400_BAD_REQUEST


class ResourceNotFoundError(SalonError):
    """Unknown store, service, staff member or appointment."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str, identifier):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found")


class SlotConflictError(SalonError):
    """The requested time overlaps an existing appointment for the staff member."""

    status_code = status.HTTP_409_CONFLICT
