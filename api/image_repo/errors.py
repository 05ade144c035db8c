"""Error taxonomy shared by the services, stores and API layer."""


class ImageRepoError(Exception):
    """Base exception for image repository errors.

    Every subclass carries a human-readable message that is returned to the
    caller verbatim inside the failure envelope.
    """

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ImageRepoError):
    """Bad or missing input."""

    status_code = 400


class NotFoundError(ImageRepoError):
    """Asset or user id does not resolve."""

    status_code = 404


class ConflictError(ImageRepoError):
    """Username already taken."""

    status_code = 409


class PermissionDeniedError(ImageRepoError):
    """Download of a private asset."""

    status_code = 403


class StoreError(ImageRepoError):
    """Underlying blob or metadata store failure."""

    status_code = 502


class PartialDeletionError(StoreError):
    """Metadata record removed but the blob could not be deleted."""

    pass
