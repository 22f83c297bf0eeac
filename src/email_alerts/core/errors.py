"""Error taxonomy for signup and subscription management.

Client errors are conditions the visitor can correct and carry the code and
HTTP status the JSON binding reports. Service errors describe what the
notification service answered and are translated by the workflow.
"""


class EmailAlertsError(Exception):
    """Base class for all email alerts errors."""


class ClientError(EmailAlertsError):
    """Request cannot be fulfilled as made; the visitor can correct it."""

    code = "bad_request"
    status = 400


class UnsupportedContentItemError(ClientError):
    """Content item has a document type no subscriber list can track."""

    code = "unsupported_content_item"

    def __init__(self, document_type: str) -> None:
        super().__init__(f"Unsupported content item type: {document_type}")
        self.document_type = document_type


class InvalidContentPathError(ClientError):
    """Requested content path is not a relative path on this site."""

    code = "invalid_content_path"

    def __init__(self, path: str | None) -> None:
        super().__init__(f"Invalid content path: {path!r}")
        self.path = path


class InvalidRequestBodyError(ClientError):
    """Request body is not a JSON object or form."""

    code = "invalid_request"


class UnauthenticatedError(ClientError):
    """Request carries no authenticated subscriber."""

    code = "unauthenticated"
    status = 401


class NotFoundError(ClientError):
    """Resource does not exist or does not belong to the subscriber."""

    code = "not_found"
    status = 404


class InvalidFrequencyError(ClientError):
    """Frequency was missing or rejected by the notification service."""

    code = "invalid_frequency"


class MissingAddressError(ClientError):
    """No new email address was given."""

    code = "missing_address"
    status = 422


class InvalidAddressError(ClientError):
    """Notification service rejected the new email address."""

    code = "invalid_address"
    status = 422

    def __init__(
        self,
        attempted_address: str,
        current_address: str | None,
        message: str = "Invalid email address",
    ) -> None:
        super().__init__(message)
        self.attempted_address = attempted_address
        self.current_address = current_address


class ServiceUnavailableError(EmailAlertsError):
    """Remote service failed or could not be reached."""


class ServiceError(EmailAlertsError):
    """Notification service answered with a client error status."""

    def __init__(self, message: str, status: int) -> None:
        super().__init__(message)
        self.status = status


class ServiceNotFoundError(ServiceError):
    """Notification service answered 404."""


class ServiceUnprocessableError(ServiceError):
    """Notification service answered 422."""
