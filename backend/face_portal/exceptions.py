from typing import Any, Dict, Optional


class PortalError(Exception):
    """Error reported to the caller as a structured JSON object."""

    status_code = 500

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Any] = None,
        backend_status: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details
        self.backend_status = backend_status

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        if self.backend_status is not None:
            body["backend_status"] = self.backend_status
        return body


class MissingFieldError(PortalError):
    status_code = 400


class UpstreamUnavailableError(PortalError):
    status_code = 503


class UpstreamTimeoutError(PortalError):
    status_code = 504


class RequestPreparationError(PortalError):
    status_code = 500


class ListingFailedError(PortalError):
    """The face list needed by delete-by-name could not be fetched.

    ``response`` holds the upstream reply when the upstream answered with a
    non-success status; transport failures carry ``cause`` instead.
    """

    def __init__(self, message: str, response=None, cause: Optional[PortalError] = None):
        status_code = cause.status_code if cause is not None else None
        if response is not None:
            status_code = response.status_code
        super().__init__(
            message,
            status_code=status_code,
            details=cause.message if cause is not None else None,
            backend_status=response.status_code if response is not None else None,
        )
        self.response = response
        self.cause = cause
