"""Custom exceptions for the PostGuard application.

Admission rejections are not exceptions; they are returned as decision
values by the admission engine. These exceptions cover the HTTP surface and
the upstream call.
"""


class PostGuardException(Exception):
    """Base class for PostGuard exceptions with HTTP status code.

    All custom exceptions should inherit from this class and define
    their specific status_code for consistent HTTP response handling.
    """
    status_code: int = 500

    def __init__(self, message: str = "PostGuard error"):
        self.message = message
        super().__init__(message)


class InvalidRequestError(PostGuardException):
    """Raised when the request body cannot be parsed.

    Maps to HTTP 400 Bad Request.
    """
    status_code = 400

    def __init__(self, message: str = "Invalid request body"):
        super().__init__(message)


class ForbiddenRequestError(PostGuardException):
    """Raised when a request fails the referrer or user-agent guard.

    Maps to HTTP 403 Forbidden.
    """
    status_code = 403

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message)


class UpstreamError(PostGuardException):
    """Raised when the upstream generation API call fails.

    The client only ever sees a generic 500; details stay in the logs.
    """
    status_code = 500

    def __init__(self, message: str = "Upstream API error", upstream_status: int | None = None):
        self.upstream_status = upstream_status
        super().__init__(message)
