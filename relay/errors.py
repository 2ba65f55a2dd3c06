"""
Error taxonomy for the page relay. Each error carries the HTTP status
the endpoint answers with and a human-readable message.
"""


class RelayError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BadRequest(RelayError):
    status_code = 400


class Forbidden(RelayError):
    status_code = 403


class UpstreamFetchError(RelayError):
    """Target server answered with a non-2xx status."""

    status_code = 500

    def __init__(self, upstream_status: int, reason: str = ""):
        self.upstream_status = upstream_status
        self.reason = reason
        super().__init__(f"Failed to fetch: {upstream_status} {reason}".rstrip())


class UnhandledError(RelayError):
    status_code = 500
