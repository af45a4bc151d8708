"""Errors raised while querying the AC Transit API.

None of these are retried; they surface to the immediate caller.
"""


class ACTransitError(Exception):
    """Base exception for AC Transit errors."""

    pass


class InvalidStopIDError(ACTransitError, ValueError):
    """Stop ID does not start with a run of digits."""

    def __init__(self, stop_id: str):
        self.stop_id = stop_id
        super().__init__(f"Invalid stop ID: {stop_id}")


class InvalidURLError(ACTransitError, ValueError):
    """Base URL plus token is not an absolute URL."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(f"Invalid URL: {url}")


class TransportError(ACTransitError):
    """Exception for network-related errors (DNS, refused connection, timeout)."""

    pass


class RequestFailedError(ACTransitError):
    """Upstream answered with a status code of 400 or above."""

    def __init__(self, status_code: int, body: str = ""):
        self.status_code = status_code
        self.body = body
        super().__init__(f"Request failed, status code {status_code}: {body}")


class DecodeError(ACTransitError):
    """Response body is not the JSON shape we expect."""

    pass


class TransitTimeParseError(ACTransitError, ValueError):
    """Timestamp does not match the YYYY-MM-DDTHH:MM:SS layout."""

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Invalid AC Transit time: {value!r}")
