"""
Exceptions raised by the Jira client.

Network failures (DNS, refused connections, TLS) are not wrapped: the
underlying httpx exception reaches the caller as-is.
"""


class JiraError(Exception):
    """Base class for errors raised by jiratui."""


class JiraApiError(JiraError):
    """Non-2xx response from the Jira REST API."""

    def __init__(self, message: str, status_code: int, response_body: str = ""):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response_body = response_body

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(status_code={self.status_code}, message={self.message!r})"


class JiraTimeoutError(JiraApiError):
    """The request did not complete within the client-side deadline."""

    def __init__(self, timeout: float):
        super().__init__("Request timed out", 408, "")
        self.timeout = timeout
