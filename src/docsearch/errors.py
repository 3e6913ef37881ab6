"""
Exception hierarchy for the docsearch client.

HTTP failures are mapped to one class per status family by the transport.
Import failures carry the per-document outcomes so callers can retry
exactly the rejected subset.
"""

from typing import List, Optional, Union

from docsearch.models import ImportFailure, ImportSuccess


class SearchClientError(Exception):
    """Base class for every error raised by docsearch."""


class MissingConfigurationError(SearchClientError):
    pass


class MissingDocumentError(SearchClientError, ValueError):
    """A document argument was required but not given."""

    def __init__(self, message: str = "No document provided"):
        super().__init__(message)


class RequestAbortedError(SearchClientError):
    """The caller's abort signal fired before the request resolved."""

    def __init__(self, message: str = "Request aborted by caller"):
        super().__init__(message)


class HTTPError(SearchClientError):
    def __init__(self, message: str, http_status: Optional[int] = None):
        super().__init__(message)
        self.http_status = http_status


class RequestMalformed(HTTPError):
    pass


class RequestUnauthorized(HTTPError):
    pass


class ObjectNotFound(HTTPError):
    pass


class ObjectAlreadyExists(HTTPError):
    pass


class ObjectUnprocessable(HTTPError):
    pass


class ServerError(HTTPError):
    pass


STATUS_ERRORS = {
    400: RequestMalformed,
    401: RequestUnauthorized,
    404: ObjectNotFound,
    409: ObjectAlreadyExists,
    422: ObjectUnprocessable,
}


def error_for_status(http_status: int, message: str) -> HTTPError:
    """Build the error matching an HTTP status code."""
    if http_status >= 500:
        error_class = ServerError
    else:
        error_class = STATUS_ERRORS.get(http_status, HTTPError)
    return error_class(f"Request failed with HTTP code {http_status} | Server said: {message}", http_status)


ImportResult = Union[ImportSuccess, ImportFailure]


class ImportError_(SearchClientError):
    """
    Raised when one or more documents of a structured import were rejected.

    ``import_results`` holds one outcome per submitted document, in
    submission order, successes included.
    """

    def __init__(self, message: str, import_results: List[ImportResult]):
        super().__init__(message)
        self.import_results = import_results

    @property
    def successes(self) -> List[ImportSuccess]:
        return [r for r in self.import_results if r.success]

    @property
    def failures(self) -> List[ImportFailure]:
        return [r for r in self.import_results if not r.success]
