class CacheXError(Exception):
    """Base class for all exceptions in CacheX Client."""


class SerializationError(CacheXError):
    """Exception raised when a batch cannot be encoded or a response decoded."""


class RequestTimeoutError(CacheXError, TimeoutError):
    """Exception raised when an operation exceeds its configured timeout."""


class TransportError(CacheXError):
    """Exception raised for connection or network failures below HTTP."""


class RemoteError(CacheXError):
    """Exception raised when the cache service answers with a non-success status."""

    def __init__(self, status_code: int, body: str) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"unexpected response code {status_code}: {body}")
