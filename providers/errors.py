from typing import Optional


class ProviderError(Exception):
    """
    A failed completion call, whatever went wrong

    HTTP failures carry the status code and the raw response body. Failures
    reported inside a successful response (truncated output, no candidates,
    empty text) carry no status code but keep the decoded body for debugging.
    """

    def __init__(
        self,
        provider: str,
        message: str,
        status_code: Optional[int] = None,
        raw_error: Optional[str] = None,
    ):
        super().__init__(message)
        self.provider = provider
        self.message = message
        self.status_code = status_code
        self.raw_error = raw_error

    def __repr__(self) -> str:
        return f"ProviderError(provider={self.provider!r}, message={self.message!r}, status_code={self.status_code!r})"
