"""Error kinds raised at the provider boundary."""

from __future__ import annotations

from typing import Iterable, Tuple


class FetchError(RuntimeError):
    """Base class for every failure surfaced by a provider client."""


class FetchTimeoutError(FetchError):
    """Network failure, timeout or upstream server error."""


class FetchRejectedError(FetchError):
    """The provider refused the request: bad credentials, quota exhausted or bad parameters."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class FetchNotFoundError(FetchError, LookupError):
    """The provider has no record for the requested key."""


class MalformedPayloadError(FetchError, ValueError):
    """The provider answered, but the payload is not usable."""

    def __init__(self, message: str, missing: Iterable[str] = ()) -> None:
        self.missing: Tuple[str, ...] = tuple(missing)
        if self.missing:
            message = f"{message} (missing: {', '.join(self.missing)})"
        super().__init__(message)


__all__ = [
    "FetchError",
    "FetchNotFoundError",
    "FetchRejectedError",
    "FetchTimeoutError",
    "MalformedPayloadError",
]
