"""Shared HTTP plumbing for provider clients."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urljoin

import requests

from match_insight.providers.errors import (
    FetchNotFoundError,
    FetchRejectedError,
    FetchTimeoutError,
    MalformedPayloadError,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0


class ProviderClient:
    """Issue GET requests against one provider and map failures to fetch errors.

    Clients never retry and never cache; both are caller concerns.
    """

    def __init__(
        self,
        base_url: str,
        *,
        token: Optional[str] = None,
        token_param: str = "token",
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._base_url = base_url if base_url.endswith("/") else f"{base_url}/"
        self._token = token
        self._token_param = token_param
        self._timeout = timeout
        self._session = session or requests.Session()

    @property
    def timeout(self) -> float:
        return self._timeout

    def close(self) -> None:
        self._session.close()

    def _url(self, path: str) -> str:
        if not path:
            return self._base_url.rstrip("/")
        return urljoin(self._base_url, path.lstrip("/"))

    def get_json(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        """GET ``path`` and return the decoded JSON body."""

        query: Dict[str, Any] = dict(params or {})
        if self._token:
            query[self._token_param] = self._token

        url = self._url(path)
        logger.debug("GET %s", url)
        try:
            response = self._session.get(url, params=query, timeout=self._timeout)
        except requests.Timeout as exc:
            raise FetchTimeoutError(f"Timed out after {self._timeout:g}s calling {path}") from exc
        except requests.RequestException as exc:
            raise FetchTimeoutError(f"Unable to reach provider for {path}: {exc}") from exc

        if response.status_code == 404:
            raise FetchNotFoundError(f"{path} returned HTTP 404")
        if response.status_code >= 500:
            raise FetchTimeoutError(f"{path} returned HTTP {response.status_code}")
        if response.status_code >= 400:
            raise FetchRejectedError(f"{path} was rejected with HTTP {response.status_code}", response.status_code)

        try:
            return response.json()
        except ValueError as exc:
            raise MalformedPayloadError(f"{path} did not return JSON") from exc


__all__ = ["DEFAULT_TIMEOUT_SECONDS", "ProviderClient"]
