"""Client for the current-weather provider."""

from __future__ import annotations

from typing import Mapping, Optional

import requests

from match_insight.providers.base import DEFAULT_TIMEOUT_SECONDS, ProviderClient
from match_insight.providers.errors import FetchNotFoundError, MalformedPayloadError
from match_insight.providers.models import WeatherSnapshot


class WeatherClient:
    """Fetch current conditions for a venue location, in metric units."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._http = ProviderClient(
            base_url, token=api_key, token_param="appid", timeout=timeout, session=session
        )

    def close(self) -> None:
        self._http.close()

    def fetch(self, location: str) -> WeatherSnapshot:
        if not location or not location.strip():
            raise FetchNotFoundError("No venue location to look up weather for")
        payload = self._http.get_json("", {"q": location.strip(), "units": "metric"})
        if not isinstance(payload, Mapping):
            raise MalformedPayloadError("Weather provider returned a non-object body")
        return WeatherSnapshot.from_payload(payload)


__all__ = ["WeatherClient"]
