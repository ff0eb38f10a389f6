"""
PSGC (Philippine Standard Geographic Code) lookups for address entry.

Each list is cached for the client's lifetime after its first successful
fetch. A failed fetch returns [] and is not cached, so the next call tries
again.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

logger = logging.getLogger(__name__)

# Region 130000000 is NCR (Metro Manila)
NCR_REGION_CODE = "130000000"


class LocationClient:
    def __init__(
        self,
        base_url: str = "https://psgc.gitlab.io/api",
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._cache: dict[str, list[dict]] = {}

    def _fetch(self, key: str, path: str) -> list[dict]:
        if key in self._cache:
            return self._cache[key]

        url = f"{self.base_url}{path}"
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                resp = client.get(url)
                resp.raise_for_status()
                data = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Failed to fetch %s: %s", url, exc)
            return []

        if not isinstance(data, list):
            logger.warning("Unexpected payload from %s", url)
            return []

        data = sorted(data, key=lambda row: str(row.get("name", "")) if isinstance(row, dict) else "")
        self._cache[key] = data
        return data

    def list_metro_manila_cities(self) -> list[dict]:
        return self._fetch("mm-cities", f"/regions/{NCR_REGION_CODE}/cities-municipalities/")

    def list_provinces(self) -> list[dict]:
        return self._fetch("all-provinces", "/provinces/")

    def list_cities_by_province(self, province_code: str) -> list[dict]:
        return self._fetch(f"cities-{province_code}", f"/provinces/{province_code}/cities-municipalities/")

    def list_barangays_by_city(self, city_code: str) -> list[dict]:
        return self._fetch(f"barangays-{city_code}", f"/cities-municipalities/{city_code}/barangays/")

    def clear_cache(self) -> None:
        self._cache.clear()
