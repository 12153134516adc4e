# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

from typing import Any, Dict, Optional

import httpx

from pacbridge.core.exceptions import NetworkQueryError


class JsonHttpClient:
    """Blocking JSON GETs over a shared httpx client"""

    def __init__(
        self,
        timeout: Optional[float] = None,
        user_agent: str = "pacbridge",
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self._client = httpx.Client(
            timeout=timeout,
            headers={"User-Agent": user_agent, "Accept": "application/json"},
            follow_redirects=True,
            transport=transport,
        )

    def get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET url and decode the body as JSON; any failure is a NetworkQueryError"""
        try:
            response = self._client.get(url, params=params)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as e:
            raise NetworkQueryError(f"Request failed: {e}", url=url, cause=e)
        except ValueError as e:
            raise NetworkQueryError(f"Malformed JSON from {url}", url=url, cause=e)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "JsonHttpClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
