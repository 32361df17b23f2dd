"""Thin async REST client for the generative language backend."""

from __future__ import annotations

from typing import Any, Mapping

import httpx

from knowsynth.errors import BackendError
from knowsynth.metrics.observability import get_logger

LOGGER = get_logger("backend")


class GeminiRestClient:
    """Issue authenticated JSON requests and translate failures into ``BackendError``."""

    def __init__(
        self,
        *,
        api_key: str | None,
        base_url: str,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    @property
    def base_url(self) -> str:
        return self._base_url

    async def post(self, path: str, payload: Mapping[str, Any], *, error_message: str) -> dict[str, Any]:
        return await self._request("POST", path, json=payload, error_message=error_message)

    async def get(
        self,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        error_message: str,
    ) -> dict[str, Any]:
        return await self._request("GET", path, params=params, error_message=error_message)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        error_message: str,
        json: Mapping[str, Any] | None = None,
        params: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        query: dict[str, Any] = dict(params or {})
        if self._api_key:
            query["key"] = self._api_key
        url = f"{self._base_url}/{path.lstrip('/')}"
        try:
            response = await self._client.request(method, url, json=json, params=query)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            detail = _error_detail(exc.response) or error_message
            LOGGER.warning("backend.http_error", path=path, status=exc.response.status_code, detail=detail)
            raise BackendError(detail, status_code=exc.response.status_code) from exc
        except httpx.HTTPError as exc:
            LOGGER.warning("backend.transport_error", path=path, detail=str(exc))
            raise BackendError(f"{error_message}: {exc}") from exc
        try:
            data = response.json()
        except ValueError as exc:
            raise BackendError(f"{error_message}: response was not JSON") from exc
        if not isinstance(data, dict):
            raise BackendError(f"{error_message}: unexpected response shape")
        return data


def _error_detail(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return None


__all__ = ["GeminiRestClient"]
