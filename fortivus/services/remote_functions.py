"""
Client for the hosted serverless functions (invoked by name over HTTP).
"""
from __future__ import annotations

import logging
from typing import Any

import httpx
from fastapi import status

from fortivus.core.config import settings
from fortivus.core.errors import RemoteFunctionError

logger = logging.getLogger(__name__)


class FunctionsClient:
    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def invoke(self, name: str, body: dict[str, Any]) -> dict[str, Any]:
        """
        POST `body` to the function `name` and return its JSON object.

        Transport errors, non-2xx answers and `{"error": ...}` bodies all raise
        RemoteFunctionError; a 429 keeps its status so callers can say "try later".
        """
        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
        ) as client:
            try:
                resp = await client.post(f"/{name}", json=body, headers=self._headers())
            except httpx.RequestError as exc:
                logger.warning("Function %s unreachable: %s", name, exc)
                raise RemoteFunctionError(f"{name} is unavailable") from exc

        try:
            data = resp.json()
        except ValueError:
            data = None

        if resp.status_code == status.HTTP_429_TOO_MANY_REQUESTS:
            raise RemoteFunctionError(
                "Rate limit exceeded. Please try again later.",
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            )

        if resp.is_error or not isinstance(data, dict) or data.get("error"):
            detail = data.get("error") if isinstance(data, dict) and data.get("error") else f"{name} failed"
            logger.warning("Function %s returned %s: %s", name, resp.status_code, detail)
            raise RemoteFunctionError(str(detail))

        return data


def get_functions_client() -> FunctionsClient:
    if not settings.FUNCTIONS_BASE_URL:
        raise RemoteFunctionError(
            "Remote functions are not configured",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )
    return FunctionsClient(
        settings.FUNCTIONS_BASE_URL,
        api_key=settings.FUNCTIONS_API_KEY,
        timeout=settings.REMOTE_TIMEOUT_SECONDS,
    )
