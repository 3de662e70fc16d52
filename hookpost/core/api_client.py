"""HTTP client wrapper for JSON and multipart API endpoints."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Sequence

import httpx

from hookpost.core.errors import ApiError
from hookpost.core.models import File
from hookpost.core.multipart import build_multipart_body

logger = logging.getLogger(__name__)

BASE_URL = "https://discord.com"
API_PREFIX = "/api/v10"
DEFAULT_TIMEOUT = 15.0


class ApiClient:
    """Sends JSON and multipart requests to the REST API."""

    def __init__(
        self,
        token: str,
        base_url: str = BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = httpx.Client(timeout=timeout, transport=transport)

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bot {self.token}",
            "Accept": "application/json",
        }

    def _build_url(self, path: str) -> str:
        return f"{self.base_url}{API_PREFIX}{path}"

    def _raise_for_status(self, response: httpx.Response) -> None:
        if response.status_code < 400:
            return
        body = response.text.strip().replace("\n", " ")
        snippet = body[:200]
        message = f"API error {response.status_code}: {snippet}"
        logger.warning("%s %s failed with %s", response.request.method, response.request.url, response.status_code)
        raise ApiError(message, status_code=response.status_code)

    def _send(self, method: str, path: str, **kwargs: Any) -> Any:
        url = self._build_url(path)
        try:
            response = self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise ApiError(f"API request failed: {exc}") from exc
        self._raise_for_status(response)
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    def validate_token(self) -> bool:
        """Validate the token with a lightweight request."""
        try:
            response = self._client.get(self._build_url("/users/@me"), headers=self._headers())
        except httpx.HTTPError:
            return False
        if response.status_code in {401, 403}:
            return False
        return 200 <= response.status_code < 300

    def post_json(self, path: str, payload: Any) -> Any:
        """POST a JSON payload and return the decoded response."""
        return self._send("POST", path, headers=self._headers(), json=payload)

    def post_multipart(self, path: str, payload: Any, files: Sequence[File] = ()) -> Any:
        """POST a JSON payload with file attachments as multipart/form-data."""
        content_type, body = build_multipart_body(payload, files)
        headers = self._headers()
        headers["Content-Type"] = content_type
        logger.debug("Uploading %d attachment(s) to %s", len(files), path)
        return self._send("POST", path, headers=headers, content=body)
