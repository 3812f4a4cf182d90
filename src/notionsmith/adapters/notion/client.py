"""Thin wrapper around the Notion REST API."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
import logging
from threading import Lock
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from notionsmith.core.config import ClientConfig
from notionsmith.core.exceptions import RetrievalError


logger = logging.getLogger(__name__)

_RETRY_STATUSES = (429, 500, 502, 503, 504)


class NotionClient:
    """Retrieve blocks, pages and database rows, following pagination cursors."""

    _USER_AGENT = "notionsmith"

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        session: requests.Session | Any | None = None,
    ) -> None:
        self.config = config or ClientConfig()
        self._session_lock = Lock()
        self._session = session

    def _ensure_session(self) -> Any:
        with self._session_lock:
            if self._session is None:
                session = requests.Session()
                retry = Retry(
                    total=self.config.retries,
                    backoff_factor=0.5,
                    status_forcelist=_RETRY_STATUSES,
                    allowed_methods=frozenset({"GET", "POST"}),
                    respect_retry_after_header=True,
                )
                adapter = HTTPAdapter(max_retries=retry)
                session.mount("https://", adapter)
                session.mount("http://", adapter)
                self._session = session
            return self._session

    def _headers(self) -> dict[str, str]:
        headers = {
            "Notion-Version": self.config.api_version,
            "Content-Type": "application/json",
            "User-Agent": self._USER_AGENT,
        }
        if self.config.token:
            headers["Authorization"] = f"Bearer {self.config.token}"
        return headers

    def _request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Mapping[str, Any] | None = None,
        payload: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        url = f"{self.config.base_url.rstrip('/')}/{endpoint.lstrip('/')}"
        client = self._ensure_session()
        logger.debug("%s %s", method, url)
        try:
            if method == "GET":
                response = client.get(
                    url, headers=self._headers(), params=params, timeout=self.config.timeout
                )
            else:
                response = client.post(
                    url, headers=self._headers(), json=payload, timeout=self.config.timeout
                )
        except requests.RequestException as exc:
            raise RetrievalError(
                f"Request to '{endpoint}' failed: {exc}", endpoint=endpoint
            ) from exc

        if response.status_code >= 400:
            code, message = _error_details(response)
            raise RetrievalError(
                f"Request to '{endpoint}' failed with HTTP {response.status_code}"
                f" ({code}): {message}",
                endpoint=endpoint,
                status=response.status_code,
                code=code,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise RetrievalError(
                f"Response from '{endpoint}' is not valid JSON", endpoint=endpoint
            ) from exc
        if not isinstance(data, dict):
            raise RetrievalError(
                f"Response from '{endpoint}' is not a JSON object", endpoint=endpoint
            )
        return data

    def _paginate(
        self,
        method: str,
        endpoint: str,
        *,
        payload: Mapping[str, Any] | None = None,
    ) -> Iterator[dict[str, Any]]:
        cursor: str | None = None
        while True:
            if method == "GET":
                params: dict[str, Any] = {"page_size": self.config.page_size}
                if cursor:
                    params["start_cursor"] = cursor
                data = self._request("GET", endpoint, params=params)
            else:
                body = dict(payload or {})
                body["page_size"] = self.config.page_size
                if cursor:
                    body["start_cursor"] = cursor
                data = self._request("POST", endpoint, payload=body)

            results = data.get("results")
            if not isinstance(results, list):
                raise RetrievalError(
                    f"Response from '{endpoint}' has no 'results' list", endpoint=endpoint
                )
            yield from results

            cursor = data.get("next_cursor")
            if not data.get("has_more") or not cursor:
                return

    def retrieve_block(self, block_id: str) -> dict[str, Any]:
        """Return a single block object."""
        return self._request("GET", f"blocks/{block_id}")

    def list_children(self, block_id: str) -> list[dict[str, Any]]:
        """Return every child of a block or page, across all result pages."""
        return list(self._paginate("GET", f"blocks/{block_id}/children"))

    def retrieve_page(self, page_id: str) -> dict[str, Any]:
        """Return a page object with its properties."""
        return self._request("GET", f"pages/{page_id}")

    def query_database(
        self,
        database_id: str,
        *,
        filter: Mapping[str, Any] | None = None,
        sorts: list[Mapping[str, Any]] | None = None,
    ) -> list[dict[str, Any]]:
        """Return every page of a database matching an optional filter."""
        payload: dict[str, Any] = {}
        if filter:
            payload["filter"] = dict(filter)
        if sorts:
            payload["sorts"] = [dict(sort) for sort in sorts]
        return list(self._paginate("POST", f"databases/{database_id}/query", payload=payload))


def _error_details(response: Any) -> tuple[str, str]:
    try:
        data = response.json()
    except ValueError:
        return "unknown", (getattr(response, "text", "") or "").strip()[:200]
    if not isinstance(data, Mapping):
        return "unknown", str(data)[:200]
    return str(data.get("code") or "unknown"), str(data.get("message") or "")


__all__ = ["NotionClient"]
