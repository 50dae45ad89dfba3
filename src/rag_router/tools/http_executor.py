"""HTTP client for the tool backend."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from rag_router.config import ToolBackendConfig
from rag_router.errors import ToolExecutionError
from rag_router.types import ToolResult

logger = logging.getLogger(__name__)


class HttpToolExecutor:
    """Executes tool calls as GET requests against the tool backend.

    Each tool maps to one endpoint. Path placeholders such as `{id}` are
    filled from the parameters and the remaining non-empty parameters are sent
    as the query string. Backend responses follow the
    `{"success": bool, "data": ..., "message": ...}` envelope.
    """

    def __init__(
        self,
        config: ToolBackendConfig | None = None,
        *,
        client: httpx.Client | None = None,
    ) -> None:
        self.config = config or ToolBackendConfig()
        self._client = client or httpx.Client(
            base_url=self.config.base_url,
            timeout=self.config.timeout_seconds,
        )

    def execute(self, tool_name: str, endpoint: str, params: dict[str, Any]) -> ToolResult:
        logger.info("Executing tool %s with params %s", tool_name, params)
        try:
            payload = self.get_json(endpoint, params)
        except ToolExecutionError as exc:
            logger.warning("Tool %s failed: %s", tool_name, exc)
            return ToolResult(tool=tool_name, success=False, error=str(exc))

        return ToolResult(
            tool=tool_name,
            success=True,
            data=payload.get("data", payload),
            raw=payload,
        )

    def get_json(self, endpoint: str, params: dict[str, Any]) -> dict[str, Any]:
        """GET `endpoint` and return the decoded success envelope.

        Raises:
            ToolExecutionError: on transport errors, undecodable bodies, or a
                payload with `success: false` / a non-2xx status.
        """

        path, query = _build_request(endpoint, params)
        try:
            response = self._client.get(path, params=query)
        except httpx.HTTPError as exc:
            raise ToolExecutionError(
                f"Tool backend unreachable at {self.config.base_url}: {exc}. "
                "Start it with `uvicorn rag_router.mock_api.server:app --port 3000`."
            ) from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise ToolExecutionError(
                f"Tool backend returned non-JSON response ({response.status_code})"
            ) from exc

        if not isinstance(payload, dict):
            raise ToolExecutionError("Tool backend returned an unexpected payload")
        if payload.get("success") is False or response.is_error:
            message = payload.get("message") or f"HTTP {response.status_code}"
            raise ToolExecutionError(str(message))
        return payload

    def health(self) -> dict[str, Any]:
        return self.get_json("/health", {})

    def close(self) -> None:
        self._client.close()


def _build_request(endpoint: str, params: dict[str, Any]) -> tuple[str, dict[str, str]]:
    path = endpoint
    query: dict[str, str] = {}
    for key, value in params.items():
        if value is None or value == "":
            continue
        placeholder = "{" + key + "}"
        if placeholder in path:
            path = path.replace(placeholder, str(value))
            continue
        query[key] = _format_value(value)
    return path, query


def _format_value(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
