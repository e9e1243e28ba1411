"""HTTP tools: a generic request tool and configured API endpoints."""

import json
import logging
from typing import Any, Optional, Union
from urllib.parse import urlencode

import httpx
from pydantic import Field

from agent_runtime.exceptions import ToolHttpError, ToolInvalidInput
from agent_runtime.tools.base import Tool, ToolInput, ToolOutput

logger = logging.getLogger(__name__)

SUPPORTED_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS")

Body = Union[str, dict, list]


def _encode_body(body: Optional[Body]) -> Optional[str]:
    if body is None or isinstance(body, str):
        return body
    return json.dumps(body)


class HttpInput(ToolInput):
    method: str = Field(..., description="HTTP method to use (GET, POST, PUT, DELETE, PATCH, HEAD, OPTIONS)")
    url: str = Field(..., description="URL to request")
    headers: dict[str, str] = Field(default_factory=dict, description="Optional HTTP headers")
    body: Optional[Body] = Field(None, description="Optional request body (for POST, PUT, PATCH)")
    timeout_secs: Optional[int] = Field(
        None, ge=1, le=300, description="Optional timeout in seconds (default: 30)"
    )


class HttpTool(Tool):
    """Make HTTP requests.

    Args:
        timeout: Default request timeout in seconds.
        transport: Optional httpx transport (e.g. ``httpx.MockTransport``).
    """

    name = "http"
    description = (
        "Make HTTP requests (GET, POST, PUT, DELETE, PATCH). "
        "Supports custom headers and request body."
    )
    input_model = HttpInput

    def __init__(
        self,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout
        self.transport = transport

    async def run(self, input: HttpInput) -> ToolOutput:
        method = input.method.upper()
        if method not in SUPPORTED_METHODS:
            raise ToolInvalidInput(f"Unsupported HTTP method: {input.method}")

        headers = dict(input.headers)
        body = _encode_body(input.body)
        if body is not None and not any(k.lower() == "content-type" for k in headers):
            headers["Content-Type"] = "application/json"

        timeout = input.timeout_secs or self.timeout
        logger.debug("HTTP %s %s", method, input.url)
        try:
            async with httpx.AsyncClient(timeout=timeout, transport=self.transport) as client:
                response = await client.request(
                    method, input.url, headers=headers, content=body
                )
        except httpx.HTTPError as e:
            raise ToolHttpError(f"{method} {input.url} failed: {e}") from e

        return ToolOutput(
            content=response.text,
            success=not response.is_error,
            metadata={
                "status": response.status_code,
                "status_text": response.reason_phrase,
                "headers": dict(response.headers),
                "url": input.url,
                "method": method,
            },
        )


class EndpointInput(ToolInput):
    path: Optional[str] = Field(None, description="Path to append to base URL (optional)")
    query: dict[str, Any] = Field(default_factory=dict, description="Query parameters (optional)")
    body: Optional[Body] = Field(None, description="Request body (optional)")


class ConfiguredHttpTool(Tool):
    """A named API endpoint with a fixed base URL, method and headers."""

    description = "Pre-configured HTTP API endpoint"
    input_model = EndpointInput

    def __init__(
        self,
        name: str,
        base_url: str,
        method: str = "GET",
        headers: Optional[dict[str, str]] = None,
        timeout: float = 30.0,
        description: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.name = name
        self.base_url = base_url
        self.method = method
        self.headers = dict(headers or {})
        if description:
            self.description = description
        self.http_tool = HttpTool(timeout=timeout, transport=transport)

    def build_url(self, path: Optional[str] = None, query: Optional[dict[str, Any]] = None) -> str:
        url = self.base_url
        if path:
            if not path.startswith("/") and not url.endswith("/"):
                url += "/"
            url += path
        if query:
            params = {k: v if isinstance(v, str) else json.dumps(v) for k, v in query.items()}
            url += "?" + urlencode(params)
        return url

    async def run(self, input: EndpointInput) -> ToolOutput:
        request: dict[str, Any] = {
            "method": self.method,
            "url": self.build_url(input.path, input.query),
            "headers": self.headers,
        }
        if input.body is not None:
            request["body"] = input.body
        return await self.http_tool.execute(request)
