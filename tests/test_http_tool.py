import json

import httpx
import pytest

from agent_runtime.exceptions import ToolHttpError, ToolInvalidInput
from agent_runtime.tools import ConfiguredHttpTool, HttpTool


def recording_transport(status=200, body="ok", headers=None):
    """MockTransport that records each request and returns a fixed response."""
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(status, text=body, headers=headers or {})

    return httpx.MockTransport(handler), requests


class TestHttpTool:
    @pytest.mark.asyncio
    async def test_get(self):
        transport, requests = recording_transport(body='{"temp": 21}')
        tool = HttpTool(transport=transport)

        output = await tool.execute({"method": "get", "url": "https://api.example.com/weather"})

        assert output.success is True
        assert output.content == '{"temp": 21}'
        assert output.metadata["status"] == 200
        assert output.metadata["method"] == "GET"
        assert output.metadata["url"] == "https://api.example.com/weather"
        assert requests[0].method == "GET"

    @pytest.mark.asyncio
    async def test_json_body_sets_content_type(self):
        transport, requests = recording_transport(status=201)
        tool = HttpTool(transport=transport)

        await tool.execute(
            {"method": "POST", "url": "https://api.example.com/items", "body": {"name": "x"}}
        )

        request = requests[0]
        assert request.headers["content-type"] == "application/json"
        assert json.loads(request.content) == {"name": "x"}

    @pytest.mark.asyncio
    async def test_explicit_content_type_kept(self):
        transport, requests = recording_transport()
        tool = HttpTool(transport=transport)

        await tool.execute(
            {
                "method": "PUT",
                "url": "https://api.example.com/doc",
                "headers": {"Content-Type": "text/plain"},
                "body": "plain text",
            }
        )

        assert requests[0].headers["content-type"] == "text/plain"
        assert requests[0].content == b"plain text"

    @pytest.mark.asyncio
    async def test_error_status_is_unsuccessful_output(self):
        transport, _ = recording_transport(status=404, body="not found")
        tool = HttpTool(transport=transport)

        output = await tool.execute({"method": "GET", "url": "https://api.example.com/missing"})

        assert output.success is False
        assert output.content == "not found"
        assert output.metadata["status"] == 404
        assert output.metadata["status_text"] == "Not Found"

    @pytest.mark.asyncio
    async def test_unsupported_method(self):
        with pytest.raises(ToolInvalidInput, match="Unsupported HTTP method"):
            await HttpTool().execute({"method": "TRACE", "url": "https://api.example.com"})

    @pytest.mark.asyncio
    async def test_timeout_bounds(self):
        with pytest.raises(ToolInvalidInput):
            await HttpTool().execute(
                {"method": "GET", "url": "https://api.example.com", "timeout_secs": 0}
            )

    @pytest.mark.asyncio
    async def test_transport_failure(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        tool = HttpTool(transport=httpx.MockTransport(handler))

        with pytest.raises(ToolHttpError, match="connection refused"):
            await tool.execute({"method": "GET", "url": "https://api.example.com"})


class TestConfiguredHttpTool:
    def test_build_url(self):
        tool = ConfiguredHttpTool(name="api", base_url="https://api.example.com/v1")

        assert tool.build_url() == "https://api.example.com/v1"
        assert tool.build_url("users") == "https://api.example.com/v1/users"
        assert tool.build_url("/users") == "https://api.example.com/v1/users"
        assert (
            tool.build_url("search", {"q": "paris", "limit": 5})
            == "https://api.example.com/v1/search?q=paris&limit=5"
        )

    def test_name_and_description(self):
        tool = ConfiguredHttpTool(
            name="weather", base_url="https://api.example.com", description="Weather lookup"
        )
        assert tool.name == "weather"
        assert tool.definition()["description"] == "Weather lookup"
        assert ConfiguredHttpTool(name="x", base_url="u").description == "Pre-configured HTTP API endpoint"

    @pytest.mark.asyncio
    async def test_request_uses_configured_method_and_headers(self):
        transport, requests = recording_transport(body="created")
        tool = ConfiguredHttpTool(
            name="tickets",
            base_url="https://api.example.com",
            method="POST",
            headers={"Authorization": "Bearer token"},
            transport=transport,
        )

        output = await tool.execute({"path": "tickets", "body": {"title": "bug"}})

        request = requests[0]
        assert output.content == "created"
        assert request.method == "POST"
        assert str(request.url) == "https://api.example.com/tickets"
        assert request.headers["authorization"] == "Bearer token"
        assert json.loads(request.content) == {"title": "bug"}
