"""Tests for src.api.openai_proxy — the chat-completion passthrough."""

import json
from unittest.mock import patch

import httpx
import pytest

from src.api.openai_proxy import PROXY_PATH, app

UPSTREAM_URL = "https://upstream.test/v1/chat/completions"


def _client():
    transport = httpx.ASGITransport(app=app)
    return httpx.AsyncClient(transport=transport, base_url="http://test")


def _upstream(handler):
    """Patch the upstream client factory to route requests through `handler`."""
    return patch(
        "src.api.openai_proxy._upstream_client",
        side_effect=lambda: httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


@pytest.fixture
def proxy_settings():
    with patch("src.api.openai_proxy.settings") as mock_settings:
        mock_settings.OPENAI_API_KEY = "sk-server"
        mock_settings.OPENAI_API_URL = UPSTREAM_URL
        yield mock_settings


CHAT_BODY = {
    "model": "gpt-3.5-turbo",
    "messages": [{"role": "user", "content": "hi"}],
    "max_tokens": 500,
    "temperature": 0.7,
}


class TestProxyPost:
    @pytest.mark.asyncio
    async def test_forwards_request_and_returns_body(self, proxy_settings):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"choices": [{"message": {"content": "hello"}}]})

        with _upstream(handler):
            async with _client() as client:
                resp = await client.post(PROXY_PATH, json=CHAT_BODY)

        assert resp.status_code == 200
        assert resp.json()["choices"][0]["message"]["content"] == "hello"
        assert seen["url"] == UPSTREAM_URL
        assert seen["auth"] == "Bearer sk-server"
        assert seen["body"] == CHAT_BODY

    @pytest.mark.asyncio
    async def test_defaults_fill_missing_fields(self, proxy_settings):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"choices": []})

        with _upstream(handler):
            async with _client() as client:
                resp = await client.post(PROXY_PATH, json={"messages": []})

        assert resp.status_code == 200
        assert seen["body"]["model"] == "gpt-3.5-turbo"
        assert seen["body"]["max_tokens"] == 500
        assert seen["body"]["temperature"] == 0.7

    @pytest.mark.asyncio
    async def test_missing_server_key(self, proxy_settings):
        proxy_settings.OPENAI_API_KEY = ""
        async with _client() as client:
            resp = await client.post(PROXY_PATH, json=CHAT_BODY)
        assert resp.status_code == 500
        assert resp.json() == {"error": "OpenAI API key not set in environment variables."}

    @pytest.mark.asyncio
    async def test_upstream_error_passed_through(self, proxy_settings):
        error_body = {"error": {"message": "Rate limit reached", "type": "requests"}}

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(429, json=error_body)

        with _upstream(handler):
            async with _client() as client:
                resp = await client.post(PROXY_PATH, json=CHAT_BODY)

        assert resp.status_code == 429
        assert resp.json() == error_body

    @pytest.mark.asyncio
    async def test_network_failure_returns_500(self, proxy_settings):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused")

        with _upstream(handler):
            async with _client() as client:
                resp = await client.post(PROXY_PATH, json=CHAT_BODY)

        assert resp.status_code == 500
        assert "connection refused" in resp.json()["error"]


class TestProxyMethods:
    @pytest.mark.asyncio
    async def test_options_ok(self):
        async with _client() as client:
            resp = await client.options(PROXY_PATH)
        assert resp.status_code == 200

    @pytest.mark.asyncio
    async def test_get_not_allowed(self):
        async with _client() as client:
            resp = await client.get(PROXY_PATH)
        assert resp.status_code == 405
        assert resp.json() == {"error": "Method Not Allowed"}

    @pytest.mark.asyncio
    async def test_delete_not_allowed(self):
        async with _client() as client:
            resp = await client.delete(PROXY_PATH)
        assert resp.status_code == 405

    @pytest.mark.asyncio
    async def test_health(self):
        async with _client() as client:
            resp = await client.get("/health")
        assert resp.json() == {"status": "ok"}
