"""Advice proxy — chat-completion passthrough for the LifeTune advice client.

POST /api/openai-proxy forwards {model, messages, max_tokens, temperature}
to the upstream chat-completion API using the server-side OPENAI_API_KEY.
Upstream errors are returned with the upstream status and body unchanged.

Run with:  uvicorn src.api.openai_proxy:app
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from src.config import settings

logger = logging.getLogger(__name__)

PROXY_PATH = "/api/openai-proxy"
_UPSTREAM_TIMEOUT_SECONDS = 60

app = FastAPI(title="LifeTune advice proxy", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


class ChatRequest(BaseModel):
    """Body accepted by the proxy; defaults match the mobile client."""

    messages: list[dict[str, Any]] = Field(default_factory=list)
    model: str = "gpt-3.5-turbo"
    max_tokens: int = 500
    temperature: float = 0.7


def _upstream_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=_UPSTREAM_TIMEOUT_SECONDS)


@app.options(PROXY_PATH)
async def proxy_options() -> Response:
    return Response(status_code=200)


@app.api_route(PROXY_PATH, methods=["GET", "PUT", "PATCH", "DELETE"])
async def proxy_method_not_allowed() -> JSONResponse:
    return JSONResponse(status_code=405, content={"error": "Method Not Allowed"})


@app.post(PROXY_PATH)
async def proxy_chat(body: ChatRequest) -> JSONResponse:
    """Forward a chat-completion request upstream."""
    api_key = settings.OPENAI_API_KEY
    logger.info(
        "Proxy request: model=%s max_tokens=%d temperature=%.2f messages=%d has_key=%s",
        body.model, body.max_tokens, body.temperature, len(body.messages), bool(api_key),
    )

    if not api_key:
        logger.error("OPENAI_API_KEY is not set")
        return JSONResponse(
            status_code=500,
            content={"error": "OpenAI API key not set in environment variables."},
        )

    try:
        async with _upstream_client() as client:
            upstream = await client.post(
                settings.OPENAI_API_URL,
                json=body.model_dump(),
                headers={"Authorization": f"Bearer {api_key}"},
            )
        data = upstream.json()
    except Exception as exc:
        logger.error("Upstream chat-completion call failed: %s", exc)
        return JSONResponse(status_code=500, content={"error": str(exc)})

    if upstream.status_code >= 400:
        logger.error("Upstream returned %d: %s", upstream.status_code, data)
        return JSONResponse(status_code=upstream.status_code, content=data)

    choices = data.get("choices") if isinstance(data, dict) else None
    logger.info("Upstream returned %d choices", len(choices or []))
    return JSONResponse(status_code=200, content=data)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}
