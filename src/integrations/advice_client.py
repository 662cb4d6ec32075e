"""AI advice client — talks to the LifeTune chat-completion proxy.

Sends a system + user message pair to POST /api/openai-proxy and returns the
assistant's text. Never raises: every failure (missing key, timeout,
connectivity, non-2xx, malformed body) comes back as a readable message the
caller can show as-is.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING

import httpx

from src.config import settings
from src.core import prompts

if TYPE_CHECKING:
    from src.data.models import Goal, HabitEntry, Profile
    from src.ports.credential_port import CredentialProvider

logger = logging.getLogger(__name__)


class AdviceErrorKind(str, Enum):
    MISSING_CREDENTIAL = "missing_credential"
    TIMEOUT = "timeout"
    CONNECTION = "connection"
    HTTP_STATUS = "http_status"
    BAD_RESPONSE = "bad_response"


ERROR_MESSAGES: dict[AdviceErrorKind, str] = {
    AdviceErrorKind.MISSING_CREDENTIAL: (
        "The AI coach is not configured yet: no API key has been set."
    ),
    AdviceErrorKind.TIMEOUT: (
        "The AI coach took too long to answer. Please try again in a moment."
    ),
    AdviceErrorKind.CONNECTION: (
        "Couldn't reach the AI coach. Please check your connection and try again."
    ),
    AdviceErrorKind.HTTP_STATUS: "The AI coach returned an error",
    AdviceErrorKind.BAD_RESPONSE: (
        "Sorry, the AI coach couldn't generate a response."
    ),
}


def error_message(kind: AdviceErrorKind, detail: str = "") -> str:
    """Human-readable text for an advice failure."""
    base = ERROR_MESSAGES[kind]
    if detail:
        return f"{base} ({detail})."
    return base


class AdviceClient:
    """Async client for the advice proxy."""

    def __init__(
        self,
        credentials: CredentialProvider,
        proxy_url: str | None = None,
        model: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        self._credentials = credentials
        self._proxy_url = proxy_url or settings.ADVICE_PROXY_URL
        self._model = model or settings.ADVICE_MODEL
        self._max_tokens = settings.ADVICE_MAX_TOKENS if max_tokens is None else max_tokens
        self._temperature = settings.ADVICE_TEMPERATURE if temperature is None else temperature
        self._timeout = (
            settings.ADVICE_TIMEOUT_SECONDS if timeout_seconds is None else timeout_seconds
        )

    def _build_payload(self, prompt_text: str) -> dict:
        return {
            "model": self._model,
            "messages": [
                {"role": "system", "content": prompts.SYSTEM_PROMPT},
                {"role": "user", "content": prompt_text},
            ],
            "max_tokens": self._max_tokens,
            "temperature": self._temperature,
        }

    async def request_advice(self, prompt_text: str) -> str:
        """Send one prompt to the proxy and return the reply (or an error message)."""
        api_key = self._credentials.get()
        if not api_key:
            logger.warning("Advice requested without an API key")
            return error_message(AdviceErrorKind.MISSING_CREDENTIAL)

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(
                    self._proxy_url,
                    json=self._build_payload(prompt_text),
                    headers={"Authorization": f"Bearer {api_key}"},
                )
        except httpx.TimeoutException as exc:
            logger.warning("Advice request timed out: %s", exc)
            return error_message(AdviceErrorKind.TIMEOUT)
        except httpx.HTTPError as exc:
            logger.warning("Advice request failed: %s", exc)
            return error_message(AdviceErrorKind.CONNECTION)

        if resp.status_code >= 400:
            detail = _extract_error(resp)
            logger.warning("Advice proxy returned %d: %s", resp.status_code, detail)
            return error_message(
                AdviceErrorKind.HTTP_STATUS,
                f"HTTP {resp.status_code}" + (f": {detail}" if detail else ""),
            )

        try:
            content = resp.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            logger.warning("Malformed advice response: %s", exc)
            return error_message(AdviceErrorKind.BAD_RESPONSE)

        if not isinstance(content, str) or not content.strip():
            return error_message(AdviceErrorKind.BAD_RESPONSE)
        return content.strip()

    async def daily_advice(
        self,
        profile: Profile,
        entries: list[HabitEntry],
        now: datetime | None = None,
    ) -> str:
        """Encouragement for today based on the profile and recent habits."""
        now = now or datetime.now(timezone.utc)
        return await self.request_advice(prompts.build_advice_prompt(profile, entries, now))

    async def request_goal_review(self, goals: list[Goal], entries: list[HabitEntry]) -> str:
        """Review of active goals' progress."""
        return await self.request_advice(prompts.build_goal_review_prompt(goals, entries))

    async def chat(self, message: str, context: str = "") -> str:
        """Answer a free-form question."""
        return await self.request_advice(prompts.build_chat_prompt(message, context))


def _extract_error(resp: httpx.Response) -> str:
    """Pull an error message out of a proxy/upstream error body, if any."""
    try:
        body = resp.json()
    except ValueError:
        return ""
    if not isinstance(body, dict):
        return ""
    error = body.get("error")
    if isinstance(error, dict):
        return str(error.get("message", ""))
    return str(error or "")
