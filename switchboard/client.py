"""switchboard/client.py

Stateless request/response wrapper around an OpenAI-compatible
``/chat/completions`` endpoint.

Every failure mode (transport error, non-200 status, undecodable body) is
raised as :class:`~switchboard.errors.ModelClientError`. Nothing is retried.
Streamed responses arrive as server-sent events, one ``data:`` line per
chunk, terminated by ``data: [DONE]``.
"""

from __future__ import annotations

# Standard Library
import json
import logging
from collections.abc import Iterator, Mapping
from typing import Any, Protocol, runtime_checkable

# Third-Party Libraries
import httpx

# Local Modules
from switchboard.errors import ModelClientError

logger = logging.getLogger(__name__)

# Sampling defaults applied to every request unless the caller sets them.
_REQUEST_DEFAULTS: dict[str, float] = {
    "top_p": 1.0,
    "frequency_penalty": 0.0,
    "presence_penalty": 0.0,
}


class ModelClient(Protocol):
    """Anything that turns a chat-completion payload into a response dict."""

    def complete(self, payload: Mapping[str, Any]) -> dict[str, Any]: ...


@runtime_checkable
class StreamingModelClient(ModelClient, Protocol):
    """A client that can also yield a response as incremental chunks."""

    def stream(self, payload: Mapping[str, Any]) -> Iterator[dict[str, Any]]: ...


class ChatCompletionClient:
    """HTTPS client for the chat-completion API."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openai.com/v1",
        timeout: float = 30.0,
        connect_timeout: float = 10.0,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: Bearer token sent in the ``Authorization`` header.
            base_url: API base URL; ``/chat/completions`` is appended.
            timeout: Total request timeout in seconds.
            connect_timeout: Connection timeout in seconds.
        """
        self.api_key = api_key
        self.endpoint = base_url.rstrip("/") + "/chat/completions"
        self.timeout = httpx.Timeout(timeout, connect=connect_timeout)

    def complete(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        """POST a chat-completion request and return the decoded body.

        Args:
            payload: Request body (``model``, ``messages``, optional
                ``tools``/``tool_choice``, ``temperature``, ``max_tokens``).

        Returns:
            The decoded JSON response.

        Raises:
            ModelClientError: On transport failure, non-200 status or a body
                that is not valid JSON.
        """
        body: dict[str, Any] = {**_REQUEST_DEFAULTS, **payload}

        logger.info(
            "[chat_completion] model=%r messages=%d tools=%d",
            body.get("model"),
            len(body.get("messages") or []),
            len(body.get("tools") or []),
        )
        try:
            response = httpx.post(
                self.endpoint,
                json=body,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except httpx.HTTPError as exc:
            logger.error("[chat_completion] transport error: %s", exc, exc_info=True)
            raise ModelClientError(f"Transport error: {exc}") from exc

        if response.status_code != 200:
            raise ModelClientError(
                f"Chat completion API error: {_error_message(response)}",
                status_code=response.status_code,
            )

        try:
            decoded = response.json()
        except ValueError as exc:
            raise ModelClientError(f"JSON parse error: {exc}") from exc
        if not isinstance(decoded, dict):
            raise ModelClientError(
                f"JSON parse error: expected an object, got {type(decoded).__name__}"
            )
        return decoded

    def stream(self, payload: Mapping[str, Any]) -> Iterator[dict[str, Any]]:
        """POST a streaming chat-completion request and yield each chunk.

        Args:
            payload: Request body as for :meth:`complete`; ``stream`` is
                forced on.

        Yields:
            Decoded ``chat.completion.chunk`` objects in arrival order.
            Lines that are not ``data:`` events, or whose data is not a JSON
            object, are skipped.

        Raises:
            ModelClientError: On transport failure or a non-200 status.
        """
        body: dict[str, Any] = {**_REQUEST_DEFAULTS, **payload, "stream": True}

        logger.info(
            "[chat_completion] streaming model=%r messages=%d tools=%d",
            body.get("model"),
            len(body.get("messages") or []),
            len(body.get("tools") or []),
        )
        try:
            with httpx.stream(
                "POST",
                self.endpoint,
                json=body,
                headers=self._headers(),
                timeout=self.timeout,
            ) as response:
                if response.status_code != 200:
                    response.read()
                    raise ModelClientError(
                        f"Chat completion API error: {_error_message(response)}",
                        status_code=response.status_code,
                    )
                for raw_line in response.iter_lines():
                    line = raw_line.strip()
                    if not line.startswith("data:"):
                        continue
                    data = line[len("data:") :].strip()
                    if data == "[DONE]":
                        break
                    try:
                        chunk = json.loads(data)
                    except json.JSONDecodeError:
                        logger.warning("[chat_completion] unparseable stream data: %s", data[:80])
                        continue
                    if isinstance(chunk, dict):
                        yield chunk
        except httpx.HTTPError as exc:
            logger.error("[chat_completion] transport error: %s", exc, exc_info=True)
            raise ModelClientError(f"Transport error: {exc}") from exc

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }


def _error_message(response: httpx.Response) -> str:
    """Pull ``error.message`` out of an error body, falling back to the code."""
    try:
        message = response.json()["error"]["message"]
    except (ValueError, KeyError, TypeError):
        message = None
    return str(message) if message else f"HTTP error: {response.status_code}"


def first_choice(response: Mapping[str, Any]) -> dict[str, Any] | None:
    """Return the first choice of a response, or ``None`` if there is none."""
    choices = response.get("choices") or []
    if not choices or not isinstance(choices[0], dict):
        return None
    return choices[0]
