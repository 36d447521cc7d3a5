"""switchboard/messages.py

Chat message and tool-call value types in OpenAI wire format.
"""

from __future__ import annotations

# Standard Library
import dataclasses
import json
import logging
from collections.abc import Iterable, Mapping
from typing import Any, Literal

logger = logging.getLogger(__name__)

Role = Literal["system", "user", "assistant", "tool"]


@dataclasses.dataclass(slots=True)
class ToolCallRequest:
    """A function invocation emitted by the model.

    Attributes:
        id: Opaque identifier correlating the call with its tool message.
        function_name: Name of the function the model wants to call.
        arguments_json: Raw JSON argument text as sent by the model.
    """

    id: str
    function_name: str
    arguments_json: str = "{}"

    @classmethod
    def from_api(cls, raw: Mapping[str, Any]) -> ToolCallRequest:
        """Build a request from a ``tool_calls`` entry of an API response."""
        function = raw.get("function") or {}
        arguments = function.get("arguments")
        if arguments is None:
            arguments = "{}"
        elif not isinstance(arguments, str):
            # Some OpenAI-compatible servers send arguments pre-decoded.
            arguments = json.dumps(arguments)
        return cls(
            id=str(raw.get("id") or ""),
            function_name=str(function.get("name") or ""),
            arguments_json=arguments,
        )

    def parse_arguments(self) -> dict[str, Any]:
        """Decode the JSON arguments into a mapping.

        Malformed JSON, or JSON that is not an object, degrades to an empty
        mapping so the delegation loop can carry on.

        Returns:
            The decoded argument mapping, possibly empty.
        """
        try:
            parsed = json.loads(self.arguments_json or "{}")
        except json.JSONDecodeError as exc:
            logger.warning(
                "Malformed arguments for %s (%s): %r",
                self.function_name,
                exc,
                self.arguments_json[:200],
            )
            return {}
        if not isinstance(parsed, dict):
            logger.warning(
                "Arguments for %s are not an object: %r",
                self.function_name,
                parsed,
            )
            return {}
        return parsed

    def to_api(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": "function",
            "function": {
                "name": self.function_name,
                "arguments": self.arguments_json,
            },
        }


class ToolCallAccumulator:
    """Rebuilds complete tool calls from streamed ``delta.tool_calls`` fragments.

    Fragments are grouped by their ``index``. The id and function name are
    taken from whichever fragment carries them; argument text is
    concatenated in arrival order.
    """

    def __init__(self) -> None:
        self._calls: dict[int, dict[str, str]] = {}

    def add(self, fragments: Iterable[Mapping[str, Any]]) -> None:
        for fragment in fragments:
            call = self._calls.setdefault(
                int(fragment.get("index") or 0),
                {"id": "", "name": "", "arguments": ""},
            )
            if fragment.get("id"):
                call["id"] = str(fragment["id"])
            function = fragment.get("function") or {}
            if function.get("name"):
                call["name"] = str(function["name"])
            if function.get("arguments"):
                call["arguments"] += str(function["arguments"])

    def requests(self) -> list[ToolCallRequest]:
        """The accumulated calls, ordered by index."""
        return [
            ToolCallRequest(
                id=call["id"],
                function_name=call["name"],
                arguments_json=call["arguments"] or "{}",
            )
            for _, call in sorted(self._calls.items())
        ]

    def __len__(self) -> int:
        return len(self._calls)


@dataclasses.dataclass(slots=True)
class Message:
    """One entry of a conversation log.

    Attributes:
        role: ``system``, ``user``, ``assistant`` or ``tool``.
        content: Message text; may be empty for assistant tool-call turns.
        tool_call_id: For ``tool`` messages, the id of the answered call.
        name: For ``tool`` messages, the function name that was called.
        tool_calls: For ``assistant`` messages, the calls requested, or
            ``None`` when the model requested none.
    """

    role: Role
    content: str = ""
    tool_call_id: str | None = None
    name: str | None = None
    tool_calls: list[ToolCallRequest] | None = None

    @classmethod
    def system(cls, content: str) -> Message:
        return cls(role="system", content=content)

    @classmethod
    def user(cls, content: str) -> Message:
        return cls(role="user", content=content)

    @classmethod
    def assistant(
        cls,
        content: str,
        tool_calls: list[ToolCallRequest] | None = None,
    ) -> Message:
        return cls(role="assistant", content=content, tool_calls=tool_calls or None)

    @classmethod
    def tool(cls, tool_call_id: str, name: str, content: str) -> Message:
        return cls(role="tool", content=content, tool_call_id=tool_call_id, name=name)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> Message:
        """Build a message from a stored or API dictionary."""
        tool_calls = [
            ToolCallRequest.from_api(call) for call in raw.get("tool_calls") or []
        ]
        return cls(
            role=raw["role"],
            content=raw.get("content") or "",
            tool_call_id=raw.get("tool_call_id"),
            name=raw.get("name"),
            tool_calls=tool_calls or None,
        )

    def to_api(self) -> dict[str, Any]:
        """Serialize to the chat-completion ``messages`` entry format.

        Optional fields are omitted rather than sent as ``null``.
        """
        payload: dict[str, Any] = {"role": self.role, "content": self.content}
        if self.tool_calls:
            payload["tool_calls"] = [call.to_api() for call in self.tool_calls]
        if self.tool_call_id is not None:
            payload["tool_call_id"] = self.tool_call_id
        if self.name is not None:
            payload["name"] = self.name
        return payload
