"""switchboard/orchestrator.py

Shared orchestrator base and the single-agent variant.

The single-agent orchestrator makes exactly one chat-completion call per
turn. When the model asks for tools, they are executed against the
directly registered tools and their results are appended to the reply;
there is no second round-trip. The same turn can be streamed, yielding
content as it arrives and the tool trailer once the stream ends. The
looping manager variant lives in :mod:`switchboard.manager`.
"""

from __future__ import annotations

# Standard Library
import logging
from collections.abc import Iterable, Iterator, Mapping, Sequence
from typing import Any, Union

# Local Modules
from switchboard.client import ModelClient, StreamingModelClient, first_choice
from switchboard.config import ModelOptions
from switchboard.errors import ConfigurationError
from switchboard.guardrails import Guardrail, GuardrailResult, check_guardrails
from switchboard.messages import Message, ToolCallAccumulator, ToolCallRequest
from switchboard.tools.base import Tool

logger = logging.getLogger(__name__)

ThreadEntry = Union[Message, Mapping[str, Any]]

NO_RESPONSE = "No response generated."


class Orchestrator:
    """Instructions and guardrails shared by both orchestrator variants."""

    def __init__(
        self,
        client: ModelClient,
        options: ModelOptions,
        instructions: Iterable[str] = (),
        guardrails: Iterable[Guardrail] = (),
    ) -> None:
        """Initialize the orchestrator.

        Args:
            client: Chat-completion client used for every remote call.
            options: Model name, token limit and temperature.
            instructions: Base system-prompt fragments, joined with spaces.
            guardrails: Input validators applied in order before any call.
        """
        self.client = client
        self.options = options
        self.instructions: list[str] = list(instructions)
        self.guardrails: list[Guardrail] = list(guardrails)

    def add_instruction(self, instruction: str) -> Orchestrator:
        self.instructions.append(instruction)
        return self

    def add_guardrail(self, guardrail: Guardrail) -> Orchestrator:
        self.guardrails.append(guardrail)
        return self

    def check_guardrails(self, text: str) -> GuardrailResult:
        """Validate ``text`` against every guardrail, first failure wins."""
        result = check_guardrails(self.guardrails, text)
        if not result.valid:
            logger.info("Input rejected by guardrail: %s", result.message)
        return result

    def base_prompt(self) -> str:
        return " ".join(self.instructions)

    def run(self, user_input: str) -> str:
        """Process one user turn and return the reply text."""
        raise NotImplementedError

    def run_with_thread(
        self,
        thread: Sequence[ThreadEntry],
        notes_context: str = "",
    ) -> str:
        """Process the latest turn of a stored conversation thread."""
        raise NotImplementedError


def _latest_user_content(thread: Sequence[ThreadEntry]) -> str | None:
    if not thread:
        return None
    latest = _as_message(thread[-1])
    return latest.content if latest.role == "user" else None


def _as_message(entry: ThreadEntry) -> Message:
    return entry if isinstance(entry, Message) else Message.from_dict(entry)


class SingleAgentOrchestrator(Orchestrator):
    """One agent, optional direct tools, one remote call per turn."""

    def __init__(
        self,
        client: ModelClient,
        options: ModelOptions,
        instructions: Iterable[str] = (),
        guardrails: Iterable[Guardrail] = (),
        tools: Iterable[Tool] = (),
        context: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(client, options, instructions, guardrails)
        self.tools: list[Tool] = []
        self.context: dict[str, Any] = dict(context or {})
        for tool in tools:
            self.add_tool(tool)

    def add_tool(self, tool: Tool) -> SingleAgentOrchestrator:
        """Register a direct tool.

        Raises:
            ConfigurationError: If a tool with the same name is registered.
        """
        if any(existing.name == tool.name for existing in self.tools):
            raise ConfigurationError(f"Tool '{tool.name}' is already registered.")
        self.tools.append(tool)
        logger.info("Registered tool: %s", tool.name)
        return self

    def add_context(self, key: str, value: Any) -> SingleAgentOrchestrator:
        self.context[key] = value
        return self

    def build_system_prompt(self, notes_context: str = "") -> str:
        """Assemble instructions, context, notes and the tool catalog."""
        prompt = self.base_prompt()
        if self.context:
            lines = "\n".join(f"{key}: {value}" for key, value in self.context.items())
            prompt += f"\n\nHere is some additional context:\n{lines}"
        if notes_context:
            prompt += f"\n\n{notes_context}"
        if self.tools:
            catalog = "\n\n".join(tool.definition() for tool in self.tools)
            prompt += (
                f"\n\nAvailable tools:\n{catalog}\n\n"
                "Use tools when appropriate to help answer questions or complete tasks."
            )
        return prompt

    def build_request(
        self,
        thread: Sequence[ThreadEntry],
        notes_context: str = "",
    ) -> dict[str, Any]:
        """Build the chat-completion payload for a thread without sending it."""
        messages = [Message.system(self.build_system_prompt(notes_context)).to_api()]
        for entry in thread:
            message = _as_message(entry)
            messages.append({"role": message.role, "content": message.content})

        payload: dict[str, Any] = {
            "model": self.options.model,
            "messages": messages,
            "max_tokens": self.options.max_tokens,
            "temperature": self.options.temperature,
        }
        if self.tools:
            payload["tools"] = [tool.schema() for tool in self.tools]
            payload["tool_choice"] = "auto"
        return payload

    def run(self, user_input: str) -> str:
        return self.run_with_thread([Message.user(user_input)])

    def run_with_thread(
        self,
        thread: Sequence[ThreadEntry],
        notes_context: str = "",
    ) -> str:
        """Answer the latest user message of ``thread`` with one remote call.

        Args:
            thread: Ordered conversation history ending with the user turn.
            notes_context: Optional extra text appended to the system prompt.

        Returns:
            The model's reply, with an ``Executed tool calls:`` trailer when
            tools ran, or a guardrail's refusal message.

        Raises:
            ModelClientError: If the remote call fails.
        """
        latest = _latest_user_content(thread)
        if latest is not None:
            verdict = self.check_guardrails(latest)
            if not verdict.valid:
                return verdict.message

        response = self.client.complete(self.build_request(thread, notes_context))
        return self._process_response(response)

    @property
    def can_stream(self) -> bool:
        """Whether the client can deliver responses incrementally."""
        return isinstance(self.client, StreamingModelClient)

    def run_streaming(self, user_input: str) -> Iterator[str]:
        return self.stream_with_thread([Message.user(user_input)])

    def stream_with_thread(
        self,
        thread: Sequence[ThreadEntry],
        notes_context: str = "",
    ) -> Iterator[str]:
        """Answer the latest user message of ``thread`` as a stream of text.

        Content deltas are yielded as they arrive. Tool-call fragments are
        collected until the stream ends; the rebuilt calls are then executed
        and the ``Executed tool calls:`` trailer is yielded as one piece.
        Joined together, the pieces equal what :meth:`run_with_thread`
        returns for the same model output.

        Args:
            thread: Ordered conversation history ending with the user turn.
            notes_context: Optional extra text appended to the system prompt.

        Yields:
            Reply text fragments, or a guardrail's refusal message.

        Raises:
            ModelClientError: If the remote call fails.
        """
        latest = _latest_user_content(thread)
        if latest is not None:
            verdict = self.check_guardrails(latest)
            if not verdict.valid:
                yield verdict.message
                return

        content = ""
        calls = ToolCallAccumulator()
        for chunk in self.client.stream(self.build_request(thread, notes_context)):
            choice = first_choice(chunk)
            if choice is None:
                continue
            delta = choice.get("delta") or {}
            text = delta.get("content") or ""
            if text:
                content += text
                yield text
            calls.add(delta.get("tool_calls") or [])

        if calls:
            logger.info("Stream requested %d tool call(s)", len(calls))
            yield self._tool_trailer(calls.requests())
        elif not content:
            yield NO_RESPONSE

    def _process_response(self, response: Mapping[str, Any]) -> str:
        choice = first_choice(response)
        if choice is None:
            return NO_RESPONSE

        message = choice.get("message") or {}
        content = message.get("content") or ""
        tool_calls = [
            ToolCallRequest.from_api(raw) for raw in message.get("tool_calls") or []
        ]
        if not tool_calls:
            return content or NO_RESPONSE
        return content + self._tool_trailer(tool_calls)

    def _tool_trailer(self, tool_calls: Sequence[ToolCallRequest]) -> str:
        results = []
        for call in tool_calls:
            result = self.execute_tool(call.function_name, call.parse_arguments())
            results.append(f"Tool: {call.function_name}\nResult: {result}")
        return "\n\nExecuted tool calls:\n" + "\n\n".join(results)

    def execute_tool(self, tool_name: str, arguments: Mapping[str, Any]) -> str:
        """Run a direct tool by exact name.

        Returns:
            The tool result, or a textual not-found / error message.
        """
        logger.info("Tool call requested: %s with args %s", tool_name, arguments)
        for tool in self.tools:
            if tool.name == tool_name:
                try:
                    return tool.execute(arguments)
                except Exception as exc:
                    logger.error("Tool %s raised: %s", tool_name, exc, exc_info=True)
                    return f"Tool execution error: {exc}"
        logger.warning("Tool '%s' not found", tool_name)
        return f"Tool '{tool_name}' not found."
