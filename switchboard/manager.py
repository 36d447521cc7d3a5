"""switchboard/manager.py

Manager orchestrator: the bounded delegation loop.

Each specialist is advertised to the model as a function. The loop calls
the model, dispatches every tool call it emits to the matching specialist,
feeds the results back as ``tool`` messages and repeats until the model
answers without tool calls or the iteration cap is reached.

Dispatch failures (unknown agent, unusable arguments, agent errors) never
abort the turn; they are returned to the model as tool results. Only
:class:`~switchboard.errors.ModelClientError` escapes.
"""

from __future__ import annotations

# Standard Library
import dataclasses
import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

# Local Modules
from switchboard.agents import Agent, agent_name
from switchboard.client import ModelClient, first_choice
from switchboard.config import ModelOptions
from switchboard.errors import ConfigurationError, TaskArgumentError
from switchboard.guardrails import Guardrail
from switchboard.messages import Message, ToolCallRequest
from switchboard.orchestrator import Orchestrator, ThreadEntry, _latest_user_content
from switchboard.registry import AgentRegistry

logger = logging.getLogger(__name__)

MAX_DELEGATION_ITERATIONS = 5
NO_RESULT = "No result generated."
NO_USER_MESSAGE = "No user message found."


@dataclasses.dataclass(slots=True)
class DelegationStep:
    """One model round-trip of the delegation loop.

    Attributes:
        iteration: 1-based iteration number.
        request: Payload sent to the model.
        response: Decoded response body.
    """

    iteration: int
    request: dict[str, Any]
    response: dict[str, Any]


@dataclasses.dataclass(slots=True)
class DelegationTrace:
    """Full record of one manager turn.

    Attributes:
        result: Text returned to the user.
        iterations: Number of model calls made.
        messages: Final message log, system prompt first.
        steps: Every request/response pair in order.
        rejected: Whether a guardrail refused the input before any call.
    """

    result: str
    iterations: int = 0
    messages: list[Message] = dataclasses.field(default_factory=list)
    steps: list[DelegationStep] = dataclasses.field(default_factory=list)
    rejected: bool = False


class ManagerOrchestrator(Orchestrator):
    """Coordinates specialist agents through model-issued tool calls."""

    def __init__(
        self,
        client: ModelClient,
        options: ModelOptions,
        instructions: Iterable[str] = (),
        guardrails: Iterable[Guardrail] = (),
        agents: Iterable[Agent] = (),
        manager_instructions: Iterable[str] = (),
        max_iterations: int = MAX_DELEGATION_ITERATIONS,
    ) -> None:
        """Initialize the manager.

        Args:
            client: Chat-completion client used for every loop iteration.
            options: Model name and token limit; temperature is forced to 0.
            instructions: Base system-prompt fragments.
            guardrails: Input validators applied before the loop starts.
            agents: Initial roster.
            manager_instructions: Extra text placed before the generated
                roster clause.
            max_iterations: Hard cap on model calls per turn.
        """
        super().__init__(client, options, instructions, guardrails)
        self.registry = AgentRegistry()
        self.manager_instructions: list[str] = list(manager_instructions)
        self.max_iterations = max_iterations
        self.add_agents(agents)

    def add_agent(self, agent: Agent) -> ManagerOrchestrator:
        """Add an agent to the roster.

        Raises:
            ConfigurationError: If the name is irreversible or collides.
        """
        self.registry.register_agent(agent)
        return self

    def add_agents(self, agents: Iterable[Agent]) -> ManagerOrchestrator:
        for agent in agents:
            self.add_agent(agent)
        return self

    def add_manager_instruction(self, instruction: str) -> ManagerOrchestrator:
        self.manager_instructions.append(instruction)
        return self

    def build_system_prompt(self) -> str:
        """Base instructions followed by the roster clause."""
        roster = ", ".join(
            f"{agent.name}: {agent.role}" for agent in self.registry.specialists()
        )
        clause = (
            "You are a Manager Agent that coordinates specialized agents. "
            f"Available agents: {roster}. "
            "Use tool calls to delegate tasks to appropriate agents."
        )
        if self.manager_instructions:
            clause = " ".join(self.manager_instructions) + " " + clause

        base = self.base_prompt()
        return f"{base}\n\n{clause}" if base else clause

    def build_tool_definitions(self) -> list[dict[str, Any]]:
        """One function definition per specialist, in roster order."""
        return [agent.tool_definition() for agent in self.registry.specialists()]

    def run(self, user_input: str) -> str:
        """Run the delegation loop for one user message.

        Returns:
            The final answer, a guardrail refusal, or ``No result generated.``

        Raises:
            ConfigurationError: If no specialist is registered.
            ModelClientError: If any model call fails.
        """
        return self.trace(user_input).result

    def run_with_thread(
        self,
        thread: Sequence[ThreadEntry],
        notes_context: str = "",
    ) -> str:
        """Run the loop on the user message that ends ``thread``.

        Only that message is sent; earlier turns are not replayed to the
        model. A thread whose last entry is not a user message is answered
        with ``No user message found.`` without a remote call.
        ``notes_context`` is accepted for interface parity and unused.
        """
        latest = _latest_user_content(thread)
        if latest is None:
            return NO_USER_MESSAGE
        return self.run(latest)

    def trace(self, user_input: str) -> DelegationTrace:
        """Run the delegation loop and return every step of it.

        Args:
            user_input: The user's message for this turn.

        Returns:
            A :class:`DelegationTrace` with the result and the message log.

        Raises:
            ConfigurationError: If no specialist is registered.
            ModelClientError: If any model call fails.
        """
        verdict = self.check_guardrails(user_input)
        if not verdict.valid:
            return DelegationTrace(result=verdict.message, rejected=True)

        tools = self.build_tool_definitions()
        if not tools:
            raise ConfigurationError("Manager has no specialist agents to delegate to.")

        messages = [Message.system(self.build_system_prompt()), Message.user(user_input)]
        trace = DelegationTrace(result="", messages=messages)
        result = ""

        while trace.iterations < self.max_iterations:
            trace.iterations += 1
            request = {
                "model": self.options.model,
                "messages": [message.to_api() for message in messages],
                "tools": tools,
                "tool_choice": "auto",
                "temperature": 0,
                "max_tokens": self.options.max_tokens,
            }
            logger.info(
                "Delegation iteration %d/%d (%d messages)",
                trace.iterations,
                self.max_iterations,
                len(messages),
            )
            response = self.client.complete(request)
            trace.steps.append(DelegationStep(trace.iterations, request, response))

            choice = first_choice(response)
            if choice is None:
                logger.warning("Model returned no choices; ending delegation")
                break

            raw = choice.get("message") or {}
            content = raw.get("content") or ""
            calls = [ToolCallRequest.from_api(call) for call in raw.get("tool_calls") or []]
            messages.append(Message.assistant(content, calls))

            if not calls:
                result = content or result
                break

            for call in calls:
                output = self._dispatch(call)
                messages.append(Message.tool(call.id, call.function_name, output))
                result = output
        else:
            logger.warning(
                "Delegation stopped at the %d-iteration cap", self.max_iterations
            )

        trace.result = result or NO_RESULT
        return trace

    def _dispatch(self, call: ToolCallRequest) -> str:
        """Route one tool call to its specialist and return the textual result."""
        target = agent_name(call.function_name)
        agent = self.registry.resolve(call.function_name)
        if agent is None or agent.is_manager:
            logger.warning("Tool call for unknown agent '%s'", target)
            return f"Agent '{target}' not found."

        arguments = call.parse_arguments()
        try:
            task = agent.build_task(arguments)
        except TaskArgumentError as exc:
            logger.warning("Unusable arguments for %s: %s", agent.name, exc)
            return f"Error: {exc}"

        logger.info("Delegating to %s: %s", agent.name, task)
        return agent.execute(task)

    def describe(self) -> Mapping[str, str]:
        """Specialist name to role, in roster order."""
        return {agent.name: agent.role for agent in self.registry.specialists()}
