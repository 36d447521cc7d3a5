"""switchboard/agents.py

Specialist agents and the per-domain delegation strategies.

An agent's domain is declared when it is built. The domain decides what the
manager advertises to the model for that agent (description + parameter
table) and how the model's arguments are turned back into the task text the
agent receives. The agent's display name plays no part in either.
"""

from __future__ import annotations

# Standard Library
import dataclasses
import enum
import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

# Local Modules
from switchboard.client import ModelClient
from switchboard.config import ModelOptions
from switchboard.errors import TaskArgumentError
from switchboard.guardrails import Guardrail, check_guardrails
from switchboard.orchestrator import SingleAgentOrchestrator
from switchboard.tools.base import Tool, ToolParameter, build_function_schema
from switchboard.tools.translate import DIRECTIONS, TO_ENGLISH

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Name round trip
# ---------------------------------------------------------------------------


def function_name(agent_name: str) -> str:
    """Turn an agent name into the function name exposed to the model."""
    return agent_name.lower().replace(" ", "_")


def agent_name(function: str) -> str:
    """Reconstruct an agent name from a model-chosen function name.

    Each underscore-delimited word is capitalised, then underscores become
    spaces: ``math_agent`` -> ``Math Agent``.
    """
    return " ".join(word[:1].upper() + word[1:] for word in function.split("_"))


# ---------------------------------------------------------------------------
# Domains
# ---------------------------------------------------------------------------


class Domain(enum.Enum):
    """Capability area a specialist serves."""

    WEATHER = "weather"
    TRANSLATION = "translation"
    MATH = "math"
    SEARCH = "search"
    GENERAL = "general"


@dataclasses.dataclass(frozen=True, slots=True)
class DomainStrategy:
    """How the manager exposes and invokes agents of one domain.

    Attributes:
        description: Function description for the model; ``None`` means the
            agent's role text is used.
        parameters: Parameter table of the agent's function definition.
        build_task: Turns decoded model arguments into the agent's task.
            Raises :class:`TaskArgumentError` when the arguments are unusable.
    """

    description: str | None
    parameters: Mapping[str, ToolParameter]
    build_task: Callable[[Mapping[str, Any]], str]


def _weather_task(arguments: Mapping[str, Any]) -> str:
    location = str(arguments.get("location") or "").strip() or "New York"
    return f"Get weather for {location}"


def _translation_task(arguments: Mapping[str, Any]) -> str:
    text = str(arguments.get("text") or "").strip()
    if not text:
        raise TaskArgumentError("No text provided for translation.")
    if arguments.get("direction") == TO_ENGLISH:
        return f"Translate to English: {text}"
    return f"Translate to Spanish: {text}"


def _math_task(arguments: Mapping[str, Any]) -> str:
    expression = str(arguments.get("expression") or arguments.get("task") or "").strip()
    return f"Calculate: {expression}"


def _search_task(arguments: Mapping[str, Any]) -> str:
    query = str(arguments.get("query") or arguments.get("task") or "").strip()
    return f"Search for {query}"


def _general_task(arguments: Mapping[str, Any]) -> str:
    task = str(arguments.get("task") or "").strip()
    if task:
        return task
    return " ".join(str(value) for value in arguments.values() if value)


DOMAIN_STRATEGIES: dict[Domain, DomainStrategy] = {
    Domain.WEATHER: DomainStrategy(
        description="Get current weather information for any location worldwide",
        parameters={
            "location": ToolParameter(
                type="string",
                description=(
                    'The city/location to get weather for (e.g., "Madrid", '
                    '"New York", "Tokyo")'
                ),
                required=True,
            ),
        },
        build_task=_weather_task,
    ),
    Domain.TRANSLATION: DomainStrategy(
        description="Translate text from English to Spanish or Spanish to English",
        parameters={
            "text": ToolParameter(
                type="string",
                description="The text to translate",
                required=True,
            ),
            "direction": ToolParameter(
                type="string",
                description='Translation direction: "to_spanish" or "to_english"',
                enum=DIRECTIONS,
            ),
        },
        build_task=_translation_task,
    ),
    Domain.MATH: DomainStrategy(
        description="Perform mathematical calculations and arithmetic operations",
        parameters={
            "expression": ToolParameter(
                type="string",
                description=(
                    'The mathematical expression to calculate (e.g., "25 * 8", '
                    '"15 + 27")'
                ),
                required=True,
            ),
        },
        build_task=_math_task,
    ),
    Domain.SEARCH: DomainStrategy(
        description="Search for information on any topic",
        parameters={
            "query": ToolParameter(
                type="string",
                description="The search query or topic to search for",
                required=True,
            ),
        },
        build_task=_search_task,
    ),
    Domain.GENERAL: DomainStrategy(
        description=None,
        parameters={
            "task": ToolParameter(
                type="string",
                description="The specific task for this agent",
                required=True,
            ),
        },
        build_task=_general_task,
    ),
}


# ---------------------------------------------------------------------------
# Agent
# ---------------------------------------------------------------------------


class Agent:
    """A named role wrapping at most one directly dispatched tool.

    Agents with a tool hand the whole task to it. Agents without one answer
    through their own single-agent orchestrator, using their role as
    instructions, and therefore need a client and model options.
    """

    def __init__(
        self,
        name: str,
        role: str,
        tools: Iterable[Tool] = (),
        domain: Domain = Domain.GENERAL,
        is_manager: bool = False,
        client: ModelClient | None = None,
        options: ModelOptions | None = None,
    ) -> None:
        """Initialize the agent.

        Args:
            name: Display name, unique within a roster.
            role: Free-text description of what the agent does.
            tools: Tools owned by the agent; only the first is dispatched to.
            domain: Capability area used by the manager for schema and
                argument handling.
            is_manager: Marks a coordinating agent that is never delegated to.
            client: Chat-completion client for tool-less execution.
            options: Model options for tool-less execution.
        """
        self._name = name
        self._role = role
        self._tools: tuple[Tool, ...] = tuple(tools)
        self._domain = domain
        self._is_manager = is_manager
        self.client = client
        self.options = options
        self.instructions: list[str] = []
        self.guardrails: list[Guardrail] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def role(self) -> str:
        return self._role

    @property
    def tools(self) -> tuple[Tool, ...]:
        return self._tools

    @property
    def domain(self) -> Domain:
        return self._domain

    @property
    def is_manager(self) -> bool:
        return self._is_manager

    @property
    def strategy(self) -> DomainStrategy:
        return DOMAIN_STRATEGIES[self._domain]

    def __repr__(self) -> str:
        return f"Agent(name={self._name!r}, domain={self._domain.value!r})"

    def add_instruction(self, instruction: str) -> Agent:
        self.instructions.append(instruction)
        return self

    def add_guardrail(self, guardrail: Guardrail) -> Agent:
        self.guardrails.append(guardrail)
        return self

    def tool_definition(self) -> dict[str, Any]:
        """Return the function definition the manager advertises for this agent."""
        strategy = self.strategy
        return build_function_schema(
            function_name(self._name),
            strategy.description or self._role,
            strategy.parameters,
        )

    def build_task(self, arguments: Mapping[str, Any]) -> str:
        """Turn decoded model arguments into this agent's task text."""
        return self.strategy.build_task(arguments)

    def execute(self, task: str) -> str:
        """Carry out ``task`` and return the textual result.

        Failures are returned as ``"Error executing <name>: ..."`` strings.
        """
        verdict = check_guardrails(self.guardrails, task)
        if not verdict.valid:
            return verdict.message

        try:
            if self._tools:
                tool = self._tools[0]
                logger.info("[%s] dispatching task to tool %s", self._name, tool.name)
                return tool.execute({"task": task})
            return self._answer_with_model(task)
        except Exception as exc:
            logger.error("[%s] execution failed: %s", self._name, exc, exc_info=True)
            return f"Error executing {self._name}: {exc}"

    def _answer_with_model(self, task: str) -> str:
        if self.client is None or self.options is None:
            raise RuntimeError("agent has no tools and no model client")
        orchestrator = SingleAgentOrchestrator(
            self.client,
            self.options,
            instructions=[f"You are {self._name}.", self._role, *self.instructions],
        )
        logger.info("[%s] answering task with the model", self._name)
        return orchestrator.run(task)
