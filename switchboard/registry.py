"""switchboard/registry.py

Agent roster for the manager orchestrator.

The model addresses agents by function name, which is derived from the
display name by a lossy transform. Registration therefore rejects any name
that would not survive the round trip, or that would collide with an agent
already registered.
"""

from __future__ import annotations

# Standard Library
import logging
import re

# Local Modules
from switchboard.agents import Agent, Domain, agent_name, function_name
from switchboard.errors import ConfigurationError

logger = logging.getLogger(__name__)

# Function names accepted by the chat-completion API.
_FUNCTION_NAME = re.compile(r"^[a-zA-Z0-9_-]{1,64}$")


class AgentRegistry:
    """Registry of agents keyed by their function name."""

    def __init__(self) -> None:
        self._agents: dict[str, Agent] = {}

    def __len__(self) -> int:
        return len(self._agents)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get_agent(name) is not None

    def register_agent(self, agent: Agent) -> Agent:
        """Register an agent with the registry.

        Args:
            agent: The agent to add.

        Returns:
            The registered agent.

        Raises:
            ConfigurationError: If the agent's name does not survive the
                function-name round trip, is not a valid function name, or
                collides with an agent already registered.
        """
        key = function_name(agent.name)
        if not _FUNCTION_NAME.match(key):
            raise ConfigurationError(
                f"Agent name '{agent.name}' cannot be exposed as a function name."
            )
        if agent_name(key).casefold() != agent.name.casefold():
            raise ConfigurationError(
                f"Agent name '{agent.name}' does not survive the function-name "
                f"round trip (reconstructed as '{agent_name(key)}')."
            )
        if key in self._agents:
            raise ConfigurationError(
                f"Agent '{agent.name}' collides with registered agent "
                f"'{self._agents[key].name}' as function '{key}'."
            )

        self._agents[key] = agent
        logger.info(
            "Registered agent '%s' (domain=%s, manager=%s)",
            agent.name,
            agent.domain.value,
            agent.is_manager,
        )
        return agent

    def get_agent(self, name: str) -> Agent | None:
        """Retrieve an agent by display name, ignoring case.

        Args:
            name: Agent display name.

        Returns:
            The agent if found, None otherwise.
        """
        wanted = name.casefold()
        for agent in self._agents.values():
            if agent.name.casefold() == wanted:
                return agent
        return None

    def resolve(self, function: str) -> Agent | None:
        """Find the agent a model-chosen function name refers to.

        The function name is turned back into a display name and compared
        case-insensitively against the roster.

        Args:
            function: Function name from a tool call.

        Returns:
            The target agent if found, None otherwise.
        """
        return self.get_agent(agent_name(function))

    def specialists(self) -> list[Agent]:
        """Get every agent the manager may delegate to."""
        return [agent for agent in self._agents.values() if not agent.is_manager]

    def list_agents(self) -> list[Agent]:
        """Get all registered agents in registration order."""
        return list(self._agents.values())

    def find_agents_by_domain(self, domain: Domain) -> list[Agent]:
        """Find all agents serving a domain.

        Args:
            domain: The domain to search for.

        Returns:
            List of agents declared with that domain.
        """
        return [agent for agent in self._agents.values() if agent.domain is domain]
