"""switchboard/factory.py

Builders for the stock manager and single-agent setups.

Everything is wired explicitly from ``Settings``; no component reads a
shared default configuration on its own.
"""

from __future__ import annotations

# Standard Library
import logging
import uuid
from datetime import date

# Local Modules
from switchboard.agents import Agent, Domain
from switchboard.client import ChatCompletionClient, ModelClient
from switchboard.config import ModelOptions, Settings
from switchboard.errors import ConfigurationError
from switchboard.guardrails import KeywordGuardrail, LengthGuardrail
from switchboard.manager import ManagerOrchestrator
from switchboard.orchestrator import Orchestrator, SingleAgentOrchestrator
from switchboard.tools import CalculatorTool, SearchTool, TranslateTool, WeatherTool

logger = logging.getLogger(__name__)

MANAGER_INSTRUCTION = (
    "You are a helpful assistant. Be polite and concise. Help the user with "
    "their questions and designate the appropriate agent for specialized tasks."
)

SINGLE_AGENT_INSTRUCTIONS: tuple[str, ...] = (
    "You are a helpful assistant that provides information and performs tasks.",
    "Always be polite and concise in your responses.",
    "If you're unsure about something, acknowledge your uncertainty.",
    "Use the tools available to you when appropriate to answer questions.",
)

EXPLOIT_KEYWORDS: tuple[str, ...] = (
    "hack",
    "exploit",
    "bypass",
    "jailbreak",
    "prompt injection",
    "profanity",
    "violence",
)


def create_client(settings: Settings) -> ChatCompletionClient:
    """Build the chat-completion client.

    Raises:
        ConfigurationError: If no API key is configured.
    """
    if not settings.openai_api_key:
        raise ConfigurationError(
            "OPENAI_API_KEY is not set. Add it to the environment or a .env file."
        )
    return ChatCompletionClient(
        api_key=settings.openai_api_key,
        base_url=settings.openai_base_url,
        timeout=settings.request_timeout,
        connect_timeout=settings.connect_timeout,
    )


def build_specialists(client: ModelClient, options: ModelOptions) -> list[Agent]:
    """The stock specialist roster: weather, translation, math and search."""
    return [
        Agent(
            "Weather Agent",
            "You provide current weather information and forecasts via a weather API.",
            tools=[WeatherTool()],
            domain=Domain.WEATHER,
            client=client,
            options=options,
        ),
        Agent(
            "Spanish Agent",
            "You translate text between English and Spanish, correct Spanish "
            "grammar, and explain idioms.",
            tools=[TranslateTool()],
            domain=Domain.TRANSLATION,
            client=client,
            options=options,
        ),
        Agent(
            "Math Agent",
            "You perform simple arithmetic: add, subtract, multiply, and divide.",
            tools=[CalculatorTool()],
            domain=Domain.MATH,
            client=client,
            options=options,
        ),
        Agent(
            "Search Agent",
            "You search for information on any topic and summarize the results.",
            tools=[SearchTool()],
            domain=Domain.SEARCH,
            client=client,
            options=options,
        ),
    ]


def build_manager(client: ModelClient, options: ModelOptions) -> ManagerOrchestrator:
    """Manager orchestrator over the stock specialists."""
    manager = ManagerOrchestrator(
        client,
        options,
        instructions=[MANAGER_INSTRUCTION],
        guardrails=[
            LengthGuardrail(1000, "Input too long."),
            KeywordGuardrail(["spam", "abuse"], "Inappropriate content."),
        ],
    )
    manager.add_agents(build_specialists(client, options))
    return manager


def build_single_agent(
    client: ModelClient,
    options: ModelOptions,
    username: str = "User",
) -> SingleAgentOrchestrator:
    """Single agent with weather, calculator and search as direct tools."""
    return SingleAgentOrchestrator(
        client,
        options,
        instructions=SINGLE_AGENT_INSTRUCTIONS,
        guardrails=[
            LengthGuardrail(60, "Input is too long. Please keep it under 60 characters."),
            KeywordGuardrail(
                EXPLOIT_KEYWORDS,
                "I cannot process requests related to system exploitation or "
                "unauthorized access.",
            ),
        ],
        tools=[WeatherTool(), CalculatorTool(), SearchTool()],
        context={
            "username": username,
            "current_date": date.today().isoformat(),
            "session_id": uuid.uuid4().hex[:13],
        },
    )


def build_orchestrator(settings: Settings, client: ModelClient) -> Orchestrator:
    """Build the orchestrator variant selected by ``settings.mode``."""
    options = settings.model_options()
    logger.info("Building %s-agent orchestrator (model=%s)", settings.mode, options.model)
    if settings.mode == "single":
        return build_single_agent(client, options, username=settings.user_id)
    return build_manager(client, options)
