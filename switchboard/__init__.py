"""switchboard

Manager/specialist agent orchestration over a chat-completion API.
"""

from __future__ import annotations

# Local Modules
from switchboard.agents import Agent, Domain
from switchboard.client import ChatCompletionClient
from switchboard.config import ModelOptions, Settings
from switchboard.errors import (
    ConfigurationError,
    ModelClientError,
    SwitchboardError,
    TaskArgumentError,
)
from switchboard.guardrails import (
    Guardrail,
    GuardrailResult,
    KeywordGuardrail,
    LengthGuardrail,
    RegexGuardrail,
)
from switchboard.manager import DelegationTrace, ManagerOrchestrator
from switchboard.orchestrator import SingleAgentOrchestrator

__all__ = [
    "Agent",
    "ChatCompletionClient",
    "ConfigurationError",
    "DelegationTrace",
    "Domain",
    "Guardrail",
    "GuardrailResult",
    "KeywordGuardrail",
    "LengthGuardrail",
    "ManagerOrchestrator",
    "ModelClientError",
    "ModelOptions",
    "RegexGuardrail",
    "Settings",
    "SingleAgentOrchestrator",
    "SwitchboardError",
    "TaskArgumentError",
]

__version__ = "0.1.0"
