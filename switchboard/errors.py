"""switchboard/errors.py

Exception hierarchy for conditions that are fatal to a turn or to startup.

Tool, agent and dispatch failures are never raised past the delegation
loop; they travel back to the model as textual tool results instead.
"""

from __future__ import annotations


class SwitchboardError(Exception):
    """Base class for all switchboard errors."""


class ModelClientError(SwitchboardError):
    """The chat-completion endpoint could not produce a usable response.

    Covers transport failures, non-200 status codes and bodies that are not
    valid JSON. Never retried.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ConfigurationError(SwitchboardError, ValueError):
    """An agent, tool or orchestrator was wired up incorrectly."""


class TaskArgumentError(SwitchboardError, ValueError):
    """Model-supplied arguments could not be turned into an agent task."""
