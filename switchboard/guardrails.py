"""switchboard/guardrails.py

Pre-flight input validators. A rejection is a normal, user-visible reply,
not an error: the orchestrator returns the guardrail's message and makes no
remote call.
"""

from __future__ import annotations

# Standard Library
import abc
import dataclasses
import re
from collections.abc import Iterable, Sequence


@dataclasses.dataclass(frozen=True, slots=True)
class GuardrailResult:
    """Outcome of validating one input.

    Attributes:
        valid: Whether the input may be processed.
        message: Refusal text when ``valid`` is False, else empty.
    """

    valid: bool
    message: str = ""


_ACCEPT = GuardrailResult(valid=True)


class Guardrail(abc.ABC):
    """Validates user input before any model call."""

    @abc.abstractmethod
    def validate(self, text: str) -> GuardrailResult:
        """Check ``text`` against this guardrail's policy."""


class LengthGuardrail(Guardrail):
    """Rejects input longer than ``max_length`` characters."""

    def __init__(
        self,
        max_length: int,
        message: str = "Input is too long. Please keep it under {max_length} characters.",
    ) -> None:
        self.max_length = max_length
        self.message = message

    def validate(self, text: str) -> GuardrailResult:
        if len(text) <= self.max_length:
            return _ACCEPT
        return GuardrailResult(
            valid=False,
            message=self.message.replace("{max_length}", str(self.max_length)),
        )


class RegexGuardrail(Guardrail):
    """Accepts input iff a pattern match is present (or absent).

    With ``match_is=True`` the input must contain a match; with
    ``match_is=False`` it must not.
    """

    def __init__(
        self,
        pattern: str | re.Pattern[str],
        message: str = "Input format is invalid.",
        match_is: bool = True,
    ) -> None:
        self.pattern = re.compile(pattern) if isinstance(pattern, str) else pattern
        self.message = message
        self.match_is = match_is

    def validate(self, text: str) -> GuardrailResult:
        matched = self.pattern.search(text) is not None
        if matched == self.match_is:
            return _ACCEPT
        return GuardrailResult(valid=False, message=self.message)


class KeywordGuardrail(Guardrail):
    """Rejects input containing any blocked keyword as a substring."""

    def __init__(
        self,
        keywords: Iterable[str],
        message: str = "Input contains inappropriate content.",
        case_sensitive: bool = False,
    ) -> None:
        self.keywords = list(keywords)
        self.message = message
        self.case_sensitive = case_sensitive

    def validate(self, text: str) -> GuardrailResult:
        haystack = text if self.case_sensitive else text.lower()
        for keyword in self.keywords:
            needle = keyword if self.case_sensitive else keyword.lower()
            if needle in haystack:
                return GuardrailResult(valid=False, message=self.message)
        return _ACCEPT


def check_guardrails(guardrails: Sequence[Guardrail], text: str) -> GuardrailResult:
    """Run guardrails in order and return the first rejection.

    Args:
        guardrails: Guardrails in registration order.
        text: The latest user message.

    Returns:
        The first failing result, or a passing result if all accept.
    """
    for guardrail in guardrails:
        result = guardrail.validate(text)
        if not result.valid:
            return result
    return _ACCEPT
