"""switchboard/tools/translate.py

English <-> Spanish phrase lookup. A demo stand-in for a translator: only
the phrases in the dictionaries below are actually translated.
"""

from __future__ import annotations

# Standard Library
import re
from typing import Any

# Local Modules
from switchboard.tools.base import Tool, ToolParameter

TO_SPANISH = "to_spanish"
TO_ENGLISH = "to_english"
DIRECTIONS: tuple[str, ...] = (TO_SPANISH, TO_ENGLISH)

ENGLISH_TO_SPANISH: dict[str, str] = {
    "hello": "hola",
    "goodbye": "adiós",
    "thank you": "gracias",
    "please": "por favor",
    "how are you": "¿cómo estás?",
    "good morning": "buenos días",
    "good night": "buenas noches",
    "yes": "sí",
    "no": "no",
    "water": "agua",
    "food": "comida",
    "house": "casa",
    "car": "coche",
    "beautiful": "hermoso",
    "love": "amor",
}

SPANISH_TO_ENGLISH: dict[str, str] = {
    "hola": "hello",
    "adiós": "goodbye",
    "gracias": "thank you",
    "por favor": "please",
    "¿cómo estás?": "how are you?",
    "cómo estás": "how are you?",
    "buenos días": "good morning",
    "buenas noches": "good night",
    "sí": "yes",
    "agua": "water",
    "comida": "food",
    "casa": "house",
    "coche": "car",
    "hermoso": "beautiful",
    "amor": "love",
}

_SPANISH_INDICATORS = frozenset(
    {"el", "la", "es", "de", "que", "en", "un", "con", "por", "está", "hace", "tiempo"}
)

_TEXT_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"translate\s+[\"']([^\"']+)[\"'](?:\s+(?:to|into)\s+\w+)?", re.I),
    re.compile(r"translate\s+(?:to|into)\s+\w+\s*:\s*(.+)$", re.I | re.S),
    re.compile(
        r"translate\s+(?:the\s+)?(?:text\s+)?[\"']?([^\"']+?)[\"']?(?:\s+(?:to|into)\s+\w+)?$",
        re.I,
    ),
    re.compile(r"[\"']([^\"']+)[\"'].*translate", re.I),
)
_TARGET_LANGUAGE = re.compile(r"\b(?:to|into)\s+(english|spanish)\b")
_LEADING_NOISE = re.compile(r"^(?:translate|to spanish|to english)\s*:?\s*", re.I)
_WORD = re.compile(r"[\wáéíóúñü¿?]+", re.I)


def _contains_phrase(text: str, phrase: str) -> bool:
    return re.search(rf"(?<!\w){re.escape(phrase)}(?!\w)", text) is not None


def looks_spanish(text: str) -> bool:
    """Heuristic: does ``text`` contain a common Spanish word or phrase?"""
    lowered = text.lower()
    words = set(_WORD.findall(lowered))
    if words & _SPANISH_INDICATORS:
        return True
    return any(_contains_phrase(lowered, phrase) for phrase in SPANISH_TO_ENGLISH)


class TranslateTool(Tool):
    """Translates short phrases between English and Spanish."""

    name = "translate"
    description = (
        "Translate text between English and Spanish, correct grammar, and explain idioms"
    )
    parameters = {
        "text": ToolParameter(
            type="string",
            description="The text to translate or work with",
            required=True,
        ),
        "direction": ToolParameter(
            type="string",
            description="Translation direction: to_spanish or to_english",
            enum=DIRECTIONS,
        ),
    }

    def extract_arguments(self, task: str) -> dict[str, Any]:
        arguments: dict[str, Any] = {}
        text = ""
        for pattern in _TEXT_PATTERNS:
            match = pattern.search(task)
            if match and match.group(1).strip():
                text = match.group(1).strip()
                break
        if not text:
            text = _LEADING_NOISE.sub("", task).strip()
        if text:
            arguments["text"] = text

        lowered = task.lower()
        target = _TARGET_LANGUAGE.search(lowered)
        if target:
            arguments["direction"] = f"to_{target.group(1)}"
        elif "english" in lowered:
            arguments["direction"] = TO_ENGLISH
        elif "spanish" in lowered:
            arguments["direction"] = TO_SPANISH
        return arguments

    def _run(self, arguments: dict[str, Any]) -> str:
        text = str(arguments.get("text") or "").strip()
        if not text:
            return "Error: No text provided for translation."

        direction = str(arguments.get("direction") or "").strip().lower()
        if direction not in DIRECTIONS:
            direction = TO_ENGLISH if looks_spanish(text) else TO_SPANISH
        return self.translate(text, direction)

    def translate(self, text: str, direction: str) -> str:
        language = "English" if direction == TO_ENGLISH else "Spanish"
        dictionary = SPANISH_TO_ENGLISH if direction == TO_ENGLISH else ENGLISH_TO_SPANISH
        lowered = text.lower()

        translation = dictionary.get(lowered.rstrip("!.?").strip()) or dictionary.get(lowered)
        if translation is None:
            for phrase, candidate in dictionary.items():
                if _contains_phrase(lowered, phrase):
                    translation = candidate
                    break

        if translation is not None:
            return f"Translation to {language}: '{text}' → '{translation}'"
        return (
            f"Translation service: I can help translate '{text}' to {language}. "
            "(This is a simplified demo translation.)"
        )
