"""switchboard/tools/weather.py

Mock weather lookup. Conditions and temperatures are drawn at random; no
weather service is contacted.
"""

from __future__ import annotations

# Standard Library
import random
import re
from typing import Any

# Local Modules
from switchboard.tools.base import Tool, ToolParameter

DEFAULT_LOCATION = "New York"

CONDITIONS: tuple[str, ...] = (
    "sunny",
    "partly cloudy",
    "cloudy",
    "rainy",
    "stormy",
    "snowy",
)
TEMPERATURES: tuple[int, ...] = (15, 22, 28, 5, 35, -2, 18, 25)

_LOCATION_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"weather\s+(?:in|for)\s+([^,.\n?]+)", re.IGNORECASE),
    re.compile(r"(?:get|tell|show).*weather.*\b(?:in|for)\s+([^,.\n?]+)", re.IGNORECASE),
    re.compile(r"\b(?:in|for)\s+([A-Za-z\s]+)(?:\s|$)", re.IGNORECASE),
)


class WeatherTool(Tool):
    """Reports (simulated) current weather for a location."""

    name = "get_weather"
    description = "Get the current weather for a location"
    parameters = {
        "location": ToolParameter(
            type="string",
            description='The city and country, e.g., "Paris, France"',
            required=True,
        ),
    }

    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng or random.Random()

    def extract_arguments(self, task: str) -> dict[str, Any]:
        for pattern in _LOCATION_PATTERNS:
            match = pattern.search(task)
            if match and match.group(1).strip():
                return {"location": match.group(1).strip()}
        return {}

    def _run(self, arguments: dict[str, Any]) -> str:
        location = str(arguments.get("location") or "").strip() or DEFAULT_LOCATION
        condition = self.rng.choice(CONDITIONS)
        temperature = self.rng.choice(TEMPERATURES)
        return (
            f"The weather in {location} is currently {condition} "
            f"with a temperature of {temperature}°C."
        )
