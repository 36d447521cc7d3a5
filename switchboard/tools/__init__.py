"""switchboard/tools

Tool contract and the built-in mock tools.
"""

from __future__ import annotations

# Local Modules
from switchboard.tools.base import Tool, ToolParameter, build_function_schema
from switchboard.tools.calculator import CalculatorTool
from switchboard.tools.search import SearchTool
from switchboard.tools.translate import TranslateTool
from switchboard.tools.weather import WeatherTool

__all__ = [
    "CalculatorTool",
    "SearchTool",
    "Tool",
    "ToolParameter",
    "TranslateTool",
    "WeatherTool",
    "build_function_schema",
]
