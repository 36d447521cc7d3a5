"""switchboard/tools/search.py

Mock search: echoes a canned three-line result list for the query.
"""

from __future__ import annotations

# Standard Library
import re
from typing import Any

# Local Modules
from switchboard.tools.base import Tool, ToolParameter

_QUERY_PREFIX = re.compile(r"^\s*(?:search\s+for|search|find|look\s+up)\b\s*:?\s*", re.IGNORECASE)


class SearchTool(Tool):
    """Returns simulated search results for a topic."""

    name = "search"
    description = "Search for information on a topic"
    parameters = {
        "query": ToolParameter(
            type="string",
            description="The search query",
            required=True,
        ),
    }

    def extract_arguments(self, task: str) -> dict[str, Any]:
        query = _QUERY_PREFIX.sub("", task).strip()
        return {"query": query} if query else {}

    def _run(self, arguments: dict[str, Any]) -> str:
        query = _QUERY_PREFIX.sub("", str(arguments.get("query") or "")).strip()
        if not query:
            return "Error: No search query provided."
        return (
            f"Here are some simulated search results for: '{query}'\n"
            f"1. Wikipedia article: About {query}\n"
            f"2. Latest news on {query}\n"
            f"3. Academic papers related to {query}"
        )
