"""tests/test_tools.py

Unit tests for the tool contract and the weather, translate and search tools
(switchboard/tools/).
"""

from __future__ import annotations

# Standard Library
import random
from typing import Any

# Third-Party Libraries
import pytest

# Local Modules
from switchboard.tools import SearchTool, Tool, ToolParameter, TranslateTool, WeatherTool
from switchboard.tools.base import build_function_schema, json_schema_type
from switchboard.tools.translate import looks_spanish
from switchboard.tools.weather import CONDITIONS, TEMPERATURES


class _EchoTool(Tool):
    name = "echo"
    description = "Echo a word"
    parameters = {"word": ToolParameter(type="string", description="Word to echo", required=True)}

    def extract_arguments(self, task: str) -> dict[str, Any]:
        return {"word": task.split()[-1]}

    def _run(self, arguments: dict[str, Any]) -> str:
        if arguments.get("word") == "boom":
            raise RuntimeError("exploded")
        return f"echo {arguments.get('word')}"


class _BareTool(Tool):
    name = "bare"
    description = "No parameters at all"

    def _run(self, arguments: dict[str, Any]) -> str:
        return "done"


class TestToolContract:
    """Test suite for the Tool base class and schema building."""

    @pytest.mark.parametrize(
        ("type_name", "expected"),
        [
            ("string", "string"),
            ("int", "number"),
            ("integer", "number"),
            ("float", "number"),
            ("boolean", "boolean"),
            ("bool", "boolean"),
            ("array", "array"),
            ("list", "array"),
            ("object", "string"),
            ("whatever", "string"),
        ],
    )
    def test_json_schema_type(self, type_name: str, expected: str) -> None:
        """Test semantic types map onto JSON Schema types."""
        assert json_schema_type(type_name) == expected

    def test_build_function_schema(self) -> None:
        """Test required, enum and items are carried into the schema."""
        schema = build_function_schema(
            "demo",
            "Demo function",
            {
                "text": ToolParameter(type="string", description="Text", required=True),
                "mode": ToolParameter(type="string", description="Mode", enum=("a", "b")),
                "values": ToolParameter(
                    type="list", description="Values", items={"type": "number"}
                ),
            },
        )

        function = schema["function"]
        assert schema["type"] == "function"
        assert function["name"] == "demo"
        assert function["parameters"]["type"] == "object"
        assert function["parameters"]["required"] == ["text"]
        assert function["parameters"]["properties"]["mode"]["enum"] == ["a", "b"]
        assert function["parameters"]["properties"]["values"] == {
            "type": "array",
            "description": "Values",
            "items": {"type": "number"},
        }

    def test_definition_text(self) -> None:
        """Test the plain-text catalog entry."""
        assert _EchoTool().definition() == (
            "Tool: echo\nDescription: Echo a word\nParameters:\n- word: Word to echo (string)"
        )
        assert _BareTool().definition().endswith("Parameters:\nNo parameters")

    def test_task_fills_missing_fields_only(self) -> None:
        """Test extracted arguments never override explicit ones."""
        tool = _EchoTool()

        assert tool.execute({"task": "say hello"}) == "echo hello"
        assert tool.execute({"task": "say hello", "word": "bye"}) == "echo bye"

    def test_execute_never_raises(self) -> None:
        """Test failures inside a tool come back as error text."""
        assert _EchoTool().execute({"word": "boom"}) == "Error: exploded"


class TestWeatherTool:
    """Test suite for the mock weather tool."""

    @pytest.mark.parametrize(
        ("task", "location"),
        [
            ("What's the weather in Paris?", "Paris"),
            ("Get weather for Madrid", "Madrid"),
            ("Tell me the weather for London, UK", "London"),
            ("How hot is it in Rome", "Rome"),
        ],
    )
    def test_extract_location(self, task: str, location: str) -> None:
        """Test locations are pulled out of common phrasings."""
        assert WeatherTool().extract_arguments(task) == {"location": location}

    def test_report_format(self) -> None:
        """Test the report names the location, a condition and a temperature."""
        result = WeatherTool(rng=random.Random(3)).execute({"location": "Tokyo"})

        assert result.startswith("The weather in Tokyo is currently ")
        assert result.endswith("°C.")
        assert any(f" {condition} with" in result for condition in CONDITIONS)
        assert any(f"temperature of {t}°C" in result for t in TEMPERATURES)

    def test_seeded_rng_is_deterministic(self) -> None:
        """Test identical seeds produce identical reports."""
        first = WeatherTool(rng=random.Random(42)).execute({"location": "Oslo"})
        second = WeatherTool(rng=random.Random(42)).execute({"location": "Oslo"})

        assert first == second

    def test_default_location(self) -> None:
        """Test a task without a location falls back to New York."""
        result = WeatherTool().execute({"task": "What's the weather like?"})

        assert result.startswith("The weather in New York is currently")


class TestTranslateTool:
    """Test suite for the English/Spanish phrase translator."""

    def test_english_to_spanish(self) -> None:
        """Test an exact dictionary hit."""
        result = TranslateTool().execute({"text": "hello", "direction": "to_spanish"})

        assert result == "Translation to Spanish: 'hello' → 'hola'"

    def test_direction_detected_from_text(self) -> None:
        """Test Spanish input is translated to English when no direction is given."""
        result = TranslateTool().execute({"text": "gracias"})

        assert result == "Translation to English: 'gracias' → 'thank you'"

    def test_quoted_task(self) -> None:
        """Test quoted text and target language are parsed from a task."""
        result = TranslateTool().execute({"task": "Translate 'good morning' to Spanish"})

        assert result == "Translation to Spanish: 'good morning' → 'buenos días'"

    def test_delegated_task_format(self) -> None:
        """Test the task shape produced for translation specialists."""
        result = TranslateTool().execute({"task": "Translate to English: buenas noches"})

        assert result == "Translation to English: 'buenas noches' → 'good night'"

    def test_question_marks_and_accents(self) -> None:
        """Test a full Spanish question with inverted punctuation."""
        result = TranslateTool().execute({"text": "¿Cómo estás?", "direction": "to_english"})

        assert result == "Translation to English: '¿Cómo estás?' → 'how are you?'"

    def test_partial_match(self) -> None:
        """Test a known phrase inside longer text is still translated."""
        result = TranslateTool().execute({"text": "hello friend", "direction": "to_spanish"})

        assert result == "Translation to Spanish: 'hello friend' → 'hola'"

    def test_unknown_phrase_fallback(self) -> None:
        """Test unknown text gets the demo fallback message."""
        result = TranslateTool().execute({"text": "spaceship", "direction": "to_spanish"})

        assert result.startswith("Translation service: I can help translate 'spaceship' to Spanish.")
        assert "simplified demo translation" in result

    def test_empty_text(self) -> None:
        """Test missing text is reported."""
        assert TranslateTool().execute({"text": "  "}) == "Error: No text provided for translation."

    def test_spanish_detection(self) -> None:
        """Test the Spanish heuristic matches whole words only."""
        assert looks_spanish("hace buen tiempo")
        assert looks_spanish("muchas gracias")
        assert not looks_spanish("the weather is nice")
        assert not looks_spanish("an elephant")


class TestSearchTool:
    """Test suite for the mock search tool."""

    def test_structured_query(self) -> None:
        """Test results are listed for a query argument."""
        result = SearchTool().execute({"query": "python"})

        assert result.splitlines() == [
            "Here are some simulated search results for: 'python'",
            "1. Wikipedia article: About python",
            "2. Latest news on python",
            "3. Academic papers related to python",
        ]

    def test_task_prefix_stripped(self) -> None:
        """Test the delegated task shape is reduced to its query."""
        result = SearchTool().execute({"task": "Search for quantum computing"})

        assert result.startswith("Here are some simulated search results for: 'quantum computing'")

    def test_empty_query(self) -> None:
        """Test a missing query is reported."""
        assert SearchTool().execute({}) == "Error: No search query provided."
