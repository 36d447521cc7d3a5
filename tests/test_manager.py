"""tests/test_manager.py

Unit tests for the ManagerOrchestrator delegation loop (switchboard/manager.py).
The model client is a Mock; specialists run their real mock tools.
"""

from __future__ import annotations

# Standard Library
from unittest.mock import Mock

# Third-Party Libraries
import pytest

# Local Modules
from switchboard.agents import Agent, Domain
from switchboard.config import ModelOptions
from switchboard.errors import ConfigurationError, ModelClientError
from switchboard.guardrails import KeywordGuardrail, LengthGuardrail
from switchboard.manager import MAX_DELEGATION_ITERATIONS, ManagerOrchestrator


def _sent_messages(client: Mock, call_index: int) -> list[dict]:
    return client.complete.call_args_list[call_index].args[0]["messages"]


@pytest.fixture
def manager(
    mock_client: Mock,
    model_options: ModelOptions,
    specialists: list[Agent],
) -> ManagerOrchestrator:
    return ManagerOrchestrator(
        mock_client,
        model_options,
        instructions=["You are a helpful assistant."],
        agents=specialists,
    )


class TestDelegationLoop:
    """Test suite for the bounded request/dispatch cycle."""

    def test_success_path_two_calls(self, manager, mock_client, completion, tool_call) -> None:
        """Test a single delegation followed by a final answer."""
        mock_client.complete.side_effect = [
            completion("", [tool_call("math_agent", {"expression": "2+2"})]),
            completion("4"),
        ]

        result = manager.run("What is 2+2?")

        assert result == "4"
        assert mock_client.complete.call_count == 2
        first, second = _sent_messages(mock_client, 0), _sent_messages(mock_client, 1)
        assert len(second) - len(first) == 2
        assert [m["role"] for m in second] == ["system", "user", "assistant", "tool"]

    def test_tool_message_carries_call_id_and_result(
        self, manager, mock_client, completion, tool_call
    ) -> None:
        """Test the tool message answers the call it belongs to."""
        mock_client.complete.side_effect = [
            completion("", [tool_call("math_agent", {"expression": "2+2"}, call_id="abc")]),
            completion("4"),
        ]

        manager.run("What is 2+2?")

        tool_message = _sent_messages(mock_client, 1)[-1]
        assert tool_message["role"] == "tool"
        assert tool_message["tool_call_id"] == "abc"
        assert tool_message["name"] == "math_agent"
        assert tool_message["content"] == "2+2 = 4.0"

    def test_assistant_tool_calls_echoed_back(
        self, manager, mock_client, completion, tool_call
    ) -> None:
        """Test the assistant turn is replayed with its raw tool calls."""
        call = tool_call("search_agent", {"query": "python"})
        mock_client.complete.side_effect = [completion("", [call]), completion("done")]

        manager.run("Search for python")

        assistant = _sent_messages(mock_client, 1)[2]
        assert assistant["role"] == "assistant"
        assert assistant["tool_calls"] == [call]

    def test_final_answer_without_tool_calls_omits_field(
        self, manager, mock_client, completion
    ) -> None:
        """Test a direct answer ends the loop after one call."""
        mock_client.complete.return_value = completion("Hello there!")

        trace = manager.trace("Hi")

        assert trace.result == "Hello there!"
        assert trace.iterations == 1
        assert "tool_calls" not in trace.messages[-1].to_api()

    def test_iteration_cap(self, manager, mock_client, completion, tool_call) -> None:
        """Test a model that never stops delegating is cut off at the cap."""
        mock_client.complete.return_value = completion(
            "", [tool_call("math_agent", {"expression": "2+2"})]
        )

        trace = manager.trace("Loop forever")

        assert mock_client.complete.call_count == MAX_DELEGATION_ITERATIONS == 5
        assert trace.iterations == 5
        assert trace.result == "2+2 = 4.0"

    def test_cap_message_log_growth(self, manager, mock_client, completion, tool_call) -> None:
        """Test every capped round adds exactly an assistant and a tool message."""
        mock_client.complete.return_value = completion(
            "", [tool_call("weather_agent", {"location": "Paris"})]
        )

        manager.run("Weather?")

        sizes = [len(_sent_messages(mock_client, i)) for i in range(5)]
        assert sizes == [2, 4, 6, 8, 10]

    def test_empty_final_content_falls_back_to_tool_result(
        self, manager, mock_client, completion, tool_call
    ) -> None:
        """Test an empty final answer returns the last tool result."""
        mock_client.complete.side_effect = [
            completion("", [tool_call("spanish_agent", {"text": "hello", "direction": "to_spanish"})]),
            completion(None),
        ]

        result = manager.run("Say hello in Spanish")

        assert result == "Translation to Spanish: 'hello' → 'hola'"

    def test_no_choices_returns_sentinel(self, manager, mock_client) -> None:
        """Test a response without choices ends the turn quietly."""
        mock_client.complete.return_value = {"choices": []}

        result = manager.run("Hi")

        assert result == "No result generated."
        assert mock_client.complete.call_count == 1

    def test_multiple_tool_calls_run_in_order(
        self, manager, mock_client, completion, tool_call
    ) -> None:
        """Test several calls in one response each get a tool message, in order."""
        mock_client.complete.side_effect = [
            completion(
                "",
                [
                    tool_call("weather_agent", {"location": "Tokyo"}, call_id="c1"),
                    tool_call("math_agent", {"expression": "3*4"}, call_id="c2"),
                ],
            ),
            completion("Both done."),
        ]

        result = manager.run("Weather in Tokyo and 3*4")

        messages = _sent_messages(mock_client, 1)
        assert result == "Both done."
        assert [m.get("tool_call_id") for m in messages[3:]] == ["c1", "c2"]
        assert messages[3]["content"].startswith("The weather in Tokyo is currently")
        assert messages[4]["content"] == "3*4 = 12.0"

    def test_request_shape(self, manager, mock_client, completion) -> None:
        """Test loop requests use tool_choice auto and temperature 0."""
        mock_client.complete.return_value = completion("ok")

        manager.run("Hi")

        payload = mock_client.complete.call_args.args[0]
        assert payload["model"] == "gpt-test"
        assert payload["tool_choice"] == "auto"
        assert payload["temperature"] == 0
        assert payload["max_tokens"] == 256
        assert [t["function"]["name"] for t in payload["tools"]] == [
            "weather_agent",
            "spanish_agent",
            "math_agent",
            "search_agent",
        ]

    def test_model_client_error_propagates(self, manager, mock_client) -> None:
        """Test transport failures are fatal for the turn."""
        mock_client.complete.side_effect = ModelClientError("boom", status_code=500)

        with pytest.raises(ModelClientError):
            manager.run("Hi")


class TestDispatch:
    """Test suite for routing tool calls to specialists."""

    def test_unknown_agent_is_fed_back(self, manager, mock_client, completion, tool_call) -> None:
        """Test an unregistered agent name becomes a tool result, not an error."""
        mock_client.complete.side_effect = [
            completion("", [tool_call("pirate_agent", {"task": "arr"})]),
            completion("I can't do that."),
        ]

        result = manager.run("Talk like a pirate")

        assert result == "I can't do that."
        assert _sent_messages(mock_client, 1)[-1]["content"] == "Agent 'Pirate Agent' not found."

    def test_malformed_arguments_degrade_to_empty(
        self, manager, mock_client, completion, tool_call
    ) -> None:
        """Test unparseable JSON arguments do not abort the loop."""
        mock_client.complete.side_effect = [
            completion("", [tool_call("math_agent", "{not json")]),
            completion("Could you rephrase?"),
        ]

        result = manager.run("Calculate something")

        assert result == "Could you rephrase?"
        assert mock_client.complete.call_count == 2
        assert "Unable to parse" in _sent_messages(mock_client, 1)[-1]["content"]

    def test_translation_without_text(self, manager, mock_client, completion, tool_call) -> None:
        """Test missing translation text is reported to the model."""
        mock_client.complete.side_effect = [
            completion("", [tool_call("spanish_agent", {"direction": "to_english"})]),
            completion("What should I translate?"),
        ]

        manager.run("Translate")

        content = _sent_messages(mock_client, 1)[-1]["content"]
        assert content == "Error: No text provided for translation."

    def test_function_name_resolution_is_case_insensitive(
        self, manager, mock_client, completion, tool_call
    ) -> None:
        """Test the reconstructed name matches regardless of case."""
        mock_client.complete.side_effect = [
            completion("", [tool_call("MATH_AGENT", {"expression": "1+1"})]),
            completion("2"),
        ]

        manager.run("1+1")

        assert _sent_messages(mock_client, 1)[-1]["content"] == "1+1 = 2.0"

    def test_manager_flagged_agent_is_not_delegatable(
        self, mock_client, model_options, specialists, completion, tool_call
    ) -> None:
        """Test agents flagged as managers are hidden from the model."""
        boss = Agent("Manager Agent", "Coordinates others.", is_manager=True)
        manager = ManagerOrchestrator(
            mock_client, model_options, agents=[boss, *specialists]
        )
        mock_client.complete.side_effect = [
            completion("", [tool_call("manager_agent", {"task": "x"})]),
            completion("ok"),
        ]

        manager.run("Hi")

        payload = mock_client.complete.call_args_list[0].args[0]
        names = [t["function"]["name"] for t in payload["tools"]]
        assert "manager_agent" not in names
        assert "Manager Agent:" not in payload["messages"][0]["content"]
        assert _sent_messages(mock_client, 1)[-1]["content"] == "Agent 'Manager Agent' not found."

    def test_domain_not_name_decides_schema(self, mock_client, model_options) -> None:
        """Test a weather-domain agent with an unrelated name gets a location schema."""
        agent = Agent("Forecaster", "Forecasts.", domain=Domain.WEATHER)
        manager = ManagerOrchestrator(mock_client, model_options, agents=[agent])

        (definition,) = manager.build_tool_definitions()

        assert definition["function"]["name"] == "forecaster"
        assert list(definition["function"]["parameters"]["properties"]) == ["location"]


class TestGuardrailsAndPrompt:
    """Test suite for pre-flight validation and prompt construction."""

    def test_guardrail_rejection_makes_no_call(self, mock_client, model_options, specialists) -> None:
        """Test a rejected input returns the guardrail message with zero calls."""
        manager = ManagerOrchestrator(
            mock_client,
            model_options,
            guardrails=[
                LengthGuardrail(1000, "Input too long."),
                KeywordGuardrail(["spam", "abuse"], "Inappropriate content."),
            ],
            agents=specialists,
        )

        trace = manager.trace("buy SPAM now")

        assert trace.result == "Inappropriate content."
        assert trace.rejected is True
        assert mock_client.complete.call_count == 0

    def test_first_failing_guardrail_wins(self, mock_client, model_options, specialists) -> None:
        """Test guardrails are evaluated in registration order."""
        manager = ManagerOrchestrator(mock_client, model_options, agents=specialists)
        manager.add_guardrail(LengthGuardrail(3, "Too long."))
        manager.add_guardrail(KeywordGuardrail(["spam"], "Spam."))

        assert manager.run("spam spam") == "Too long."
        mock_client.complete.assert_not_called()

    def test_system_prompt_lists_specialists(self, manager) -> None:
        """Test the roster clause follows the base instructions."""
        prompt = manager.build_system_prompt()

        assert prompt.startswith("You are a helpful assistant.\n\n")
        assert "You are a Manager Agent that coordinates specialized agents." in prompt
        assert "Math Agent: You perform simple arithmetic." in prompt
        assert prompt.endswith("Use tool calls to delegate tasks to appropriate agents.")

    def test_manager_instructions_supplement_roster(self, manager) -> None:
        """Test manager instructions are prepended, not substituted."""
        manager.add_manager_instruction("Prefer the Math Agent for numbers.")

        prompt = manager.build_system_prompt()

        assert "Prefer the Math Agent for numbers. You are a Manager Agent" in prompt
        assert "Available agents:" in prompt

    def test_no_specialists_is_configuration_error(self, mock_client, model_options) -> None:
        """Test running a manager with an empty roster is rejected."""
        manager = ManagerOrchestrator(mock_client, model_options)

        with pytest.raises(ConfigurationError):
            manager.run("Hi")
        mock_client.complete.assert_not_called()


class TestRunWithThread:
    """Test suite for thread-driven turns."""

    def test_uses_latest_user_message(self, manager, mock_client, completion) -> None:
        """Test only the most recent user message is sent."""
        mock_client.complete.return_value = completion("ok")
        thread = [
            {"role": "user", "content": "first"},
            {"role": "assistant", "content": "reply"},
            {"role": "user", "content": "second"},
        ]

        manager.run_with_thread(thread)

        messages = _sent_messages(mock_client, 0)
        assert len(messages) == 2
        assert messages[1] == {"role": "user", "content": "second"}

    def test_no_user_message(self, manager, mock_client) -> None:
        """Test a thread without user messages is answered without a call."""
        assert manager.run_with_thread([]) == "No user message found."
        assert manager.run_with_thread([{"role": "assistant", "content": "hi"}]) == (
            "No user message found."
        )
        mock_client.complete.assert_not_called()

    def test_answered_thread_is_not_rerun(self, manager, mock_client) -> None:
        """Test a thread ending in an assistant reply is not sent again."""
        thread = [
            {"role": "user", "content": "hi"},
            {"role": "assistant", "content": "yo"},
        ]

        assert manager.run_with_thread(thread) == "No user message found."
        mock_client.complete.assert_not_called()
