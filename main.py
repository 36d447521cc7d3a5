#!/usr/bin/env python3
"""main.py

Entry point for switchboard - manager/specialist agents over a
chat-completion API. Provides an interactive CLI using the Rich library.
"""

from __future__ import annotations

# Standard Library
import logging
import sys
from collections.abc import Callable
from typing import NoReturn

# Third-Party Libraries
from dotenv import load_dotenv
from pydantic import ValidationError
from rich.live import Live
from rich.panel import Panel
from rich.theme import Theme
from rich.prompt import Prompt
from rich.console import Console
from rich.markdown import Markdown

# Local Modules
from switchboard.config import Settings
from switchboard.errors import ModelClientError, SwitchboardError
from switchboard.factory import build_orchestrator, create_client
from switchboard.manager import ManagerOrchestrator
from switchboard.orchestrator import Orchestrator, SingleAgentOrchestrator
from switchboard.threads import ConversationThread, ThreadStore

logger = logging.getLogger(__name__)

# Load environment variables from .env file
load_dotenv()

custom_theme = Theme(
    {
        "info": "cyan",
        "warning": "yellow",
        "error": "bold red",
        "success": "bold green",
        "user": "bold blue",
        "assistant": "green",
    }
)
console = Console(theme=custom_theme)

EXIT_COMMAND = "exit"
CLEAR_COMMAND = "/clear"


def display_banner(settings: Settings, orchestrator: Orchestrator) -> None:
    """Display the welcome panel with the active roster."""
    if isinstance(orchestrator, ManagerOrchestrator):
        roster = "\n".join(
            f"- **{name}**: {role}" for name, role in orchestrator.describe().items()
        )
        body = f"**Specialist agents (via manager coordination):**\n\n{roster}"
    else:
        tools = ", ".join(f"`{tool.name}`" for tool in orchestrator.tools)
        body = f"**Single agent with tools:** {tools}"

    help_text = f"""
{body}

- Model: `{settings.openai_model}`
- `{CLEAR_COMMAND}` starts a new conversation thread
- `{EXIT_COMMAND}` quits

**Examples:** "Hola, ¿cómo estás?", "What's the weather in Madrid?", "Calculate 25 / 5"
    """
    console.print(
        Panel(Markdown(help_text), title="switchboard", border_style="cyan")
    )


def answer_turn(
    store: ThreadStore,
    orchestrator: Orchestrator,
    thread: ConversationThread,
    user_input: str,
    on_update: Callable[[str], None] | None = None,
) -> str:
    """Run one turn against the stored thread and persist both messages.

    Args:
        store: Thread store the turn is persisted to.
        orchestrator: Orchestrator answering the turn.
        thread: Active thread; the user message is appended to it.
        user_input: The user's message.
        on_update: When given and the orchestrator can stream, called with
            the reply accumulated so far after every streamed piece.

    Raises:
        ModelClientError: If the chat-completion API fails; nothing is persisted.
    """
    store.append(thread, "user", user_input)
    try:
        if on_update is not None and _streams(orchestrator):
            response = ""
            for piece in orchestrator.stream_with_thread(
                thread.messages, store.notes_context()
            ):
                response += piece
                on_update(response)
        else:
            response = orchestrator.run_with_thread(thread.messages, store.notes_context())
    except ModelClientError:
        thread.messages.pop()
        raise
    store.append(thread, "assistant", response)
    store.persist(thread.id, thread.messages)
    return response


def _streams(orchestrator: Orchestrator) -> bool:
    return isinstance(orchestrator, SingleAgentOrchestrator) and orchestrator.can_stream


def _reply_panel(response: str) -> Panel:
    return Panel(
        Markdown(response),
        title="[bold green]switchboard[/bold green]",
        border_style="green",
    )


def _say_goodbye(store: ThreadStore, thread: ConversationThread, message: str) -> NoReturn:
    store.close(thread.id)
    console.print(message, style="success")
    sys.exit(0)


def main() -> NoReturn:
    """Main entry point for the switchboard CLI."""
    try:
        settings = Settings()
    except ValidationError as exc:
        console.print(f"Invalid configuration: {exc}", style="error")
        sys.exit(1)

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    console.print("Initializing switchboard...", style="info")
    try:
        client = create_client(settings)
        orchestrator = build_orchestrator(settings, client)
        store = ThreadStore(settings.database_path, settings.thread_idle_minutes)
    except (SwitchboardError, OSError) as exc:
        console.print(f"Failed to initialize: {exc}", style="error")
        console.print(
            "\nMake sure OPENAI_API_KEY is set in your environment or .env file.",
            style="warning",
        )
        sys.exit(1)

    display_banner(settings, orchestrator)
    thread = store.get_or_create_active(settings.user_id)
    streaming = settings.stream and _streams(orchestrator)

    while True:
        try:
            user_input = Prompt.ask("[bold blue]You[/bold blue]").strip()

            if not user_input:
                console.print("Please enter a question or command.", style="warning")
                continue

            if user_input.lower() == EXIT_COMMAND:
                _say_goodbye(store, thread, "\nGood bye!\n")

            if user_input.lower() == CLEAR_COMMAND:
                store.close(thread.id)
                thread = store.get_or_create_active(settings.user_id)
                console.print("Started a new conversation thread.\n", style="success")
                continue

            # The stored thread may have expired while the prompt was idle.
            thread = store.get_or_create_active(settings.user_id)

            console.print()
            if streaming:
                with Live(_reply_panel(""), console=console, refresh_per_second=12) as live:
                    answer_turn(
                        store,
                        orchestrator,
                        thread,
                        user_input,
                        on_update=lambda text: live.update(_reply_panel(text)),
                    )
            else:
                with console.status("[bold green]Processing your request...", spinner="dots"):
                    response = answer_turn(store, orchestrator, thread, user_input)
                console.print(_reply_panel(response))
            console.print()

        except EOFError:
            _say_goodbye(store, thread, "\nGood bye!\n")

        except KeyboardInterrupt:
            store.close(thread.id)
            console.print("\n\nInterrupted. Good bye!\n", style="warning")
            sys.exit(0)

        except ModelClientError as exc:
            logger.error("Chat completion failed: %s", exc)
            console.print(
                "\nSorry, I couldn't reach the language model. Please try again.\n",
                style="error",
            )

        except Exception as exc:
            logger.exception("Turn failed")
            console.print(f"\nError: {exc}\n", style="error")
            console.print(
                f"You can continue chatting or type {EXIT_COMMAND} to quit.\n", style="info"
            )


if __name__ == "__main__":
    main()
