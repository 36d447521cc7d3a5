"""switchboard/config.py

Runtime configuration loaded from environment variables / .env file.

Settings are read once by the entry point and handed to every component
explicitly; nothing in the package reads configuration on its own.
"""

from __future__ import annotations

# Standard Library
import dataclasses
from typing import Literal

# Third-Party Libraries
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclasses.dataclass(frozen=True, slots=True)
class ModelOptions:
    """Model knobs shared by one orchestrator and the agents it owns.

    Attributes:
        model: Chat-completion model name.
        max_tokens: Upper bound on generated tokens per call.
        temperature: Sampling temperature for single-agent calls. The
            delegation loop always runs at temperature 0.
    """

    model: str = "gpt-4o-mini"
    max_tokens: int = 1024
    temperature: float = 0.7


class Settings(BaseSettings):
    """Switchboard configuration.

    Attributes:
        openai_api_key: Bearer token for the chat-completion endpoint.
        openai_base_url: Base URL of the OpenAI-compatible API.
        openai_model: Model name sent with every request.
        openai_max_tokens: ``max_tokens`` sent with every request.
        openai_temperature: Temperature for single-agent requests.
        request_timeout: Total per-request timeout in seconds.
        connect_timeout: Connection timeout in seconds.
        database_path: SQLite file backing the conversation thread store.
        thread_idle_minutes: Idle window after which a thread is no longer
            considered active.
        user_id: Thread owner used by the interactive REPL.
        log_level: Root logging level configured by the REPL.
        mode: ``multi`` for the manager/specialist setup, ``single`` for a
            single agent with direct tools.
        stream: Render single-agent replies incrementally from a streamed
            response. The manager loop always waits for complete replies.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    openai_api_key: str = Field(
        "",
        description="Bearer token for the chat-completion endpoint.",
    )
    openai_base_url: str = Field(
        "https://api.openai.com/v1",
        description="OpenAI-compatible API base URL.",
    )
    openai_model: str = Field("gpt-4o-mini", description="Model name.")
    openai_max_tokens: int = Field(1024, description="Max tokens per call.")
    openai_temperature: float = Field(
        0.7,
        description="Sampling temperature for single-agent calls.",
    )
    request_timeout: float = Field(
        30.0,
        description="Total request timeout in seconds.",
    )
    connect_timeout: float = Field(
        10.0,
        description="Connection timeout in seconds.",
    )
    database_path: str = Field(
        "switchboard.db",
        description="SQLite file for conversation threads.",
    )
    thread_idle_minutes: int = Field(
        30,
        description="Minutes of inactivity before a thread expires.",
    )
    user_id: str = Field("cli", description="Thread owner for the REPL.")
    log_level: str = Field("WARNING", description="Root log level for the REPL.")
    mode: Literal["multi", "single"] = Field(
        "multi",
        description="Orchestrator variant built by the REPL.",
    )
    stream: bool = Field(
        True,
        description="Stream single-agent replies as they are generated.",
    )

    def model_options(self) -> ModelOptions:
        """Return the model knobs as an immutable value object."""
        return ModelOptions(
            model=self.openai_model,
            max_tokens=self.openai_max_tokens,
            temperature=self.openai_temperature,
        )
