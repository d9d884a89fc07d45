"""Shared Typer options for the blog-digest commands."""

from __future__ import annotations

import typer

from blog_digest.summarizer.models import (
    DEFAULT_COLLAPSE_BUDGET,
    DEFAULT_MAP_CHUNK_BUDGET,
    DEFAULT_MAX_COLLAPSE_ITERATIONS,
)


def _conf_callback(ctx: typer.Context, param: typer.CallbackParam, value: str | None) -> str | None:  # noqa: ARG001
    from blog_digest.cli import set_config_defaults  # noqa: PLC0415

    set_config_defaults(ctx, value)
    return value


# --- Provider Selection ---
LLM_PROVIDER: str = typer.Option(
    "ollama",
    "--llm-provider",
    help="The LLM provider to use ('ollama', 'openai').",
    rich_help_panel="Provider Selection",
)

# --- LLM Configuration ---
LLM_OLLAMA_MODEL: str = typer.Option(
    "llama3.1:8b",
    "--llm-ollama-model",
    help="The Ollama model to use.",
    rich_help_panel="LLM: Ollama",
)
LLM_OLLAMA_HOST: str = typer.Option(
    "http://localhost:11434",
    "--llm-ollama-host",
    help="The Ollama server host.",
    rich_help_panel="LLM: Ollama",
)
LLM_OPENAI_MODEL: str = typer.Option(
    "gpt-4o-mini",
    "--llm-openai-model",
    help="The OpenAI model to use.",
    rich_help_panel="LLM: OpenAI",
)
OPENAI_API_KEY: str | None = typer.Option(
    None,
    "--openai-api-key",
    help="Your OpenAI API key. Can also be set with the OPENAI_API_KEY environment variable.",
    envvar="OPENAI_API_KEY",
    rich_help_panel="LLM: OpenAI",
)
OPENAI_BASE_URL: str | None = typer.Option(
    None,
    "--openai-base-url",
    help="Custom base URL for an OpenAI-compatible API (e.g. llama-server, vLLM).",
    envvar="OPENAI_BASE_URL",
    rich_help_panel="LLM: OpenAI",
)

# --- Budget Options ---
MAP_CHUNK_BUDGET: int = typer.Option(
    DEFAULT_MAP_CHUNK_BUDGET,
    "--map-chunk-budget",
    min=1,
    help="Maximum tokens per chunk sent to the map phase.",
    rich_help_panel="Budget Options",
)
COLLAPSE_BUDGET: int = typer.Option(
    DEFAULT_COLLAPSE_BUDGET,
    "--collapse-budget",
    min=1,
    help="Token ceiling for the summaries handed to the final reduce.",
    rich_help_panel="Budget Options",
)
MAX_COLLAPSE_ITERATIONS: int = typer.Option(
    DEFAULT_MAX_COLLAPSE_ITERATIONS,
    "--max-collapse-iterations",
    min=0,
    help="Maximum number of extra collapse rounds before giving up on the budget.",
    rich_help_panel="Budget Options",
)
MAX_CONCURRENT: int = typer.Option(
    5,
    "--max-concurrent",
    min=1,
    help="Maximum number of requests in flight at once.",
    rich_help_panel="Budget Options",
)
TIMEOUT: float = typer.Option(
    60.0,
    "--timeout",
    help="Timeout in seconds for each request to the model.",
    rich_help_panel="Budget Options",
)

# --- General Options ---
LOG_LEVEL: str = typer.Option(
    "WARNING",
    "--log-level",
    help="Set logging level.",
    case_sensitive=False,
    rich_help_panel="General Options",
)
LOG_FILE: str | None = typer.Option(
    None,
    "--log-file",
    help="Path to a file to write logs to.",
    rich_help_panel="General Options",
)
QUIET: bool = typer.Option(
    False,  # noqa: FBT003
    "--quiet",
    "-q",
    help="Suppress console output from rich.",
    rich_help_panel="General Options",
)
SAVE_FILE: str | None = typer.Option(
    None,
    "--save-file",
    help="Save the final summary to a file.",
    rich_help_panel="General Options",
)
CONFIG_FILE: str | None = typer.Option(
    None,
    "--config",
    help="Path to a TOML configuration file.",
    is_eager=True,
    callback=_conf_callback,
    rich_help_panel="General Options",
)
PRINT_ARGS: bool = typer.Option(
    False,  # noqa: FBT003
    "--print-args",
    help="Print the command line arguments, including variables taken from the configuration file.",
    is_eager=True,
    rich_help_panel="General Options",
)
