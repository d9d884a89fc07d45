"""Pydantic models for command configuration and config file loading."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, field_validator

from blog_digest.core.utils import err_console

# --- Config File Loading ---

CONFIG_PATH = Path.home() / ".config" / "blog-digest" / "config.toml"
CONFIG_PATH_2 = Path("blog-digest-config.toml")


def _replace_dashed_keys_recursive(d: dict[str, Any]) -> dict[str, Any]:
    """Recursively replace dashed keys with underscores in a dictionary."""
    new_dict = {}
    for k, v in d.items():
        new_key = k.replace("-", "_")
        if isinstance(v, dict):
            new_dict[new_key] = _replace_dashed_keys_recursive(v)
        else:
            new_dict[new_key] = v
    return new_dict


def load_config(config_path_str: str | None = None) -> dict[str, Any]:
    """Load the TOML configuration file and process it for nested structures."""
    # Determine which config path to use
    if config_path_str:
        config_path = Path(config_path_str)
    elif CONFIG_PATH.exists():
        config_path = CONFIG_PATH
    elif CONFIG_PATH_2.exists():
        config_path = CONFIG_PATH_2
    else:
        return {}

    if config_path.exists():
        try:
            with config_path.open("rb") as f:
                cfg = tomllib.load(f)
                return _replace_dashed_keys_recursive(cfg)
        except tomllib.TOMLDecodeError as e:
            err_console.print(
                f"[bold red]Error parsing config file {config_path}: {e}[/bold red]",
            )
            return {}

    # Report error only if an explicit path was given
    if config_path_str:
        err_console.print(
            f"[bold red]Config file not found at {config_path_str}[/bold red]",
        )
    return {}


# --- Pydantic Models for Configuration ---

# --- Panel: Provider Selection ---


class ProviderSelection(BaseModel):
    """Configuration for selecting the LLM provider."""

    llm_provider: Literal["ollama", "openai"]


# --- Panel: LLM Configuration ---


class Ollama(BaseModel):
    """Configuration for the local Ollama LLM provider."""

    llm_ollama_model: str
    llm_ollama_host: str


class OpenAILLM(BaseModel):
    """Configuration for the OpenAI (or OpenAI-compatible) LLM provider."""

    llm_openai_model: str
    openai_api_key: str | None = None
    openai_base_url: str | None = None


# --- Panel: General Options ---


class General(BaseModel):
    """General configuration parameters for logging and I/O."""

    log_level: str
    log_file: str | None = None
    quiet: bool
    save_file: Path | None = None

    @field_validator("save_file", mode="before")
    @classmethod
    def _expand_user_path(cls, v: str | Path | None) -> Path | None:
        if v:
            return Path(v).expanduser()
        return None


def llm_endpoint(
    provider_cfg: ProviderSelection,
    ollama_cfg: Ollama,
    openai_llm_cfg: OpenAILLM,
) -> tuple[str, str, str | None]:
    """Get openai_base_url, model, and api_key for the selected provider."""
    if provider_cfg.llm_provider == "ollama":
        # Ollama serves an OpenAI-compatible API at /v1
        base_url = ollama_cfg.llm_ollama_host.rstrip("/")
        if not base_url.endswith("/v1"):
            base_url = f"{base_url}/v1"
        return base_url, ollama_cfg.llm_ollama_model, None
    base_url = openai_llm_cfg.openai_base_url or "https://api.openai.com/v1"
    return base_url, openai_llm_cfg.llm_openai_model, openai_llm_cfg.openai_api_key
