"""Summarize a scraped posts file using hierarchical map-reduce summarization."""

from __future__ import annotations

import asyncio
import contextlib
import json
import sys
import time
from enum import Enum
from pathlib import Path  # noqa: TC003
from typing import TYPE_CHECKING

import typer

from blog_digest import config, opts
from blog_digest.cli import app
from blog_digest.core.utils import (
    console,
    create_status,
    print_command_line_args,
    print_error_message,
    print_output_panel,
    print_with_style,
    setup_logging,
)
from blog_digest.documents import DocumentLoadError, load_documents
from blog_digest.summarizer import (
    SummarizationError,
    SummarizerConfig,
    summarize_documents,
)
from blog_digest.summarizer.service import count_tokens

if TYPE_CHECKING:
    from blog_digest.summarizer import Document, SummaryResult


class OutputFormat(str, Enum):
    """Output format for the summarization result."""

    text = "text"
    json = "json"
    full = "full"


def _load_or_exit(posts_file: Path) -> list[Document]:
    try:
        return load_documents(posts_file)
    except DocumentLoadError as e:
        print_error_message(str(e), "Pass the JSON file written by the scraper.")
        raise typer.Exit(1) from e


def _display_result(
    result: SummaryResult,
    elapsed: float,
    output_format: OutputFormat,
    *,
    quiet: bool,
) -> None:
    """Display the summarization result."""
    if output_format == OutputFormat.json:
        print(json.dumps(result.model_dump(mode="json"), indent=2))
        return

    if output_format == OutputFormat.full:
        _display_full_result(result, elapsed, quiet=quiet)
        return

    if quiet:
        print(result.summary)
        return

    print_output_panel(
        result.summary,
        title=f"Summary of {result.document_count} posts",
        subtitle=f"[dim]{result.output_tokens:,} tokens | {result.collapse_rounds} collapse rounds | {elapsed:.2f}s[/dim]",
    )
    if result.iteration_exhausted:
        print_with_style(
            "Collapse iteration limit reached; the summary was built from an over-budget set.",
            style="yellow",
        )


def _display_full_result(result: SummaryResult, elapsed: float, *, quiet: bool) -> None:
    """Display the map output, every collapse round, and the final summary."""
    if quiet:
        print(result.summary)
        return

    console.print()
    console.print("[bold cyan]Summarization Result[/bold cyan]")
    console.print(f"  Documents: [bold]{result.document_count}[/bold]")
    console.print(
        f"  Chunks: [bold]{result.chunk_count}[/bold] ({result.oversized_chunks} oversized)",
    )
    console.print(f"  Collapse rounds: [bold]{result.collapse_rounds}[/bold]")
    console.print(f"  Iteration limit hit: [bold]{result.iteration_exhausted}[/bold]")
    console.print(f"  Output tokens: [bold]{result.output_tokens:,}[/bold]")
    console.print(f"  Time: [bold]{elapsed:.2f}s[/bold]")

    for depth, level in enumerate(result.intermediate_summaries):
        label = "Map Summaries" if depth == 0 else f"Collapse Round {depth}"
        console.print(f"\n[bold yellow]{label} ({len(level)})[/bold yellow]")
        for idx, text in enumerate(level):
            console.print(f"\n[dim]--- {idx + 1} ---[/dim]")
            console.print(text)

    console.print()
    print_output_panel(result.summary, title="Final Summary")


async def _async_summarize(
    documents: list[Document],
    *,
    summarizer_config: SummarizerConfig,
    general_cfg: config.General,
    output_format: OutputFormat,
) -> None:
    """Asynchronous summarization entry point."""
    if not general_cfg.quiet:
        status = create_status(
            f"Summarizing {len(documents)} posts with {summarizer_config.model}...",
            "bold yellow",
        )
    else:
        status = contextlib.nullcontext()

    try:
        with status:
            start_time = time.monotonic()
            result = await summarize_documents(documents, summarizer_config)
            elapsed = time.monotonic() - start_time
    except SummarizationError as e:
        print_error_message(
            f"{type(e).__name__}: {e}",
            f"Check that your LLM server is running at {summarizer_config.openai_base_url}",
        )
        sys.exit(1)

    _display_result(result, elapsed, output_format, quiet=general_cfg.quiet)

    if general_cfg.save_file:
        general_cfg.save_file.write_text(result.summary, encoding="utf-8")
        if not general_cfg.quiet:
            print_with_style(f"Saved summary to {general_cfg.save_file}", style="green")


@app.command("summarize")
def summarize_command(
    *,
    posts_file: Path = typer.Argument(  # noqa: B008
        ...,
        exists=True,
        dir_okay=False,
        help="JSON file with scraped posts (flat post list or full scraping results).",
    ),
    structured: bool = typer.Option(
        False,  # noqa: FBT003
        "--structured",
        help="Ask the model for a title/summary record per chunk and validate it.",
        rich_help_panel="Budget Options",
    ),
    map_chunk_budget: int = opts.MAP_CHUNK_BUDGET,
    collapse_budget: int = opts.COLLAPSE_BUDGET,
    max_collapse_iterations: int = opts.MAX_COLLAPSE_ITERATIONS,
    max_concurrent: int = opts.MAX_CONCURRENT,
    timeout: float = opts.TIMEOUT,
    # --- Output Options ---
    output_format: OutputFormat = typer.Option(  # noqa: B008
        OutputFormat.text,
        "--output",
        "-o",
        help="Output format: 'text' (summary only), 'json' (full result), 'full' (all rounds).",
        rich_help_panel="Output Options",
    ),
    # --- Provider Selection ---
    llm_provider: str = opts.LLM_PROVIDER,
    # --- LLM Configuration ---
    llm_ollama_model: str = opts.LLM_OLLAMA_MODEL,
    llm_ollama_host: str = opts.LLM_OLLAMA_HOST,
    llm_openai_model: str = opts.LLM_OPENAI_MODEL,
    openai_api_key: str | None = opts.OPENAI_API_KEY,
    openai_base_url: str | None = opts.OPENAI_BASE_URL,
    # --- General Options ---
    save_file: str | None = opts.SAVE_FILE,
    log_level: str = opts.LOG_LEVEL,
    log_file: str | None = opts.LOG_FILE,
    quiet: bool = opts.QUIET,
    config_file: str | None = opts.CONFIG_FILE,
    print_args: bool = opts.PRINT_ARGS,
) -> None:
    """Summarize a set of scraped blog posts into a single summary.

    Posts are split into chunks under the map budget, summarized in parallel,
    then batched and reduced until they fit the collapse budget.

    Examples:
        # Summarize with a local Ollama model
        blog-digest summarize scraped_posts.json

        # Use OpenAI and show every collapse round
        blog-digest summarize scraped_posts.json --llm-provider openai --output full

        # Tighter collapse budget, at most two extra rounds
        blog-digest summarize posts.json --collapse-budget 800 --max-collapse-iterations 2

    """
    if print_args:
        print_command_line_args(locals())

    provider_cfg = config.ProviderSelection(llm_provider=llm_provider)
    ollama_cfg = config.Ollama(
        llm_ollama_model=llm_ollama_model,
        llm_ollama_host=llm_ollama_host,
    )
    openai_llm_cfg = config.OpenAILLM(
        llm_openai_model=llm_openai_model,
        openai_api_key=openai_api_key,
        openai_base_url=openai_base_url,
    )
    general_cfg = config.General(
        log_level=log_level,
        log_file=log_file,
        quiet=quiet,
        save_file=save_file,
    )
    setup_logging(general_cfg.log_level, general_cfg.log_file, quiet=general_cfg.quiet)

    base_url, model, api_key = config.llm_endpoint(provider_cfg, ollama_cfg, openai_llm_cfg)
    if provider_cfg.llm_provider == "openai" and not api_key and not openai_base_url:
        print_error_message(
            "OpenAI API key is not set.",
            "Pass --openai-api-key or set the OPENAI_API_KEY environment variable.",
        )
        raise typer.Exit(1)

    try:
        summarizer_config = SummarizerConfig(
            openai_base_url=base_url,
            model=model,
            api_key=api_key,
            map_chunk_budget=map_chunk_budget,
            collapse_budget=collapse_budget,
            max_collapse_iterations=max_collapse_iterations,
            max_concurrent_requests=max_concurrent,
            timeout=timeout,
            structured_map=structured,
        )
    except ValueError as e:
        print_error_message(str(e))
        raise typer.Exit(1) from e

    documents = _load_or_exit(posts_file)
    if not documents:
        print_error_message("Empty input", f"No posts found in {posts_file}.")
        raise typer.Exit(1)

    asyncio.run(
        _async_summarize(
            documents,
            summarizer_config=summarizer_config,
            general_cfg=general_cfg,
            output_format=output_format,
        ),
    )


@app.command("count-tokens")
def count_tokens_command(
    *,
    posts_file: Path = typer.Argument(  # noqa: B008
        ...,
        exists=True,
        dir_okay=False,
        help="JSON file with scraped posts.",
    ),
    model: str = typer.Option(
        "gpt-4o-mini",
        "--model",
        help="Model whose tokenizer is used for counting.",
    ),
    map_chunk_budget: int = opts.MAP_CHUNK_BUDGET,
    config_file: str | None = opts.CONFIG_FILE,
) -> None:
    """Show the token count of every post against the map budget."""
    documents = _load_or_exit(posts_file)

    total = 0
    for document in documents:
        tokens = count_tokens(document.content, model)
        total += tokens
        marker = " [yellow](over map budget)[/yellow]" if tokens > map_chunk_budget else ""
        name = document.title or document.link or f"post {document.index}"
        console.print(f"{tokens:>8,}  {name}{marker}")
    console.print(f"[bold]{total:>8,}  total ({len(documents)} posts)[/bold]")
