"""Click CLI: loads settings, builds the gateway, runs the council, prints and saves."""

import asyncio
import logging
import sys
from dataclasses import replace
from pathlib import Path

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from config.config_loader import AppConfig, load_config
from vault_council.context import NoteContext, build_query, gather_context
from vault_council.council import CouncilOrchestrator, validate_council
from vault_council.errors import ConfigurationFailure, DispatchTimeout, ModelCallFailure
from vault_council.healthcheck import run_health_checks
from vault_council.models import RESPONSE_STYLES, CouncilConfig, CouncilRun
from vault_council.providers.base import ModelGateway
from vault_council.providers.openrouter import OpenRouterGateway
from vault_council.transcript import CouncilSession, print_opinions, print_reviews, print_synthesis, save_session

logger = logging.getLogger(__name__)

console = Console(legacy_windows=False)


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def _parse_model_list(arg: str | None, default: list[str]) -> list[str]:
    """Split a comma-separated model list; fall back to ``default`` when unset."""
    if not arg:
        return list(default)
    return [m.strip() for m in arg.split(",") if m.strip()]


def _build_council_config(
    config: AppConfig,
    models_arg: str | None,
    reviewers_arg: str | None,
    chairman: str | None,
    synthesize: bool | None,
    language: str | None,
    style: str | None,
) -> CouncilConfig:
    """CLI flags override settings.yaml defaults."""
    defaults = config.council
    models = _parse_model_list(models_arg, defaults.selected_models)
    reviewers = _parse_model_list(reviewers_arg, models) if reviewers_arg else None
    return CouncilConfig(
        models=tuple(models),
        reviewers=tuple(reviewers) if reviewers is not None else None,
        language=language or defaults.language,
        response_style=style or defaults.response_style,
        chairman_model=chairman or defaults.chairman_model,
        synthesize=config.synthesize_by_default if synthesize is None else synthesize,
        temperature=defaults.temperature,
        max_tokens=defaults.max_tokens,
        max_concurrency=defaults.max_concurrency,
        timeout_sec=defaults.round_timeout_sec,
    )


def _without_models(council: CouncilConfig, failed: set[str]) -> CouncilConfig:
    """Return a copy of ``council`` with failed members and reviewers removed."""
    reviewers = council.reviewers
    if reviewers is not None:
        reviewers = tuple(m for m in reviewers if m not in failed)
    return replace(
        council,
        models=tuple(m for m in council.models if m not in failed),
        reviewers=reviewers,
    )


def _check_and_filter_models(gateway: ModelGateway, council: CouncilConfig) -> CouncilConfig:
    """Run health checks, print results, and ask the user what to do on failures.

    Exits if the user declines to continue or no council member passes.
    """
    to_check = list(dict.fromkeys([*council.models, *council.review_panel]))
    console.print("\n[bold]Checking models...[/bold]")
    results = asyncio.run(run_health_checks(gateway, to_check))

    failed: list[str] = []
    for model in to_check:
        ok, err = results[model]
        if ok:
            console.print(f"  [green]OK  [/green] {model}")
        else:
            short_err = err.splitlines()[0][:120] if err else "unknown error"
            console.print(f"  [red]FAIL[/red] {model}: {short_err}")
            failed.append(model)

    if not failed:
        console.print()
        return council

    filtered = _without_models(council, set(failed))
    if not filtered.models or not filtered.review_panel:
        console.print("\n[bold red]Error:[/bold red] No council members passed the health check.")
        sys.exit(1)

    console.print(f"\n[yellow]{len(failed)} model(s) failed:[/yellow] {', '.join(failed)}")
    console.print(f"Working members: {', '.join(filtered.models)}")

    if not click.confirm("Continue with working models only?", default=True):
        sys.exit(0)

    console.print()
    return filtered


_STAGE_LABELS = {
    "opinions": "Collecting opinions...",
    "reviews": "Collecting peer reviews...",
    "synthesis": "Chairman synthesizing...",
}


async def _run_council(
    gateway: ModelGateway,
    council: CouncilConfig,
    query: str,
) -> CouncilRun:
    """Run all stages under a progress spinner."""
    orchestrator = CouncilOrchestrator.from_config(gateway, council)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Starting council...", total=None)

        def on_stage(stage: str) -> None:
            progress.update(task, description=_STAGE_LABELS[stage])

        run = await orchestrator.run_council(council, query, on_stage=on_stage)

    console.print(
        f"[green]OK[/green] {len(run.opinions)} opinions, {len(run.reviews)} reviews"
        f" in {run.duration_sec:.1f}s"
    )
    return run


@click.command()
@click.argument("question", required=False)
@click.option("--file", "question_file", type=click.Path(exists=True, dir_okay=False),
              help="Read question from a file")
@click.option("--models", default=None, help="Comma-separated council members (default: from config)")
@click.option("--reviewers", default=None, help="Comma-separated reviewers (default: the council members)")
@click.option("--chairman", default=None, help="Chairman model for the synthesis (default: from config)")
@click.option("--synthesize/--no-synthesize", default=None,
              help="Run the chairman synthesis (default: enable_chairman and chairman_mode=always)")
@click.option("--language", default=None, help="Answer language (default: from config)")
@click.option("--style", type=click.Choice(RESPONSE_STYLES), default=None,
              help="Response style (default: from config)")
@click.option("--note", "note_path", type=click.Path(exists=True, dir_okay=False), default=None,
              help="Markdown note used as context; its [[links]] are included")
@click.option("--vault", "vault_dir", type=click.Path(file_okay=False), default=None,
              help="Vault root for resolving links and saving (default: from config)")
@click.option("--output", "output_path", default=None, help="Custom save folder (default: from config)")
@click.option("--no-save", is_flag=True, default=False, help="Do not save the conversation")
@click.option("--verbose", is_flag=True, help="Enable DEBUG-level logging")
@click.option("--skip-health-check", is_flag=True, default=False,
              help="Skip the model connectivity check at startup")
def main(
    question: str | None,
    question_file: str | None,
    models: str | None,
    reviewers: str | None,
    chairman: str | None,
    synthesize: bool | None,
    language: str | None,
    style: str | None,
    note_path: str | None,
    vault_dir: str | None,
    output_path: str | None,
    no_save: bool,
    verbose: bool,
    skip_health_check: bool,
) -> None:
    """Vault Council -- ask a council of models, review, and synthesize.

    \b
    Examples:
      vault-council "Is event sourcing worth it for a small app?"
      vault-council "Summarize the tradeoffs" --note notes/design.md --vault notes
      vault-council "REST or GraphQL?" --models openai/gpt-5.2,x-ai/grok-4 --synthesize
      vault-council --file question.md --language Korean --style detailed
    """
    if sys.platform == "win32":
        if hasattr(sys.stdout, "reconfigure"):
            sys.stdout.reconfigure(encoding="utf-8", errors="replace")
        if hasattr(sys.stderr, "reconfigure"):
            sys.stderr.reconfigure(encoding="utf-8", errors="replace")

    load_dotenv()
    _setup_logging(verbose)

    try:
        config = load_config()
    except FileNotFoundError as exc:
        console.print(f"[bold red]Config error:[/bold red] {exc}")
        sys.exit(1)

    if question_file:
        question_text = Path(question_file).read_text(encoding="utf-8").strip()
    elif question:
        question_text = question
    else:
        console.print("[bold red]Error:[/bold red] Provide a QUESTION argument or --file.")
        sys.exit(1)

    vault = Path(vault_dir) if vault_dir else config.save.vault_dir
    note = Path(note_path) if note_path else None
    context: NoteContext | None = gather_context(note, vault) if note else None
    query = build_query(question_text, context)

    try:
        gateway = OpenRouterGateway(config.openrouter)
        council = _build_council_config(config, models, reviewers, chairman, synthesize, language, style)
        validate_council(council)
    except ConfigurationFailure as exc:
        console.print(f"[bold red]Config error:[/bold red] {exc}")
        sys.exit(1)

    if not skip_health_check:
        council = _check_and_filter_models(gateway, council)

    synth_label = council.chairman_model if council.synthesize else "off"
    console.print(f"\n[bold cyan]Vault Council[/bold cyan] — {len(council.models)} members [{council.response_style}]")
    console.print(f"Members: {', '.join(council.models)}")
    console.print(f"Chairman: {synth_label}")
    console.print(f"Question: [italic]{question_text[:80]}{'...' if len(question_text) > 80 else ''}[/italic]\n")

    try:
        run = asyncio.run(_run_council(gateway, council, query))
    except ConfigurationFailure as exc:
        console.print(f"[bold red]Config error:[/bold red] {exc}")
        sys.exit(1)
    except (ModelCallFailure, DispatchTimeout) as exc:
        console.print(f"[bold red]Council failed:[/bold red] {exc}")
        sys.exit(1)

    print_opinions(run.opinions)
    print_reviews(run.reviews)
    if run.synthesis is not None:
        print_synthesis(run.synthesis, run.duration_sec)

    if no_save:
        return

    session = CouncilSession.from_run(run, question=question_text)
    saved = save_session(
        session,
        save_location="custom" if output_path else config.save.save_location,
        custom_folder=Path(output_path) if output_path else config.save.custom_save_folder,
        source_note=note,
        vault_dir=vault,
    )
    console.print(f"\n[dim]Saved to: {saved}[/dim]")


if __name__ == "__main__":
    main()
