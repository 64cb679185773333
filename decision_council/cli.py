"""Click CLI: run a council session, run standalone MCDA, list methods."""

import asyncio
import logging
import sys
import uuid
from pathlib import Path

import click
import yaml
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from config.config_loader import AppConfig, load_config
from decision_council import mcda
from decision_council.drivers.base import AgentDriver
from decision_council.drivers.echo import EchoAgentDriver
from decision_council.drivers.llm import LLMAgentDriver
from decision_council.errors import CouncilError, McdaValidationError
from decision_council.methods.registry import build_registry
from decision_council.models import Council, CouncilMember, Issue, MethodType, Role, SessionRound, ToolType
from decision_council.orchestrator import SessionOrchestrator
from decision_council.output import (
    print_final_summary,
    print_mcda_result,
    print_round_summary,
    save_transcript,
)
from decision_council.providers.factory import build_all_providers
from decision_council.tools.registry import build_tool_adapters

logger = logging.getLogger(__name__)

console = Console(legacy_windows=False)


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def _load_config_or_exit() -> AppConfig:
    try:
        return load_config()
    except FileNotFoundError as exc:
        console.print(f"[bold red]Config error:[/bold red] {exc}")
        sys.exit(1)


def _build_members(config: AppConfig) -> list[tuple[CouncilMember, str]]:
    """Council members from the configured panel, each paired with its provider key."""
    members: list[tuple[CouncilMember, str]] = []
    for entry in config.panel:
        try:
            role = Role(entry.role)
        except ValueError:
            logger.warning("Panel member '%s' has unknown role '%s', using Expert", entry.name, entry.role)
            role = Role.EXPERT
        member = CouncilMember(
            agent_id=uuid.uuid4(),
            name=entry.name,
            role=role,
            is_ai=True,
            system_prompt_override=entry.system_prompt,
        )
        members.append((member, entry.provider))
    return members


def _build_driver(driver_name: str, config: AppConfig, members: list[tuple[CouncilMember, str]]) -> AgentDriver:
    if driver_name == "echo":
        return EchoAgentDriver()

    providers = build_all_providers(config)
    assignments = {
        member.agent_id: providers[provider_key]
        for member, provider_key in members
        if provider_key in providers
    }
    if not assignments:
        console.print("[bold red]Error:[/bold red] No panel member has an available provider. Check API keys in .env.")
        sys.exit(1)
    for member, provider_key in members:
        if member.agent_id not in assignments:
            console.print(f"[yellow]{member.name}[/yellow] skipped: provider '{provider_key}' unavailable")
    return LLMAgentDriver(assignments, timeout_sec=config.defaults.agent_timeout_sec)


async def _run_session(
    orchestrator: SessionOrchestrator,
    council: Council,
    issue: Issue,
    output_dir: Path,
) -> Path:
    rounds: list[SessionRound] = []

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    ) as progress:

        def on_round_complete(session_round: SessionRound) -> None:
            rounds.append(session_round)
            progress.print(
                f"[green]OK[/green] Round {session_round.round_number} complete "
                f"({len(session_round.contributions)} contributions)"
            )

        progress.add_task("Running council rounds...", total=None)
        session, final_summary = await orchestrator.run_session(council, issue, on_round_complete)

    for session_round in rounds:
        print_round_summary(session_round, council)
    print_final_summary(session, final_summary)

    saved_path = save_transcript(session, council, issue, final_summary, output_dir)
    console.print(f"\n[dim]Saved to: {saved_path}[/dim]")
    return saved_path


@click.group()
def main() -> None:
    """Decision Council -- run structured group decision methods with AI or offline agents.

    \b
    Examples:
      decision-council run "Should we migrate to Kubernetes?" --method topsis
      decision-council run "Office relocation" --method delphi --tool swot --driver llm
      decision-council mcda examples.yaml --method all
      decision-council methods
    """
    # Reconfigure stdout/stderr to UTF-8 on Windows so model replies containing
    # Unicode chars don't crash the ANSI render path.
    if sys.platform == "win32":
        if hasattr(sys.stdout, "reconfigure"):
            sys.stdout.reconfigure(encoding="utf-8", errors="replace")
        if hasattr(sys.stderr, "reconfigure"):
            sys.stderr.reconfigure(encoding="utf-8", errors="replace")
    load_dotenv()


@main.command()
@click.argument("title")
@click.option("--context", default="", help="Background for the issue")
@click.option("--method", "method_name", default=None,
              type=click.Choice([m.value for m in MethodType]), help="Decision method (default: from config)")
@click.option("--tool", "tool_name", default=None,
              type=click.Choice([t.value for t in ToolType]), help="Response tool (default: from config)")
@click.option("--driver", "driver_name", default=None, type=click.Choice(["echo", "llm"]),
              help="echo = offline canned replies, llm = configured providers (default: from config)")
@click.option("--output", "output_path", default=None, help="Output directory (default: from config)")
@click.option("--verbose", is_flag=True, help="Enable DEBUG-level logging")
def run(
    title: str,
    context: str,
    method_name: str | None,
    tool_name: str | None,
    driver_name: str | None,
    output_path: str | None,
    verbose: bool,
) -> None:
    """Run a full council session on TITLE and save a Markdown transcript."""
    _setup_logging(verbose)
    config = _load_config_or_exit()

    method = MethodType(method_name or config.defaults.method)
    tool = ToolType(tool_name or config.defaults.tool)
    output_dir = Path(output_path) if output_path else config.defaults.output_dir

    members = _build_members(config)
    if not members:
        console.print("[bold red]Error:[/bold red] No panel configured in settings.yaml.")
        sys.exit(1)
    driver = _build_driver(driver_name or config.defaults.driver, config, members)

    issue = Issue(title=title, context=context)
    council = Council(issue_id=issue.id, method=method, tool=tool)
    for member, _ in members:
        council.add_member(member)

    orchestrator = SessionOrchestrator(
        registry=build_registry(config),
        tool_adapters=build_tool_adapters(),
        agent_driver=driver,
        max_concurrency=config.defaults.max_concurrency,
    )

    console.print(f"\n[bold cyan]Decision Council[/bold cyan] - {method.value}, {len(members)} members, tool {tool.value}")
    console.print(f"Panel: {', '.join(m.name for m, _ in members)}")
    console.print(f"Issue: [italic]{title[:80]}{'...' if len(title) > 80 else ''}[/italic]\n")

    try:
        asyncio.run(_run_session(orchestrator, council, issue, output_dir))
    except CouncilError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        sys.exit(1)


@main.command("mcda")
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--method", "method_name", default="all",
              type=click.Choice([*mcda.ALGORITHMS, "all"]), help="Algorithm to run (default: all)")
@click.option("--verbose", is_flag=True, help="Enable DEBUG-level logging")
def mcda_command(input_file: str, method_name: str, verbose: bool) -> None:
    """Rank options from a YAML/JSON decision matrix without running a session.

    \b
    The file holds options, criteria and scores:
      options: [A, B]
      criteria: [{name: Quality, weight: 0.6}, {name: Cost, weight: 0.4, is_benefit: false}]
      scores: {A: {Quality: 8, Cost: 3}, B: {Quality: 6, Cost: 5}}
    """
    _setup_logging(verbose)
    try:
        raw = yaml.safe_load(Path(input_file).read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        console.print(f"[bold red]Input error:[/bold red] {exc}")
        sys.exit(1)
    if not isinstance(raw, dict):
        console.print("[bold red]Input error:[/bold red] expected a mapping with options, criteria and scores.")
        sys.exit(1)

    names = list(mcda.ALGORITHMS) if method_name == "all" else [method_name]
    try:
        mcda_input = mcda.McdaInput.from_dict(raw)
        for name in names:
            print_mcda_result(mcda.run(name, mcda_input))
    except (McdaValidationError, TypeError, ValueError) as exc:
        console.print(f"[bold red]Invalid input:[/bold red] {exc}")
        sys.exit(1)


@main.command("methods")
def methods_command() -> None:
    """List the registered decision methods."""
    table = Table(show_header=True, header_style="bold")
    table.add_column("Method")
    table.add_column("Name")
    table.add_column("Rounds", justify="right")
    table.add_column("Min members", justify="right")
    for method in build_registry():
        table.add_row(method.method_type.value, method.display_name, str(method.max_rounds), str(method.min_members))
    console.print(table)


if __name__ == "__main__":
    main()
