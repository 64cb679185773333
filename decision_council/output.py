"""Rich console output and markdown file save for session results."""

import logging
import re
from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from decision_council.mcda import McdaResult
from decision_council.methods.base import load_state
from decision_council.models import Council, Issue, Session, SessionRound

logger = logging.getLogger(__name__)

console = Console(legacy_windows=False)


def _slug(text: str, max_len: int = 40) -> str:
    """Convert text to a filename-safe slug."""
    slug = re.sub(r"[^\w\s-]", "", text.lower())
    slug = re.sub(r"[\s_-]+", "-", slug).strip("-")
    return slug[:max_len] or "session"


def _preview(text: str, words: int = 50) -> str:
    """Return first N words of a reply."""
    all_words = text.split()
    preview = " ".join(all_words[:words])
    if len(all_words) > words:
        preview += "..."
    return preview


def _member_names(council: Council) -> dict:
    return {m.agent_id: m.name for m in council.members}


def print_round_summary(session_round: SessionRound, council: Council) -> None:
    """Print the round's contributions (previews) and its aggregated summary."""
    console.print(Rule(f"[bold cyan]Round {session_round.round_number}[/bold cyan]"))
    names = _member_names(council)
    for contribution in session_round.contributions:
        console.print(
            Panel(
                _preview(contribution.raw_content),
                title=f"[bold]{names.get(contribution.agent_id, str(contribution.agent_id)[:8])}[/bold]",
                border_style="dim",
            )
        )
    if not session_round.contributions:
        console.print(Text("No member replied in this round.", style="yellow"))
    if session_round.summary:
        console.print(Markdown(session_round.summary))


def print_final_summary(session: Session, summary: str) -> None:
    console.print(Rule("[bold green]Council Outcome[/bold green]"))
    console.print(
        Text(
            f"Status: {session.status.value} | Rounds: {len(session.rounds)}",
            style="dim",
        )
    )
    state = load_state(session.state_payload)
    result = state.get("result")
    if isinstance(result, dict) and result.get("ranking"):
        console.print(f"[bold]Recommended:[/bold] {result['ranking'][0]}")
    elif state.get("winner"):
        console.print(f"[bold]Winner:[/bold] {state['winner']}")
    if state.get("syntheticVotes"):
        console.print("[yellow]Ranking is based on synthetic votes (no parseable scores received).[/yellow]")
    logger.debug("Final summary length: %d chars", len(summary))


def print_mcda_result(result: McdaResult) -> None:
    """Print a ranking table followed by the full Markdown summary."""
    console.print(Rule(f"[bold cyan]{result.method}[/bold cyan]"))
    table = Table(show_header=True, header_style="bold")
    table.add_column("#", justify="right")
    table.add_column("Option")
    table.add_column("Score", justify="right")
    for i, option in enumerate(result.ranking, start=1):
        table.add_row(str(i), option, f"{result.scores[option]:.4f}")
    console.print(table)
    console.print(Markdown(result.summary))


def save_transcript(
    session: Session,
    council: Council,
    issue: Issue,
    final_summary: str,
    output_dir: Path,
    slug_override: str | None = None,
) -> Path:
    """Save the full session transcript as a markdown file.

    Args:
        session: The finished session.
        council: Council that ran it (for member names, method and tool).
        issue: The issue under decision.
        final_summary: Text returned by ``SessionOrchestrator.finalize_session``.
        output_dir: Directory to save the file in.
        slug_override: If provided, use this as the filename stem suffix instead of
            deriving one from the issue title.

    Returns:
        Path to the saved file.
    """
    output_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    slug = slug_override if slug_override is not None else _slug(issue.title)
    filepath = output_dir / f"{timestamp}_{slug}.md"

    names = _member_names(council)
    members = ", ".join(f"{m.name} ({m.role.value})" for m in council.members)

    lines: list[str] = [
        f"# Decision Council: {issue.title[:80]}",
        "",
        f"**Date:** {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
        f"**Method:** {council.method.value}",
        f"**Tool:** {council.tool.value}",
        f"**Members:** {members}",
        f"**Status:** {session.status.value}",
        f"**Rounds:** {len(session.rounds)}",
        "",
    ]
    if issue.context:
        lines += ["## Context", "", issue.context, ""]
    lines += ["---", ""]

    for rnd in session.rounds:
        lines.append(f"## Round {rnd.round_number}")
        lines.append("")
        lines.append("### Prompt")
        lines.append("")
        lines.append(rnd.instructions)
        lines.append("")
        for contribution in rnd.contributions:
            lines.append(f"### {names.get(contribution.agent_id, str(contribution.agent_id))}")
            lines.append("")
            lines.append(contribution.raw_content)
            lines.append("")
        if rnd.summary:
            lines.append("### Summary")
            lines.append("")
            lines.append(rnd.summary)
            lines.append("")

    lines += ["## Outcome", "", final_summary, ""]

    filepath.write_text("\n".join(lines), encoding="utf-8")
    logger.info("Saved transcript to %s", filepath)
    return filepath
