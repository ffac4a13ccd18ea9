"""CLI entry point for inspecting reconstructed sessions.

Allows viewing rounds, tool timelines and statistics from the command line:
    python -m session_rounds.viewer rounds path/to/session.jsonl
"""

from datetime import datetime
from pathlib import Path

import click

from session_rounds.config import Config, load_config
from session_rounds.engine import session_stats, tool_stats
from session_rounds.engine.formatting import (
    format_duration,
    input_preview,
    output_preview,
    prompt_text,
    sub_type_label,
    truncate_text,
)
from session_rounds.engine.summary import round_transcript
from session_rounds.logging import setup_logging
from session_rounds.models import Session, ToolInvocation
from session_rounds.session import round_invocations
from session_rounds.sources.claude_code import load_session, session_file_path


def format_timestamp(ts: int) -> str:
    """Format a millisecond timestamp for display."""
    if not ts:
        return "unknown"
    try:
        return datetime.fromtimestamp(ts / 1000).strftime("%Y-%m-%d %H:%M:%S")
    except (OverflowError, OSError, ValueError):
        # Outside the platform time_t range
        return "unknown"


def print_invocation(position: int, inv: ToolInvocation, config: Config, verbose: bool = False) -> None:
    """Print one tool invocation as a timeline entry."""
    if inv.superseded:
        status = "\033[90msuperseded\033[0m"
    elif inv.is_pending:
        status = "\033[33mpending\033[0m"
    elif inv.is_error:
        status = "\033[31merror\033[0m"
    else:
        status = "\033[32mok\033[0m"

    duration = format_duration(inv.duration_ms) if inv.duration_ms is not None else "-"
    click.echo(f"{position:>3}. \033[1m{inv.name}\033[0m [{status}] {duration}  {format_timestamp(inv.call_timestamp)}")

    preview = input_preview(inv.input, config.display.input_preview_length)
    if preview:
        click.echo(f"     {preview}")
    if verbose and inv.is_resolved:
        click.echo(f"     -> {output_preview(inv.output, config.display.output_preview_length)}")


def _load(path: Path | None, project: str | None, session: str | None, config: Config) -> Session:
    if path is None:
        if not project or not session:
            raise click.UsageError("Provide a transcript PATH or both --project and --session")
        path = session_file_path(config.projects_dir, project, session)
    if not path.exists():
        raise click.ClickException(f"Transcript not found: {path}")
    return load_session(path, project=project, config=config.reconstruction)


session_options = [
    click.argument("path", required=False, type=click.Path(path_type=Path)),
    click.option("--project", help="Project path (with --session, resolves the transcript)"),
    click.option("--session", "session_id", help="Session ID"),
]


def with_session_options(func):
    for option in reversed(session_options):
        func = option(func)
    return func


@click.group()
@click.option("--config", "config_path", type=click.Path(path_type=Path), help="Config file")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, debug: bool) -> None:
    """Inspect Claude Code sessions as rounds and tool calls."""
    config = load_config(config_path)
    setup_logging(
        "viewer",
        log_dir=config.logging.log_dir,
        level="DEBUG" if debug else config.logging.level,
        console=config.logging.console,
    )
    ctx.obj = config


@cli.command()
@with_session_options
@click.pass_obj
def rounds(config: Config, path: Path | None, project: str | None, session_id: str | None) -> None:
    """List the rounds of a session."""
    session = _load(path, project, session_id, config)

    click.echo(f"Session {session.session_id}: {len(session.rounds)} rounds\n")
    if session.preamble:
        click.echo(f"({len(session.preamble)} message(s) before the first prompt)\n")

    for r in session.rounds:
        label = sub_type_label(r.user_message.sub_type)
        tag = f" [{label}]" if label else ""
        prompt = truncate_text(prompt_text(r.user_message).replace("\n", " "), 60)
        click.echo(
            f"\033[36m#{r.index + 1:<3}\033[0m [{format_timestamp(r.timestamp)}]{tag} {prompt}"
        )
        click.echo(
            f"     messages: {len(r.assistant_messages)} | tools: {r.tool_call_count} "
            f"| tokens: {r.tokens} | cost: ${r.cost:.4f}"
        )


@cli.command()
@with_session_options
@click.option("--round", "round_number", type=int, help="Only this round (1-based, own window)")
@click.option("--verbose", "-v", is_flag=True, help="Show tool output")
@click.pass_obj
def tools(
    config: Config,
    path: Path | None,
    project: str | None,
    session_id: str | None,
    round_number: int | None,
    verbose: bool,
) -> None:
    """Show the tool call timeline."""
    session = _load(path, project, session_id, config)

    if round_number is not None:
        if not 1 <= round_number <= len(session.rounds):
            raise click.BadParameter(f"Session has {len(session.rounds)} rounds", param_hint="--round")
        invocations = round_invocations(session, round_number - 1)
    else:
        invocations = session.invocations

    if not invocations:
        click.echo("No tool calls")
        return

    tool_counts = tool_stats(invocations)
    summary = (
        f"{tool_counts.total} calls | ok {tool_counts.succeeded} | error {tool_counts.failed} "
        f"| pending {tool_counts.pending}"
    )
    if tool_counts.superseded:
        summary += f" | superseded {tool_counts.superseded}"
    click.echo(summary + "\n")
    for position, inv in enumerate(invocations, start=1):
        print_invocation(position, inv, config, verbose)


@cli.command()
@with_session_options
@click.pass_obj
def stats(config: Config, path: Path | None, project: str | None, session_id: str | None) -> None:
    """Show session totals."""
    session = _load(path, project, session_id, config)
    totals = session_stats(session)

    click.echo(f"Session: {session.session_id}")
    click.echo(f"Project: {session.project or 'unknown'}")
    click.echo(f"Rounds: {totals.round_count} | Messages: {totals.message_count}")
    click.echo(
        f"Tokens: {totals.usage.tokens} (in {totals.usage.input_tokens}, "
        f"out {totals.usage.output_tokens}, cache read {totals.usage.cache_read_tokens})"
    )
    click.echo(f"Cost: ${totals.usage.cost:.4f}")
    click.echo(
        f"Tools: {totals.tools.total} (ok {totals.tools.succeeded}, "
        f"error {totals.tools.failed}, pending {totals.tools.pending})"
    )
    for usage in totals.tool_usage:
        avg = format_duration(usage.avg_duration_ms) if usage.avg_duration_ms is not None else "-"
        click.echo(f"  {usage.name}: {usage.count} calls, {usage.errors} errors, avg {avg}")
    if totals.models:
        click.echo(f"Models: {', '.join(totals.models)}")


@cli.command()
@with_session_options
@click.option("--round", "round_number", type=int, required=True, help="Round number (1-based)")
@click.pass_obj
def transcript(
    config: Config,
    path: Path | None,
    project: str | None,
    session_id: str | None,
    round_number: int,
) -> None:
    """Print the text of one round."""
    session = _load(path, project, session_id, config)
    if not 1 <= round_number <= len(session.rounds):
        raise click.BadParameter(f"Session has {len(session.rounds)} rounds", param_hint="--round")
    click.echo(round_transcript(session.rounds[round_number - 1]))


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
