"""Fact-check CLI using Typer and Rich."""

import asyncio
import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from factcheck_system import __version__
from factcheck_system.autofix.auto_fixer import AutoFixer, format_diff
from factcheck_system.config.logging import configure_logging, get_logger
from factcheck_system.config.quality_gates import (
    ConfigError,
    QualityGatesConfig,
    load_quality_config,
)
from factcheck_system.config.settings import settings
from factcheck_system.data_management.audit_log_store import AuditLogStore
from factcheck_system.data_management.report_store import ReportStore, load_report
from factcheck_system.data_management.review_store import ReviewQueueError, ReviewStore
from factcheck_system.data_management.schemas.review_schema import ReviewStatus, ReviewTrigger
from factcheck_system.data_management.verification_store import VerificationStore
from factcheck_system.documents.markdown_document import DocumentError
from factcheck_system.pipeline.factcheck_pipeline import FactCheckPipeline, summarize_report
from factcheck_system.review.review_escalator import ReviewEscalator
from factcheck_system.verification.circuit_breaker import CircuitBreaker
from factcheck_system.verification.claim_verifier import ClaimVerifier
from factcheck_system.verification.oracle import OracleLoadError, load_oracle

app = typer.Typer(
    help="Fact-check markdown posts: verify claims, gate publishing, auto-fix safe errors",
    add_completion=False,
)
review_app = typer.Typer(help="Inspect and resolve the human review queue", add_completion=False)
app.add_typer(review_app, name="review")

console = Console()
err_console = Console(stderr=True)

logger = get_logger("cli")

EXIT_BLOCKED = 1
EXIT_ERROR = 2


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level"),
) -> None:
    if verbose:
        configure_logging("DEBUG")


def _load_config() -> QualityGatesConfig:
    try:
        return load_quality_config(settings.quality_config_path)
    except ConfigError as e:
        err_console.print(f"[red]✗[/red] {escape(str(e))}")
        raise typer.Exit(EXIT_ERROR)


def _review_store() -> ReviewStore:
    return ReviewStore(settings.review_queue_path)


def _escalator(config: QualityGatesConfig) -> ReviewEscalator:
    return ReviewEscalator(_review_store(), config)


@app.command()
def check(
    files: list[Path] = typer.Argument(..., help="Markdown posts to check"),
    oracle: Optional[str] = typer.Option(
        None, "--oracle", help="Oracle import path 'module:attr' (default: ORACLE setting)"
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Directory for report JSON files (default: REPORT_DIR setting)"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print reports as JSON instead of summaries"),
    no_block: bool = typer.Option(False, "--no-block", help="Exit 0 even when publishing is blocked"),
    stop_on_block: bool = typer.Option(False, "--stop-on-block", help="Stop at the first blocked post"),
) -> None:
    """
    Fact-check posts and persist one report per post.

    Exits 1 when a post is blocked from publishing (unless --no-block) and 2
    when a post could not be checked.
    """
    oracle_path = oracle or settings.oracle
    if not oracle_path:
        err_console.print("[red]✗[/red] No verification oracle configured (--oracle or ORACLE)")
        raise typer.Exit(EXIT_ERROR)

    try:
        verification_oracle = load_oracle(oracle_path)
    except OracleLoadError as e:
        err_console.print(f"[red]✗[/red] {escape(str(e))}")
        raise typer.Exit(EXIT_ERROR)

    config = _load_config()
    store = VerificationStore(settings.verification_store_path)
    verifier = ClaimVerifier(
        verification_oracle,
        store=store,
        breaker=CircuitBreaker(
            threshold=settings.breaker_threshold,
            reset_timeout_ms=settings.breaker_reset_timeout_ms,
        ),
        config=config,
        request_interval_ms=settings.request_interval_ms,
    )
    pipeline = FactCheckPipeline(
        verifier,
        escalator=_escalator(config),
        config=config,
        report_store=ReportStore(output or settings.report_dir),
    )

    logger.info("Checking posts", count=len(files))
    batch = asyncio.run(pipeline.check_files(files, stop_on_block=stop_on_block))

    if as_json:
        typer.echo(
            json.dumps(
                [r.model_dump(mode="json") for r in batch.reports],
                indent=2,
                ensure_ascii=False,
            )
        )
    else:
        for report in batch.reports:
            console.print(
                summarize_report(report, config.factcheck.thresholds.overall),
                markup=False,
                highlight=False,
            )

    for file_path, error in batch.failures.items():
        err_console.print(f"[red]✗[/red] {escape(file_path)}: {escape(error)}")

    if batch.blocked and not no_block:
        raise typer.Exit(EXIT_BLOCKED)
    if batch.failures:
        raise typer.Exit(EXIT_ERROR)


@app.command()
def fix(
    report_path: Path = typer.Argument(..., help="FactCheckReport JSON produced by 'check'"),
    file: Optional[Path] = typer.Option(
        None, "--file", help="Post to fix (default: file_path recorded in the report)"
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show changes without writing anything"),
) -> None:
    """Apply the report's auto-applicable corrections to the post."""
    try:
        report = load_report(report_path)
    except (OSError, ValueError) as e:
        err_console.print(f"[red]✗[/red] Cannot read report {report_path}: {escape(str(e))}")
        raise typer.Exit(EXIT_ERROR)

    config = _load_config()
    fixer = AutoFixer(_escalator(config), AuditLogStore(settings.audit_log_dir))

    try:
        result = asyncio.run(fixer.apply_auto_fix(file or report.file_path, report, dry_run=dry_run))
    except (DocumentError, ReviewQueueError) as e:
        err_console.print(f"[red]✗[/red] {escape(str(e))}")
        raise typer.Exit(EXIT_ERROR)

    console.print(format_diff(result), markup=False, highlight=False)


@review_app.command("list")
def review_list(
    show_all: bool = typer.Option(False, "--all", help="Include reviewed, approved and rejected cases"),
) -> None:
    """List review cases (pending only by default)."""
    store = _review_store()
    try:
        cases = asyncio.run(store.list_all() if show_all else store.list_pending())
    except ReviewQueueError as e:
        err_console.print(f"[red]✗[/red] {escape(str(e))}")
        raise typer.Exit(EXIT_ERROR)

    if not cases:
        console.print("[green]✓[/green] Review queue is empty")
        return

    table = Table(title="Human Review Queue", show_header=True, header_style="bold magenta")
    table.add_column("ID", style="cyan")
    table.add_column("File", style="white")
    table.add_column("Trigger", style="yellow")
    table.add_column("Action", style="red")
    table.add_column("Score", justify="right")
    table.add_column("Status", style="green")
    table.add_column("Created", style="dim")

    for case in cases:
        table.add_row(
            case.id,
            case.file_path,
            case.trigger.value,
            case.action.value,
            f"{case.score:.0f}",
            case.status.value,
            case.created_at.strftime("%Y-%m-%d %H:%M"),
        )
    console.print(table)


@review_app.command("mark")
def review_mark(
    case_id: str = typer.Argument(..., help="Review case id"),
    status: ReviewStatus = typer.Argument(..., help="reviewed, approved or rejected"),
    note: Optional[str] = typer.Option(None, "--note", help="Reviewer note"),
) -> None:
    """Move a case along pending -> reviewed -> approved | rejected."""
    try:
        case = asyncio.run(_review_store().transition(case_id, status, note))
    except ReviewQueueError as e:
        err_console.print(f"[red]✗[/red] {escape(str(e))}")
        raise typer.Exit(EXIT_ERROR)
    console.print(f"[green]✓[/green] {case.id} is now {case.status.value}")


@review_app.command("flag")
def review_flag(
    file: Path = typer.Argument(..., help="Post to flag"),
    reason: str = typer.Option(..., "--reason", help="Why the post needs a human"),
    title: str = typer.Option("", "--title", help="Post title"),
    feedback: bool = typer.Option(False, "--feedback", help="Flag because of negative reader feedback"),
) -> None:
    """Put a post in the review queue by hand."""
    trigger = ReviewTrigger.NEGATIVE_FEEDBACK if feedback else ReviewTrigger.MANUAL_FLAG
    escalator = _escalator(_load_config())
    try:
        case = asyncio.run(
            escalator.add_review_case(str(file), title or file.stem, trigger, 0, reason)
        )
    except ReviewQueueError as e:
        err_console.print(f"[red]✗[/red] {escape(str(e))}")
        raise typer.Exit(EXIT_ERROR)
    console.print(f"[green]✓[/green] {case.id} queued ({trigger.value})")


@review_app.command("cleanup")
def review_cleanup(
    max_age_days: Optional[int] = typer.Option(
        None, "--max-age-days", min=1, help="Age cutoff (default: human_review.max_case_age_days)"
    ),
) -> None:
    """Purge approved and rejected cases older than the cutoff."""
    config = _load_config()
    days = max_age_days or config.human_review.max_case_age_days
    try:
        removed = asyncio.run(_review_store().cleanup_old_cases(days))
    except ReviewQueueError as e:
        err_console.print(f"[red]✗[/red] {escape(str(e))}")
        raise typer.Exit(EXIT_ERROR)
    console.print(f"[green]✓[/green] Removed {removed} case(s) older than {days} days")


@app.command()
def config() -> None:
    """Display the effective quality gate configuration and settings."""
    quality = _load_config()

    table = Table(title="Fact-check Settings", show_header=True, header_style="bold magenta")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="yellow")
    table.add_row("Quality config", settings.quality_config_path)
    table.add_row("Review queue", settings.review_queue_path)
    table.add_row("Audit logs", settings.audit_log_dir)
    table.add_row("Reports", settings.report_dir)
    table.add_row("Verification store", settings.verification_store_path or "(memory)")
    table.add_row("Oracle", settings.oracle or "(not set)")
    table.add_row("Logging", f"Level: {settings.log_level}, Format: {settings.log_format}")
    console.print(table)

    console.print_json(json.dumps(quality.model_dump(mode="json"), ensure_ascii=False))


@app.command()
def version() -> None:
    """Display version information."""
    console.print("[bold]Fact-check System[/bold]")
    console.print(f"Version: {__version__}")


if __name__ == "__main__":
    app()
