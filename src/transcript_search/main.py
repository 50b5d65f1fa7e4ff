from typing import Annotated, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from typer import Argument, Exit, Option, Typer, echo

from .config import SearchConfig
from .errors import ConfigError, TranscriptSearchError
from .logging_utils import configure_logging
from .models import DEFAULT_LIMIT, DEFAULT_MIN_SCORE
from .search import SearchOutcome
from .server import run_server
from .service import TranscriptSearchService
from .storage import StoreError

app = Typer(help="Search podcast transcript segments by vector similarity.")


def _build_service() -> TranscriptSearchService:
    return TranscriptSearchService.from_config(SearchConfig.from_env())


def _format_seconds(value: float) -> str:
    minutes, seconds = divmod(value, 60)
    return f"{int(minutes):02d}:{seconds:05.2f}"


def render_outcome(console: Console, outcome: SearchOutcome) -> None:
    if outcome.degraded:
        console.print(
            Panel(
                "The store has no embeddings yet. Segments are returned in table "
                "order and their similarity is a placeholder value.",
                title="Degraded mode",
                title_align="left",
                border_style="bold yellow",
            )
        )
    if outcome.is_empty:
        console.print(f"[bold]{outcome.to_text()}[/]")
        return

    table = Table(title=f"Results ({outcome.capability.value})", show_lines=True)
    table.add_column("Similarity", justify="right", style="bold green")
    table.add_column("Episode", style="cyan")
    table.add_column("Time", style="magenta")
    table.add_column("Segment")
    for result in outcome.results:
        table.add_row(
            f"{result.similarity:.3f}",
            result.episode_title,
            f"{_format_seconds(result.start_time)}-{_format_seconds(result.end_time)}",
            result.segment_text,
        )
    console.print(table)


@app.command()
def search(
    question: Annotated[str, Argument(help="The query text to search for.")],
    limit: Annotated[
        int,
        Option("--limit", "-n", help="Number of results to return (1-50)."),
    ] = DEFAULT_LIMIT,
    min_score: Annotated[
        float,
        Option("--min-score", "-m", help="Minimum similarity threshold (0-1)."),
    ] = DEFAULT_MIN_SCORE,
    as_json: Annotated[
        bool,
        Option("--json", help="Print the raw tool payload instead of a table."),
    ] = False,
    log_level: Annotated[
        Optional[str],
        Option("--log-level", help="Override TRANSCRIPT_SEARCH_LOG_LEVEL."),
    ] = None,
) -> None:
    """Search transcript segments similar to QUESTION."""
    configure_logging(log_level)
    console = Console()
    try:
        service = _build_service()
    except (ConfigError, StoreError) as exc:
        console.print(f"[bold red]Error:[/] {exc}")
        raise Exit(code=1) from exc

    try:
        outcome = service.search(question, limit=limit, min_score=min_score)
    except TranscriptSearchError as exc:
        console.print(f"[bold red]Error ({exc.code.value}):[/] {exc.message}")
        raise Exit(code=1) from exc
    finally:
        service.close()

    if as_json:
        echo(outcome.to_text())
    else:
        render_outcome(console, outcome)


@app.command()
def serve(
    host: Annotated[str, Option("--host", help="Interface to bind.")] = "127.0.0.1",
    port: Annotated[int, Option("--port", "-p", help="Port to listen on.")] = 8000,
    log_level: Annotated[
        Optional[str],
        Option("--log-level", help="Override TRANSCRIPT_SEARCH_LOG_LEVEL."),
    ] = None,
) -> None:
    """Run the HTTP server."""
    configure_logging(log_level)
    console = Console()
    try:
        SearchConfig.from_env()
    except ConfigError as exc:
        console.print(f"[bold red]Error:[/] {exc}")
        raise Exit(code=1) from exc
    run_server(host=host, port=port)
