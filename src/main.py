"""CLI interface for the content refinement engine."""

import asyncio
import logging
import sys
from typing import Optional

from dotenv import load_dotenv
import typer

# Load environment variables from .env file
load_dotenv()
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.prompt import Prompt
from rich.table import Table

from src.llm import ProviderType
from src.models.iteration import ContentType, FeedbackType, UserFeedback
from src.refinement import (
    FeedbackPatternAnalysis,
    ProcessingMetrics,
    RefinementConfig,
    RefinementEngine,
    RefinementRequest,
    RefinementResult,
)

# Initialize CLI app
app = typer.Typer(
    name="content-refine",
    help="Iterative refinement of AI-generated blog, email and social copy",
    add_completion=False,
)

console = Console()

QUIT_WORDS = ("q", "quit", "exit")


def setup_logging(verbose: bool = False) -> None:
    """Set up logging with rich formatting."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def parse_content_type(value: str) -> ContentType:
    try:
        return ContentType(value.lower())
    except ValueError:
        console.print(
            f"[red]Unknown content type: {value}. "
            f"Choose from: {', '.join(t.value for t in ContentType)}[/red]"
        )
        sys.exit(1)


@app.command()
def strategies(
    feedback: str = typer.Argument(..., help="Free-text feedback to rank strategies for"),
    content_type: str = typer.Option(
        "blog", "--content-type", "-c", help="Content type: blog, email, or social"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose logging"
    ),
) -> None:
    """
    Show which refinement strategies a piece of feedback would trigger.

    No content is generated; this only runs the strategy ranking.

    Example:
        content-refine strategies "make it shorter and more casual"
    """
    setup_logging(verbose)
    selected_type = parse_content_type(content_type)

    engine = RefinementEngine()
    request = RefinementRequest(
        session_id="preview",
        iteration_id="preview",
        user_feedback=UserFeedback(type=FeedbackType.REFINE, refinement_request=feedback),
        content_type=selected_type,
    )
    ranked = engine.rank_strategies(request)

    table = Table(title=f"Strategies for: \"{feedback}\"")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Strategy", style="cyan", no_wrap=True)
    table.add_column("Score", justify="right", style="green")
    table.add_column("Weight", justify="right")
    table.add_column("Success", justify="right")
    table.add_column("Description")

    for rank, item in enumerate(ranked, 1):
        strategy = item.strategy
        table.add_row(
            str(rank),
            strategy.type.value,
            f"{item.score:.3f}",
            f"{strategy.context_weight:.2f}",
            f"{strategy.success_probability:.2f}",
            strategy.description,
        )

    console.print(table)


@app.command()
def session(
    brief: str = typer.Argument(..., help="What the content should be about"),
    content_type: str = typer.Option(
        "blog", "--content-type", "-c", help="Content type: blog, email, or social"
    ),
    tone: Optional[str] = typer.Option(
        None, "--tone", "-t", help="Initial tone: formal, casual, professional, friendly"
    ),
    length: Optional[str] = typer.Option(
        None, "--length", "-l", help="Initial length: short, medium, long"
    ),
    audience: Optional[str] = typer.Option(
        None, "--audience", "-a", help="Target audience for the first draft"
    ),
    provider: str = typer.Option(
        "anthropic", "--provider", "-p", help="LLM provider to use (anthropic, gemini)"
    ),
    model: Optional[str] = typer.Option(
        None, "--model", "-m", help="Model name (provider default if omitted)"
    ),
    alternatives: int = typer.Option(
        1, "--alternatives", "-n", min=1, max=8,
        help="Variations to generate per refinement round",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose logging"
    ),
) -> None:
    """
    Run an interactive draft-and-refine session.

    Generates a first draft, then asks for feedback after each draft:
    accept it, reject it, or describe what to change.

    Example:
        content-refine session "Announce our new analytics dashboard" -c email
        content-refine session "Spring sale" -c social --provider gemini -n 2
    """
    setup_logging(verbose)
    selected_type = parse_content_type(content_type)

    try:
        selected_provider = ProviderType(provider.lower())
    except ValueError:
        console.print(f"[red]Unknown provider: {provider}[/red]")
        sys.exit(1)

    config = RefinementConfig(
        provider=selected_provider,
        model=model,
        default_alternatives=alternatives,
    )

    console.print(Panel.fit(
        f"[bold blue]Content Refinement Session[/bold blue]\n"
        f"Brief: {brief}\n"
        f"Type: {selected_type.value} | Provider: {selected_provider.value}",
        title="content-refine",
    ))

    async def run_session() -> None:
        async with RefinementEngine(config) as engine:
            state = engine.start_session(selected_type, brief)
            session_id = state.session_id

            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                TimeElapsedColumn(),
                console=console,
            ) as progress:
                task = progress.add_task("Generating first draft...", total=None)
                current = await engine.generate_initial(session_id, tone, length, audience)
                progress.update(task, completed=True)

            console.print(Panel(
                current.generated_content,
                title=f"Draft {current.attempt_number}",
                border_style="cyan",
            ))

            while True:
                choice = Prompt.ask(
                    "[bold]Feedback[/bold] ([green]a[/green]ccept / [red]r[/red]eject / "
                    "type a change request / q to quit)"
                ).strip()

                if not choice or choice.lower() in QUIT_WORDS:
                    break

                if choice.lower() in ("a", "accept"):
                    engine.add_feedback(
                        session_id,
                        current.iteration_id,
                        UserFeedback(type=FeedbackType.ACCEPT, rating=1),
                    )
                    console.print("[green]Draft accepted.[/green]")
                    break

                if choice.lower() in ("r", "reject"):
                    feedback = UserFeedback(type=FeedbackType.REJECT, rating=-1)
                else:
                    feedback = UserFeedback(
                        type=FeedbackType.REFINE,
                        refinement_request=choice,
                    )
                engine.add_feedback(session_id, current.iteration_id, feedback)

                request = RefinementRequest(
                    session_id=session_id,
                    iteration_id=current.iteration_id,
                    user_feedback=feedback,
                    content_type=selected_type,
                    user_brief=brief,
                )

                with Progress(
                    SpinnerColumn(),
                    TextColumn("[progress.description]{task.description}"),
                    TimeElapsedColumn(),
                    console=console,
                ) as progress:
                    task = progress.add_task("Refining...", total=None)
                    if alternatives > 1:
                        results = await engine.process_refinement_alternatives(
                            request, alternatives
                        )
                    else:
                        results = [await engine.process_refinement(request)]
                    progress.update(task, completed=True)

                if not results:
                    console.print("[yellow]No alternatives could be generated.[/yellow]")
                    continue

                for result in results:
                    display_refinement_result(result)

                if len(results) > 1:
                    pick = Prompt.ask(
                        "Continue with alternative",
                        choices=[str(i) for i in range(1, len(results) + 1)],
                        default="1",
                    )
                    current = results[int(pick) - 1].iteration
                else:
                    current = results[0].iteration

            display_session_summary(
                engine.analyze_feedback_patterns(session_id),
                engine.get_processing_metrics(session_id),
            )
            engine.end_session(session_id)

    try:
        asyncio.run(run_session())
    except KeyboardInterrupt:
        console.print("\n[yellow]Session cancelled by user[/yellow]")
        sys.exit(1)
    except Exception as e:
        console.print(f"\n[red]Session failed: {e}[/red]")
        if verbose:
            console.print_exception()
        sys.exit(1)


def display_refinement_result(result: RefinementResult) -> None:
    """Display one refined draft with the reasoning behind it."""
    summary = f"""
[bold]Strategy:[/bold] {result.strategy.type.value}
[bold]Hypothesis:[/bold] {result.improvement_hypothesis}
[bold]Confidence:[/bold] {result.confidence_score * 100:.0f}%
[bold]Context Used:[/bold] {', '.join(result.context_used) or 'none'}
[bold]Latency:[/bold] {result.latency_ms / 1000:.1f}s
"""
    console.print(Panel(summary, title="Refinement", border_style="green"))
    console.print(Panel(
        result.iteration.generated_content,
        title=f"Draft {result.iteration.attempt_number} ({result.strategy.type.value})",
        border_style="cyan",
    ))


def display_session_summary(
    analysis: FeedbackPatternAnalysis,
    metrics: Optional[ProcessingMetrics],
) -> None:
    """Display the feedback analysis and metrics collected for a session."""
    console.print("\n[bold]Feedback Patterns:[/bold]")
    if analysis.dominant_feedback_types:
        for name in analysis.dominant_feedback_types:
            console.print(f"  • {name}")
    else:
        console.print("  [dim]no feedback recorded[/dim]")

    if analysis.improvement_suggestions:
        console.print("\n[bold]Suggestions:[/bold]")
        for suggestion in analysis.improvement_suggestions:
            console.print(f"  • [yellow]{suggestion}[/yellow]")

    if metrics is None:
        return

    table = Table(title="Session Metrics")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Refinements", str(metrics.refinement_count))
    table.add_row("Last refinement", f"{metrics.processing_time_ms:.0f}ms")
    table.add_row(
        "Strategies used",
        ", ".join(s.value for s in metrics.strategy_effectiveness) or "-",
    )
    table.add_row(
        "Satisfaction trend",
        " ".join(f"{r:+d}" for r in metrics.user_satisfaction_trend) or "-",
    )
    console.print(table)


@app.callback()
def main():
    """
    Content Refinement Engine

    Generate blog posts, emails and social posts, then refine them through
    feedback. Each round picks a refinement strategy from what you asked for
    and what worked earlier in the session.
    """
    pass


if __name__ == "__main__":
    app()
