"""Command-line interface for ccoptimizer."""

from typing import Any, Dict, NoReturn, Optional, Tuple

import anyio
import click
import pydantic
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ccoptimizer import __version__
from ccoptimizer.application.batch_processor import BatchProcessor
from ccoptimizer.application.benchmark import CostBenchmark
from ccoptimizer.application.cache import ResponseCache, load_snapshot, save_snapshot
from ccoptimizer.application.cost_monitor import CostMonitor
from ccoptimizer.application.model_router import ModelRouter
from ccoptimizer.application.prompt_cache import PromptCacheOptimizer
from ccoptimizer.config import Settings
from ccoptimizer.domain.exceptions import CCOptimizerException
from ccoptimizer.domain.models import BenchmarkRequest
from ccoptimizer.logging import init_logging, shutdown_logging

console = Console()

DEFAULT_ROUTE_PROMPTS: Tuple[str, ...] = (
    "Classify email",
    "Design system",
    "Extract names",
)


def _fail(ctx: click.Context, message: str) -> NoReturn:
    console.print(f"[red]Error:[/red] {escape(message)}")
    ctx.exit(1)


def _settings(ctx: click.Context) -> Settings:
    return ctx.obj["settings"]


def _kv_table(title: str, rows: Dict[str, Any]) -> Table:
    table = Table(title=title, show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    for key, value in rows.items():
        table.add_row(key, str(value))
    return table


@click.group()
@click.version_option(version=__version__)
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Claude API cost optimization toolkit.

    Loads settings from the environment (and ``.env``), starts structured
    logging, and dispatches to the subcommands.
    """
    try:
        settings = Settings()
    except CCOptimizerException as e:
        _fail(ctx, str(e))
    except pydantic.ValidationError as e:
        _fail(ctx, f"Invalid configuration: {e}")

    init_logging(settings)
    ctx.call_on_close(shutdown_logging)
    ctx.obj = {"settings": settings}


@cli.command()
def monitor() -> None:
    """Track API costs and usage."""
    m = CostMonitor()
    m.track_usage("haiku-4-5", 1000, 500, 800)
    m.track_usage("sonnet-4-5", 2000, 1000, 0)
    report = m.generate_report()

    table = Table(title="Cost Monitor")
    table.add_column("Model", style="cyan")
    table.add_column("Calls", justify="right")
    table.add_column("Input", justify="right")
    table.add_column("Output", justify="right")
    table.add_column("Cache reads", justify="right")
    table.add_column("Cost ($)", justify="right")
    table.add_column("Cache efficiency", justify="right")
    for family, usage in report.models.items():
        table.add_row(
            family,
            str(usage.calls),
            str(usage.input_tokens),
            str(usage.output_tokens),
            str(usage.cache_reads),
            f"{usage.cost:.6f}",
            f"{usage.cache_efficiency:.1f}%",
        )
    console.print(table)
    console.print(
        f"Total: ${report.summary.total_cost:.6f} over {report.summary.total_calls} calls"
    )

    for rec in m.get_optimizations():
        console.print(f"[yellow]• {rec.type} ({rec.impact}):[/yellow] {rec.message}")


@cli.command()
@click.argument("prompts", nargs=-1)
@click.option("--reasoning", is_flag=True, help="Treat prompts as requiring reasoning.")
@click.pass_context
def route(ctx: click.Context, prompts: Tuple[str, ...], reasoning: bool) -> None:
    """Show model selection for PROMPTS (or a few sample tasks)."""
    router = ModelRouter.from_settings(_settings(ctx))

    table = Table(title="Model Router")
    table.add_column("Prompt", style="cyan")
    table.add_column("Complexity")
    table.add_column("Model", style="green")
    table.add_column("Savings")
    for prompt in prompts or DEFAULT_ROUTE_PROMPTS:
        decision = router.select_model(prompt, requires_reasoning=reasoning)
        table.add_row(
            prompt,
            decision.complexity.value,
            decision.model.split("/")[-1],
            decision.estimated_savings.description,
        )
    console.print(table)


@cli.command()
def cache() -> None:
    """Analyze prompt caching potential."""
    analysis = PromptCacheOptimizer().analyze_caching_potential(
        [{"role": "user", "content": "x" * 2000}], "System prompt here"
    )
    console.print(
        _kv_table(
            "Prompt Caching",
            {
                "Total tokens": analysis.total_tokens,
                "Cacheable tokens": analysis.cacheable_tokens,
                "Potential savings": f"{analysis.potential_savings_percent}%",
                "Break-even": analysis.break_even_point,
            },
        )
    )
    for opportunity in analysis.opportunities:
        console.print(f"• {opportunity.recommendation} ({opportunity.tokens} tokens)")


@cli.command()
def batch() -> None:
    """Show batch processing savings."""
    processor = BatchProcessor()
    for i in range(3):
        processor.add_request(f"Task {i + 1}")
    metrics = processor.estimate_metrics()
    console.print(
        _kv_table(
            "Batch Processor",
            {
                "Requests": metrics.total_requests,
                "Estimated tokens": metrics.estimated_tokens,
                "Standard cost ($)": f"{metrics.standard_cost:.4f}",
                "Batch cost ($)": f"{metrics.batch_cost:.4f}",
                "Savings": f"{metrics.savings_percent}%",
                "Processing time": metrics.processing_time,
            },
        )
    )


@cli.command()
@click.option(
    "--requests",
    "request_count",
    default=50,
    show_default=True,
    type=click.IntRange(min=0),
    help="Number of synthetic requests.",
)
@click.option("--strategy", default="all", show_default=True)
@click.pass_context
def benchmark(ctx: click.Context, request_count: int, strategy: str) -> None:
    """Run cost benchmarks over a synthetic workload."""
    bench = CostBenchmark()
    workload = [
        BenchmarkRequest(estimated_input_tokens=100, estimated_output_tokens=50)
        for _ in range(request_count)
    ]
    try:
        bench.run_scenario("With optimization", workload, strategy)
    except CCOptimizerException as e:
        _fail(ctx, str(e))

    report = bench.get_report()
    console.print(
        _kv_table(
            "Benchmark",
            {
                "Scenarios": report.total_scenarios,
                "Standard cost ($)": f"{report.total_standard_cost:.4f}",
                "Optimized cost ($)": f"{report.total_optimized_cost:.4f}",
                "Savings ($)": f"{report.total_savings:.4f}",
                "Savings": f"{report.overall_savings_percent:.2f}%",
                "Annual savings ($)": f"{report.roi.annual_savings:.2f}",
            },
        )
    )
    console.print(Panel(report.roi.recommendation, title="Recommendation"))


@cli.command(name="response-cache")
@click.option(
    "--snapshot",
    "snapshot_path",
    type=click.Path(dir_okay=False),
    default=None,
    help=(
        "Load the cache from this file before the demo and save it afterwards."
        " Defaults to CACHE_SNAPSHOT_PATH."
    ),
)
@click.pass_context
def response_cache(ctx: click.Context, snapshot_path: Optional[str]) -> None:
    """Demonstrate the response cache, optionally persisting a snapshot."""
    settings = _settings(ctx)
    snapshot_path = snapshot_path or settings.cache_snapshot_path
    try:
        rc: ResponseCache[str] = ResponseCache(
            ttl_seconds=settings.cache_ttl_seconds, capacity=settings.cache_capacity
        )
        if snapshot_path:
            result = anyio.run(load_snapshot, rc, snapshot_path)
            if result.version_mismatch:
                console.print("[yellow]Snapshot version not supported; starting empty[/yellow]")
            else:
                console.print(f"Restored {result.imported} entries ({result.skipped} expired)")

        prompt = "What is the capital of France?"
        if rc.get(prompt, settings.default_model) is None:
            rc.set(prompt, "Paris", settings.default_model)
        rc.get(prompt, settings.default_model)

        if snapshot_path:
            written = anyio.run(save_snapshot, rc, snapshot_path)
            console.print(f"Saved {written} entries to {snapshot_path}")
    except CCOptimizerException as e:
        _fail(ctx, str(e))

    stats = rc.get_stats()
    console.print(
        _kv_table(
            "Response Cache",
            {
                "Hits": stats.hits,
                "Misses": stats.misses,
                "Sets": stats.sets,
                "Hit rate": f"{stats.hit_rate:.1%}",
                "Size": f"{stats.size}/{stats.capacity}",
                "Savings": stats.estimated_savings_note,
            },
        )
    )


def main() -> None:
    cli(obj={})
