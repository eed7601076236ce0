"""
Health Command

Readiness checks for the evaluation stack: configuration, fallback scoring,
log directory and, on request, the language model API.
"""

import asyncio
import sys
from pathlib import Path

import click
from rich.panel import Panel
from rich.table import Table

from ..cli.formatting import console
from ..core.config import get_config
from ..evaluation.service import EvaluationService
from ..scoring.similarity import evaluate_fallback
from ..utils.logging import get_logger

logger = get_logger(__name__)

PASS = "pass"
WARN = "warn"
FAIL = "fail"

STATUS_LABELS = {
    PASS: "[green]✓ PASS[/green]",
    WARN: "[yellow]! WARN[/yellow]",
    FAIL: "[red]✗ FAIL[/red]",
}


@click.command()
@click.option('--check-api', is_flag=True, help='Send a test evaluation to the language model API')
@click.option('--verbose', '-v', is_flag=True, help='Show detailed information')
@click.pass_context
def health(ctx, check_api, verbose):
    """Check whether the evaluation stack is ready.

    \b
    🏥 EXAMPLES:

    speakeval health
    speakeval health --check-api
    speakeval health --verbose

    \b
    💡 A missing API key is reported as a warning: evaluations still run
    with fallback scoring. Only failed checks produce a non-zero exit code.
    """

    async def run_health_checks():
        config = ctx.obj.get('config') or get_config()
        health_results = []

        # Configuration and AI evaluator
        service = EvaluationService.from_config(config)
        if not config.llm.use_ai:
            health_results.append(("AI Evaluator", WARN, "Disabled; fallback only"))
        elif service.ai_enabled:
            health_results.append(("AI Evaluator", PASS, f"Configured ({config.llm.model})"))
        else:
            health_results.append(("AI Evaluator", WARN, "No API key; fallback only"))

        # Fallback scorer must always work
        try:
            graded = evaluate_fallback("hello", "hello")
            if graded.accuracy_percent == 100:
                health_results.append(("Fallback Scorer", PASS, "Deterministic scoring available"))
            else:
                health_results.append(("Fallback Scorer", FAIL,
                                       f"Unexpected self-match score {graded.accuracy_percent}"))
        except Exception as e:
            logger.exception("Fallback scorer health check failed")
            health_results.append(("Fallback Scorer", FAIL, f"Error: {str(e)}"))

        # Log directory
        log_dir = Path(config.logging.file).parent
        test_file = log_dir / ".health_check"
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
            test_file.touch()
            test_file.unlink()
            health_results.append(("Log Directory", PASS, f"Writable: {log_dir}"))
        except OSError as e:
            health_results.append(("Log Directory", FAIL, f"Not writable: {log_dir} - {str(e)}"))

        # Live API check
        if check_api:
            console.print("[blue]Checking language model API...[/blue]")
            if service.ai_enabled:
                result = await service.ai_evaluator.health_check()
                if result['status'] == 'healthy':
                    health_results.append(("Language Model API", PASS,
                                           f"Responded in {result['response_time_ms']:.0f}ms"))
                else:
                    health_results.append(("Language Model API", FAIL, f"Error: {result['error']}"))
            else:
                health_results.append(("Language Model API", FAIL, "AI evaluator not configured"))

        usage = service.ai_evaluator.get_usage_stats() if service.ai_enabled else None
        await service.close()
        return health_results, usage

    health_results, usage = asyncio.run(run_health_checks())

    if verbose:
        config = ctx.obj.get('config') or get_config()
        console.print(f"[dim]Environment: {config.environment}[/dim]")
        console.print(f"[dim]API base URL: {config.llm.base_url}[/dim]")
        if usage and usage['total_requests']:
            console.print(f"[dim]API usage: {usage['total_requests']} requests, "
                          f"{usage['total_tokens']} tokens[/dim]")

    summary_table = Table(title="Health Check Results")
    summary_table.add_column("Component", style="cyan")
    summary_table.add_column("Status", justify="center")
    summary_table.add_column("Details", style="dim")

    for component, status, details in health_results:
        summary_table.add_row(component, STATUS_LABELS[status], details)

    console.print(summary_table)

    if any(status == FAIL for _, status, _ in health_results):
        console.print(Panel(
            "[red]✗ Some health checks failed![/red]\n"
            "Please review the issues above.",
            title="🏥 System Health",
            border_style="red"
        ))
        sys.exit(1)

    console.print(Panel(
        "[green]✓ Evaluation stack is ready.[/green]",
        title="🏥 System Health",
        border_style="green"
    ))
