"""
CLI Output Formatting

Rich formatting helpers for evaluation results, comparisons and status
messages shown by the speakeval commands.
"""

import json
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..models.schemas import EvaluationSource, PronunciationEvaluation, StoryEvaluation
from ..scoring.similarity import GradedScore, SimilarityResult

console = Console()

GRADE_STYLES = {
    'A': 'bold green',
    'B': 'green',
    'C': 'yellow',
    'D': 'dark_orange',
    'F': 'red',
}


def _grade_text(grade: str) -> str:
    style = GRADE_STYLES.get(grade, 'white')
    return f"[{style}]{grade}[/{style}]"


def _source_text(source: str) -> str:
    if source == EvaluationSource.FALLBACK.value:
        return "[yellow]fallback[/yellow]"
    return "[cyan]ai[/cyan]"


def format_comparison_table(reference: str, candidate: str,
                            similarity: SimilarityResult, graded: GradedScore) -> Table:
    """
    Format a similarity comparison as a Rich table.

    Args:
        reference: Expected text
        candidate: Text that was produced
        similarity: Distance, ratio and accuracy of the comparison
        graded: Grade and feedback tier for the accuracy

    Returns:
        Rich Table object
    """
    table = Table(title="Similarity Score", show_header=True, header_style="bold blue")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Reference", reference)
    table.add_row("Candidate", candidate)
    table.add_row("Edit distance", str(similarity.distance))
    table.add_row("Similarity ratio", f"{similarity.ratio:.4f}")
    table.add_row("Accuracy", f"{graded.accuracy_percent}%")
    table.add_row("Grade", _grade_text(graded.grade))
    table.add_row("Feedback tier", graded.feedback_tier.value)

    return table


def format_breakdown_table(breakdown: Dict[str, Any], title: str = "Score Breakdown") -> Table:
    table = Table(title=title, show_header=True, header_style="bold blue")
    table.add_column("Component", style="cyan")
    table.add_column("Score", justify="right")

    if not breakdown:
        table.add_row("[dim]No breakdown available[/dim]", "")
        return table

    for component, score in breakdown.items():
        table.add_row(component.replace('_', ' ').title(), str(score))

    return table


def format_pronunciation_table(evaluation: PronunciationEvaluation) -> Table:
    table = Table(title="Pronunciation Evaluation", show_header=True, header_style="bold blue")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Accuracy", f"{evaluation.accuracy}%")
    table.add_row("Final score", str(evaluation.final_score))
    table.add_row("Grade", _grade_text(evaluation.grade))
    table.add_row("Feedback tier", evaluation.feedback_tier)
    table.add_row("Source", _source_text(evaluation.source))

    return table


def format_story_table(evaluation: StoryEvaluation) -> Table:
    table = Table(title="Story Evaluation", show_header=True, header_style="bold blue")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Overall score", str(evaluation.overall_score))
    table.add_row("Word count bonus", f"+{evaluation.word_count_bonus}")
    table.add_row("Time bonus", f"+{evaluation.time_management_bonus}")
    table.add_row("Final score", str(evaluation.final_score))
    table.add_row("Grade", _grade_text(evaluation.grade))
    table.add_row("Word count", str(evaluation.word_count))
    table.add_row("Keywords used", ", ".join(evaluation.keywords_used) or "-")
    table.add_row("Source", _source_text(evaluation.source))

    return table


def display_feedback(feedback: str, strengths: Optional[List[str]] = None,
                     improvements: Optional[List[str]] = None) -> None:
    """Display learner feedback with strengths and improvement suggestions."""
    lines = [feedback]
    if strengths:
        lines.append("")
        lines.append("[green]Strengths:[/green]")
        lines.extend(f"  + {item}" for item in strengths)
    if improvements:
        lines.append("")
        lines.append("[yellow]To improve:[/yellow]")
        lines.extend(f"  - {item}" for item in improvements)

    console.print(Panel("\n".join(lines), title="Feedback", border_style="blue"))


def print_json(data: Dict[str, Any]) -> None:
    console.print_json(json.dumps(data, default=str))


def display_error(message: str, error_type: str = "Error") -> None:
    """Display a formatted error message."""
    error_panel = Panel(
        f"[red]{message}[/red]",
        title=f"❌ {error_type}",
        border_style="red"
    )
    console.print(error_panel)


def display_success(message: str, title: str = "Success") -> None:
    """Display a formatted success message."""
    success_panel = Panel(
        f"[green]{message}[/green]",
        title=f"✅ {title}",
        border_style="green"
    )
    console.print(success_panel)


def display_warning(message: str, title: str = "Warning") -> None:
    """Display a formatted warning message."""
    warning_panel = Panel(
        f"[yellow]{message}[/yellow]",
        title=f"⚠️ {title}",
        border_style="yellow"
    )
    console.print(warning_panel)
