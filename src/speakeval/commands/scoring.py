"""
Scoring Command

Offline edit-distance comparison between a reference and a candidate text.
"""

import click

from ..cli.formatting import console, display_error, format_comparison_table, print_json
from ..core.exceptions import SpeakEvalException
from ..scoring.similarity import compare, evaluate_fallback
from ..utils.logging import get_logger

logger = get_logger(__name__)


@click.command()
@click.argument('reference')
@click.argument('candidate')
@click.option('--json', 'as_json', is_flag=True, help='Print the result as JSON')
def score(reference, candidate, as_json):
    """Score how closely CANDIDATE matches REFERENCE.

    \b
    📏 EXAMPLES:

    speakeval score hello helo
    speakeval score "thank you" "tank you" --json

    \b
    💡 Comparison is case-insensitive and needs no network access. The
    accuracy is the rounded similarity ratio, graded A to F.
    """
    try:
        similarity = compare(reference, candidate)
        graded = evaluate_fallback(reference, candidate)
    except SpeakEvalException as e:
        display_error(str(e))
        raise SystemExit(1)

    logger.debug(f"Scored '{candidate}' against '{reference}': distance={similarity.distance}")

    if as_json:
        print_json({
            'reference': reference,
            'candidate': candidate,
            'distance': similarity.distance,
            'ratio': similarity.ratio,
            **graded.to_dict(),
        })
        return

    console.print(format_comparison_table(reference, candidate, similarity, graded))
