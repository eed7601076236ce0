"""
Evaluation Commands

Pronunciation and storytelling evaluation through the evaluation service,
using the language model when configured and fallback scoring otherwise.
"""

import asyncio
from pathlib import Path

import click

from ..cli.formatting import (
    console,
    display_error,
    display_feedback,
    format_breakdown_table,
    format_pronunciation_table,
    format_story_table,
    print_json,
)
from ..core.config import get_config
from ..core.exceptions import SpeakEvalException
from ..evaluation.service import EvaluationService
from ..models.schemas import Difficulty, StoryRequest
from ..utils.logging import get_logger, PerformanceTimer

logger = get_logger(__name__)

DIFFICULTY_CHOICES = [d.value for d in Difficulty]


@click.command()
@click.option('--target', '-t', required=True, help='Word the learner was asked to say')
@click.option('--transcription', '-s', default='', help='Speech-to-text output of the attempt')
@click.option('--difficulty', '-d', type=click.Choice(DIFFICULTY_CHOICES), default='medium',
              help='Difficulty level')
@click.option('--offline', is_flag=True, help='Skip the language model and use fallback scoring')
@click.option('--json', 'as_json', is_flag=True, help='Print the evaluation as JSON')
@click.pass_context
def pronounce(ctx, target, transcription, difficulty, offline, as_json):
    """Evaluate a pronunciation attempt.

    \b
    🗣️ EXAMPLES:

    speakeval pronounce --target hello --transcription helo
    speakeval pronounce -t through -s true -d hard --offline
    speakeval pronounce -t water -s water --json
    """
    config = ctx.obj.get('config') or get_config()

    async def run_evaluation():
        async with EvaluationService.from_config(config, offline=offline) as service:
            with PerformanceTimer("pronunciation evaluation", logger):
                return await service.evaluate_pronunciation(target, transcription, difficulty)

    try:
        evaluation = asyncio.run(run_evaluation())
    except SpeakEvalException as e:
        display_error(str(e), "Evaluation Error")
        raise SystemExit(1)

    if as_json:
        print_json(evaluation.to_dict())
        return

    console.print(format_pronunciation_table(evaluation))
    console.print(format_breakdown_table(evaluation.score_breakdown))
    display_feedback(evaluation.feedback, evaluation.strengths, evaluation.improvements)


@click.command()
@click.option('--prompt', '-p', required=True, help='Story prompt shown to the learner')
@click.option('--text', help='Story text')
@click.option('--file', 'story_file', type=click.Path(exists=True, dir_okay=False),
              help='Read the story from a file')
@click.option('--keyword', '-k', 'keywords', multiple=True, help='Required keyword (repeatable)')
@click.option('--min-words', type=int, help='Minimum word count [default: evaluation.story.min_words]')
@click.option('--difficulty', '-d', type=click.Choice(DIFFICULTY_CHOICES), default='medium',
              help='Difficulty level')
@click.option('--time-spent', type=int, default=0, help='Seconds spent writing the story')
@click.option('--max-time', type=int, help='Time limit in seconds [default: evaluation.story.max_time]')
@click.option('--offline', is_flag=True, help='Skip the language model and use fallback scoring')
@click.option('--json', 'as_json', is_flag=True, help='Print the evaluation as JSON')
@click.pass_context
def story(ctx, prompt, text, story_file, keywords, min_words, difficulty, time_spent,
          max_time, offline, as_json):
    """Evaluate a short story written for a prompt.

    \b
    📖 EXAMPLES:

    speakeval story -p "A day at the beach" --text "We went to the sea..."
    speakeval story -p "Lost keys" --file story.txt -k door -k search
    speakeval story -p "Space trip" --file story.txt --time-spent 120 --json

    \b
    💡 Exactly one of --text or --file must be given.
    """
    if (text is None) == (story_file is None):
        raise click.UsageError("Provide exactly one of --text or --file")

    if story_file:
        text = Path(story_file).read_text(encoding='utf-8')

    config = ctx.obj.get('config') or get_config()
    request = StoryRequest(
        story=text,
        prompt=prompt,
        keywords=list(keywords),
        min_words=min_words if min_words is not None else config.evaluation.story.min_words,
        difficulty=difficulty,
        time_spent=time_spent,
        max_time=max_time if max_time is not None else config.evaluation.story.max_time
    )

    async def run_evaluation():
        async with EvaluationService.from_config(config, offline=offline) as service:
            with PerformanceTimer("story evaluation", logger):
                return await service.evaluate_story(request)

    try:
        evaluation = asyncio.run(run_evaluation())
    except SpeakEvalException as e:
        display_error(str(e), "Evaluation Error")
        raise SystemExit(1)

    if as_json:
        print_json(evaluation.to_dict())
        return

    console.print(format_story_table(evaluation))
    console.print(format_breakdown_table(evaluation.score_breakdown))
    display_feedback(evaluation.feedback, evaluation.strengths, evaluation.improvements)
