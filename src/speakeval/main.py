"""
CLI Entry Point

Command-line interface for speakeval, the pronunciation and storytelling
evaluator, using Click with rich output formatting.
"""

import sys
from pathlib import Path

import click
from rich.panel import Panel

from . import __version__
from .cli.formatting import console, display_error
from .core.config import get_config, reload_config
from .core.exceptions import SpeakEvalException
from .utils.logging import setup_logging, get_logger
from .commands import score, pronounce, story, health, config_show

logger = get_logger(__name__)


@click.group(invoke_without_command=True)
@click.option('--config', '-c', type=click.Path(exists=True), help='Configuration file path')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--debug', is_flag=True, help='Enable debug mode')
@click.version_option(version=__version__, prog_name='speakeval')
@click.pass_context
def cli(ctx, config, verbose, debug):
    """speakeval - Pronunciation and Storytelling Evaluation for Language Learners"""

    ctx.ensure_object(dict)

    try:
        if config:
            app_config = reload_config(Path(config))
        else:
            app_config = get_config()

        if debug:
            app_config.debug = debug

        log_level = 'DEBUG' if (verbose or debug) else app_config.logging.level
        app_config.logging.level = log_level
        if verbose or debug:
            app_config.logging.console_level = log_level
        setup_logging(app_config)

        ctx.obj['config'] = app_config

    except SpeakEvalException as e:
        display_error(f"Error initializing application: {str(e)}", "Configuration Error")
        sys.exit(1)

    if ctx.invoked_subcommand is None:
        _display_banner()


def _display_banner():
    """Display application banner."""
    banner = Panel.fit(
        "[bold blue]speakeval[/bold blue]\n"
        "[dim]Pronunciation and Storytelling Evaluation[/dim]\n\n"
        "Use --help for available commands",
        title="🎙️ Language Practice",
        border_style="blue"
    )
    console.print(banner)


# ===== CONFIG COMMANDS =====

@cli.group()
def config():
    """Configuration management commands."""
    pass


config.add_command(config_show)


# ===== TOP-LEVEL COMMANDS =====

cli.add_command(score)
cli.add_command(pronounce)
cli.add_command(story)
cli.add_command(health)


def main():
    """Main entry point with comprehensive error handling."""
    try:
        cli()
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(1)
    except SpeakEvalException as e:
        logger.error(f"Application error: {str(e)}")
        console.print(f"[red]Error: {str(e)}[/red]")
        sys.exit(1)
    except Exception as e:
        logger.exception("Unexpected error")
        console.print(f"[red]Unexpected error: {str(e)}[/red]")
        if '--debug' in sys.argv:
            import traceback
            console.print(f"[dim]{traceback.format_exc()}[/dim]")
        sys.exit(1)


if __name__ == "__main__":
    main()
