"""
Configuration Settings Commands

Display of the active speakeval configuration.
"""

import json
import yaml

import click
from rich.table import Table

from ...cli.formatting import console, display_error


@click.command()
@click.option('--format', type=click.Choice(['table', 'json', 'yaml']), default='table', help='Output format')
@click.pass_context
def show(ctx, format):
    """Show current configuration.

    \b
    📋 EXAMPLES:

    speakeval config show
    speakeval config show --format json
    speakeval config show --format yaml

    \b
    💡 The API key is never printed; a configured key is shown as ***.
    """
    config = ctx.obj.get('config')
    if not config:
        display_error("Configuration not available")
        raise SystemExit(1)

    config_dict = config.to_dict(redact_secrets=True)

    if format == 'json':
        console.print_json(json.dumps(config_dict))
        return

    if format == 'yaml':
        console.print(yaml.dump(config_dict, default_flow_style=False, indent=2, sort_keys=False))
        return

    table = Table(title="Configuration")
    table.add_column("Section", style="cyan")
    table.add_column("Setting", style="magenta")
    table.add_column("Value", style="green")

    for section, setting, value in _flatten(config_dict):
        table.add_row(section, setting, str(value))

    console.print(table)


def _flatten(config_dict, section="app"):
    """Yield (section, setting, value) rows, descending into nested sections."""
    for key, value in config_dict.items():
        if isinstance(value, dict) and not _is_leaf_mapping(value):
            yield from _flatten(value, key if section == "app" else f"{section}.{key}")
        else:
            yield section, key, value


def _is_leaf_mapping(value):
    # difficulty multiplier tables read better on one row
    return all(isinstance(v, (int, float)) for v in value.values())
