"""Command-line interface for canvasreg."""

import logging
from pathlib import Path

import click
import yaml

from . import __version__
from .canvases import PLATFORMS, THEMES, build_registry
from .config import (
    CONFIG_FILENAME,
    LOG_LEVELS,
    CanvasregConfig,
    config_to_dict,
    create_default_config,
    find_config_file,
    load_config,
)
from .errors import CanvasregError
from .page import render_page

_KNOWN_THEMES = ", ".join(THEMES)

_config_option = click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True),
    help="Config file path",
)


@click.group()
@click.version_option(version=__version__, prog_name="canvasreg")
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    help="Logging level (overrides config log_level)",
)
@click.pass_context
def main(ctx, log_level):
    """Resolve and render canvas plugins by theme and file type.

    \b
    Quick start:
      canvasreg config init               # Create .canvasreg.yaml
      canvasreg list                      # Show registered canvases
      canvasreg resolve knowledge md      # Which canvas handles markdown?
      canvasreg render notes.md           # Render a file to notes.html
    """
    ctx.ensure_object(dict)
    ctx.obj["log_level"] = log_level


def _load(ctx, config_path: str | None, theme: str | None = None) -> CanvasregConfig:
    """Load config and configure logging for the command."""
    try:
        cfg = load_config(
            config_path=Path(config_path) if config_path else None,
            theme_override=theme,
        )
    except CanvasregError as e:
        raise click.ClickException(str(e))

    override = (ctx.obj or {}).get("log_level")
    if override:
        cfg.log_level = override.upper()
    logging.basicConfig(
        level=cfg.logging_level,
        format="%(levelname)s %(name)s: %(message)s",
    )
    return cfg


@main.command("list")
@click.option(
    "-t", "--theme", help=f"Only canvases supporting this theme ({_KNOWN_THEMES})"
)
@click.option("-f", "--file-type", help="Only canvases supporting this file type")
@_config_option
@click.pass_context
def list_canvases(ctx, theme, file_type, config_path):
    """List registered canvases and their capabilities."""
    cfg = _load(ctx, config_path)
    registry = build_registry(cfg)

    descriptors = registry.find_by_theme(theme) if theme else registry.get_all()
    if file_type:
        by_file_type = registry.find_by_file_type(file_type)
        descriptors = [d for d in descriptors if d in by_file_type]

    if not descriptors:
        click.echo("No canvases found")
        return

    for d in descriptors:
        marker = " (default)" if d.type == registry.default_type else ""
        click.echo(f"{d.type}{marker}: {d.name}")
        click.echo(f"  themes:     {', '.join(sorted(d.supported_themes)) or '-'}")
        click.echo(
            f"  file types: {', '.join(sorted(d.supported_file_types)) or '-'}"
        )


@main.command(
    epilog=f"Known themes: {_KNOWN_THEMES}. Other theme names are accepted."
)
@click.argument("theme")
@click.argument("file_type", required=False)
@_config_option
@click.pass_context
def resolve(ctx, theme, file_type, config_path):
    """Show which canvas handles THEME and optional FILE_TYPE.

    \b
    Examples:
      canvasreg resolve knowledge md
      canvasreg resolve poster
    """
    cfg = _load(ctx, config_path)
    registry = build_registry(cfg)

    descriptor = registry.find_best_match(theme, file_type)
    if descriptor is None:
        click.echo("No canvas available", err=True)
        raise SystemExit(1)

    click.echo(f"{descriptor.type}: {descriptor.name}")


@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("-t", "--theme", help="Presentation theme (default: config theme)")
@click.option(
    "-p",
    "--platform",
    type=click.Choice(PLATFORMS),
    help="Document platform style (default: config platform)",
)
@click.option(
    "-o",
    "--output",
    "output_path",
    type=click.Path(dir_okay=False),
    help="Output HTML file (default: <file>.html)",
)
@_config_option
@click.pass_context
def render(ctx, path, theme, platform, output_path, config_path):
    """Render a file into a self-contained HTML page.

    The canvas is picked by the file's extension and the theme.

    \b
    Examples:
      canvasreg render notes.md
      canvasreg render notes.md -t social-media -p wechat -o out.html
    """
    cfg = _load(ctx, config_path, theme=theme)
    registry = build_registry(cfg)

    try:
        result = render_page(
            Path(path),
            registry,
            config=cfg,
            output_path=Path(output_path) if output_path else None,
            platform=platform,
        )
    except CanvasregError as e:
        raise click.ClickException(str(e))

    click.echo(f"Rendered: {path} -> {result}")


@main.group()
def config():
    """Manage canvasreg configuration."""
    pass


@config.command("init")
@click.option(
    "-d",
    "--directory",
    type=click.Path(),
    default=".",
    help="Directory to create config in",
)
def config_init(directory):
    """Create a new .canvasreg.yaml configuration file."""
    try:
        config_path = create_default_config(Path(directory))
    except CanvasregError as e:
        raise click.ClickException(str(e))
    click.echo(f"Created: {config_path}")


@config.command("show")
@_config_option
@click.pass_context
def config_show(ctx, config_path):
    """Display current configuration.

    Shows merged configuration from file, environment, and defaults.
    """
    cfg = _load(ctx, config_path)
    click.echo(yaml.dump(config_to_dict(cfg), default_flow_style=False, sort_keys=False))


@config.command("where")
@click.option(
    "-d",
    "--directory",
    type=click.Path(exists=True),
    help="Directory to search from",
)
def config_where(directory):
    """Show which config file would be used.

    Searches up the directory tree for .canvasreg.yaml.
    """
    start = Path(directory) if directory else Path.cwd()
    config_path = find_config_file(start)

    if config_path:
        click.echo(f"Config file: {config_path}")
    else:
        click.echo(f"No {CONFIG_FILENAME} found (searched from {start})")
