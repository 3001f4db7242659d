"""Command group: build, filter, lay out, and view the relationship graph."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click

from storyweb.commands._base import StoryGroup
from storyweb.config.logging import input_context
from storyweb.services.graph import GraphService, build_filters

if TYPE_CHECKING:
    from storyweb.commands._context import AppContext
    from storyweb.domain.filters import Filters

_GRAPH_EXAMPLES = """\
  storyweb graph build story.json
  storyweb graph visible story.json --scene-to-scene
  storyweb graph layout story.json --ticks 100
  storyweb graph render story.json -o graph.png
  storyweb graph view story.json --no-shared-tags"""

_FILTER_FLAGS: tuple[tuple[str, str, str], ...] = (
    ("--notes/--no-notes", "show_notes", "Show note nodes."),
    ("--scenes/--no-scenes", "show_scenes", "Show scene nodes."),
    (
        "--scene-to-scene/--no-scene-to-scene",
        "show_scene_to_scene",
        "Show scenes linked only to other scenes.",
    ),
    ("--wikilinks/--no-wikilinks", "show_wikilinks", "Show wikilink edges."),
    ("--scene-links/--no-scene-links", "show_scene_links", "Show note-to-scene edges."),
    ("--shared-tags/--no-shared-tags", "show_shared_tags", "Show shared-tag edges."),
)

_input_argument = click.argument(
    "input_path",
    metavar="INPUT",
    type=click.Path(dir_okay=False, path_type=Path),
)


def filter_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Add the filter toggles (unset flags keep the configured value)."""
    for flag, dest, help_text in reversed(_FILTER_FLAGS):
        func = click.option(flag, dest, default=None, help=help_text)(func)
    return click.option(
        "--hide-character",
        "hide_characters",
        multiple=True,
        metavar="CHARACTER_ID",
        help="Hide scenes of a character (repeatable).",
    )(func)


def _filters(app: AppContext, options: dict[str, Any]) -> Filters:
    return build_filters(app.settings.filters, **options)


@click.group(cls=StoryGroup, examples=_GRAPH_EXAMPLES)
@click.pass_obj
def graph(app: AppContext) -> None:
    """Build, filter, lay out, and view the relationship graph."""


@graph.command(
    examples="""\
  storyweb graph build story.json
  storyweb --json graph build story.json
  storyweb -q graph build story.json"""
)
@_input_argument
@click.pass_obj
def build(app: AppContext, input_path: Path) -> None:
    """Build the graph and summarise its nodes and links."""
    with input_context(input_path, "build"):
        app.emit(GraphService(app.settings).build(input_path))


@graph.command(
    examples="""\
  storyweb graph visible story.json
  storyweb graph visible story.json --no-notes --scene-to-scene
  storyweb graph visible story.json --hide-character c1 --hide-character c2"""
)
@_input_argument
@filter_options
@click.pass_obj
def visible(app: AppContext, input_path: Path, **options: Any) -> None:
    """List the nodes and links shown under the given filters."""
    filters = _filters(app, options)
    with input_context(input_path, "visible"):
        app.emit(GraphService(app.settings).visible(input_path, filters=filters))


@graph.command(
    examples="""\
  storyweb graph layout story.json
  storyweb graph layout story.json --ticks 50
  storyweb --json graph layout story.json"""
)
@_input_argument
@click.option("--ticks", type=click.IntRange(min=0), default=None, help="Stop after N ticks.")
@filter_options
@click.pass_obj
def layout(app: AppContext, input_path: Path, ticks: int | None, **options: Any) -> None:
    """Run the force layout headless and print node positions."""
    filters = _filters(app, options)
    with input_context(input_path, "layout"):
        app.emit(GraphService(app.settings).layout(input_path, ticks=ticks, filters=filters))


@graph.command(
    examples="""\
  storyweb graph render story.json
  storyweb graph render story.json -o out/graph.png --width 1600 --height 1000
  storyweb graph render story.json --select n1 --no-shared-tags"""
)
@_input_argument
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=Path("graph.png"),
    show_default=True,
    help="PNG file to write.",
)
@click.option("--width", type=click.IntRange(min=1), default=None, help="Image width.")
@click.option("--height", type=click.IntRange(min=1), default=None, help="Image height.")
@click.option("--ticks", type=click.IntRange(min=0), default=None, help="Stop after N ticks.")
@click.option("--select", "selected", default=None, metavar="NOTE_ID", help="Highlight a note.")
@filter_options
@click.pass_obj
def render(
    app: AppContext,
    input_path: Path,
    output: Path,
    width: int | None,
    height: int | None,
    ticks: int | None,
    selected: str | None,
    **options: Any,
) -> None:
    """Lay out the graph and save a PNG snapshot."""
    viewer = app.settings.viewer
    service = GraphService(app.settings)
    with input_context(input_path, "render"):
        app.emit(
            service.render(
                input_path,
                output,
                width=width or viewer.width,
                height=height or viewer.height,
                ticks=ticks,
                filters=_filters(app, options),
                selected=selected,
            )
        )


@graph.command(
    examples="""\
  storyweb graph view story.json
  storyweb graph view story.json --no-scenes

  Keys: + - 0 zoom in/out/fit; n s x w l t toggle filters;
  1-8 toggle characters; h toggles the legend; Esc quits."""
)
@_input_argument
@filter_options
@click.pass_obj
def view(app: AppContext, input_path: Path, **options: Any) -> None:
    """Open the interactive graph window."""
    filters = _filters(app, options)
    with input_context(input_path, "view"):
        app.emit(GraphService(app.settings).view(input_path, filters=filters))
