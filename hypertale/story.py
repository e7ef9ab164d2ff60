"""Assemble a reading session from a :class:`~hypertale.config.StoryConfig`.

Typical usage pairs the loader with a controller:

>>> from pathlib import Path
>>> from hypertale.config import load_story_config
>>> from hypertale.story import open_story
>>> controller = open_story(load_story_config(Path("story.yaml")))  # doctest: +SKIP
>>> controller.start()  # doctest: +SKIP
"""

from __future__ import annotations

import typing as typ

from .config import StoryConfig, StoryConfigError
from .context import CallableRegistry, ExpansionContext, load_plugins
from .errors import MacroSyntaxError
from .macros import MacroExpander
from .navigation import NavigationController
from .sections import MappingSectionStore, load_story_html
from .surface import SoupDisplaySurface

if typ.TYPE_CHECKING:
    from .errors import ExpansionError
    from .surface import DisplaySurface


def build_section_store(config: StoryConfig) -> MappingSectionStore:
    """Load the compiled story file, then overlay inline ``sections``."""
    store = (
        load_story_html(config.story_path)
        if config.story_path is not None
        else MappingSectionStore()
    )
    if config.sections:
        store = store.merged(config.sections)
    if not len(store):
        msg = "The story contains no sections."
        raise StoryConfigError(msg)
    return store


def build_context(config: StoryConfig) -> ExpansionContext:
    """Build the expansion context, importing configured plugin modules.

    Raises
    ------
    StoryConfigError
        If a plugin module cannot be imported or has no ``register`` hook.
    """
    registry = CallableRegistry()
    try:
        load_plugins(registry, config.plugins)
    except (ImportError, AttributeError) as exc:
        msg = f"Could not load story plugins: {exc}"
        raise StoryConfigError(msg) from exc
    return ExpansionContext(
        sections=build_section_store(config),
        callables=registry,
        variables=dict(config.variables),
        max_include_depth=config.max_include_depth,
    )


def build_surface(config: StoryConfig) -> SoupDisplaySurface:
    """Render the page shell with the story's header fields and history setting."""
    return SoupDisplaySurface(
        title=config.title,
        author=config.author,
        description=config.description,
        website=config.website,
        history_visible=config.history_visible,
    )


def open_story(
    config: StoryConfig, *, surface: DisplaySurface | None = None
) -> NavigationController:
    """Return a navigation controller for ``config`` that has not started yet."""
    context = build_context(config)
    return NavigationController(
        context, surface or build_surface(config), start_section=config.start_section
    )


def audit_story(context: ExpansionContext) -> dict[str, list[ExpansionError]]:
    """Expand every section and collect the problems found, keyed by section id.

    Syntax errors are reported once per section that contains or includes
    them; resolution errors are reported as recorded diagnostics. Sections
    that expand cleanly are omitted from the result.
    """
    expander = MacroExpander(context)
    problems: dict[str, list[ExpansionError]] = {}
    for section_id in context.sections.ids():
        try:
            expanded = expander.expand_section(section_id)
        except MacroSyntaxError as exc:
            problems[section_id] = [exc]
            continue
        if expanded.diagnostics:
            problems[section_id] = list(expanded.diagnostics)
    return problems


__all__ = [
    "audit_story",
    "build_context",
    "build_section_store",
    "build_surface",
    "open_story",
]
