"""Typed dataclasses describing a story configuration."""

from __future__ import annotations

import dataclasses as dc
from pathlib import Path  # noqa: TC003 - used for runtime type metadata

from hypertale._constants import DEFAULT_MAX_INCLUDE_DEPTH, DEFAULT_START_SECTION


class StoryConfigError(ValueError):
    """Raised when the story configuration is invalid or incomplete."""


@dc.dataclass(slots=True)
class StoryConfig:
    """Everything needed to open a reading session on a story.

    Attributes
    ----------
    title : str
        Story title shown in the surface header.
    author : str
        Author byline; may be empty.
    description : str
        Long-form description for front ends that list stories.
    website : str or None
        Optional web address shown to readers.
    story_path : Path or None
        Compiled story HTML holding ``.section`` elements, resolved relative
        to the configuration file.
    sections : dict[str, str]
        Inline sections merged over (and overriding) those in ``story_path``.
    start_section : str
        Section a new session opens on.
    variables : dict[str, object]
        Initial values for ``{$name}`` macros.
    plugins : list[str]
        Importable modules exposing ``register(registry)``.
    history_visible : bool
        Whether the history region starts visible.
    max_include_depth : int
        Bound on nested ``{@name}`` inclusion.
    """

    title: str = ""
    author: str = ""
    description: str = ""
    website: str | None = None
    story_path: Path | None = None
    sections: dict[str, str] = dc.field(default_factory=dict)
    start_section: str = DEFAULT_START_SECTION
    variables: dict[str, object] = dc.field(default_factory=dict)
    plugins: list[str] = dc.field(default_factory=list)
    history_visible: bool = True
    max_include_depth: int = DEFAULT_MAX_INCLUDE_DEPTH


__all__ = ["StoryConfig", "StoryConfigError"]
