"""Load story configuration YAML into typed dataclasses."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from ruamel.yaml import YAML

from hypertale._constants import DEFAULT_MAX_INCLUDE_DEPTH, DEFAULT_START_SECTION

from .models import StoryConfig, StoryConfigError


def load_story_config(path: Path) -> StoryConfig:
    """Load the YAML configuration describing a story and its session defaults.

    Parameters
    ----------
    path : Path
        Filesystem path to the YAML story configuration (for example,
        ``story.yaml``).

    Returns
    -------
    StoryConfig
        Parsed configuration with ``story_path`` resolved relative to the
        directory containing ``path``.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist at ``path``.
    TypeError
        If the top-level YAML structure is not a mapping.
    StoryConfigError
        If fields have the wrong type or the story defines no sections at all.
    YAMLError
        If the YAML content cannot be parsed by the underlying loader.

    Examples
    --------
    >>> from pathlib import Path
    >>> config = load_story_config(Path("story.yaml"))  # doctest: +SKIP
    >>> config.title  # doctest: +SKIP
    'The Cave'
    """
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure must be a mapping."
        raise TypeError(msg)
    raw: dict[str, typ.Any] = dict(loaded)

    story_path = _resolve_story_path(raw.get("story"), base_dir=path.parent)
    sections = _string_mapping(raw.get("sections"), field="sections")
    if story_path is None and not sections:
        msg = "Story configuration defines neither 'story' nor 'sections'."
        raise StoryConfigError(msg)

    return StoryConfig(
        title=_text(raw.get("title"), field="title"),
        author=_text(raw.get("author"), field="author"),
        description=_text(raw.get("description"), field="description"),
        website=_text(raw.get("website"), field="website") or None,
        story_path=story_path,
        sections=sections,
        start_section=_text(raw.get("start_section"), field="start_section")
        or DEFAULT_START_SECTION,
        variables=_variables(raw.get("variables")),
        plugins=_plugins(raw.get("plugins")),
        history_visible=_flag(
            raw.get("history_visible", True), field="history_visible"
        ),
        max_include_depth=_positive_int(
            raw.get("max_include_depth", DEFAULT_MAX_INCLUDE_DEPTH),
            field="max_include_depth",
        ),
    )


def _resolve_story_path(value: object, *, base_dir: Path) -> Path | None:
    """Return the story HTML path relative to the config directory, if set."""
    match value:
        case None | "":
            return None
        case str() as text:
            candidate = Path(text).expanduser()
            return candidate if candidate.is_absolute() else base_dir / candidate
        case _:
            msg = "'story' must be a path string."
            raise StoryConfigError(msg)


def _text(value: object, *, field: str) -> str:
    if value is None:
        return ""
    if isinstance(value, bool) or not isinstance(value, str | int | float):
        msg = f"'{field}' must be a string."
        raise StoryConfigError(msg)
    return str(value).strip()


def _string_mapping(value: object, *, field: str) -> dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        msg = f"'{field}' must be a mapping."
        raise StoryConfigError(msg)
    result: dict[str, str] = {}
    for key, payload in value.items():
        if not isinstance(payload, str):
            msg = f"'{field}.{key}' must be a string of markup."
            raise StoryConfigError(msg)
        result[str(key)] = payload
    return result


def _variables(value: object) -> dict[str, object]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        msg = "'variables' must be a mapping."
        raise StoryConfigError(msg)
    return {str(key): payload for key, payload in value.items()}


def _plugins(value: object) -> list[str]:
    match value:
        case None:
            return []
        case str() as module:
            return [module]
        case list() as modules if all(isinstance(item, str) for item in modules):
            return list(modules)
        case _:
            msg = "'plugins' must be a module name or a list of module names."
            raise StoryConfigError(msg)


def _flag(value: object, *, field: str) -> bool:
    if not isinstance(value, bool):
        msg = f"'{field}' must be true or false."
        raise StoryConfigError(msg)
    return value


def _positive_int(value: object, *, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        msg = f"'{field}' must be a positive integer."
        raise StoryConfigError(msg)
    return value


__all__ = ["load_story_config"]
