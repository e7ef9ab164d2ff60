"""Load and validate story configuration YAML for hypertale sessions.

This subpackage parses a story's ``story.yaml`` file, resolves the compiled
story path relative to the file, checks field types, and produces a
:class:`StoryConfig` that :func:`hypertale.story.open_story` turns into a
live navigation controller. The primary entry point is
:func:`load_story_config`.

Examples
--------
>>> from pathlib import Path
>>> from hypertale.config import load_story_config
>>> config = load_story_config(Path("story.yaml"))  # doctest: +SKIP
>>> config.start_section  # doctest: +SKIP
'Start'
"""

from .loader import load_story_config
from .models import StoryConfig, StoryConfigError

__all__ = ["StoryConfig", "StoryConfigError", "load_story_config"]
