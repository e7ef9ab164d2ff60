r"""Read-only section stores that the expander pulls raw markup from.

A compiled story is an HTML document whose sections are inert elements
carrying the ``section`` class and a unique ``id``. This module lifts those
elements into a :class:`MappingSectionStore` keyed by id, holding each
section's inner HTML verbatim so macros survive untouched until expansion.

Example
-------
>>> from hypertale.sections import parse_story_html
>>> store = parse_story_html('<div class="section" id="Start">Hi {$name}</div>')
>>> store.get("Start")
'Hi {$name}'
>>> store.get("Missing") is None
True
"""

from __future__ import annotations

import collections.abc as cabc
import typing as typ
from pathlib import Path

from bs4 import BeautifulSoup

from ._constants import SECTION_CLASS


class SectionStore(typ.Protocol):
    """Addressable set of inert content blocks (section id to raw markup)."""

    def get(self, section_id: str) -> str | None:
        """Return the raw markup for ``section_id`` or ``None`` when absent."""
        ...

    def ids(self) -> list[str]:
        """Return every section id in document order."""
        ...


class MappingSectionStore:
    """Section store backed by an ordered mapping of id to markup."""

    def __init__(self, sections: cabc.Mapping[str, str] | None = None) -> None:
        self._sections: dict[str, str] = dict(sections or {})

    def get(self, section_id: str) -> str | None:
        return self._sections.get(section_id)

    def ids(self) -> list[str]:
        return list(self._sections)

    def merged(self, overrides: cabc.Mapping[str, str]) -> MappingSectionStore:
        """Return a new store where ``overrides`` replace or extend sections."""
        combined = dict(self._sections)
        combined.update(overrides)
        return MappingSectionStore(combined)

    def __contains__(self, section_id: object) -> bool:
        return section_id in self._sections

    def __len__(self) -> int:
        return len(self._sections)


def parse_story_html(html: str) -> MappingSectionStore:
    """Collect every ``.section`` element with an id from compiled story HTML.

    Parameters
    ----------
    html : str
        Full story document or fragment.

    Returns
    -------
    MappingSectionStore
        Store holding each section's inner HTML. When ids repeat, the first
        occurrence wins, matching how a browser resolves ``getElementById``.
    """
    soup = BeautifulSoup(html, "html.parser")
    sections: dict[str, str] = {}
    for element in soup.find_all(class_=SECTION_CLASS):
        section_id = element.get("id")
        if not section_id or section_id in sections:
            continue
        sections[section_id] = element.decode_contents()
    return MappingSectionStore(sections)


def load_story_html(path: Path) -> MappingSectionStore:
    """Load a compiled story file from disk into a section store."""
    if not path.exists():
        msg = f"Story file '{path}' not found."
        raise FileNotFoundError(msg)
    return parse_story_html(path.read_text(encoding="utf-8"))


__all__ = [
    "MappingSectionStore",
    "SectionStore",
    "load_story_html",
    "parse_story_html",
]
