"""Helpers for the BeautifulSoup content trees passed between stages.

Every stage after expansion works on a detached ``<div>`` wrapper. Stages
copy the tree they are given and return the copy, so a caller never sees a
tree it handed over change underneath it.
"""

from __future__ import annotations

import copy
import typing as typ

from bs4 import BeautifulSoup, Tag

if typ.TYPE_CHECKING:
    import collections.abc as cabc

_PARSER = "html.parser"


def parse_fragment(markup: str, *, tag_name: str = "div") -> Tag:
    """Parse ``markup`` into a detached wrapper element named ``tag_name``."""
    fragment = BeautifulSoup(markup, _PARSER)
    wrapper = new_element(tag_name)
    for child in list(fragment.contents):
        wrapper.append(child.extract())
    return wrapper


def new_element(name: str, attrs: dict[str, str] | None = None) -> Tag:
    """Create a detached element named ``name`` carrying ``attrs``."""
    return BeautifulSoup("", _PARSER).new_tag(name, attrs=attrs or {})


def clone(root: Tag) -> Tag:
    """Return a deep, detached copy of ``root``."""
    return copy.copy(root)


def inner_markup(root: Tag) -> str:
    """Serialise the children of ``root`` without the wrapper itself."""
    return root.decode_contents()


def iter_elements(root: Tag) -> cabc.Iterator[Tag]:
    """Yield ``root`` and then every descendant element in document order."""
    yield root
    yield from root.find_all(True)


def text_of(root: Tag) -> str:
    """Return the visible text of ``root`` with whitespace runs collapsed."""
    return " ".join(root.get_text(" ").split())


__all__ = [
    "clone",
    "inner_markup",
    "iter_elements",
    "new_element",
    "parse_fragment",
    "text_of",
]
