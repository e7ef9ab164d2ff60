"""Wire links in expanded content to their behaviour directives.

A link is an ``<a>`` element carrying any subset of three attributes:

``data-goto-section``
    Navigate to the named section.
``data-call-function``
    Invoke the named callable.
``data-replace-with``
    Replace the link in place with the expansion of the given macro payload.

Activation stamps each directive-bearing link with a session-unique
``data-link-id`` handle and returns the bindings the navigation controller
dispatches clicks through. Disabling turns links into inert spans before
content is retired to history.
"""

from __future__ import annotations

import dataclasses as dc
import enum
import itertools
import typing as typ

from ._constants import (
    CALL_FUNCTION_ATTR,
    DISABLED_LINK_CLASS,
    GOTO_SECTION_ATTR,
    LINK_HANDLE_ATTR,
    LINK_HANDLE_TEMPLATE,
    REPLACE_WITH_ATTR,
)
from .tree import clone, iter_elements, new_element, text_of

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from bs4 import Tag

LINK_TAG = "a"


class DirectiveKind(enum.Enum):
    """Recognised link directives keyed by attribute name, in dispatch order."""

    GOTO_SECTION = GOTO_SECTION_ATTR
    CALL_FUNCTION = CALL_FUNCTION_ATTR
    REPLACE_WITH = REPLACE_WITH_ATTR


@dc.dataclass(frozen=True, slots=True)
class LinkDirective:
    """One behaviour attached to a link."""

    kind: DirectiveKind
    value: str


@dc.dataclass(frozen=True, slots=True)
class LinkBinding:
    """A live link and the directives fired when it is clicked.

    Attributes
    ----------
    handle : str
        Value of the link's ``data-link-id`` attribute.
    directives : tuple[LinkDirective, ...]
        Directives in dispatch order.
    text : str
        Visible link text, used by text front ends.
    """

    handle: str
    directives: tuple[LinkDirective, ...]
    text: str


@dc.dataclass(slots=True)
class ActivatedContent:
    """A content tree whose links carry handles, plus the matching bindings."""

    tree: Tag
    bindings: list[LinkBinding]


def handle_sequence(start: int = 1) -> cabc.Iterator[str]:
    """Yield ``link-1``, ``link-2``, ... forever.

    >>> handles = handle_sequence()
    >>> next(handles), next(handles)
    ('link-1', 'link-2')
    """
    for index in itertools.count(start):
        yield LINK_HANDLE_TEMPLATE.format(index=index)


def read_directives(element: Tag) -> tuple[LinkDirective, ...]:
    """Return the directives declared on ``element`` in dispatch order."""
    directives: list[LinkDirective] = []
    for kind in DirectiveKind:
        value = element.get(kind.value)
        if isinstance(value, str):
            directives.append(LinkDirective(kind=kind, value=value))
    return tuple(directives)


def activate_links(root: Tag, handles: cabc.Iterator[str]) -> ActivatedContent:
    """Return a copy of ``root`` with every directive-bearing link bound.

    Parameters
    ----------
    root : Tag
        Expanded content tree; the whole subtree is walked.
    handles : Iterator[str]
        Source of unique handles, normally the session's
        :func:`handle_sequence`.

    Returns
    -------
    ActivatedContent
        The stamped copy and one :class:`LinkBinding` per bound link, in
        document order. Links without a recognised directive stay unbound.
    """
    activated = clone(root)
    bindings: list[LinkBinding] = []
    for element in iter_elements(activated):
        if element.name != LINK_TAG:
            continue
        directives = read_directives(element)
        if not directives:
            continue
        handle = next(handles)
        element[LINK_HANDLE_ATTR] = handle
        bindings.append(
            LinkBinding(handle=handle, directives=directives, text=text_of(element))
        )
    return ActivatedContent(tree=activated, bindings=bindings)


def disable_links(root: Tag) -> Tag:
    """Return a copy of ``root`` where every link is an inert span.

    The span keeps the link's children so the visible text survives, while
    directives and handles are dropped.
    """
    disabled = clone(root)
    for link in disabled.find_all(LINK_TAG):
        span = new_element("span", {"class": DISABLED_LINK_CLASS})
        for child in list(link.contents):
            span.append(child.extract())
        link.replace_with(span)
    return disabled


__all__ = [
    "ActivatedContent",
    "DirectiveKind",
    "LinkBinding",
    "LinkDirective",
    "activate_links",
    "disable_links",
    "handle_sequence",
    "read_directives",
]
