"""Toggle inline-macro ids between their dormant and active forms.

Inline macros are link-triggered regions whose element ids follow the
``inline-<n>`` convention. Every copy starts dormant (``_inline-<n>``) so the
hidden story text, the history, and the live section never share an active
id; only content mounted as the current section is switched on.
"""

from __future__ import annotations

import re
import typing as typ

from ._constants import DORMANT_PREFIX, INLINE_ID_MARKER
from .tree import clone, iter_elements

if typ.TYPE_CHECKING:
    from bs4 import Tag

INLINE_ID_PATTERN = re.compile(
    rf"^(?P<dormant>{re.escape(DORMANT_PREFIX)})?"
    rf"(?P<base>{re.escape(INLINE_ID_MARKER)}.*)$"
)


def is_inline_id(element_id: str | None) -> bool:
    """Return ``True`` when ``element_id`` names an inline macro in either form."""
    return bool(element_id) and INLINE_ID_PATTERN.match(element_id) is not None


def toggle_inline_id(element_id: str, *, active: bool) -> str:
    """Return ``element_id`` in its active or dormant form.

    >>> toggle_inline_id("_inline-2", active=True)
    'inline-2'
    >>> toggle_inline_id("inline-2", active=True)
    'inline-2'
    >>> toggle_inline_id("inline-2", active=False)
    '_inline-2'
    """
    match = INLINE_ID_PATTERN.match(element_id)
    if match is None:
        return element_id
    base = match.group("base")
    return base if active else f"{DORMANT_PREFIX}{base}"


def set_inline_macros_active(root: Tag, active: bool = True) -> Tag:
    """Return a copy of ``root`` with every inline-macro id switched on or off.

    Parameters
    ----------
    root : Tag
        Subtree to scan; ``root`` itself is included and every descendant is
        visited regardless of whether its parent matched.
    active : bool, optional
        ``True`` (default) strips the dormant prefix, ``False`` adds it.

    Returns
    -------
    Tag
        The converted copy. Applying the same ``active`` value again yields an
        identical tree.
    """
    converted = clone(root)
    for element in iter_elements(converted):
        element_id = element.get("id")
        if isinstance(element_id, str) and is_inline_id(element_id):
            element["id"] = toggle_inline_id(element_id, active=active)
    return converted


__all__ = [
    "INLINE_ID_PATTERN",
    "is_inline_id",
    "set_inline_macros_active",
    "toggle_inline_id",
]
