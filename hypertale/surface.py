"""Display surface holding the mounted current section and the history log.

The surface is the page shell a reading session swaps content into. It is
rendered once from ``templates/surface.jinja`` and then kept as a
BeautifulSoup document with two regions: ``#__currentSection`` (replaced
wholesale on every navigation) and ``#__history`` (append-only). Scroll
positions are tracked as plain counters so text front ends and tests can
observe them.

Example
-------
>>> from hypertale.surface import SoupDisplaySurface
>>> from hypertale.tree import parse_fragment
>>> surface = SoupDisplaySurface(title="The Cave")
>>> _ = surface.replace_current(parse_fragment("<p>Dark.</p>"))
>>> surface.current_markup()
'<p>Dark.</p>'
"""

from __future__ import annotations

import typing as typ
from pathlib import Path

from bs4 import BeautifulSoup
from jinja2 import Environment, FileSystemLoader, select_autoescape

from ._constants import CURRENT_SECTION_ID, FAILURE_ID, HISTORY_ID
from .tree import clone, inner_markup, parse_fragment

if typ.TYPE_CHECKING:
    from bs4 import Tag


class DisplaySurface(typ.Protocol):
    """Container with a replaceable current-section region and a history region."""

    def current(self) -> Tag: ...

    def replace_current(self, tree: Tag) -> Tag: ...

    def replace_element(self, target: Tag, replacement: Tag) -> Tag: ...

    def find_in_current(self, attrs: dict[str, str]) -> Tag | None: ...

    def append_history(self, markup: str) -> None: ...

    def scroll_current_to_start(self) -> None: ...

    def scroll_history_to_end(self) -> None: ...

    def history_visible(self) -> bool: ...

    def set_history_visible(self, visible: bool) -> None: ...

    def show_failure(self, message: str) -> None: ...

    def clear_failure(self) -> None: ...


class SoupDisplaySurface:
    """Render the page shell from a Jinja template and mutate it in place."""

    def __init__(
        self,
        *,
        title: str = "",
        author: str = "",
        description: str = "",
        website: str | None = None,
        history_visible: bool = True,
        templates_dir: Path | None = None,
    ) -> None:
        """Render the shell template and parse it into a mutable document.

        Parameters
        ----------
        title : str, optional
            Story title shown in the page header.
        author : str, optional
            Author byline; omitted when empty.
        description : str, optional
            Blurb shown under the title; omitted when empty.
        website : str or None, optional
            Address linked from the header; omitted when ``None``.
        history_visible : bool, optional
            Initial visibility of the history region.
        templates_dir : Path, optional
            Directory containing ``surface.jinja``. Defaults to the package
            templates.
        """
        self.templates_dir = templates_dir or Path(__file__).parent / "templates"
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=select_autoescape(["html", "xml", "jinja"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.template = self.env.get_template("surface.jinja")
        html = self.template.render(
            title=title,
            author=author,
            description=description,
            website=website,
            history_visible=history_visible,
        )
        self.document = BeautifulSoup(html, "html.parser")
        self.mount_generation = 0
        self.current_scroll = 0
        self.history_scroll = 0

    def current(self) -> Tag:
        return self._region(CURRENT_SECTION_ID)

    def history(self) -> Tag:
        return self._region(HISTORY_ID)

    def current_markup(self) -> str:
        return inner_markup(self.current())

    def history_markup(self) -> str:
        return inner_markup(self.history())

    def replace_current(self, tree: Tag) -> Tag:
        """Swap the whole current-section node for a new one built from ``tree``.

        The old node is discarded rather than having its contents overwritten,
        so anything keyed to node identity starts afresh.
        """
        mounted = clone(tree)
        mounted.name = "div"
        mounted.attrs = {"id": CURRENT_SECTION_ID}
        self.current().replace_with(mounted)
        self.mount_generation += 1
        return mounted

    def replace_element(self, target: Tag, replacement: Tag) -> Tag:
        """Replace ``target`` (which must be inside the current region)."""
        region = self.current()
        if not any(parent is region for parent in target.parents):
            msg = "Only elements inside the current section can be replaced."
            raise ValueError(msg)
        target.replace_with(replacement)
        return replacement

    def find_in_current(self, attrs: dict[str, str]) -> Tag | None:
        """Return the first element in the current region carrying ``attrs``."""
        return self.current().find(attrs=attrs)

    def append_history(self, markup: str) -> None:
        region = self.history()
        for child in list(parse_fragment(markup).contents):
            region.append(child.extract())

    def scroll_current_to_start(self) -> None:
        self.current_scroll = 0

    def scroll_history_to_end(self) -> None:
        self.history_scroll = len(self.history_markup())

    def history_visible(self) -> bool:
        return not self.history().has_attr("hidden")

    def set_history_visible(self, visible: bool) -> None:
        _set_hidden(self.history(), hidden=not visible)

    def failure(self) -> str | None:
        region = self._region(FAILURE_ID)
        if region.has_attr("hidden"):
            return None
        return region.get_text()

    def show_failure(self, message: str) -> None:
        region = self._region(FAILURE_ID)
        region.string = message
        _set_hidden(region, hidden=False)

    def clear_failure(self) -> None:
        region = self._region(FAILURE_ID)
        region.clear()
        _set_hidden(region, hidden=True)

    def render(self) -> str:
        """Return the whole page as HTML."""
        return str(self.document)

    def _region(self, region_id: str) -> Tag:
        region = self.document.find(id=region_id)
        if region is None:  # pragma: no cover - template guard
            msg = f"Surface template has no #{region_id} region."
            raise LookupError(msg)
        return region


def _set_hidden(element: Tag, *, hidden: bool) -> None:
    if hidden:
        element["hidden"] = ""
    elif element.has_attr("hidden"):
        del element["hidden"]


__all__ = ["DisplaySurface", "SoupDisplaySurface"]
