"""Navigation state machine for a reading session.

:class:`NavigationController` moves a story forward one section at a time.
Each navigation expands the requested section, prepares it (inline macros
switched on, links bound), retires the current section into the history log
with its links disabled, and mounts the new section as current. Retired
content never becomes live again; there is no "back" transition.

A failed expansion leaves the session exactly as it was: the target is
expanded before anything is retired, so the reader keeps a live current
section and sees a failure notice instead of a blank screen.

Example
-------
>>> from hypertale.context import ExpansionContext
>>> from hypertale.navigation import NavigationController
>>> from hypertale.sections import MappingSectionStore
>>> store = MappingSectionStore({
...     "Start": '<a data-goto-section="Cave">Enter</a>',
...     "Cave": "It is dark.",
... })
>>> controller = NavigationController(ExpansionContext(store))
>>> controller.start()
>>> controller.click(controller.links()[0].handle)
>>> [entry.section_id for entry in controller.session.history]
['Start']
>>> controller.session.current_section
'Cave'
"""

from __future__ import annotations

import dataclasses as dc
import logging
import typing as typ

from ._constants import (
    DEFAULT_START_SECTION,
    INLINE_MACRO_CLASS,
    LINK_HANDLE_ATTR,
)
from .errors import CallableNotFoundError, ExpansionError, InactiveLinkError
from .inline import set_inline_macros_active
from .links import (
    ActivatedContent,
    DirectiveKind,
    LinkBinding,
    activate_links,
    disable_links,
    handle_sequence,
)
from .macros import MacroExpander
from .surface import SoupDisplaySurface
from .tree import inner_markup, iter_elements, parse_fragment

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from bs4 import Tag

    from .context import ExpansionContext
    from .errors import ResolutionError
    from .surface import DisplaySurface

logger = logging.getLogger(__name__)


@dc.dataclass(frozen=True, slots=True)
class HistoryEntry:
    """A retired section: its id and link-disabled markup."""

    section_id: str
    markup: str


@dc.dataclass(slots=True)
class ReadingSession:
    """Mutable state of one reader's pass through a story.

    Attributes
    ----------
    current_section : str or None
        Id of the mounted section; ``None`` before the first navigation.
    history : list[HistoryEntry]
        Retired sections in navigation order. Only ever appended to.
    bindings : dict[str, LinkBinding]
        Live links in the current section keyed by handle.
    handles : Iterator[str]
        Session-wide source of unique link handles.
    diagnostics : list[ResolutionError]
        Resolution errors recorded while building the current section,
        including inline replacements made since it was mounted.
    last_error : ExpansionError or None
        Failure of the most recent navigation, cleared on success.
    """

    current_section: str | None = None
    history: list[HistoryEntry] = dc.field(default_factory=list)
    bindings: dict[str, LinkBinding] = dc.field(default_factory=dict)
    handles: cabc.Iterator[str] = dc.field(default_factory=handle_sequence)
    diagnostics: list[ResolutionError] = dc.field(default_factory=list)
    last_error: ExpansionError | None = None


class NavigationController:
    """Drive section navigation and link clicks for a single reading session."""

    def __init__(
        self,
        context: ExpansionContext,
        surface: DisplaySurface | None = None,
        *,
        start_section: str = DEFAULT_START_SECTION,
        session: ReadingSession | None = None,
    ) -> None:
        """Create a controller over ``context`` mounting into ``surface``.

        Parameters
        ----------
        context : ExpansionContext
            Sections, callables, and variables the story resolves against.
        surface : DisplaySurface, optional
            Where content is mounted; defaults to a fresh
            :class:`~hypertale.surface.SoupDisplaySurface`.
        start_section : str, optional
            Section :meth:`start` navigates to. Defaults to ``"Start"``.
        session : ReadingSession, optional
            Existing session state; a new one is created when omitted.
        """
        self.context = context
        self.expander = MacroExpander(context)
        self.surface: DisplaySurface = surface or SoupDisplaySurface()
        self.session = session or ReadingSession()
        self.start_section = start_section

    def start(self) -> None:
        """Navigate to the configured start section."""
        self.goto_section(self.start_section)

    def goto_section(self, section_id: str) -> None:
        """Retire the current section and mount ``section_id`` as current.

        Raises
        ------
        ExpansionError
            If ``section_id`` does not exist or fails to parse. The session
            and surface are left as they were, apart from the failure notice.
        """
        logger.debug(
            "Navigating from %s to %s", self.session.current_section, section_id
        )
        try:
            expanded = self.expander.expand_section(section_id)
        except ExpansionError as exc:
            logger.error("Navigation to %s failed: %s", section_id, exc)
            self._fail(exc)
            raise
        prepared = self._prepare(expanded.tree())
        self._retire_current()
        self.surface.replace_current(prepared.tree)
        self.session.current_section = section_id
        self.session.bindings = {
            binding.handle: binding for binding in prepared.bindings
        }
        self.session.diagnostics = list(expanded.diagnostics)
        self.session.last_error = None
        self.surface.clear_failure()
        self.surface.scroll_current_to_start()
        self.surface.scroll_history_to_end()

    def click(self, handle: str) -> None:
        """Fire every directive of the live link ``handle`` in dispatch order.

        Raises
        ------
        InactiveLinkError
            If ``handle`` is not bound in the current section.
        """
        binding = self.session.bindings.get(handle)
        if binding is None:
            raise InactiveLinkError(handle)
        for directive in binding.directives:
            match directive.kind:
                case DirectiveKind.GOTO_SECTION:
                    self.goto_section(directive.value)
                case DirectiveKind.CALL_FUNCTION:
                    self.invoke(directive.value)
                case DirectiveKind.REPLACE_WITH:
                    self.replace_link(handle, directive.value)

    def invoke(self, name: str) -> typ.Any:
        """Call the registered callable ``name`` and return its result."""
        fn = self.context.callables.get(name)
        if fn is None:
            raise CallableNotFoundError(name, section_id=self.session.current_section)
        logger.debug("Invoking callable %s", name)
        return fn()

    def replace_link(self, handle: str, payload: str) -> Tag | None:
        """Replace live link ``handle`` with the expansion of macro ``payload``.

        Returns the mounted wrapper, or ``None`` when the link is no longer in
        the current section (for example after a navigation directive on the
        same link has already fired).

        Raises
        ------
        ExpansionError
            If the payload includes a section with malformed braces. The link
            stays live and the surface shows a failure notice.
        """
        target = self.surface.find_in_current({LINK_HANDLE_ATTR: handle})
        if target is None:
            logger.debug("Link %s left the current section; skipping replace", handle)
            return None
        diagnostics: list[ResolutionError] = []
        try:
            markup = self.expander.expand_macro(payload, diagnostics=diagnostics)
        except ExpansionError as exc:
            logger.error("Replacing link %s with %s failed: %s", handle, payload, exc)
            self._fail(exc)
            raise
        self.session.diagnostics.extend(diagnostics)
        self.session.last_error = None
        self.surface.clear_failure()
        return self._mount_inline(target, markup)

    def replace_active_element(self, element_id: str, markup: str) -> Tag | None:
        """Replace the element with id ``element_id`` in the current section.

        Copies of the id elsewhere (history, story text) are never touched.
        Returns ``None`` when the current section has no such element.
        """
        target = self.surface.find_in_current({"id": element_id})
        if target is None:
            logger.debug("No element %s in the current section", element_id)
            return None
        return self._mount_inline(target, markup)

    def show_history(self, visible: bool) -> None:
        """Show or hide the history region."""
        self.surface.set_history_visible(visible)

    def links(self) -> list[LinkBinding]:
        """Return live link bindings in document order."""
        ordered: list[LinkBinding] = []
        for element in iter_elements(self.surface.current()):
            handle = element.get(LINK_HANDLE_ATTR)
            if isinstance(handle, str) and handle in self.session.bindings:
                ordered.append(self.session.bindings[handle])
        return ordered

    def _fail(self, error: ExpansionError) -> None:
        self.session.last_error = error
        self.surface.show_failure(str(error))

    def _prepare(self, tree: Tag) -> ActivatedContent:
        return activate_links(
            set_inline_macros_active(tree, active=True), self.session.handles
        )

    def _retire_current(self) -> None:
        current_section = self.session.current_section
        if current_section is None:
            return
        retired = inner_markup(disable_links(self.surface.current()))
        self.session.bindings = {}
        self.session.history.append(HistoryEntry(current_section, retired))
        self.surface.append_history(retired)
        logger.debug("Retired %s to history", current_section)

    def _mount_inline(self, target: Tag, markup: str) -> Tag:
        wrapper = parse_fragment(markup, tag_name="span")
        wrapper["class"] = INLINE_MACRO_CLASS
        prepared = self._prepare(wrapper)
        for element in iter_elements(target):
            handle = element.get(LINK_HANDLE_ATTR)
            if isinstance(handle, str):
                self.session.bindings.pop(handle, None)
        for binding in prepared.bindings:
            self.session.bindings[binding.handle] = binding
        return self.surface.replace_element(target, prepared.tree)


__all__ = ["HistoryEntry", "NavigationController", "ReadingSession"]
