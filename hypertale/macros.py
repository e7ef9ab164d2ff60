r"""Expand ``{...}`` macros embedded in section markup.

Three macro kinds exist, selected by the first payload character:

``{@name}``
    Expand section ``name`` (including its own macros) and inline the result.
``{#name}``
    Call the zero-argument callable registered as ``name``.
``{$name}``
    Substitute the current value of variable ``name``.

Macros never nest. Outside a macro, ``{{`` and ``}}`` stand for literal
braces. Problems resolving a single macro are recorded on the result and the
macro becomes empty text; malformed braces abort the whole expansion.

Example
-------
>>> from hypertale.context import ExpansionContext
>>> from hypertale.macros import MacroExpander
>>> from hypertale.sections import MappingSectionStore
>>> store = MappingSectionStore({"intro": "Hello {$name}", "Start": "{@intro}!"})
>>> expander = MacroExpander(ExpansionContext(store, variables={"name": "Ann"}))
>>> expander.expand_section("Start").markup
'Hello Ann!'
"""

from __future__ import annotations

import dataclasses as dc
import enum
import logging
import typing as typ

from ._constants import (
    CALLABLE_SIGIL,
    MACRO_CLOSE,
    MACRO_OPEN,
    SECTION_SIGIL,
    VARIABLE_SIGIL,
)
from .errors import (
    CallableFailedError,
    CallableNotFoundError,
    IncludeDepthError,
    NestedMacroError,
    ResolutionError,
    SectionCycleError,
    SectionNotFoundError,
    UnbalancedMacroError,
    UnknownSigilError,
    UnterminatedMacroError,
    VariableNotFoundError,
)
from .tree import parse_fragment

if typ.TYPE_CHECKING:
    from bs4 import Tag

    from .context import ExpansionContext

logger = logging.getLogger(__name__)


class MacroKind(enum.Enum):
    """Macro kinds keyed by their sigil character."""

    SECTION = SECTION_SIGIL
    CALLABLE = CALLABLE_SIGIL
    VARIABLE = VARIABLE_SIGIL


@dc.dataclass(frozen=True, slots=True)
class Macro:
    """A parsed macro payload.

    Attributes
    ----------
    kind : MacroKind
        Which lookup the macro performs.
    name : str
        Section id, callable name, or variable name (the payload minus sigil).
    """

    kind: MacroKind
    name: str


def parse_macro(payload: str) -> Macro | None:
    """Return the :class:`Macro` for ``payload`` or ``None`` for an unknown sigil.

    >>> parse_macro("$score")
    Macro(kind=<MacroKind.VARIABLE: '$'>, name='score')
    >>> parse_macro("%oops") is None
    True
    """
    try:
        kind = MacroKind(payload[:1])
    except ValueError:
        return None
    return Macro(kind=kind, name=payload[1:])


@dc.dataclass(slots=True)
class ExpandedContent:
    """Fully expanded markup for one request plus any recorded resolution errors."""

    section_id: str | None
    markup: str
    diagnostics: list[ResolutionError] = dc.field(default_factory=list)

    def tree(self) -> Tag:
        """Return a fresh ``<div>`` content tree wrapping the expanded markup."""
        return parse_fragment(self.markup)


class MacroExpander:
    """Expand sections and single macro payloads against an expansion context."""

    def __init__(self, context: ExpansionContext) -> None:
        self.context = context

    def expand_section(self, section_id: str) -> ExpandedContent:
        """Expand every macro within section ``section_id``.

        Parameters
        ----------
        section_id : str
            Identifier of the section to expand.

        Returns
        -------
        ExpandedContent
            Expanded markup and the resolution errors recorded on the way.

        Raises
        ------
        SectionNotFoundError
            If ``section_id`` is not in the section store.
        MacroSyntaxError
            If this section, or any section it includes, has malformed braces.
            No partial output is returned.
        """
        source = self.context.sections.get(section_id)
        if source is None:
            raise SectionNotFoundError(section_id, section_id=section_id)
        diagnostics: list[ResolutionError] = []
        markup = self._scan(source, section_id, (section_id,), diagnostics)
        return ExpandedContent(section_id, markup, diagnostics)

    def expand_macro(
        self,
        payload: str,
        *,
        diagnostics: list[ResolutionError] | None = None,
    ) -> str:
        """Resolve a single macro payload (without braces) into text.

        >>> from hypertale.context import ExpansionContext
        >>> from hypertale.sections import MappingSectionStore
        >>> ctx = ExpansionContext(MappingSectionStore(), variables={"x": 5})
        >>> MacroExpander(ctx).expand_macro("$x")
        '5'
        """
        sink = diagnostics if diagnostics is not None else []
        return self._resolve(payload, None, (), sink)

    def _scan(
        self,
        source: str,
        section_id: str | None,
        chain: tuple[str, ...],
        diagnostics: list[ResolutionError],
    ) -> str:
        output: list[str] = []
        payload: list[str] = []
        in_macro = False
        macro_start = 0
        index = 0
        length = len(source)
        while index < length:
            char = source[index]
            if in_macro:
                if char == MACRO_OPEN:
                    raise NestedMacroError(section_id=section_id, offset=index)
                if char == MACRO_CLOSE:
                    in_macro = False
                    output.append(
                        self._resolve("".join(payload), section_id, chain, diagnostics)
                    )
                else:
                    payload.append(char)
            elif char in (MACRO_OPEN, MACRO_CLOSE) and source.startswith(
                char * 2, index
            ):
                # doubled brace outside a macro is a literal
                output.append(char)
                index += 1
            elif char == MACRO_OPEN:
                in_macro = True
                macro_start = index
                payload = []
            elif char == MACRO_CLOSE:
                raise UnbalancedMacroError(section_id=section_id, offset=index)
            else:
                output.append(char)
            index += 1
        if in_macro:
            raise UnterminatedMacroError(section_id=section_id, offset=macro_start)
        return "".join(output)

    def _resolve(
        self,
        payload: str,
        section_id: str | None,
        chain: tuple[str, ...],
        diagnostics: list[ResolutionError],
    ) -> str:
        macro = parse_macro(payload)
        if macro is None:
            error = UnknownSigilError(payload, section_id=section_id)
            return _record(error, diagnostics)
        match macro.kind:
            case MacroKind.SECTION:
                return self._include(macro.name, section_id, chain, diagnostics)
            case MacroKind.CALLABLE:
                return self._call(macro.name, section_id, diagnostics)
            case MacroKind.VARIABLE:
                return self._lookup(macro.name, section_id, diagnostics)

    def _include(
        self,
        name: str,
        section_id: str | None,
        chain: tuple[str, ...],
        diagnostics: list[ResolutionError],
    ) -> str:
        if name in chain:
            error = SectionCycleError((*chain, name), section_id=section_id)
            return _record(error, diagnostics)
        limit = self.context.max_include_depth
        if len(chain) >= limit:
            error = IncludeDepthError(limit, section_id=section_id)
            return _record(error, diagnostics)
        source = self.context.sections.get(name)
        if source is None:
            error = SectionNotFoundError(name, section_id=section_id)
            return _record(error, diagnostics)
        return self._scan(source, name, (*chain, name), diagnostics)

    def _call(
        self, name: str, section_id: str | None, diagnostics: list[ResolutionError]
    ) -> str:
        fn = self.context.callables.get(name)
        if fn is None:
            error = CallableNotFoundError(name, section_id=section_id)
            return _record(error, diagnostics)
        try:
            result = fn()
        except Exception:
            logger.exception("Callable %s raised while expanding %s", name, section_id)
            diagnostics.append(CallableFailedError(name, section_id=section_id))
            return ""
        return "" if result is None else str(result)

    def _lookup(
        self, name: str, section_id: str | None, diagnostics: list[ResolutionError]
    ) -> str:
        variables = self.context.variables
        if name not in variables:
            error = VariableNotFoundError(name, section_id=section_id)
            return _record(error, diagnostics)
        value = variables[name]
        return "" if value is None else str(value)


def _record(error: ResolutionError, diagnostics: list[ResolutionError]) -> str:
    """Log and keep ``error``; the offending macro expands to empty text."""
    logger.warning("%s", error)
    diagnostics.append(error)
    return ""


__all__ = [
    "ExpandedContent",
    "Macro",
    "MacroExpander",
    "MacroKind",
    "parse_macro",
]
