"""Exception taxonomy for macro expansion and navigation.

Two families matter to callers. :class:`MacroSyntaxError` subclasses are
raised while scanning a section and abort that expansion. Subclasses of
:class:`ResolutionError` describe a single macro that could not be resolved;
the expander records them in ``ExpandedContent.diagnostics`` and keeps going.
"""

from __future__ import annotations


class HypertaleError(RuntimeError):
    """Base class for every error raised by hypertale."""


class ExpansionError(HypertaleError):
    """Raised when a section cannot be expanded.

    Attributes
    ----------
    section_id : str or None
        Identifier of the section being expanded when the error occurred.
    """

    def __init__(self, message: str, *, section_id: str | None = None) -> None:
        super().__init__(message)
        self.section_id = section_id


class MacroSyntaxError(ExpansionError):
    """Raised when section markup contains malformed macro braces."""

    def __init__(self, message: str, *, section_id: str | None, offset: int) -> None:
        super().__init__(message, section_id=section_id)
        self.offset = offset


class NestedMacroError(MacroSyntaxError):
    """Raised when ``{`` appears while a macro is already open."""

    def __init__(self, *, section_id: str | None, offset: int) -> None:
        msg = f"Nested '{{' in section '{section_id}' at character {offset}."
        super().__init__(msg, section_id=section_id, offset=offset)


class UnbalancedMacroError(MacroSyntaxError):
    """Raised when ``}`` appears without a matching ``{``."""

    def __init__(self, *, section_id: str | None, offset: int) -> None:
        msg = (
            f"Got '}}' without a corresponding '{{' in section '{section_id}' "
            f"at character {offset}."
        )
        super().__init__(msg, section_id=section_id, offset=offset)


class UnterminatedMacroError(MacroSyntaxError):
    """Raised when the markup ends while a macro is still open."""

    def __init__(self, *, section_id: str | None, offset: int) -> None:
        msg = (
            f"Macro opened at character {offset} in section '{section_id}' "
            "is never closed."
        )
        super().__init__(msg, section_id=section_id, offset=offset)


class ResolutionError(ExpansionError):
    """A single macro could not be resolved; expansion substitutes empty text."""


class SectionNotFoundError(ResolutionError):
    """Raised or recorded when a referenced section does not exist."""

    def __init__(self, name: str, *, section_id: str | None = None) -> None:
        super().__init__(f"Section '{name}' doesn't exist.", section_id=section_id)
        self.name = name


class CallableNotFoundError(ResolutionError):
    """Raised or recorded when a callable name is not registered."""

    def __init__(self, name: str, *, section_id: str | None = None) -> None:
        msg = f"'{name}' is not a registered callable."
        super().__init__(msg, section_id=section_id)
        self.name = name


class CallableFailedError(ResolutionError):
    """Recorded when a registered callable raises while being invoked."""

    def __init__(self, name: str, *, section_id: str | None = None) -> None:
        super().__init__(f"Callable '{name}' raised an error.", section_id=section_id)
        self.name = name


class VariableNotFoundError(ResolutionError):
    """Recorded when a variable macro names an unknown variable."""

    def __init__(self, name: str, *, section_id: str | None = None) -> None:
        super().__init__(f"Variable '{name}' is not defined.", section_id=section_id)
        self.name = name


class UnknownSigilError(ResolutionError):
    """Recorded when a macro payload is empty or starts with an unknown sigil."""

    def __init__(self, payload: str, *, section_id: str | None = None) -> None:
        super().__init__(
            f"Unknown metacharacter in macro: '{payload}'.", section_id=section_id
        )
        self.payload = payload


class SectionCycleError(ResolutionError):
    """Recorded when a section inclusion would re-enter a section being expanded."""

    def __init__(
        self, chain: tuple[str, ...], *, section_id: str | None = None
    ) -> None:
        path = " -> ".join(chain)
        super().__init__(f"Section inclusion cycle: {path}.", section_id=section_id)
        self.chain = chain


class IncludeDepthError(ResolutionError):
    """Recorded when nested section inclusion exceeds the configured depth."""

    def __init__(self, limit: int, *, section_id: str | None = None) -> None:
        super().__init__(
            f"Maximum section include depth ({limit}) reached.", section_id=section_id
        )
        self.limit = limit


class InactiveLinkError(HypertaleError):
    """Raised when a click targets a link handle that is not live."""

    def __init__(self, handle: str) -> None:
        super().__init__(f"Link '{handle}' is not active in the current section.")
        self.handle = handle


__all__ = [
    "CallableFailedError",
    "CallableNotFoundError",
    "ExpansionError",
    "HypertaleError",
    "InactiveLinkError",
    "IncludeDepthError",
    "MacroSyntaxError",
    "NestedMacroError",
    "ResolutionError",
    "SectionCycleError",
    "SectionNotFoundError",
    "UnbalancedMacroError",
    "UnterminatedMacroError",
    "UnknownSigilError",
    "VariableNotFoundError",
]
