"""Interactive hypertext narratives: macro expansion and section navigation.

This package expands ``{@section}``, ``{#callable}`` and ``{$variable}``
macros in inert story sections and drives a reading session that retires each
displayed section into an append-only history as the reader follows links.
It also exposes the CLI entry points used by the ``tale`` console script.

Exports
-------
- ``app``: Cyclopts application entry for subcommands.
- ``main``: Convenience function that invokes the Cyclopts app.
- ``MacroExpander``, ``NavigationController``: the expansion engine and the
  session state machine.

Examples
--------
>>> from hypertale import ExpansionContext, MacroExpander, MappingSectionStore
>>> store = MappingSectionStore({"Start": "{{literal}} {$x}"})
>>> MacroExpander(ExpansionContext(store, variables={"x": 5})).expand_section(
...     "Start"
... ).markup
'{literal} 5'
"""

from __future__ import annotations

from .cli import app, main
from .context import CallableRegistry, ExpansionContext
from .macros import ExpandedContent, MacroExpander
from .navigation import NavigationController, ReadingSession
from .sections import MappingSectionStore

__all__ = [
    "CallableRegistry",
    "ExpandedContent",
    "ExpansionContext",
    "MacroExpander",
    "MappingSectionStore",
    "NavigationController",
    "ReadingSession",
    "app",
    "main",
]
