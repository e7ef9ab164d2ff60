"""Expansion context and the callable registry it carries.

Callables are zero-argument functions returning text. They are registered by
name, either directly or with the decorator form::

    registry = CallableRegistry()

    @registry.register("greet")
    def greet():
        return "hi"

Plugin modules expose ``register(registry)`` and are loaded by name from the
story configuration.
"""

from __future__ import annotations

import dataclasses as dc
import importlib
import logging
import typing as typ

from ._constants import DEFAULT_MAX_INCLUDE_DEPTH

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .sections import SectionStore

logger = logging.getLogger(__name__)

StoryCallable = typ.Callable[[], typ.Any]


class CallableRegistry:
    """Name to zero-argument callable mapping used by ``{#name}`` macros and links."""

    def __init__(self) -> None:
        self._callables: dict[str, StoryCallable] = {}

    def register(self, name: str) -> typ.Callable[[StoryCallable], StoryCallable]:
        """Return a decorator that registers the wrapped function as ``name``."""

        def decorator(fn: StoryCallable) -> StoryCallable:
            self.add(name, fn)
            return fn

        return decorator

    def add(self, name: str, fn: StoryCallable) -> None:
        if not callable(fn):
            msg = f"Cannot register non-callable {fn!r} as '{name}'."
            raise TypeError(msg)
        self._callables[name] = fn
        logger.debug("Registered callable: %s", name)

    def get(self, name: str) -> StoryCallable | None:
        return self._callables.get(name)

    def names(self) -> list[str]:
        return sorted(self._callables)

    def __contains__(self, name: object) -> bool:
        return name in self._callables


def load_plugins(registry: CallableRegistry, modules: cabc.Iterable[str]) -> None:
    """Import each module and let its ``register(registry)`` hook add callables.

    Raises
    ------
    ImportError
        If a module cannot be imported.
    AttributeError
        If an imported module has no ``register`` function.
    """
    for module_name in modules:
        module = importlib.import_module(module_name)
        hook = getattr(module, "register", None)
        if not callable(hook):
            msg = f"Plugin module '{module_name}' has no register(registry) function."
            raise AttributeError(msg)
        hook(registry)
        logger.debug("Loaded plugin module: %s", module_name)


@dc.dataclass(slots=True)
class ExpansionContext:
    """Everything macro expansion and link activation may look up by name.

    Attributes
    ----------
    sections : SectionStore
        Read-only store of raw section markup.
    callables : CallableRegistry
        Registry consulted by ``{#name}`` macros and ``data-call-function``.
    variables : MutableMapping[str, object]
        Values substituted by ``{$name}`` macros; callables may mutate it.
    max_include_depth : int
        Upper bound on nested ``{@name}`` inclusion.
    """

    sections: SectionStore
    callables: CallableRegistry = dc.field(default_factory=CallableRegistry)
    variables: cabc.MutableMapping[str, object] = dc.field(default_factory=dict)
    max_include_depth: int = DEFAULT_MAX_INCLUDE_DEPTH


__all__ = ["CallableRegistry", "ExpansionContext", "StoryCallable", "load_plugins"]
