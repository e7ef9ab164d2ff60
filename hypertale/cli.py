"""Cyclopts CLI entrypoint for reading and checking hypertale stories.

The ``tale`` console script defined here opens a story described by a
``story.yaml`` configuration. ``tale read`` plays it interactively in the
terminal, ``tale expand`` prints one section with its macros expanded,
``tale check`` audits every section for malformed or unresolved macros, and
``tale render`` follows a path of sections and writes the resulting page.

Examples
--------
Play a story from the default configuration:

>>> from hypertale.cli import main
>>> main()  # doctest: +SKIP

Render the page reached after visiting two sections:

>>> from hypertale.cli import app
>>> app(
...     ["render", "--visit", "Cave", "--visit", "Tunnel", "--output", "cave.html"]
... )  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import sys
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from .config import load_story_config
from .errors import ExpansionError, HypertaleError
from .macros import MacroExpander
from .story import audit_story, build_context, build_surface, open_story
from .tree import parse_fragment, text_of

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .navigation import NavigationController

DEFAULT_CONFIG = Path("story.yaml")

app = App(name="tale", config=cyclopts.config.Env("TALE_", command=False))  # type: ignore[unknown-argument]

ConfigOption = typ.Annotated[
    Path, Parameter(help="Path to story config", env_var="TALE_CONFIG")
]
VerboseOption = typ.Annotated[bool, Parameter(help="Enable debug logging")]


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


def render_text(controller: NavigationController, *, show_history: bool) -> str:
    """Render the surface as plain text with numbered links.

    Parameters
    ----------
    controller : NavigationController
        Controller whose surface is rendered.
    show_history : bool
        Prefix the output with the retired sections' text.

    Returns
    -------
    str
        Text block ready to print, ending with the numbered link menu.
    """
    lines: list[str] = []
    if show_history:
        for entry in controller.session.history:
            lines.append(f"  | {text_of(parse_fragment(entry.markup))}")
        if controller.session.history:
            lines.append("")
    lines.append(text_of(controller.surface.current()))
    if controller.session.last_error is not None:
        lines.append(f"[failed: {controller.session.last_error}]")
    for index, binding in enumerate(controller.links(), start=1):
        lines.append(f"  [{index}] {binding.text}")
    return "\n".join(lines)


def run_reader(
    controller: NavigationController,
    *,
    prompt: cabc.Callable[[str], str] = input,
    write: cabc.Callable[[str], None] = print,
) -> None:
    """Start the story and loop over reader choices until quit or end of input.

    Numbers click the matching link, ``h`` toggles history, ``q`` quits.
    History starts shown or hidden as the surface was configured. Errors
    raised by a click are reported and the loop continues with the session
    unchanged; a story whose start section fails is reported and not played.
    """
    try:
        controller.start()
    except HypertaleError as exc:
        write(f"error: {exc}")
        return
    show_history = controller.surface.history_visible()
    while True:
        write(render_text(controller, show_history=show_history))
        try:
            choice = prompt("> ").strip().lower()
        except EOFError:
            return
        if choice in {"q", "quit"}:
            return
        if choice == "h":
            show_history = not show_history
            controller.show_history(show_history)
            continue
        links = controller.links()
        if not choice.isdigit() or not 1 <= int(choice) <= len(links):
            write("Choose a link number, 'h' for history or 'q' to quit.")
            continue
        try:
            controller.click(links[int(choice) - 1].handle)
        except HypertaleError as exc:
            write(f"error: {exc}")


@app.command(help="Read a story interactively in the terminal.")
def read(
    *,
    config: ConfigOption = DEFAULT_CONFIG,
    verbose: VerboseOption = False,
) -> None:
    """Play the configured story, prompting for a link number at each step.

    Parameters
    ----------
    config : Path, optional
        Path to the ``story.yaml`` configuration file (overridable via
        ``TALE_CONFIG``).
    verbose : bool, optional
        Log navigation and expansion details at debug level.
    """
    _configure_logging(verbose)
    controller = open_story(load_story_config(config))
    run_reader(controller)


@app.command(help="Print the expanded markup of a single section.")
def expand(
    section: str,
    *,
    config: ConfigOption = DEFAULT_CONFIG,
    verbose: VerboseOption = False,
) -> None:
    """Expand ``section`` and print the result; diagnostics go to stderr."""
    _configure_logging(verbose)
    context = build_context(load_story_config(config))
    try:
        result = MacroExpander(context).expand_section(section)
    except ExpansionError as exc:
        print(f"error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
    print(result.markup)
    for problem in result.diagnostics:
        print(f"warning: {problem}", file=sys.stderr)


@app.command(help="Check every section for malformed or unresolved macros.")
def check(
    *,
    config: ConfigOption = DEFAULT_CONFIG,
    verbose: VerboseOption = False,
) -> None:
    """Audit the story and exit non-zero when any section has problems.

    Raises
    ------
    SystemExit
        With status 1 when at least one problem was reported.
    """
    _configure_logging(verbose)
    context = build_context(load_story_config(config))
    problems = audit_story(context)
    for section_id, errors in problems.items():
        for error in errors:
            print(f"{section_id}: {error}")
    if problems:
        raise SystemExit(1)
    print(f"ok: {len(context.sections.ids())} sections")


@app.command(help="Follow a path of sections and write the resulting page.")
def render(
    *,
    visit: typ.Annotated[
        list[str] | None, Parameter(help="Section to navigate to, in order")
    ] = None,
    output: typ.Annotated[
        Path, Parameter(help="Where to write the page HTML", env_var="TALE_OUTPUT")
    ] = Path("session.html"),
    config: ConfigOption = DEFAULT_CONFIG,
    verbose: VerboseOption = False,
) -> None:
    """Start the story, visit each section in ``visit`` and save the page.

    Parameters
    ----------
    visit : list[str] or None, optional
        Section ids to navigate to after the start section.
    output : Path, optional
        Destination HTML file; parent directories are created.
    config : Path, optional
        Path to the ``story.yaml`` configuration file.
    verbose : bool, optional
        Log navigation and expansion details at debug level.
    """
    _configure_logging(verbose)
    story_config = load_story_config(config)
    surface = build_surface(story_config)
    controller = open_story(story_config, surface=surface)
    try:
        controller.start()
        for section_id in visit or []:
            controller.goto_section(section_id)
    except ExpansionError as exc:
        print(f"error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(surface.render(), encoding="utf-8")
    print(f"wrote {_format_path(output)}")


def main() -> None:
    """Invoke the Cyclopts application that powers the ``tale`` console command."""
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
