"""Unit tests for the navigation controller and its reading session.

The controller is exercised against a real :class:`SoupDisplaySurface` so
assertions can inspect both the live current section and the history region.
"""

from __future__ import annotations

import pytest

from hypertale.context import CallableRegistry, ExpansionContext
from hypertale.errors import (
    CallableNotFoundError,
    InactiveLinkError,
    NestedMacroError,
    SectionNotFoundError,
    UnbalancedMacroError,
    VariableNotFoundError,
)
from hypertale.navigation import NavigationController
from hypertale.sections import MappingSectionStore
from hypertale.surface import SoupDisplaySurface

SECTIONS = {
    "Start": '<p>Start here. <a data-goto-section="Cave">Enter</a></p>',
    "Cave": (
        '<p>Dark cave. <a data-goto-section="Tunnel">Onward</a> '
        '<a data-replace-with="@Lamp">Light lamp</a></p>'
    ),
    "Tunnel": '<p>A tunnel. <a data-goto-section="Broken">Dig</a></p>',
    "Lamp": (
        '<span id="_inline-1">The lamp glows.</span> '
        '<a data-goto-section="Tunnel">Follow the light</a>'
    ),
    "Broken": "oops { {",
}


@pytest.fixture
def registry() -> CallableRegistry:
    """Return a registry with a callable that counts its invocations."""
    registry = CallableRegistry()
    calls: list[str] = []

    @registry.register("ring")
    def ring() -> str:
        calls.append("ring")
        return "ding"

    registry.calls = calls  # type: ignore[attr-defined]
    return registry


@pytest.fixture
def controller(registry: CallableRegistry) -> NavigationController:
    """Return a controller over ``SECTIONS`` that has not started yet."""
    context = ExpansionContext(MappingSectionStore(SECTIONS), callables=registry)
    return NavigationController(context, SoupDisplaySurface())


def _click_text(controller: NavigationController, text: str) -> None:
    for binding in controller.links():
        if binding.text == text:
            controller.click(binding.handle)
            return
    msg = f"no live link labelled {text!r}"
    raise AssertionError(msg)


def test_first_navigation_leaves_history_empty(
    controller: NavigationController,
) -> None:
    controller.start()
    assert controller.session.current_section == "Start"
    assert controller.session.history == []
    assert controller.surface.history_markup() == ""


def test_history_grows_in_navigation_order(controller: NavigationController) -> None:
    controller.start()
    controller.goto_section("Cave")
    controller.goto_section("Tunnel")
    controller.goto_section("Start")
    history = [entry.section_id for entry in controller.session.history]
    assert history == ["Start", "Cave", "Tunnel"], (
        f"expected retired sections in navigation order, got {history!r}"
    )
    assert controller.session.current_section == "Start"


def test_retired_sections_have_no_live_links(controller: NavigationController) -> None:
    controller.start()
    controller.goto_section("Cave")
    history = controller.surface.history()
    assert history.find("a") is None, "history must not contain clickable links"
    assert history.find("span", class_="__disabledLink").get_text() == "Enter"
    assert "Start here." in history.get_text()


def test_navigation_remounts_current_region(controller: NavigationController) -> None:
    controller.start()
    first = controller.surface.current()
    controller.goto_section("Cave")
    assert controller.surface.current() is not first
    assert controller.surface.mount_generation == 2
    assert controller.surface.current_scroll == 0
    assert controller.surface.history_scroll == len(
        controller.surface.history_markup()
    )


def test_missing_section_leaves_session_unchanged(
    controller: NavigationController,
) -> None:
    controller.start()
    before = controller.surface.current_markup()
    with pytest.raises(SectionNotFoundError):
        controller.goto_section("Nowhere")
    assert controller.session.current_section == "Start"
    assert controller.session.history == []
    assert controller.surface.current_markup() == before
    assert controller.links(), "the current section should stay live"
    assert isinstance(controller.session.last_error, SectionNotFoundError)
    assert "Nowhere" in (controller.surface.failure() or "")


def test_syntax_error_rolls_back_and_later_success_clears_failure(
    controller: NavigationController,
) -> None:
    controller.start()
    controller.goto_section("Tunnel")
    with pytest.raises(NestedMacroError):
        _click_text(controller, "Dig")
    assert controller.session.current_section == "Tunnel"
    assert [entry.section_id for entry in controller.session.history] == ["Start"]
    controller.goto_section("Cave")
    assert controller.session.last_error is None
    assert controller.surface.failure() is None


def test_click_fires_goto_exactly_once(
    controller: NavigationController, monkeypatch: pytest.MonkeyPatch
) -> None:
    controller.start()
    visited: list[str] = []
    original = controller.goto_section

    def _recording_goto(section_id: str) -> None:
        visited.append(section_id)
        original(section_id)

    monkeypatch.setattr(controller, "goto_section", _recording_goto)
    _click_text(controller, "Enter")
    assert visited == ["Cave"]


def test_retired_handles_are_inactive(controller: NavigationController) -> None:
    controller.start()
    stale = controller.links()[0].handle
    controller.click(stale)
    with pytest.raises(InactiveLinkError) as excinfo:
        controller.click(stale)
    assert excinfo.value.handle == stale


def test_handles_are_unique_across_the_session(
    controller: NavigationController,
) -> None:
    controller.start()
    seen = [binding.handle for binding in controller.links()]
    controller.goto_section("Cave")
    seen += [binding.handle for binding in controller.links()]
    assert len(seen) == len(set(seen))


def test_replace_with_mounts_active_inline_content(
    controller: NavigationController,
) -> None:
    controller.start()
    controller.goto_section("Cave")
    _click_text(controller, "Light lamp")
    current = controller.surface.current()
    wrapper = current.find("span", class_="__inlineMacro")
    assert wrapper is not None
    assert current.find(id="inline-1") is not None, "inline id should be active"
    assert [binding.text for binding in controller.links()] == [
        "Onward",
        "Follow the light",
    ]
    assert controller.session.current_section == "Cave"
    _click_text(controller, "Follow the light")
    assert controller.session.current_section == "Tunnel"


def test_replace_with_records_unresolved_payload() -> None:
    store = MappingSectionStore({"Start": '<a data-replace-with="$gold">Count</a>'})
    controller = NavigationController(ExpansionContext(store))
    controller.start()
    controller.click(controller.links()[0].handle)
    assert controller.links() == []
    assert [type(error) for error in controller.session.diagnostics] == [
        VariableNotFoundError
    ]


def test_replace_active_element_only_touches_current_section(
    controller: NavigationController,
) -> None:
    controller.start()
    controller.goto_section("Cave")
    _click_text(controller, "Light lamp")
    controller.goto_section("Tunnel")
    assert controller.replace_active_element("inline-1", "<b>new</b>") is None
    assert "The lamp glows." in controller.surface.history().get_text()

    controller.goto_section("Cave")
    _click_text(controller, "Light lamp")
    mounted = controller.replace_active_element(
        "inline-1", '<b>bright</b> <a data-goto-section="Start">Home</a>'
    )
    assert mounted is not None
    assert controller.surface.current().find(id="inline-1") is None
    assert "Home" in [binding.text for binding in controller.links()]
    assert "The lamp glows." in controller.surface.history().get_text()


def test_call_function_directive_invokes_callable(
    registry: CallableRegistry,
) -> None:
    store = MappingSectionStore(
        {
            "Start": '<a data-call-function="ring" data-goto-section="Hall">Bell</a>',
            "Hall": "Hall.",
        }
    )
    controller = NavigationController(ExpansionContext(store, callables=registry))
    controller.start()
    controller.click(controller.links()[0].handle)
    assert registry.calls == ["ring"]  # type: ignore[attr-defined]
    assert controller.session.current_section == "Hall"


def test_invoke_unknown_callable_raises(controller: NavigationController) -> None:
    controller.start()
    with pytest.raises(CallableNotFoundError):
        controller.invoke("missing")
    assert controller.invoke("ring") == "ding"


def test_show_history_toggles_region(controller: NavigationController) -> None:
    controller.start()
    controller.show_history(False)
    assert controller.surface.history_visible() is False
    controller.show_history(True)
    assert controller.surface.history_visible() is True


def test_failed_replace_shows_failure_and_keeps_link_live() -> None:
    store = MappingSectionStore(
        {"Start": '<a data-replace-with="@Bad">Open</a> <b>ok</b>', "Bad": "a } b"}
    )
    controller = NavigationController(ExpansionContext(store), SoupDisplaySurface())
    controller.start()
    handle = controller.links()[0].handle
    with pytest.raises(UnbalancedMacroError):
        controller.click(handle)
    assert isinstance(controller.session.last_error, UnbalancedMacroError)
    notice = controller.surface.failure()
    assert notice is not None, "expected a visible failure notice"
    assert "Bad" in notice
    assert [binding.handle for binding in controller.links()] == [handle], (
        "the link should stay live after a failed replacement"
    )


def test_successful_replace_clears_earlier_failure(
    controller: NavigationController,
) -> None:
    controller.start()
    with pytest.raises(SectionNotFoundError):
        controller.goto_section("Nowhere")
    controller.goto_section("Cave")
    controller.surface.show_failure("stale notice")
    _click_text(controller, "Light lamp")
    assert controller.surface.failure() is None
    assert controller.session.last_error is None
