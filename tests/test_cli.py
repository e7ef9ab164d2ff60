from __future__ import annotations

import typing as typ

import pytest
from bs4 import BeautifulSoup

from hypertale import cli
from hypertale.context import ExpansionContext
from hypertale.navigation import NavigationController
from hypertale.sections import MappingSectionStore
from hypertale.surface import SoupDisplaySurface

if typ.TYPE_CHECKING:
    from pathlib import Path

STORY_YAML = """
title: The Cave
description: A short walk underground.
website: https://example.invalid/cave
variables:
  torch: lit
sections:
  Start: '<p>Entrance.</p> <a data-goto-section="Cave">Go in</a>'
  Cave: '<p>The torch is {$torch}.</p> <a data-goto-section="Start">Leave</a>'
""".strip()


def _write_story(tmp_path: Path, body: str = STORY_YAML) -> Path:
    config_path = tmp_path / "story.yaml"
    config_path.write_text(body + "\n", encoding="utf-8")
    return config_path


def _scripted(answers: list[str]) -> typ.Callable[[str], str]:
    remaining = iter(answers)

    def _prompt(_: str) -> str:
        try:
            return next(remaining)
        except StopIteration:
            raise EOFError from None

    return _prompt


def _controller(*, history_visible: bool = False) -> NavigationController:
    store = MappingSectionStore(
        {
            "Start": '<p>Entrance.</p> <a data-goto-section="Cave">Go in</a>',
            "Cave": '<p>Dark.</p> <a data-goto-section="Pit">Jump</a>',
        }
    )
    return NavigationController(
        ExpansionContext(store), SoupDisplaySurface(history_visible=history_visible)
    )


def test_run_reader_follows_numbered_links() -> None:
    output: list[str] = []
    controller = _controller()
    cli.run_reader(controller, prompt=_scripted(["1", "q"]), write=output.append)
    assert controller.session.current_section == "Cave"
    assert output[0] == "Entrance. Go in\n  [1] Go in"
    assert output[1] == "Dark. Jump\n  [1] Jump"


def test_run_reader_rejects_invalid_choices_and_reports_errors() -> None:
    output: list[str] = []
    controller = _controller()
    cli.run_reader(
        controller, prompt=_scripted(["9", "x", "1", "1"]), write=output.append
    )
    assert "Choose a link number, 'h' for history or 'q' to quit." in output
    assert "error: Section 'Pit' doesn't exist." in output
    assert controller.session.current_section == "Cave"
    assert "[failed: Section 'Pit' doesn't exist.]" in output[-1]


def test_run_reader_toggles_history() -> None:
    output: list[str] = []
    controller = _controller()
    cli.run_reader(controller, prompt=_scripted(["1", "h"]), write=output.append)
    assert output[-1].startswith("  | Entrance. Go in\n"), (
        f"expected history prefix once toggled, got {output[-1]!r}"
    )
    assert controller.surface.history_visible() is True


def test_expand_prints_markup_and_warnings(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    config_path = _write_story(
        tmp_path, STORY_YAML + "\n  Odd: 'x {$missing} y'"
    )
    cli.expand("Cave", config=config_path)
    captured = capsys.readouterr()
    assert "<p>The torch is lit.</p>" in captured.out

    cli.expand("Odd", config=config_path)
    captured = capsys.readouterr()
    assert captured.out.strip() == "x  y"
    assert "warning: Variable 'missing'" in captured.err


def test_check_reports_ok(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    cli.check(config=_write_story(tmp_path))
    assert capsys.readouterr().out.strip() == "ok: 2 sections"


def test_check_exits_non_zero_on_problems(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    config_path = _write_story(tmp_path, STORY_YAML + "\n  Bad: 'a } b'")
    with pytest.raises(SystemExit) as excinfo:
        cli.check(config=config_path)
    assert excinfo.value.code == 1
    assert capsys.readouterr().out.startswith("Bad: ")


def test_render_writes_page_after_visits(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    output = tmp_path / "out" / "session.html"
    cli.render(visit=["Cave"], output=output, config=_write_story(tmp_path))
    html = output.read_text(encoding="utf-8")
    assert "<title>The Cave</title>" in html
    page = BeautifulSoup(html, "html.parser")
    description = page.select_one("header p.description")
    assert description is not None, "expected the story description in the header"
    assert description.get_text() == "A short walk underground."
    website = page.select_one("header p.website a")
    assert website is not None, "expected the story website link in the header"
    assert website.get("href") == "https://example.invalid/cave"
    assert "The torch is lit." in html
    assert "__disabledLink" in html, "retired start section should be in history"
    assert capsys.readouterr().out.startswith("wrote ")


def test_run_reader_starts_with_configured_history_visibility() -> None:
    output: list[str] = []
    controller = _controller(history_visible=True)
    cli.run_reader(controller, prompt=_scripted(["1"]), write=output.append)
    assert output[-1].startswith("  | Entrance. Go in\n"), (
        "history should be listed when the surface starts with it visible"
    )


def test_run_reader_reports_missing_start_section() -> None:
    output: list[str] = []
    controller = NavigationController(
        ExpansionContext(MappingSectionStore({"Other": "hi"}))
    )
    cli.run_reader(controller, prompt=_scripted(["1"]), write=output.append)
    assert output == ["error: Section 'Start' doesn't exist."]
    assert controller.session.current_section is None
    assert controller.surface.failure() == "Section 'Start' doesn't exist."


def test_expand_exits_non_zero_on_missing_section(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.expand("Nowhere", config=_write_story(tmp_path))
    assert excinfo.value.code == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "error: Section 'Nowhere' doesn't exist." in captured.err


def test_render_exits_non_zero_on_broken_start(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    config_path = _write_story(tmp_path, STORY_YAML + "\nstart_section: Lobby")
    output = tmp_path / "session.html"
    with pytest.raises(SystemExit) as excinfo:
        cli.render(output=output, config=config_path)
    assert excinfo.value.code == 1
    assert not output.exists(), "no page should be written after a failure"
    assert "Lobby" in capsys.readouterr().err
