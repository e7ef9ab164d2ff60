"""Unit tests for link activation and disabling.

``activate_links`` should bind every ``<a>`` carrying a recognised directive,
in document order and with directives in dispatch order, while
``disable_links`` should leave nothing clickable behind.
"""

from __future__ import annotations

from hypertale.links import (
    DirectiveKind,
    LinkDirective,
    activate_links,
    disable_links,
    handle_sequence,
    read_directives,
)
from hypertale.tree import parse_fragment


def test_activation_binds_directive_links_in_document_order() -> None:
    tree = parse_fragment(
        '<p><a data-goto-section="Cave">Enter</a> or '
        '<a href="https://example.invalid">read more</a> or '
        '<span><a data-call-function="roll">Roll</a></span></p>'
    )
    activated = activate_links(tree, handle_sequence())
    assert [binding.handle for binding in activated.bindings] == ["link-1", "link-2"]
    assert [binding.text for binding in activated.bindings] == ["Enter", "Roll"]
    stamped = activated.tree.find_all(attrs={"data-link-id": True})
    assert [element["data-link-id"] for element in stamped] == ["link-1", "link-2"]
    plain = activated.tree.find("a", href=True)
    assert not plain.has_attr("data-link-id"), "plain links stay unbound"


def test_activation_does_not_mutate_input() -> None:
    tree = parse_fragment('<a data-goto-section="Cave">Enter</a>')
    before = str(tree)
    activate_links(tree, handle_sequence())
    assert str(tree) == before


def test_multiple_directives_follow_fixed_order() -> None:
    element = parse_fragment(
        '<a data-replace-with="$x" data-call-function="f" data-goto-section="B">go</a>'
    ).a
    assert read_directives(element) == (
        LinkDirective(DirectiveKind.GOTO_SECTION, "B"),
        LinkDirective(DirectiveKind.CALL_FUNCTION, "f"),
        LinkDirective(DirectiveKind.REPLACE_WITH, "$x"),
    )


def test_handle_sequence_start_offsets_handles() -> None:
    tree = parse_fragment('<a data-goto-section="B" data-call-function="f">go</a>')
    binding = activate_links(tree, handle_sequence(start=5)).bindings[0]
    assert binding.handle == "link-5"
    assert [directive.kind for directive in binding.directives] == [
        DirectiveKind.GOTO_SECTION,
        DirectiveKind.CALL_FUNCTION,
    ]


def test_disable_links_replaces_anchors_with_inert_spans() -> None:
    tree = parse_fragment(
        '<p>Go <a data-goto-section="Cave" data-link-id="link-1">'
        "<b>in</b>side</a>.</p>"
    )
    disabled = disable_links(tree)
    assert disabled.find("a") is None
    span = disabled.find("span", class_="__disabledLink")
    assert span is not None
    assert span.decode_contents() == "<b>in</b>side"
    assert not span.has_attr("data-link-id")
    assert disabled.get_text() == "Go inside."
    assert tree.find("a") is not None, "input tree keeps its links"
