"""Common literal values used across hypertale.

These constants keep attribute names, element ids, and class names
centralized so the expander, the link activator, the display surface, and
tests can import the same values without drifting. Intended for internal use
within the hypertale package.

Examples
--------
>>> from hypertale import _constants
>>> _constants.DORMANT_PREFIX + "inline-3"
'_inline-3'
>>> _constants.LINK_HANDLE_TEMPLATE.format(index=7)
'link-7'
"""

MACRO_OPEN = "{"
MACRO_CLOSE = "}"

SECTION_SIGIL = "@"
CALLABLE_SIGIL = "#"
VARIABLE_SIGIL = "$"

GOTO_SECTION_ATTR = "data-goto-section"
CALL_FUNCTION_ATTR = "data-call-function"
REPLACE_WITH_ATTR = "data-replace-with"
LINK_HANDLE_ATTR = "data-link-id"
LINK_HANDLE_TEMPLATE = "link-{index}"

INLINE_ID_MARKER = "inline-"
DORMANT_PREFIX = "_"

CURRENT_SECTION_ID = "__currentSection"
HISTORY_ID = "__history"
FAILURE_ID = "__failure"
DISABLED_LINK_CLASS = "__disabledLink"
INLINE_MACRO_CLASS = "__inlineMacro"
SECTION_CLASS = "section"

DEFAULT_START_SECTION = "Start"
DEFAULT_MAX_INCLUDE_DEPTH = 64
