"""Checkbox detection and normalization for free-form list text."""

from __future__ import annotations

import re
from dataclasses import dataclass

from checkbot.common.models import (
    SUGGESTED_CHECKED_BOXES,
    CheckBoxLine,
    ChecklistData,
    UserConfig,
)

CHECKED_BOXES = [*SUGGESTED_CHECKED_BOXES, "- [x]", "☑", "✔"]
NORMALIZED_CHECKED_BOX = "- [x]"
MIN_BOX_SPACES = 1
MAX_BOX_SPACES = 3

_CHECKED_RE = re.compile(r"^\s*(-?\s*\[\s*x\s*\])\s*")
_UNCHECKED_RE = re.compile(r"^\s*(-?\s*\[(\s*)\]|-)\s*")
_INLINE_SPLIT_RE = re.compile(r"[.,]")


@dataclass(frozen=True)
class BoxMatch:
    """The marker text found on a line and the style it normalizes to."""

    matched: str
    normalized: str


def match_checked(line: str) -> BoxMatch | None:
    match = _CHECKED_RE.match(line)
    if match:
        return BoxMatch(matched=match.group(1), normalized=NORMALIZED_CHECKED_BOX)
    stripped = line.lstrip()
    for box in CHECKED_BOXES:
        if stripped.startswith(box):
            return BoxMatch(matched=box, normalized=box)
    return None


def match_unchecked(line: str) -> BoxMatch | None:
    """Match ``- [ ]`` with any spacing, or a bare leading dash.

    The interior spacing is clamped to 1..3 spaces in the normalized style.
    """
    match = _UNCHECKED_RE.match(line)
    if not match:
        return None
    spaces = len(match.group(2) or "")
    spaces = max(MIN_BOX_SPACES, min(MAX_BOX_SPACES, spaces))
    return BoxMatch(matched=match.group(1), normalized="- [" + " " * spaces + "]")


def _strip_marker(line: str, box: BoxMatch) -> str:
    return re.sub(r"^\s*" + re.escape(box.matched) + r"\s*", "", line, count=1)


def extract_checkboxes(text: str, config: UserConfig | None = None) -> ChecklistData:
    """Parse ``text`` line by line into checklist data.

    The first checked and unchecked markers found set the styles for the
    whole document; missing styles fall back to ``config``.
    """
    config = config or UserConfig()
    lines: list[CheckBoxLine] = []
    checked_style: str | None = None
    unchecked_style: str | None = None

    for line in text.split("\n"):
        checked = match_checked(line)
        unchecked = None if checked else match_unchecked(line)
        box = checked or unchecked
        if box is None:
            lines.append(CheckBoxLine(has_check_box=False, text=line))
            continue
        if checked:
            checked_style = checked_style or box.normalized
        else:
            unchecked_style = unchecked_style or box.normalized
        lines.append(CheckBoxLine(has_check_box=True, is_checked=checked is not None, text=_strip_marker(line, box)))

    return ChecklistData(
        has_check_boxes=any(line.has_check_box for line in lines),
        lines=lines,
        checked_box_style=checked_style or config.default_checked_box,
        unchecked_box_style=unchecked_style or config.default_unchecked_box,
    )


def is_checkbox_line(line: str) -> bool:
    return match_checked(line) is not None or match_unchecked(line) is not None


def extract_inline_query_checkboxes(query: str, config: UserConfig | None = None) -> ChecklistData:
    """Parse an inline query, where every item becomes a checkbox.

    A single-line query may separate its items with commas or dots.
    """
    items = query.split("\n")
    if len(items) == 1:
        items = _INLINE_SPLIT_RE.split(query)
    lines = [item if is_checkbox_line(item) else f"- [ ] {item}" for item in items if item]
    return extract_checkboxes("\n".join(lines), config)
