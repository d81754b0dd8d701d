"""Render checklist data as HTML for messages or as plain text."""

from __future__ import annotations

import html
from collections.abc import Callable

from checkbot.common.models import ChecklistData

ToggleUrl = Callable[[int], str]


def escape_html(text: str) -> str:
    return html.escape(text, quote=False)


def render_rich(data: ChecklistData, toggle_url: ToggleUrl) -> str:
    rendered: list[str] = []
    for idx, line in enumerate(data.lines):
        if not line.has_check_box:
            rendered.append(escape_html(line.text))
            continue
        item_text = escape_html(line.text)
        if line.is_checked:
            item_text = f"<s>{item_text}</s>"
        # the trailing space stays inside the link so the tap target is larger
        href = html.escape(toggle_url(idx), quote=True)
        rendered.append(f'<a href="{href}">{data.style_for(line)} </a>{item_text}')
    return "\n".join(rendered)


def render_placeholder(data: ChecklistData) -> str:
    """Rich rendering whose links go nowhere, used before message ids exist."""
    return render_rich(data, lambda idx: "")


def render_plain(data: ChecklistData) -> str:
    return "\n".join(
        f"{data.style_for(line)} {line.text}" if line.has_check_box else line.text for line in data.lines
    )
