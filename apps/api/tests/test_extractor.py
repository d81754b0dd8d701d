import pytest
from pydantic import ValidationError

from checkbot.checklist.extractor import extract_checkboxes, extract_inline_query_checkboxes, is_checkbox_line
from checkbot.checklist.render import render_plain
from checkbot.common.models import CheckBoxLine, UserConfig


def test_recognizes_checked_unchecked_and_plain_lines() -> None:
    data = extract_checkboxes("Groceries\n- [ ] milk\n✅ eggs")

    assert data.has_check_boxes
    assert [line.has_check_box for line in data.lines] == [False, True, True]
    assert [line.is_checked for line in data.lines] == [None, False, True]
    assert [line.text for line in data.lines] == ["Groceries", "milk", "eggs"]
    assert data.checked_box_style == "✅"
    assert data.unchecked_box_style == "- [ ]"


def test_first_style_found_applies_to_whole_document() -> None:
    data = extract_checkboxes("✔️ a\n☑️ b\n- [  ] c\n- [ ] d")

    assert data.checked_box_style == "✔️"
    assert data.unchecked_box_style == "- [  ]"
    assert render_plain(data) == "✔️ a\n✔️ b\n- [  ] c\n- [  ] d"


def test_markdown_checked_box_normalizes() -> None:
    data = extract_checkboxes("- [x] done\n  -[ x ] also done")

    assert all(line.is_checked for line in data.lines)
    assert data.checked_box_style == "- [x]"
    assert [line.text for line in data.lines] == ["done", "also done"]


@pytest.mark.parametrize(
    "line, style",
    [
        ("-[] a", "- [ ]"),
        ("- [ ] a", "- [ ]"),
        ("- [   ] a", "- [   ]"),
        ("- [      ] a", "- [   ]"),
        ("[ ] a", "- [ ]"),
    ],
)
def test_unchecked_spacing_is_clamped(line: str, style: str) -> None:
    data = extract_checkboxes(line)

    assert data.unchecked_box_style == style
    assert data.lines[0].text == "a"
    assert data.lines[0].is_checked is False


def test_bare_dash_becomes_unchecked_box() -> None:
    data = extract_checkboxes("- milk")

    assert data.lines[0] == CheckBoxLine(has_check_box=True, is_checked=False, text="milk")


def test_item_text_keeps_inner_whitespace() -> None:
    data = extract_checkboxes("- [ ]  foo  bar ")

    assert data.lines[0].text == "foo  bar "


def test_styles_fall_back_to_user_config() -> None:
    config = UserConfig(default_checked_box="☑️", default_unchecked_box="- [  ]")

    data = extract_checkboxes("just a note", config)

    assert not data.has_check_boxes
    assert data.lines[0].is_checked is None
    assert data.checked_box_style == "☑️"
    assert data.unchecked_box_style == "- [  ]"


def test_is_checkbox_line() -> None:
    assert is_checkbox_line("✅ x")
    assert is_checkbox_line("  - [ ] x")
    assert not is_checkbox_line("x - [ ]")


def test_single_line_inline_query_splits_on_commas_and_dots() -> None:
    data = extract_inline_query_checkboxes("milk, eggs. bread")

    assert [line.text for line in data.lines] == ["milk", "eggs", "bread"]
    assert all(line.has_check_box and line.is_checked is False for line in data.lines)


def test_multi_line_inline_query_keeps_existing_boxes() -> None:
    data = extract_inline_query_checkboxes("a, b\n\n✅ c")

    assert [line.text for line in data.lines] == ["a, b", "c"]
    assert [line.is_checked for line in data.lines] == [False, True]


def test_checkbox_line_requires_checked_state() -> None:
    with pytest.raises(ValidationError):
        CheckBoxLine(has_check_box=True, text="x")
    with pytest.raises(ValidationError):
        CheckBoxLine(has_check_box=False, is_checked=True, text="x")


def test_checked_spellings_parse_to_the_same_item() -> None:
    data = extract_checkboxes("-[x]foo\n- [ x ] foo\n✅ foo")

    assert data.checked_box_style == "- [x]"
    assert [line.text for line in data.lines] == ["foo", "foo", "foo"]
    assert all(line.is_checked for line in data.lines)


@pytest.mark.parametrize("line", ["-[x]foo", "- [ x ] foo", "✅ foo", "☑️foo", "✔ foo"])
def test_each_checked_spelling_yields_text_foo(line: str) -> None:
    data = extract_checkboxes(line)

    assert data.lines[0] == CheckBoxLine(has_check_box=True, is_checked=True, text="foo")
