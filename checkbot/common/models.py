"""Shared pydantic models for checklists, locations and user preferences."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


SUGGESTED_CHECKED_BOXES = ["✅", "☑️", "✔️"]
SUGGESTED_UNCHECKED_BOXES = ["- [ ]", "- [  ]", "- [   ]"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CheckBoxLine(CamelModel):
    has_check_box: bool
    is_checked: bool | None = None
    text: str

    @model_validator(mode="after")
    def _checked_iff_checkbox(self) -> CheckBoxLine:
        if self.has_check_box and self.is_checked is None:
            raise ValueError("is_checked is required on checkbox lines")
        if not self.has_check_box and self.is_checked is not None:
            raise ValueError("is_checked is only allowed on checkbox lines")
        return self


class ChecklistData(CamelModel):
    has_check_boxes: bool
    lines: list[CheckBoxLine]
    checked_box_style: str = Field(min_length=1)
    unchecked_box_style: str = Field(min_length=1)

    def style_for(self, line: CheckBoxLine) -> str:
        return self.checked_box_style if line.is_checked else self.unchecked_box_style


class UserConfig(BaseModel):
    """Per-user style defaults and preferences."""

    default_checked_box: str = SUGGESTED_CHECKED_BOXES[0]
    default_unchecked_box: str = SUGGESTED_UNCHECKED_BOXES[0]
    show_edit_confirmation: bool = True


class UnsentChecklistLocation(BaseModel):
    """A location whose canonical message has not been sent yet."""

    model_config = ConfigDict(frozen=True)

    source_chat_id: int
    salt: str = Field(min_length=3, max_length=3)
    foreign_chat_id: int | None = None
    inline_message_id: str | None = Field(default=None, min_length=1)
    is_personal: bool = False


class ChecklistMessageLocation(BaseModel):
    """Identifies every copy of one checklist.

    The (source_chat_id, source_message_id) pair is always readable by the bot
    through a forward. Foreign mirrors and inline copies are write-only.
    """

    model_config = ConfigDict(frozen=True)

    source_chat_id: int
    source_message_id: int
    salt: str = Field(min_length=3, max_length=3)
    foreign_chat_id: int | None = None
    foreign_message_id: int | None = None
    inline_message_id: str | None = Field(default=None, min_length=1)
    is_personal: bool = False

    @model_validator(mode="after")
    def _consistent_copies(self) -> ChecklistMessageLocation:
        if (self.foreign_chat_id is None) != (self.foreign_message_id is None):
            raise ValueError("foreign_chat_id and foreign_message_id must be set together")
        if self.inline_message_id is not None and self.foreign_chat_id is not None:
            raise ValueError("a checklist has either an inline copy or a foreign mirror")
        if self.is_personal and self.inline_message_id is None:
            raise ValueError("only inline checklists can be personal")
        return self

    @property
    def has_mirror(self) -> bool:
        return self.inline_message_id is not None or self.foreign_chat_id is not None


class MiniAppRequest(BaseModel):
    init_data: str = Field(alias="initData")
    location: str = Field(min_length=1)


class MiniAppLinesRequest(MiniAppRequest):
    checklist_lines: list[CheckBoxLine] = Field(alias="checklistLines", min_length=1)
