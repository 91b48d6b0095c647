from __future__ import annotations

import re
from typing import Union

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator

NOTE_ID_PATTERN = re.compile(r"[A-Za-z0-9_-]+")


class VideoGenerationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    note_id: Union[StrictInt, str] = Field(..., validation_alias="noteId")
    note_text: str = Field(..., validation_alias="noteText")
    subject_name: str = Field(..., validation_alias="subjectName")

    @field_validator("note_id")
    def validate_note_id(cls, value: Union[int, str]) -> Union[int, str]:  # noqa: D417
        if isinstance(value, int):
            if value <= 0:
                raise ValueError("noteId must be a positive integer")
            return value
        value = value.strip()
        if not NOTE_ID_PATTERN.fullmatch(value):
            raise ValueError("noteId may only contain letters, digits, '_' and '-'")
        return value

    @field_validator("note_text", "subject_name")
    def validate_text(cls, value: str) -> str:  # noqa: D417
        if not value.strip():
            raise ValueError("value cannot be empty")
        return value


class VideoGenerationResponse(BaseModel):
    status: str = "complete"
    videoUrl: str


class ErrorResponse(BaseModel):
    error: str
    details: str | None = None
