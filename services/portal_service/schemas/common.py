from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator


class BlankAsNoneModel(BaseModel):
    """Form-friendly input: surrounding whitespace is trimmed and "" means null."""

    model_config = ConfigDict(extra="ignore")

    @field_validator("*", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value


class OkResponse(BaseModel):
    ok: bool = True


class ArchivedResponse(OkResponse):
    id: str
    archived: bool = True


class SessionDeletedResponse(OkResponse):
    calendar_entries_removed: int = 0
