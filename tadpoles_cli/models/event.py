"""
Pydantic models for the records returned by the Tadpoles API.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _to_epoch_seconds(v: Any) -> Any:
    """The API reports times as floats at times; the archive only needs seconds."""
    if isinstance(v, str):
        v = float(v)
    if isinstance(v, float):
        return int(v)
    return v


class Event(BaseModel):
    """One feed item: an activity with a timestamp, a comment and attachments."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    event_time: int
    event_date: str
    parent_member_display: str = "Unknown"
    comment: str | None = None
    attachments: list[str] = Field(default_factory=list)

    @field_validator("event_time", mode="before")
    @classmethod
    def validate_event_time(cls, v: Any) -> Any:
        return _to_epoch_seconds(v)

    @field_validator("attachments", mode="before")
    @classmethod
    def validate_attachments(cls, v: Any) -> Any:
        """A null attachment list means no attachments."""
        return v or []


class Overview(BaseModel):
    """Earliest and latest known event times for the account."""

    model_config = ConfigDict(extra="ignore")

    first_event_time: int
    last_event_time: int

    @field_validator("first_event_time", "last_event_time", mode="before")
    @classmethod
    def validate_times(cls, v: Any) -> Any:
        return _to_epoch_seconds(v)
