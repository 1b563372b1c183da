"""Post comments with nested replies."""
from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import ConfigDict, Field, field_validator

from .base import Base, IdField


class Comment(Base):
    model_config = ConfigDict(frozen=True)

    id: str = IdField()
    name: str = ""
    message: str = ""
    is_admin: bool = False
    created_at: datetime | None = None
    replies: list[Comment] = Field(default_factory=list)

    @field_validator("replies", mode="before")
    @classmethod
    def replies_never_null(cls, v: Any) -> Any:
        return [] if v is None else v

    def __repr__(self) -> str:
        return f"<Comment(id={self.id}, replies={len(self.replies)})>"
