from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .common import AuditFields


class PriorityRead(BaseModel):
    """Priority read model."""
    id: int = Field(..., description="Priority ID")
    name: str = Field(..., description="Priority name")
    rank: int = Field(..., description="Sort rank, lower first")

    class Config:
        from_attributes = True


class PriorityCreate(BaseModel):
    """Create priority payload."""
    name: str = Field(..., min_length=1, description="Priority name (unique)")
    rank: int = Field(0, description="Sort rank")


class PriorityUpdate(BaseModel):
    """Update priority payload; omitted fields keep their stored value."""
    name: Optional[str] = Field(None, min_length=1)
    rank: Optional[int] = Field(None)

    @field_validator("name", "rank")
    @classmethod
    def _not_null(cls, v):
        # omitted keeps the stored value; explicit null would violate NOT NULL
        if v is None:
            raise ValueError("may be omitted but not null")
        return v


class TodoRead(AuditFields):
    """Todo read model."""
    id: int = Field(..., description="Todo ID")
    title: str = Field(..., description="Title")
    notes: Optional[str] = Field(None)
    done: bool = Field(..., description="Completed flag")
    priority_id: Optional[int] = Field(None, description="Priority ID")

    class Config:
        from_attributes = True


class TodoCreate(BaseModel):
    """Create todo payload."""
    title: str = Field(..., min_length=1, description="Title")
    notes: Optional[str] = Field(None)
    done: bool = Field(False)
    priority_id: Optional[int] = Field(None)


class TodoUpdate(BaseModel):
    """Update todo payload; omitted fields keep their stored value."""
    title: Optional[str] = Field(None, min_length=1)
    notes: Optional[str] = Field(None)
    done: Optional[bool] = Field(None)
    priority_id: Optional[int] = Field(None)

    @field_validator("title", "done")
    @classmethod
    def _not_null(cls, v):
        if v is None:
            raise ValueError("may be omitted but not null")
        return v
