from __future__ import annotations

from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.db.base import AuditMixin, Base, IntPkMixin


class Priority(IntPkMixin, Base):
    """Lookup of todo priorities ordered by rank."""
    __tablename__ = "priorities"

    name: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    rank: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")

    todos: Mapped[list["Todo"]] = relationship("Todo", back_populates="priority")


class Todo(IntPkMixin, AuditMixin, Base):
    """A todo item; audited."""
    __tablename__ = "todos"

    title: Mapped[str] = mapped_column(Text, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    done: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")
    priority_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("priorities.id", ondelete="SET NULL"), nullable=True, index=True
    )

    priority: Mapped[Optional["Priority"]] = relationship("Priority", back_populates="todos")
