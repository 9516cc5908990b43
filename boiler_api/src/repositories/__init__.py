"""
Repository layer for data access.

Repository[T] gives every mapped entity the same CRUD and query surface; each
call opens and closes its own session from the connection factory it was
built with. Concrete repositories only bind the model.
"""

from .base import Repository
from .security import UserAuthRepository
from .todo import PriorityRepository, TodoRepository

__all__ = [
    "Repository",
    "PriorityRepository",
    "TodoRepository",
    "UserAuthRepository",
]
