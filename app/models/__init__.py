from .user import User
from .entry import Entry
from .todo import Todo
from .task import Task
from .mood import Mood
from .note import Note

__all__ = ["User", "Entry", "Todo", "Task", "Mood", "Note"]
