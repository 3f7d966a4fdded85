"""Storage layer for roster students."""

from .changes import ChangeNotifier, TableChange, observe_query
from .connection import Database
from .dao import StudentDao
from .models import Student
from .repository import DuplicateStudentError, StudentRepository, StudentRepositoryError, StudentStorageError

__all__ = [
    "ChangeNotifier",
    "Database",
    "DuplicateStudentError",
    "Student",
    "StudentDao",
    "StudentRepository",
    "StudentRepositoryError",
    "StudentStorageError",
    "TableChange",
    "observe_query",
]
