"""Repository for roster students.

Forwards each data-access operation one to one, adds the CUI existence check,
translates SQLite errors into repository errors, and logs every write.

Example:
    from roster.database import Database, StudentRepository

    db = Database(":memory:")
    db.init_schema()
    repo = StudentRepository.from_database(db)
    student_id = repo.insert_student(student)
"""

import sqlite3
from typing import AsyncIterator, List, Optional

from roster.logutils import get_logger, with_extra

from .dao import StudentDao
from .connection import Database
from .models import Student

logger = get_logger(__name__)


class StudentRepositoryError(Exception):
    """Base class for repository failures."""


class DuplicateStudentError(StudentRepositoryError):
    """Another student already holds the CUI."""

    def __init__(self, cui: str):
        super().__init__(f"A student with CUI {cui} already exists")
        self.cui = cui


class StudentStorageError(StudentRepositoryError):
    """SQLite failed while running an operation."""


def _is_cui_conflict(error: sqlite3.IntegrityError) -> bool:
    return "students.cui" in str(error)


class StudentRepository:
    """Student persistence used by the view-models and the CLI.

    Attributes:
        dao: The data-access object every call is forwarded to.
    """

    def __init__(self, dao: StudentDao):
        self.dao = dao
        self._log = with_extra(logger, component="repository")

    @classmethod
    def from_database(cls, db: Database) -> "StudentRepository":
        return cls(StudentDao(db))

    # ==================== READS ====================

    def get_all_students(self) -> List[Student]:
        return self._call(self.dao.get_all_students)

    def observe_all_students(self) -> AsyncIterator[List[Student]]:
        return self.dao.observe_all_students()

    def get_student_by_id(self, student_id: int) -> Optional[Student]:
        return self._call(self.dao.get_student_by_id, student_id)

    def get_student_by_cui(self, cui: str) -> Optional[Student]:
        return self._call(self.dao.get_student_by_cui, cui)

    def get_student_count(self) -> int:
        return self._call(self.dao.get_student_count)

    def search_students(self, query: str) -> List[Student]:
        return self._call(self.dao.search_students, query)

    def observe_search_students(self, query: str) -> AsyncIterator[List[Student]]:
        return self.dao.observe_search_students(query)

    def is_student_exists(self, cui: str) -> bool:
        """True if a student with ``cui`` is stored."""
        return self.get_student_by_cui(cui) is not None

    # ==================== WRITES ====================

    def insert_student(self, student: Student) -> int:
        """Store a new student.

        Returns:
            The id assigned by storage.

        Raises:
            DuplicateStudentError: If the CUI is already taken.
            StudentStorageError: On any other SQLite failure.
        """
        try:
            student_id = self.dao.insert_student(student)
        except sqlite3.IntegrityError as e:
            if _is_cui_conflict(e):
                self._log.warning_with_data("Rejected duplicate CUI", cui=student.cui)
                raise DuplicateStudentError(student.cui) from e
            raise StudentStorageError(str(e)) from e
        except sqlite3.Error as e:
            raise StudentStorageError(str(e)) from e

        self._log.info_with_data(
            f"Student inserted with ID: {student_id}",
            id=student_id,
            cui=student.cui,
            name=student.full_name,
        )
        return student_id

    def update_student(self, student: Student) -> int:
        """Update a stored student; returns rows affected (0 if it does not exist).

        Raises:
            DuplicateStudentError: If the new CUI belongs to another student.
            StudentStorageError: On any other SQLite failure.
        """
        try:
            updated = self.dao.update_student(student)
        except sqlite3.IntegrityError as e:
            if _is_cui_conflict(e):
                raise DuplicateStudentError(student.cui) from e
            raise StudentStorageError(str(e)) from e
        except sqlite3.Error as e:
            raise StudentStorageError(str(e)) from e

        if updated:
            self._log.info_with_data("Student updated", id=student.id, name=student.full_name)
        else:
            self._log.warning_with_data("Update matched no student", id=student.id)
        return updated

    def delete_student(self, student: Student) -> int:
        deleted = self._call(self.dao.delete_student, student)
        if deleted:
            self._log.info_with_data("Student deleted", id=student.id, name=student.full_name)
        return deleted

    def delete_student_by_id(self, student_id: int) -> int:
        deleted = self._call(self.dao.delete_student_by_id, student_id)
        if deleted:
            self._log.info_with_data(f"Student deleted with ID: {student_id}", id=student_id)
        return deleted

    # ==================== HELPERS ====================

    @staticmethod
    def _call(operation, *args):
        try:
            return operation(*args)
        except sqlite3.Error as e:
            raise StudentStorageError(str(e)) from e

