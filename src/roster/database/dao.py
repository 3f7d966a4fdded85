"""Data-access object for the ``students`` table.

All SQL for students lives here. Reads return ``Student`` models; writes
publish a ``TableChange`` once committed, which is what drives the
``observe_*`` sequences.
"""

from typing import AsyncIterator, List, Optional

from .changes import observe_query
from .connection import Database
from .models import Student

TABLE = "students"

_SELECT = "SELECT id, cui, nombres, apellidos, carreraProfesional FROM students"


class StudentDao:
    """Query surface over ``students``.

    Attributes:
        db: Storage handle the queries run against.
    """

    def __init__(self, db: Database):
        self.db = db

    # ==================== READS ====================

    def get_all_students(self) -> List[Student]:
        """All students, most recently inserted first."""
        with self.db.connect() as conn:
            rows = conn.execute(f"{_SELECT} ORDER BY id DESC").fetchall()
        return [Student.from_row(row) for row in rows]

    def observe_all_students(self) -> AsyncIterator[List[Student]]:
        """``get_all_students`` now and after every change to the table."""
        return observe_query(self.db.changes, TABLE, self.get_all_students)

    def get_student_by_id(self, student_id: int) -> Optional[Student]:
        """Get a student by database id.

        Args:
            student_id: The primary key.

        Returns:
            The student if found, None otherwise.
        """
        with self.db.connect() as conn:
            row = conn.execute(f"{_SELECT} WHERE id = ?", (student_id,)).fetchone()
        return Student.from_row(row) if row else None

    def get_student_by_cui(self, cui: str) -> Optional[Student]:
        """Get a student by CUI (exact, case-sensitive match).

        Args:
            cui: Unique student code.

        Returns:
            The student if found, None otherwise.
        """
        with self.db.connect() as conn:
            row = conn.execute(f"{_SELECT} WHERE cui = ?", (cui,)).fetchone()
        return Student.from_row(row) if row else None

    def get_student_count(self) -> int:
        """Number of stored students."""
        with self.db.connect() as conn:
            return int(conn.execute("SELECT COUNT(*) FROM students").fetchone()[0])

    def search_students(self, query: str) -> List[Student]:
        """Students with ``query`` inside any of their four text fields.

        Matching is SQLite ``LIKE``: ASCII case-insensitive, and ``%``/``_``
        in ``query`` act as wildcards.

        Args:
            query: Substring to look for.

        Returns:
            Matching students, most recently inserted first.
        """
        with self.db.connect() as conn:
            rows = conn.execute(
                f"""
                {_SELECT}
                WHERE nombres LIKE '%' || :query || '%'
                   OR apellidos LIKE '%' || :query || '%'
                   OR cui LIKE '%' || :query || '%'
                   OR carreraProfesional LIKE '%' || :query || '%'
                ORDER BY id DESC
                """,
                {"query": query},
            ).fetchall()
        return [Student.from_row(row) for row in rows]

    def observe_search_students(self, query: str) -> AsyncIterator[List[Student]]:
        """``search_students(query)`` now and after every change to the table.

        Args:
            query: Substring to look for, as in ``search_students``.
        """
        return observe_query(self.db.changes, TABLE, lambda: self.search_students(query))

    # ==================== WRITES ====================

    def insert_student(self, student: Student) -> int:
        """Insert a student, replacing the row if its ``id`` is already taken.

        Returns:
            The row id of the stored student.

        Raises:
            sqlite3.IntegrityError: If another student already has the same CUI.
        """
        with self.db.connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO students (id, cui, nombres, apellidos, carreraProfesional)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    cui = excluded.cui,
                    nombres = excluded.nombres,
                    apellidos = excluded.apellidos,
                    carreraProfesional = excluded.carreraProfesional
                RETURNING id
                """,
                (student.id, student.cui, student.nombres, student.apellidos, student.carrera_profesional),
            )
            row_id = int(cursor.fetchall()[0]["id"])
        self.db.notify(TABLE, "insert", row_id)
        return row_id

    def update_student(self, student: Student) -> int:
        """Update the row with the student's ``id``.

        Args:
            student: Student carrying the new field values.

        Returns:
            Rows affected; 0 if no row has that ``id`` or ``id`` is None.

        Raises:
            sqlite3.IntegrityError: If the new CUI belongs to another student.
        """
        if student.id is None:
            return 0
        with self.db.connect() as conn:
            cursor = conn.execute(
                """
                UPDATE students
                SET cui = ?, nombres = ?, apellidos = ?, carreraProfesional = ?
                WHERE id = ?
                """,
                (student.cui, student.nombres, student.apellidos, student.carrera_profesional, student.id),
            )
            updated = cursor.rowcount
        if updated:
            self.db.notify(TABLE, "update", student.id)
        return updated

    def delete_student(self, student: Student) -> int:
        """Delete the row with the student's ``id``.

        Args:
            student: Stored student; an unsaved one (``id`` is None) deletes nothing.

        Returns:
            Rows affected (0 or 1).
        """
        if student.id is None:
            return 0
        return self.delete_student_by_id(student.id)

    def delete_student_by_id(self, student_id: int) -> int:
        """Delete a student by database id.

        Args:
            student_id: The primary key.

        Returns:
            Rows affected (0 or 1).
        """
        with self.db.connect() as conn:
            deleted = conn.execute("DELETE FROM students WHERE id = ?", (student_id,)).rowcount
        if deleted:
            self.db.notify(TABLE, "delete", student_id)
        return deleted
