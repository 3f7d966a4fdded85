"""Pydantic models for roster data."""

import sqlite3
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

# Form/field name -> column name in the students table
COLUMNS = {
    "cui": "cui",
    "nombres": "nombres",
    "apellidos": "apellidos",
    "carrera_profesional": "carreraProfesional",
}


class Student(BaseModel):
    """One student of the roster.

    ``id`` is assigned by storage on insert and is ``None`` before that. The
    model is frozen; use ``model_copy(update=...)`` to derive a changed record.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: Optional[int] = None
    cui: str = Field(min_length=1)
    nombres: str = Field(min_length=1)
    apellidos: str = Field(min_length=1)
    carrera_profesional: str = Field(min_length=1)

    @property
    def full_name(self) -> str:
        return f"{self.nombres} {self.apellidos}"

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "Student":
        return cls(
            id=row["id"],
            cui=row["cui"],
            nombres=row["nombres"],
            apellidos=row["apellidos"],
            carrera_profesional=row["carreraProfesional"],
        )

    def to_row(self) -> Dict[str, Any]:
        """Column values keyed by column name; ``id`` only when assigned."""
        row: Dict[str, Any] = {column: getattr(self, field) for field, column in COLUMNS.items()}
        if self.id is not None:
            row["id"] = self.id
        return row
