"""Student form fields and validation."""

from typing import Dict, Mapping

from roster.database import Student

# (field, label) in display order
FORM_FIELDS = (
    ("cui", "CUI"),
    ("nombres", "Nombres"),
    ("apellidos", "Apellidos"),
    ("carrera_profesional", "Carrera profesional"),
)


def validate_student_form(values: Mapping[str, str]) -> Dict[str, str]:
    """Map each blank required field to its error message.

    Returns:
        Empty dict when the form can be submitted.
    """
    errors: Dict[str, str] = {}
    for field, label in FORM_FIELDS:
        if not (values.get(field) or "").strip():
            errors[field] = f"{label} is required"
    return errors


def build_student(values: Mapping[str, str]) -> Student:
    """Build a new (unsaved) student from validated form values."""
    return Student(**{field: values[field] for field, _ in FORM_FIELDS})


def empty_form() -> Dict[str, str]:
    return {field: "" for field, _ in FORM_FIELDS}
