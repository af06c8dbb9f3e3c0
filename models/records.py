"""Datenmodelle für Leistungs- und Anwesenheitsdaten (Pydantic v2)."""

from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, model_validator


class ResultRecord(BaseModel):
    """Ein Prüfungsergebnis eines Studierenden in einem Fach."""

    student_id: str
    subject_id: str
    semester: int
    marks: Optional[float] = None
    total_marks: Optional[float] = None
    grade: Optional[str] = None          # "O", "A", ... oder None → aus Punkten ableiten
    exam_type: Literal["internal", "external"] = "internal"

    @model_validator(mode='after')
    def _check_marks(self):
        if self.marks is not None and self.marks < 0:
            raise ValueError(f"marks ({self.marks}) darf nicht negativ sein.")
        if (self.marks is not None and self.total_marks
                and self.marks > self.total_marks):
            raise ValueError(
                f"marks ({self.marks}) > total_marks ({self.total_marks})"
            )
        return self


class AttendanceRecord(BaseModel):
    """Ein Anwesenheitseintrag (Studierende) bzw. gehaltene Stunde (Lehrkraft)."""

    person_id: str
    date: date
    status: Literal["present", "absent"] = "present"
    role: Literal["student", "faculty"] = "student"
