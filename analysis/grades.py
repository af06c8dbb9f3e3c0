"""Noten und GPA aus Prüfungsergebnissen.

Pro Semester zählt je Fach nur das beste Ergebnis (intern oder extern).
SGPA = Durchschnitt des letzten Semesters, CGPA = Punkte / Fächer über alle
Semester.
"""

from collections import defaultdict
from typing import Optional, Sequence

from pydantic import BaseModel

from config.schema import GradingConfig
from models.records import ResultRecord

_DEFAULT_SCALE = GradingConfig()


class GpaSummary(BaseModel):
    """GPA eines Studierenden."""

    student_id: str
    sgpa: float                       # letztes Semester
    cgpa: float                       # gesamt
    semesters: dict[int, float] = {}  # Semester → SGPA
    subjects_counted: int = 0


def grade_for_marks(
    marks: Optional[float],
    total_marks: Optional[float],
    scale: GradingConfig = _DEFAULT_SCALE,
) -> str:
    """Note aus Punkten. Fehlende Punkte oder total_marks=0 → scale.missing_grade."""
    if marks is None or total_marks is None or total_marks == 0:
        return scale.missing_grade
    percentage = marks / total_marks * 100
    for band in scale.bands:
        if percentage >= band.min_percentage:
            return band.grade
    return scale.failing_grade


def grade_point(grade: Optional[str], scale: GradingConfig = _DEFAULT_SCALE) -> int:
    """Notenpunkte; unbekannte oder fehlende Noten zählen 0."""
    if not grade:
        return 0
    wanted = grade.strip().upper()
    for band in scale.bands:
        if band.grade.upper() == wanted:
            return band.grade_point
    return 0


def effective_grade(result: ResultRecord, scale: GradingConfig = _DEFAULT_SCALE) -> str:
    """Eingetragene Note oder, falls leer, aus den Punkten abgeleitet."""
    if result.grade:
        return result.grade
    return grade_for_marks(result.marks, result.total_marks, scale)


def calculate_gpa(
    student_id: str,
    results: Sequence[ResultRecord],
    scale: GradingConfig = _DEFAULT_SCALE,
) -> GpaSummary:
    """Berechnet SGPA und CGPA für einen Studierenden (auf 2 Stellen gerundet)."""
    own = [r for r in results if r.student_id == student_id]
    if not own:
        return GpaSummary(student_id=student_id, sgpa=0.0, cgpa=0.0)

    # Semester → Fach → beste Notenpunkte
    best: dict[int, dict[str, int]] = defaultdict(dict)
    for r in own:
        gp = grade_point(effective_grade(r, scale), scale)
        current = best[r.semester].get(r.subject_id)
        if current is None or gp > current:
            best[r.semester][r.subject_id] = gp

    total_points = 0
    total_subjects = 0
    per_semester: dict[int, float] = {}
    for sem in sorted(best):
        points = sum(best[sem].values())
        count = len(best[sem])
        total_points += points
        total_subjects += count
        per_semester[sem] = round(points / count, 2) if count else 0.0

    latest = max(per_semester)
    cgpa = total_points / total_subjects if total_subjects else 0.0
    return GpaSummary(
        student_id=student_id,
        sgpa=per_semester[latest],
        cgpa=round(cgpa, 2),
        semesters=per_semester,
        subjects_counted=total_subjects,
    )


def calculate_all_gpas(
    results: Sequence[ResultRecord],
    scale: GradingConfig = _DEFAULT_SCALE,
) -> list[GpaSummary]:
    """GPA für alle Studierenden mit mindestens einem Ergebnis."""
    student_ids = sorted({r.student_id for r in results})
    return [calculate_gpa(sid, results, scale) for sid in student_ids]
