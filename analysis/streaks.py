"""Anwesenheits-Serien (aufeinanderfolgende Tage).

Die Serie zählt rückwärts ab heute. Ist heute noch kein Eintrag vorhanden,
beginnt die Zählung gestern – eine Serie reißt also erst am Folgetag.
"""

from datetime import date, timedelta
from typing import Iterable, Optional

from models.records import AttendanceRecord
from models.university_data import UniversityData


def calculate_attendance_streak(dates: Iterable[date], today: Optional[date] = None) -> int:
    """Anzahl aufeinanderfolgender Tage mit Eintrag bis heute bzw. gestern."""
    attended = set(dates)
    if not attended:
        return 0

    current = today or date.today()
    streak = 0
    if current in attended:
        streak += 1
    current -= timedelta(days=1)

    while current in attended:
        streak += 1
        current -= timedelta(days=1)
    return streak


class StreakCalculator:
    """Berechnet Serien für alle Lehrkräfte und Studierenden eines Datensatzes."""

    def __init__(self, today: Optional[date] = None) -> None:
        self.today = today or date.today()

    def _dates_for(self, records: list[AttendanceRecord], person_id: str,
                   role: str) -> list[date]:
        return [
            r.date for r in records
            if r.person_id == person_id and r.role == role
            # Lehrkräfte: jede gehaltene Stunde zählt
            and (role == "faculty" or r.status == "present")
        ]

    def teacher_streaks(self, data: UniversityData) -> dict[str, int]:
        return {
            t.id: calculate_attendance_streak(
                self._dates_for(data.attendance, t.id, "faculty"), self.today)
            for t in data.teachers
        }

    def student_streaks(self, data: UniversityData) -> dict[str, int]:
        student_ids = sorted({r.person_id for r in data.attendance if r.role == "student"})
        return {
            sid: calculate_attendance_streak(
                self._dates_for(data.attendance, sid, "student"), self.today)
            for sid in student_ids
        }

    def update_teachers(self, data: UniversityData) -> UniversityData:
        """Neuer Datensatz mit aktualisiertem Teacher.streak."""
        streaks = self.teacher_streaks(data)
        teachers = [t.model_copy(update={"streak": streaks[t.id]}) for t in data.teachers]
        return data.model_copy(update={"teachers": teachers})
