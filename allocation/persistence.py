"""Rückschreiben einer Verteilung in die Qualifikationen der Lehrkräfte.

Die Verteilung verwendet Namen als Schlüssel; hier werden sie wieder auf IDs
abgebildet. Qualifikationen werden nur ergänzt (Mengenvereinigung), nie
entfernt. Geschrieben werden nur Lehrkräfte, deren Menge sich geändert hat,
sodass wiederholtes Verteilen + Speichern idempotent ist.
"""

import logging
from pathlib import Path
from typing import Protocol, Sequence

from pydantic import BaseModel

from allocation.allocator import Allocation, NO_TEACHER_ASSIGNED
from models.subject import Subject
from models.teacher import Teacher
from models.university_data import UniversityData

logger = logging.getLogger(__name__)


class MergeResult(BaseModel):
    """Ergebnis des Zusammenführens einer Verteilung mit den Lehrkräften."""

    teachers: list[Teacher]          # neue Objekte, Eingaben bleiben unverändert
    changed_ids: list[str]           # nur Lehrkräfte mit geänderter Qualifikation
    skipped: list[str] = []          # nicht auflösbare Namen (Hinweise)

    @property
    def has_changes(self) -> bool:
        return bool(self.changed_ids)


def merge_allocation(
    allocation: Allocation,
    subjects: Sequence[Subject],
    teachers: Sequence[Teacher],
) -> MergeResult:
    """Ergänzt die Qualifikationen aller Lehrkräfte um die zugeteilten Fächer."""
    subject_ids = {s.name: s.id for s in subjects}
    teacher_ids = {t.name: t.id for t in teachers}

    updates: dict[str, list[str]] = {t.id: list(t.qualified_subjects) for t in teachers}
    skipped: list[str] = []

    for subject_name, per_teacher in allocation.items():
        for teacher_name in per_teacher:
            if teacher_name == NO_TEACHER_ASSIGNED:
                continue

            subject_id = subject_ids.get(subject_name)
            if subject_id is None:
                logger.warning(f"Fach '{subject_name}' nicht gefunden – übersprungen.")
                skipped.append(f"Fach '{subject_name}'")
                continue

            teacher_id = teacher_ids.get(teacher_name)
            if teacher_id is None:
                logger.warning(f"Lehrkraft '{teacher_name}' nicht gefunden – übersprungen.")
                skipped.append(f"Lehrkraft '{teacher_name}'")
                continue

            if subject_id not in updates[teacher_id]:
                updates[teacher_id].append(subject_id)

    merged: list[Teacher] = []
    changed: list[str] = []
    for teacher in teachers:
        new_subjects = updates[teacher.id]
        if set(new_subjects) != teacher.qualification_set:
            changed.append(teacher.id)
            merged.append(teacher.model_copy(update={"qualified_subjects": new_subjects}))
        else:
            merged.append(teacher.model_copy(deep=True))

    return MergeResult(teachers=merged, changed_ids=changed, skipped=skipped)


# ─── Ablage ───────────────────────────────────────────────────────────────────

class DataRepository(Protocol):
    """Schnittstelle zur Datenablage; wird Aufrufern explizit übergeben."""

    def load(self) -> UniversityData: ...

    def save_teachers(self, teachers: list[Teacher], changed_ids: list[str]) -> int: ...


class JsonDataRepository:
    """Datenablage in einer UniversityData-JSON-Datei."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def load(self) -> UniversityData:
        return UniversityData.load_json(self.path)

    def save_teachers(self, teachers: list[Teacher], changed_ids: list[str]) -> int:
        """Schreibt geänderte Lehrkräfte zurück. Gibt die Anzahl zurück.

        Ohne Änderungen wird die Datei nicht angefasst.
        """
        if not changed_ids:
            return 0
        data = self.load()
        by_id = {t.id: t for t in teachers}
        changed = set(changed_ids)
        updated = [
            by_id[t.id] if t.id in changed and t.id in by_id else t
            for t in data.teachers
        ]
        data.model_copy(update={"teachers": updated}).save_json(self.path)
        count = sum(1 for t in data.teachers if t.id in changed and t.id in by_id)
        logger.info(f"{count} Lehrkräfte aktualisiert: {self.path}")
        return count

    def __repr__(self) -> str:
        return f"JsonDataRepository({self.path})"


def apply_allocation(allocation: Allocation, repository: DataRepository) -> MergeResult:
    """Lädt den Datensatz, führt die Verteilung zusammen und speichert Änderungen."""
    data = repository.load()
    result = merge_allocation(allocation, data.subjects, data.teachers)
    repository.save_teachers(result.teachers, result.changed_ids)
    return result
