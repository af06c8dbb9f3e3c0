"""Lehrauftrags-Verteilung: Sektionen pro Fach gleichmäßig auf Lehrkräfte aufteilen.

Ablauf pro Fach (unabhängig von den anderen Fächern):
  - qualifizierte Lehrkräfte filtern
  - keine Lehrkraft → alle Sektionen in den Sammeltopf NO_TEACHER_ASSIGNED
  - sonst Lehrkräfte und Sektionen mischen, Arbeitslast base/base+1 bestimmen
    und die gemischte Sektionsliste in zusammenhängenden Stücken verteilen

Das Mischen verhindert, dass bei wiederholten Läufen immer dieselbe Lehrkraft
die Zusatz-Sektion bekommt. Für reproduzierbare Läufe kann ein Seed oder eine
eigene random.Random-Instanz übergeben werden.
"""

import logging
import random
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Sequence, Union

from pydantic import BaseModel

from models.subject import Subject
from models.class_section import ClassSection
from models.teacher import Teacher

logger = logging.getLogger(__name__)

NO_TEACHER_ASSIGNED = "No Teacher Assigned"

# Fachname → (Lehrkraft-Name | NO_TEACHER_ASSIGNED) → Sektionsnamen
Allocation = dict[str, dict[str, list[str]]]


# ─── Ergebnis-Modell ──────────────────────────────────────────────────────────

class AllocationRun(BaseModel):
    """Gespeicherte Verteilung inkl. Metadaten."""

    allocation: Allocation
    seed: Optional[int] = None
    created_at: Optional[datetime] = None
    data_version: str = "1.0"

    @property
    def unassigned_subjects(self) -> list[str]:
        """Fächer, deren Sektionen im Sammeltopf gelandet sind."""
        return [s for s, per_teacher in self.allocation.items()
                if NO_TEACHER_ASSIGNED in per_teacher]

    def save_json(self, path: Path) -> None:
        """Speichert die Verteilung als JSON-Datei."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        stamped = self.model_copy(update={
            "created_at": self.created_at or datetime.now(timezone.utc),
        })
        with open(path, "w", encoding="utf-8") as f:
            f.write(stamped.model_dump_json(indent=2))

    @classmethod
    def load_json(cls, path: Path) -> "AllocationRun":
        """Lädt eine gespeicherte Verteilung aus JSON."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Verteilung nicht gefunden: {path}")
        with open(path, "r", encoding="utf-8") as f:
            return cls.model_validate_json(f.read())


# ─── Hilfsfunktionen ──────────────────────────────────────────────────────────

def compute_workloads(num_sections: int, num_teachers: int) -> list[int]:
    """Arbeitslast pro Lehrkraft (in Reihenfolge): erst base+1, dann base.

    >>> compute_workloads(5, 2)
    [3, 2]
    >>> compute_workloads(2, 3)
    [1, 1, 0]
    """
    if num_teachers <= 0:
        return []
    base, remainder = divmod(num_sections, num_teachers)
    return [base + 1] * remainder + [base] * (num_teachers - remainder)


# ─── Verteiler ────────────────────────────────────────────────────────────────

class WorkloadAllocator:
    """Verteilt für jedes Fach alle Sektionen auf die qualifizierten Lehrkräfte.

    Verwendung:
        allocator = WorkloadAllocator(seed=7)
        allocation = allocator.allocate(subjects, sections, teachers)

    Ohne seed/rng wird pro Instanz eine frische random.Random erzeugt; zwei
    Läufe mit identischer Eingabe dürfen unterschiedliche Zuordnungen liefern.
    Die Eingaben werden nie verändert.
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.seed = seed
        self.rng = rng if rng is not None else random.Random(seed)

    def allocate(
        self,
        subjects: Sequence[Subject],
        sections: Sequence[ClassSection],
        teachers: Sequence[Teacher],
    ) -> Allocation:
        """Erzeugt die Verteilung für alle Fächer."""
        allocation: Allocation = {}
        section_names = [c.name for c in sections]

        for subject in subjects:
            allocation[subject.name] = self._allocate_subject(
                subject, section_names, teachers
            )

        unassigned = sum(1 for v in allocation.values() if NO_TEACHER_ASSIGNED in v)
        logger.info(
            f"Verteilung: {len(subjects)} Fächer × {len(section_names)} Sektionen, "
            f"{len(teachers)} Lehrkräfte, {unassigned} Fächer ohne Lehrkraft"
        )
        return allocation

    def _allocate_subject(
        self,
        subject: Subject,
        section_names: list[str],
        teachers: Sequence[Teacher],
    ) -> dict[str, list[str]]:
        eligible = [t for t in teachers if t.is_qualified_for(subject.id)]

        if not eligible:
            logger.warning(
                f"Fach '{subject.name}': keine qualifizierte Lehrkraft – "
                f"{len(section_names)} Sektionen unbesetzt"
            )
            return {NO_TEACHER_ASSIGNED: list(section_names)}

        shuffled_teachers = self.rng.sample(eligible, len(eligible))
        shuffled_sections = self.rng.sample(section_names, len(section_names))
        workloads = compute_workloads(len(shuffled_sections), len(shuffled_teachers))

        per_teacher: dict[str, list[str]] = {}
        start = 0
        for teacher, load in zip(shuffled_teachers, workloads):
            per_teacher[teacher.name] = shuffled_sections[start:start + load]
            start += load

        logger.debug(
            f"Fach '{subject.name}': {len(eligible)} Lehrkräfte, "
            f"Last {workloads[0]}..{workloads[-1]}"
        )
        return per_teacher


def allocate(
    subjects: Sequence[Subject],
    sections: Sequence[ClassSection],
    teachers: Sequence[Teacher],
    rng: Union[random.Random, int, None] = None,
) -> Allocation:
    """Kurzform für WorkloadAllocator(...).allocate(...).

    rng: random.Random-Instanz, ganzzahliger Seed oder None (frischer Zufall).
    """
    if isinstance(rng, random.Random):
        allocator = WorkloadAllocator(rng=rng)
    else:
        allocator = WorkloadAllocator(seed=rng)
    return allocator.allocate(subjects, sections, teachers)
