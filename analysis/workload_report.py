"""Auslastungsbericht für eine Verteilung.

Summiert die zugeteilten Sektionen pro Lehrkraft über alle Fächer und
berechnet zusammenfassende Kennzahlen.
"""

from collections import defaultdict

from pydantic import BaseModel

from allocation.allocator import Allocation, NO_TEACHER_ASSIGNED
from models.university_data import UniversityData


# ─── Metriken-Modelle ─────────────────────────────────────────────────────────

class TeacherLoad(BaseModel):
    """Auslastung einer einzelnen Lehrkraft."""

    teacher_id: str
    name: str
    total_sections: int
    sections_per_subject: dict[str, int]


class WorkloadReport(BaseModel):
    """Auslastung aller Lehrkräfte für eine Verteilung."""

    teacher_loads: list[TeacherLoad]
    unassigned_subjects: list[str]
    unassigned_sections: int       # Fach × Sektion ohne Lehrkraft
    min_load: int
    max_load: int
    mean_load: float
    fairness_index: float          # Jain's fairness index (1.0 = perfekt)

    @property
    def spread(self) -> int:
        return self.max_load - self.min_load

    @property
    def idle_teachers(self) -> list[str]:
        return [t.name for t in self.teacher_loads if t.total_sections == 0]

    def print_rich(self) -> None:
        """Gibt den Bericht formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel
        from rich.table import Table
        from rich import box

        console = Console()
        fairness_color = (
            "green" if self.fairness_index >= 0.95
            else "yellow" if self.fairness_index >= 0.85
            else "red"
        )
        console.print(Panel(
            f"Sektionen/Lehrkraft: min [bold]{self.min_load}[/bold] | "
            f"max [bold]{self.max_load}[/bold] | Ø [bold]{self.mean_load:.1f}[/bold]\n"
            f"Fairness (Jain): "
            f"[{fairness_color}]{self.fairness_index:.4f}[/{fairness_color}] "
            f"(1.0 = perfekt)\n"
            f"Unbesetzt: {len(self.unassigned_subjects)} Fächer, "
            f"{self.unassigned_sections} Fach-Sektionen",
            title="Auslastung – Übersicht",
            border_style="cyan",
        ))

        table = Table(title="Lehrkräfte", box=box.ROUNDED)
        table.add_column("ID", width=10)
        table.add_column("Name", width=26)
        table.add_column("Sektionen", justify="right", width=9)
        table.add_column("Fächer")
        for t in sorted(self.teacher_loads, key=lambda x: (-x.total_sections, x.name)):
            subjects = ", ".join(f"{s} ({n})" for s, n in sorted(t.sections_per_subject.items()))
            load = str(t.total_sections) if t.total_sections else "[dim]0[/dim]"
            table.add_row(t.teacher_id, t.name, load, subjects or "[dim]–[/dim]")
        console.print(table)


# ─── Analyzer ─────────────────────────────────────────────────────────────────

class WorkloadAnalyzer:
    """Berechnet die Auslastung aller Lehrkräfte aus einer Verteilung."""

    def analyze(self, allocation: Allocation, data: UniversityData) -> WorkloadReport:
        per_teacher: dict[str, dict[str, int]] = defaultdict(dict)
        unassigned_subjects: list[str] = []
        unassigned_sections = 0

        for subject_name, assignments in allocation.items():
            for teacher_name, sections in assignments.items():
                if teacher_name == NO_TEACHER_ASSIGNED:
                    unassigned_subjects.append(subject_name)
                    unassigned_sections += len(sections)
                    continue
                per_teacher[teacher_name][subject_name] = len(sections)

        loads = [
            TeacherLoad(
                teacher_id=t.id,
                name=t.name,
                total_sections=sum(per_teacher.get(t.name, {}).values()),
                sections_per_subject=dict(per_teacher.get(t.name, {})),
            )
            for t in data.teachers
        ]

        totals = [l.total_sections for l in loads]
        n = len(totals)
        sum_a = sum(totals)
        sum_sq = sum(a * a for a in totals)
        # Jain's Fairness Index: (Σ x_i)² / (n * Σ x_i²)
        fairness = (sum_a * sum_a) / (n * sum_sq) if sum_sq > 0 else 1.0

        return WorkloadReport(
            teacher_loads=loads,
            unassigned_subjects=unassigned_subjects,
            unassigned_sections=unassigned_sections,
            min_load=min(totals) if totals else 0,
            max_load=max(totals) if totals else 0,
            mean_load=round(sum_a / n, 2) if n else 0.0,
            fairness_index=round(fairness, 4),
        )
