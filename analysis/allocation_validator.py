"""Validierung einer fertigen Lehrauftrags-Verteilung.

Prüft die Verteilung unabhängig vom Verteiler auf Verletzungen der
Zuteilungsregeln (Vollständigkeit, Gleichverteilung, Qualifikation). Auch für
von Hand bearbeitete oder importierte Verteilungen gedacht.
"""

from collections import Counter
from typing import Literal

from pydantic import BaseModel

from allocation.allocator import Allocation, NO_TEACHER_ASSIGNED
from models.university_data import UniversityData


class ValidationViolation(BaseModel):
    """Eine einzelne Regelverletzung."""

    severity: Literal["error", "warning"]
    constraint: str      # z.B. "duplicate_section"
    description: str
    entity: str          # Fach- oder Lehrkraft-Name


class ValidationReport(BaseModel):
    """Ergebnis der Validierung."""

    violations: list[ValidationViolation]
    is_valid: bool       # True wenn keine Errors (Warnings ok)

    @property
    def errors(self) -> list[ValidationViolation]:
        return [v for v in self.violations if v.severity == "error"]

    @property
    def warnings(self) -> list[ValidationViolation]:
        return [v for v in self.violations if v.severity == "warning"]

    def by_constraint(self, constraint: str) -> list[ValidationViolation]:
        return [v for v in self.violations if v.constraint == constraint]

    def print_rich(self) -> None:
        """Gibt den Report formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel
        from rich.table import Table
        from rich import box

        console = Console()
        status = (
            "[bold green]✓ VALIDE[/bold green]"
            if self.is_valid
            else "[bold red]✗ VERLETZUNGEN GEFUNDEN[/bold red]"
        )
        lines = [status, f"Fehler: {len(self.errors)} | Warnungen: {len(self.warnings)}"]
        console.print(Panel("\n".join(lines), title="Verteilungs-Validierung", border_style="cyan"))

        if not self.violations:
            console.print("[dim]Keine Verletzungen gefunden.[/dim]")
            return

        table = Table(box=box.ROUNDED, show_lines=True)
        table.add_column("Typ", width=8)
        table.add_column("Regel", width=22)
        table.add_column("Entität", width=20)
        table.add_column("Beschreibung")

        for v in self.violations:
            color = "red" if v.severity == "error" else "yellow"
            table.add_row(
                f"[{color}]{v.severity.upper()}[/{color}]",
                v.constraint,
                v.entity,
                v.description,
            )
        console.print(table)


class AllocationValidator:
    """Prüft eine Verteilung gegen den Datensatz, aus dem sie erzeugt wurde."""

    def validate(self, allocation: Allocation, data: UniversityData) -> ValidationReport:
        """Führt alle Prüfungen durch und gibt einen ValidationReport zurück."""
        violations: list[ValidationViolation] = []

        violations.extend(self._check_subject_coverage(allocation, data))
        for subject_name, per_teacher in allocation.items():
            subject = data.subject_by_name(subject_name)
            if subject is None:
                continue
            if NO_TEACHER_ASSIGNED in per_teacher:
                violations.extend(self._check_sentinel(subject_name, per_teacher, data))
                continue
            violations.extend(self._check_teachers(subject_name, subject.id, per_teacher, data))
            violations.extend(self._check_partition(subject_name, per_teacher, data))
            violations.extend(self._check_balance(subject_name, per_teacher))

        has_errors = any(v.severity == "error" for v in violations)
        return ValidationReport(violations=violations, is_valid=not has_errors)

    # ── Einzelne Prüfungen ────────────────────────────────────────────────────

    def _check_subject_coverage(
        self, allocation: Allocation, data: UniversityData
    ) -> list[ValidationViolation]:
        """Genau ein Eintrag pro Fach, keine unbekannten Fächer."""
        violations: list[ValidationViolation] = []
        known = {s.name for s in data.subjects}
        for subj in data.subjects:
            if subj.name not in allocation:
                violations.append(ValidationViolation(
                    severity="error",
                    constraint="subject_coverage",
                    entity=subj.name,
                    description="Fach fehlt in der Verteilung.",
                ))
        for name in allocation:
            if name not in known:
                violations.append(ValidationViolation(
                    severity="error",
                    constraint="unknown_subject",
                    entity=name,
                    description="Fach ist im Datensatz nicht vorhanden.",
                ))
        return violations

    def _check_sentinel(
        self, subject_name: str, per_teacher: dict[str, list[str]], data: UniversityData
    ) -> list[ValidationViolation]:
        """Sammeltopf muss alle Sektionen enthalten und darf nicht gemischt auftreten."""
        subject = data.subject_by_name(subject_name)
        violations = [ValidationViolation(
            severity="warning",
            constraint="no_teacher_assigned",
            entity=subject_name,
            description=f"Keine Lehrkraft – {len(per_teacher[NO_TEACHER_ASSIGNED])} "
                        f"Sektionen unbesetzt.",
        )]
        if len(per_teacher) > 1:
            violations.append(ValidationViolation(
                severity="error",
                constraint="mixed_sentinel",
                entity=subject_name,
                description="Sammeltopf neben regulären Lehrkräften.",
            ))
        if subject is not None and data.teachers_for(subject.id):
            violations.append(ValidationViolation(
                severity="error",
                constraint="sentinel_with_teachers",
                entity=subject_name,
                description=f"{len(data.teachers_for(subject.id))} qualifizierte "
                            f"Lehrkräfte vorhanden, trotzdem unbesetzt.",
            ))
        expected = Counter(c.name for c in data.sections)
        if Counter(per_teacher[NO_TEACHER_ASSIGNED]) != expected:
            violations.append(ValidationViolation(
                severity="error",
                constraint="incomplete_sentinel",
                entity=subject_name,
                description="Sammeltopf enthält nicht genau alle Sektionen.",
            ))
        return violations

    def _check_teachers(
        self,
        subject_name: str,
        subject_id: str,
        per_teacher: dict[str, list[str]],
        data: UniversityData,
    ) -> list[ValidationViolation]:
        """Nur bekannte und qualifizierte Lehrkräfte; jede qualifizierte taucht auf."""
        violations: list[ValidationViolation] = []
        for teacher_name in per_teacher:
            teacher = data.teacher_by_name(teacher_name)
            if teacher is None:
                violations.append(ValidationViolation(
                    severity="error",
                    constraint="unknown_teacher",
                    entity=teacher_name,
                    description=f"Fach '{subject_name}': Lehrkraft unbekannt.",
                ))
            elif not teacher.is_qualified_for(subject_id):
                violations.append(ValidationViolation(
                    severity="error",
                    constraint="unqualified_teacher",
                    entity=teacher_name,
                    description=f"Nicht für Fach '{subject_name}' qualifiziert.",
                ))
        for teacher in data.teachers_for(subject_id):
            if teacher.name not in per_teacher:
                violations.append(ValidationViolation(
                    severity="warning",
                    constraint="missing_teacher",
                    entity=teacher.name,
                    description=f"Qualifiziert für '{subject_name}', aber nicht "
                                f"in der Verteilung enthalten.",
                ))
        return violations

    def _check_partition(
        self, subject_name: str, per_teacher: dict[str, list[str]], data: UniversityData
    ) -> list[ValidationViolation]:
        """Jede Sektion genau einmal, keine fremden Sektionen."""
        violations: list[ValidationViolation] = []
        expected = {c.name for c in data.sections}
        counts: Counter[str] = Counter()
        for sections in per_teacher.values():
            counts.update(sections)

        for name in sorted(expected - set(counts)):
            violations.append(ValidationViolation(
                severity="error",
                constraint="missing_section",
                entity=subject_name,
                description=f"Sektion '{name}' ist keiner Lehrkraft zugeteilt.",
            ))
        for name, n in sorted(counts.items()):
            if name not in expected:
                violations.append(ValidationViolation(
                    severity="error",
                    constraint="unknown_section",
                    entity=subject_name,
                    description=f"Sektion '{name}' existiert nicht.",
                ))
            elif n > 1:
                violations.append(ValidationViolation(
                    severity="error",
                    constraint="duplicate_section",
                    entity=subject_name,
                    description=f"Sektion '{name}' ist {n}× zugeteilt.",
                ))
        return violations

    def _check_balance(
        self, subject_name: str, per_teacher: dict[str, list[str]]
    ) -> list[ValidationViolation]:
        """Sektionszahlen dürfen sich pro Fach um höchstens 1 unterscheiden."""
        loads = [len(s) for s in per_teacher.values()]
        if not loads or max(loads) - min(loads) <= 1:
            return []
        return [ValidationViolation(
            severity="error",
            constraint="unbalanced_workload",
            entity=subject_name,
            description=f"Sektionen pro Lehrkraft zwischen {min(loads)} und "
                        f"{max(loads)} (erlaubt: Differenz ≤ 1).",
        )]
