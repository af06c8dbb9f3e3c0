"""UniversityData: Vollständiger Datensatz + Bereitschafts-Check (Pydantic v2)."""

from collections import Counter
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

from models.subject import Subject
from models.class_section import ClassSection
from models.teacher import Teacher
from models.records import ResultRecord, AttendanceRecord


class ReadinessReport(BaseModel):
    """Ergebnis des Bereitschafts-Checks vor einer Verteilung."""

    is_ready: bool
    errors: list[str]      # Kritische Probleme (Ergebnis nicht zurückschreibbar)
    warnings: list[str]    # Hinweise (Verteilung möglich, aber lückenhaft)

    def print_rich(self) -> None:
        """Gibt den Report formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel

        console = Console()
        if self.is_ready:
            status = "[bold green]✓ BEREIT[/bold green]"
        else:
            status = "[bold red]✗ NICHT BEREIT[/bold red]"

        lines = [status]
        if self.errors:
            lines.append("\n[red bold]Fehler (kritisch):[/red bold]")
            for e in self.errors:
                lines.append(f"  [red]• {e}[/red]")
        if self.warnings:
            lines.append("\n[yellow bold]Warnungen:[/yellow bold]")
            for w in self.warnings:
                lines.append(f"  [yellow]• {w}[/yellow]")
        if not self.errors and not self.warnings:
            lines.append("[dim]Keine Probleme gefunden.[/dim]")

        console.print(Panel("\n".join(lines), title="Bereitschafts-Check", border_style="cyan"))


def _duplicates(names: list[str]) -> list[str]:
    return sorted(n for n, c in Counter(names).items() if c > 1)


class UniversityData(BaseModel):
    """Vollständiger Datensatz: Fächer, Sektionen, Lehrkräfte, Ergebnisse, Anwesenheit."""

    subjects: list[Subject]
    sections: list[ClassSection]
    teachers: list[Teacher]
    results: list[ResultRecord] = []
    attendance: list[AttendanceRecord] = []
    institution_name: str = ""
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None
    data_version: str = "1.0"

    # ─── Nachschlagen ───

    def subject_by_name(self, name: str) -> Optional[Subject]:
        return next((s for s in self.subjects if s.name == name), None)

    def teacher_by_name(self, name: str) -> Optional[Teacher]:
        return next((t for t in self.teachers if t.name == name), None)

    def teachers_for(self, subject_id: str) -> list[Teacher]:
        """Alle Lehrkräfte, die für das Fach qualifiziert sind."""
        return [t for t in self.teachers if t.is_qualified_for(subject_id)]

    # ─── Übersicht ───

    def summary(self) -> str:
        """Kurze Übersicht über den Datensatz."""
        staffed = sum(1 for s in self.subjects if self.teachers_for(s.id))
        lines = [
            f"Einrichtung: {self.institution_name}" if self.institution_name else "",
            f"Fächer: {len(self.subjects)} ({staffed} mit Lehrkraft, "
            f"{len(self.subjects) - staffed} ohne)",
            f"Sektionen: {len(self.sections)}",
            f"Lehrkräfte: {len(self.teachers)}",
            f"Zuteilungen gesamt: {len(self.subjects) * len(self.sections)} "
            f"(Fach × Sektion)",
            f"Ergebnisse: {len(self.results)}" if self.results else "",
            f"Anwesenheitseinträge: {len(self.attendance)}" if self.attendance else "",
        ]
        return "\n".join(l for l in lines if l)

    # ─── Bereitschafts-Check ───

    def check_readiness(self) -> ReadinessReport:
        """Prüft ob eine Verteilung sinnvoll erzeugt und zurückgeschrieben werden kann.

        Prüfungen:
        1. Namen eindeutig (Fächer, Sektionen, Lehrkräfte) – die Verteilung
           verwendet Namen als Schlüssel
        2. Fächer ohne qualifizierte Lehrkraft
        3. Qualifikationen mit unbekannten Fach-IDs
        4. Lehrkräfte ohne Qualifikation, leere Sektionsliste
        """
        errors: list[str] = []
        warnings: list[str] = []

        # ── 1. Eindeutige Namen ──────────────────────────────────────────
        for label, names in (
            ("Fach", [s.name for s in self.subjects]),
            ("Sektion", [c.name for c in self.sections]),
            ("Lehrkraft", [t.name for t in self.teachers]),
        ):
            for dup in _duplicates(names):
                errors.append(
                    f"{label} '{dup}' ist mehrfach vorhanden – Zuordnung über Namen "
                    f"nicht eindeutig."
                )

        # ── 2. Fächer ohne Lehrkraft ─────────────────────────────────────
        for subj in self.subjects:
            if not self.teachers_for(subj.id):
                warnings.append(
                    f"Fach '{subj.name}': Keine qualifizierte Lehrkraft – "
                    f"alle Sektionen bleiben unbesetzt."
                )

        # ── 3. Unbekannte Fach-IDs ───────────────────────────────────────
        known_ids = {s.id for s in self.subjects}
        for teacher in self.teachers:
            unknown = [sid for sid in teacher.qualified_subjects if sid not in known_ids]
            if unknown:
                warnings.append(
                    f"Lehrkraft {teacher.id} ({teacher.name}): Unbekannte Fach-IDs "
                    f"{', '.join(unknown)} werden ignoriert."
                )

        # ── 4. Sonstiges ─────────────────────────────────────────────────
        idle = [t for t in self.teachers if not t.qualified_subjects]
        if idle:
            warnings.append(
                f"{len(idle)} Lehrkräfte ohne Qualifikation "
                f"({', '.join(t.id for t in idle[:6])}"
                f"{'...' if len(idle) > 6 else ''})."
            )
        if not self.sections:
            warnings.append("Keine Sektionen definiert – alle Zuteilungen bleiben leer.")

        return ReadinessReport(
            is_ready=len(errors) == 0,
            errors=errors,
            warnings=warnings,
        )

    # ─── Persistenz ────────────────────────────────────────────────────────

    def save_json(self, path: Path) -> None:
        """Speichert den kompletten Datensatz als JSON-Datei."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        now = datetime.now(timezone.utc)
        updated = self.model_copy(update={
            "modified_at": now,
            "created_at": self.created_at or now,
        })
        with open(path, "w", encoding="utf-8") as f:
            f.write(updated.model_dump_json(indent=2))

    def save_versioned(self, base_path: Path) -> Path:
        """Speichert mit Zeitstempel im Dateinamen."""
        base_path = Path(base_path)
        ts = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S")
        versioned = base_path.parent / f"{base_path.stem}_{ts}{base_path.suffix}"
        self.save_json(versioned)
        return versioned

    @classmethod
    def load_json(cls, path: Path) -> "UniversityData":
        """Lädt einen Datensatz aus einer JSON-Datei."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"JSON-Datei nicht gefunden: {path}")
        with open(path, "r", encoding="utf-8") as f:
            return cls.model_validate_json(f.read())
