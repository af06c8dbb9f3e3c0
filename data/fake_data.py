"""Testdaten-Generator für die Lehrauftrags-Verteilung.

Erzeugt reproduzierbare Fake-Daten mit absichtlichen Engpässen.

Absichtliche Engpässe:
  1. Unbesetzte Fächer: die letzten `unstaffed_subjects` Fächer des Katalogs
     bekommen keine Lehrkraft → Sammeltopf "No Teacher Assigned"
  2. Einzelbesetzung: jedes besetzte Fach hat mindestens eine Lehrkraft,
     manche genau eine (trägt dann alle Sektionen)
  3. Lehrkräfte ohne Qualifikation, wenn faculty_count > Bedarf

Garantien:
  - Namen von Fächern, Sektionen und Lehrkräften sind eindeutig
  - Gleicher Seed → identischer Datensatz
"""

import random
import string
from datetime import date, timedelta
from typing import Optional

from config.schema import AppConfig
from config.defaults import SUBJECT_CATALOG
from models.subject import Subject
from models.class_section import ClassSection
from models.teacher import Teacher
from models.records import AttendanceRecord, ResultRecord
from models.university_data import UniversityData

# ─── Namens-Listen ────────────────────────────────────────────────────────────

_FIRST_NAMES = [
    "Aarav", "Ananya", "Arjun", "Diya", "Farhan", "Gauri", "Harish", "Ishita",
    "Karthik", "Lakshmi", "Manoj", "Meera", "Nikhil", "Pooja", "Rahul",
    "Rohini", "Sanjay", "Shreya", "Suresh", "Tanvi", "Varun", "Zoya",
]

_LAST_NAMES = [
    "Sharma", "Iyer", "Reddy", "Nair", "Gupta", "Menon", "Patel", "Rao",
    "Das", "Kulkarni", "Verma", "Chatterjee", "Joshi", "Pillai", "Singh",
    "Bhat", "Mehta", "Kapoor", "Shetty", "Mishra",
]

_TITLES = ["Dr.", "Prof.", "Dr.", "Mr.", "Ms."]


class FakeDataGenerator:
    """Generiert vollständige Testdaten auf Basis der AppConfig."""

    def __init__(self, config: AppConfig, seed: Optional[int] = None) -> None:
        self.config = config
        self.fc = config.fake_data
        self.rng = random.Random(seed)
        self._used_names: set[str] = set()

    # ─── Fächer ───────────────────────────────────────────────────────────────

    def _generate_subjects(self) -> list[Subject]:
        """Erzeugt alle Fächer der konfigurierten Semester aus dem SUBJECT_CATALOG."""
        subjects = []
        for sem in self.fc.semesters:
            for code, name, subject_type in SUBJECT_CATALOG.get(sem, []):
                subjects.append(Subject(
                    id=f"SUB-{code}",
                    name=name,
                    code=code,
                    subject_type=subject_type,
                    semester=sem,
                ))
        return subjects

    # ─── Sektionen ────────────────────────────────────────────────────────────

    def _generate_sections(self) -> list[ClassSection]:
        """Erzeugt Sektionen pro Fachbereich und Semester (CSE-3A, CSE-3B, ...)."""
        sections = []
        labels = string.ascii_uppercase[:self.fc.sections_per_semester]
        for dept in self.fc.departments:
            for sem in self.fc.semesters:
                for label in labels:
                    name = f"{dept}-{sem}{label}"
                    sections.append(ClassSection(
                        id=f"SEC-{name}",
                        name=name,
                        semester=sem,
                        department=dept,
                    ))
        return sections

    # ─── Lehrkräfte ───────────────────────────────────────────────────────────

    def _unique_name(self) -> str:
        """Zufälliger, noch nicht vergebener Name mit Titel."""
        for _ in range(200):
            name = (f"{self.rng.choice(_TITLES)} {self.rng.choice(_FIRST_NAMES)} "
                    f"{self.rng.choice(_LAST_NAMES)}")
            if name not in self._used_names:
                self._used_names.add(name)
                return name
        # Fallback: fortlaufende Nummer
        name = f"Faculty {len(self._used_names) + 1}"
        self._used_names.add(name)
        return name

    def _generate_teachers(self, subjects: list[Subject]) -> list[Teacher]:
        """Erzeugt Lehrkräfte; jedes besetzte Fach bekommt mindestens eine.

        Die letzten `unstaffed_subjects` Fächer bleiben unbesetzt.
        """
        n_unstaffed = min(self.fc.unstaffed_subjects, len(subjects))
        staffed = subjects[:len(subjects) - n_unstaffed]
        departments = self.fc.departments or ["GEN"]

        teachers: list[Teacher] = []
        quals: list[list[str]] = [[] for _ in range(self.fc.faculty_count)]

        # Grundversorgung: Fächer reihum verteilen
        for i, subj in enumerate(staffed):
            quals[i % self.fc.faculty_count].append(subj.id)

        # Zusatzqualifikationen zufällig, höchstens max_subjects_per_teacher
        for q in quals:
            if not q:
                continue
            extra = self.rng.randint(0, self.fc.max_subjects_per_teacher - 1)
            for subj in self.rng.sample(staffed, min(extra, len(staffed))):
                if subj.id not in q and len(q) < self.fc.max_subjects_per_teacher:
                    q.append(subj.id)

        for i, q in enumerate(quals):
            name = self._unique_name()
            handle = name.split()[-2].lower() + "." + name.split()[-1].lower()
            teachers.append(Teacher(
                id=f"FAC-{i + 1:03d}",
                name=name,
                qualified_subjects=q,
                department=departments[i % len(departments)],
                email=f"{handle}@example.edu",
            ))
        return teachers

    # ─── Ergebnisse & Anwesenheit ─────────────────────────────────────────────

    def _generate_results(
        self, subjects: list[Subject], sections: list[ClassSection]
    ) -> tuple[list[ResultRecord], list[str]]:
        """Ergebnisse aller Studierenden für die Fächer ihres Semesters."""
        results: list[ResultRecord] = []
        student_ids: list[str] = []
        for sec in sections:
            for n in range(1, self.fc.students_per_section + 1):
                sid = f"STU-{sec.name}-{n:02d}"
                student_ids.append(sid)
                for subj in subjects:
                    if subj.semester != sec.semester:
                        continue
                    for exam_type in ("internal", "external"):
                        total = 50 if exam_type == "internal" else 100
                        marks = round(self.rng.uniform(0.3, 1.0) * total)
                        results.append(ResultRecord(
                            student_id=sid,
                            subject_id=subj.id,
                            semester=subj.semester or 1,
                            marks=marks,
                            total_marks=total,
                            exam_type=exam_type,
                        ))
        return results, student_ids

    def _generate_attendance(
        self, teachers: list[Teacher], student_ids: list[str], days: int = 14
    ) -> list[AttendanceRecord]:
        """Anwesenheit der letzten `days` Tage (zufällige Lücken)."""
        today = date.today()
        records: list[AttendanceRecord] = []
        for t in teachers:
            if not t.qualified_subjects:
                continue
            for d in range(days):
                if self.rng.random() < 0.85:
                    records.append(AttendanceRecord(
                        person_id=t.id, date=today - timedelta(days=d), role="faculty"))
        for sid in student_ids:
            for d in range(days):
                status = "present" if self.rng.random() < 0.8 else "absent"
                records.append(AttendanceRecord(
                    person_id=sid, date=today - timedelta(days=d), status=status))
        return records

    def generate(self) -> UniversityData:
        """Erzeugt den vollständigen Datensatz als UniversityData-Objekt."""
        subjects = self._generate_subjects()
        sections = self._generate_sections()
        teachers = self._generate_teachers(subjects)
        results, student_ids = self._generate_results(subjects, sections)
        attendance = self._generate_attendance(teachers, student_ids)
        return UniversityData(
            subjects=subjects,
            sections=sections,
            teachers=teachers,
            results=results,
            attendance=attendance,
            institution_name=self.config.institution_name,
        )

    # ─── Ausgabe ──────────────────────────────────────────────────────────────

    def print_summary(self, data: UniversityData) -> None:
        """Gibt eine Rich-Tabelle mit Übersicht der erzeugten Daten aus."""
        from rich.console import Console
        from rich.table import Table
        from rich import box

        console = Console()
        table = Table(title="Erzeugte Testdaten", box=box.ROUNDED)
        table.add_column("Kategorie", style="bold cyan")
        table.add_column("Anzahl", justify="right")
        table.add_column("Details")

        idle = sum(1 for t in data.teachers if not t.qualified_subjects)
        unstaffed = sum(1 for s in data.subjects if not data.teachers_for(s.id))
        table.add_row("Fächer", str(len(data.subjects)), f"{unstaffed} ohne Lehrkraft")
        table.add_row("Sektionen", str(len(data.sections)),
                      f"{len(set(c.department for c in data.sections))} Fachbereiche")
        table.add_row("Lehrkräfte", str(len(data.teachers)), f"{idle} ohne Qualifikation")
        table.add_row("Ergebnisse", str(len(data.results)), "")
        table.add_row("Anwesenheit", str(len(data.attendance)), "letzte 14 Tage")

        console.print(table)
