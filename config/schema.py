from pydantic import BaseModel, Field, model_validator
from typing import Optional


# ─── VERTEILUNG ───

class AllocationConfig(BaseModel):
    """Einstellungen für die Lehrauftrags-Verteilung."""
    # Fester Zufalls-Seed für reproduzierbare Verteilungen (None = jedes Mal neu mischen)
    seed: Optional[int] = Field(None,
        description="Zufalls-Seed (leer = jedes Mal neu mischen)")
    # Standard-Pfad des Datensatzes
    data_path: str = Field("output/university_data.json",
        description="Pfad zur Datensatz-JSON")
    # Standard-Pfad der zuletzt erzeugten Verteilung
    allocation_path: str = Field("output/allocation.json",
        description="Pfad zur Verteilungs-JSON")


# ─── NOTEN ───

class GradeBand(BaseModel):
    """Eine Notenstufe: ab min_percentage gilt grade mit grade_point Punkten."""
    # Bezeichnung der Note, z.B. "O", "A"
    grade: str
    # Untergrenze in Prozent (inklusive)
    min_percentage: float = Field(ge=0.0, le=100.0)
    # Notenpunkte für die GPA-Berechnung
    grade_point: int = Field(ge=0)


class GradingConfig(BaseModel):
    """Notenskala für Ergebnisse und GPA-Berechnung.

    Die Stufen werden von oben nach unten geprüft; die erste Stufe, deren
    Untergrenze erreicht ist, gilt. Unterhalb aller Stufen: failing_grade.
    """
    # Notenstufen, absteigend nach Untergrenze
    bands: list[GradeBand] = Field(
        default_factory=lambda: [
            GradeBand(grade="O", min_percentage=90, grade_point=10),
            GradeBand(grade="A", min_percentage=80, grade_point=9),
            GradeBand(grade="B", min_percentage=70, grade_point=8),
            GradeBand(grade="C", min_percentage=60, grade_point=7),
            GradeBand(grade="D", min_percentage=50, grade_point=6),
            GradeBand(grade="E", min_percentage=40, grade_point=5),
        ],
        description="Notenstufen (absteigend)")
    # Note unterhalb der letzten Stufe (0 Punkte)
    failing_grade: str = Field("F",
        description="Note unterhalb aller Stufen")
    # Anzeige bei fehlenden Punkten
    missing_grade: str = Field("N/A",
        description="Note bei fehlenden Punkten")

    @model_validator(mode='after')
    def validate_bands(self):
        """Untergrenzen müssen streng absteigen, Noten eindeutig sein."""
        limits = [b.min_percentage for b in self.bands]
        if any(a <= b for a, b in zip(limits, limits[1:])):
            raise ValueError(
                f"Notenstufen müssen streng absteigend sein: {limits}")
        names = [b.grade.upper() for b in self.bands]
        if len(set(names)) != len(names):
            raise ValueError(f"Notenbezeichnungen doppelt: {names}")
        return self


# ─── TESTDATEN ───

class FakeDataConfig(BaseModel):
    """Parameter für den Testdaten-Generator."""
    # Fachbereiche, für die Sektionen erzeugt werden
    departments: list[str] = Field(
        default=["CSE", "ECE"],
        description="Fachbereiche")
    # Semester, für die Sektionen und Fächer erzeugt werden
    semesters: list[int] = Field(default=[3, 5],
        description="Semester")
    # Sektionen pro Fachbereich und Semester
    sections_per_semester: int = Field(3, ge=1, le=10,
        description="Sektionen pro Fachbereich/Semester")
    # Anzahl Lehrkräfte
    faculty_count: int = Field(14, ge=1,
        description="Anzahl Lehrkräfte")
    # Maximale Anzahl Fächer pro Lehrkraft
    max_subjects_per_teacher: int = Field(3, ge=1, le=6,
        description="Max. Fächer pro Lehrkraft")
    # Fächer, die absichtlich ohne Lehrkraft bleiben
    unstaffed_subjects: int = Field(1, ge=0,
        description="Fächer ohne Lehrkraft (Engpass)")
    # Studierende pro Sektion (für Ergebnisse und Anwesenheit)
    students_per_section: int = Field(4, ge=0, le=60,
        description="Studierende pro Sektion")


# ─── GESAMT-CONFIG ───

class AppConfig(BaseModel):
    """Gesamtkonfiguration."""
    # Name der Hochschule
    institution_name: str = Field("Muster-Universität",
        description="Name der Hochschule")
    # Verteilungs-Einstellungen
    allocation: AllocationConfig = Field(default_factory=AllocationConfig)
    # Notenskala
    grading: GradingConfig = Field(default_factory=GradingConfig)
    # Testdaten-Parameter
    fake_data: FakeDataConfig = Field(default_factory=FakeDataConfig)
