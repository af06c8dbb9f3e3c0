"""Datenmodell für eine Lehrkraft (Pydantic v2)."""

from pydantic import BaseModel, field_validator


class Teacher(BaseModel):
    """Repräsentiert eine einzelne Lehrkraft (Faculty)."""

    id: str                                  # "FAC-017"
    name: str                                # "Dr. Anita Rao"
    qualified_subjects: list[str] = []       # Fach-IDs, ungeordnet, eindeutig
    department: str = ""
    email: str = ""
    streak: int = 0                          # Unterrichts-Serie in Tagen

    @field_validator("qualified_subjects")
    @classmethod
    def _unique_subjects(cls, v: list[str]) -> list[str]:
        # Reihenfolge der ersten Nennung bleibt erhalten
        return list(dict.fromkeys(v))

    def is_qualified_for(self, subject_id: str) -> bool:
        """True wenn die Lehrkraft das Fach unterrichten darf."""
        return subject_id in self.qualified_subjects

    @property
    def qualification_set(self) -> frozenset[str]:
        return frozenset(self.qualified_subjects)
