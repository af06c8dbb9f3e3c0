"""Datenmodell für ein Lehrfach (Pydantic v2)."""

from typing import Literal, Optional

from pydantic import BaseModel


class Subject(BaseModel):
    """Repräsentiert ein Fach, das pro Sektion von genau einer Lehrkraft unterrichtet wird."""

    id: str                                  # "SUB-CS301"
    name: str                                # "Datenstrukturen"
    code: str = ""                           # "CS301"
    subject_type: Literal["theory", "lab"] = "theory"
    semester: Optional[int] = None

    @property
    def is_lab(self) -> bool:
        """True für Praktikumsfächer."""
        return self.subject_type == "lab"
