"""Datenmodell für eine Sektion (Pydantic v2)."""

from typing import Optional

from pydantic import BaseModel


class ClassSection(BaseModel):
    """Eine Lerngruppe, die als Einheit unterrichtet wird (z.B. "CSE-3A")."""

    id: str                          # "SEC-CSE-3A"
    name: str                        # "CSE-3A"
    semester: Optional[int] = None
    department: Optional[str] = None
