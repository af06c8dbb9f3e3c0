"""Tests für das Rückschreiben der Verteilung in die Qualifikationen."""

import pytest

from allocation.allocator import NO_TEACHER_ASSIGNED, WorkloadAllocator
from allocation.persistence import (
    JsonDataRepository,
    apply_allocation,
    merge_allocation,
)
from models.subject import Subject
from models.class_section import ClassSection
from models.teacher import Teacher
from models.university_data import UniversityData


def _subjects() -> list[Subject]:
    return [
        Subject(id="SUB-MA", name="Mathematics"),
        Subject(id="SUB-PH", name="Physics"),
        Subject(id="SUB-CH", name="Chemistry"),
    ]


def _teachers() -> list[Teacher]:
    return [
        Teacher(id="FAC-1", name="Dr. Rao", qualified_subjects=["SUB-MA"]),
        Teacher(id="FAC-2", name="Dr. Iyer", qualified_subjects=["SUB-PH", "SUB-OLD"]),
        Teacher(id="FAC-3", name="Ms. Nair", qualified_subjects=[]),
    ]


def _data() -> UniversityData:
    return UniversityData(
        subjects=_subjects(),
        sections=[ClassSection(id=f"SEC-{n}", name=n) for n in ("A", "B", "C")],
        teachers=_teachers(),
    )


# ─── merge_allocation ─────────────────────────────────────────────────────────

class TestMergeAllocation:
    def test_adds_new_subject(self):
        allocation = {"Chemistry": {"Ms. Nair": ["A", "B"]}}
        result = merge_allocation(allocation, _subjects(), _teachers())

        nair = next(t for t in result.teachers if t.id == "FAC-3")
        assert nair.qualified_subjects == ["SUB-CH"]
        assert result.changed_ids == ["FAC-3"]

    def test_existing_qualifications_are_kept(self):
        """Mengenvereinigung: nichts wird entfernt, auch unbekannte IDs nicht."""
        allocation = {"Mathematics": {"Dr. Iyer": ["A"]}}
        result = merge_allocation(allocation, _subjects(), _teachers())

        iyer = next(t for t in result.teachers if t.id == "FAC-2")
        assert set(iyer.qualified_subjects) == {"SUB-PH", "SUB-OLD", "SUB-MA"}

    def test_unchanged_teachers_not_reported(self):
        allocation = {"Mathematics": {"Dr. Rao": ["A", "B", "C"]}}
        result = merge_allocation(allocation, _subjects(), _teachers())
        assert result.changed_ids == []
        assert not result.has_changes

    def test_sentinel_is_skipped(self):
        allocation = {"Chemistry": {NO_TEACHER_ASSIGNED: ["A", "B", "C"]}}
        result = merge_allocation(allocation, _subjects(), _teachers())
        assert result.changed_ids == []
        assert result.skipped == []

    def test_unknown_names_are_skipped(self):
        allocation = {
            "Astronomy": {"Dr. Rao": ["A"]},
            "Physics": {"Prof. Unknown": ["B"]},
        }
        result = merge_allocation(allocation, _subjects(), _teachers())
        assert result.changed_ids == []
        assert "Fach 'Astronomy'" in result.skipped
        assert "Lehrkraft 'Prof. Unknown'" in result.skipped

    def test_inputs_not_mutated(self):
        teachers = _teachers()
        merge_allocation({"Chemistry": {"Ms. Nair": ["A"]}}, _subjects(), teachers)
        assert teachers[2].qualified_subjects == []

    def test_idempotent(self):
        allocation = {"Chemistry": {"Ms. Nair": ["A"], "Dr. Rao": ["B"]}}
        first = merge_allocation(allocation, _subjects(), _teachers())
        second = merge_allocation(allocation, _subjects(), first.teachers)
        assert sorted(first.changed_ids) == ["FAC-1", "FAC-3"]
        assert second.changed_ids == []

    def test_allocator_output_round_trips(self):
        data = _data()
        allocation = WorkloadAllocator(seed=2).allocate(data.subjects, data.sections, data.teachers)
        result = merge_allocation(allocation, data.subjects, data.teachers)
        # Allokierte Lehrkräfte waren bereits qualifiziert → keine Änderung
        assert result.changed_ids == []
        assert result.skipped == []


# ─── JsonDataRepository ───────────────────────────────────────────────────────

class TestJsonDataRepository:
    def test_apply_allocation_writes_changes(self, tmp_path):
        path = tmp_path / "data.json"
        _data().save_json(path)
        repo = JsonDataRepository(path)

        result = apply_allocation({"Chemistry": {"Ms. Nair": ["A"]}}, repo)

        assert result.changed_ids == ["FAC-3"]
        reloaded = UniversityData.load_json(path)
        nair = next(t for t in reloaded.teachers if t.id == "FAC-3")
        assert nair.qualified_subjects == ["SUB-CH"]
        # Übrige Lehrkräfte unverändert
        rao = next(t for t in reloaded.teachers if t.id == "FAC-1")
        assert rao.qualified_subjects == ["SUB-MA"]

    def test_no_changes_leaves_file_untouched(self, tmp_path):
        path = tmp_path / "data.json"
        _data().save_json(path)
        before = path.read_text(encoding="utf-8")

        repo = JsonDataRepository(path)
        written = repo.save_teachers(_teachers(), [])

        assert written == 0
        assert path.read_text(encoding="utf-8") == before

    def test_repeated_apply_is_idempotent(self, tmp_path):
        path = tmp_path / "data.json"
        _data().save_json(path)
        repo = JsonDataRepository(path)
        allocation = {"Chemistry": {"Ms. Nair": ["A"], "Dr. Iyer": ["B", "C"]}}

        first = apply_allocation(allocation, repo)
        before = path.read_text(encoding="utf-8")
        second = apply_allocation(allocation, repo)

        assert sorted(first.changed_ids) == ["FAC-2", "FAC-3"]
        assert second.changed_ids == []
        assert path.read_text(encoding="utf-8") == before

    def test_load_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            JsonDataRepository(tmp_path / "fehlt.json").load()
