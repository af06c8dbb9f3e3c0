"""Tests für Konfiguration, Testdaten, Excel/CSV-Import und CLI."""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from config.schema import AppConfig, FakeDataConfig, GradeBand, GradingConfig
from config.defaults import SUBJECT_CATALOG, default_app_config, default_grading
from config.manager import ConfigManager
from data.fake_data import FakeDataGenerator
from data.excel_import import (
    EXAMPLE_ID,
    ExcelImportError,
    generate_template,
    import_from_csv,
    import_from_excel,
)
from models.university_data import UniversityData


# ─── DEFAULT-KONFIGURATION ────────────────────────────────────────────────────

class TestDefaultConfig:
    def test_default_app_config_valid(self):
        config = default_app_config()
        assert config.institution_name == "Muster-Universität"
        assert config.allocation.seed is None
        assert config.fake_data.semesters == [3, 5]

    def test_default_grading_bands(self):
        grading = default_grading()
        assert [b.grade for b in grading.bands] == ["O", "A", "B", "C", "D", "E"]
        assert grading.failing_grade == "F"
        assert grading.missing_grade == "N/A"

    def test_catalog_codes_unique(self):
        codes = [code for entries in SUBJECT_CATALOG.values() for code, _, _ in entries]
        assert len(codes) == len(set(codes))


class TestSchemaValidation:
    def test_duplicate_grade_rejected(self):
        with pytest.raises(Exception):
            GradingConfig(bands=[
                GradeBand(grade="A", min_percentage=80, grade_point=9),
                GradeBand(grade="a", min_percentage=70, grade_point=8),
            ])

    def test_equal_limits_rejected(self):
        with pytest.raises(Exception):
            GradingConfig(bands=[
                GradeBand(grade="A", min_percentage=70, grade_point=9),
                GradeBand(grade="B", min_percentage=70, grade_point=8),
            ])

    def test_percentage_range(self):
        with pytest.raises(Exception):
            GradeBand(grade="X", min_percentage=120, grade_point=1)

    def test_fake_data_limits(self):
        with pytest.raises(Exception):
            FakeDataConfig(sections_per_semester=0)
        with pytest.raises(Exception):
            FakeDataConfig(faculty_count=0)


# ─── CONFIG-MANAGER ───────────────────────────────────────────────────────────

class TestConfigManager:
    def _manager(self, tmp_path: Path) -> ConfigManager:
        return ConfigManager(
            config_path=tmp_path / "config" / "app_config.yaml",
            scenarios_dir=tmp_path / "scenarios",
        )

    def test_first_run(self, tmp_path):
        mgr = self._manager(tmp_path)
        assert mgr.first_run_check()
        mgr.save(default_app_config())
        assert not mgr.first_run_check()

    def test_save_and_load_roundtrip(self, tmp_path):
        mgr = self._manager(tmp_path)
        config = default_app_config().model_copy(update={"institution_name": "TU Test"})
        config.allocation.seed = 7
        mgr.save(config)

        loaded = mgr.load()
        assert loaded.institution_name == "TU Test"
        assert loaded.allocation.seed == 7
        assert loaded.grading == config.grading
        assert loaded.fake_data == config.fake_data

    def test_saved_yaml_has_comments(self, tmp_path):
        mgr = self._manager(tmp_path)
        mgr.save(default_app_config())
        text = mgr.DEFAULT_CONFIG.read_text(encoding="utf-8")
        assert text.startswith("# ====")
        assert "Notenskala" in text

    def test_load_missing_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            self._manager(tmp_path).load()

    def test_load_invalid_raises_value_error(self, tmp_path):
        mgr = self._manager(tmp_path)
        mgr.DEFAULT_CONFIG.parent.mkdir(parents=True)
        mgr.DEFAULT_CONFIG.write_text(
            "fake_data:\n  sections_per_semester: 99\n", encoding="utf-8")
        with pytest.raises(ValueError):
            mgr.load()

    def test_scenarios(self, tmp_path):
        mgr = self._manager(tmp_path)
        assert mgr.list_scenarios() == []

        config = default_app_config()
        assert mgr.save_scenario(config, "klein", description="Wenige Sektionen")
        assert mgr.save_scenario(config, "gross", overwrite=True)

        scenarios = mgr.list_scenarios()
        assert [s["name"] for s in scenarios] == ["gross", "klein"]
        klein = next(s for s in scenarios if s["name"] == "klein")
        assert klein["description"] == "Wenige Sektionen"
        assert isinstance(klein["created"], str)

        assert mgr.load_scenario("klein") == config

    def test_load_unknown_scenario(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            self._manager(tmp_path).load_scenario("fehlt")


class TestWizard:
    def test_defaults_accepted(self, monkeypatch):
        from rich.prompt import Confirm, FloatPrompt, IntPrompt, Prompt
        from config.wizard import run_wizard

        take_default = classmethod(lambda cls, *a, **kw: kw.get("default"))
        monkeypatch.setattr(Confirm, "ask", classmethod(lambda cls, *a, **kw: True))
        monkeypatch.setattr(Prompt, "ask", take_default)
        monkeypatch.setattr(IntPrompt, "ask", take_default)
        monkeypatch.setattr(FloatPrompt, "ask", take_default)

        config = run_wizard()
        assert config is not None
        assert config.allocation.seed == 42
        assert config.grading == default_grading()
        assert config.fake_data.faculty_count == 14

    def test_abort(self, monkeypatch):
        from rich.prompt import Confirm
        from config.wizard import run_wizard

        monkeypatch.setattr(Confirm, "ask", classmethod(lambda cls, *a, **kw: False))
        assert run_wizard() is None


# ─── TESTDATEN ────────────────────────────────────────────────────────────────

class TestFakeData:
    def test_counts(self):
        data = FakeDataGenerator(default_app_config(), seed=42).generate()
        # 2 Semester × 4 Fächer, 2 Fachbereiche × 2 Semester × 3 Sektionen
        assert len(data.subjects) == 8
        assert len(data.sections) == 12
        assert len(data.teachers) == 14
        assert data.sections[0].name == "CSE-3A"

    def test_same_seed_same_data(self):
        a = FakeDataGenerator(default_app_config(), seed=5).generate()
        b = FakeDataGenerator(default_app_config(), seed=5).generate()
        assert a.teachers == b.teachers
        assert a.results == b.results

    def test_unstaffed_subject(self):
        data = FakeDataGenerator(default_app_config(), seed=42).generate()
        assert not data.teachers_for(data.subjects[-1].id)
        for subj in data.subjects[:-1]:
            assert data.teachers_for(subj.id)

    def test_names_unique_and_limits(self):
        config = default_app_config()
        data = FakeDataGenerator(config, seed=1).generate()
        names = [t.name for t in data.teachers]
        assert len(names) == len(set(names))
        for t in data.teachers:
            assert len(t.qualified_subjects) <= config.fake_data.max_subjects_per_teacher

    def test_ready_for_allocation(self):
        data = FakeDataGenerator(default_app_config(), seed=3).generate()
        report = data.check_readiness()
        assert report.is_ready
        assert any("Keine qualifizierte Lehrkraft" in w for w in report.warnings)

    def test_records_generated(self):
        data = FakeDataGenerator(default_app_config(), seed=3).generate()
        assert data.results
        assert {r.exam_type for r in data.results} == {"internal", "external"}
        assert {a.role for a in data.attendance} == {"student", "faculty"}


# ─── EXCEL-/CSV-IMPORT ────────────────────────────────────────────────────────

def _fill_template(path: Path, teacher_subjects: str) -> None:
    import openpyxl

    generate_template(path)
    wb = openpyxl.load_workbook(str(path))
    wb["Fächer"].append(["SUB-DS", "Data Structures", "CS301", "theory", 3])
    wb["Fächer"].append(["SUB-OS", "Operating Systems", "CS501", "theory", 5])
    wb["Sektionen"].append(["SEC-CSE-3A", "CSE-3A", 3, "CSE"])
    wb["Sektionen"].append(["SEC-CSE-3B", "CSE-3B", 3, "CSE"])
    wb["Lehrkräfte"].append(["FAC-1", "Dr. Rao", teacher_subjects, "CSE", "rao@example.edu"])
    wb.save(str(path))


class TestExcelImport:
    def test_template_has_sheets(self, tmp_path):
        import openpyxl

        path = tmp_path / "vorlage.xlsx"
        generate_template(path)
        wb = openpyxl.load_workbook(str(path))
        assert wb.sheetnames == ["Fächer", "Sektionen", "Lehrkräfte"]
        assert wb["Fächer"].cell(row=2, column=1).value == EXAMPLE_ID

    def test_empty_template_imports_nothing(self, tmp_path):
        path = tmp_path / "vorlage.xlsx"
        generate_template(path)
        data, report = import_from_excel(path)
        assert data.subjects == [] and data.sections == [] and data.teachers == []
        assert report.is_ready

    def test_import_resolves_code_and_fuzzy_name(self, tmp_path):
        path = tmp_path / "daten.xlsx"
        _fill_template(path, "CS301, Operating Sytems")

        data, report = import_from_excel(path)
        assert [s.id for s in data.subjects] == ["SUB-DS", "SUB-OS"]
        assert data.subjects[1].semester == 5
        assert [c.name for c in data.sections] == ["CSE-3A", "CSE-3B"]
        assert data.teachers[0].qualified_subjects == ["SUB-DS", "SUB-OS"]
        assert any("Operating Systems" in w for w in report.warnings)

    def test_unknown_subject_is_error(self, tmp_path):
        path = tmp_path / "daten.xlsx"
        _fill_template(path, "Zzz")
        with pytest.raises(ExcelImportError):
            import_from_excel(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ExcelImportError):
            import_from_excel(tmp_path / "fehlt.xlsx")

    def test_missing_sheet(self, tmp_path):
        import openpyxl

        path = tmp_path / "leer.xlsx"
        openpyxl.Workbook().save(str(path))
        with pytest.raises(ExcelImportError, match="Fächer"):
            import_from_excel(path)


class TestCsvImport:
    def test_import_directory(self, tmp_path):
        (tmp_path / "faecher.csv").write_text(
            "ID,Name,Code,Typ,Semester\n"
            "SUB-DS,Data Structures,CS301,theory,3\n"
            "SUB-DL,Data Structures Lab,CS303,lab,3\n",
            encoding="utf-8")
        (tmp_path / "sektionen.csv").write_text(
            "ID,Name,Semester,Fachbereich\nSEC-A,CSE-3A,3,CSE\n", encoding="utf-8")
        (tmp_path / "lehrkraefte.csv").write_text(
            "ID,Name,Fächer,Fachbereich,E-Mail\n"
            "FAC-1,Dr. Rao,SUB-DS;CS303,CSE,rao@example.edu\n",
            encoding="utf-8")

        data, report = import_from_csv(tmp_path)
        assert data.subjects[1].is_lab
        assert data.sections[0].department == "CSE"
        assert data.teachers[0].qualified_subjects == ["SUB-DS", "SUB-DL"]
        assert report.is_ready

    def test_not_a_directory(self, tmp_path):
        f = tmp_path / "datei.csv"
        f.write_text("ID\n", encoding="utf-8")
        with pytest.raises(ExcelImportError):
            import_from_csv(f)


# ─── CLI ──────────────────────────────────────────────────────────────────────

class TestCli:
    @pytest.mark.parametrize("args", [
        [], ["setup"], ["config", "show"], ["generate"], ["template"], ["import"],
        ["validate"], ["allocate"], ["check"], ["apply"], ["records", "gpa"],
        ["records", "streaks"], ["scenario", "list"],
    ])
    def test_help(self, args):
        from main import cli

        result = CliRunner().invoke(cli, args + ["--help"])
        assert result.exit_code == 0

    def test_generate_allocate_check(self):
        from main import cli

        runner = CliRunner()
        with runner.isolated_filesystem():
            result = runner.invoke(cli, [
                "generate", "--seed", "7", "--export-json",
                "--json-path", "data.json", "--no-validate",
            ])
            assert result.exit_code == 0, result.output

            result = runner.invoke(cli, [
                "allocate", "--json-path", "data.json", "--seed", "1",
                "--output", "alloc.json", "--no-show",
            ])
            assert result.exit_code == 0, result.output
            saved = json.loads(Path("alloc.json").read_text(encoding="utf-8"))
            assert saved["seed"] == 1
            assert len(saved["allocation"]) == 8

            result = runner.invoke(cli, ["check", "alloc.json", "--json-path", "data.json"])
            assert result.exit_code == 0, result.output

    def test_check_detects_broken_allocation(self):
        from main import cli

        runner = CliRunner()
        with runner.isolated_filesystem():
            runner.invoke(cli, ["generate", "--export-json", "--json-path", "data.json",
                                "--no-validate"])
            runner.invoke(cli, ["allocate", "--json-path", "data.json",
                                "--output", "alloc.json", "--no-show"])
            saved = json.loads(Path("alloc.json").read_text(encoding="utf-8"))
            first_subject = next(iter(saved["allocation"]))
            del saved["allocation"][first_subject]
            Path("alloc.json").write_text(json.dumps(saved), encoding="utf-8")

            result = runner.invoke(cli, ["check", "alloc.json", "--json-path", "data.json"])
            assert result.exit_code == 1

    def test_allocate_save_is_idempotent(self):
        from main import cli

        runner = CliRunner()
        with runner.isolated_filesystem():
            runner.invoke(cli, ["generate", "--export-json", "--json-path", "data.json",
                                "--no-validate"])
            before = UniversityData.load_json(Path("data.json")).teachers
            result = runner.invoke(cli, ["allocate", "--json-path", "data.json",
                                         "--output", "alloc.json", "--no-show", "--save"])
            assert result.exit_code == 0, result.output
            after = UniversityData.load_json(Path("data.json")).teachers
            assert [t.qualified_subjects for t in after] == \
                [t.qualified_subjects for t in before]

    def test_allocate_without_data(self):
        from main import cli

        runner = CliRunner()
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["allocate", "--json-path", "fehlt.json"])
            assert result.exit_code == 1

    def test_invalid_data_file_exits_cleanly(self):
        from main import cli

        runner = CliRunner()
        with runner.isolated_filesystem():
            Path("data.json").write_text('{"subjects": "kaputt"}', encoding="utf-8")
            for args in (["allocate"], ["validate"], ["records", "gpa"]):
                result = runner.invoke(cli, args + ["--json-path", "data.json"])
                assert result.exit_code == 1
                assert isinstance(result.exception, SystemExit)

    def test_invalid_allocation_file_exits_cleanly(self):
        from main import cli

        runner = CliRunner()
        with runner.isolated_filesystem():
            runner.invoke(cli, ["generate", "--export-json", "--json-path", "data.json",
                                "--no-validate"])
            Path("alloc.json").write_text("not json", encoding="utf-8")
            for command in ("check", "apply"):
                result = runner.invoke(cli, [command, "alloc.json", "--json-path", "data.json"])
                assert result.exit_code == 1
                assert isinstance(result.exception, SystemExit)

    def test_allocate_refuses_duplicate_teacher_names(self):
        from main import cli

        runner = CliRunner()
        with runner.isolated_filesystem():
            runner.invoke(cli, ["generate", "--export-json", "--json-path", "data.json",
                                "--no-validate"])
            data = UniversityData.load_json(Path("data.json"))
            teachers = list(data.teachers)
            teachers[1] = teachers[1].model_copy(update={"name": teachers[0].name})
            data.model_copy(update={"teachers": teachers}).save_json(Path("data.json"))

            result = runner.invoke(cli, ["allocate", "--json-path", "data.json",
                                         "--output", "alloc.json", "--no-show"])
            assert result.exit_code == 1
            assert not Path("alloc.json").exists()

    def test_apply_edited_allocation_with_backup(self):
        from allocation import AllocationRun
        from main import cli

        runner = CliRunner()
        with runner.isolated_filesystem():
            runner.invoke(cli, ["generate", "--export-json", "--json-path", "data.json",
                                "--no-validate"])
            data = UniversityData.load_json(Path("data.json"))
            idle = next(t for t in data.teachers if not t.qualified_subjects)
            subject = data.subjects[0]
            AllocationRun(allocation={
                subject.name: {idle.name: [c.name for c in data.sections]},
            }).save_json(Path("alloc.json"))

            result = runner.invoke(cli, ["apply", "alloc.json", "--json-path", "data.json"])
            assert result.exit_code == 0, result.output

            reloaded = UniversityData.load_json(Path("data.json"))
            updated = next(t for t in reloaded.teachers if t.id == idle.id)
            assert updated.qualified_subjects == [subject.id]
            backups = list(Path("backups").glob("data_*.json"))
            assert len(backups) == 1
            # Sicherung enthält den Stand vor dem Zurückschreiben
            saved = UniversityData.load_json(backups[0])
            assert next(t for t in saved.teachers if t.id == idle.id).qualified_subjects == []

            # Zweiter Lauf ändert nichts und legt keine weitere Sicherung an
            result = runner.invoke(cli, ["apply", "alloc.json", "--json-path", "data.json"])
            assert result.exit_code == 0, result.output
            assert len(list(Path("backups").glob("*.json"))) == 1

    def test_apply_without_backup(self):
        from allocation import AllocationRun
        from main import cli

        runner = CliRunner()
        with runner.isolated_filesystem():
            runner.invoke(cli, ["generate", "--export-json", "--json-path", "data.json",
                                "--no-validate"])
            data = UniversityData.load_json(Path("data.json"))
            idle = next(t for t in data.teachers if not t.qualified_subjects)
            AllocationRun(allocation={
                data.subjects[0].name: {idle.name: [data.sections[0].name]},
            }).save_json(Path("alloc.json"))

            result = runner.invoke(cli, ["apply", "alloc.json", "--json-path", "data.json",
                                         "--no-backup"])
            assert result.exit_code == 0, result.output
            assert not Path("backups").exists()

    def test_records(self):
        from main import cli

        runner = CliRunner()
        with runner.isolated_filesystem():
            runner.invoke(cli, ["generate", "--export-json", "--json-path", "data.json",
                                "--no-validate"])
            assert runner.invoke(cli, ["records", "gpa", "--json-path", "data.json"]).exit_code == 0
            result = runner.invoke(cli, ["records", "streaks", "--json-path", "data.json",
                                         "--save"])
            assert result.exit_code == 0, result.output
