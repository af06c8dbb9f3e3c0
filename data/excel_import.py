"""Excel-Import und Template-Generator für echte Hochschuldaten.

Template-Generator: Leere Excel-Vorlage mit Kopfzeilen und Beispielzeilen.
Import-Funktion:    Excel/CSV → UniversityData mit Validierung und ReadinessReport.
"""

import csv
import difflib
from pathlib import Path
from typing import Optional

from config.defaults import SUBJECT_CATALOG
from models.subject import Subject
from models.class_section import ClassSection
from models.teacher import Teacher
from models.university_data import UniversityData, ReadinessReport


class ExcelImportError(Exception):
    """Fehler beim Excel-Import."""


# Beispielzeilen in der Vorlage tragen diese ID und werden beim Import übersprungen
EXAMPLE_ID = "BEISPIEL"

_SUBJECT_HEADERS = ["ID", "Name", "Code", "Typ (theory/lab)", "Semester"]
_SECTION_HEADERS = ["ID", "Name", "Semester", "Fachbereich"]
_TEACHER_HEADERS = ["ID", "Name", "Fächer (kommagetrennt)", "Fachbereich", "E-Mail"]


def _fuzzy_subject(name: str, known: list[str]) -> Optional[str]:
    """Fuzzy-Matching: Findet das ähnlichste bekannte Fach."""
    matches = difflib.get_close_matches(name, known, n=1, cutoff=0.6)
    return matches[0] if matches else None


def _parse_int(raw: str) -> Optional[int]:
    raw = raw.strip()
    if not raw:
        return None
    return int(float(raw))


# ─── TEMPLATE-GENERATOR ───────────────────────────────────────────────────────

def generate_template(path: Path) -> None:
    """Erzeugt eine leere Excel-Vorlage.

    Blätter:
      - Fächer:      ID, Name, Code, Typ, Semester
      - Sektionen:   ID, Name, Semester, Fachbereich
      - Lehrkräfte:  ID, Name, Fächer (Namen, Codes oder IDs), Fachbereich, E-Mail
    Jedes Blatt enthält eine kursive Beispielzeile mit ID "BEISPIEL".
    """
    import openpyxl
    from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
    from openpyxl.utils import get_column_letter
    from openpyxl.worksheet.datavalidation import DataValidation

    wb = openpyxl.Workbook()

    # ── Hilfs-Styles ─────────────────────────────────────────────────────────
    hdr_font = Font(bold=True, color="FFFFFF", size=11)
    hdr_fill = PatternFill("solid", fgColor="2E6DA4")
    ex_font = Font(italic=True, color="888888")
    ex_fill = PatternFill("solid", fgColor="F5F5F5")
    center = Alignment(horizontal="center", vertical="center")
    thin = Side(style="thin", color="BBBBBB")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)

    def style_header(cell):
        cell.font = hdr_font
        cell.fill = hdr_fill
        cell.alignment = center
        cell.border = border

    def style_example(cell):
        cell.font = ex_font
        cell.fill = ex_fill
        cell.border = border

    def write_sheet(ws, headers: list[str], widths: list[int], example: list):
        for col, h in enumerate(headers, 1):
            style_header(ws.cell(row=1, column=col, value=h))
        for col, w in enumerate(widths, 1):
            ws.column_dimensions[get_column_letter(col)].width = w
        for col, val in enumerate(example, 1):
            style_example(ws.cell(row=2, column=col, value=val))
        ws.freeze_panes = "A2"

    # ── Blatt 1: Fächer ───────────────────────────────────────────────────────
    ws_f = wb.active
    ws_f.title = "Fächer"
    code, name, typ = SUBJECT_CATALOG[3][0]
    write_sheet(ws_f, _SUBJECT_HEADERS, [16, 34, 10, 16, 10],
                [EXAMPLE_ID, name, code, typ, 3])
    dv_typ = DataValidation(type="list", formula1='"theory,lab"', allow_blank=True)
    dv_typ.sqref = "D3:D500"
    ws_f.add_data_validation(dv_typ)

    # ── Blatt 2: Sektionen ────────────────────────────────────────────────────
    ws_s = wb.create_sheet("Sektionen")
    write_sheet(ws_s, _SECTION_HEADERS, [16, 16, 10, 14],
                [EXAMPLE_ID, "CSE-3A", 3, "CSE"])

    # ── Blatt 3: Lehrkräfte ───────────────────────────────────────────────────
    ws_l = wb.create_sheet("Lehrkräfte")
    write_sheet(ws_l, _TEACHER_HEADERS, [12, 28, 44, 14, 28],
                [EXAMPLE_ID, "Dr. Anita Rao", f"{name}, MA301", "CSE",
                 "anita.rao@example.edu"])

    # ── Speichern ─────────────────────────────────────────────────────────────
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(str(path))


# ─── IMPORT ───────────────────────────────────────────────────────────────────

class ExcelImporter:
    """Importiert Hochschuldaten aus einer Excel-Vorlage."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._wb = None
        self._errors: list[str] = []
        self._warnings: list[str] = []

    def _open(self):
        try:
            import openpyxl
            self._wb = openpyxl.load_workbook(
                str(self.path), read_only=True, data_only=True
            )
        except FileNotFoundError:
            raise ExcelImportError(f"Datei nicht gefunden: {self.path}")
        except Exception as e:
            raise ExcelImportError(f"Fehler beim Öffnen der Excel-Datei: {e}")

    def _get_sheet(self, name: str):
        if self._wb is None:
            self._open()
        for sn in self._wb.sheetnames:
            if sn.strip().lower() == name.strip().lower():
                return self._wb[sn]
        return None

    def _require_sheet(self, name: str) -> list[dict]:
        sheet = self._get_sheet(name)
        if sheet is None:
            raise ExcelImportError(f"Tabellenblatt '{name}' nicht gefunden.")
        return self._sheet_rows(sheet)

    def _sheet_rows(self, sheet) -> list[dict]:
        """Tabellenblatt → Liste von Dicts (erste Zeile = Header)."""
        rows = list(sheet.iter_rows(values_only=True))
        if not rows:
            return []
        headers = [
            str(h).strip().lower() if h is not None else f"col_{i}"
            for i, h in enumerate(rows[0])
        ]
        result = []
        for row in rows[1:]:
            if all(v is None or v == "" for v in row):
                continue
            result.append({
                headers[i]: (str(v).strip() if v is not None else "")
                for i, v in enumerate(row)
                if i < len(headers)
            })
        return result

    # ── Fächer ──────────────────────────────────────────────────────────────

    def import_subjects(self) -> list[Subject]:
        rows = self._require_sheet("Fächer")
        subjects = []
        used_ids: set[str] = set()
        for i, row in enumerate(rows, 2):
            sid = row.get("id", "").strip()
            name = row.get("name", "").strip()
            if not sid or sid == EXAMPLE_ID:
                continue
            if not name:
                self._errors.append(f"Fächer, Zeile {i}: Name fehlt.")
                continue
            if sid in used_ids:
                self._errors.append(f"Fächer, Zeile {i}: Doppelte ID '{sid}'")
                continue
            used_ids.add(sid)

            typ = row.get("typ (theory/lab)", row.get("typ", "theory")).strip().lower() or "theory"
            if typ not in ("theory", "lab"):
                self._warnings.append(f"Fächer, Zeile {i}: Typ '{typ}' unbekannt → theory")
                typ = "theory"
            try:
                semester = _parse_int(row.get("semester", ""))
            except ValueError:
                self._warnings.append(
                    f"Fächer, Zeile {i}: Ungültiges Semester '{row.get('semester')}' → leer")
                semester = None

            subjects.append(Subject(
                id=sid, name=name, code=row.get("code", "").strip(),
                subject_type=typ, semester=semester,
            ))
        return subjects

    # ── Sektionen ───────────────────────────────────────────────────────────

    def import_sections(self) -> list[ClassSection]:
        rows = self._require_sheet("Sektionen")
        sections = []
        used_ids: set[str] = set()
        for i, row in enumerate(rows, 2):
            sid = row.get("id", "").strip()
            name = row.get("name", "").strip()
            if not sid or sid == EXAMPLE_ID:
                continue
            if not name:
                self._errors.append(f"Sektionen, Zeile {i}: Name fehlt.")
                continue
            if sid in used_ids:
                self._errors.append(f"Sektionen, Zeile {i}: Doppelte ID '{sid}'")
                continue
            used_ids.add(sid)
            try:
                semester = _parse_int(row.get("semester", ""))
            except ValueError:
                self._warnings.append(
                    f"Sektionen, Zeile {i}: Ungültiges Semester '{row.get('semester')}' → leer")
                semester = None
            sections.append(ClassSection(
                id=sid, name=name, semester=semester,
                department=row.get("fachbereich", "").strip() or None,
            ))
        return sections

    # ── Lehrkräfte ──────────────────────────────────────────────────────────

    def _resolve_subject(self, raw: str, subjects: list[Subject], row_id: str) -> Optional[str]:
        """Fach per ID, Code oder Name auflösen; Tippfehler per Fuzzy-Matching."""
        token = raw.strip()
        if not token:
            return None
        for s in subjects:
            if token in (s.id, s.code, s.name):
                return s.id
        names = [s.name for s in subjects]
        match = _fuzzy_subject(token, names)
        if match:
            self._warnings.append(
                f"{row_id}: Fach '{token}' unbekannt → meinten Sie '{match}'? "
                f"Wird als '{match}' importiert."
            )
            return next(s.id for s in subjects if s.name == match)
        self._errors.append(
            f"{row_id}: Unbekanntes Fach '{token}'. "
            f"Ähnliche Fächer: {', '.join(difflib.get_close_matches(token, names, n=3, cutoff=0.4)) or 'keine'}"
        )
        return None

    def import_teachers(self, subjects: list[Subject]) -> list[Teacher]:
        rows = self._require_sheet("Lehrkräfte")
        teachers = []
        used_ids: set[str] = set()
        for i, row in enumerate(rows, 2):
            tid = row.get("id", "").strip()
            name = row.get("name", "").strip()
            if not tid or tid == EXAMPLE_ID:
                continue
            if not name:
                self._errors.append(f"Lehrkräfte, Zeile {i}: Name fehlt.")
                continue
            if tid in used_ids:
                self._errors.append(f"Lehrkräfte, Zeile {i}: Doppelte ID '{tid}'")
                continue
            used_ids.add(tid)

            raw = row.get("fächer (kommagetrennt)", row.get("fächer", ""))
            qualified = []
            for item in raw.replace(";", ",").split(","):
                sid = self._resolve_subject(item, subjects, f"Zeile {i}, ID {tid}")
                if sid:
                    qualified.append(sid)

            teachers.append(Teacher(
                id=tid, name=name, qualified_subjects=qualified,
                department=row.get("fachbereich", "").strip(),
                email=row.get("e-mail", row.get("email", "")).strip(),
            ))
        return teachers

    def import_all(self) -> tuple[UniversityData, ReadinessReport]:
        """Importiert alle Blätter → UniversityData + ReadinessReport."""
        self._open()
        self._errors = []
        self._warnings = []

        subjects = self.import_subjects()
        sections = self.import_sections()
        teachers = self.import_teachers(subjects)

        if self._errors:
            raise ExcelImportError(
                f"Import mit {len(self._errors)} Fehlern:\n"
                + "\n".join(f"  • {e}" for e in self._errors)
            )

        data = UniversityData(subjects=subjects, sections=sections, teachers=teachers)
        readiness = data.check_readiness()
        return data, ReadinessReport(
            is_ready=readiness.is_ready,
            errors=readiness.errors,
            warnings=readiness.warnings + self._warnings,
        )


def import_from_excel(path: Path) -> tuple[UniversityData, ReadinessReport]:
    """Importiert Hochschuldaten aus einer Excel-Vorlage.

    Raises:
        ExcelImportError: Bei fehlenden Blättern oder fehlerhaften Zeilen.
    """
    return ExcelImporter(path).import_all()


# ─── CSV-IMPORTER ──────────────────────────────────────────────────────────────

# Dateiname → Blattname (Kleinbuchstaben, Umlaute in beiden Schreibweisen)
_CSV_SHEET_MAP: dict[str, str] = {
    "faecher": "Fächer",
    "fächer": "Fächer",
    "subjects": "Fächer",
    "sektionen": "Sektionen",
    "sections": "Sektionen",
    "classes": "Sektionen",
    "lehrkraefte": "Lehrkräfte",
    "lehrkräfte": "Lehrkräfte",
    "faculty": "Lehrkräfte",
}


class CsvImporter(ExcelImporter):
    """Importiert Hochschuldaten aus einem Verzeichnis mit CSV-Dateien.

    Erwartet je Blatt eine Datei, z.B. faecher.csv, sektionen.csv,
    lehrkraefte.csv (englische Namen werden ebenfalls erkannt).
    """

    def __init__(self, path: Path) -> None:
        super().__init__(path)
        self._csv_sheets: dict[str, list[dict]] = {}

    def _open(self) -> None:
        if not self.path.is_dir():
            raise ExcelImportError(
                f"Kein Verzeichnis: {self.path}. Erwartet: Verzeichnis mit CSV-Dateien."
            )
        for csv_file in sorted(self.path.glob("*.csv")):
            sheet_name = _CSV_SHEET_MAP.get(csv_file.stem.lower(), csv_file.stem)
            with open(csv_file, encoding="utf-8-sig", newline="") as f:
                reader = csv.DictReader(f)
                self._csv_sheets[sheet_name] = [
                    {k.strip().lower(): (v.strip() if v else "") for k, v in row.items() if k}
                    for row in reader
                ]

    def _get_sheet(self, name: str):
        if not self._csv_sheets:
            self._open()
        for sn, rows in self._csv_sheets.items():
            if sn.strip().lower() == name.strip().lower():
                return rows
        return None

    def _sheet_rows(self, sheet) -> list[dict]:
        return sheet


def import_from_csv(path: Path) -> tuple[UniversityData, ReadinessReport]:
    """Importiert Hochschuldaten aus einem CSV-Verzeichnis.

    Raises:
        ExcelImportError: Bei fehlenden Dateien oder fehlerhaften Zeilen.
    """
    return CsvImporter(path).import_all()
