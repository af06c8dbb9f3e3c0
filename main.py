"""Lehrauftrags-Verteilung — Haupt-CLI.

Verwendung:
  python main.py setup                    Ersteinrichtung (Wizard)
  python main.py config show              Konfiguration anzeigen
  python main.py generate                 Fake-Daten erzeugen
  python main.py generate --export-json   Fake-Daten + JSON speichern
  python main.py template                 Excel-Import-Vorlage erzeugen
  python main.py import <datei.xlsx|dir>  Excel- oder CSV-Daten importieren
  python main.py validate                 Bereitschafts-Check
  python main.py allocate                 Sektionen auf Lehrkräfte verteilen
  python main.py allocate --save          ... und Qualifikationen zurückschreiben
  python main.py check <verteilung.json>  Verteilung prüfen + Auslastung
  python main.py apply <verteilung.json>  Verteilung in Qualifikationen übernehmen
  python main.py records gpa              SGPA/CGPA aller Studierenden
  python main.py records streaks          Anwesenheits-Serien
  python main.py scenario save <name>     Szenario speichern
  python main.py scenario load <name>     Szenario laden
  python main.py scenario list            Szenarien auflisten
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich import box

console = Console()

# Standard-Pfade für gespeicherte Daten
DEFAULT_DATA_JSON = Path("output/university_data.json")
DEFAULT_ALLOCATION_JSON = Path("output/allocation.json")


def _load_config_or_abort():
    """Lädt die Konfiguration oder bricht mit Fehlermeldung ab."""
    from config.manager import ConfigManager
    mgr = ConfigManager()
    if mgr.first_run_check():
        console.print(
            "[red]Keine Konfiguration gefunden.[/red]\n"
            "Führen Sie zunächst [bold]python main.py setup[/bold] aus."
        )
        sys.exit(1)
    try:
        return mgr, mgr.load()
    except ValueError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        sys.exit(1)


def _load_config_or_default():
    """Lädt die Konfiguration; ohne Datei gelten die Defaults."""
    from config.manager import ConfigManager
    from config.defaults import default_app_config
    mgr = ConfigManager()
    if mgr.first_run_check():
        return default_app_config()
    try:
        return mgr.load()
    except ValueError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        sys.exit(1)


def _load_data_or_abort(json_path: Path):
    """Lädt den Datensatz oder bricht mit Hinweis ab."""
    from models.university_data import UniversityData
    if not json_path.exists():
        console.print(
            f"[red]Keine Datendatei gefunden: {json_path}[/red]\n"
            "Verwenden Sie [bold]python main.py generate --export-json[/bold] "
            "oder [bold]python main.py import[/bold]."
        )
        sys.exit(1)
    try:
        return UniversityData.load_json(json_path)
    except ValueError as e:
        console.print(f"[red]Datendatei ungültig: {json_path}[/red]\n{escape(str(e))}")
        sys.exit(1)


def _print_allocation(allocation) -> None:
    """Zeigt die Verteilung als Tabelle pro Fach."""
    from allocation import NO_TEACHER_ASSIGNED

    table = Table(title="Lehrauftrags-Verteilung", box=box.ROUNDED, show_lines=True)
    table.add_column("Fach", style="bold", width=30)
    table.add_column("Lehrkraft", width=26)
    table.add_column("Anz.", justify="right", width=5)
    table.add_column("Sektionen")
    for subject_name, per_teacher in allocation.items():
        first = True
        for teacher_name, sections in per_teacher.items():
            if teacher_name == NO_TEACHER_ASSIGNED:
                teacher_cell = f"[red]{teacher_name}[/red]"
            else:
                teacher_cell = teacher_name
            table.add_row(
                subject_name if first else "",
                teacher_cell,
                str(len(sections)),
                ", ".join(sorted(sections)) or "[dim]–[/dim]",
            )
            first = False
    console.print(table)


def _write_back(allocation, data, data_path: Path, backup: bool) -> None:
    """Schreibt die zugeteilten Fächer in die Qualifikationen zurück.

    Bei Änderungen wird vorher eine Sicherung unter backups/ angelegt.
    """
    from allocation import JsonDataRepository, apply_allocation, merge_allocation

    preview = merge_allocation(allocation, data.subjects, data.teachers)
    for name in preview.skipped:
        console.print(f"[yellow]⚠ Übersprungen:[/yellow] {escape(name)}")
    if backup and preview.has_changes:
        backup_path = data.save_versioned(data_path.parent / "backups" / data_path.name)
        console.print(f"[dim]Sicherung: {backup_path}[/dim]")

    result = apply_allocation(allocation, JsonDataRepository(data_path))
    if result.has_changes:
        console.print(
            f"[green]✓[/green] {len(result.changed_ids)} Lehrkräfte aktualisiert: "
            f"{', '.join(result.changed_ids)}"
        )
    else:
        console.print("[dim]Keine Änderungen an den Qualifikationen.[/dim]")


# ─── SETUP ────────────────────────────────────────────────────────────────────

@click.command("setup")
def cmd_setup():
    """Ersteinrichtung: Konfiguration mit dem Setup-Wizard anlegen."""
    from config.wizard import run_wizard
    from config.manager import ConfigManager

    mgr = ConfigManager()
    if not mgr.first_run_check():
        console.print("[yellow]Eine Konfiguration existiert bereits.[/yellow]")
        if not click.confirm("Trotzdem neu einrichten?", default=False):
            return

    config = run_wizard()
    if config is not None:
        mgr.save(config)
        console.print("[bold green]Einrichtung abgeschlossen![/bold green]")
        console.print("Führen Sie jetzt [bold]python main.py generate[/bold] aus.")


# ─── CONFIG ───────────────────────────────────────────────────────────────────

@click.group("config")
def cmd_config():
    """Konfiguration anzeigen."""


@cmd_config.command("show")
def config_show():
    """Zeigt die aktuelle Konfiguration an."""
    mgr, config = _load_config_or_abort()

    console.print(Panel(
        f"[bold]{config.institution_name}[/bold]",
        title="Konfiguration",
        border_style="cyan",
    ))

    ac = config.allocation
    console.print(
        f"[bold]Verteilung:[/bold] Seed {ac.seed if ac.seed is not None else 'zufällig'} | "
        f"Daten: {ac.data_path} | Ergebnis: {ac.allocation_path}"
    )

    table = Table(title="Notenskala", box=box.ROUNDED)
    table.add_column("Note")
    table.add_column("ab %", justify="right")
    table.add_column("Punkte", justify="right")
    for b in config.grading.bands:
        table.add_row(b.grade, f"{b.min_percentage:g}", str(b.grade_point))
    table.add_row(config.grading.failing_grade, "darunter", "0")
    console.print(table)

    fc = config.fake_data
    console.print(
        f"[bold]Testdaten:[/bold] {', '.join(fc.departments)} | "
        f"Semester {fc.semesters} | {fc.sections_per_semester} Sektionen/Semester | "
        f"{fc.faculty_count} Lehrkräfte"
    )


# ─── GENERATE ─────────────────────────────────────────────────────────────────

@click.command("generate")
@click.option("--seed", default=42, help="Zufalls-Seed für reproduzierbare Daten.")
@click.option("--export-json", is_flag=True, default=False,
              help="Datensatz als JSON speichern.")
@click.option("--json-path", default=str(DEFAULT_DATA_JSON),
              help="Pfad für JSON-Export.")
@click.option("--validate/--no-validate", "run_validate", default=True,
              help="Bereitschafts-Check nach Generierung.")
def cmd_generate(seed: int, export_json: bool, json_path: str, run_validate: bool):
    """Erzeugt Testdaten (Fächer, Sektionen, Lehrkräfte, Ergebnisse)."""
    config = _load_config_or_default()
    from data.fake_data import FakeDataGenerator

    console.print("[bold]Testdaten werden generiert...[/bold]")
    gen = FakeDataGenerator(config, seed=seed)
    data = gen.generate()
    gen.print_summary(data)

    console.print(f"\n[dim]{data.summary()}[/dim]")

    if run_validate:
        data.check_readiness().print_rich()

    if export_json:
        out_path = Path(json_path)
        data.save_json(out_path)
        console.print(f"[green]✓[/green] JSON gespeichert: {out_path}")


# ─── TEMPLATE ─────────────────────────────────────────────────────────────────

@click.command("template")
@click.option("--output", "-o", default="output/import_vorlage.xlsx",
              help="Ausgabepfad für die Excel-Vorlage.")
def cmd_template(output: str):
    """Erzeugt eine leere Excel-Import-Vorlage."""
    from data.excel_import import generate_template

    out_path = Path(output)
    generate_template(out_path)
    console.print(f"[green]✓[/green] Vorlage gespeichert: {out_path}")
    console.print(
        "\nBlätter in der Vorlage:\n"
        "  [cyan]Fächer[/cyan]      – ID, Name, Code, Typ, Semester\n"
        "  [cyan]Sektionen[/cyan]   – ID, Name, Semester, Fachbereich\n"
        "  [cyan]Lehrkräfte[/cyan]  – ID, Name, Fächer, Fachbereich, E-Mail"
    )


# ─── IMPORT ───────────────────────────────────────────────────────────────────

@click.command("import")
@click.argument("datei", type=click.Path(exists=True, path_type=Path))
@click.option("--save-json", is_flag=True, default=False,
              help="Importierte Daten als JSON speichern.")
@click.option("--json-path", default=str(DEFAULT_DATA_JSON),
              help="Pfad für JSON-Export.")
def cmd_import(datei: Path, save_json: bool, json_path: str):
    """Importiert Hochschuldaten aus einer Excel-Datei oder einem CSV-Verzeichnis."""
    from data.excel_import import import_from_csv, import_from_excel, ExcelImportError

    console.print(f"[bold]Importiere:[/bold] {datei}")
    try:
        if datei.is_dir():
            data, report = import_from_csv(datei)
        else:
            data, report = import_from_excel(datei)
    except ExcelImportError as e:
        console.print(f"[red bold]Import fehlgeschlagen:[/red bold]\n{e}")
        sys.exit(1)

    console.print("[green]✓[/green] Import erfolgreich!")
    console.print(f"\n{data.summary()}")
    report.print_rich()

    if save_json:
        out_path = Path(json_path)
        data.save_json(out_path)
        console.print(f"[green]✓[/green] Daten gespeichert: {out_path}")


# ─── VALIDATE ─────────────────────────────────────────────────────────────────

@click.command("validate")
@click.option("--json-path", default=str(DEFAULT_DATA_JSON),
              help="Pfad zur gespeicherten JSON-Datei.")
def cmd_validate(json_path: str):
    """Führt einen Bereitschafts-Check auf dem aktuellen Datensatz durch."""
    data = _load_data_or_abort(Path(json_path))
    console.print(f"\n{data.summary()}\n")
    report = data.check_readiness()
    report.print_rich()
    sys.exit(0 if report.is_ready else 1)


# ─── ALLOCATE ─────────────────────────────────────────────────────────────────

@click.command("allocate")
@click.option("--json-path", default=None,
              help="Pfad zum Datensatz (Default aus Konfiguration).")
@click.option("--seed", type=int, default=None,
              help="Zufalls-Seed (überschreibt Konfiguration).")
@click.option("--output", "-o", default=None,
              help="Pfad für die Verteilungs-JSON (Default aus Konfiguration).")
@click.option("--save", is_flag=True, default=False,
              help="Zugeteilte Fächer in die Qualifikationen zurückschreiben.")
@click.option("--backup/--no-backup", default=True,
              help="Vor dem Zurückschreiben eine Sicherung mit Zeitstempel anlegen.")
@click.option("--show/--no-show", default=True,
              help="Verteilung als Tabelle anzeigen.")
def cmd_allocate(json_path: Optional[str], seed: Optional[int], output: Optional[str],
                 save: bool, backup: bool, show: bool):
    """Verteilt für jedes Fach alle Sektionen gleichmäßig auf qualifizierte Lehrkräfte."""
    from allocation import AllocationRun, WorkloadAllocator
    from analysis.workload_report import WorkloadAnalyzer

    config = _load_config_or_default()
    data_path = Path(json_path or config.allocation.data_path)
    data = _load_data_or_abort(data_path)

    readiness = data.check_readiness()
    if not readiness.is_ready:
        readiness.print_rich()
        console.print("[red]Verteilung abgebrochen: Datensatz nicht bereit.[/red]")
        sys.exit(1)

    effective_seed = seed if seed is not None else config.allocation.seed
    allocator = WorkloadAllocator(seed=effective_seed)
    allocation = allocator.allocate(data.subjects, data.sections, data.teachers)

    if show:
        _print_allocation(allocation)
    WorkloadAnalyzer().analyze(allocation, data).print_rich()

    run = AllocationRun(allocation=allocation, seed=effective_seed)
    out_path = Path(output or config.allocation.allocation_path)
    run.save_json(out_path)
    console.print(f"[green]✓[/green] Verteilung gespeichert: {out_path}")

    if run.unassigned_subjects:
        console.print(
            f"[yellow]⚠ Ohne Lehrkraft:[/yellow] {', '.join(run.unassigned_subjects)}"
        )

    if save:
        _write_back(allocation, data, data_path, backup)


# ─── CHECK ────────────────────────────────────────────────────────────────────

@click.command("check")
@click.argument("allocation_json", type=click.Path(exists=True, path_type=Path),
                required=False)
@click.option("--json-path", default=None,
              help="Pfad zum Datensatz (Default aus Konfiguration).")
def cmd_check(allocation_json: Optional[Path], json_path: Optional[str]):
    """Prüft eine gespeicherte Verteilung und zeigt die Auslastung."""
    from allocation import AllocationRun
    from analysis.allocation_validator import AllocationValidator
    from analysis.workload_report import WorkloadAnalyzer

    config = _load_config_or_default()
    data = _load_data_or_abort(Path(json_path or config.allocation.data_path))
    alloc_path = allocation_json or Path(config.allocation.allocation_path)
    try:
        run = AllocationRun.load_json(alloc_path)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        sys.exit(1)

    report = AllocationValidator().validate(run.allocation, data)
    report.print_rich()
    WorkloadAnalyzer().analyze(run.allocation, data).print_rich()
    sys.exit(0 if report.is_valid else 1)


# ─── APPLY ────────────────────────────────────────────────────────────────────

@click.command("apply")
@click.argument("allocation_json", type=click.Path(exists=True, path_type=Path))
@click.option("--json-path", default=None,
              help="Pfad zum Datensatz (Default aus Konfiguration).")
@click.option("--backup/--no-backup", default=True,
              help="Vor dem Zurückschreiben eine Sicherung mit Zeitstempel anlegen.")
def cmd_apply(allocation_json: Path, json_path: Optional[str], backup: bool):
    """Übernimmt eine gespeicherte (ggf. bearbeitete) Verteilung in die Qualifikationen."""
    from allocation import AllocationRun

    config = _load_config_or_default()
    data_path = Path(json_path or config.allocation.data_path)
    data = _load_data_or_abort(data_path)
    try:
        run = AllocationRun.load_json(allocation_json)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        sys.exit(1)
    _write_back(run.allocation, data, data_path, backup)


# ─── RECORDS ──────────────────────────────────────────────────────────────────

@click.group("records")
def cmd_records():
    """Noten, GPA und Anwesenheits-Serien."""


@cmd_records.command("gpa")
@click.option("--json-path", default=None,
              help="Pfad zum Datensatz (Default aus Konfiguration).")
@click.option("--student", default=None, help="Nur diesen Studierenden anzeigen.")
def records_gpa(json_path: Optional[str], student: Optional[str]):
    """Berechnet SGPA und CGPA aus den Prüfungsergebnissen."""
    from analysis.grades import calculate_all_gpas, calculate_gpa

    config = _load_config_or_default()
    data = _load_data_or_abort(Path(json_path or config.allocation.data_path))
    if student:
        summaries = [calculate_gpa(student, data.results, config.grading)]
    else:
        summaries = calculate_all_gpas(data.results, config.grading)

    if not summaries:
        console.print("[dim]Keine Ergebnisse vorhanden.[/dim]")
        return

    table = Table(title="GPA", box=box.ROUNDED)
    table.add_column("Studierende/r", style="bold")
    table.add_column("SGPA", justify="right")
    table.add_column("CGPA", justify="right")
    table.add_column("Fächer", justify="right")
    for s in summaries:
        table.add_row(s.student_id, f"{s.sgpa:.2f}", f"{s.cgpa:.2f}", str(s.subjects_counted))
    console.print(table)


@cmd_records.command("streaks")
@click.option("--json-path", default=None,
              help="Pfad zum Datensatz (Default aus Konfiguration).")
@click.option("--save", is_flag=True, default=False,
              help="Serien der Lehrkräfte in den Datensatz schreiben.")
def records_streaks(json_path: Optional[str], save: bool):
    """Berechnet Anwesenheits-Serien für Lehrkräfte und Studierende."""
    from analysis.streaks import StreakCalculator

    config = _load_config_or_default()
    data_path = Path(json_path or config.allocation.data_path)
    data = _load_data_or_abort(data_path)
    calc = StreakCalculator()

    table = Table(title="Serien (Tage)", box=box.ROUNDED)
    table.add_column("ID", style="bold")
    table.add_column("Rolle")
    table.add_column("Serie", justify="right")
    for tid, streak in sorted(calc.teacher_streaks(data).items(), key=lambda x: -x[1]):
        table.add_row(tid, "Lehrkraft", str(streak))
    for sid, streak in sorted(calc.student_streaks(data).items(), key=lambda x: -x[1]):
        table.add_row(sid, "Studierende/r", str(streak))
    console.print(table)

    if save:
        calc.update_teachers(data).save_json(data_path)
        console.print(f"[green]✓[/green] Serien gespeichert: {data_path}")


# ─── SCENARIO ─────────────────────────────────────────────────────────────────

@click.group("scenario")
def cmd_scenario():
    """Szenarien verwalten (speichern, laden, auflisten)."""


@cmd_scenario.command("save")
@click.argument("name")
@click.option("--description", "-d", default="", help="Beschreibung des Szenarios.")
def scenario_save(name: str, description: str):
    """Speichert die aktuelle Konfiguration als Szenario."""
    mgr, config = _load_config_or_abort()
    mgr.save_scenario(config, name, description)


@cmd_scenario.command("load")
@click.argument("name")
def scenario_load(name: str):
    """Lädt ein gespeichertes Szenario als aktive Konfiguration."""
    from config.manager import ConfigManager
    mgr = ConfigManager()
    try:
        config = mgr.load_scenario(name)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        sys.exit(1)
    mgr.save(config)
    console.print(f"[green]✓[/green] Szenario '{name}' als aktive Config gesetzt.")


@cmd_scenario.command("list")
def scenario_list():
    """Listet alle gespeicherten Szenarien auf."""
    from config.manager import ConfigManager
    mgr = ConfigManager()
    scenarios = mgr.list_scenarios()

    if not scenarios:
        console.print("[dim]Keine Szenarien vorhanden.[/dim]")
        return

    table = Table(title="Gespeicherte Szenarien", box=box.ROUNDED)
    table.add_column("Name", style="bold")
    table.add_column("Erstellt")
    table.add_column("Beschreibung")
    for s in scenarios:
        table.add_row(s["name"], s.get("created", ""), s.get("description", ""))
    console.print(table)


# ─── HAUPT-CLI ────────────────────────────────────────────────────────────────

@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False,
              help="Ausführliche Log-Ausgabe.")
def cli(verbose: bool):
    """Lehrauftrags-Verteilung für Hochschulen.

    Starten Sie mit: python main.py setup
    """
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def main():
    """Einstiegspunkt. Startet automatisch den Wizard beim ersten Aufruf."""
    from config.manager import ConfigManager
    mgr = ConfigManager()

    if len(sys.argv) == 1 and mgr.first_run_check():
        console.print(Panel(
            "[bold]Willkommen bei der Lehrauftrags-Verteilung![/bold]\n\n"
            "Keine Konfiguration gefunden.\n"
            "Der Setup-Wizard wird jetzt gestartet...",
            border_style="cyan",
        ))
        sys.argv.append("setup")

    cli()


# Befehle registrieren
cli.add_command(cmd_setup)
cli.add_command(cmd_config)
cli.add_command(cmd_generate)
cli.add_command(cmd_template)
cli.add_command(cmd_import)
cli.add_command(cmd_validate)
cli.add_command(cmd_allocate)
cli.add_command(cmd_check)
cli.add_command(cmd_apply)
cli.add_command(cmd_records)
cli.add_command(cmd_scenario)


if __name__ == "__main__":
    main()
