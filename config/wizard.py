"""Interaktiver Setup-Wizard für die Ersteinrichtung.

Führt den Nutzer Schritt für Schritt durch alle Konfigurationsbereiche.
Nutzt rich für die Konsolenausgabe.
"""

from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, FloatPrompt, IntPrompt, Prompt
from rich.table import Table
from rich import box

from config.schema import (
    AllocationConfig,
    AppConfig,
    FakeDataConfig,
    GradingConfig,
)
from config.defaults import default_grading

console = Console()


def _header(title: str) -> None:
    console.print()
    console.print(Panel(f"[bold cyan]{title}[/bold cyan]", expand=False))


def _info(text: str) -> None:
    console.print(f"[dim]{text}[/dim]")


def _success(text: str) -> None:
    console.print(f"[green]✓[/green] {text}")


def _warn(text: str) -> None:
    console.print(f"[yellow]⚠[/yellow]  {text}")


def _show_grading_table(gc: GradingConfig) -> None:
    """Zeigt die Notenskala als rich-Tabelle an."""
    table = Table(title="Notenskala", box=box.ROUNDED)
    table.add_column("Note", style="bold", width=6)
    table.add_column("ab %", justify="right", width=6)
    table.add_column("Punkte", justify="right", width=7)
    for b in gc.bands:
        table.add_row(b.grade, f"{b.min_percentage:g}", str(b.grade_point))
    table.add_row(gc.failing_grade, "[dim]darunter[/dim]", "0")
    console.print(table)


# ─── SCHRITT 1: Einrichtung ───

def _wizard_institution() -> str:
    _header("Schritt 1 — Hochschule")
    return Prompt.ask("Name der Hochschule", default="Muster-Universität")


# ─── SCHRITT 2: Verteilung ───

def _wizard_allocation() -> AllocationConfig:
    _header("Schritt 2 — Verteilung")
    _info("Mit festem Seed liefert jeder Lauf dieselbe Verteilung.")
    seed: Optional[int] = None
    if Confirm.ask("Festen Zufalls-Seed verwenden?", default=False):
        seed = IntPrompt.ask("Seed", default=42)
    data_path = Prompt.ask("Pfad zum Datensatz", default="output/university_data.json")
    return AllocationConfig(seed=seed, data_path=data_path)


# ─── SCHRITT 3: Notenskala ───

def _wizard_grading() -> GradingConfig:
    _header("Schritt 3 — Notenskala")
    default_gc = default_grading()
    _show_grading_table(default_gc)
    if Confirm.ask("Standard-Notenskala übernehmen?", default=True):
        _success("Standard-Notenskala übernommen.")
        return default_gc
    bands = []
    for band in default_gc.bands:
        limit = FloatPrompt.ask(f"Untergrenze für Note {band.grade} (%)",
                                default=band.min_percentage)
        bands.append(band.model_copy(update={"min_percentage": limit}))
    try:
        gc = GradingConfig(bands=bands)
    except ValueError as e:
        _warn(f"Ungültige Notenskala, Standard wird verwendet: {e}")
        return default_gc
    _show_grading_table(gc)
    return gc


# ─── SCHRITT 4: Testdaten ───

def _wizard_fake_data() -> FakeDataConfig:
    _header("Schritt 4 — Testdaten")
    sections = IntPrompt.ask("Sektionen pro Fachbereich/Semester", default=3)
    faculty = IntPrompt.ask("Anzahl Lehrkräfte", default=14)
    unstaffed = IntPrompt.ask("Fächer ohne Lehrkraft (Engpass)", default=1)
    return FakeDataConfig(
        sections_per_semester=sections,
        faculty_count=faculty,
        unstaffed_subjects=unstaffed,
    )


def run_wizard() -> Optional[AppConfig]:
    """Führt den vollständigen interaktiven Setup-Wizard aus.

    Returns:
        Fertige AppConfig oder None, wenn der Nutzer abbricht.
    """
    console.print()
    console.print(Panel(
        "[bold]Willkommen bei der Lehrauftrags-Verteilung![/bold]\n\n"
        "Der Wizard führt Sie durch alle Konfigurationsbereiche.\n"
        "[dim]Standard-Werte können mit Enter übernommen werden.[/dim]",
        title="[bold cyan]Einrichtung[/bold cyan]",
        border_style="cyan",
    ))

    if not Confirm.ask("\nMöchten Sie jetzt die Konfiguration anlegen?", default=True):
        console.print("[yellow]Einrichtung abgebrochen.[/yellow]")
        return None

    try:
        config = AppConfig(
            institution_name=_wizard_institution(),
            allocation=_wizard_allocation(),
            grading=_wizard_grading(),
            fake_data=_wizard_fake_data(),
        )
    except KeyboardInterrupt:
        console.print("\n[yellow]Wizard abgebrochen.[/yellow]")
        return None
    except ValueError as e:
        console.print(f"\n[red]Fehler während der Konfiguration: {e}[/red]")
        return None

    if not Confirm.ask("\nKonfiguration speichern?", default=True):
        console.print("[yellow]Konfiguration wird nicht gespeichert.[/yellow]")
        return None
    return config
