"""Konfigurationsmanager: YAML-Datei der aktiven Config und benannte Szenarien.

Die aktive Konfiguration liegt kommentiert in config/app_config.yaml
(ruamel.yaml). Szenarien sind weitere YAML-Dateien in scenarios/; deren
Beschreibungen und Erstelldaten stehen gesammelt in scenarios/_index.yaml.
"""

import json
from datetime import date
from pathlib import Path
from typing import Optional

from pydantic import ValidationError
from rich.console import Console
from rich.prompt import Confirm
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

from config.schema import AppConfig

console = Console()
yaml = YAML()
yaml.default_flow_style = False
yaml.width = 120

_INDEX_NAME = "_index.yaml"

# Abschnitt → (Überschrift, Erläuterung)
_SECTION_COMMENTS = {
    "allocation": (
        "Verteilung",
        "seed: fester Wert = reproduzierbare Verteilung, leer = jedes Mal neu mischen.",
    ),
    "grading": (
        "Notenskala",
        "Stufen werden von oben nach unten geprüft (Untergrenze in Prozent).",
    ),
    "fake_data": ("Testdaten", ""),
}


def _header() -> str:
    return (
        "# ============================================\n"
        "# Lehrauftrags-Verteilung — Konfiguration\n"
        f"# Gespeichert: {date.today().isoformat()}\n"
        "# ============================================\n\n"
    )


class ConfigManager:
    CONFIG_DIR = Path("config")
    DEFAULT_CONFIG = CONFIG_DIR / "app_config.yaml"
    SCENARIOS_DIR = Path("scenarios")

    def __init__(self, config_path: Optional[Path] = None,
                 scenarios_dir: Optional[Path] = None) -> None:
        if config_path is not None:
            self.DEFAULT_CONFIG = Path(config_path)
        if scenarios_dir is not None:
            self.SCENARIOS_DIR = Path(scenarios_dir)

    def first_run_check(self) -> bool:
        """True, solange noch keine Konfigurationsdatei angelegt wurde."""
        return not self.DEFAULT_CONFIG.exists()

    # ─── Laden & Speichern ───

    def load(self, path: Optional[Path] = None) -> AppConfig:
        """Liest eine YAML-Config und validiert sie.

        Raises:
            FileNotFoundError: Datei fehlt.
            ValueError: Inhalt verletzt das Schema.
        """
        source = Path(path) if path else self.DEFAULT_CONFIG
        if not source.exists():
            raise FileNotFoundError(
                f"Keine Konfiguration unter {source}.\n"
                f"Anlegen mit: python main.py setup"
            )
        raw = yaml.load(source.read_text(encoding="utf-8")) or {}
        try:
            return AppConfig.model_validate(dict(raw))
        except ValidationError as e:
            raise ValueError(f"Ungültige Konfiguration in {source}:\n{e}") from e

    def save(self, config: AppConfig, path: Optional[Path] = None) -> None:
        """Schreibt die Config als kommentiertes YAML."""
        target = Path(path) if path else self.DEFAULT_CONFIG
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "w", encoding="utf-8") as f:
            f.write(_header())
            yaml.dump(self._build_commented_yaml(config), f)
        console.print(f"[green]✓[/green] Konfiguration gespeichert: {target}")

    def _build_commented_yaml(self, config: AppConfig) -> CommentedMap:
        doc = CommentedMap(json.loads(config.model_dump_json()))
        for key, (title, note) in _SECTION_COMMENTS.items():
            text = f"\n─── {title} ───"
            if note:
                text += f"\n{note}"
            doc.yaml_set_comment_before_after_key(key, before=text)

        allocation = CommentedMap(doc["allocation"])
        allocation.yaml_add_eol_comment("leer = Zufall", "seed")
        doc["allocation"] = allocation
        return doc

    # ─── Szenarien ───

    def _scenario_path(self, name: str) -> Path:
        return self.SCENARIOS_DIR / f"{name}.yaml"

    def _read_index(self) -> dict:
        index_path = self.SCENARIOS_DIR / _INDEX_NAME
        if not index_path.exists():
            return {}
        return dict(yaml.load(index_path.read_text(encoding="utf-8")) or {})

    def _write_index(self, index: dict) -> None:
        with open(self.SCENARIOS_DIR / _INDEX_NAME, "w", encoding="utf-8") as f:
            yaml.dump(index, f)

    def save_scenario(self, config: AppConfig, name: str,
                      description: str = "", overwrite: bool = False) -> bool:
        """Legt die Config als Szenario ab. False, wenn das Überschreiben abgelehnt wird."""
        target = self._scenario_path(name)
        if target.exists() and not overwrite:
            if not Confirm.ask(f"Szenario '{name}' überschreiben?", default=False):
                console.print("[yellow]Szenario nicht gespeichert.[/yellow]")
                return False

        self.SCENARIOS_DIR.mkdir(parents=True, exist_ok=True)
        self.save(config, target)
        index = self._read_index()
        index[name] = {"description": description, "created": date.today().isoformat()}
        self._write_index(index)
        return True

    def list_scenarios(self) -> list[dict]:
        """Alle Szenarien, alphabetisch, mit Beschreibung und Erstelldatum."""
        if not self.SCENARIOS_DIR.exists():
            return []
        index = self._read_index()
        entries = []
        for p in sorted(self.SCENARIOS_DIR.glob("*.yaml")):
            if p.name == _INDEX_NAME:
                continue
            info = index.get(p.stem) or {}
            entries.append({
                "name": p.stem,
                "path": str(p),
                "description": str(info.get("description", "")),
                "created": str(info.get("created", "")),
            })
        return entries

    def load_scenario(self, name: str) -> AppConfig:
        source = self._scenario_path(name)
        if not source.exists():
            known = ", ".join(s["name"] for s in self.list_scenarios()) or "keine"
            raise FileNotFoundError(f"Unbekanntes Szenario '{name}' (vorhanden: {known}).")
        return self.load(source)
