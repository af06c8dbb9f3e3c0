from config.schema import (
    AllocationConfig,
    AppConfig,
    FakeDataConfig,
    GradingConfig,
)


# ─── Fächer-Katalog (Testdaten + Excel-Vorlage) ───────────────────────────────
# Semester → Liste von (Code, Name, Typ)

SUBJECT_CATALOG: dict[int, list[tuple[str, str, str]]] = {
    1: [
        ("MA101", "Engineering Mathematics I", "theory"),
        ("PH101", "Engineering Physics", "theory"),
        ("CS101", "Programming in C", "theory"),
        ("CS102", "Programming Lab", "lab"),
    ],
    3: [
        ("CS301", "Data Structures", "theory"),
        ("CS302", "Digital Logic Design", "theory"),
        ("MA301", "Discrete Mathematics", "theory"),
        ("CS303", "Data Structures Lab", "lab"),
    ],
    5: [
        ("CS501", "Operating Systems", "theory"),
        ("CS502", "Database Management Systems", "theory"),
        ("CS503", "Computer Networks", "theory"),
        ("CS504", "DBMS Lab", "lab"),
    ],
    7: [
        ("CS701", "Machine Learning", "theory"),
        ("CS702", "Compiler Design", "theory"),
        ("CS703", "Cloud Computing", "theory"),
    ],
}


def default_grading() -> GradingConfig:
    """Zehn-Punkte-Skala: O ≥ 90 %, A ≥ 80 %, ... E ≥ 40 %, sonst F."""
    return GradingConfig()


def default_app_config() -> AppConfig:
    """Vollständige Default-Konfiguration."""
    return AppConfig(
        institution_name="Muster-Universität",
        allocation=AllocationConfig(),
        grading=default_grading(),
        fake_data=FakeDataConfig(),
    )
