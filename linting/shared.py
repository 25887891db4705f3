"""Shared utilities for the structural linters.

Provides path constants, file iteration, source parsing and violation
reporting so each rule module stays focused on a single check.
"""

from __future__ import annotations

import ast
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]

PACKAGE_DIR: Path = ROOT / "chatlink"
CONFIG_DIR: Path = PACKAGE_DIR / "config"
TESTS_DIR: Path = ROOT / "tests"
UNIT_DIR: Path = TESTS_DIR / "unit"

# ---------------------------------------------------------------------------
# File helpers
# ---------------------------------------------------------------------------


def rel(path: Path) -> str:
    """Return *path* relative to the project root as a string."""
    try:
        return str(path.relative_to(ROOT))
    except ValueError:
        return str(path)


def iter_python_files(*dirs: Path) -> list[Path]:
    """Return sorted .py files under *dirs*, skipping ``__pycache__``."""
    files: list[Path] = []
    for d in dirs:
        if not d.is_dir():
            continue
        for py in sorted(d.rglob("*.py")):
            if "__pycache__" in py.parts:
                continue
            files.append(py)
    return files


def config_modules(config_dir: Path) -> list[Path]:
    """Config modules under *config_dir*, excluding the re-exporting ``__init__``."""
    if not config_dir.is_dir():
        return []
    return [p for p in sorted(config_dir.glob("*.py")) if p.name != "__init__.py"]


def parse_source(filepath: Path) -> tuple[str, ast.Module] | None:
    """Read and parse a Python file, returning ``(source, tree)`` or ``None``."""
    try:
        source = filepath.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None

    try:
        tree = ast.parse(source, filename=str(filepath))
    except SyntaxError:
        return None

    return source, tree


# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------


def report(header: str, violations: list[str]) -> int:
    """Print *violations* to stderr under *header* and return an exit code."""
    if not violations:
        return 0
    print(f"{header}:", file=sys.stderr)
    for violation in violations:
        print(violation, file=sys.stderr)
    return 1


__all__ = [
    "CONFIG_DIR",
    "PACKAGE_DIR",
    "ROOT",
    "TESTS_DIR",
    "UNIT_DIR",
    "config_modules",
    "iter_python_files",
    "parse_source",
    "rel",
    "report",
]
