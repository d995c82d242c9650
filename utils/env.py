"""Environment helper utilities.

Loads a `.env` file from the project root so that store credentials (e.g.,
``SUPABASE_URL`` and ``SUPABASE_ANON_KEY``) defined there become available via
``os.getenv``. Uses `python-dotenv`.
"""

from __future__ import annotations

from pathlib import Path

from dotenv import load_dotenv

__all__ = ["load_project_dotenv"]


def _find_project_root(start: Path | None = None) -> Path:
    """Walk upwards until a directory containing `pyproject.toml` is found."""
    current = start or Path(__file__).resolve().parent
    for _ in range(10):
        if (current / "pyproject.toml").exists():
            return current
        if current.parent == current:
            break
        current = current.parent
    return Path(__file__).resolve().parent


def load_project_dotenv(start: Path | None = None, override: bool = False) -> bool:
    """
    Load variables from the project-level `.env` if present.

    Returns True when a `.env` file was found and loaded. Variables already set
    in the process environment win unless ``override`` is True.
    """
    dotenv_path = _find_project_root(start) / ".env"
    if not dotenv_path.exists():
        return False
    load_dotenv(dotenv_path=dotenv_path, override=override)
    return True
