import os
from pathlib import Path
from unittest.mock import patch

from utils.env import _find_project_root, load_project_dotenv

# --- Test _find_project_root --- #


def test_find_project_root_found_in_start(tmp_path: Path):
    """Test finding pyproject.toml in the starting directory."""
    start_dir = tmp_path / "subdir"
    start_dir.mkdir()
    (start_dir / "pyproject.toml").touch()

    assert _find_project_root(start=start_dir) == start_dir


def test_find_project_root_found_multiple_levels_up(tmp_path: Path):
    """Test finding pyproject.toml several levels above the start."""
    project_root = tmp_path / "veggiemarket"
    project_root.mkdir()
    (project_root / "pyproject.toml").touch()
    start_dir = project_root / "market" / "nested"
    start_dir.mkdir(parents=True)

    assert _find_project_root(start=start_dir) == project_root


# --- Test load_project_dotenv --- #


@patch("utils.env.load_dotenv")
def test_load_dotenv_called_when_env_file_exists(mock_load_dotenv, tmp_path: Path):
    (tmp_path / "pyproject.toml").touch()
    env_file = tmp_path / ".env"
    env_file.touch()

    assert load_project_dotenv(start=tmp_path) is True
    mock_load_dotenv.assert_called_once_with(dotenv_path=env_file, override=False)


@patch("utils.env.load_dotenv")
def test_load_dotenv_not_called_without_env_file(mock_load_dotenv, tmp_path: Path):
    (tmp_path / "pyproject.toml").touch()

    assert load_project_dotenv(start=tmp_path) is False
    mock_load_dotenv.assert_not_called()


def test_load_dotenv_keeps_existing_variables(tmp_path: Path, monkeypatch):
    """Variables already in the environment are not overridden."""
    (tmp_path / "pyproject.toml").touch()
    (tmp_path / ".env").write_text("SUPABASE_URL=https://from-dotenv.supabase.co\nSUPABASE_ANON_KEY=dotenv-key")
    monkeypatch.setenv("SUPABASE_URL", "https://from-shell.supabase.co")
    monkeypatch.delenv("SUPABASE_ANON_KEY", raising=False)

    load_project_dotenv(start=tmp_path)

    assert os.environ.get("SUPABASE_URL") == "https://from-shell.supabase.co"
    assert os.environ.get("SUPABASE_ANON_KEY") == "dotenv-key"


def test_load_dotenv_override(tmp_path: Path, monkeypatch):
    (tmp_path / "pyproject.toml").touch()
    (tmp_path / ".env").write_text("VEGGIEMARKET_SELLER_ID=seller-from-dotenv")
    monkeypatch.setenv("VEGGIEMARKET_SELLER_ID", "seller-from-shell")

    load_project_dotenv(start=tmp_path, override=True)

    assert os.environ.get("VEGGIEMARKET_SELLER_ID") == "seller-from-dotenv"
