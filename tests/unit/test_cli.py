from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from skyfeed import __version__
from skyfeed.cli import build_parser, main


def _scaffold_repo(tmp_path: Path) -> Path:
    """Create a minimal repo root layout expected by the CLI."""

    src_root = Path(__file__).resolve().parents[2]
    (tmp_path / "config").mkdir(parents=True, exist_ok=True)
    shutil.copy2(src_root / "config" / "default.yaml", tmp_path / "config" / "default.yaml")
    return tmp_path


def test_cli_help_includes_subcommands(capsys: pytest.CaptureFixture[str]) -> None:
    rc = main([])
    assert rc == 2
    out = capsys.readouterr().out
    assert "api" in out
    assert "status" in out
    assert "init-db" in out


def test_cli_version_flag(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--version"]) == 0
    assert capsys.readouterr().out.strip() == f"skyfeed v{__version__}"


def test_cli_unknown_command_errors() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args(["nope"])


def test_init_db_creates_stores(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    repo = _scaffold_repo(tmp_path)
    monkeypatch.chdir(repo)

    assert main(["init-db"]) == 0
    assert (repo / "data" / "feedgen.db").exists()
    assert "write store ready" in capsys.readouterr().out


def test_status_reports_without_secrets(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    repo = _scaffold_repo(tmp_path)
    monkeypatch.chdir(repo)
    monkeypatch.setenv("SKYFEED_SERVICE__DID", "did:web:feeds.example.com")
    monkeypatch.setenv("SKYFEED_API__SERVICE_KEY", "super-secret-value")

    assert main(["status"]) == 0
    out = capsys.readouterr().out
    assert "did:web:feeds.example.com" in out
    assert "service key: configured" in out
    assert "app.bsky.feed.generator/blacksky" in out
    assert "super-secret-value" not in out


def test_status_flags_unready_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    repo = _scaffold_repo(tmp_path)
    monkeypatch.chdir(repo)
    monkeypatch.delenv("SKYFEED_SERVICE__DID", raising=False)

    assert main(["status"]) == 1
    assert "ready: no" in capsys.readouterr().out
