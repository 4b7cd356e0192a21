"""Tests covering the command line entry point."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from resumer import app

CANONICAL = {
    "title": "Ada Lovelace",
    "sections": [
        {"id": "h", "type": "header", "data": {"fullName": "Ada Lovelace", "email": "ada@example.com"}, "locked": True},
        {"id": "s", "type": "summary", "data": {"content": "First programmer."}},
    ],
    "sectionOrder": ["h", "s"],
    "sectionSettings": {},
    "style": {"pageMargins": 20, "sectionSpacing": 3, "fontSize": "small"},
    "template": "basic",
}


@pytest.fixture(autouse=True)
def _isolated_home(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("RESUMER_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("RESUMER_SETTINGS_PATH", str(tmp_path / "settings.json"))
    for name in ("RESUMER_DEBUG", "RESUMER_API_TOKEN", "RESUMER_DEFAULT_TEMPLATE"):
        monkeypatch.delenv(name, raising=False)


def _write_json(path: Path, payload: dict) -> Path:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_templates_lists_registry(capsys: pytest.CaptureFixture[str]) -> None:
    assert app.main(["templates"]) == 0

    listed = json.loads(capsys.readouterr().out)

    assert [entry["id"] for entry in listed] == ["basic", "modern", "shraddha"]


def test_export_writes_pdf(tmp_path: Path) -> None:
    source = _write_json(tmp_path / "resume.json", CANONICAL)
    target = tmp_path / "build" / "resume.pdf"

    assert app.main(["export", str(source), "-o", str(target)]) == 0

    assert target.read_bytes().startswith(b"%PDF")


def test_export_accepts_wrapped_external_payload(tmp_path: Path) -> None:
    payload = {
        "success": True,
        "data": {
            "header": {"fullName": "Grace Hopper"},
            "summary": "Rear admiral and compiler author.",
            "skills": ["COBOL", "FLOW-MATIC"],
            "education": [{"degree": "PhD", "institution": "Yale"}],
        },
    }
    source = _write_json(tmp_path / "optimized.json", payload)
    target = tmp_path / "optimized.pdf"

    assert app.main(["export", str(source), "-o", str(target), "--template", "shraddha"]) == 0

    assert target.read_bytes().startswith(b"%PDF")


def test_export_rejects_unknown_template(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = _write_json(tmp_path / "resume.json", CANONICAL)

    assert app.main(["export", str(source), "-o", str(tmp_path / "x.pdf"), "--template", "glossy"]) == 2

    assert "Unknown template" in capsys.readouterr().err
    assert not (tmp_path / "x.pdf").exists()


def test_missing_input_returns_usage_error(tmp_path: Path) -> None:
    assert app.main(["print-style", str(tmp_path / "missing.json")]) == 2


def test_non_object_input_is_rejected(tmp_path: Path) -> None:
    source = tmp_path / "list.json"
    source.write_text("[1, 2]", encoding="utf-8")

    assert app.main(["print-style", str(source)]) == 2


def test_print_style_reports_points(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = _write_json(tmp_path / "resume.json", CANONICAL)

    assert app.main(["print-style", str(source)]) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload["pageMargin"] == pytest.approx(56.693)
    assert payload["sectionSpacing"] == pytest.approx(18.0)
    assert payload["fontSize"] == 10.5
    assert payload["fontName"] == "Helvetica"


def test_invalid_override_returns_error(capsys: pytest.CaptureFixture[str]) -> None:
    assert app.main(["--set", "history_limit=lots", "templates"]) == 2
    assert app.main(["--set", "theme=dark", "templates"]) == 2
    assert app.main(["--set", "missing-equals", "templates"]) == 2

    assert "Invalid --set override" in capsys.readouterr().err


def test_dump_settings_redacts_token(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setenv("RESUMER_API_TOKEN", "sk-very-secret")

    assert app.main(["--set", "history_limit=7", "--dump-settings"]) == 0

    dumped = json.loads(capsys.readouterr().out)
    assert dumped["settings"]["api_token"] == "sk**********et"
    assert dumped["settings"]["history_limit"] == 7
    assert dumped["meta"]["secret_backend"] == "fernet"
    assert dumped["meta"]["log_path"].endswith("resumer.log")
    assert dumped["meta"]["cli_overrides"] == ["history_limit"]
    assert "RESUMER_API_TOKEN" in dumped["meta"]["environment_variables"]


def test_load_settings_falls_back_on_errors(tmp_path: Path) -> None:
    class BrokenStore:
        path = tmp_path / "settings.json"

        def load(self, *, overrides=None):
            raise OSError("disk on fire")

    assert app.load_settings(store=BrokenStore()) == app.Settings()


def test_no_command_prints_help(capsys: pytest.CaptureFixture[str]) -> None:
    assert app.main([]) == 0

    assert "usage: resumer" in capsys.readouterr().out
