"""Tests for the settings persistence layer."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from resumer.services.settings import SecretVault, Settings, SettingsStore, coerce_setting, redact_secret


def test_load_returns_defaults_when_file_missing(settings_store: SettingsStore) -> None:
    assert settings_store.load() == Settings()


def test_save_and_load_roundtrip(settings_store: SettingsStore) -> None:
    original = Settings(
        api_base_url="https://resumes.example.com/api/v1",
        api_token="super-secret",
        autosave_delay=1.5,
        history_limit=20,
        default_template="modern",
        recent_builds=["b1", "b2"],
        last_build_id="b1",
    )

    settings_store.save(original)
    reloaded = SettingsStore(settings_store.path, vault=settings_store.vault).load()

    assert reloaded == original


def test_token_is_encrypted_at_rest(settings_store: SettingsStore) -> None:
    settings_store.save(Settings(api_token="super-secret"))

    raw = json.loads(settings_store.path.read_text(encoding="utf-8"))

    assert "api_token" not in raw
    assert raw["api_token_ciphertext"].startswith("fernet:")
    assert "super-secret" not in settings_store.path.read_text(encoding="utf-8")
    assert raw["version"] == 1


def test_unreadable_token_is_dropped(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    SettingsStore(path, vault=SecretVault(key_path=tmp_path / "one.key")).save(Settings(api_token="abc"))

    loaded = SettingsStore(path, vault=SecretVault(key_path=tmp_path / "other.key")).load()

    assert loaded.api_token == ""


def test_invalid_json_falls_back_to_defaults(settings_store: SettingsStore) -> None:
    settings_store.path.write_text("{not json", encoding="utf-8")

    assert settings_store.load() == Settings()


def test_legacy_payload_is_migrated(settings_store: SettingsStore) -> None:
    settings_store.path.write_text(json.dumps({"default_template": "shraddha", "unknown": 1}), encoding="utf-8")

    loaded = settings_store.load()

    assert loaded.default_template == "shraddha"
    assert json.loads(settings_store.path.read_text(encoding="utf-8"))["version"] == 1


def test_env_overrides_take_precedence(monkeypatch: pytest.MonkeyPatch, settings_store: SettingsStore) -> None:
    settings_store.save(Settings(api_base_url="https://local", autosave_delay=2.0))
    monkeypatch.setenv("RESUMER_API_BASE_URL", "https://env")
    monkeypatch.setenv("RESUMER_AUTOSAVE_DELAY", "0.5")
    monkeypatch.setenv("RESUMER_HISTORY_LIMIT", "not-a-number")
    monkeypatch.setenv("RESUMER_DEBUG_LOGGING", "yes")

    loaded = settings_store.load()

    assert loaded.api_base_url == "https://env"
    assert loaded.autosave_delay == 0.5
    assert loaded.history_limit == 50
    assert loaded.debug_logging is True


def test_cli_overrides_apply_before_env(monkeypatch: pytest.MonkeyPatch, settings_store: SettingsStore) -> None:
    monkeypatch.setenv("RESUMER_DEFAULT_TEMPLATE", "modern")

    loaded = settings_store.load(overrides={"default_template": "shraddha", "history_limit": 5, "bogus": 1})

    assert loaded.default_template == "modern"
    assert loaded.history_limit == 5


def test_remember_build_keeps_recent_list_short() -> None:
    settings = Settings()
    for index in range(12):
        settings = settings.remember_build(f"b{index}")
    settings = settings.remember_build("b5")

    assert settings.last_build_id == "b5"
    assert settings.recent_builds[0] == "b5"
    assert len(settings.recent_builds) == 10
    assert settings.recent_builds.count("b5") == 1


@pytest.mark.parametrize(
    ("key", "raw", "expected"),
    [
        ("autosave_delay", "0.25", 0.25),
        ("history_limit", "12", 12),
        ("debug_logging", "on", True),
        ("recent_builds", "a, b", ["a", "b"]),
        ("last_build_id", "", None),
        ("api_base_url", "https://x", "https://x"),
    ],
)
def test_coerce_setting(key: str, raw: str, expected: object) -> None:
    assert coerce_setting(key, raw) == expected


def test_coerce_unknown_setting() -> None:
    with pytest.raises(KeyError):
        coerce_setting("theme", "dark")


def test_redact_secret() -> None:
    assert redact_secret("") == ""
    assert redact_secret("abc") == "***"
    assert redact_secret("sk-123456") == "sk*****56"
