"""Command line entry point for the resume engine."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence, TextIO

from .editor.session import EditorSession
from .errors import ExportError
from .export.pipeline import ExportPipeline, PrintStyle
from .services.settings import Settings, SettingsStore, coerce_setting, redact_secret
from .templates import builtin_registry
from .utils import logging as logging_utils

_TRUE_VALUES = {"1", "true", "yes", "on", "debug"}
_LOGGER = logging.getLogger(__name__)


def configure_logging(debug: bool = False, *, force: bool = False) -> None:
    level = logging_utils.level_for(debug)
    logging_utils.setup_logging(level, force=force)
    _LOGGER.debug("Logging configured (level=%s)", logging.getLevelName(level))


def load_settings(
    path: Optional[Path] = None,
    *,
    store: SettingsStore | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> Settings:
    """Load persisted settings or fall back to defaults."""

    active_store = store or SettingsStore(path)
    try:
        return active_store.load(overrides=overrides)
    except (OSError, ValueError, TypeError) as exc:
        _LOGGER.warning("Failed to load settings from %s: %s", active_store.path, exc)
        return Settings()


def load_session(source: Path, settings: Settings) -> EditorSession:
    """Read a resume JSON file into a fresh session.

    Canonical payloads (with ``sectionOrder``) load as-is; anything else is
    treated as loosely shaped content and merged into a new document.
    """

    payload = json.loads(source.read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise ValueError(f"{source} does not contain a JSON object")
    if isinstance(payload.get("data"), dict):
        payload = payload["data"]
    session = EditorSession(
        registry=builtin_registry(),
        history_limit=settings.history_limit,
        default_template=settings.default_template,
    )
    if "sectionOrder" in payload:
        session.load_document(payload)
    else:
        session.load_external(payload)
    return session


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point invoked by the ``resumer`` console script."""

    parser = _build_parser()
    args = parser.parse_args(argv)

    debug = args.debug or _env_flag("RESUMER_DEBUG", default=False)
    configure_logging(debug)

    settings_path = args.settings_path or os.environ.get("RESUMER_SETTINGS_PATH")
    resolved_path = Path(settings_path).expanduser() if settings_path else None
    settings_store = SettingsStore(resolved_path)
    try:
        cli_overrides = _coerce_cli_overrides(args.overrides or [])
    except ValueError as exc:
        print(f"Invalid --set override: {exc}", file=sys.stderr)
        return 2

    settings = load_settings(resolved_path, store=settings_store, overrides=cli_overrides or None)
    if settings.debug_logging and not debug:
        configure_logging(True, force=True)

    if args.dump_settings:
        _dump_settings(settings, settings_store, overrides=cli_overrides)
        return 0
    if args.command is None:
        parser.print_help()
        return 0
    if args.command == "templates":
        return _cmd_templates()
    try:
        session = load_session(Path(args.input), settings)
    except (OSError, ValueError) as exc:
        print(f"Unable to read {args.input}: {exc}", file=sys.stderr)
        return 2
    if args.command == "print-style":
        json.dump(PrintStyle.from_style(session.style).to_payload(), sys.stdout, indent=2)
        sys.stdout.write("\n")
        return 0
    return _cmd_export(session, Path(args.output), template=args.template)


def _cmd_templates(stream: TextIO | None = None) -> int:
    destination = stream or sys.stdout
    json.dump(builtin_registry().list(), destination, indent=2)
    destination.write("\n")
    return 0


def _cmd_export(session: EditorSession, output: Path, *, template: str | None = None) -> int:
    if template is not None:
        if template not in session.registry:
            print(f"Unknown template '{template}'", file=sys.stderr)
            return 2
        session.change_template(template)
    pipeline = ExportPipeline(session.registry)
    try:
        data = asyncio.run(pipeline.export(session.document))
    except ExportError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(data)
    _LOGGER.info("Wrote %s (%d bytes)", output, len(data))
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="resumer",
        description="Inspect resume documents, list templates, and export PDFs.",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
    parser.add_argument(
        "--dump-settings",
        action="store_true",
        help="Print the effective settings payload (with secrets redacted) and exit.",
    )
    parser.add_argument(
        "--settings-path",
        metavar="PATH",
        help="Override the default ~/.resumer/settings.json path.",
    )
    parser.add_argument(
        "--set",
        dest="overrides",
        metavar="KEY=VALUE",
        action="append",
        default=[],
        help="Override persisted settings for this run (repeatable).",
    )
    commands = parser.add_subparsers(dest="command")

    export = commands.add_parser("export", help="Render a resume JSON file to PDF.")
    export.add_argument("input", metavar="INPUT.json")
    export.add_argument("-o", "--output", required=True, metavar="OUT.pdf")
    export.add_argument("--template", metavar="ID", help="Render with another registered template.")

    print_style = commands.add_parser("print-style", help="Show the resolved print units of a resume.")
    print_style.add_argument("input", metavar="INPUT.json")

    commands.add_parser("templates", help="List registered templates.")
    return parser


def _env_flag(name: str, *, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


def _coerce_cli_overrides(items: Sequence[str]) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    for entry in items:
        if "=" not in entry:
            raise ValueError(f"Override '{entry}' must use KEY=VALUE syntax.")
        key, raw_value = entry.split("=", 1)
        key = key.strip()
        if not key:
            raise ValueError("Override is missing a field name.")
        try:
            overrides[key] = coerce_setting(key, raw_value.strip())
        except KeyError as exc:
            raise ValueError(f"Unknown setting '{key}'.") from exc
    return overrides


def _dump_settings(
    settings: Settings,
    store: SettingsStore,
    *,
    overrides: Mapping[str, Any],
    stream: TextIO | None = None,
) -> None:
    destination = stream or sys.stdout
    payload = asdict(settings)
    payload["api_token"] = redact_secret(payload.get("api_token", ""))
    metadata = {
        "path": str(store.path),
        "secret_backend": store.vault.name,
        "log_path": str(logging_utils.get_log_path() or ""),
        "cli_overrides": sorted(overrides.keys()),
        "environment_variables": _active_env_overrides(),
    }
    json.dump({"settings": payload, "meta": metadata}, destination, indent=2)
    destination.write("\n")


def _active_env_overrides() -> list[str]:
    return sorted(name for name in os.environ if name.startswith("RESUMER_"))


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
