#!/usr/bin/env python3
"""Document translator console: browse, delete and submit translation documents."""

from __future__ import annotations

import curses
import os
import sys
from pathlib import Path

from scripts.doctui.catalog import CatalogLoader
from scripts.doctui.config import ServiceConfig, load_config
from scripts.doctui.console import CursesTerminal
from scripts.doctui.controller import WorkflowController
from scripts.doctui.errors import FATAL_ERRORS, DoctransError
from scripts.doctui.logstore import LogStore
from scripts.doctui.models import SessionSummary
from scripts.doctui.plain import PlainTerminal
from scripts.doctui.prompts import Terminal
from scripts.doctui.service import DocumentService
from scripts.doctui.submit import configure, submit_document

COMMANDS = ("documents", "translate", "configure")

USAGE = """usage: doctrans [documents|translate|configure] [--plain] [--config=PATH]

  documents   browse submitted documents, view details or delete them (default)
  translate   submit a document for translation
  configure   write version, API key and URL to the config file

Environment: DOCTRANS_VERSION, DOCTRANS_API_KEY, DOCTRANS_URL,
DOCTRANS_RETRIES, DOCTRANS_RETRY_BACKOFF, DOCTRANS_LOG_DIR,
DOCTRANS_LOG_LEVEL
"""


def run_command(command: str, terminal: Terminal, config: ServiceConfig, config_path: Path | None, logstore: LogStore) -> int:
    summary = SessionSummary(command=command)
    try:
        if command == "configure":
            _, path = configure(terminal, config, config_path)
            logstore.append("info", "configure", f"config written to {path}", category="workflow")
            terminal.message("info", f"Config written to {path}")
            return 0

        config.require_service()
        service = DocumentService(config, logstore)
        if command == "translate":
            document_id = submit_document(terminal, service, logstore)
            if document_id:
                summary.submitted.append(document_id)
            return 0

        controller = WorkflowController(terminal, CatalogLoader(service, logstore), service, logstore)
        code = controller.run()
        summary = controller.summary
        return code
    except FATAL_ERRORS as exc:
        message = f"{type(exc).__name__}: {exc}"
        logstore.append("error", command, message, category="workflow")
        terminal.message("error", message)
        summary.exit_code = 1
        summary.error = message
        return 1
    finally:
        logstore.export_summary(summary.to_payload())


def _parse_args(argv: list[str]) -> tuple[str, bool, Path | None]:
    plain = False
    config_path: Path | None = None
    positional: list[str] = []
    for arg in argv:
        if arg == "--plain":
            plain = True
        elif arg.startswith("--config="):
            config_path = Path(arg.split("=", 1)[1]).expanduser()
        elif arg in ("-h", "--help"):
            raise SystemExit(USAGE)
        elif arg.startswith("-"):
            raise SystemExit(f"unknown option: {arg}\n\n{USAGE}")
        else:
            positional.append(arg)
    command = positional[0] if positional else "documents"
    if command not in COMMANDS or len(positional) > 1:
        raise SystemExit(f"unknown command: {' '.join(positional)}\n\n{USAGE}")
    return command, plain, config_path


def main(argv: list[str] | None = None) -> int:
    command, plain, config_path = _parse_args(sys.argv[1:] if argv is None else argv)
    try:
        config = load_config(config_path)
    except DoctransError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    logstore = LogStore(log_dir=config.log_dir, file_level=config.log_level)

    if plain or not sys.stdin.isatty():
        return run_command(command, PlainTerminal(), config, config_path, logstore)

    os.environ.setdefault("ESCDELAY", "25")
    terminals: list[CursesTerminal] = []

    def _curses_main(stdscr: curses.window) -> int:
        terminal = CursesTerminal(stdscr)
        terminal.setup()
        terminals.append(terminal)
        return run_command(command, terminal, config, config_path, logstore)

    code = curses.wrapper(_curses_main)
    # Curses output is gone once the screen is restored; repeat what mattered.
    for entry in logstore.select("warn", {"catalog", "network", "workflow"}):
        print(entry.message, file=sys.stderr)
    for terminal in terminals:
        for level, text in terminal.messages:
            if level == "info":
                print(text)
    print(f"Log file: {logstore.log_path}", file=sys.stderr if code else sys.stdout)
    return code


if __name__ == "__main__":
    raise SystemExit(main())
