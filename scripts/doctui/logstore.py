from __future__ import annotations

import json
import time
from collections import Counter, deque
from dataclasses import dataclass
from pathlib import Path

LEVELS: tuple[str, ...] = ("debug", "info", "warn", "error")
CATEGORIES: frozenset[str] = frozenset({"system", "network", "catalog", "prompt", "workflow"})

FALLBACK_LOG_DIR = Path(".cache") / "doctrans" / "logs"


def level_rank(level: str) -> int:
    try:
        return LEVELS.index(level)
    except ValueError:
        return LEVELS.index("info")


@dataclass
class LogEntry:
    ts: float
    level: str
    scope: str
    category: str
    message: str

    def format_line(self) -> str:
        stamp = time.strftime("%H:%M:%S", time.localtime(self.ts))
        return f"{stamp} [{self.level.upper():5}] [{self.category or 'system'}] [{self.scope or '-'}] {self.message}"


def resolve_log_dir(preferred: Path | None) -> tuple[Path, str]:
    """Pick the first writable log directory.

    Returns the directory and, when the preferred one was rejected, the
    reason it was skipped.
    """
    fallback = Path.home() / FALLBACK_LOG_DIR
    reason = ""
    for candidate in [p for p in (preferred, fallback) if p is not None]:
        try:
            candidate.mkdir(parents=True, exist_ok=True)
            probe = candidate / ".write-test"
            probe.write_text("ok\n", encoding="utf-8")
            probe.unlink(missing_ok=True)
            return candidate, reason
        except PermissionError as exc:
            reason = f"permission denied for {candidate}: {exc}"
        except OSError as exc:
            reason = f"cannot use {candidate}: {exc}"
    fallback.mkdir(parents=True, exist_ok=True)
    return fallback, reason or "using fallback log directory"


class LogStore:
    """Session log: every entry is kept in memory, entries at or above
    ``file_level`` are also appended to ``session-<ts>.log``."""

    def __init__(self, max_entries: int = 2000, log_dir: Path | None = None, file_level: str = "info") -> None:
        self.entries: deque[LogEntry] = deque(maxlen=max_entries)
        self.file_level = file_level
        self.log_dir, fallback_reason = resolve_log_dir(log_dir)
        ts = time.strftime("%Y%m%d-%H%M%S", time.localtime())
        self.log_path = self.log_dir / f"session-{ts}.log"
        self.summary_path = self.log_dir / f"summary-{ts}.json"
        self.append("info", "startup", f"log_path={self.log_path}")
        if fallback_reason:
            self.append("warn", "startup", f"log directory fallback: {fallback_reason}")

    def append(
        self,
        level: str,
        scope: str,
        message: str,
        ts: float | None = None,
        category: str = "system",
    ) -> LogEntry:
        entry = LogEntry(ts=ts or time.time(), level=level, scope=scope, category=category, message=message)
        self.entries.append(entry)
        if level_rank(level) >= level_rank(self.file_level):
            with self.log_path.open("a", encoding="utf-8") as fh:
                fh.write(entry.format_line() + "\n")
        return entry

    def select(self, min_level: str = "debug", categories: set[str] | None = None) -> list[LogEntry]:
        floor = level_rank(min_level)
        mask = categories or set(CATEGORIES)
        return [e for e in self.entries if level_rank(e.level) >= floor and e.category in mask]

    def level_counts(self) -> dict[str, int]:
        counts = Counter(entry.level for entry in self.entries)
        return {level: counts.get(level, 0) for level in LEVELS}

    def export_summary(self, payload: dict) -> Path:
        doc = dict(payload)
        doc["log_path"] = str(self.log_path)
        doc["log_levels"] = self.level_counts()
        with self.summary_path.open("w", encoding="utf-8") as fh:
            json.dump(doc, fh, indent=2, sort_keys=True)
            fh.write("\n")
        return self.summary_path
