from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Literal

from .errors import ParseError

DocumentStatus = Literal["submitted", "processing", "available", "completed", "failed"]
KNOWN_STATUSES: frozenset[str] = frozenset({"submitted", "processing", "available", "completed", "failed"})

DOCUMENT_PAGE_SIZE = 4
ACTION_PAGE_SIZE = 3
OTHER_LABEL = "Other"

ACTION_VIEW = 0
ACTION_DELETE = 1
ACTION_TRANSLATE = 2
ACTION_CANCEL = 3

ACCEPT_MAP: dict[str, str] = {
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".htm": "text/html",
    ".html": "text/html",
    ".json": "application/json",
    ".odp": "application/vnd.oasis.opendocument.presentation",
    ".ods": "application/vnd.oasis.opendocument.spreadsheet",
    ".odt": "application/vnd.oasis.opendocument.text",
    ".pdf": "application/pdf",
    ".ppt": "application/vnd.ms-powerpoint",
    ".pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    ".rtf": "application/rtf",
    ".sbv": "text/sbv",
    ".srt": "text/srt",
    ".txt": "text/plain",
    ".vtt": "text/vtt",
    ".xls": "application/vnd.ms-excel",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ".xml": "application/xml",
}

SOURCE_LANGUAGES: tuple[str, ...] = ("en", "zh", "ja")
TARGET_LANGUAGES: tuple[str, ...] = ("zh-TW",)


@dataclass(frozen=True)
class DocumentRecord:
    document_id: str
    filename: str
    status: str
    model_id: str
    source: str
    target: str
    word_count: int
    character_count: int
    created: datetime
    completed: datetime | None = None

    def __post_init__(self) -> None:
        if not self.document_id:
            raise ParseError("document_id must not be empty")
        if self.created is None:
            raise ParseError(f"document {self.document_id}: created timestamp is required")
        if self.word_count < 0 or self.character_count < 0:
            raise ParseError(f"document {self.document_id}: counts must be non-negative")

    @property
    def language_pair(self) -> str:
        return f"{self.source} → {self.target}"


DocumentCatalog = tuple[DocumentRecord, ...]


@dataclass(frozen=True)
class PromptSpec:
    label: str
    error_msg: str


@dataclass(frozen=True)
class ActionItem:
    name: str
    value: int


DEFAULT_ACTIONS: tuple[ActionItem, ...] = (
    ActionItem("View details", ACTION_VIEW),
    ActionItem("Delete", ACTION_DELETE),
    ActionItem("Translate new document", ACTION_TRANSLATE),
    ActionItem("Cancel", ACTION_CANCEL),
)


@dataclass
class TranslateRequest:
    file_path: Path
    accept: str
    source: str
    target: str

    @property
    def filename(self) -> str:
        return self.file_path.name


@dataclass
class SessionSummary:
    command: str
    exit_code: int = 0
    loads: int = 0
    deleted: list[str] = field(default_factory=list)
    submitted: list[str] = field(default_factory=list)
    error: str = ""

    def to_payload(self) -> dict[str, object]:
        return {
            "command": self.command,
            "exit_code": self.exit_code,
            "loads": self.loads,
            "deleted": list(self.deleted),
            "submitted": list(self.submitted),
            "error": self.error,
        }
