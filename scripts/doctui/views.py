from __future__ import annotations

from datetime import datetime

from .models import DocumentRecord

FILENAME_WIDTH = 30
LANGUAGE_WIDTH = 15
ELLIPSIS = "..."
ACTIVE_MARKER = "\U0001F336"
DETAILS_TITLE = "--------- Document ----------"


def clamp(n: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, n))


def truncate(text: str, width: int) -> str:
    """Render ``text`` into exactly ``width`` characters.

    Short text is right-padded. Long text keeps ``width // 2 - 1`` leading
    characters, an ellipsis, and the characters just before the final one.
    """
    if len(text) <= width:
        return text.ljust(width)
    head = width // 2 - 1
    if head <= 0:
        return ELLIPSIS[: max(0, width)]
    tail = width - len(ELLIPSIS) - head
    end = len(text) - 1
    return text[:head] + ELLIPSIS + text[end - tail : end]


def format_timestamp(value: datetime | None) -> str:
    if value is None:
        return "-"
    return value.isoformat().replace("+00:00", "Z")


def document_columns(doc: DocumentRecord) -> tuple[str, str, str]:
    return (
        truncate(doc.filename, FILENAME_WIDTH),
        truncate(doc.language_pair, LANGUAGE_WIDTH),
        f"({doc.status})",
    )


def document_row(doc: DocumentRecord, active: bool = False) -> str:
    filename, langs, status = document_columns(doc)
    marker = ACTIVE_MARKER if active else " "
    return f"{marker} {filename} {langs} {status}"


def selected_row(doc: DocumentRecord) -> str:
    filename, langs, _ = document_columns(doc)
    return f"{ACTIVE_MARKER} {filename} {langs}"


def document_details(doc: DocumentRecord) -> list[tuple[str, str]]:
    return [
        ("DocumentID:", doc.document_id),
        ("Filename:", doc.filename),
        ("Status:", doc.status),
        ("ModelID:", doc.model_id),
        ("Source:", doc.source),
        ("Target:", doc.target),
        ("WordCount:", str(doc.word_count)),
        ("CharacterCount:", str(doc.character_count)),
        ("Created:", format_timestamp(doc.created)),
        ("Completed:", format_timestamp(doc.completed)),
    ]


def details_lines(doc: DocumentRecord) -> list[str]:
    return [DETAILS_TITLE] + [f"{label:<16}{value}" for label, value in document_details(doc)]
