from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Iterable

from .errors import ParseError
from .logstore import LogStore
from .models import DocumentCatalog, DocumentRecord
from .service import DocumentService


def parse_timestamp(value: Any, field_name: str) -> datetime | None:
    if value in (None, ""):
        return None
    if not isinstance(value, str):
        raise ParseError(f"{field_name} must be a timestamp string, got {value!r}")
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as exc:
        raise ParseError(f"{field_name}: invalid timestamp {value!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _count(raw: dict[str, Any], key: str) -> int:
    value = raw.get(key, 0)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ParseError(f"{key} must be a number, got {value!r}")
    return int(value)


def parse_document(raw: Any) -> DocumentRecord:
    if not isinstance(raw, dict):
        raise ParseError(f"document entry must be an object, got {type(raw).__name__}")
    created = parse_timestamp(raw.get("created"), "created")
    if created is None:
        raise ParseError(f"document {raw.get('document_id', '?')}: missing created timestamp")
    return DocumentRecord(
        document_id=str(raw.get("document_id") or ""),
        filename=str(raw.get("filename") or ""),
        status=str(raw.get("status") or ""),
        model_id=str(raw.get("model_id") or raw.get("base_model_id") or ""),
        source=str(raw.get("source") or ""),
        target=str(raw.get("target") or ""),
        word_count=_count(raw, "word_count"),
        character_count=_count(raw, "character_count"),
        created=created,
        completed=parse_timestamp(raw.get("completed"), "completed"),
    )


def parse_documents(payload: bytes | str) -> list[DocumentRecord]:
    try:
        body = json.loads(payload)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ParseError(f"response is not valid JSON: {exc}") from exc
    if not isinstance(body, dict) or not isinstance(body.get("documents", []), list):
        raise ParseError("response must be an object with a 'documents' list")
    return [parse_document(raw) for raw in body.get("documents", [])]


def order_catalog(records: Iterable[DocumentRecord]) -> DocumentCatalog:
    # sorted() is stable with reverse=True, so equal timestamps keep service order.
    return tuple(sorted(records, key=lambda doc: doc.created, reverse=True))


class CatalogLoader:
    def __init__(self, service: DocumentService, logstore: LogStore | None = None) -> None:
        self.service = service
        self.logstore = logstore

    def load(self) -> DocumentCatalog:
        """Fetch, parse and order the remote document collection.

        Transport and parse failures propagate unchanged; there is no partial
        catalog worth showing.
        """
        payload = self.service.list_documents()
        catalog = order_catalog(parse_documents(payload))
        if self.logstore is not None:
            self.logstore.append("info", "load", f"catalog loaded: {len(catalog)} document(s)", category="catalog")
        return catalog
