from __future__ import annotations

import json
from pathlib import Path

from .config import ServiceConfig, save_config, with_credentials
from .errors import UnsupportedFileError, ValidationError
from .logstore import LogStore
from .models import ACCEPT_MAP, SOURCE_LANGUAGES, TARGET_LANGUAGES, PromptSpec, TranslateRequest
from .prompts import Terminal, prompt_input, prompt_select_with_add
from .service import DocumentService

FILE_PROMPT = PromptSpec(label="File Name", error_msg="You must provide the filename")
SOURCE_PROMPT = PromptSpec(label="Source Language", error_msg="You must provide the Source Language")
TARGET_PROMPT = PromptSpec(label="Target Language", error_msg="You must provide the Target Language")


def accept_type(filename: str) -> str:
    ext = Path(filename).suffix.lower()
    if ext not in ACCEPT_MAP:
        raise UnsupportedFileError(ext)
    return ACCEPT_MAP[ext]


def _existing_file(error_msg: str):
    def validate(value: str) -> None:
        if len(value) <= 0:
            raise ValidationError(error_msg)
        if not Path(value).expanduser().is_file():
            raise ValidationError(f"{value}: no such file")

    return validate


def build_translate_request(terminal: Terminal) -> TranslateRequest:
    filename = prompt_input(terminal, FILE_PROMPT, validate=_existing_file(FILE_PROMPT.error_msg))
    accept = accept_type(filename)
    source = prompt_select_with_add(terminal, SOURCE_PROMPT, SOURCE_LANGUAGES)
    target = prompt_select_with_add(terminal, TARGET_PROMPT, TARGET_LANGUAGES)
    return TranslateRequest(
        file_path=Path(filename).expanduser(),
        accept=accept,
        source=source,
        target=target,
    )


def submit_document(terminal: Terminal, service: DocumentService, logstore: LogStore) -> str:
    """Collect a translation request interactively and submit it.

    Returns the new document id, or an empty string when the service reply
    does not carry one.
    """
    request = build_translate_request(terminal)
    logstore.append(
        "info",
        "submit",
        f"submitting {request.filename} ({request.accept}) {request.source} -> {request.target}",
        category="workflow",
    )
    reply = service.translate(request)
    document_id = ""
    try:
        body = json.loads(reply or b"{}")
        if isinstance(body, dict):
            document_id = str(body.get("document_id") or "")
    except (json.JSONDecodeError, UnicodeDecodeError):
        logstore.append("warn", "submit", "translate reply is not JSON", category="network")
    terminal.message("info", f"Submitted {request.filename} for translation {document_id}".rstrip())
    return document_id


def configure(terminal: Terminal, current: ServiceConfig, path: Path | None = None) -> tuple[ServiceConfig, Path]:
    version = prompt_input(
        terminal,
        PromptSpec(label="Version", error_msg="You must provide the service version"),
        current.version,
    )
    api_key = prompt_input(
        terminal,
        PromptSpec(label="API Key", error_msg="You must provide the API key"),
        current.api_key,
    )
    url = prompt_input(
        terminal,
        PromptSpec(label="URL", error_msg="You must provide the service URL"),
        current.url,
    )
    updated = with_credentials(current, version, api_key, url)
    return updated, save_config(updated, path)
