from __future__ import annotations

from typing import Callable, Protocol, Sequence

from .errors import AbortError, DoctransError, InputFailure, ValidationError
from .models import (
    ACTION_PAGE_SIZE,
    DOCUMENT_PAGE_SIZE,
    OTHER_LABEL,
    ActionItem,
    DocumentCatalog,
    DocumentRecord,
    PromptSpec,
)

Validator = Callable[[str], None]


class Terminal(Protocol):
    def read_line(self, label: str, default: str = "", error: str = "") -> str: ...

    def choose(self, label: str, items: Sequence[str], size: int = ACTION_PAGE_SIZE) -> int: ...

    def choose_or_add(self, label: str, items: Sequence[str], add_label: str = OTHER_LABEL) -> tuple[int, str]: ...

    def pick_document(self, label: str, docs: Sequence[DocumentRecord], size: int = DOCUMENT_PAGE_SIZE) -> int: ...

    def show_document(self, doc: DocumentRecord) -> None: ...

    def message(self, level: str, text: str) -> None: ...


def require_non_empty(error_msg: str) -> Validator:
    def validate(value: str) -> None:
        if len(value) <= 0:
            raise ValidationError(error_msg)

    return validate


def prompt_input(
    terminal: Terminal,
    spec: PromptSpec,
    default: str = "",
    validate: Validator | None = None,
) -> str:
    """Ask for one line of text until it validates.

    Validation failures re-render the prompt with the error; an abort or a
    broken terminal is raised as ``InputFailure``.
    """
    check = validate or require_non_empty(spec.error_msg)
    error = ""
    current = default
    while True:
        try:
            value = terminal.read_line(spec.label, current, error)
        except (AbortError, InputFailure) as exc:
            raise InputFailure(f"Prompt failed {exc}") from exc
        try:
            check(value)
        except ValidationError as exc:
            error = str(exc)
            current = value
            continue
        return value


def prompt_select_with_add(terminal: Terminal, spec: PromptSpec, options: Sequence[str]) -> str:
    base = tuple(options)
    added: tuple[str, ...] = ()
    while True:
        items = base + added
        try:
            index, value = terminal.choose_or_add(spec.label, items, OTHER_LABEL)
        except (AbortError, InputFailure) as exc:
            raise InputFailure(f"Prompt failed {exc}") from exc
        if index >= 0:
            return items[index]
        added = added + (value,)


def select_document(
    terminal: Terminal,
    catalog: DocumentCatalog,
    label: str,
) -> tuple[DocumentRecord | None, DoctransError | None]:
    try:
        index = terminal.pick_document(label, catalog, DOCUMENT_PAGE_SIZE)
    except (AbortError, InputFailure) as exc:
        return None, exc
    return catalog[index], None


def choose_action(terminal: Terminal, actions: Sequence[ActionItem]) -> int:
    try:
        return terminal.choose("Action", [action.name for action in actions], ACTION_PAGE_SIZE)
    except (AbortError, InputFailure) as exc:
        raise InputFailure(f"Prompt failed {exc}") from exc
