"""Collaborators the engines talk to.

``Transport`` performs authenticated action-API requests; ``EditorHost``
owns the document buffer, prompts and user-visible messages.  Both are
structural protocols so any object with the right methods will do.

``ScriptedHost`` is a non-interactive ``EditorHost`` that answers prompts
from pre-set values and records everything shown to the user.  The MCP
tools drive the engines through it.
"""

from __future__ import annotations

import contextlib
import logging
from collections import deque
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class Transport(Protocol):
    def request(self, params: Mapping[str, str]) -> dict[str, Any]:
        """Send one action-API request and return the decoded JSON."""
        ...


class EditorHost(Protocol):
    def get_text(self) -> str | None:
        """Text of the active document, or None without one."""
        ...

    def get_file_name(self) -> str | None:
        """File name of the active document, or None if untitled."""
        ...

    def replace_text(self, text: str) -> None: ...

    def open_document(self, content: str, language: str) -> None: ...

    def insert_at_selection(self, text: str) -> None: ...

    def show_input(
        self,
        prompt: str,
        value: str | None = None,
        placeholder: str | None = None,
    ) -> str | None:
        """Ask for one line of text; None means the user cancelled."""
        ...

    def show_choice(self, message: str, choices: Sequence[str]) -> str | None:
        """Ask the user to pick one of *choices*; None means cancelled."""
        ...

    def show_information(self, message: str) -> None: ...

    def show_warning(self, message: str) -> None: ...

    def show_error(self, message: str) -> None: ...

    def status(self, message: str) -> contextlib.AbstractContextManager[None]:
        """Show *message* as progress for the duration of the block."""
        ...


@dataclass
class Message:
    level: str
    text: str


@dataclass
class OpenedDocument:
    content: str
    language: str


@dataclass
class ScriptedHost:
    """EditorHost that replays scripted answers.

    Attributes:
        text: Current document text; ``None`` means no active editor.
        file_name: File name of the current document.
        inputs: Answers for successive ``show_input`` calls.  When
            exhausted, the prompt's pre-filled value is accepted.
        choices: Answers for successive ``show_choice`` calls.  When
            exhausted, the prompt is cancelled.
        messages: Everything shown through the message channels.
        documents: Documents opened with ``open_document``.
        active_status: Status text currently displayed, if any.
        status_history: Every status text that was displayed.
    """

    text: str | None = None
    file_name: str | None = None
    inputs: deque[str | None] = field(default_factory=deque)
    choices: deque[str | None] = field(default_factory=deque)
    messages: list[Message] = field(default_factory=list)
    documents: list[OpenedDocument] = field(default_factory=list)
    active_status: str | None = None
    status_history: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not isinstance(self.inputs, deque):
            self.inputs = deque(self.inputs)
        if not isinstance(self.choices, deque):
            self.choices = deque(self.choices)

    # ------------------------------------------------------------------
    # Document
    # ------------------------------------------------------------------

    def get_text(self) -> str | None:
        return self.text

    def get_file_name(self) -> str | None:
        return self.file_name

    def replace_text(self, text: str) -> None:
        self.text = text

    def open_document(self, content: str, language: str) -> None:
        self.documents.append(OpenedDocument(content, language))

    def insert_at_selection(self, text: str) -> None:
        self.text = (self.text or "") + text

    # ------------------------------------------------------------------
    # Prompts
    # ------------------------------------------------------------------

    def show_input(
        self,
        prompt: str,
        value: str | None = None,
        placeholder: str | None = None,
    ) -> str | None:
        answer = self.inputs.popleft() if self.inputs else value
        logger.debug("Prompt %r answered with %r", prompt, answer)
        return answer

    def show_choice(self, message: str, choices: Sequence[str]) -> str | None:
        self.messages.append(Message("warning", message))
        answer = self.choices.popleft() if self.choices else None
        logger.debug("Choice %r answered with %r", choices, answer)
        return answer

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------

    def show_information(self, message: str) -> None:
        self.messages.append(Message("info", message))

    def show_warning(self, message: str) -> None:
        self.messages.append(Message("warning", message))

    def show_error(self, message: str) -> None:
        self.messages.append(Message("error", message))

    @contextlib.contextmanager
    def status(self, message: str) -> Iterator[None]:
        self.active_status = message
        self.status_history.append(message)
        try:
            yield
        finally:
            self.active_status = None

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def messages_at(self, *levels: str) -> list[str]:
        return [m.text for m in self.messages if m.level in levels]

    def transcript(self, levels: Iterable[str] | None = None) -> str:
        """Render recorded messages as ``[level] text`` lines."""
        wanted = set(levels) if levels is not None else None
        return "\n".join(
            f"[{m.level}] {m.text}"
            for m in self.messages
            if wanted is None or m.level in wanted
        )
