"""Formatting commands over a flat text buffer.

Each command takes the buffer and the current selection and returns the
new buffer together with the caret position, which always lands right
after the inserted text.  The engine never touches an editing surface;
hosts supply selections through a ``SelectionProvider``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol


class CommandKind(StrEnum):
    """Available formatting commands."""

    BOLD = "bold"
    ITALIC = "italic"
    STRIKETHROUGH = "strikethrough"
    CODE = "code"
    LINK = "link"
    HEADING_1 = "h1"
    HEADING_2 = "h2"
    HEADING_3 = "h3"
    UNORDERED_LIST = "list"
    ORDERED_LIST = "ordered-list"
    QUOTE = "quote"
    CODE_BLOCK = "codeblock"
    HORIZONTAL_RULE = "hr"
    TABLE = "table"
    IMAGE = "image"


@dataclass(frozen=True)
class Selection:
    """Offsets into the authoritative buffer, ``start <= end``."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0 or self.end < self.start:
            raise ValueError(f"Invalid selection: start={self.start}, end={self.end}")

    @classmethod
    def caret(cls, position: int) -> Selection:
        return cls(position, position)

    def clamp(self, length: int) -> Selection:
        """Return this selection limited to a buffer of ``length`` chars."""
        return Selection(min(self.start, length), min(self.end, length))


@dataclass(frozen=True)
class CommandResult:
    new_buffer: str
    new_caret: int
    inserted_text: str


class SelectionProvider(Protocol):
    """Implemented by the host UI to expose its selection and caret."""

    def get_selection(self) -> Selection: ...

    def set_caret(self, position: int) -> None: ...


class ImagePicker(Protocol):
    """Returns a markdown image tag (``![alt](url)``), or None when cancelled."""

    async def pick_image(self) -> str | None: ...


PLACEHOLDERS: dict[CommandKind, str] = {
    CommandKind.BOLD: "bold text",
    CommandKind.ITALIC: "italic text",
    CommandKind.STRIKETHROUGH: "struck text",
    CommandKind.CODE: "code",
    CommandKind.LINK: "link text",
    CommandKind.HEADING_1: "Heading",
    CommandKind.HEADING_2: "Heading",
    CommandKind.HEADING_3: "Heading",
    CommandKind.UNORDERED_LIST: "List item",
    CommandKind.ORDERED_LIST: "List item",
    CommandKind.QUOTE: "Quote",
    CommandKind.CODE_BLOCK: "code",
}

_TEMPLATES: dict[CommandKind, str] = {
    CommandKind.BOLD: "**{text}**",
    CommandKind.ITALIC: "*{text}*",
    CommandKind.STRIKETHROUGH: "~~{text}~~",
    CommandKind.CODE: "`{text}`",
    CommandKind.LINK: "[{text}](url)",
    CommandKind.HEADING_1: "\n# {text}",
    CommandKind.HEADING_2: "\n## {text}",
    CommandKind.HEADING_3: "\n### {text}",
    CommandKind.UNORDERED_LIST: "\n- {text}",
    CommandKind.ORDERED_LIST: "\n1. {text}",
    CommandKind.QUOTE: "\n> {text}",
    CommandKind.CODE_BLOCK: "\n```\n{text}\n```",
}

HORIZONTAL_RULE = "\n\n---\n\n"

TABLE_SKELETON = (
    "\n\n| Column 1 | Column 2 | Column 3 |\n"
    "|----------|----------|----------|\n"
    "| Cell 1   | Cell 2   | Cell 3   |\n\n"
)

# (key, ctrl, shift) -> action name
SHORTCUTS: dict[tuple[str, bool, bool], str] = {
    ("b", True, False): CommandKind.BOLD.value,
    ("i", True, False): CommandKind.ITALIC.value,
    ("k", True, False): CommandKind.LINK.value,
    ("s", True, False): "save",
    ("z", True, False): "undo",
    ("z", True, True): "redo",
    ("y", True, False): "redo",
}


def resolve_shortcut(key: str, *, ctrl: bool = False, shift: bool = False) -> str | None:
    """Map a key chord to a command or editor action name."""
    return SHORTCUTS.get((key.lower(), ctrl, shift))


def format_text(
    command: CommandKind | str,
    selected_text: str,
    placeholder_text: str | None = None,
) -> str:
    """Return the text that replaces the selection for a command.

    Raises:
        ValueError: For ``image``, which needs a picker (see ``insert_text``).
    """
    command = CommandKind(command)
    if command == CommandKind.HORIZONTAL_RULE:
        return HORIZONTAL_RULE
    if command == CommandKind.TABLE:
        return TABLE_SKELETON
    if command == CommandKind.IMAGE:
        raise ValueError("image command requires an image picker")

    text = selected_text or placeholder_text or PLACEHOLDERS[command]
    return _TEMPLATES[command].format(text=text)


def insert_text(buffer: str, selection: Selection, text: str) -> CommandResult:
    """Replace the selection with ``text`` and put the caret after it."""
    selection = selection.clamp(len(buffer))
    new_buffer = buffer[: selection.start] + text + buffer[selection.end :]
    return CommandResult(
        new_buffer=new_buffer,
        new_caret=selection.start + len(text),
        inserted_text=text,
    )


def apply_command(
    buffer: str,
    selection: Selection,
    command: CommandKind | str,
    placeholder_text: str | None = None,
) -> CommandResult:
    """Apply a formatting command to ``buffer`` at ``selection``.

    Args:
        buffer: The authoritative text buffer.
        selection: The current selection; an empty selection is a caret.
        command: Which transform to apply.
        placeholder_text: Overrides the default placeholder used when
            nothing is selected.

    Returns:
        The new buffer and caret.
    """
    selection = selection.clamp(len(buffer))
    selected_text = buffer[selection.start : selection.end]
    replacement = format_text(command, selected_text, placeholder_text)
    return insert_text(buffer, selection, replacement)


async def apply_image_command(
    buffer: str, selection: Selection, picker: ImagePicker
) -> CommandResult:
    """Insert the markdown image tag returned by ``picker`` at the selection.

    A cancelled pick leaves the buffer untouched with the caret at the
    selection start.
    """
    selection = selection.clamp(len(buffer))
    tag = await picker.pick_image()
    if not tag:
        return CommandResult(new_buffer=buffer, new_caret=selection.start, inserted_text="")
    return insert_text(buffer, selection, tag)
