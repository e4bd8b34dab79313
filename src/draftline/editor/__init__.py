"""Editor core: formatting commands, history, synchronization and stats."""

from draftline.editor.commands import (
    CommandKind,
    CommandResult,
    ImagePicker,
    Selection,
    SelectionProvider,
    apply_command,
    apply_image_command,
    resolve_shortcut,
)
from draftline.editor.history import DEFAULT_HISTORY_LIMIT, EditHistory
from draftline.editor.stats import ContentStats, content_stats, reading_time, slugify
from draftline.editor.sync import ContentSynchronizer

__all__ = [
    "DEFAULT_HISTORY_LIMIT",
    "CommandKind",
    "CommandResult",
    "ContentStats",
    "ContentSynchronizer",
    "EditHistory",
    "ImagePicker",
    "Selection",
    "SelectionProvider",
    "apply_command",
    "apply_image_command",
    "content_stats",
    "reading_time",
    "resolve_shortcut",
    "slugify",
]
