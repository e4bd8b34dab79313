"""Editor session: the single editing interface for articles and newsletters.

A session owns one Document for as long as the editor is open.  Edits flow
through the formatting-command engine into the synchronizer, each
resulting buffer is recorded in the undo history, and every mutation
re-arms the autosave timer.  The save/publish/send handlers are the action
boundary: they validate, persist through the injected record store, and
turn failures into notices instead of raising.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Protocol

from draftline.autosave import AutosaveCoordinator
from draftline.config import DraftlineConfig
from draftline.editor.commands import (
    CommandKind,
    CommandResult,
    ImagePicker,
    Selection,
    SelectionProvider,
    apply_command,
    apply_image_command,
)
from draftline.editor.history import EditHistory
from draftline.editor.stats import reading_time, slugify
from draftline.editor.sync import ContentSynchronizer
from draftline.errors import (
    DeliveryError,
    DraftlineError,
    ErrorReport,
    PersistenceError,
    ValidationError,
)
from draftline.models import (
    ContentMode,
    Document,
    DocumentKind,
    DocumentRecord,
    DocumentStatus,
    RenderedArtifact,
    TemplateDocument,
)
from draftline.render.email import build_email_html
from draftline.render.sanitizer import (
    EMBED_PREVIEW_POLICY,
    PREVIEW_POLICY,
    SanitizerPolicy,
    sanitize,
)
from draftline.render.templates import substitute
from draftline.store import RecordStore

logger = logging.getLogger(__name__)

REQUIRED_FIELDS: dict[DocumentKind, tuple[str, ...]] = {
    DocumentKind.ARTICLE: ("title", "content", "category"),
    DocumentKind.NEWSLETTER: ("subject", "content"),
}


class Notifier(Protocol):
    """User-facing notices (toasts) raised by the action handlers."""

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class EmailTransport(Protocol):
    """Outbound email delivery."""

    async def send(self, subject: str, html: str, recipients: list[str]) -> None: ...


class LoggingNotifier:
    """Notifier that only writes log lines, for headless use."""

    def success(self, message: str) -> None:
        logger.info("%s", message)

    def error(self, message: str) -> None:
        logger.error("%s", message)


@dataclass
class ActionResult:
    """Outcome of a save/publish/send action."""

    ok: bool
    record: DocumentRecord | None = None
    artifact: RenderedArtifact | None = None
    error: DraftlineError | None = None


class EditorSession:
    """One open editor for one document.

    Args:
        store: The external record store.
        kind: Article or newsletter.
        record: A stored record to resume editing, or None for a new one.
        config: Pipeline configuration; defaults are used when omitted.
        notifier: Receives user-facing notices from the action handlers.
        selection_provider: Host UI hook that supplies the current selection.
        image_picker: Collaborator that returns a markdown image tag.
        transport: Outbound email delivery for newsletters.
        author: The current user, recorded on persisted documents.
        report: Collects silently-reported background failures.
        supports_rich_input: Whether HTML can be the authoritative side.
        supports_markdown_input: Whether markdown can be the authoritative side.
    """

    def __init__(
        self,
        store: RecordStore,
        *,
        kind: DocumentKind = DocumentKind.ARTICLE,
        record: DocumentRecord | None = None,
        config: DraftlineConfig | None = None,
        notifier: Notifier | None = None,
        selection_provider: SelectionProvider | None = None,
        image_picker: ImagePicker | None = None,
        transport: EmailTransport | None = None,
        author: str = "",
        report: ErrorReport | None = None,
        supports_rich_input: bool = True,
        supports_markdown_input: bool = True,
    ) -> None:
        if not (supports_rich_input or supports_markdown_input):
            raise ValueError("An editor must support at least one input mode")
        self.store = store
        self.config = config or DraftlineConfig()
        self.notifier: Notifier = notifier or LoggingNotifier()
        self.selection_provider = selection_provider
        self.image_picker = image_picker
        self.transport = transport
        self.author = author
        self.report = report or ErrorReport()
        self.supports_rich_input = supports_rich_input
        self.supports_markdown_input = supports_markdown_input

        self.record = record
        self.kind = record.kind if record else DocumentKind(kind)
        self.title = record.title if record else ""
        self.subject = record.subject if record else ""
        self.preview_text = record.preview_text if record else ""
        self.excerpt = record.excerpt if record else ""
        self.category = record.category if record else ""
        self.tags: list[str] = list(record.tags) if record else []
        self.slug = record.slug if record else ""
        self.template_id = record.template_id if record else ""

        document = record.to_document() if record else Document(content_mode=self._default_mode())
        self.sync = ContentSynchronizer(document, engine=self.config.render.engine)
        self._check_mode(self.sync.mode)
        self.history = EditHistory(limit=self.config.editor.history_limit)
        self.history.record(self.sync.text)
        self.caret = len(self.sync.text)

        self.autosave = AutosaveCoordinator(
            self._background_persist,
            delay=self.config.autosave.delay_seconds,
            enabled=self.config.autosave.enabled,
            report=self.report,
            label=record.id if record else f"new {self.kind.value}",
        )

    @classmethod
    async def open(
        cls,
        store: RecordStore,
        document_id: str | None = None,
        **kwargs: Any,
    ) -> EditorSession:
        """Open a session on a stored document, or on a new one.

        Raises:
            KeyError: If ``document_id`` is given but not found.
        """
        record = None
        if document_id is not None:
            record = await store.get_document(document_id)
            if record is None:
                raise KeyError(document_id)
        return cls(store, record=record, **kwargs)

    # ── State ────────────────────────────────────────────────────

    @property
    def document(self) -> Document:
        return self.sync.document

    @property
    def text(self) -> str:
        return self.sync.text

    @property
    def mode(self) -> ContentMode:
        return self.sync.mode

    @property
    def closed(self) -> bool:
        return self.autosave.closed

    def _default_mode(self) -> ContentMode:
        if self.supports_markdown_input:
            return ContentMode.MARKDOWN
        return ContentMode.HTML

    def _check_mode(self, mode: ContentMode) -> None:
        if mode == ContentMode.HTML and not self.supports_rich_input:
            raise DraftlineError("This editor does not support rich (HTML) input")
        if mode == ContentMode.MARKDOWN and not self.supports_markdown_input:
            raise DraftlineError("This editor does not support markdown input")

    def _ensure_open(self) -> None:
        if self.closed:
            raise DraftlineError("Editor session is closed")

    def _commit(self, text: str, caret: int) -> None:
        self.sync.edit(text)
        self.history.record(text)
        self.caret = caret
        if self.selection_provider is not None:
            self.selection_provider.set_caret(caret)
        self.autosave.notify_change()

    def _current_selection(self, selection: Selection | None) -> Selection:
        if selection is not None:
            return selection
        if self.selection_provider is not None:
            return self.selection_provider.get_selection()
        return Selection.caret(self.caret)

    # ── Editing ──────────────────────────────────────────────────

    def type_text(self, text: str, caret: int | None = None) -> None:
        """Replace the authoritative buffer with directly typed/pasted text."""
        self._ensure_open()
        self._commit(text, len(text) if caret is None else caret)

    def apply(
        self,
        command: CommandKind | str,
        selection: Selection | None = None,
        placeholder_text: str | None = None,
    ) -> CommandResult:
        """Apply a formatting command at ``selection`` (or the host's selection)."""
        self._ensure_open()
        if self.mode != ContentMode.MARKDOWN:
            raise DraftlineError("Formatting commands require markdown mode")
        result = apply_command(
            self.text, self._current_selection(selection), command, placeholder_text
        )
        self._commit(result.new_buffer, result.new_caret)
        return result

    async def insert_image(self, selection: Selection | None = None) -> CommandResult:
        """Insert the image tag chosen through the image picker."""
        self._ensure_open()
        if self.image_picker is None:
            raise DraftlineError("No image picker configured")
        selection = self._current_selection(selection)
        result = await apply_image_command(self.text, selection, self.image_picker)
        if result.inserted_text:
            self._commit(result.new_buffer, result.new_caret)
        return result

    def undo(self) -> bool:
        """Restore the previous snapshot.  Returns False when there is none."""
        self._ensure_open()
        snapshot = self.history.undo()
        if snapshot is None:
            return False
        self.sync.edit(snapshot)
        self.caret = len(snapshot)
        self.autosave.notify_change()
        return True

    def redo(self) -> bool:
        """Re-apply the next snapshot.  Returns False when there is none."""
        self._ensure_open()
        snapshot = self.history.redo()
        if snapshot is None:
            return False
        self.sync.edit(snapshot)
        self.caret = len(snapshot)
        self.autosave.notify_change()
        return True

    def set_mode(self, mode: ContentMode | str) -> None:
        """Switch the authoritative representation.

        History restarts from the new buffer, since snapshots of the
        other representation cannot be replayed into it.
        """
        self._ensure_open()
        mode = ContentMode(mode)
        if mode == self.mode:
            return
        self._check_mode(mode)
        self.sync.set_mode(mode)
        self.history.clear()
        self.history.record(self.text)
        self.caret = len(self.text)
        self.autosave.notify_change()

    def apply_template(self, template: TemplateDocument) -> None:
        """Start the body and subject from a template (copied, not referenced).

        The template becomes the markdown source when this editor accepts
        markdown, and the HTML source otherwise.  History restarts only
        when the authoritative side changes.
        """
        self._ensure_open()
        mode = ContentMode.MARKDOWN if self.supports_markdown_input else ContentMode.HTML
        if mode != self.mode:
            self.history.clear()
        self.sync.apply_template(template, mode)
        self.subject = template.subject
        self.template_id = template.id
        self.history.record(self.text)
        self.caret = len(self.text)
        if self.selection_provider is not None:
            self.selection_provider.set_caret(self.caret)
        self.autosave.notify_change()

    def update_fields(self, **fields: Any) -> None:
        """Set metadata fields (title, subject, category, tags, ...)."""
        self._ensure_open()
        allowed = {"title", "subject", "preview_text", "excerpt", "category", "tags", "slug"}
        unknown = set(fields) - allowed
        if unknown:
            raise ValueError(f"Unknown fields: {', '.join(sorted(unknown))}")
        for name, value in fields.items():
            setattr(self, name, list(value) if name == "tags" else value)
        self.autosave.notify_change()

    # ── Rendering ────────────────────────────────────────────────

    def _preview_policy(self) -> SanitizerPolicy:
        if self.config.render.allow_iframes:
            return EMBED_PREVIEW_POLICY
        return PREVIEW_POLICY

    def preview(self) -> RenderedArtifact:
        """Sanitized HTML for the live preview surface."""
        body = self.sync.regenerate_html()
        return RenderedArtifact(
            html=sanitize(body, self._preview_policy()),
            subject=self.subject,
            rendered_at=datetime.now(tz=UTC),
        )

    def render_email(self, values: Mapping[str, str] | None = None) -> RenderedArtifact:
        """Final email HTML: placeholders filled, body sanitized, shell applied."""
        values = values or {}
        body = substitute(self.sync.regenerate_html(), values)
        subject = substitute(self.subject, values)
        email = self.config.email
        return RenderedArtifact(
            html=build_email_html(
                subject,
                body,
                footer_text=email.footer_text,
                unsubscribe_url=email.unsubscribe_url,
                unsubscribe_text=email.unsubscribe_text,
            ),
            subject=subject,
            rendered_at=datetime.now(tz=UTC),
        )

    # ── Persistence ──────────────────────────────────────────────

    def validate(self) -> None:
        """Raise ValidationError if any required field is empty."""
        values = {
            "title": self.title,
            "subject": self.subject,
            "category": self.category,
            "content": self.text,
        }
        missing = [f for f in REQUIRED_FIELDS[self.kind] if not values[f].strip()]
        if missing:
            raise ValidationError(missing)

    def _payload(self) -> dict[str, Any]:
        doc = self.document
        html_source = self.sync.regenerate_html()
        return {
            "kind": self.kind,
            "title": self.title,
            "subject": self.subject,
            "preview_text": self.preview_text,
            "excerpt": self.excerpt,
            "category": self.category,
            "tags": list(self.tags),
            "slug": self.slug or slugify(self.title),
            "markdown_source": doc.markdown_source,
            "html_source": html_source,
            "content_mode": doc.content_mode,
            "reading_time": reading_time(self.text, self.config.editor.words_per_minute),
            "template_id": self.template_id,
            "author": self.author,
        }

    async def _write(self, extra: dict[str, Any] | None = None) -> DocumentRecord:
        payload = {**self._payload(), **(extra or {})}
        if self.record is None:
            record = await self.store.create_document(payload)
        else:
            record = await self.store.update_document(self.record.id, payload)
        if not self.closed:
            self.record = record
            self.autosave.label = record.id
        return record

    async def _background_persist(self) -> DocumentRecord | None:
        if self.record is None:
            logger.debug("Skipping autosave of unsaved %s", self.kind.value)
            return None
        return await self._write()

    async def _explicit_persist(self, extra: dict[str, Any] | None = None) -> DocumentRecord:
        async def _persist() -> DocumentRecord:
            return await self._write(extra)

        try:
            record = await self.autosave.save_now(_persist)
        except Exception as exc:
            raise PersistenceError(f"Failed to save {self.kind.value}") from exc
        if record is None:
            raise DraftlineError("Editor session is closed")
        return record

    async def save(self) -> ActionResult:
        """Save a draft immediately, bypassing the autosave debounce."""
        try:
            self._ensure_open()
            self.validate()
            record = await self._explicit_persist({"status": DocumentStatus.DRAFT})
        except DraftlineError as exc:
            return self._fail("save", exc)
        self.notifier.success(f"{self.kind.value.capitalize()} saved")
        return ActionResult(ok=True, record=record)

    async def publish(self, scheduled_at: datetime | None = None) -> ActionResult:
        """Publish an article now, or schedule it for ``scheduled_at``."""
        try:
            self._ensure_open()
            self.validate()
            if scheduled_at is not None:
                extra = {"status": DocumentStatus.SCHEDULED, "scheduled_at": scheduled_at}
            else:
                extra = {
                    "status": DocumentStatus.PUBLISHED,
                    "published_at": datetime.now(tz=UTC),
                }
            record = await self._explicit_persist(extra)
        except DraftlineError as exc:
            return self._fail("publish", exc)
        if scheduled_at is not None:
            self.notifier.success(f"Scheduled for {scheduled_at.isoformat()}")
        else:
            self.notifier.success(f"{self.kind.value.capitalize()} published")
        return ActionResult(ok=True, record=record, artifact=self.preview())

    async def send(
        self,
        recipients: list[str],
        values: Mapping[str, str] | None = None,
    ) -> ActionResult:
        """Persist the newsletter and hand the final email to the transport."""
        try:
            self._ensure_open()
            if self.kind != DocumentKind.NEWSLETTER:
                raise DraftlineError("Only newsletters can be sent")
            if self.transport is None:
                raise DeliveryError("No email transport configured")
            self.validate()
            artifact = self.render_email(values)
            record = await self._explicit_persist()
            try:
                await self.transport.send(artifact.subject, artifact.html, list(recipients))
            except Exception as exc:
                raise DeliveryError("Failed to send newsletter") from exc
        except DraftlineError as exc:
            return self._fail("send", exc)
        logger.info("Sent %s to %d recipient(s)", record.id, len(recipients))
        try:
            record = await self._explicit_persist(
                {"status": DocumentStatus.SENT, "published_at": datetime.now(tz=UTC)}
            )
        except DraftlineError as exc:
            # The email is already delivered, so the action still succeeds.
            logger.warning("Sent %s but could not mark it sent", record.id, exc_info=True)
            self.report.add_error(
                "send", str(exc), source=record.id, error_type="status_error"
            )
            self.notifier.error("Newsletter sent, but its status could not be saved")
            return ActionResult(ok=True, record=self.record, artifact=artifact, error=exc)
        self.notifier.success("Newsletter sent")
        return ActionResult(ok=True, record=record, artifact=artifact)

    async def send_test(self, address: str, values: Mapping[str, str] | None = None) -> ActionResult:
        """Send the current rendering to one address without persisting."""
        try:
            self._ensure_open()
            if self.transport is None:
                raise DeliveryError("No email transport configured")
            if not address.strip():
                raise ValidationError(["test_address"])
            artifact = self.render_email(values)
            try:
                await self.transport.send(artifact.subject, artifact.html, [address])
            except Exception as exc:
                raise DeliveryError("Failed to send test email") from exc
        except DraftlineError as exc:
            return self._fail("send_test", exc)
        self.notifier.success(f"Test email sent to {address}")
        return ActionResult(ok=True, artifact=artifact)

    def _fail(self, action: str, exc: DraftlineError) -> ActionResult:
        if isinstance(exc, ValidationError):
            logger.info("%s aborted: %s", action, exc)
        else:
            logger.error("%s failed: %s", action, exc, exc_info=exc.__cause__ is not None)
        self.notifier.error(str(exc))
        return ActionResult(ok=False, error=exc)

    def close(self) -> None:
        """Close the session; pending autosave is cancelled."""
        self.autosave.close()
        logger.debug("Closed editor session for %s", self.autosave.label)
