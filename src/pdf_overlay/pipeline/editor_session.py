# SPDX-License-Identifier: Apache-2.0
"""Editor session: the state an overlay host drives.

The session owns the loaded document, the element store, the current page
and zoom, preview mode and the busy flag. Pointer gestures arrive in screen
pixels together with the rendered page's bounding box; the session converts
them through the coordinate functions and mutates the store.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from pdf_overlay.core.calibration import DEFAULT_CALIBRATION, VisualCalibration
from pdf_overlay.core.compositor import PDFCompositor
from pdf_overlay.core.coordinates import (
    ScreenRect,
    SnapCandidates,
    build_snap_candidates,
    clamp_to_page,
    convert_drag,
    convert_placement,
)
from pdf_overlay.core.errors import (
    CompositionError,
    DocumentLoadError,
    NoDocumentError,
    SessionBusyError,
)
from pdf_overlay.core.models import (
    FONT_FAMILIES,
    FONT_SIZES,
    PRESET_COLORS,
    GlyphAnchor,
    PageGeometry,
    TextElement,
)
from pdf_overlay.core.store import TextElementStore, create_text_element
from pdf_overlay.output.page_renderer import PageRenderer, RenderedPage
from pdf_overlay.pipeline.notifications import (
    LoggingNotificationSink,
    NotificationLevel,
    NotificationSink,
)

logger = logging.getLogger(__name__)


@dataclass
class EditorConfig:
    """Editor session configuration."""

    # New element defaults
    default_content: str = "New Text"
    default_x: float = 100.0
    default_y: float = 100.0
    default_font_size: float = 12.0
    default_font_family: str = "Helvetica"
    default_color: str = "#000000"

    # Zoom (display scale)
    zoom_default: float = DEFAULT_CALIBRATION.display_scale
    zoom_min: float = 0.5
    zoom_max: float = 3.0
    zoom_step: float = 0.2

    # Texts offered for one-click or drag-and-drop insertion
    predefined_texts: tuple[str, ...] = ()

    # Choices offered by the style controls
    font_families: tuple[str, ...] = FONT_FAMILIES
    font_sizes: tuple[int, ...] = FONT_SIZES
    preset_colors: tuple[str, ...] = PRESET_COLORS

    calibration: VisualCalibration = DEFAULT_CALIBRATION


@dataclass
class DownloadResult:
    """Composited PDF ready to be saved."""

    pdf_bytes: bytes
    filename: str


@dataclass
class _DragState:
    element_id: str
    initial: tuple[float, float]
    start: tuple[float, float]


class EditorSession:
    """Interactive editing state for one document at a time."""

    def __init__(
        self,
        config: EditorConfig | None = None,
        renderer: PageRenderer | None = None,
        compositor: PDFCompositor | None = None,
        notifier: NotificationSink | None = None,
    ) -> None:
        """Initialize EditorSession.

        Args:
            config: Session configuration.
            renderer: Page rendering collaborator.
            compositor: Compositor used for preview and download.
            notifier: Receives document-level successes and failures.
        """
        self._config = config or EditorConfig()
        calibration = self._config.calibration
        self._renderer = renderer or PageRenderer(calibration)
        self._compositor = compositor or PDFCompositor(calibration)
        self._notify: NotificationSink = notifier or LoggingNotificationSink()

        self.store = TextElementStore()

        self._source: Optional[bytes] = None
        self._source_name = ""
        self._page_count = 0
        self._current_page = 1
        self._scale = self._config.zoom_default
        self._preview_bytes: Optional[bytes] = None
        self._busy = False
        self._drag: Optional[_DragState] = None

        # Per-document lookups, reset on load
        self._geometries: dict[int, PageGeometry] = {}
        self._anchors: dict[int, list[GlyphAnchor]] = {}

    @property
    def config(self) -> EditorConfig:
        return self._config

    @property
    def has_document(self) -> bool:
        return self._source is not None

    @property
    def source_name(self) -> str:
        return self._source_name

    @property
    def page_count(self) -> int:
        return self._page_count

    @property
    def current_page(self) -> int:
        return self._current_page

    @property
    def scale(self) -> float:
        return self._scale

    @property
    def preview_mode(self) -> bool:
        return self._preview_bytes is not None

    @property
    def preview_bytes(self) -> Optional[bytes]:
        return self._preview_bytes

    @property
    def busy(self) -> bool:
        return self._busy

    @property
    def selected(self) -> Optional[TextElement]:
        return self.store.selected

    @property
    def predefined_texts(self) -> tuple[str, ...]:
        return self._config.predefined_texts

    def control_choices(self) -> dict[str, list[Any]]:
        """Values the host offers in its font, size and colour pickers."""
        return {
            "fontFamilies": list(self._config.font_families),
            "fontSizes": list(self._config.font_sizes),
            "presetColors": list(self._config.preset_colors),
        }

    def current_page_elements(self) -> list[TextElement]:
        """Elements on the page being displayed."""
        return self.store.by_page(self._current_page)

    def _require_document(self) -> bytes:
        if self._source is None:
            raise NoDocumentError("No PDF loaded", stage="session")
        return self._source

    def _editable(self, operation: str) -> bool:
        if self.preview_mode:
            logger.debug("Preview mode is on, ignoring %s", operation)
            return False
        return True

    def page_geometry(self, page_number: Optional[int] = None) -> PageGeometry:
        """Native size of a page (default: the current page).

        Raises:
            NoDocumentError: If no document is loaded.
            IndexError: If the page does not exist.
        """
        source = self._require_document()
        page_number = self._current_page if page_number is None else page_number
        if page_number not in self._geometries:
            self._geometries[page_number] = self._renderer.page_geometry(source, page_number)
        return self._geometries[page_number]

    def glyph_anchors(self, page_number: Optional[int] = None) -> list[GlyphAnchor]:
        """Glyph anchors of a page (default: the current page)."""
        source = self._require_document()
        page_number = self._current_page if page_number is None else page_number
        if page_number not in self._anchors:
            self._anchors[page_number] = self._renderer.glyph_anchors(source, page_number)
        return self._anchors[page_number]

    def load_document(self, pdf_bytes: bytes, source_name: str = "document.pdf") -> int:
        """Load a new source document, discarding all elements.

        Args:
            pdf_bytes: Source PDF bytes.
            source_name: File name used to derive the download name.

        Returns:
            Number of pages.

        Raises:
            DocumentLoadError: If the bytes are not a readable PDF.
        """
        try:
            page_count = self._renderer.page_count(pdf_bytes)
        except DocumentLoadError as exc:
            self._notify(NotificationLevel.ERROR, f"Could not load PDF: {exc}")
            raise

        self._source = bytes(pdf_bytes)
        self._source_name = source_name
        self._page_count = page_count
        self._current_page = 1
        self._preview_bytes = None
        self._drag = None
        self._geometries.clear()
        self._anchors.clear()
        self.store.clear()
        self.store.read_only = False

        logger.info("Loaded %s (%d page(s))", source_name, page_count)
        self._notify(NotificationLevel.SUCCESS, f"Loaded {source_name}")
        return page_count

    def render_current_page(self) -> RenderedPage:
        """Render the current page at the current zoom.

        In preview mode the composited bytes are rendered instead of the
        source.
        """
        source = self._require_document()
        pdf_bytes = self._preview_bytes if self._preview_bytes is not None else source
        return self._renderer.render_page(pdf_bytes, self._current_page, self._scale)

    def overlay_style(self, element_id: str) -> Optional[dict[str, Any]]:
        """CSS-like style for drawing an element box at the current zoom."""
        element = self.store.get(element_id)
        if element is None:
            return None
        return self._config.calibration.overlay_style(element, self._scale)

    def _new_element(
        self,
        content: str,
        x: float,
        y: float,
        is_predefined: bool = False,
    ) -> TextElement:
        element = create_text_element(
            content,
            x,
            y,
            self._current_page,
            is_predefined=is_predefined,
            font_size=self._config.default_font_size,
            font_family=self._config.default_font_family,
            color=self._config.default_color,
        )
        self.store.add(element)
        logger.debug("Added %s at (%.2f, %.2f) on page %d", element.id, x, y, self._current_page)
        return element

    def _default_position(self) -> tuple[float, float]:
        return clamp_to_page(
            self._config.default_x,
            self._config.default_y,
            self.page_geometry(),
        )

    def _snap_candidates(self, exclude_id: Optional[str] = None) -> SnapCandidates:
        return build_snap_candidates(
            self.current_page_elements(),
            self.glyph_anchors(),
            self._config.calibration,
            exclude_id=exclude_id,
        )

    def _placement(
        self,
        screen_x: float,
        screen_y: float,
        page_origin: Optional[ScreenRect],
    ) -> tuple[float, float]:
        return convert_placement(
            screen_x,
            screen_y,
            page_origin,
            self._scale,
            self.page_geometry(),
            candidates=self._snap_candidates(),
            calibration=self._config.calibration,
        )

    def add_text(self) -> Optional[TextElement]:
        """Add a default element at the default position of the current page."""
        self._require_document()
        if not self._editable("add_text"):
            return None
        x, y = self._default_position()
        return self._new_element(self._config.default_content, x, y)

    def add_predefined_text(self, text: str | int) -> Optional[TextElement]:
        """Add a locked-content element at the default position.

        Args:
            text: Content, or an index into the configured predefined
                texts (keyboard shortcuts pick by position).

        Returns:
            The new element, or None in preview mode or for an unknown index.
        """
        self._require_document()
        if not self._editable("add_predefined_text"):
            return None
        if isinstance(text, int):
            try:
                text = self._config.predefined_texts[text]
            except IndexError:
                logger.warning("No predefined text at index %d", text)
                return None
        x, y = self._default_position()
        return self._new_element(text, x, y, is_predefined=True)

    def add_text_at(
        self,
        screen_x: float,
        screen_y: float,
        page_origin: Optional[ScreenRect],
    ) -> Optional[TextElement]:
        """Add a default element where the user double-clicked.

        Args:
            screen_x: Pointer X in screen pixels.
            screen_y: Pointer Y in screen pixels.
            page_origin: Bounding box of the rendered page.

        Returns:
            The new element, or None in preview mode.
        """
        self._require_document()
        if not self._editable("add_text_at"):
            return None
        x, y = self._placement(screen_x, screen_y, page_origin)
        return self._new_element(self._config.default_content, x, y)

    def drop_text(
        self,
        text: str,
        screen_x: float,
        screen_y: float,
        page_origin: Optional[ScreenRect],
        predefined: bool = True,
    ) -> Optional[TextElement]:
        """Add an element for text dropped onto the page.

        Empty drops are ignored.
        """
        self._require_document()
        if not self._editable("drop_text"):
            return None
        if not text or not text.strip():
            logger.debug("Ignoring empty drop")
            return None
        x, y = self._placement(screen_x, screen_y, page_origin)
        return self._new_element(text, x, y, is_predefined=predefined)

    def begin_drag(self, element_id: str, pointer_x: float, pointer_y: float) -> bool:
        """Start dragging an element; selects it."""
        if not self._editable("begin_drag"):
            return False
        element = self.store.select(element_id)
        if element is None:
            return False
        self._drag = _DragState(
            element_id=element.id,
            initial=(element.x, element.y),
            start=(pointer_x, pointer_y),
        )
        return True

    def drag_to(self, pointer_x: float, pointer_y: float) -> Optional[tuple[float, float]]:
        """Move the dragged element under the pointer.

        Returns:
            The new (x, y), or None when no drag is active.
        """
        if self._drag is None:
            return None
        element = self.store.get(self._drag.element_id)
        if element is None:
            self._drag = None
            return None

        x, y = convert_drag(
            self._drag.initial,
            self._drag.start,
            (pointer_x, pointer_y),
            self._scale,
            self.page_geometry(element.page_number),
            self._config.calibration,
        )
        self.store.update(element.id, x=x, y=y)
        return (x, y)

    def end_drag(self) -> None:
        self._drag = None

    def update_element(self, element_id: str, **fields: Any) -> bool:
        """Update element fields.

        Content changes on predefined elements are dropped, and position
        changes are clamped to the element's (possibly new) page.

        Returns:
            True if the element was updated.
        """
        element = self.store.get(element_id)
        if element is None or not self._editable("update_element"):
            return False

        if element.is_predefined and "content" in fields:
            logger.warning("Content of predefined element %s is locked", element_id)
            del fields["content"]

        if "page_number" in fields and not self._valid_page(fields["page_number"]):
            logger.warning(
                "Page %r does not exist, keeping %s on page %d",
                fields["page_number"],
                element_id,
                element.page_number,
            )
            del fields["page_number"]

        if fields.keys() & {"x", "y", "page_number"}:
            geometry = self.page_geometry(fields.get("page_number", element.page_number))
            fields["x"], fields["y"] = clamp_to_page(
                float(fields.get("x", element.x)),
                float(fields.get("y", element.y)),
                geometry,
            )

        return self.store.update(element_id, fields)

    def _valid_page(self, page_number: Any) -> bool:
        return (
            isinstance(page_number, int)
            and not isinstance(page_number, bool)
            and 1 <= page_number <= self._page_count
        )

    def edit_content(self, element_id: str, text: str) -> bool:
        """Replace an element's text after an inline edit.

        The text is trimmed; empty results and predefined elements are
        left unchanged.
        """
        element = self.store.get(element_id)
        if element is None or element.is_predefined:
            return False
        trimmed = (text or "").strip()
        if not trimmed:
            logger.debug("Ignoring empty edit of %s", element_id)
            return False
        return self.update_element(element_id, content=trimmed)

    def delete_element(self, element_id: str) -> bool:
        if not self._editable("delete_element"):
            return False
        return self.store.delete(element_id)

    def select(self, element_id: Optional[str]) -> Optional[TextElement]:
        return self.store.select(element_id)

    def go_to_page(self, page_number: int) -> int:
        """Show a page; out-of-range numbers are clamped."""
        self._require_document()
        self._current_page = max(1, min(int(page_number), self._page_count))
        self._drag = None
        return self._current_page

    def next_page(self) -> int:
        return self.go_to_page(self._current_page + 1)

    def previous_page(self) -> int:
        return self.go_to_page(self._current_page - 1)

    def zoom_in(self) -> float:
        self._scale = round(min(self._scale + self._config.zoom_step, self._config.zoom_max), 2)
        return self._scale

    def zoom_out(self) -> float:
        self._scale = round(max(self._scale - self._config.zoom_step, self._config.zoom_min), 2)
        return self._scale

    def reset_zoom(self) -> float:
        self._scale = self._config.zoom_default
        return self._scale

    def _compose(self, purpose: str) -> bytes:
        source = self._require_document()
        if self._busy:
            raise SessionBusyError(f"Cannot start {purpose} while busy", stage="session")

        self._busy = True
        try:
            return self._compositor.compose(source, self.store.snapshot())
        except Exception as exc:
            self._notify(NotificationLevel.ERROR, f"Could not generate {purpose}: {exc}")
            raise CompositionError(
                f"{purpose} failed: {exc}", stage="compose", cause=exc
            ) from exc
        finally:
            self._busy = False

    def enter_preview(self) -> bytes:
        """Compose the current elements and switch to read-only preview.

        Returns:
            Composited PDF bytes.

        Raises:
            NoDocumentError: If no document is loaded.
            SessionBusyError: If a preview or download is running.
            CompositionError: If composition fails.
        """
        pdf_bytes = self._compose("preview")
        self._preview_bytes = pdf_bytes
        self._drag = None
        self.store.read_only = True
        self._notify(NotificationLevel.SUCCESS, "Preview generated")
        return pdf_bytes

    def exit_preview(self) -> None:
        """Return to editing mode."""
        self._preview_bytes = None
        self.store.read_only = False

    def download(self) -> DownloadResult:
        """Compose the current elements for saving.

        Raises:
            NoDocumentError: If no document is loaded.
            SessionBusyError: If a preview or download is running.
            CompositionError: If composition fails.
        """
        pdf_bytes = self._compose("download")
        filename = f"modified-{self._source_name}"
        self._notify(NotificationLevel.SUCCESS, f"Saved {filename}")
        return DownloadResult(pdf_bytes=pdf_bytes, filename=filename)
