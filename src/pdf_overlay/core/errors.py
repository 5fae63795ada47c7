# SPDX-License-Identifier: Apache-2.0
"""Error definitions for the overlay engine."""

from __future__ import annotations


class OverlayError(Exception):
    """Base exception for overlay errors."""

    def __init__(
        self,
        message: str,
        stage: str,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.stage = stage
        self.cause = cause


class DocumentLoadError(OverlayError):
    """Source bytes could not be parsed as a PDF (corrupt or encrypted)."""


class CompositionError(OverlayError):
    """Preview or download generation failed at document level."""


class ElementValidationError(OverlayError):
    """A text element violates the data model invariants."""


class FontResolutionError(OverlayError):
    """No usable font could be loaded for an element."""


class NoDocumentError(OverlayError):
    """An operation needs a loaded document but none is loaded."""


class SessionBusyError(OverlayError):
    """A preview or download is already running."""
