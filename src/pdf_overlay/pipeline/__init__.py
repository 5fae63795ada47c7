# SPDX-License-Identifier: Apache-2.0
"""Editor session package."""

from pdf_overlay.core.errors import (
    CompositionError,
    DocumentLoadError,
    ElementValidationError,
    FontResolutionError,
    NoDocumentError,
    OverlayError,
    SessionBusyError,
)
from pdf_overlay.pipeline.editor_session import DownloadResult, EditorConfig, EditorSession
from pdf_overlay.pipeline.notifications import (
    LoggingNotificationSink,
    NotificationLevel,
    NotificationSink,
)

__all__ = [
    "CompositionError",
    "DocumentLoadError",
    "DownloadResult",
    "EditorConfig",
    "EditorSession",
    "ElementValidationError",
    "FontResolutionError",
    "LoggingNotificationSink",
    "NoDocumentError",
    "NotificationLevel",
    "NotificationSink",
    "OverlayError",
    "SessionBusyError",
]
