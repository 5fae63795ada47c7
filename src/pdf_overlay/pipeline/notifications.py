# SPDX-License-Identifier: Apache-2.0
"""Notification protocol for document-level events."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)


class NotificationLevel(str, Enum):
    """Severity of a user-facing notification."""

    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@runtime_checkable
class NotificationSink(Protocol):
    """Notification callback protocol."""

    def __call__(self, level: NotificationLevel, message: str) -> None: ...


_LOG_LEVELS = {
    NotificationLevel.SUCCESS: logging.INFO,
    NotificationLevel.INFO: logging.INFO,
    NotificationLevel.WARNING: logging.WARNING,
    NotificationLevel.ERROR: logging.ERROR,
}


class LoggingNotificationSink:
    """Default sink that forwards notifications to ``logging``."""

    def __init__(self, logger_: logging.Logger | None = None) -> None:
        self._logger = logger_ or logger

    def __call__(self, level: NotificationLevel, message: str) -> None:
        self._logger.log(_LOG_LEVELS.get(level, logging.INFO), "[%s] %s", level.value, message)
