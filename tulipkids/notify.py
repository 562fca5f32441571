# tulipkids/notify.py
"""
Toast notifications as an injectable capability.

Request handlers get a FlashNotifier (messages surface through Flask's
flash queue and, for JSON callers, in the response body). Tests pass a
RecordingNotifier and assert on what was said.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional

from flask import flash

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Toast:
    level: str  # success | error
    title: str
    description: Optional[str] = None

    def as_dict(self) -> dict:
        return {"level": self.level, "title": self.title, "description": self.description}


class Notifier(ABC):
    @abstractmethod
    def notify(self, toast: Toast) -> None:
        """Show one toast."""

    def success(self, title: str, description: Optional[str] = None) -> None:
        self.notify(Toast("success", title, description))

    def error(self, title: str, description: Optional[str] = None) -> None:
        self.notify(Toast("error", title, description))


@dataclass
class RecordingNotifier(Notifier):
    toasts: List[Toast] = field(default_factory=list)

    def notify(self, toast: Toast) -> None:
        self.toasts.append(toast)

    @property
    def titles(self) -> List[str]:
        return [t.title for t in self.toasts]

    def levels(self) -> List[str]:
        return [t.level for t in self.toasts]


class FlashNotifier(RecordingNotifier):
    """Records toasts and pushes them onto the session flash queue."""

    # flash categories used by the templates
    CATEGORY = {"success": "success", "error": "danger"}

    def notify(self, toast: Toast) -> None:
        super().notify(toast)
        message = toast.title if not toast.description else f"{toast.title}: {toast.description}"
        flash(message, self.CATEGORY.get(toast.level, "info"))
        if toast.level == "error":
            log.info("toast error shown: %s", message)
