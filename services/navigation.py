"""Active view and the context handed between views."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from models.analysis_result import AnalysisResult, HistoryItem
from models.errors import InvalidTransitionError


class View(str, Enum):
    LANDING = "LANDING"
    ANALYZER = "ANALYZER"
    HISTORY = "HISTORY"
    CHAT = "CHAT"
    DETAIL = "DETAIL"


class ViewSelector:
    """Track the active view, the selected record and the chat context.

    Bound values are only ever replaced, never cleared by navigation, so
    coming back to CHAT resumes with the same context.
    """

    def __init__(self) -> None:
        self.view = View.LANDING
        self._selected_record: Optional[HistoryItem] = None
        self.active_context: Optional[AnalysisResult] = None

    @property
    def current_record(self) -> Optional[HistoryItem]:
        """The selected record, only meaningful while in DETAIL."""
        return self._selected_record if self.view is View.DETAIL else None

    def navigate(self, view: View) -> View:
        if view is View.DETAIL and self._selected_record is None:
            raise InvalidTransitionError("No record selected")
        self.view = view
        return self.view

    def select_record(self, record: HistoryItem) -> View:
        self._selected_record = record
        self.view = View.DETAIL
        return self.view

    def bind_context(self, result: AnalysisResult) -> None:
        self.active_context = result

    def start_chat(self, result: AnalysisResult) -> View:
        self.bind_context(result)
        self.view = View.CHAT
        return self.view

    def to_dict(self) -> Dict[str, Any]:
        record = self.current_record
        return {
            "view": self.view.value,
            "selected_record_id": record.id if record else None,
            "active_context": self.active_context.result_only().to_dict() if self.active_context else None,
        }
