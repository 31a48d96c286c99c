"""Composition root for one user's analyzer, history and assistant."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Set

from models.analysis_result import AnalysisResult, HistoryItem
from models.errors import InvalidTransitionError
from models.session_models import Complete, Failed, SessionState
from services.analysis_session import AnalysisSession, Classifier
from services.conversation import ChatService, ConversationSession
from services.history_store import ResultStore
from services.navigation import View, ViewSelector
from utils.config import Settings

LOGGER = logging.getLogger(__name__)


class Workspace:
    """Wire the store, the analysis session and the conversation to the views.

    Entering CHAT opens a fresh conversation with the active context, and
    leaving CHAT drops it. A finished analysis becomes the active context.
    Background analysis runs survive navigation; only a reset supersedes them.
    """

    def __init__(
        self,
        store: ResultStore,
        classifier: Classifier,
        chat_service: ChatService,
        settings: Optional[Settings] = None,
    ) -> None:
        settings = settings or Settings()
        self.store = store
        self.chat_service = chat_service
        self.selector = ViewSelector()
        self.analysis = AnalysisSession(
            classifier,
            store,
            enhancement_delay=settings.enhancement_delay,
            max_upload_bytes=settings.max_upload_bytes,
            on_complete=self.selector.bind_context,
        )
        self.analysis.subscribe(self._log_outcome)
        self.conversation: Optional[ConversationSession] = None
        self._tasks: Set[asyncio.Task] = set()

    @staticmethod
    def _log_outcome(state: SessionState) -> None:
        if isinstance(state, Complete):
            LOGGER.info("Analysis %s finished: %s", state.result.id, state.result.diagnosis.value)
        elif isinstance(state, Failed):
            LOGGER.info("Analysis failed: %s", state.reason)

    def navigate(self, view: View) -> View:
        current = self.selector.navigate(view)
        if current is View.CHAT:
            if self.conversation is None:
                self.conversation = ConversationSession.start(self.chat_service, self.selector.active_context)
        else:
            self.conversation = None
        LOGGER.debug("Navigated to %s", current.value)
        return current

    def open_record(self, record_id: str) -> HistoryItem:
        """Bind the stored record and switch to DETAIL; raises RecordNotFoundError."""
        record = self.store.get(record_id)
        self.selector.select_record(record)
        self.conversation = None
        return record

    def discuss(self, result: AnalysisResult) -> ConversationSession:
        """Start a fresh conversation about `result` and switch to CHAT."""
        self.selector.start_chat(result)
        self.conversation = ConversationSession.start(self.chat_service, result)
        return self.conversation

    def discuss_record(self, record_id: str) -> ConversationSession:
        return self.discuss(self.store.get(record_id))

    def discuss_current_analysis(self) -> ConversationSession:
        result = self.analysis.result
        if result is None:
            raise InvalidTransitionError("No completed analysis to discuss.")
        return self.discuss(result)

    def launch_analysis(self) -> asyncio.Task:
        """Start the analysis in the background; raises if none can start."""
        task = asyncio.create_task(self.analysis.begin_analysis())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def aclose(self) -> None:
        """Wait for background analysis runs still in flight."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
