"""Follow-up conversation about an analysis result."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

from models.analysis_result import AnalysisResult
from models.chat_models import ChatMessage, Role
from services.openai.prompts import NO_CONTEXT_SENTINEL

LOGGER = logging.getLogger(__name__)

EMPTY_REPLY_FALLBACK = "I apologize, I couldn't process that request."
CONNECTION_TROUBLE_REPLY = "I'm having trouble connecting to the medical server. Please try again."


class ChatService(Protocol):
	async def reply(self, history: Sequence[Tuple[str, str]], message: str, context: Optional[str] = None) -> str: ...


def greeting_for(context: Optional[AnalysisResult]) -> str:
	"""Return the opening assistant message, quoting the context when present."""
	if context is None:
		return "Hello! I am Dr. Neuro, your AI medical assistant. How can I help you today?"
	return (
		f"Hello, I'm Dr. Neuro. I see the analysis shows {context.diagnosis.value} "
		f"with {context.confidence}% confidence. How can I help you understand these results?"
	)


def serialize_context(context: Optional[AnalysisResult]) -> str:
	if context is None:
		return NO_CONTEXT_SENTINEL
	return json.dumps(context.result_only().to_dict())


class ConversationSession:
	"""Append-only transcript with at most one outstanding request."""

	def __init__(self, chat_service: ChatService, context: Optional[AnalysisResult] = None) -> None:
		self.chat_service = chat_service
		self.context = context
		self._messages: List[ChatMessage] = []
		self.busy = False

	@classmethod
	def start(cls, chat_service: ChatService, context: Optional[AnalysisResult] = None) -> "ConversationSession":
		"""Create a session whose first message is the assistant greeting."""
		session = cls(chat_service, context)
		session._messages.append(ChatMessage(role=Role.ASSISTANT, text=greeting_for(context)))
		return session

	@property
	def messages(self) -> Tuple[ChatMessage, ...]:
		return tuple(self._messages)

	async def send(self, text: str) -> Optional[ChatMessage]:
		"""Send `text` and append the assistant reply.

		Blank text, or a call while a reply is pending, returns None and
		leaves the transcript unchanged. Remote failures become an assistant
		message instead of an exception.
		"""
		if not text or not text.strip():
			return None
		if self.busy:
			LOGGER.debug("Ignoring message while a reply is pending")
			return None

		history = [(m.role.value, m.text) for m in self._messages]
		user_message = ChatMessage(role=Role.USER, text=text.strip())
		self._messages.append(user_message)
		self.busy = True
		try:
			reply = await self.chat_service.reply(history, user_message.text, serialize_context(self.context))
			answer = ChatMessage(role=Role.ASSISTANT, text=reply or EMPTY_REPLY_FALLBACK)
		except Exception as exc:
			LOGGER.error("Chat reply failed: %s", exc)
			answer = ChatMessage(role=Role.ASSISTANT, text=CONNECTION_TROUBLE_REPLY)
		finally:
			self.busy = False
		self._messages.append(answer)
		return answer

	def to_dict(self) -> Dict[str, Any]:
		return {
			"busy": self.busy,
			"context": self.context.result_only().to_dict() if self.context else None,
			"messages": [m.to_dict() for m in self._messages],
		}
