"""Assistant transcript helpers for the chat view."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import HTTPException, Request

from controllers.common import require_workspace
from services.conversation import ConversationSession


def _conversation(request: Request) -> ConversationSession:
    conversation = require_workspace(request).conversation
    if conversation is None:
        raise HTTPException(status_code=409, detail="Open the assistant before chatting.")
    return conversation


async def get_chat(request: Request) -> Dict[str, Any]:
    return _conversation(request).to_dict()


async def send_message(request: Request, text: str) -> Dict[str, Any]:
    """Send a message; blank text leaves the transcript unchanged."""
    conversation = _conversation(request)
    if text.strip() and conversation.busy:
        raise HTTPException(status_code=409, detail="A reply is still pending.")
    await conversation.send(text)
    return conversation.to_dict()
