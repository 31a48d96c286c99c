"""Follow-up assistant built on the OpenAI Responses API."""

import logging
import time
from typing import Optional, Sequence, Tuple

from openai import AsyncOpenAI

from models.errors import ChatFailedError
from services.openai.media_inputs import build_chat_inputs
from services.openai.prompts import chat_instructions
from services.openai.response_parser import extract_text, extract_usage

CHAT_FAILED_MESSAGE = "Failed to send message."


class RadiologistChatService:
    """Answer questions about an analysis, grounded in its serialized context."""

    def __init__(self, client: AsyncOpenAI, model: str = "gpt-5") -> None:
        """Initialize the service with a shared OpenAI client."""
        if client is None:
            raise ValueError("OpenAI client is required for chat.")
        self.client = client
        self.model = model

    async def reply(
        self,
        history: Sequence[Tuple[str, str]],
        message: str,
        context: Optional[str] = None,
    ) -> str:
        """Return the assistant reply text, or "" when the model returns none.

        Args:
            history: Prior transcript as `(role, text)` pairs, oldest first.
            message: The new user message.
            context: Serialized analysis context or the no-context sentinel.

        Raises:
            ChatFailedError: For any transport or parsing failure.
        """
        start_time = time.time()
        try:
            response = await self.client.responses.create(
                model=self.model,
                instructions=chat_instructions(context),
                input=build_chat_inputs(history, message),
            )
            text = extract_text(response) if response is not None else ""
        except Exception as exc:
            logging.error("Chat request to OpenAI failed: %s", exc)
            raise ChatFailedError(CHAT_FAILED_MESSAGE) from exc

        usage = extract_usage(response)
        logging.info(
            "Chat reply latency: %.3fs (input_tokens=%s, output_tokens=%s)",
            time.time() - start_time,
            usage["input_tokens"],
            usage["output_tokens"],
        )
        return text
