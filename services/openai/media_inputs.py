"""Utilities to build input payloads for the Responses API."""

from typing import Any, Dict, List, Sequence, Tuple

from utils.media_validation import split_data_url


def build_image_inputs(system_prompt: str, user_prompt: str, image_url: str) -> List[Dict[str, Any]]:
    """Build the classification input: system prompt, instruction, then the image."""
    # Validates the data URL shape; the image itself is passed through unchanged.
    split_data_url(image_url)
    return [
        {
            "type": "message",
            "role": "system",
            "content": [{"type": "input_text", "text": system_prompt}],
        },
        {"type": "message", "role": "user", "content": [{"type": "input_text", "text": user_prompt}]},
        {"type": "message", "role": "user", "content": [{"type": "input_image", "image_url": image_url}]},
    ]


def build_chat_inputs(history: Sequence[Tuple[str, str]], message: str) -> List[Dict[str, Any]]:
    """Build the chat input from prior `(role, text)` pairs and the new user message."""
    inputs: List[Dict[str, Any]] = [
        {"type": "message", "role": role, "content": text} for role, text in history
    ]
    inputs.append({"type": "message", "role": "user", "content": message})
    return inputs
