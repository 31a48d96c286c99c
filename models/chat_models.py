from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict
from uuid import uuid4


class Role(str, Enum):
	USER = "user"
	ASSISTANT = "assistant"


@dataclass(frozen=True)
class ChatMessage:
	"""Single entry of a conversation transcript."""

	role: Role
	text: str
	id: str = field(default_factory=lambda: uuid4().hex)
	timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

	def to_dict(self) -> Dict[str, Any]:
		return {
			"id": self.id,
			"role": self.role.value,
			"text": self.text,
			"timestamp": self.timestamp.isoformat(),
		}
