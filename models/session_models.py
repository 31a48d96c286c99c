"""Analysis session states as a tagged variant.

Each state class carries only the data valid in that state, so the
``enhanced`` bit cannot contradict the phase it belongs to.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Optional, Union

from models.analysis_result import AnalysisResult


class Phase(str, Enum):
	IDLE = "IDLE"
	UPLOADING = "UPLOADING"
	ENHANCING = "ENHANCING"
	ANALYZING = "ANALYZING"
	COMPLETE = "COMPLETE"
	ERROR = "ERROR"


@dataclass(frozen=True)
class UploadedImage:
	"""A file submitted by the user, as received."""

	filename: str
	content_type: str
	data: bytes

	@property
	def size(self) -> int:
		return len(self.data)


@dataclass(frozen=True)
class Idle:
	phase: ClassVar[Phase] = Phase.IDLE
	enhanced: ClassVar[bool] = False


@dataclass(frozen=True)
class Uploading:
	"""File accepted; ``preview`` stays None until decoding finishes."""

	upload: UploadedImage
	preview: Optional[str] = None

	phase: ClassVar[Phase] = Phase.UPLOADING
	enhanced: ClassVar[bool] = False


@dataclass(frozen=True)
class Enhancing:
	"""Placeholder enhancement stage; ``enhanced`` flips once the delay elapses."""

	upload: UploadedImage
	preview: str
	enhanced: bool = False

	phase: ClassVar[Phase] = Phase.ENHANCING


@dataclass(frozen=True)
class Analyzing:
	upload: UploadedImage
	preview: str

	phase: ClassVar[Phase] = Phase.ANALYZING
	enhanced: ClassVar[bool] = True


@dataclass(frozen=True)
class Complete:
	upload: UploadedImage
	preview: str
	result: AnalysisResult

	phase: ClassVar[Phase] = Phase.COMPLETE
	enhanced: ClassVar[bool] = True


@dataclass(frozen=True)
class Failed:
	reason: str
	upload: Optional[UploadedImage] = None
	preview: Optional[str] = None
	enhanced: bool = False

	phase: ClassVar[Phase] = Phase.ERROR


SessionState = Union[Idle, Uploading, Enhancing, Analyzing, Complete, Failed]
