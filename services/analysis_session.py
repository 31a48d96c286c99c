"""Upload-to-result workflow for a single chest X-ray."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol

from models.analysis_result import AnalysisFields, AnalysisResult
from models.errors import AnalysisFailedError, InvalidTransitionError, UploadValidationError
from models.session_models import (
	Analyzing,
	Complete,
	Enhancing,
	Failed,
	Idle,
	SessionState,
	UploadedImage,
	Uploading,
)
from services.enhancement import Sleep, simulate_noise_reduction
from services.history_store import ResultStore
from utils.config import DEFAULT_ENHANCEMENT_DELAY, DEFAULT_MAX_UPLOAD_BYTES
from utils.media_validation import to_data_url, validate_image_upload

LOGGER = logging.getLogger(__name__)

SAVE_FAILED_MESSAGE = "Failed to save analysis to history."
DECODE_FAILED_MESSAGE = "Unable to read the uploaded image."
RUN_FAILED_MESSAGE = "Analysis failed. Please try again."


class Classifier(Protocol):
	async def classify(self, image_url: str) -> AnalysisFields: ...


class AnalysisSession:
	"""Drive Idle -> Uploading -> Enhancing -> Analyzing -> Complete, or Failed.

	Every `reset()` starts a new generation. A run that resumes after its
	generation was superseded drops whatever it was about to apply.
	"""

	def __init__(
		self,
		classifier: Classifier,
		store: ResultStore,
		*,
		enhancement_delay: float = DEFAULT_ENHANCEMENT_DELAY,
		max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
		sleep: Sleep = asyncio.sleep,
		on_complete: Optional[Callable[[AnalysisResult], None]] = None,
	) -> None:
		self.classifier = classifier
		self.store = store
		self.enhancement_delay = enhancement_delay
		self.max_upload_bytes = max_upload_bytes
		self._sleep = sleep
		self._on_complete = on_complete
		self._state: SessionState = Idle()
		self._notice: Optional[str] = None
		self._generation = 0
		self._listeners: List[Callable[[SessionState], None]] = []

	@property
	def state(self) -> SessionState:
		return self._state

	@property
	def enhanced(self) -> bool:
		return self._state.enhanced

	@property
	def preview(self) -> Optional[str]:
		return getattr(self._state, "preview", None)

	@property
	def result(self) -> Optional[AnalysisResult]:
		return self._state.result if isinstance(self._state, Complete) else None

	@property
	def error(self) -> Optional[str]:
		if isinstance(self._state, Failed):
			return self._state.reason
		return self._notice

	@property
	def in_flight(self) -> bool:
		if isinstance(self._state, (Enhancing, Analyzing)):
			return True
		return isinstance(self._state, Uploading) and self._state.preview is None

	def subscribe(self, listener: Callable[[SessionState], None]) -> None:
		"""Register a callback invoked with every new state."""
		self._listeners.append(listener)

	async def process_file(self, upload: UploadedImage) -> SessionState:
		"""Validate `upload` and decode it into a preview.

		Raises:
			InvalidTransitionError: While a run or decode is in flight, or in a
				terminal state that needs a reset first.
			UploadValidationError: For a non-image type or an oversized file;
				the state is left untouched.
		"""
		if self.in_flight:
			raise InvalidTransitionError("An analysis is already in progress.")
		if isinstance(self._state, (Complete, Failed)):
			raise InvalidTransitionError("Start a new analysis before uploading another image.")

		try:
			validate_image_upload(upload.content_type, upload.size, self.max_upload_bytes)
		except UploadValidationError as exc:
			self._notice = str(exc)
			raise

		generation = self._generation
		self._notice = None
		self._set(Uploading(upload=upload))
		try:
			preview = await asyncio.to_thread(to_data_url, upload.data, upload.content_type)
		except Exception as exc:
			if generation == self._generation:
				LOGGER.error("Failed to decode upload %r: %s", upload.filename, exc)
				self._set(Failed(reason=DECODE_FAILED_MESSAGE, upload=upload))
			return self._state

		if generation != self._generation:
			LOGGER.debug("Discarding decoded preview for a superseded session")
			return self._state
		self._set(Uploading(upload=upload, preview=preview))
		return self._state

	def begin_analysis(self) -> Awaitable[SessionState]:
		"""Enter Enhancing now and return the awaitable that finishes the run.

		Raises:
			InvalidTransitionError: Unless an upload with a ready preview is waiting.
		"""
		state = self._state
		if not isinstance(state, Uploading) or state.preview is None:
			raise InvalidTransitionError("Upload an image before starting the analysis.")
		enhancing = Enhancing(upload=state.upload, preview=state.preview)
		self._set(enhancing)
		return self._run(self._generation, enhancing)

	async def start_analysis(self) -> SessionState:
		return await self.begin_analysis()

	def reset(self) -> None:
		"""Return to Idle, clearing everything and superseding any running work."""
		self._generation += 1
		self._notice = None
		self._set(Idle())

	def snapshot(self) -> Dict[str, Any]:
		state = self._state
		upload = getattr(state, "upload", None)
		result = self.result
		return {
			"state": state.phase.value,
			"enhanced": self.enhanced,
			"filename": upload.filename if upload else None,
			"preview": self.preview,
			"error": self.error,
			"result": result.to_dict() if result else None,
		}

	async def _run(self, generation: int, state: Enhancing) -> SessionState:
		upload, preview = state.upload, state.preview
		try:
			await simulate_noise_reduction(self.enhancement_delay, self._sleep)
			if not self._is_current(generation):
				return self._state
			self._set(replace(state, enhanced=True))
			self._set(Analyzing(upload=upload, preview=preview))

			fields = await self.classifier.classify(preview)
			if not self._is_current(generation):
				return self._state
			result = AnalysisResult.from_fields(fields)

			try:
				await self.store.append(result, preview)
			except Exception as exc:
				LOGGER.error("Failed to persist analysis %s: %s", result.id, exc)
				raise AnalysisFailedError(SAVE_FAILED_MESSAGE) from exc
			if not self._is_current(generation):
				return self._state

			self._set(Complete(upload=upload, preview=preview, result=result))
		except Exception as exc:
			LOGGER.warning("Analysis of %r failed: %s", upload.filename, exc)
			if self._is_current(generation):
				reason = str(exc) if isinstance(exc, AnalysisFailedError) else RUN_FAILED_MESSAGE
				self._set(
					Failed(
						reason=reason or RUN_FAILED_MESSAGE,
						upload=upload,
						preview=preview,
						enhanced=self._state.enhanced,
					)
				)
			return self._state

		if self._on_complete is not None:
			try:
				self._on_complete(result)
			except Exception as exc:
				LOGGER.error("Completion callback failed for analysis %s: %s", result.id, exc)
		return self._state

	def _is_current(self, generation: int) -> bool:
		if generation == self._generation:
			return True
		LOGGER.debug("Discarding late result for superseded generation %d", generation)
		return False

	def _set(self, state: SessionState) -> None:
		LOGGER.debug("Analysis session: %s -> %s", self._state.phase.value, state.phase.value)
		self._state = state
		for listener in self._listeners:
			try:
				listener(state)
			except Exception as exc:
				LOGGER.error("State listener %r failed: %s", listener, exc)
