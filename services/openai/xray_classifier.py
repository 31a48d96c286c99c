"""Description: Chest X-ray classification service using OpenAI's Responses API."""

import logging
import time
from typing import Any, Dict, List

from openai import AsyncOpenAI
from pydantic import ValidationError

from models.analysis_result import AnalysisFields
from models.errors import AnalysisFailedError
from services.openai.classification_schema import FUNCTION_DEFINITION, FUNCTION_NAME
from services.openai.media_inputs import build_image_inputs
from services.openai.prompts import build_system_prompt, build_user_prompt
from services.openai.response_parser import extract_usage, parse_function_call

ANALYSIS_FAILED_MESSAGE = "Failed to analyze image. Please try again."


class XrayClassifier:
    """Class for classifying chest X-rays into a structured diagnostic result."""

    def __init__(self, client: AsyncOpenAI, model: str = "gpt-5") -> None:
        """Initialize the XrayClassifier with an OpenAI async client."""
        if client is None:
            raise ValueError("OpenAI client must be provided.")
        self.client = client
        self.model = model
        self.system_prompt = build_system_prompt()
        self.user_prompt = build_user_prompt()

    async def classify(self, image_url: str) -> AnalysisFields:
        """Classify the image given as a data URL.

        Raises:
            AnalysisFailedError: For transport errors, a missing or malformed
                tool call, or output that fails validation.
        """
        start_time = time.time()
        try:
            inputs = build_image_inputs(self.system_prompt, self.user_prompt, image_url)
            response = await self._create_response(inputs)
            fields = self._parse_response(response)
        except Exception as exc:
            raise AnalysisFailedError(ANALYSIS_FAILED_MESSAGE) from exc

        usage = extract_usage(response)
        logging.info(
            "X-ray classification finished in %.3fs (input_tokens=%s, output_tokens=%s)",
            time.time() - start_time,
            usage["input_tokens"],
            usage["output_tokens"],
        )
        return fields

    async def _create_response(self, inputs: List[Dict[str, Any]]) -> Any:
        """Send the multimodal request to the OpenAI Responses API."""
        try:
            return await self.client.responses.create(
                model=self.model,
                input=inputs,
                tools=[FUNCTION_DEFINITION],
                tool_choice={"type": "function", "name": FUNCTION_NAME},
            )
        except Exception as exc:
            logging.error("Error during OpenAI Responses API call: %s", exc)
            raise

    def _parse_response(self, response: Any) -> AnalysisFields:
        """Parse and validate the classification output from the model."""
        if response is None:
            logging.error("Empty response received from OpenAI.")
            raise RuntimeError("No response from AI")
        try:
            args = parse_function_call(response, tool_name=FUNCTION_NAME)
            return AnalysisFields.model_validate(args)
        except ValidationError as exc:
            logging.error("Classification output failed validation: %s", exc)
            raise
        except Exception as exc:
            logging.error("Error parsing OpenAI response: %s", exc)
            logging.error("Full response object: %r", response)
            raise

# end of XrayClassifier
