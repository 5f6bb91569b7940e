"""
LLM Response Handler - turn raw completion text into a GeneratorResponse
"""
import json
import re

from pydantic import ValidationError

from services.block_models import GeneratorResponse


_FENCED_JSON = re.compile(r"```(?:json)?\s*(\{[\s\S]*\})\s*```")


class ResponseParseError(ValueError):
    """Completion text is not a usable generator response"""


class LLMResponseHandler:
    """
    Handle JSON responses from the completion provider
    """

    @staticmethod
    def strip_code_fence(text: str) -> str:
        """Remove a markdown code fence the model may wrap around its JSON"""
        text = text.strip()

        if text.startswith("```"):
            match = _FENCED_JSON.search(text)
            if match:
                return match.group(1)

        return text

    @staticmethod
    def parse_generator_response(text: str) -> GeneratorResponse:
        """
        Parse completion text into a GeneratorResponse

        Args:
            text: Raw completion text

        Returns:
            Parsed response with non-empty code and name and an object config

        Raises:
            ResponseParseError: malformed JSON or missing/mistyped fields
        """
        json_string = LLMResponseHandler.strip_code_fence(text)

        try:
            payload = json.loads(json_string)
        except json.JSONDecodeError as e:
            raise ResponseParseError(f"Malformed JSON: {e.msg}") from e

        if not isinstance(payload, dict):
            raise ResponseParseError("Response is not a JSON object")

        if not isinstance(payload.get("code"), str) or not payload["code"]:
            raise ResponseParseError("Invalid or missing code field")
        if not isinstance(payload.get("name"), str) or not payload["name"]:
            raise ResponseParseError("Invalid or missing name field")
        if not isinstance(payload.get("config"), dict):
            raise ResponseParseError("Invalid or missing config field")

        try:
            return GeneratorResponse.model_validate(payload)
        except ValidationError as e:
            raise ResponseParseError(f"Invalid response structure: {e.error_count()} field error(s)") from e

