"""LLM analysis providers that extract template values from file content."""

import base64
import json
import logging
from abc import ABC, abstractmethod
from typing import Any

import anthropic
import openai
from langchain.chat_models import init_chat_model
from langchain.chat_models.base import BaseChatModel
from langchain.messages import AIMessage, HumanMessage

from autorename.errors import InvalidResponseError, NoAPIKeyError, RequestFailedError
from autorename.models.analysis import AnalysisResult
from autorename.models.content import Content, ImageContent, TextContent
from autorename.models.provider import ProviderKind, ProviderSettings
from autorename.models.template import RenameTemplate
from autorename.prompts import FILE_CONTENT_HEADER, build_analysis_prompt
from autorename.tokens import TokenUsage


logger = logging.getLogger(__name__)

# Text content is cut to this many characters before it is sent
MAX_TEXT_CHARS = 8000

# Sent instead of the generic binary MIME type, which providers reject for images
DEFAULT_IMAGE_MIME_TYPE = "image/png"


def extract_json_object(text: str) -> dict[str, str]:
    """Decode the JSON object embedded in a model reply.

    The object is taken from the first ``{`` to the last ``}``, so replies wrapped in
    prose or code fences still parse. Braces in prose outside the object are not
    handled and produce an invalid response.

    Args:
        text: Raw reply text from the model.

    Returns:
        Mapping of variable name to value. Numbers and booleans are converted to strings.

    Raises:
        InvalidResponseError: If no object is found, it does not decode, or a value is not a scalar.
    """
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end < start:
        raise InvalidResponseError("No JSON object found in reply.")

    try:
        data = json.loads(text[start : end + 1])
    except json.JSONDecodeError as e:
        raise InvalidResponseError(f"Reply is not valid JSON: {e.msg}.") from e

    if not isinstance(data, dict):
        raise InvalidResponseError("Reply JSON is not an object.")

    values: dict[str, str] = {}
    for key, value in data.items():
        if isinstance(value, str):
            values[key] = value
        elif isinstance(value, bool):
            values[key] = str(value).lower()
        elif isinstance(value, int | float):
            values[key] = str(value)
        else:
            raise InvalidResponseError(f"Value for '{key}' is not a string.")
    return values


class AnalysisProvider(ABC):
    """Base class for analysis providers.

    Subclasses differ only in how image content is attached, which SDK errors they
    translate and where their usage block lives.
    """

    kind: ProviderKind
    status_error: type[Exception]
    transport_error: type[Exception]

    def __init__(self, llm: BaseChatModel) -> None:
        """Initialize the provider.

        Args:
            llm: LangChain chat model configured for this provider.
        """
        self.llm = llm

    def analyze(self, content: Content, template: RenameTemplate, original_file_name: str) -> AnalysisResult:
        """Ask the model for the template's values.

        Args:
            content: Payload extracted from the file.
            template: Naming template whose variables should be filled.
            original_file_name: Current name of the file, included in the prompt.

        Returns:
            AnalysisResult with extracted values and token usage.

        Raises:
            RequestFailedError: If the request fails or returns a non-success status.
            InvalidResponseError: If the reply does not contain a JSON object of values.
        """
        prompt = build_analysis_prompt(template.unique_variable_names, original_file_name)
        message = HumanMessage(content=self._build_message_content(prompt, content))

        response = self._invoke([message])

        values = extract_json_object(self._reply_text(response))
        usage = self._token_usage(response)
        logger.debug("%s returned %d value(s) for %s", self.kind.display_name, len(values), original_file_name)

        return AnalysisResult(values=values, token_usage=usage)

    def _build_message_content(self, prompt: str, content: Content) -> str | list[dict[str, Any]]:
        if isinstance(content, TextContent):
            return prompt + FILE_CONTENT_HEADER + content.text[:MAX_TEXT_CHARS]

        mime_type = DEFAULT_IMAGE_MIME_TYPE if content.is_generic else content.mime_type
        encoded = base64.b64encode(content.data).decode("ascii")
        return [
            {"type": "text", "text": prompt},
            self._image_part(encoded, mime_type),
        ]

    @abstractmethod
    def _image_part(self, encoded: str, mime_type: str) -> dict[str, Any]:
        """Build the provider-specific content part for a base64-encoded image."""
        pass

    @abstractmethod
    def _wire_usage(self, response_metadata: dict[str, Any]) -> TokenUsage | None:
        """Read token counts from the provider's raw usage block, if present."""
        pass

    def _invoke(self, messages: list[HumanMessage]) -> AIMessage:
        try:
            return self.llm.invoke(messages)
        except self.status_error as e:
            raise RequestFailedError.from_status(e.status_code, e.response.text) from e  # type: ignore[attr-defined]
        except self.transport_error as e:
            raise RequestFailedError(str(e)) from e

    def _reply_text(self, response: AIMessage) -> str:
        content = response.content
        if isinstance(content, str):
            return content

        for block in content:
            if isinstance(block, str):
                return block
            if block.get("type") == "text":
                return block.get("text", "")

        raise InvalidResponseError("Reply contained no text.")

    def _token_usage(self, response: AIMessage) -> TokenUsage:
        usage = self._wire_usage(response.response_metadata or {})
        if usage is not None:
            return usage

        metadata = response.usage_metadata
        if metadata:
            return TokenUsage(
                input_tokens=metadata.get("input_tokens", 0) or 0,
                output_tokens=metadata.get("output_tokens", 0) or 0,
            )
        return TokenUsage()


class OpenAIAnalysisProvider(AnalysisProvider):
    """Provider speaking the OpenAI chat completions format."""

    kind = ProviderKind.OPENAI
    status_error = openai.APIStatusError
    transport_error = openai.APIError

    def _image_part(self, encoded: str, mime_type: str) -> dict[str, Any]:
        return {"type": "image_url", "image_url": {"url": f"data:{mime_type};base64,{encoded}"}}

    def _wire_usage(self, response_metadata: dict[str, Any]) -> TokenUsage | None:
        usage = response_metadata.get("token_usage")
        if not usage:
            return None
        return TokenUsage(
            input_tokens=usage.get("prompt_tokens") or 0,
            output_tokens=usage.get("completion_tokens") or 0,
        )


class AnthropicAnalysisProvider(AnalysisProvider):
    """Provider speaking the Anthropic messages format."""

    kind = ProviderKind.ANTHROPIC
    status_error = anthropic.APIStatusError
    transport_error = anthropic.APIError

    def _image_part(self, encoded: str, mime_type: str) -> dict[str, Any]:
        return {
            "type": "image",
            "source": {"type": "base64", "media_type": mime_type, "data": encoded},
        }

    def _wire_usage(self, response_metadata: dict[str, Any]) -> TokenUsage | None:
        usage = response_metadata.get("usage")
        if not usage:
            return None
        return TokenUsage(
            input_tokens=usage.get("input_tokens") or 0,
            output_tokens=usage.get("output_tokens") or 0,
        )


def build_provider(settings: ProviderSettings, api_key: str | None) -> AnalysisProvider:
    """Create the analysis provider selected by ``settings``.

    SDK-level retries are disabled; a failed request surfaces immediately.

    Raises:
        NoAPIKeyError: If ``api_key`` is missing or empty.
    """
    if not api_key:
        raise NoAPIKeyError()

    if settings.kind is ProviderKind.OPENAI:
        llm = init_chat_model(
            model=settings.model_name,
            model_provider="openai",
            api_key=api_key,
            base_url=settings.api_base_url,
            temperature=settings.openai_temperature,
            max_retries=0,
        )
        return OpenAIAnalysisProvider(llm=llm)

    llm = init_chat_model(
        model=settings.model_name,
        model_provider="anthropic",
        api_key=api_key,
        base_url=settings.api_base_url,
        max_tokens=settings.max_tokens,
        max_retries=0,
        default_headers={"anthropic-version": settings.anthropic_version},
    )
    return AnthropicAnalysisProvider(llm=llm)
