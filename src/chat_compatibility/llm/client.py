"""OpenAI client wrapper for structured JSON output.

Sends an ordered list of content parts as a single user message and asks for
a response conforming to a strict JSON Schema. Exactly one request per call;
the SDK's own retries are disabled.
"""

from functools import lru_cache
from typing import Any, Dict, Optional, Sequence

from openai import OpenAI, APIError
from pydantic import BaseModel

from ..config import get_settings
from ..errors import TransportError
from ..log import get_logger
from ..schemas.content import ContentPart, InlineBinaryPart

logger = get_logger("llm")


class RunMeta(BaseModel):
    model: str
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    refusal: Optional[str] = None

class RunResponse(BaseModel):
    text: Optional[str]
    meta: RunMeta


def to_message_content(part: ContentPart) -> Dict[str, Any]:
    """Map a content part onto the chat-completions content item format."""
    if isinstance(part, InlineBinaryPart):
        return {
            "type": "image_url",
            "image_url": {"url": f"data:{part.mime_type};base64,{part.base64_data}"},
        }
    return {"type": "text", "text": part.text}


class LLMClient:
    def __init__(self, client: Optional[Any] = None, api_key: Optional[str] = None, timeout: Optional[float] = None):
        if client is None:
            settings = get_settings()
            client = OpenAI(
                api_key=api_key or settings.OPENAI_API_KEY.get_secret_value(),
                timeout=timeout or settings.REQUEST_TIMEOUT_SECONDS,
                max_retries=0,
            )
        self.client = client

    def run_json(
        self,
        parts: Sequence[ContentPart],
        schema: Dict[str, Any],
        model: str = "gpt-4o",
        schema_name: str = "analysis_result",
    ) -> RunResponse:
        """
        Run one completion constrained to `schema`.
        Returns the raw JSON text (None when the model produced no text) with metadata.
        Raises TransportError on any SDK, network or service failure.
        """
        messages = [
            {"role": "user", "content": [to_message_content(p) for p in parts]}
        ]
        try:
            completion = self.client.chat.completions.create(
                model=model,
                messages=messages,
                response_format={
                    "type": "json_schema",
                    "json_schema": {"name": schema_name, "strict": True, "schema": schema},
                },
            )
        except APIError as e:
            raise TransportError(f"{e.__class__.__name__}: {e}") from e

        meta = RunMeta(model=model)
        usage = getattr(completion, "usage", None)
        if usage is not None:
            meta.prompt_tokens = usage.prompt_tokens
            meta.completion_tokens = usage.completion_tokens

        if not completion.choices:
            return RunResponse(text=None, meta=meta)

        message = completion.choices[0].message
        refusal = getattr(message, "refusal", None)
        if refusal:
            logger.warning(f"Model refused the request: {refusal}")
            meta.refusal = refusal

        return RunResponse(text=message.content, meta=meta)


@lru_cache()
def get_llm_client() -> LLMClient:
    return LLMClient()
