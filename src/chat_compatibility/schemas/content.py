"""Pydantic schemas for the multimodal request sent to the model.

Defines the ContentPart union (inline image data or plain text) and AnalysisRequest.
"""

from typing import Annotated, Any, Dict, Literal, Tuple, Union
from pydantic import BaseModel, ConfigDict, Field

class InlineBinaryPart(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["inline-binary"] = "inline-binary"
    mime_type: str
    base64_data: str

class TextPart(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    text: str

ContentPart = Annotated[Union[InlineBinaryPart, TextPart], Field(discriminator="kind")]

class AnalysisRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    parts: Tuple[ContentPart, ...]
    output_schema: Dict[str, Any]
