"""Turns uploaded files into the ordered content parts sent to the model.

Images become inline base64 parts, text exports become delimited text parts,
and one instruction part is always appended last.
"""

import base64
from typing import List, Optional, Sequence

from .files import UploadedFile, is_image, is_text
from ..llm.prompts import load_prompt
from ..llm.schema import response_schema
from ..schemas.content import AnalysisRequest, ContentPart, InlineBinaryPart, TextPart
from ..config import get_settings
from ..log import get_logger

logger = get_logger("intake")

INSTRUCTION_PROMPT = "compatibility"


def wrap_chat_text(name: str, text: str) -> str:
    return f"--- Chat History File: {name} ---\n{text}\n--- End of File ---"


def build_instruction_part(language: Optional[str] = None) -> TextPart:
    language = language or get_settings().REPORT_LANGUAGE
    template = load_prompt(INSTRUCTION_PROMPT)
    return TextPart(text=template.replace("{language}", language).strip())


def build_content_parts(files: Sequence[UploadedFile], language: Optional[str] = None) -> List[ContentPart]:
    """
    Build content parts in input order, followed by exactly one instruction part.

    Files that are neither images nor text exports are skipped.
    Raises IntakeReadError if any accepted file cannot be read; nothing is returned in that case.
    """
    parts: List[ContentPart] = []

    for file in files:
        if is_image(file):
            data = base64.b64encode(file.read_bytes()).decode("ascii")
            parts.append(InlineBinaryPart(mime_type=file.media_type, base64_data=data))
        elif is_text(file):
            parts.append(TextPart(text=wrap_chat_text(file.name, file.read_text())))
        else:
            logger.debug(f"Skipping unsupported file {file.name!r} ({file.mime_type})")

    parts.append(build_instruction_part(language))
    return parts


def build_request(files: Sequence[UploadedFile], language: Optional[str] = None) -> AnalysisRequest:
    return AnalysisRequest(
        parts=tuple(build_content_parts(files, language)),
        output_schema=response_schema(),
    )
