"""Single-call compatibility analysis.

Sends an assembled request to the model and turns the JSON text it returns
into a validated AnalysisResult. Success is all-or-nothing.
"""

import json
from typing import Optional, Tuple

from pydantic import ValidationError

from .client import LLMClient, RunMeta, get_llm_client
from .schema import AnalysisResult
from ..schemas.content import AnalysisRequest
from ..errors import EmptyResponseError, MalformedResponseError
from ..config import get_settings
from ..log import get_logger

logger = get_logger("analyze")


def parse_result(text: Optional[str], strict: bool = True) -> AnalysisResult:
    """
    Parse response text into an AnalysisResult.

    Raises EmptyResponseError when there is no text, MalformedResponseError when the
    text is not JSON or does not match the schema. With strict=True the score range
    and participant count are enforced too; otherwise they pass through unchanged.
    """
    if not text:
        raise EmptyResponseError("No response from model")

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedResponseError(f"Response is not valid JSON: {e}") from e

    try:
        result = AnalysisResult.model_validate(data)
    except ValidationError as e:
        raise MalformedResponseError(f"Response does not match schema: {e}") from e

    if strict:
        failures = result.invariant_violations()
        if failures:
            raise MalformedResponseError(f"Response violates invariants: {failures}")

    return result


def run_analysis_with_meta(
    request: AnalysisRequest,
    client: Optional[LLMClient] = None,
    model: Optional[str] = None,
    strict: Optional[bool] = None,
) -> Tuple[AnalysisResult, RunMeta]:
    """
    Analyze the chat in a single LLM call.

    Args:
        request: Content parts plus the output schema
        client: LLM client to use; defaults to the process-wide one
        model: Model name; defaults to MODEL_ANALYSIS
        strict: Enforce domain invariants; defaults to STRICT_RESULT_VALIDATION

    Returns:
        (AnalysisResult, RunMeta) - the report plus model and token usage
    """
    settings = get_settings()
    client = client or get_llm_client()
    model = model or settings.MODEL_ANALYSIS
    strict = settings.STRICT_RESULT_VALIDATION if strict is None else strict

    response = client.run_json(list(request.parts), request.output_schema, model=model)
    logger.debug(f"Model {model} returned {len(response.text or '')} characters")
    return parse_result(response.text, strict=strict), response.meta


def run_analysis(
    request: AnalysisRequest,
    client: Optional[LLMClient] = None,
    model: Optional[str] = None,
    strict: Optional[bool] = None,
) -> AnalysisResult:
    result, _ = run_analysis_with_meta(request, client=client, model=model, strict=strict)
    return result
