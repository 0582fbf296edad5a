import threading
from typing import Optional, Sequence

from ..intake.assemble import build_request
from ..intake.files import UploadedFile, is_image, is_text
from ..llm.analyze import run_analysis_with_meta
from ..llm.client import LLMClient
from ..llm.schema import AnalysisResult
from ..schemas.content import InlineBinaryPart
from ..errors import AnalysisError, AnalysisInProgressError
from ..mlops.tracing import tracer
from ..log import get_logger

logger = get_logger("pipeline")


class Pipeline:
    """
    Runs one analysis at a time: assemble the request, call the model, return the report.
    A second call while one is in flight is rejected rather than queued.
    """

    def __init__(self, client: Optional[LLMClient] = None):
        self.client = client
        self._in_flight = threading.Lock()

    @property
    def busy(self) -> bool:
        return self._in_flight.locked()

    def analyze_files(self, files: Sequence[UploadedFile]) -> AnalysisResult:
        if not self._in_flight.acquire(blocking=False):
            raise AnalysisInProgressError("An analysis is already running")
        try:
            return self._run(files)
        except AnalysisError as e:
            logger.error(f"Analysis failed [{e.kind}]: {e}")
            raise
        finally:
            self._in_flight.release()

    def _run(self, files: Sequence[UploadedFile]) -> AnalysisResult:
        image_count = sum(1 for f in files if is_image(f))
        text_count = sum(1 for f in files if not is_image(f) and is_text(f))
        logger.info(f"Analyzing {len(files)} file(s): {image_count} image(s), {text_count} text export(s)")

        # 1. Assemble
        with tracer.span("intake.assemble", span_type="PARSER", inputs={"file_count": len(files)}):
            request = build_request(files)
            tracer.trace_intake(len(files), image_count, text_count)

        # 2. Analyze
        with tracer.span("analysis.run", span_type="LLM"):
            result, meta = run_analysis_with_meta(request, client=self.client)
            tracer.trace_llm_call(
                model=meta.model,
                part_count=len(request.parts),
                image_count=sum(1 for p in request.parts if isinstance(p, InlineBinaryPart)),
                tokens={"prompt_tokens": meta.prompt_tokens, "completion_tokens": meta.completion_tokens},
                refusal=meta.refusal,
            )

        logger.info(f"Analysis completed with score {result.score}.")
        return result


pipeline = Pipeline()
