"""
MLflow tracing integration for LLM observability.
Provides span-based tracing for intake assembly and the analysis call.
"""
import logging
import time
from typing import Optional, Dict, Any
from contextlib import contextmanager

import mlflow

from ..config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()


class MLflowTracer:
    """Handles MLflow tracing for LLM observability."""

    def __init__(self):
        self.enabled = settings.MLFLOW_ENABLE_TRACING
        if self.enabled:
            try:
                mlflow.set_tracking_uri(settings.MLFLOW_TRACKING_URI)
                logger.info("MLflow tracing enabled")
            except Exception as e:
                logger.warning(f"Failed to initialize MLflow tracing: {e}")
                self.enabled = False
        else:
            logger.info("MLflow tracing disabled")

    @contextmanager
    def span(
        self,
        name: str,
        span_type: str = "UNKNOWN",
        attributes: Optional[Dict[str, Any]] = None,
        inputs: Optional[Dict[str, Any]] = None
    ):
        """
        Create a traced span for an operation.

        Args:
            name: Name of the span (e.g., "analysis.run", "intake.assemble")
            span_type: Type of span (e.g., "LLM", "PARSER", "CHAIN")
            attributes: Additional metadata for the span
            inputs: Input data to the operation
        """
        if not self.enabled:
            yield None
            return

        with mlflow.start_span(name=name, span_type=span_type) as span:
            if attributes:
                span.set_attributes(attributes)
            if inputs:
                span.set_inputs(inputs)

            start_time = time.time()
            yield span
            elapsed = time.time() - start_time
            span.set_attribute("latency_ms", int(elapsed * 1000))

    def _annotate_current_span(self, attributes: Dict[str, Any]):
        try:
            current_span = mlflow.get_current_active_span()
            if current_span:
                current_span.set_attributes(attributes)
        except AttributeError:
            # Older MLflow versions lack get_current_active_span
            pass

    def trace_llm_call(
        self,
        model: str,
        part_count: int,
        image_count: int = 0,
        tokens: Optional[Dict[str, Optional[int]]] = None,
        refusal: Optional[str] = None
    ):
        """Log details of an LLM call within the current span."""
        if not self.enabled:
            return

        try:
            attributes = {
                "model": model,
                "part_count": part_count,
                "image_count": image_count,
            }

            if tokens:
                attributes.update({k: v for k, v in tokens.items() if v is not None})

            if refusal:
                attributes["refused"] = True

            self._annotate_current_span(attributes)
        except Exception as e:
            logger.warning(f"Failed to trace LLM call: {e}")

    def trace_intake(
        self,
        file_count: int,
        image_count: int,
        text_count: int
    ):
        """Log what the intake step accepted and skipped."""
        if not self.enabled:
            return

        try:
            self._annotate_current_span({
                "file_count": file_count,
                "image_count": image_count,
                "text_count": text_count,
                "skipped_count": file_count - image_count - text_count,
            })
        except Exception as e:
            logger.warning(f"Failed to trace intake: {e}")


# Global tracer instance
tracer = MLflowTracer()
