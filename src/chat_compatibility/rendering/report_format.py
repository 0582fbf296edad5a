"""Markdown formatting for compatibility reports.

Converts an AnalysisResult into a scannable Markdown report with a score
line and one section per field.
"""

from __future__ import annotations

from typing import List

from chat_compatibility.llm.schema import AnalysisResult

PARTICIPANT_LABELS = ["Person A", "Person B"]


def _bullet_list(lines: List[str]) -> str:
    clean = [s.strip() for s in lines if s and s.strip()]
    if not clean:
        return "• N/A"
    return "\n".join(f"• {s}" for s in clean)


def _participant_label(index: int) -> str:
    if index < len(PARTICIPANT_LABELS):
        return PARTICIPANT_LABELS[index]
    return f"Person {index + 1}"


def _style_list(styles: List[str]) -> str:
    if not styles:
        return "• N/A"
    return "\n".join(
        f"• **{_participant_label(i)}:** {s.strip()}" for i, s in enumerate(styles)
    )


def render_result_to_markdown(result: AnalysisResult) -> str:
    """
    Layout:
      - Score line
      - Summary: paragraph
      - Communication style: one bullet per participant
      - Strengths / Areas for improvement: bullets or N/A
      - Advice: paragraph
    Two blank lines between main sections (=> 3 newlines).
    """
    score_block = f"**Compatibility score:** {result.score}/100"
    summary_block = "**Summary**\n" + result.summary.strip()
    style_block = "**Communication style**\n" + _style_list(result.communication_style)
    strengths_block = "**Strengths**\n" + _bullet_list(result.strengths)
    improve_block = "**Areas for improvement**\n" + _bullet_list(result.areas_for_improvement)
    advice_block = "**Advice**\n" + result.advice.strip()

    section_sep = "\n\n\n"  # two blank lines between sections
    return section_sep.join([
        score_block,
        summary_block,
        style_block,
        strengths_block,
        improve_block,
        advice_block,
    ])
