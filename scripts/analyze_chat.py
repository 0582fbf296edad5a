#!/usr/bin/env python3
"""
Analyze local chat exports and screenshots and print the compatibility report.

Usage:
  python scripts/analyze_chat.py chat.txt screenshot1.png screenshot2.png
  python scripts/analyze_chat.py --json chat.txt

Requires: OPENAI_API_KEY in environment or .env (same as the API server).
"""
from __future__ import annotations
import argparse
import json
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from dotenv import load_dotenv
from rich.console import Console
from rich.markdown import Markdown

from chat_compatibility.intake.files import UploadedFile, is_accepted
from chat_compatibility.pipeline.run import pipeline
from chat_compatibility.rendering.report_format import render_result_to_markdown
from chat_compatibility.errors import AnalysisError, USER_RETRY_MESSAGE
from chat_compatibility.log import setup_logging

console = Console()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Score chat compatibility from exports or screenshots")
    parser.add_argument("paths", nargs="+", help="Chat export .txt files and/or screenshot images")
    parser.add_argument("--json", action="store_true", help="Print the raw JSON report instead of Markdown")
    args = parser.parse_args(argv)

    load_dotenv()
    setup_logging()

    files = [UploadedFile.from_path(p) for p in args.paths]
    for f in files:
        if not is_accepted(f):
            console.print(f"[yellow]Skipping unsupported file:[/yellow] {f.name} ({f.mime_type})")

    try:
        result = pipeline.analyze_files([f for f in files if is_accepted(f)])
    except AnalysisError:
        console.print(f"[red]{USER_RETRY_MESSAGE}[/red]")
        return 1

    if args.json:
        print(json.dumps(result.to_payload(), ensure_ascii=False, indent=2))
    else:
        # Markdown lists need "-" markers to keep one item per line
        md = render_result_to_markdown(result).replace("• ", "- ")
        console.print(Markdown(md))
    return 0


if __name__ == "__main__":
    sys.exit(main())
