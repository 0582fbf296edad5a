"""Chat Compatibility Analyzer - scores how well two people communicate.

Takes chat-export text files or chat screenshots, sends them to an LLM with a
strict output schema, and returns a structured compatibility report.

Components:
- intake: file acceptance and content-part assembly
- llm: OpenAI client wrapper, prompt loading, result schema
- pipeline: one analysis run with in-flight guarding
- main_api: HTTP upload endpoint
- rendering: Markdown report output
- mlops: MLflow tracing
"""
