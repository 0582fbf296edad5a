import json
import os
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from dotenv import load_dotenv

# Settings are read when the package is first imported, so the environment
# must be complete before any test module imports chat_compatibility.
load_dotenv()
FAKE_API_KEY = "sk-test-not-a-real-key"
os.environ.setdefault("OPENAI_API_KEY", FAKE_API_KEY)
os.environ["MLFLOW_ENABLE_TRACING"] = "false"


def _truthy(v: str | None) -> bool:
    return v is not None and v.strip().lower() not in ("", "0", "false", "no")

@pytest.fixture(scope="session")
def allow_integration() -> bool:
    return _truthy(os.getenv("RUN_INTEGRATION_TESTS"))

@pytest.fixture(scope="session")
def openai_api_key() -> str | None:
    key = os.getenv("OPENAI_API_KEY")
    if not key or key in ("sk-...", FAKE_API_KEY):
        return None
    return key


@pytest.fixture
def valid_payload():
    return {
        "score": 87,
        "summary": "Replies are quick and warm on both sides.",
        "communicationStyle": ["A asks lots of questions.", "B answers with stories."],
        "strengths": ["Fast replies", "Shared humor", "Mutual curiosity"],
        "areasForImprovement": ["B rarely starts conversations", "Plans stay vague"],
        "advice": "Take turns starting the day's conversation.",
    }


@pytest.fixture
def make_completion():
    """
    Factory for objects shaped like an OpenAI ChatCompletion.
    Only the attributes our client reads are populated.
    """
    def _make(content, refusal=None, usage=None, choices=True):
        message = SimpleNamespace(content=content, refusal=refusal)
        return SimpleNamespace(
            choices=[SimpleNamespace(message=message)] if choices else [],
            usage=usage,
        )
    return _make


@pytest.fixture
def fake_openai(make_completion, valid_payload):
    """
    Stand-in for the OpenAI SDK client. Returns a valid report by default;
    tests override `chat.completions.create` to simulate other responses.
    """
    client = MagicMock()
    client.chat.completions.create.return_value = make_completion(
        json.dumps(valid_payload),
        usage=SimpleNamespace(prompt_tokens=120, completion_tokens=80),
    )
    return client


@pytest.fixture
def llm_client(fake_openai):
    from chat_compatibility.llm.client import LLMClient
    return LLMClient(client=fake_openai)
