import json
from unittest.mock import patch

import httpx
import openai
import pytest

from chat_compatibility.intake.assemble import build_request
from chat_compatibility.intake.files import UploadedFile
from chat_compatibility.llm.analyze import parse_result, run_analysis, run_analysis_with_meta
from chat_compatibility.llm.client import LLMClient, to_message_content
from chat_compatibility.llm.schema import AnalysisResult, response_schema
from chat_compatibility.schemas.content import InlineBinaryPart, TextPart
from chat_compatibility.errors import EmptyResponseError, MalformedResponseError, TransportError

_REQUEST = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")


@pytest.fixture
def chat_request():
    return build_request([
        UploadedFile.from_bytes("chat.txt", b"A: hi\nB: hey", mime_type="text/plain"),
        UploadedFile.from_bytes("shot.png", b"\x89PNG", mime_type="image/png"),
    ])


class TestParseResult:
    def test_well_formed_payload_maps_exactly(self, valid_payload):
        result = parse_result(json.dumps(valid_payload))

        assert result.score == 87
        assert result.summary == valid_payload["summary"]
        assert result.communication_style == valid_payload["communicationStyle"]
        assert result.strengths == valid_payload["strengths"]
        assert result.areas_for_improvement == valid_payload["areasForImprovement"]
        assert result.advice == valid_payload["advice"]
        assert result.to_payload() == valid_payload

    def test_minimal_example(self):
        text = '{"score":87,"summary":"...","communicationStyle":["A","B"],"strengths":["x"],"areasForImprovement":["y"],"advice":"z"}'
        result = parse_result(text)
        assert result == AnalysisResult(
            score=87, summary="...", communication_style=["A", "B"],
            strengths=["x"], areas_for_improvement=["y"], advice="z",
        )

    @pytest.mark.parametrize("text", ["", None])
    def test_no_text_is_empty_response(self, text):
        with pytest.raises(EmptyResponseError):
            parse_result(text)

    def test_not_json_is_malformed(self):
        with pytest.raises(MalformedResponseError) as exc_info:
            parse_result("not json")
        assert "not valid JSON" in str(exc_info.value)

    @pytest.mark.parametrize("mutate", [
        lambda d: d.pop("advice"),
        lambda d: d.update(score="87"),
        lambda d: d.update(score=True),
        lambda d: d.update(strengths=[1, 2]),
        lambda d: d.update(summary=["not", "a", "string"]),
        lambda d: d.update(confidence=0.9),
    ], ids=["missing-field", "score-as-string", "score-as-bool", "non-string-items", "summary-as-list", "extra-field"])
    def test_shape_mismatch_is_malformed(self, valid_payload, mutate):
        mutate(valid_payload)
        with pytest.raises(MalformedResponseError):
            parse_result(json.dumps(valid_payload))

    def test_top_level_array_is_malformed(self):
        with pytest.raises(MalformedResponseError):
            parse_result("[]")

    @pytest.mark.parametrize("score", [-1, 101, 150])
    def test_score_out_of_range(self, valid_payload, score):
        valid_payload["score"] = score
        text = json.dumps(valid_payload)

        with pytest.raises(MalformedResponseError):
            parse_result(text, strict=True)
        assert parse_result(text, strict=False).score == score

    @pytest.mark.parametrize("styles", [["only one"], ["a", "b", "c"], []])
    def test_wrong_participant_count(self, valid_payload, styles):
        valid_payload["communicationStyle"] = styles
        text = json.dumps(valid_payload)

        with pytest.raises(MalformedResponseError):
            parse_result(text, strict=True)
        assert parse_result(text, strict=False).communication_style == styles

    @pytest.mark.parametrize("score", [0, 100])
    def test_score_bounds_are_inclusive(self, valid_payload, score):
        valid_payload["score"] = score
        assert parse_result(json.dumps(valid_payload), strict=True).score == score


class TestLLMClient:
    def test_message_content_mapping(self):
        assert to_message_content(TextPart(text="hi")) == {"type": "text", "text": "hi"}
        assert to_message_content(InlineBinaryPart(mime_type="image/png", base64_data="QUJD")) == {
            "type": "image_url",
            "image_url": {"url": "data:image/png;base64,QUJD"},
        }

    def test_single_call_with_strict_schema(self, llm_client, fake_openai, chat_request):
        response = llm_client.run_json(list(chat_request.parts), chat_request.output_schema, model="gpt-4o-mini")

        fake_openai.chat.completions.create.assert_called_once()
        kwargs = fake_openai.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o-mini"

        messages = kwargs["messages"]
        assert len(messages) == 1 and messages[0]["role"] == "user"
        content = messages[0]["content"]
        assert [c["type"] for c in content] == ["text", "image_url", "text"]
        assert "--- Chat History File: chat.txt ---" in content[0]["text"]

        fmt = kwargs["response_format"]
        assert fmt["type"] == "json_schema"
        assert fmt["json_schema"]["strict"] is True
        assert fmt["json_schema"]["schema"] == response_schema()

        assert json.loads(response.text)["score"] == 87
        assert response.meta.prompt_tokens == 120
        assert response.meta.completion_tokens == 80

    @pytest.mark.parametrize("error", [
        openai.APIConnectionError(request=_REQUEST),
        openai.APITimeoutError(request=_REQUEST),
        openai.InternalServerError("boom", response=httpx.Response(500, request=_REQUEST), body=None),
    ], ids=["connection", "timeout", "server-error"])
    def test_sdk_errors_become_transport_errors(self, llm_client, fake_openai, chat_request, error):
        fake_openai.chat.completions.create.side_effect = error

        with pytest.raises(TransportError):
            llm_client.run_json(list(chat_request.parts), chat_request.output_schema)
        assert fake_openai.chat.completions.create.call_count == 1

    def test_refusal_yields_no_text(self, llm_client, fake_openai, make_completion, chat_request):
        fake_openai.chat.completions.create.return_value = make_completion(None, refusal="I can't help with that.")

        response = llm_client.run_json(list(chat_request.parts), chat_request.output_schema)

        assert response.text is None
        assert response.meta.refusal == "I can't help with that."

    def test_no_choices_yields_no_text(self, llm_client, fake_openai, make_completion, chat_request):
        fake_openai.chat.completions.create.return_value = make_completion(None, choices=False)
        assert llm_client.run_json(list(chat_request.parts), chat_request.output_schema).text is None

    def test_sdk_client_is_built_without_retries(self):
        with patch("chat_compatibility.llm.client.OpenAI") as mock_openai:
            LLMClient(api_key="sk-injected", timeout=30.0)

        mock_openai.assert_called_once_with(api_key="sk-injected", timeout=30.0, max_retries=0)


class TestRunAnalysis:
    def test_returns_validated_result(self, llm_client, chat_request, valid_payload):
        result = run_analysis(chat_request, client=llm_client, strict=True)
        assert result.to_payload() == valid_payload

    def test_zero_files_still_calls_the_model(self, llm_client, fake_openai):
        request = build_request([])
        assert len(request.parts) == 1

        run_analysis(request, client=llm_client)

        fake_openai.chat.completions.create.assert_called_once()
        content = fake_openai.chat.completions.create.call_args.kwargs["messages"][0]["content"]
        assert len(content) == 1

    def test_empty_response(self, llm_client, fake_openai, make_completion, chat_request):
        fake_openai.chat.completions.create.return_value = make_completion("")
        with pytest.raises(EmptyResponseError):
            run_analysis(chat_request, client=llm_client)

    def test_refusal_is_empty_response(self, llm_client, fake_openai, make_completion, chat_request):
        fake_openai.chat.completions.create.return_value = make_completion(None, refusal="no")
        with pytest.raises(EmptyResponseError):
            run_analysis(chat_request, client=llm_client)

    def test_malformed_response(self, llm_client, fake_openai, make_completion, chat_request):
        fake_openai.chat.completions.create.return_value = make_completion("not json")
        with pytest.raises(MalformedResponseError):
            run_analysis(chat_request, client=llm_client)

    def test_meta_reports_model_and_usage(self, llm_client, chat_request):
        _, meta = run_analysis_with_meta(chat_request, client=llm_client, model="gpt-4o")
        assert meta.model == "gpt-4o"
        assert meta.prompt_tokens == 120

    def test_strict_default_comes_from_settings(self, llm_client, fake_openai, make_completion, chat_request, valid_payload):
        from chat_compatibility.config import get_settings
        settings = get_settings()

        valid_payload["score"] = 140
        fake_openai.chat.completions.create.return_value = make_completion(json.dumps(valid_payload))

        original = settings.STRICT_RESULT_VALIDATION
        try:
            settings.STRICT_RESULT_VALIDATION = False
            assert run_analysis(chat_request, client=llm_client).score == 140

            settings.STRICT_RESULT_VALIDATION = True
            with pytest.raises(MalformedResponseError):
                run_analysis(chat_request, client=llm_client)
        finally:
            settings.STRICT_RESULT_VALIDATION = original
