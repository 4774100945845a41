"""
Bedrock client tests with a mocked boto3 client.

Run with: pytest tests/unit/test_ai_service.py -v
"""

import io
import json
from unittest.mock import MagicMock, patch

import pytest

from utils.settings import AppSettings


def _bedrock_reply(text):
    body = {"content": [{"type": "text", "text": text}]}
    return {"body": io.BytesIO(json.dumps(body).encode())}


@pytest.fixture
def bedrock():
    with patch("services.ai_service.boto3") as mock_boto3:
        client = MagicMock()
        mock_boto3.client.return_value = client
        yield client


@pytest.fixture
def service(bedrock):
    from services.ai_service import AIService

    return AIService(settings=AppSettings(model_id="test-model"))


class TestGenerateText:
    def test_returns_first_text_block(self, service, bedrock):
        bedrock.invoke_model.return_value = _bedrock_reply("hello")
        assert service.generate_text("hi") == "hello"

    def test_request_body(self, service, bedrock):
        bedrock.invoke_model.return_value = _bedrock_reply("ok")
        service.generate_text("prompt text", max_tokens=50, temperature=0.1)

        kwargs = bedrock.invoke_model.call_args.kwargs
        assert kwargs["modelId"] == "test-model"
        body = json.loads(kwargs["body"])
        assert body["anthropic_version"] == "bedrock-2023-05-31"
        assert body["max_tokens"] == 50
        assert body["temperature"] == 0.1
        assert body["messages"][0]["content"][0]["text"] == "prompt text"

    def test_client_errors_propagate(self, service, bedrock):
        bedrock.invoke_model.side_effect = RuntimeError("throttled")
        with pytest.raises(RuntimeError):
            service.generate_text("hi")


class TestGenerateObject:
    def test_parses_fenced_json(self, service, bedrock):
        bedrock.invoke_model.return_value = _bedrock_reply('```json\n{"a": 1}\n```')
        assert service.generate_object("p", {"type": "object"}) == {"a": 1}

    def test_schema_appended_to_prompt(self, service, bedrock):
        bedrock.invoke_model.return_value = _bedrock_reply("{}")
        service.generate_object("base prompt", {"type": "object", "title": "marker"})
        body = json.loads(bedrock.invoke_model.call_args.kwargs["body"])
        text = body["messages"][0]["content"][0]["text"]
        assert text.startswith("base prompt")
        assert '"title": "marker"' in text

    def test_array_reply_rejected(self, service, bedrock):
        bedrock.invoke_model.return_value = _bedrock_reply("[1, 2]")
        with pytest.raises(ValueError):
            service.generate_object("p", {})


class TestParsing:
    def test_parse_json_with_prose(self):
        from services.ai_service import parse_json

        assert parse_json('Sure! Here it is: {"x": [1, 2]} Hope that helps.') == {"x": [1, 2]}

    def test_parse_json_array_with_prose(self):
        from services.ai_service import parse_json

        assert parse_json('Insights:\n[{"title": "a"}]') == [{"title": "a"}]

    def test_parse_json_unparseable(self):
        from services.ai_service import parse_json

        with pytest.raises(ValueError, match="unparseable"):
            parse_json("no json here")

    def test_extract_text_converse_shape(self):
        from services.ai_service import _extract_text

        payload = {"output": {"message": {"content": [{"text": "converse"}]}}}
        assert _extract_text(payload) == "converse"

    def test_extract_text_missing(self):
        from services.ai_service import _extract_text

        with pytest.raises(ValueError):
            _extract_text({"content": []})
