"""Unit tests for shaping backend responses into tool outputs."""

import pytest

from ollama_mcp.backend.types import ChatResponse, ListResponse, Message, ShowResponse
from ollama_mcp.tools.normalizer import (
    ChatCollector,
    format_rfc3339,
    normalize_model_info,
    normalize_models,
    pull_success,
)


def chunk(content: str) -> ChatResponse:
    return ChatResponse(message=Message(role="assistant", content=content))


class TestChatCollector:
    def test_single_response(self):
        collector = ChatCollector()
        collector(chunk("complete answer"))

        assert collector.response == "complete answer"

    def test_last_non_empty_chunk_wins(self):
        collector = ChatCollector()
        for content in ["first", "", "second", ""]:
            collector(chunk(content))

        assert collector.response == "second"

    def test_no_content(self):
        collector = ChatCollector()
        collector(chunk(""))

        assert collector.response == ""


class TestFormatRFC3339:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("2024-05-01T12:34:56.123456789Z", "2024-05-01T12:34:56Z"),
            ("2024-05-01T12:34:56Z", "2024-05-01T12:34:56Z"),
            ("2024-05-01T12:34:56.5+00:00", "2024-05-01T12:34:56Z"),
            ("2024-05-01T12:34:56.987654321-07:00", "2024-05-01T12:34:56-07:00"),
            ("2024-05-01T12:34:56+05:30", "2024-05-01T12:34:56+05:30"),
            ("2024-05-01T12:34:56", "2024-05-01T12:34:56Z"),
        ],
    )
    def test_formats(self, value, expected):
        assert format_rfc3339(value) == expected

    @pytest.mark.parametrize("value", [None, ""])
    def test_missing(self, value):
        assert format_rfc3339(value) == ""

    def test_unparseable_kept(self):
        assert format_rfc3339("last tuesday") == "last tuesday"


class TestNormalizeModels:
    def test_one_to_one_in_order(self):
        response = ListResponse.model_validate(
            {
                "models": [
                    {"name": "b", "size": 2, "digest": "d2", "modified_at": "2025-01-02T00:00:00Z"},
                    {"name": "a", "size": 1, "digest": "d1", "modified_at": "2025-01-01T00:00:00.1Z"},
                    {"name": "c", "size": 3, "digest": "d3"},
                ]
            }
        )
        models = normalize_models(response)

        assert [m.name for m in models] == ["b", "a", "c"]
        assert models[0].size == 2
        assert models[1].digest == "d1"
        assert models[1].modified_at == "2025-01-01T00:00:00Z"
        assert models[2].modified_at == ""

    def test_empty(self):
        assert normalize_models(ListResponse()) == []


class TestProjections:
    def test_model_info(self):
        response = ShowResponse(
            license="MIT",
            modelfile="FROM llama3.2",
            parameters="stop <|eot_id|>",
            template="{{ .Prompt }}",
            system="Be kind.",
            modified_at="2025-02-01T08:00:00.123Z",
        )
        output = normalize_model_info("llama3.2", response)

        assert output.model_dump() == {
            "name": "llama3.2",
            "license": "MIT",
            "modelfile": "FROM llama3.2",
            "parameters": "stop <|eot_id|>",
            "template": "{{ .Prompt }}",
            "system": "Be kind.",
            "modified_at": "2025-02-01T08:00:00Z",
        }

    def test_pull_success(self):
        output = pull_success("llama3.2")

        assert output.status == "success"
        assert output.message == "Successfully pulled model llama3.2"
