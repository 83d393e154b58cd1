import json
from types import SimpleNamespace

import openai
import pytest

from services.ai_service import AIProviderError, AIServiceError, JournalAnalyzer, normalize_analysis
from services.journal_service import DEFAULT_SUGGESTION, analyze_text

class FakeCompletions:
    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=response))],
            usage=SimpleNamespace(total_tokens=42),
        )

def make_client(*responses):
    completions = FakeCompletions(responses)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions)), completions

async def test_disabled_analyzer_uses_heuristics():
    analyzer = JournalAnalyzer()
    assert not analyzer.enabled

    text = "I feel sad and stressed about work"
    assert await analyzer.analyze(text) == analyze_text(text)
    assert analyzer.stats.fallback_responses == 1

async def test_openai_result_is_normalized():
    client, completions = make_client(json.dumps({
        "sentiment": "POSITIVE",
        "patterns": ["Mornings are calmer", ""],
        "intensity": 15,
        "suggestions": [],
    }))
    analyzer = JournalAnalyzer(client=client, model="test-model")

    result = await analyzer.analyze("Lovely morning run")

    assert result == {
        "sentiment": "positive",
        "patterns": ["Mornings are calmer"],
        "intensity": 10,
        "suggestions": [DEFAULT_SUGGESTION],
    }
    assert completions.calls[0]["model"] == "test-model"
    assert completions.calls[0]["response_format"] == {"type": "json_object"}
    assert analyzer.stats.successful_requests == 1
    assert analyzer.stats.total_tokens_used == 42

async def test_invalid_json_falls_back():
    client, _ = make_client("not json at all")
    analyzer = JournalAnalyzer(client=client)

    result = await analyzer.analyze("Nothing special today.")
    assert result["sentiment"] == "neutral"
    assert analyzer.stats.failed_requests == 1
    assert analyzer.stats.fallback_responses == 1

async def test_api_error_falls_back():
    client, _ = make_client(openai.OpenAIError("quota exceeded"))
    analyzer = JournalAnalyzer(client=client)

    result = await analyzer.analyze("A great day")
    assert result["sentiment"] == "positive"
    assert analyzer.stats.failed_requests == 1

async def test_fallback_can_be_disabled():
    client, _ = make_client(openai.OpenAIError("quota exceeded"))
    analyzer = JournalAnalyzer(client=client, fallback_enabled=False)

    with pytest.raises(AIServiceError):
        await analyzer.analyze("A great day")
    assert analyzer.stats.failed_requests == 1
    assert analyzer.stats.fallback_responses == 0

def test_from_config_reads_fallback_flag(monkeypatch):
    from config import AppConfig
    monkeypatch.setenv("AI_FALLBACK_ENABLED", "false")
    assert JournalAnalyzer.from_config(AppConfig()).fallback_enabled is False

def test_normalize_rejects_non_object():
    with pytest.raises(AIProviderError):
        normalize_analysis(["positive"])

def test_normalize_defaults():
    result = normalize_analysis({"sentiment": "ecstatic", "intensity": "n/a"})
    assert result["sentiment"] == "neutral"
    assert result["intensity"] == 3

def test_stats_to_dict():
    analyzer = JournalAnalyzer()
    assert analyzer.stats.to_dict()["success_rate"] == 0.0
