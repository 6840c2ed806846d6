import pytest
from unbind.llm.gemini import GeminiClient, to_gemini_request
from unbind.utils.config import AppConfig


def test_request_mapping():
    system, contents = to_gemini_request(
        [
            {"role": "system", "content": "Be precise."},
            {"role": "user", "content": "Hi"},
            {"role": "assistant", "content": "Hello"},
        ]
    )
    assert system == "Be precise."
    assert contents == [
        {"role": "user", "parts": ["Hi"]},
        {"role": "model", "parts": ["Hello"]},
    ]


def test_no_system_message():
    system, contents = to_gemini_request([{"role": "user", "content": "Hi"}])
    assert system is None
    assert len(contents) == 1


def test_missing_api_key(monkeypatch):
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    with pytest.raises(ValueError, match="GOOGLE_API_KEY"):
        GeminiClient(AppConfig())
