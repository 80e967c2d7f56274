from __future__ import annotations

import json
from types import SimpleNamespace

import pytest

from lingualeap.ai.base import LLMClient, LLMFlowError
from lingualeap.ai.factory import get_llm_client
from lingualeap.ai.flows import (
    analyze_progress,
    chat_with_ai,
    conversation_prompt,
    explain_grammar,
    generate_sentences,
    progress_prompt,
    sentence_prompt,
)
from lingualeap.ai.gemini import GeminiClient
from lingualeap.ai.schemas import (
    ConversationInput,
    ConversationOutput,
    ConversationTurn,
    ExplainGrammarInput,
    ExplainGrammarOutput,
    GenerateSentenceInput,
    ProgressAnalysisInput,
)


class _FakeClient(LLMClient):
    def __init__(self, payload: dict | None = None, error: str | None = None) -> None:
        self.payload = payload
        self.error = error
        self.prompts: list[str] = []

    @property
    def name(self) -> str:
        return "fake"

    def generate(self, prompt, output_model, *, model=None):
        self.prompts.append(prompt)
        if self.error is not None:
            raise LLMFlowError(self.error)
        return output_model.model_validate(self.payload)


def _sentence(i: int) -> dict:
    return {"french": f"fr {i}", "english": f"en {i}", "explanation": "note", "difficulty": "beginner"}


def test_explain_grammar_returns_explanation() -> None:
    client = _FakeClient({"explanation": "Present tense of aller."})
    out = explain_grammar(client, ExplainGrammarInput(sentence="Je vais au marché."))
    assert out.explanation == "Present tense of aller."
    assert "Je vais au marché." in client.prompts[0]


def test_generate_sentences_truncates_to_count() -> None:
    client = _FakeClient({"sentences": [_sentence(i) for i in range(5)]})
    out = generate_sentences(client, GenerateSentenceInput(verb="aller", count=2))
    assert [s.french for s in out.sentences] == ["fr 0", "fr 1"]


def test_sentence_prompt_mentions_verb_and_tense() -> None:
    prompt = sentence_prompt(GenerateSentenceInput(verb="finir", difficulty="advanced", tense="futur"))
    assert '"finir"' in prompt
    assert "futur" in prompt
    assert "complex grammar" in prompt


def test_generate_sentence_input_bounds_count() -> None:
    with pytest.raises(ValueError):
        GenerateSentenceInput(verb="aller", count=6)


def test_chat_with_ai_includes_history() -> None:
    payload = {
        "response": "Très bien ! Et toi ?",
        "english_translation": "Very good! And you?",
        "corrections": [{"original": "je suis bien", "corrected": "je vais bien", "explanation": "aller"}],
        "vocabulary": [{"french": "bien", "english": "well", "usage": "ça va bien"}],
        "encouragement": "Continue !",
    }
    client = _FakeClient(payload)
    inp = ConversationInput(
        user_message="je suis bien",
        conversation_history=[ConversationTurn(speaker="ai", message="Ça va ?", language="french")],
        topic="greetings",
    )
    out = chat_with_ai(client, inp)
    assert isinstance(out, ConversationOutput)
    assert out.corrections[0].corrected == "je vais bien"
    assert "ai: Ça va ? (french)" in client.prompts[0]
    assert "greetings" in conversation_prompt(inp)


def test_analyze_progress_prompt_has_accuracy() -> None:
    inp = ProgressAnalysisInput(
        correct_answers=7,
        total_attempts=10,
        struggling_verbs=["faire"],
        study_time_minutes=12,
    )
    assert inp.accuracy_percent == 70
    assert "70%" in progress_prompt(inp)
    payload = {
        "overall_score": 72,
        "strengths": ["être"],
        "weaknesses": ["faire"],
        "recommendations": [
            {"type": "study_focus", "title": "Drill faire", "description": "Daily.", "priority": "high"}
        ],
        "next_session_focus": "faire",
        "motivational_message": "Bravo !",
    }
    out = analyze_progress(_FakeClient(payload), inp)
    assert out.recommendations[0].priority == "high"


def test_accuracy_with_no_attempts_is_zero() -> None:
    inp = ProgressAnalysisInput(correct_answers=0, total_attempts=0, study_time_minutes=0)
    assert inp.accuracy_percent == 0


def test_flow_error_propagates() -> None:
    with pytest.raises(LLMFlowError):
        explain_grammar(_FakeClient(error="quota"), ExplainGrammarInput(sentence="Bonjour."))


class _FakeModels:
    def __init__(self, text: str | None) -> None:
        self.text = text
        self.calls: list[dict] = []

    def generate_content(self, **kwargs):
        self.calls.append(kwargs)
        return SimpleNamespace(text=self.text)


def test_gemini_client_parses_structured_reply() -> None:
    models = _FakeModels(json.dumps({"explanation": "ok"}))
    client = GeminiClient(model="gemini-test", client=SimpleNamespace(models=models))
    out = client.generate("prompt", ExplainGrammarOutput)
    assert out.explanation == "ok"
    call = models.calls[0]
    assert call["model"] == "gemini-test"
    assert call["contents"] == "prompt"
    assert call["config"].response_mime_type == "application/json"


@pytest.mark.parametrize("text", [None, "", '{"wrong": 1}', "not json"])
def test_gemini_client_rejects_bad_replies(text) -> None:
    client = GeminiClient(client=SimpleNamespace(models=_FakeModels(text)))
    with pytest.raises(LLMFlowError):
        client.generate("prompt", ExplainGrammarOutput)


def test_factory_selects_gemini_and_rejects_unknown(monkeypatch) -> None:
    monkeypatch.delenv("LINGUALEAP_LLM_PROVIDER", raising=False)
    client = get_llm_client(model="gemini-x")
    assert isinstance(client, GeminiClient)
    assert client.model == "gemini-x"
    with pytest.raises(ValueError):
        get_llm_client("nope")
